"""
Snapshot Source Adapter

Reads exported source payloads from a directory, one file per source. The
file stem is the source's project identifier from the request config
(falling back to the source name); JSON and YAML are both accepted.

    snapshots/
        schedule.json
        sites.yaml
        roster.json
        ...
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional

import yaml

from core.config import DashboardConfig
from core.errors import MalformedSourceError, SourceUnavailableError
from .base import SourceAdapter

logger = logging.getLogger(__name__)

SNAPSHOT_SUFFIXES = (".json", ".yaml", ".yml")


class SnapshotAdapter(SourceAdapter):
    """Adapter reading one exported file per source."""

    def __init__(self, directory: str, config: Optional[DashboardConfig] = None):
        self.directory = Path(directory)
        self.config = config or DashboardConfig()

    def path_for(self, source: str) -> Optional[Path]:
        """First existing snapshot file for a source, or None."""
        stem = self.config.project_for(source)
        for suffix in SNAPSHOT_SUFFIXES:
            path = self.directory / f"{stem}{suffix}"
            if path.exists():
                return path
        return None

    def _load(self, source: str) -> Any:
        path = self.path_for(source)
        if path is None:
            raise SourceUnavailableError(
                f"No snapshot for '{source}' in {self.directory}", source=source
            )

        try:
            with open(path, 'r', encoding='utf-8') as f:
                content = f.read()
        except OSError as e:
            raise SourceUnavailableError(f"Could not read {path}", source=source, cause=e)

        try:
            if path.suffix == ".json":
                data = json.loads(content)
            else:
                data = yaml.safe_load(content)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise MalformedSourceError(f"Could not parse {path}", source=source, cause=e)

        logger.info(f"Loaded {source} snapshot from {path}")
        return data
