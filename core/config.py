"""
Request-scoped configuration for the dashboard pipeline.

A DashboardConfig is built once per request and passed explicitly to every
stage; nothing in the core reads global state. Supports YAML/JSON config
files and CLERKSHIP_* environment variable overrides.
"""

import json
import logging
import os
from dataclasses import dataclass, field, asdict, fields, replace
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

# Default config file locations
CONFIG_LOCATIONS = [
    "dashboard_config.yaml",
    "dashboard_config.yml",
    "dashboard_config.json",
    "config/dashboard_config.yaml",
]

ENV_PREFIX = "CLERKSHIP_"


@dataclass
class DashboardConfig:
    """Configuration for one dashboard request."""

    # Academic year used to filter student keys ("2025_Doe, Jane")
    year: int = 2025

    # Single-student filter (a full student key); None shows every student
    student_id: Optional[str] = None

    # Calendar settings
    rotation_offset_days: int = 23
    final_slot_offset_reduction: int = 7

    # Classification thresholds
    rotation_end_days: int = 17
    retake_threshold: int = 380
    satisfactory_score: float = 3.0
    case_module_exempt_specialties: List[str] = field(default_factory=lambda: ["ELEC"])

    # Base URL of the public schedule page; deep links append ?student_id=
    public_schedule_url: str = ""

    # Source name -> project identifier (snapshot file stem)
    source_projects: Dict[str, str] = field(default_factory=dict)

    # ISO date override for "today" (reproducible runs)
    today: Optional[str] = None

    def __post_init__(self):
        try:
            self.year = int(self.year)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid year: {self.year!r}", cause=e)
        if not 1000 <= self.year <= 9999:
            raise ConfigurationError(f"Year must have four digits, got {self.year}")
        if self.rotation_offset_days <= self.final_slot_offset_reduction:
            raise ConfigurationError(
                "rotation_offset_days must exceed final_slot_offset_reduction "
                f"({self.rotation_offset_days} <= {self.final_slot_offset_reduction})"
            )
        if self.today is not None:
            try:
                datetime.strptime(str(self.today), "%Y-%m-%d")
            except ValueError as e:
                raise ConfigurationError(f"today must be YYYY-MM-DD, got {self.today!r}", cause=e)

    @property
    def year_prefix(self) -> str:
        """Prefix shared by every student key of this year ("2025_")."""
        return f"{self.year}_"

    @property
    def is_single_student_view(self) -> bool:
        return bool(self.student_id)

    def resolve_today(self) -> date:
        """Return the configured 'today', or the real current date."""
        if self.today:
            return datetime.strptime(str(self.today), "%Y-%m-%d").date()
        return date.today()

    def project_for(self, source: str) -> str:
        """Project identifier for a source; defaults to the source name."""
        return self.source_projects.get(source, source)

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DashboardConfig":
        """Create config from dictionary, ignoring unknown keys."""
        valid_fields = {f.name for f in fields(cls)}
        unknown = set(data) - valid_fields
        if unknown:
            logger.warning(f"Ignoring unknown config keys: {sorted(unknown)}")
        filtered = {k: v for k, v in data.items() if k in valid_fields}
        return cls(**filtered)

    def with_overrides(self, **overrides: Any) -> "DashboardConfig":
        """Return a copy with non-None overrides applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def load_config(
    config_path: Optional[str] = None,
    search_cwd: bool = True,
    env: Optional[Dict[str, str]] = None,
) -> DashboardConfig:
    """
    Load configuration from file, then apply environment overrides.

    Args:
        config_path: Explicit path to config file
        search_cwd: Whether to search current directory for config files
        env: Environment mapping (defaults to os.environ)

    Returns:
        DashboardConfig with loaded settings
    """
    config = DashboardConfig()

    if config_path:
        path = Path(config_path)
        if not path.exists():
            raise ConfigurationError(f"Config file not found: {path}")
        config = _load_config_file(path)
        logger.info(f"Loaded config from {path}")
    elif search_cwd:
        for filename in CONFIG_LOCATIONS:
            path = Path(filename)
            if path.exists():
                config = _load_config_file(path)
                logger.info(f"Loaded config from {path}")
                break

    return _load_from_env(config, os.environ if env is None else env)


def _load_config_file(path: Path) -> DashboardConfig:
    """Load config from YAML or JSON file."""
    with open(path, 'r', encoding='utf-8') as f:
        content = f.read()

    try:
        if path.suffix in ('.yaml', '.yml'):
            data = yaml.safe_load(content) or {}
        else:
            data = json.loads(content)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Could not parse config file {path}", cause=e)

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")

    return DashboardConfig.from_dict(data)


def _load_from_env(config: DashboardConfig, env: Dict[str, str]) -> DashboardConfig:
    """Override config with CLERKSHIP_* environment variables."""
    env_mappings = {
        "YEAR": "year",
        "STUDENT_ID": "student_id",
        "ROTATION_OFFSET_DAYS": "rotation_offset_days",
        "ROTATION_END_DAYS": "rotation_end_days",
        "RETAKE_THRESHOLD": "retake_threshold",
        "SATISFACTORY_SCORE": "satisfactory_score",
        "PUBLIC_SCHEDULE_URL": "public_schedule_url",
        "TODAY": "today",
    }

    overrides: Dict[str, Any] = {}
    for suffix, field_name in env_mappings.items():
        value = env.get(ENV_PREFIX + suffix)
        if value is None or value == "":
            continue
        field_type = type(getattr(config, field_name))
        try:
            if field_type == int:
                overrides[field_name] = int(value)
            elif field_type == float:
                overrides[field_name] = float(value)
            else:
                overrides[field_name] = value
        except ValueError as e:
            raise ConfigurationError(f"Invalid value for {ENV_PREFIX + suffix}: {value!r}", cause=e)

    exempt = env.get(ENV_PREFIX + "CASE_MODULE_EXEMPT_SPECIALTIES")
    if exempt:
        overrides["case_module_exempt_specialties"] = [s.strip() for s in exempt.split(",") if s.strip()]

    if overrides:
        logger.debug(f"Environment overrides: {sorted(overrides)}")
        return replace(config, **overrides)
    return config
