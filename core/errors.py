"""
DashboardError hierarchy for the clerkship dashboard.

Provides typed exceptions so the request boundary can distinguish the few
hard failures from the many conditions that degrade to placeholders, and so
logging can categorize failures without parsing message strings.

Hierarchy:
    DashboardError                      (base of all dashboard errors)
    ├── ConfigurationError              (bad config file, invalid values)
    ├── SourceError                     (any source adapter failure)
    │   ├── SourceUnavailableError      (source could not be read at all)
    │   └── MalformedSourceError        (payload shape not understood)
    └── RequestError                    (request boundary failures)
        └── UnknownActionError          (action name not registered)
"""

from typing import Optional


class DashboardError(Exception):
    """Base exception for all clerkship dashboard errors."""

    def __init__(self, message: str, *, stage: Optional[str] = None,
                 source: Optional[str] = None, cause: Optional[Exception] = None):
        self.stage = stage
        self.source = source
        self.cause = cause
        super().__init__(message)
        if cause and not self.__cause__:
            self.__cause__ = cause

    def to_dict(self) -> dict:
        """Structured representation for logging."""
        d = {
            "error_type": type(self).__name__,
            "message": str(self),
        }
        if self.stage:
            d["stage"] = self.stage
        if self.source:
            d["source"] = self.source
        if self.cause:
            d["cause"] = f"{type(self.cause).__name__}: {self.cause}"
        return d


# ── Configuration ────────────────────────────────────────────────────

class ConfigurationError(DashboardError):
    """Invalid config file or config value."""
    pass


# ── Sources ──────────────────────────────────────────────────────────

class SourceError(DashboardError):
    """Base for all source adapter errors."""
    pass


class SourceUnavailableError(SourceError):
    """Source could not be read. Fatal only for the schedule source."""

    def __init__(self, message: str = "Source unavailable", **kwargs):
        super().__init__(message, **kwargs)


class MalformedSourceError(SourceError):
    """Source payload is not a mapping of record id to nested records."""

    def __init__(self, message: str = "Malformed source payload", **kwargs):
        super().__init__(message, **kwargs)


# ── Request boundary ─────────────────────────────────────────────────

class RequestError(DashboardError):
    """Base for request boundary errors."""
    pass


class UnknownActionError(RequestError):
    """Action is not defined. Rejected explicitly, never retried."""

    def __init__(self, action: str, **kwargs):
        self.action = action
        super().__init__(f"Action {action} is not defined", **kwargs)

    def to_dict(self) -> dict:
        d = super().to_dict()
        d["action"] = self.action
        return d
