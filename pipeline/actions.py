"""
Request boundary: named actions.

The dashboard page calls the backend by action name. Each action is
registered here; an unknown name is rejected with UnknownActionError and
never retried.
"""

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional

from core.config import DashboardConfig
from core.errors import UnknownActionError
from core.period_calendar import extract_start_dates, generate_period_dates
from sources.base import SourceAdapter
from .orchestrator import DashboardPipeline

logger = logging.getLogger(__name__)

ActionHandler = Callable[[Mapping[str, Any], DashboardConfig, SourceAdapter], Any]


class ActionRegistry:
    """
    Registry for request actions.

    Handlers take (payload, config, adapter) and return a JSON-serializable
    result.
    """

    def __init__(self):
        self._actions: Dict[str, ActionHandler] = {}

    def register(self, name: str) -> Callable[[ActionHandler], ActionHandler]:
        """Decorator registering a handler under an action name."""
        def decorator(handler: ActionHandler) -> ActionHandler:
            if name in self._actions:
                logger.warning(f"Action '{name}' already registered, replacing")
            self._actions[name] = handler
            return handler
        return decorator

    def get(self, name: str) -> Optional[ActionHandler]:
        return self._actions.get(name)

    def get_names(self) -> List[str]:
        return list(self._actions)

    def __contains__(self, name: str) -> bool:
        return name in self._actions

    def dispatch(
        self,
        action: str,
        payload: Optional[Mapping[str, Any]],
        config: DashboardConfig,
        adapter: SourceAdapter,
    ) -> Any:
        handler = self.get(action)
        if handler is None:
            logger.error(f"Rejected unknown action '{action}'")
            raise UnknownActionError(action, stage="request")
        logger.debug(f"Dispatching action '{action}'")
        return handler(payload or {}, config, adapter)


# Global registry instance
action_registry = ActionRegistry()


def _privileged(payload: Mapping[str, Any]) -> bool:
    return bool(payload.get("privileged", True))


@action_registry.register("TestAction")
def handle_test_action(payload, config, adapter):
    return "Test Action Ajax"


@action_registry.register("getStudentData")
def get_student_data(payload, config, adapter):
    result = DashboardPipeline(config, adapter).run(viewer_is_privileged=_privileged(payload))
    return result.students_to_dict()


@action_registry.register("getPeriodDates")
def get_period_dates(payload, config, adapter):
    students = DashboardPipeline(config, adapter).merge()
    return generate_period_dates(
        extract_start_dates(students),
        offset_days=config.rotation_offset_days,
        final_slot_reduction=config.final_slot_offset_reduction,
    )


def handle_action(
    action: str,
    payload: Optional[Mapping[str, Any]] = None,
    *,
    config: DashboardConfig,
    adapter: SourceAdapter,
) -> Any:
    """
    Dispatch a named request action.

    Raises:
        UnknownActionError: action is not registered
        SourceUnavailableError: the schedule source could not be read
    """
    return action_registry.dispatch(action, payload, config, adapter)
