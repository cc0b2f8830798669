"""
Clerkship Dashboard Pipeline Package

Wires the source adapters to the reconciliation core and exposes the
named request actions used by the dashboard page.
"""

from .orchestrator import (
    DashboardPipeline,
    PipelineResult,
    run_dashboard,
)
from .actions import (
    ActionRegistry,
    action_registry,
    handle_action,
)

__all__ = [
    'DashboardPipeline',
    'PipelineResult',
    'run_dashboard',
    'ActionRegistry',
    'action_registry',
    'handle_action',
]
