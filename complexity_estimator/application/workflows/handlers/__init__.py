"""
Workflow node handlers package.
Contains specialized handler classes for workflow nodes.
"""

from complexity_estimator.application.workflows.handlers.stage_node_handler import (
    EventCallback,
    StageNodeHandler,
)

__all__ = [
    "EventCallback",
    "StageNodeHandler",
]
