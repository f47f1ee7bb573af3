"""
Sync Module - Orchestration of workflows between git and the patch tracker.
"""

from .orchestrator import NOT_RECORDED_MESSAGE, SyncOrchestrator, WorkflowResult

__all__ = [
    "SyncOrchestrator",
    "WorkflowResult",
    "NOT_RECORDED_MESSAGE",
]
