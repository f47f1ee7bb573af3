"""
Application Layer - Use cases and orchestration.

This layer contains:
- sync/: Workflow orchestrator (record, upload, download, act, status, ...)
"""

from .sync import SyncOrchestrator, WorkflowResult

__all__ = [
    "SyncOrchestrator",
    "WorkflowResult",
]
