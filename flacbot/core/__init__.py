"""
Core workflow engine.

The `WorkflowCoordinator` acts as the per-chat session coordinator: it runs
searches, resolves selections against the stored session, and delegates the
production of file contents to an ordered list of download strategies.
"""

from .coordinator import SearchOutcome, WorkflowCoordinator, WorkflowState
from .strategies import DownloadStrategy, PlaceholderStrategy, RemoteDownloadStrategy

__all__ = [
    "DownloadStrategy",
    "PlaceholderStrategy",
    "RemoteDownloadStrategy",
    "SearchOutcome",
    "WorkflowCoordinator",
    "WorkflowState",
]
