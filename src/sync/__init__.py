"""Reconciliation of the local hierarchy with the remote service."""

from .models import (
    CategoryChange,
    DocChange,
    LocalCategory,
    LocalDoc,
    LocalState,
    RemoteCategory,
    RemoteDoc,
    RemoteState,
    SyncPlan,
    SyncSummary,
)
from .remote_state import RemoteStateFetcher
from .state_loader import LocalStateLoader
from .sync_executor import SyncExecutor
from .sync_planner import SyncPlanner

__all__ = [
    "CategoryChange",
    "DocChange",
    "LocalCategory",
    "LocalDoc",
    "LocalState",
    "LocalStateLoader",
    "RemoteCategory",
    "RemoteDoc",
    "RemoteState",
    "RemoteStateFetcher",
    "SyncExecutor",
    "SyncPlan",
    "SyncPlanner",
    "SyncSummary",
]
