# file: orgdesk_runtime/__init__.py
"""
Organisation Dashboard Runtime

Async layer around the kernel: record stores, the Remote Data Gateway,
mutation orchestrators and the initial load.
"""

from .record_store import MemoryRecordStore, RecordStore, RecordStoreError
from .gateway import GatewayResult, RemoteGateway
from .notifications import (
    LoggingNotifier,
    Notification,
    NotificationKind,
    Notifier,
    RecordingNotifier,
)
from .two_phase import TwoPhaseResult, write_with_children
from .loader import InitialLoadReconciler, LoadStatus
from .session import DashboardSession, SessionNotReadyError
from .orchestrators import MutationOutcome, OutcomeStatus

__all__ = [
    "MemoryRecordStore",
    "RecordStore",
    "RecordStoreError",
    "GatewayResult",
    "RemoteGateway",
    "LoggingNotifier",
    "Notification",
    "NotificationKind",
    "Notifier",
    "RecordingNotifier",
    "TwoPhaseResult",
    "write_with_children",
    "InitialLoadReconciler",
    "LoadStatus",
    "DashboardSession",
    "SessionNotReadyError",
    "MutationOutcome",
    "OutcomeStatus",
]
