"""Remote round trips and table re-synchronization."""

from .client import PersonaClient
from .coordinator import SyncCoordinator, SyncResult
from .notifier import Notifier

__all__ = ["Notifier", "PersonaClient", "SyncCoordinator", "SyncResult"]
