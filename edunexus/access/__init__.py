"""Access layer: the only code that talks to the store."""

from edunexus.access.accounts import AccountRepository
from edunexus.access.groups import GroupRepository
from edunexus.access.messages import MessageRepository, display_order
from edunexus.access.settings import SettingsRepository
from edunexus.access.store import Store, open_store
from edunexus.access.tickets import TicketRepository

__all__ = [
    "AccountRepository",
    "GroupRepository",
    "MessageRepository",
    "SettingsRepository",
    "Store",
    "TicketRepository",
    "display_order",
    "open_store",
]
