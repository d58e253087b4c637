from .catalog import ScrollRepository
from .crafting import CraftingRepository
from .inventory import InventoryRepository
from .ledger import LedgerRepository
from .messages import MessageRepository
from .session import SessionRepository
from .user import UserRepository

__all__ = [
    "CraftingRepository",
    "InventoryRepository",
    "LedgerRepository",
    "MessageRepository",
    "ScrollRepository",
    "SessionRepository",
    "UserRepository",
]
