from .catalog import Scroll, ScrollType, UserScrollUnlock
from .crafting import CraftingQueueItem, CraftingRecipe, UserRecipe
from .definitions import AuthSession, User
from .inventory import InventoryItem, ItemType, Rarity
from .ledger import ManaPackage, ManaTransaction, TransactionType
from .messages import ChatChannel, ChatMessage, ContactMessage, OracleUsage

__all__ = [
    "AuthSession",
    "ChatChannel",
    "ChatMessage",
    "ContactMessage",
    "CraftingQueueItem",
    "CraftingRecipe",
    "InventoryItem",
    "ItemType",
    "ManaPackage",
    "ManaTransaction",
    "OracleUsage",
    "Rarity",
    "Scroll",
    "ScrollType",
    "TransactionType",
    "User",
    "UserRecipe",
    "UserScrollUnlock",
]
