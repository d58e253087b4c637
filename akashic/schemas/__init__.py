from .catalog import ScrollResponse, UnlockRequest, UnlockResponse, UnlockStatusResponse
from .crafting import (
    ClaimResponse,
    DiscoverResponse,
    IngredientCheckResponse,
    QueueItemResponse,
    RecipeResponse,
    StartCraftingRequest,
    StartCraftingResponse,
)
from .inventory import (
    CrystalPurchaseRequest,
    CrystalPurchaseResponse,
    CrystalResponse,
    EquipRequest,
    ItemCreateRequest,
    ItemResponse,
    ItemUpdateRequest,
    QuantityRequest,
)
from .ledger import (
    BalanceResponse,
    PackageResponse,
    PurchaseRequest,
    PurchaseResponse,
    SpendPurpose,
    SpendRequest,
    SpendResponse,
    TransactionResponse,
)
from .messages import (
    ChatExchangeResponse,
    ChatMessageResponse,
    ContactRequest,
    ContactResponse,
    KeeperMessageRequest,
    OracleMessageRequest,
)
from .user import (
    AuthResponse,
    LoginRequest,
    MessageResponse,
    PasswordChangeRequest,
    ProfileRequest,
    RegisterRequest,
    UserResponse,
)

__all__ = [
    "AuthResponse",
    "BalanceResponse",
    "ChatExchangeResponse",
    "ChatMessageResponse",
    "ClaimResponse",
    "ContactRequest",
    "ContactResponse",
    "CrystalPurchaseRequest",
    "CrystalPurchaseResponse",
    "CrystalResponse",
    "DiscoverResponse",
    "EquipRequest",
    "IngredientCheckResponse",
    "ItemCreateRequest",
    "ItemResponse",
    "ItemUpdateRequest",
    "KeeperMessageRequest",
    "LoginRequest",
    "MessageResponse",
    "OracleMessageRequest",
    "PackageResponse",
    "PasswordChangeRequest",
    "ProfileRequest",
    "PurchaseRequest",
    "PurchaseResponse",
    "QuantityRequest",
    "QueueItemResponse",
    "RecipeResponse",
    "RegisterRequest",
    "ScrollResponse",
    "SpendPurpose",
    "SpendRequest",
    "SpendResponse",
    "StartCraftingRequest",
    "StartCraftingResponse",
    "TransactionResponse",
    "UnlockRequest",
    "UnlockResponse",
    "UnlockStatusResponse",
    "UserResponse",
]
