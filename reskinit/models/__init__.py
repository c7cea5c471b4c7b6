from reskinit.models.card_definition import (
    CardDefinition,
    CardDefinitionKind,
    DiscoveryCardDefinition,
    TokenCardDefinition,
)
from reskinit.models.cost import ZERO_COST, Color, CostVector
from reskinit.models.failure import (
    ApiResponse,
    ConflictError,
    FailureDetail,
    FailureKind,
    ForbiddenError,
    KnownError,
    NotFoundError,
    OutcomeType,
    UnauthenticatedError,
    UnsupportedTableError,
    ValidationError,
    create_unknown_failure,
)
from reskinit.models.game import CardTableSpec, GameSpec

__all__ = [
    "ApiResponse",
    "CardDefinition",
    "CardDefinitionKind",
    "CardTableSpec",
    "Color",
    "ConflictError",
    "CostVector",
    "DiscoveryCardDefinition",
    "FailureDetail",
    "FailureKind",
    "ForbiddenError",
    "GameSpec",
    "KnownError",
    "NotFoundError",
    "OutcomeType",
    "TokenCardDefinition",
    "UnauthenticatedError",
    "UnsupportedTableError",
    "ValidationError",
    "ZERO_COST",
    "create_unknown_failure",
]
