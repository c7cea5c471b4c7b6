from dataclasses import dataclass
from enum import Enum

from reskinit.models.cost import Color, CostVector
from reskinit.models.failure import UnsupportedTableError


class CardDefinitionKind(str, Enum):
    """
    Card-definition tables the store knows how to read.

    Values are the symbolic table names stored on GameCardDefinition rows.
    """

    TOKEN_ENGINE_CARD = "TokenEngineCardDefinition"
    TOKEN_ENGINE_DISCOVERY = "TokenEngineDiscoveryCardDefinition"

    @classmethod
    def resolve(cls, table_name: str | None) -> "CardDefinitionKind":
        """
        Map a stored table name to its kind.

        Raises:
            UnsupportedTableError: If the name is unknown, or None because
                the descriptor was removed
        """
        if table_name is None:
            raise UnsupportedTableError(None)
        try:
            return cls(table_name)
        except ValueError:
            raise UnsupportedTableError(table_name) from None

    @property
    def has_tiers(self) -> bool:
        """True for kinds whose rows carry token color and tier."""
        return self is CardDefinitionKind.TOKEN_ENGINE_CARD


@dataclass(frozen=True, slots=True)
class TokenCardDefinition:
    """
    A development card.

    Attributes:
        id: Row id in its table
        token: Color of the token this card produces
        points: Victory points printed on the card
        tier: Deck tier, 1-3
        cost: Tokens needed to buy it
    """

    id: int
    token: Color
    points: int
    tier: int
    cost: CostVector


@dataclass(frozen=True, slots=True)
class DiscoveryCardDefinition:
    """A discovery card: points awarded once its cost is met."""

    id: int
    points: int
    cost: CostVector


CardDefinition = TokenCardDefinition | DiscoveryCardDefinition
