"""
Card Definition Store.

Reads the parallel card-definition tables. A table is picked from a closed
set of CardDefinitionKind values; the ORM class behind each kind is chosen
by pattern match, so a stored table name never reaches SQL as text.

Default orderings:
- Token cards: tier ascending, points descending, token color name ascending
- Discovery cards: points descending, id ascending
"""

import logging
from collections.abc import Collection, Iterable
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from reskinit.models.card_definition import (
    CardDefinition,
    CardDefinitionKind,
    DiscoveryCardDefinition,
    TokenCardDefinition,
)
from reskinit.models.cost import Color
from reskinit.models.db import TokenEngineCardDefinitionDB, TokenEngineDiscoveryCardDefinitionDB
from reskinit.models.failure import ValidationError

logger = logging.getLogger(__name__)

CardDefinitionRow = TokenEngineCardDefinitionDB | TokenEngineDiscoveryCardDefinitionDB

# Sort keys accepted by CardDefinitionQuery, beyond the per-color cost keys
SORT_KEYS = frozenset({"id", "points", "tier", "token"})
COST_SORT_PREFIX = "cost:"


def _row_model(kind: CardDefinitionKind) -> type[CardDefinitionRow]:
    match kind:
        case CardDefinitionKind.TOKEN_ENGINE_CARD:
            return TokenEngineCardDefinitionDB
        case CardDefinitionKind.TOKEN_ENGINE_DISCOVERY:
            return TokenEngineDiscoveryCardDefinitionDB


def _default_order(kind: CardDefinitionKind) -> list[Any]:
    match kind:
        case CardDefinitionKind.TOKEN_ENGINE_CARD:
            return [
                TokenEngineCardDefinitionDB.tier.asc(),
                TokenEngineCardDefinitionDB.points.desc(),
                TokenEngineCardDefinitionDB.token.asc(),
                TokenEngineCardDefinitionDB.id.asc(),
            ]
        case CardDefinitionKind.TOKEN_ENGINE_DISCOVERY:
            return [
                TokenEngineDiscoveryCardDefinitionDB.points.desc(),
                TokenEngineDiscoveryCardDefinitionDB.id.asc(),
            ]


def to_definition(row: CardDefinitionRow) -> CardDefinition:
    """Convert a database row to its typed card definition."""
    match row:
        case TokenEngineCardDefinitionDB():
            return TokenCardDefinition(
                id=row.id,
                token=Color(row.token),
                points=row.points,
                tier=row.tier,
                cost=row.cost,
            )
        case TokenEngineDiscoveryCardDefinitionDB():
            return DiscoveryCardDefinition(id=row.id, points=row.points, cost=row.cost)
    raise TypeError(f"Not a card definition row: {type(row).__name__}")


# --- Filtering and sorting ---


@dataclass(frozen=True)
class CardDefinitionQuery:
    """
    Filter and sort options for a card definition listing.

    Attributes:
        tokens: Keep only token cards producing one of these colors
        tiers: Keep only token cards in one of these tiers
        min_cost: Per-color lower bounds on cost (inclusive)
        max_cost: Per-color upper bounds on cost (inclusive)
        sort_key: "id", "points", "tier", "token" or "cost:<COLOR>";
            None keeps the table's default ordering
        descending: Reverse the sort direction
    """

    tokens: frozenset[Color] = field(default_factory=frozenset)
    tiers: frozenset[int] = field(default_factory=frozenset)
    min_cost: dict[Color, int] = field(default_factory=dict)
    max_cost: dict[Color, int] = field(default_factory=dict)
    sort_key: str | None = None
    descending: bool = False

    def validate_for(self, kind: CardDefinitionKind) -> None:
        """
        Reject options that do not apply to this kind of card.

        Raises:
            ValidationError: If the query uses attributes the kind lacks
                or names an unknown sort key
        """
        if not kind.has_tiers and (self.tokens or self.tiers):
            raise ValidationError(
                f"{kind.value} cards cannot be filtered by token or tier",
            )
        if self.sort_key is None:
            return
        if self.sort_key.startswith(COST_SORT_PREFIX):
            color_name = self.sort_key.removeprefix(COST_SORT_PREFIX).upper()
            if color_name not in Color.__members__:
                raise ValidationError(f"Unknown cost color in sort key: {self.sort_key}")
            return
        if self.sort_key not in SORT_KEYS:
            raise ValidationError(
                f"Unknown sort key: {self.sort_key}",
                detail=f"Valid keys: {sorted(SORT_KEYS)} or cost:<COLOR>",
            )
        if self.sort_key in ("tier", "token") and not kind.has_tiers:
            raise ValidationError(f"{kind.value} cards cannot be sorted by {self.sort_key}")

    def matches(self, card: CardDefinition) -> bool:
        """True if the card passes every filter."""
        if isinstance(card, TokenCardDefinition):
            if self.tokens and card.token not in self.tokens:
                return False
            if self.tiers and card.tier not in self.tiers:
                return False
        for color, bound in self.min_cost.items():
            if card.cost[color] < bound:
                return False
        for color, bound in self.max_cost.items():
            if card.cost[color] > bound:
                return False
        return True

    def sort_value(self, card: CardDefinition) -> Any:
        """Sort value of a card under this query's key."""
        key = self.sort_key or "id"
        if key.startswith(COST_SORT_PREFIX):
            return card.cost[Color(key.removeprefix(COST_SORT_PREFIX).upper())]
        if key == "token" and isinstance(card, TokenCardDefinition):
            return card.token.value
        return getattr(card, key)


def apply_query(
    cards: Iterable[CardDefinition], query: CardDefinitionQuery
) -> list[CardDefinition]:
    """
    Filter then sort cards.

    Sorting is stable, so cards with equal sort values keep the table's
    default order.
    """
    selected = [card for card in cards if query.matches(card)]
    if query.sort_key is not None:
        selected.sort(key=query.sort_value, reverse=query.descending)
    return selected


# --- Store operations ---


async def list_definitions(
    session: AsyncSession,
    table_name: str | None,
    order_by: CardDefinitionQuery | None = None,
) -> list[CardDefinition]:
    """
    List every card definition in a table.

    Args:
        session: Database session
        table_name: Symbolic table name from a GameCardDefinition
        order_by: Optional filter/sort; None keeps the default ordering

    Raises:
        UnsupportedTableError: If table_name is not a known kind
        ValidationError: If order_by does not apply to the kind
    """
    kind = CardDefinitionKind.resolve(table_name)
    if order_by is not None:
        order_by.validate_for(kind)

    model = _row_model(kind)
    result = await session.execute(select(model).order_by(*_default_order(kind)))
    cards = [to_definition(row) for row in result.scalars().all()]

    if order_by is not None:
        cards = apply_query(cards, order_by)
    return cards


async def get_definitions_by_ids(
    session: AsyncSession,
    kind: CardDefinitionKind,
    ids: Collection[int],
) -> list[CardDefinition]:
    """Rows of one kind with the given ids, in default order. Unknown ids are skipped."""
    if not ids:
        return []
    model = _row_model(kind)
    result = await session.execute(
        select(model).where(model.id.in_(ids)).order_by(*_default_order(kind))
    )
    return [to_definition(row) for row in result.scalars().all()]


async def find_missing_ids(
    session: AsyncSession,
    kind: CardDefinitionKind,
    ids: Collection[int],
) -> set[int]:
    """Return the ids that have no row in the kind's table."""
    if not ids:
        return set()
    model = _row_model(kind)
    result = await session.execute(select(model.id).where(model.id.in_(ids)))
    found = set(result.scalars().all())
    missing = set(ids) - found
    if missing:
        logger.debug("Missing %s ids: %s", kind.value, sorted(missing))
    return missing


