"""
Deck Composition Engine.

A deck belongs to one card set and draws from the one card-definition table
named by its GameCardDefinition. Its contents are a set of row ids in that
table. The engine treats ids as opaque: it checks that they exist in the
resolved table and leaves everything table-specific to the card definition
store.

INVARIANTS:
- Stored selections are deduplicated and sorted
- A selection is replaced whole or not at all; invalid ids reject the call
- Only the owner of the card set may create, edit or delete its decks
- A deck's descriptor belongs to the same game as its card set
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from reskinit.config import MAX_DECK_SELECTION_SIZE
from reskinit.db import operations as ops
from reskinit.models.card_definition import CardDefinition, CardDefinitionKind
from reskinit.models.db import CardSetDB, DeckDB, GameCardDefinitionDB
from reskinit.models.failure import (
    ConflictError,
    NotFoundError,
    UnsupportedTableError,
    ValidationError,
)
from reskinit.services.card_definitions import find_missing_ids, get_definitions_by_ids
from reskinit.services.card_sets import get_owned_card_set

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeckWithRelations:
    """A deck with the relations needed to display it."""

    deck: DeckDB
    card_set: CardSetDB
    game_card_definition: GameCardDefinitionDB | None

    @property
    def is_draft(self) -> bool:
        """True while the deck has no cards selected."""
        return not self.deck.card_definition_ids

    @property
    def kind(self) -> CardDefinitionKind:
        """
        Card-definition kind this deck draws from.

        Raises:
            UnsupportedTableError: If the table is no longer resolvable
        """
        table_name = self.game_card_definition.table_name if self.game_card_definition else None
        return CardDefinitionKind.resolve(table_name)


def normalize_selection(ids: Iterable[object]) -> list[int]:
    """
    Deduplicate and sort a card selection.

    Raises:
        ValidationError: If an entry is not a non-negative integer, or the
            selection is too large
    """
    selection: set[int] = set()
    bad: list[str] = []
    for value in ids:
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            bad.append(repr(value))
            continue
        selection.add(value)

    if bad:
        raise ValidationError(
            "Card ids must be non-negative integers",
            detail="Invalid entries: " + ", ".join(bad),
        )
    if len(selection) > MAX_DECK_SELECTION_SIZE:
        raise ValidationError(
            f"A deck can hold at most {MAX_DECK_SELECTION_SIZE} cards",
            detail=f"Received {len(selection)} distinct ids",
        )
    return sorted(selection)


async def _validate_ids(session: AsyncSession, kind: CardDefinitionKind, ids: list[int]) -> None:
    missing = await find_missing_ids(session, kind, ids)
    if missing:
        raise ValidationError(
            f"Some cards do not exist in {kind.value}",
            invalid_ids=missing,
        )


async def get_deck(session: AsyncSession, deck_id: int) -> DeckWithRelations:
    """
    Get a deck with its card set and descriptor.

    Raises:
        NotFoundError: If no deck has this id
    """
    deck = await ops.get_deck(session, deck_id)
    if deck is None:
        raise NotFoundError("Deck", deck_id)
    return DeckWithRelations(
        deck=deck,
        card_set=deck.card_set,
        game_card_definition=deck.game_card_definition,
    )


async def create_deck(
    session: AsyncSession,
    name: str | None,
    description: str | None,
    card_set_id: int,
    game_card_definition_id: int,
    initial_ids: Iterable[object],
    acting_user_id: int,
) -> DeckWithRelations:
    """
    Create a deck in a card set owned by the acting user.

    Raises:
        ValidationError: If the name is blank, the descriptor is unknown or
            belongs to another game, or an initial id is not in the table
        NotFoundError: If the card set does not exist
        ForbiddenError: If the acting user does not own the card set
        UnsupportedTableError: If the descriptor names an unknown table
        ConflictError: If the card set already has a deck with this name
    """
    if name is None or not name.strip():
        raise ValidationError("Missing required fields", detail="Blank: name")
    name = name.strip()

    card_set = await get_owned_card_set(session, card_set_id, acting_user_id, include=())
    selection = normalize_selection(initial_ids)

    descriptor = await ops.get_game_card_definition(session, game_card_definition_id)
    if descriptor is None:
        raise ValidationError(
            "Unknown card definition table",
            detail=f"GameCardDefinition {game_card_definition_id} does not exist",
        )
    if descriptor.game_id != card_set.game_id:
        raise ValidationError(
            "Card definition table belongs to a different game than the card set",
            detail=(
                f"GameCardDefinition {descriptor.id} is for game {descriptor.game_id}, "
                f"card set {card_set.id} is for game {card_set.game_id}"
            ),
        )

    kind = CardDefinitionKind.resolve(descriptor.table_name)
    await _validate_ids(session, kind, selection)

    try:
        deck = await ops.insert_deck(
            session,
            name=name,
            description=description.strip() if description else None,
            card_set_id=card_set.id,
            game_card_definition_id=descriptor.id,
            card_definition_ids=selection,
        )
    except IntegrityError as e:
        await session.rollback()
        raise ConflictError(
            "This card set already has a deck with this name",
            detail=f"name={name!r}",
        ) from e

    logger.info(
        "User %d created deck %d in card set %d with %d cards",
        acting_user_id,
        deck.id,
        card_set.id,
        len(selection),
    )
    return await get_deck(session, deck.id)


async def replace_card_selection(
    session: AsyncSession,
    deck_id: int,
    new_ids: Iterable[object],
    acting_user_id: int,
) -> DeckWithRelations:
    """
    Replace a deck's whole card selection.

    Duplicates are dropped. Every id must exist in the deck's table; if any
    does not, nothing changes. The write is a single UPDATE, so concurrent
    saves leave one caller's complete selection, never a mix.

    Raises:
        NotFoundError: If no deck has this id
        ForbiddenError: If the acting user does not own the deck's card set
        UnsupportedTableError: If the deck's table is no longer resolvable
        ValidationError: If an id is malformed or not in the table
    """
    current = await get_deck(session, deck_id)
    await get_owned_card_set(session, current.card_set.id, acting_user_id, include=())

    selection = normalize_selection(new_ids)
    kind = current.kind
    await _validate_ids(session, kind, selection)

    if not await ops.set_deck_card_ids(session, deck_id, selection):
        raise NotFoundError("Deck", deck_id)

    logger.info(
        "User %d replaced selection of deck %d: %d -> %d cards",
        acting_user_id,
        deck_id,
        len(current.deck.card_definition_ids),
        len(selection),
    )
    return await get_deck(session, deck_id)


async def list_deck_cards(session: AsyncSession, deck_id: int) -> list[CardDefinition]:
    """
    Resolve a deck's selected card definitions, in the table's default order.

    Raises:
        NotFoundError: If no deck has this id
        UnsupportedTableError: If the deck's table is no longer resolvable
    """
    current = await get_deck(session, deck_id)
    try:
        kind = current.kind
    except UnsupportedTableError:
        logger.warning("Deck %d references an unresolvable card table", deck_id)
        raise
    return await get_definitions_by_ids(session, kind, current.deck.card_definition_ids)


async def delete_deck(session: AsyncSession, deck_id: int, acting_user_id: int) -> None:
    """
    Delete a deck.

    Raises:
        NotFoundError: If no deck has this id
        ForbiddenError: If the acting user does not own the deck's card set
    """
    current = await get_deck(session, deck_id)
    await get_owned_card_set(session, current.card_set.id, acting_user_id, include=())
    await ops.delete_deck(session, deck_id)
    logger.info("User %d deleted deck %d", acting_user_id, deck_id)
