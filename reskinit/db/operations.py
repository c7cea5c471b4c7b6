"""
Database CRUD operations.

Provides async functions for reading and writing users, games, card sets
and decks. Functions here do not validate business rules; the services
layer does that before calling them. Inserts that hit a uniqueness
constraint raise IntegrityError for the caller to translate.
"""

from collections.abc import Collection, Iterable
from enum import Enum
from typing import Any

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from reskinit.models.db import (
    CardSetDB,
    DeckDB,
    GameCardDefinitionDB,
    GameDB,
    UserDB,
)


class CardSetInclude(str, Enum):
    """Relations that can be loaded alongside a card set."""

    GAME = "game"
    USER = "user"
    DECKS = "decks"


DEFAULT_CARD_SET_INCLUDE = frozenset({CardSetInclude.GAME, CardSetInclude.USER})


# --- User Operations ---


async def get_user(session: AsyncSession, user_id: int) -> UserDB | None:
    """Get a user by id. Returns None if no such user exists."""
    return await session.get(UserDB, user_id)


async def create_user(
    session: AsyncSession,
    username: str,
    email: str,
    password: str,
    display_name: str | None = None,
) -> UserDB:
    """
    Create a user record.

    password must already be hashed by the auth service.
    Raises IntegrityError if username or email is taken.
    """
    user = UserDB(
        username=username,
        email=email,
        password=password,
        display_name=display_name or username,
    )
    session.add(user)
    await session.flush()
    return user


# --- Game Operations ---


async def list_games(session: AsyncSession) -> list[GameDB]:
    """All games ordered by name."""
    result = await session.execute(select(GameDB).order_by(GameDB.name.asc(), GameDB.id.asc()))
    return list(result.scalars().all())


async def get_game(session: AsyncSession, game_id: int) -> GameDB | None:
    """Get a game with its card definition descriptors."""
    result = await session.execute(
        select(GameDB)
        .where(GameDB.id == game_id)
        .options(selectinload(GameDB.card_definitions))
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_game_by_name(session: AsyncSession, name: str) -> GameDB | None:
    """Get a game by its unique name, with descriptors loaded."""
    result = await session.execute(
        select(GameDB).where(GameDB.name == name).options(selectinload(GameDB.card_definitions))
    )
    return result.scalar_one_or_none()


async def get_game_card_definition(
    session: AsyncSession, game_card_definition_id: int
) -> GameCardDefinitionDB | None:
    """Get a single descriptor by id."""
    return await session.get(GameCardDefinitionDB, game_card_definition_id)


async def list_game_card_definitions(
    session: AsyncSession, game_id: int
) -> list[GameCardDefinitionDB]:
    """Descriptors of one game, ordered by name."""
    result = await session.execute(
        select(GameCardDefinitionDB)
        .where(GameCardDefinitionDB.game_id == game_id)
        .order_by(GameCardDefinitionDB.name.asc())
    )
    return list(result.scalars().all())


async def detach_decks_from_descriptors(
    session: AsyncSession, game_card_definition_ids: Collection[int]
) -> int:
    """
    Clear the descriptor reference of decks pointing at the given descriptors.

    Returns the number of decks touched.
    """
    if not game_card_definition_ids:
        return 0
    result = await session.execute(
        update(DeckDB)
        .where(DeckDB.game_card_definition_id.in_(game_card_definition_ids))
        .values(game_card_definition_id=None)
    )
    return int(result.rowcount)  # type: ignore[attr-defined]


# --- Card Set Operations ---


def _card_set_options(include: Iterable[CardSetInclude]) -> list[Any]:
    options: list[Any] = []
    for relation in set(include):
        if relation is CardSetInclude.GAME:
            options.append(selectinload(CardSetDB.game))
        elif relation is CardSetInclude.USER:
            options.append(selectinload(CardSetDB.user))
        elif relation is CardSetInclude.DECKS:
            options.append(
                selectinload(CardSetDB.decks).selectinload(DeckDB.game_card_definition)
            )
    return options


async def list_card_sets(
    session: AsyncSession,
    owner_id: int | None = None,
    include: Iterable[CardSetInclude] = DEFAULT_CARD_SET_INCLUDE,
) -> list[CardSetDB]:
    """
    Card sets, newest first.

    When owner_id is given only that user's sets are returned.
    """
    stmt = select(CardSetDB).options(*_card_set_options(include))
    if owner_id is not None:
        stmt = stmt.where(CardSetDB.user_id == owner_id)
    stmt = stmt.order_by(CardSetDB.created_at.desc(), CardSetDB.id.desc())
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_card_set(
    session: AsyncSession,
    card_set_id: int,
    include: Iterable[CardSetInclude] = DEFAULT_CARD_SET_INCLUDE,
) -> CardSetDB | None:
    """Get a card set by id with the requested relations loaded."""
    result = await session.execute(
        select(CardSetDB)
        .where(CardSetDB.id == card_set_id)
        .options(*_card_set_options(include))
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def insert_card_set(
    session: AsyncSession,
    title: str,
    description: str,
    image_url: str,
    game_id: int,
    user_id: int,
) -> CardSetDB:
    """
    Insert a card set.

    Raises IntegrityError if the user already has a set with this title.
    """
    card_set = CardSetDB(
        title=title,
        description=description,
        image_url=image_url,
        game_id=game_id,
        user_id=user_id,
    )
    session.add(card_set)
    await session.flush()
    return card_set


async def delete_card_set(session: AsyncSession, card_set_id: int) -> int:
    """
    Delete a card set and its decks.

    Returns the number of decks removed with it.
    """
    result = await session.execute(delete(DeckDB).where(DeckDB.card_set_id == card_set_id))
    await session.execute(delete(CardSetDB).where(CardSetDB.id == card_set_id))
    return int(result.rowcount)  # type: ignore[attr-defined]


# --- Deck Operations ---


async def get_deck(session: AsyncSession, deck_id: int) -> DeckDB | None:
    """Get a deck with its card set and descriptor loaded."""
    result = await session.execute(
        select(DeckDB)
        .where(DeckDB.id == deck_id)
        .options(
            selectinload(DeckDB.card_set),
            selectinload(DeckDB.game_card_definition),
        )
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def insert_deck(
    session: AsyncSession,
    name: str,
    description: str | None,
    card_set_id: int,
    game_card_definition_id: int,
    card_definition_ids: list[int],
) -> DeckDB:
    """
    Insert a deck.

    Raises IntegrityError if the card set already has a deck with this name.
    """
    deck = DeckDB(
        name=name,
        description=description,
        card_set_id=card_set_id,
        game_card_definition_id=game_card_definition_id,
        card_definition_ids=card_definition_ids,
    )
    session.add(deck)
    await session.flush()
    return deck


async def set_deck_card_ids(
    session: AsyncSession, deck_id: int, card_definition_ids: list[int]
) -> bool:
    """
    Overwrite a deck's selection with a single UPDATE statement.

    Returns False if the deck no longer exists.
    """
    result = await session.execute(
        update(DeckDB)
        .where(DeckDB.id == deck_id)
        .values(card_definition_ids=card_definition_ids)
        .execution_options(synchronize_session=False)
    )
    return bool(result.rowcount)  # type: ignore[attr-defined]


async def delete_deck(session: AsyncSession, deck_id: int) -> bool:
    """Delete a deck. Returns True if a row was removed."""
    result = await session.execute(delete(DeckDB).where(DeckDB.id == deck_id))
    return bool(result.rowcount)  # type: ignore[attr-defined]
