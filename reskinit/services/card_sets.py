"""
Card set ownership rules.

Anyone may read card sets. Creating one needs an authenticated principal,
which becomes its owner; only the owner may change or delete it. The
"mine" listing filters on the principal id handed over by the auth
boundary, never on an id taken from the request.
"""

import logging
from collections.abc import Iterable

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from reskinit.db import operations as ops
from reskinit.db.operations import DEFAULT_CARD_SET_INCLUDE, CardSetInclude
from reskinit.models.db import CardSetDB
from reskinit.models.failure import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def _require_text(**fields: str | None) -> dict[str, str]:
    blank = sorted(name for name, value in fields.items() if value is None or not value.strip())
    if blank:
        raise ValidationError(
            "Missing required fields",
            detail="Blank: " + ", ".join(blank),
        )
    return {name: value.strip() for name, value in fields.items() if value is not None}


def _title_conflict(title: str) -> ConflictError:
    return ConflictError(
        "You already have a card set with this title",
        detail=f"title={title!r}",
    )


async def list_card_sets(
    session: AsyncSession,
    owner_id: int | None = None,
    include: Iterable[CardSetInclude] = DEFAULT_CARD_SET_INCLUDE,
) -> list[CardSetDB]:
    """
    Card sets, newest first.

    Args:
        session: Database session
        owner_id: Authenticated principal for the "mine" listing; None lists all
        include: Relations to load
    """
    return await ops.list_card_sets(session, owner_id=owner_id, include=include)


async def get_card_set(
    session: AsyncSession,
    card_set_id: int,
    include: Iterable[CardSetInclude] = DEFAULT_CARD_SET_INCLUDE,
) -> CardSetDB:
    """
    Get a card set.

    Raises:
        NotFoundError: If no card set has this id
    """
    card_set = await ops.get_card_set(session, card_set_id, include=include)
    if card_set is None:
        raise NotFoundError("Card set", card_set_id)
    return card_set


async def create_card_set(
    session: AsyncSession,
    title: str | None,
    description: str | None,
    image_url: str | None,
    game_id: int | None,
    owner_id: int,
) -> CardSetDB:
    """
    Create a card set owned by owner_id.

    Raises:
        ValidationError: If a required field is blank
        NotFoundError: If the game does not exist
        ConflictError: If the owner already has a set with this title
    """
    fields = _require_text(title=title, description=description, image_url=image_url)
    if game_id is None:
        raise ValidationError("Missing required fields", detail="Blank: game_id")

    if await ops.get_game(session, game_id) is None:
        raise NotFoundError("Game", game_id)

    try:
        card_set = await ops.insert_card_set(
            session,
            title=fields["title"],
            description=fields["description"],
            image_url=fields["image_url"],
            game_id=game_id,
            user_id=owner_id,
        )
    except IntegrityError as e:
        await session.rollback()
        raise _title_conflict(fields["title"]) from e

    logger.info("User %d created card set %d (%s)", owner_id, card_set.id, card_set.title)
    return await get_card_set(session, card_set.id)


async def get_owned_card_set(
    session: AsyncSession,
    card_set_id: int,
    acting_user_id: int,
    include: Iterable[CardSetInclude] = DEFAULT_CARD_SET_INCLUDE,
) -> CardSetDB:
    """
    Get a card set the acting user is allowed to modify.

    Raises:
        NotFoundError: If no card set has this id
        ForbiddenError: If the acting user is not the owner
    """
    card_set = await get_card_set(session, card_set_id, include=include)
    if card_set.user_id != acting_user_id:
        logger.warning(
            "User %d denied write access to card set %d", acting_user_id, card_set_id
        )
        raise ForbiddenError("Only the owner of this card set can modify it.")
    return card_set


async def update_card_set(
    session: AsyncSession,
    card_set_id: int,
    acting_user_id: int,
    title: str | None = None,
    description: str | None = None,
    image_url: str | None = None,
) -> CardSetDB:
    """
    Update a card set's text fields. Fields left as None are unchanged.

    Raises:
        NotFoundError: If no card set has this id
        ForbiddenError: If the acting user is not the owner
        ValidationError: If a provided field is blank
        ConflictError: If the new title is already used by the owner
    """
    card_set = await get_owned_card_set(session, card_set_id, acting_user_id)

    provided = {
        name: value
        for name, value in {
            "title": title,
            "description": description,
            "image_url": image_url,
        }.items()
        if value is not None
    }
    fields = _require_text(**provided)
    for name, value in fields.items():
        setattr(card_set, name, value)

    try:
        await session.flush()
    except IntegrityError as e:
        await session.rollback()
        raise _title_conflict(fields.get("title", "")) from e

    return await get_card_set(session, card_set_id)


async def delete_card_set(session: AsyncSession, card_set_id: int, acting_user_id: int) -> int:
    """
    Delete a card set together with its decks.

    Returns the number of decks deleted.

    Raises:
        NotFoundError: If no card set has this id
        ForbiddenError: If the acting user is not the owner
    """
    await get_owned_card_set(session, card_set_id, acting_user_id, include=())
    deck_count = await ops.delete_card_set(session, card_set_id)
    logger.info(
        "User %d deleted card set %d with %d decks", acting_user_id, card_set_id, deck_count
    )
    return deck_count
