"""
Game Registry.

Games are reference data: end users only read them. Seeding and admin
flows write them through create_or_update_game, an idempotent upsert keyed
by the game's unique name.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from reskinit.db import operations as ops
from reskinit.models.card_definition import CardDefinitionKind
from reskinit.models.db import GameCardDefinitionDB, GameDB
from reskinit.models.failure import NotFoundError, ValidationError
from reskinit.models.game import GameSpec

logger = logging.getLogger(__name__)


async def list_games(session: AsyncSession) -> list[GameDB]:
    """All games, ordered by name."""
    return await ops.list_games(session)


async def get_game(session: AsyncSession, game_id: int) -> GameDB:
    """
    Get a game with its card definition descriptors.

    Raises:
        NotFoundError: If no game has this id
    """
    game = await ops.get_game(session, game_id)
    if game is None:
        raise NotFoundError("Game", game_id)
    return game


async def list_game_card_definitions(
    session: AsyncSession, game_id: int
) -> list[GameCardDefinitionDB]:
    """
    Descriptors of a game's card tables.

    Raises:
        NotFoundError: If no game has this id
    """
    await get_game(session, game_id)
    return await ops.list_game_card_definitions(session, game_id)


def _validate_spec(spec: GameSpec) -> None:
    if not spec.name or not spec.name.strip():
        raise ValidationError("Game name cannot be empty")

    seen: set[str] = set()
    for table in spec.card_tables:
        if not table.name or not table.name.strip():
            raise ValidationError(f"Card table name cannot be empty in game '{spec.name}'")
        if table.name in seen:
            raise ValidationError(f"Duplicate card table name '{table.name}' in '{spec.name}'")
        seen.add(table.name)
        # Raises UnsupportedTableError before anything is written
        CardDefinitionKind.resolve(table.table_name)


async def create_or_update_game(session: AsyncSession, spec: GameSpec) -> tuple[GameDB, bool]:
    """
    Insert or update a game and its descriptors.

    Descriptors are matched by name: existing ones are updated in place,
    new ones added, and ones missing from the spec removed. Decks that drew
    from a removed descriptor keep their ids but lose the table reference.

    Returns:
        Tuple of (game, created) where created is True if the game is new.

    Raises:
        ValidationError: If the spec has blank or duplicate names
        UnsupportedTableError: If a descriptor names an unknown table
    """
    _validate_spec(spec)

    game = await ops.get_game_by_name(session, spec.name)
    created = game is None
    if game is None:
        game = GameDB(name=spec.name, summary=spec.summary, rules=spec.rules)
        game.card_definitions = []
        session.add(game)
    else:
        game.summary = spec.summary
        game.rules = spec.rules

    existing = {descriptor.name: descriptor for descriptor in game.card_definitions}
    wanted = {table.name for table in spec.card_tables}

    removed = [d for name, d in existing.items() if name not in wanted]
    if removed:
        await ops.detach_decks_from_descriptors(session, [d.id for d in removed])
        for descriptor in removed:
            game.card_definitions.remove(descriptor)
        logger.info(
            "Removed card tables %s from game %s",
            sorted(d.name for d in removed),
            spec.name,
        )

    for table in spec.card_tables:
        descriptor = existing.get(table.name)
        if descriptor is None:
            game.card_definitions.append(
                GameCardDefinitionDB(
                    name=table.name,
                    description=table.description,
                    table_name=table.table_name,
                )
            )
        else:
            descriptor.description = table.description
            descriptor.table_name = table.table_name

    await session.flush()
    logger.info("%s game %s", "Created" if created else "Updated", spec.name)
    return game, created
