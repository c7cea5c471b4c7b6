"""
Job to register the built-in games.

Upserts each game and its card table descriptors. Safe to run repeatedly;
the card rows themselves are loaded by separate tooling.
"""

import asyncio
import logging

from reskinit.config import settings
from reskinit.db.database import Database
from reskinit.models.card_definition import CardDefinitionKind
from reskinit.models.game import CardTableSpec, GameSpec
from reskinit.services.games import create_or_update_game

logger = logging.getLogger(__name__)

TOKEN_ENGINE = GameSpec(
    name="Token Engine",
    summary="Collect colored tokens, buy development cards, attract discoveries.",
    rules=(
        "On your turn take tokens or buy a card by paying its cost. Cards give a "
        "permanent token of their color and may score points. A discovery visits "
        "the first player whose cards meet its cost."
    ),
    card_tables=(
        CardTableSpec(
            name="Token Cards",
            table_name=CardDefinitionKind.TOKEN_ENGINE_CARD.value,
            description="Development cards in three tiers",
        ),
        CardTableSpec(
            name="Discovery Cards",
            table_name=CardDefinitionKind.TOKEN_ENGINE_DISCOVERY.value,
            description="Point cards claimed by meeting their cost",
        ),
    ),
)

BUILTIN_GAMES = (TOKEN_ENGINE,)


async def run_seed(
    database: Database,
    games: tuple[GameSpec, ...] = BUILTIN_GAMES,
) -> dict[str, bool]:
    """
    Create or update the given games in one transaction.

    Args:
        database: Open database to write to
        games: Games to register

    Returns:
        Dict mapping game name to True if it was created, False if updated
    """
    await database.init_db()

    results: dict[str, bool] = {}
    async with database.session_factory() as session:
        for spec in games:
            game, created = await create_or_update_game(session, spec)
            results[game.name] = created
        await session.commit()

    logger.info(
        "Seed complete: %d created, %d updated",
        sum(results.values()),
        len(results) - sum(results.values()),
    )
    return results


async def _seed_from_settings() -> dict[str, bool]:
    database = Database(settings.database_url, echo=settings.debug)
    try:
        return await run_seed(database)
    finally:
        await database.dispose()


def main() -> None:
    """CLI entry point for seeding games."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    asyncio.run(_seed_from_settings())


if __name__ == "__main__":
    main()
