"""Tests for the game seeding job."""

from unittest.mock import AsyncMock, MagicMock, patch

from sqlalchemy.ext.asyncio import AsyncSession

from reskinit.db.database import Database
from reskinit.jobs.seed_games import TOKEN_ENGINE, main, run_seed
from reskinit.models.game import GameSpec
from reskinit.services.games import get_game, list_games


class TestRunSeed:
    async def test_creates_builtin_game(self, database: Database, session: AsyncSession) -> None:
        results = await run_seed(database)

        assert results == {"Token Engine": True}
        games = await list_games(session)
        assert [g.name for g in games] == ["Token Engine"]
        game = await get_game(session, games[0].id)
        assert {d.table_name for d in game.card_definitions} == {
            "TokenEngineCardDefinition",
            "TokenEngineDiscoveryCardDefinition",
        }

    async def test_second_run_updates(self, database: Database) -> None:
        await run_seed(database)

        results = await run_seed(database)

        assert results == {"Token Engine": False}

    async def test_custom_games(self, database: Database, session: AsyncSession) -> None:
        results = await run_seed(database, games=(TOKEN_ENGINE, GameSpec(name="Blank")))

        assert results == {"Token Engine": True, "Blank": True}
        assert len(await list_games(session)) == 2


class TestMain:
    def test_main_seeds_from_settings(self) -> None:
        mock_database = MagicMock()
        mock_database.dispose = AsyncMock()

        with (
            patch("reskinit.jobs.seed_games.Database", return_value=mock_database) as db_cls,
            patch(
                "reskinit.jobs.seed_games.run_seed",
                new_callable=AsyncMock,
                return_value={"Token Engine": False},
            ) as seed,
            patch("reskinit.jobs.seed_games.settings") as mock_settings,
        ):
            mock_settings.database_url = "sqlite+aiosqlite:///:memory:"
            mock_settings.debug = False
            main()

        db_cls.assert_called_once_with("sqlite+aiosqlite:///:memory:", echo=False)
        seed.assert_awaited_once_with(mock_database)
        mock_database.dispose.assert_awaited_once()
