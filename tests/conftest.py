from datetime import UTC, datetime, timedelta

import jwt
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine

from reskinit.db.database import Database
from reskinit.db.operations import create_user
from reskinit.jobs.seed_games import TOKEN_ENGINE
from reskinit.main import app
from reskinit.models.cost import Color, CostVector
from reskinit.models.db import (
    GameDB,
    TokenEngineCardDefinitionDB,
    TokenEngineDiscoveryCardDefinitionDB,
    UserDB,
)
from reskinit.models.game import CardTableSpec, GameSpec
from reskinit.services.auth import TokenVerifier
from reskinit.services.games import create_or_update_game

TEST_SECRET = "test-secret-that-is-long-enough-for-hs256"


def make_token(user_id: int, secret: str = TEST_SECRET, expires_in: int = 3600) -> str:
    """Mint a token the way the auth service does."""
    payload = {
        "userId": user_id,
        "exp": datetime.now(UTC) + timedelta(seconds=expires_in),
    }
    return jwt.encode(payload, secret, algorithm="HS256")


def _auth_header(user_id: int) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(user_id)}"}


@pytest.fixture
def auth_header():
    """Build an Authorization header for a user id."""
    return _auth_header


@pytest.fixture
def token():
    """Mint a token; accepts secret and expires_in overrides."""
    return make_token


@pytest.fixture
async def async_engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    database = Database.from_engine(engine)
    await database.init_db()
    yield engine
    await database.drop_db()
    await engine.dispose()


@pytest.fixture
def database(async_engine) -> Database:
    return Database.from_engine(async_engine)


@pytest.fixture
async def session(database: Database) -> AsyncSession:
    """Provide a database session for tests."""
    async with database.session_factory() as session:
        yield session


@pytest.fixture
async def client(database: Database):
    """Provide an async test client bound to the test database."""
    app.state.database = database
    app.state.token_verifier = TokenVerifier(TEST_SECRET)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.state.database = None
    app.state.token_verifier = None


@pytest.fixture
async def alice(session: AsyncSession) -> UserDB:
    user = await create_user(session, "alice", "alice@example.com", "hashed")
    await session.commit()
    return user


@pytest.fixture
async def bob(session: AsyncSession) -> UserDB:
    user = await create_user(session, "bob", "bob@example.com", "hashed")
    await session.commit()
    return user


@pytest.fixture
async def token_game(session: AsyncSession) -> GameDB:
    """The built-in game plus a handful of card rows in both tables."""
    game, _ = await create_or_update_game(session, TOKEN_ENGINE)
    session.add_all(
        [
            TokenEngineCardDefinitionDB(
                id=101,
                token=Color.RED,
                points=0,
                tier=1,
                cost=CostVector({Color.WHITE: 1, Color.BLUE: 1, Color.GREEN: 1}),
            ),
            TokenEngineCardDefinitionDB(
                id=102,
                token=Color.BLUE,
                points=1,
                tier=1,
                cost=CostVector({Color.RED: 4}),
            ),
            TokenEngineCardDefinitionDB(
                id=103,
                token=Color.BLACK,
                points=1,
                tier=1,
                cost=CostVector({Color.GREEN: 4}),
            ),
            TokenEngineCardDefinitionDB(
                id=201,
                token=Color.WHITE,
                points=2,
                tier=2,
                cost=CostVector({Color.RED: 5, Color.BLACK: 3}),
            ),
            TokenEngineCardDefinitionDB(
                id=301,
                token=Color.GREEN,
                points=4,
                tier=3,
                cost=CostVector({Color.BLUE: 7}),
            ),
            TokenEngineDiscoveryCardDefinitionDB(
                id=1,
                points=3,
                cost=CostVector({Color.WHITE: 4, Color.RED: 4}),
            ),
            TokenEngineDiscoveryCardDefinitionDB(
                id=2,
                points=3,
                cost=CostVector({Color.BLUE: 3, Color.GREEN: 3, Color.BLACK: 3}),
            ),
        ]
    )
    await session.commit()
    return game


@pytest.fixture
async def other_game(session: AsyncSession) -> GameDB:
    """A second game that reuses the token card table."""
    spec = GameSpec(
        name="Gem Rush",
        summary="A variant with only development cards.",
        card_tables=(
            CardTableSpec(name="Gem Cards", table_name="TokenEngineCardDefinition"),
        ),
    )
    game, _ = await create_or_update_game(session, spec)
    await session.commit()
    return game


@pytest.fixture
def token_cards_id(token_game: GameDB) -> int:
    """Descriptor id of the built-in game's token card table."""
    return next(d.id for d in token_game.card_definitions if d.name == "Token Cards")


@pytest.fixture
def discovery_cards_id(token_game: GameDB) -> int:
    """Descriptor id of the built-in game's discovery table."""
    return next(d.id for d in token_game.card_definitions if d.name == "Discovery Cards")
