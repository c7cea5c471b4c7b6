"""Tests for database CRUD operations."""

from types import SimpleNamespace

import pytest
from sqlalchemy import select, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from reskinit.db.database import Database, get_session
from reskinit.db.operations import (
    CardSetInclude,
    create_user,
    delete_deck,
    detach_decks_from_descriptors,
    get_card_set,
    get_deck,
    get_user,
    insert_card_set,
    insert_deck,
    list_card_sets,
    set_deck_card_ids,
)
from reskinit.models.db import GameDB, UserDB
from reskinit.models.failure import NotFoundError


async def _card_set(session: AsyncSession, user: UserDB, game: GameDB, title: str = "Starter"):
    return await insert_card_set(
        session,
        title=title,
        description="D",
        image_url="U",
        game_id=game.id,
        user_id=user.id,
    )


class TestUserOperations:
    async def test_create_user_defaults_display_name(self, session: AsyncSession) -> None:
        user = await create_user(session, "carol", "carol@example.com", "hashed")

        assert user.id is not None
        assert user.display_name == "carol"

    async def test_get_user_not_found(self, session: AsyncSession) -> None:
        assert await get_user(session, 99) is None

    async def test_username_unique(self, session: AsyncSession, alice: UserDB) -> None:
        with pytest.raises(IntegrityError):
            await create_user(session, "alice", "other@example.com", "hashed")


class TestCardSetOperations:
    async def test_title_unique_per_user(
        self, session: AsyncSession, alice: UserDB, token_game: GameDB
    ) -> None:
        await _card_set(session, alice, token_game)

        with pytest.raises(IntegrityError):
            await _card_set(session, alice, token_game)

    async def test_list_filters_by_owner(
        self, session: AsyncSession, alice: UserDB, bob: UserDB, token_game: GameDB
    ) -> None:
        await _card_set(session, alice, token_game, "A")
        await _card_set(session, bob, token_game, "B")
        await session.commit()

        assert [s.title for s in await list_card_sets(session, owner_id=bob.id)] == ["B"]
        assert len(await list_card_sets(session)) == 2

    async def test_get_with_all_relations(
        self, session: AsyncSession, alice: UserDB, token_game: GameDB
    ) -> None:
        card_set = await _card_set(session, alice, token_game)
        await session.commit()

        loaded = await get_card_set(session, card_set.id, include=set(CardSetInclude))

        assert loaded.game.id == token_game.id
        assert loaded.user.id == alice.id
        assert loaded.decks == []


class TestDeckOperations:
    async def test_set_card_ids(
        self, session: AsyncSession, alice: UserDB, token_game: GameDB
    ) -> None:
        card_set = await _card_set(session, alice, token_game)
        descriptor = token_game.card_definitions[0]
        deck = await insert_deck(session, "Deck", None, card_set.id, descriptor.id, [1])
        await session.commit()

        assert await set_deck_card_ids(session, deck.id, [2, 3]) is True
        await session.commit()

        reloaded = await get_deck(session, deck.id)
        assert reloaded.card_definition_ids == [2, 3]

    async def test_set_card_ids_missing_deck(self, session: AsyncSession) -> None:
        assert await set_deck_card_ids(session, 404, [1]) is False

    async def test_card_ids_stored_as_json(
        self, session: AsyncSession, alice: UserDB, token_game: GameDB
    ) -> None:
        card_set = await _card_set(session, alice, token_game)
        descriptor = token_game.card_definitions[0]
        deck = await insert_deck(session, "Deck", None, card_set.id, descriptor.id, [101, 102])
        await session.commit()

        result = await session.execute(
            text("SELECT card_definition_ids FROM decks WHERE id = :id"), {"id": deck.id}
        )

        assert result.scalar_one().replace(" ", "") == "[101,102]"

    async def test_detach_decks(
        self, session: AsyncSession, alice: UserDB, token_game: GameDB
    ) -> None:
        card_set = await _card_set(session, alice, token_game)
        descriptor = token_game.card_definitions[0]
        deck = await insert_deck(session, "Deck", None, card_set.id, descriptor.id, [])
        await session.commit()

        touched = await detach_decks_from_descriptors(session, [descriptor.id])
        await session.commit()

        assert touched == 1
        assert (await get_deck(session, deck.id)).game_card_definition_id is None
        assert await detach_decks_from_descriptors(session, []) == 0

    async def test_delete_deck(
        self, session: AsyncSession, alice: UserDB, token_game: GameDB
    ) -> None:
        card_set = await _card_set(session, alice, token_game)
        descriptor = token_game.card_definitions[0]
        deck = await insert_deck(session, "Deck", None, card_set.id, descriptor.id, [])
        await session.commit()

        assert await delete_deck(session, deck.id) is True
        assert await delete_deck(session, deck.id) is False


def _request(database: Database) -> SimpleNamespace:
    return SimpleNamespace(app=SimpleNamespace(state=SimpleNamespace(database=database)))


async def _usernames(database: Database) -> list[str]:
    async with database.session_factory() as session:
        result = await session.execute(select(UserDB.username))
        return list(result.scalars())


class TestGetSession:
    async def test_commits_when_handler_returns(self, database: Database) -> None:
        dependency = get_session(_request(database))
        session = await anext(dependency)
        await create_user(session, "dave", "dave@example.com", "hashed")

        with pytest.raises(StopAsyncIteration):
            await anext(dependency)

        assert await _usernames(database) == ["dave"]

    async def test_rolls_back_on_domain_error(self, database: Database) -> None:
        dependency = get_session(_request(database))
        session = await anext(dependency)
        await create_user(session, "erin", "erin@example.com", "hashed")

        with pytest.raises(NotFoundError):
            await dependency.athrow(NotFoundError("Deck", 1))

        assert await _usernames(database) == []
