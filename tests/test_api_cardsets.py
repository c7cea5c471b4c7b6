"""Tests for card set API endpoints."""

from httpx import AsyncClient

from reskinit.models.db import GameDB, UserDB


def _payload(game: GameDB, title: str = "Starter") -> dict:
    return {
        "title": title,
        "description": "A first reskin",
        "imageUrl": "https://img.example/starter.png",
        "gameId": game.id,
    }


async def _create(client: AsyncClient, headers: dict, game: GameDB, title: str = "Starter"):
    response = await client.post("/cardsets", json=_payload(game, title), headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestCreateCardSet:
    async def test_create(
        self, client: AsyncClient, auth_header, alice: UserDB, token_game: GameDB
    ) -> None:
        data = await _create(client, auth_header(alice.id), token_game)

        assert data["title"] == "Starter"
        assert data["imageUrl"] == "https://img.example/starter.png"
        assert data["userId"] == alice.id
        assert data["game"]["name"] == "Token Engine"
        assert data["user"]["username"] == "alice"
        assert "password" not in data["user"]
        assert "decks" not in data

    async def test_snake_case_body_accepted(
        self, client: AsyncClient, auth_header, alice: UserDB, token_game: GameDB
    ) -> None:
        body = {
            "title": "Snake",
            "description": "D",
            "image_url": "https://img.example/s.png",
            "game_id": token_game.id,
        }

        response = await client.post("/cardsets", json=body, headers=auth_header(alice.id))

        assert response.status_code == 201
        assert response.json()["imageUrl"] == "https://img.example/s.png"

    async def test_requires_token(self, client: AsyncClient, token_game: GameDB) -> None:
        response = await client.post("/cardsets", json=_payload(token_game))

        assert response.status_code == 401
        assert response.json()["failure"]["kind"] == "unauthenticated"

    async def test_rejects_bad_token(self, client: AsyncClient, token_game: GameDB) -> None:
        response = await client.post(
            "/cardsets",
            json=_payload(token_game),
            headers={"Authorization": "Bearer garbage"},
        )

        assert response.status_code == 401

    async def test_rejects_expired_token(
        self, client: AsyncClient, token, alice: UserDB, token_game: GameDB
    ) -> None:
        expired = token(alice.id, expires_in=-60)

        response = await client.post(
            "/cardsets",
            json=_payload(token_game),
            headers={"Authorization": f"Bearer {expired}"},
        )

        assert response.status_code == 401
        assert response.json()["failure"]["detail"] == "Token expired"

    async def test_rejects_token_for_unknown_user(
        self, client: AsyncClient, auth_header, token_game: GameDB
    ) -> None:
        response = await client.post(
            "/cardsets", json=_payload(token_game), headers=auth_header(9999)
        )

        assert response.status_code == 401

    async def test_blank_title(
        self, client: AsyncClient, auth_header, alice: UserDB, token_game: GameDB
    ) -> None:
        body = _payload(token_game, title="   ")

        response = await client.post("/cardsets", json=body, headers=auth_header(alice.id))

        assert response.status_code == 400
        assert response.json()["failure"]["kind"] == "invalid_input"

    async def test_unknown_game(self, client: AsyncClient, auth_header, alice: UserDB) -> None:
        body = {"title": "T", "description": "D", "imageUrl": "U", "gameId": 404}

        response = await client.post("/cardsets", json=body, headers=auth_header(alice.id))

        assert response.status_code == 404

    async def test_duplicate_title(
        self, client: AsyncClient, auth_header, alice: UserDB, token_game: GameDB
    ) -> None:
        await _create(client, auth_header(alice.id), token_game)

        response = await client.post(
            "/cardsets", json=_payload(token_game), headers=auth_header(alice.id)
        )

        assert response.status_code == 409
        assert response.json()["failure"]["kind"] == "conflict"

    async def test_same_title_other_owner(
        self,
        client: AsyncClient,
        auth_header,
        alice: UserDB,
        bob: UserDB,
        token_game: GameDB,
    ) -> None:
        await _create(client, auth_header(alice.id), token_game)
        data = await _create(client, auth_header(bob.id), token_game)

        assert data["userId"] == bob.id


class TestListCardSets:
    async def test_public_listing(
        self,
        client: AsyncClient,
        auth_header,
        alice: UserDB,
        bob: UserDB,
        token_game: GameDB,
    ) -> None:
        await _create(client, auth_header(alice.id), token_game, "Alice's")
        await _create(client, auth_header(bob.id), token_game, "Bob's")

        response = await client.get("/cardsets")

        assert response.status_code == 200
        assert [s["title"] for s in response.json()] == ["Bob's", "Alice's"]

    async def test_mine(
        self,
        client: AsyncClient,
        auth_header,
        alice: UserDB,
        bob: UserDB,
        token_game: GameDB,
    ) -> None:
        await _create(client, auth_header(alice.id), token_game, "Alice's")
        await _create(client, auth_header(bob.id), token_game, "Bob's")

        response = await client.get("/cardsets/user/me", headers=auth_header(alice.id))

        assert response.status_code == 200
        data = response.json()
        assert [s["title"] for s in data] == ["Alice's"]

    async def test_mine_requires_token(self, client: AsyncClient) -> None:
        response = await client.get("/cardsets/user/me")

        assert response.status_code == 401

    async def test_include_only_game(
        self, client: AsyncClient, auth_header, alice: UserDB, token_game: GameDB
    ) -> None:
        await _create(client, auth_header(alice.id), token_game)

        response = await client.get("/cardsets", params={"include": "game"})

        data = response.json()[0]
        assert data["game"]["name"] == "Token Engine"
        assert "user" not in data

    async def test_include_none(
        self, client: AsyncClient, auth_header, alice: UserDB, token_game: GameDB
    ) -> None:
        await _create(client, auth_header(alice.id), token_game)

        response = await client.get("/cardsets", params={"include": ""})

        data = response.json()[0]
        assert "game" not in data
        assert "user" not in data

    async def test_unknown_include(self, client: AsyncClient) -> None:
        response = await client.get("/cardsets", params={"include": "owner"})

        assert response.status_code == 400


class TestSingleCardSet:
    async def test_get_with_decks(
        self,
        client: AsyncClient,
        auth_header,
        alice: UserDB,
        token_game: GameDB,
        token_cards_id: int,
    ) -> None:
        card_set = await _create(client, auth_header(alice.id), token_game)
        await client.post(
            "/decks",
            json={
                "name": "Tier 1",
                "cardSetId": card_set["id"],
                "gameCardDefinitionId": token_cards_id,
                "cardDefinitionIds": [101],
            },
            headers=auth_header(alice.id),
        )

        response = await client.get(
            f"/cardsets/{card_set['id']}", params={"include": "game,user,decks"}
        )

        assert response.status_code == 200
        decks = response.json()["decks"]
        assert [d["name"] for d in decks] == ["Tier 1"]
        assert decks[0]["cardDefinitionIds"] == [101]
        assert decks[0]["gameCardDefinition"]["tableName"] == "TokenEngineCardDefinition"

    async def test_get_not_found(self, client: AsyncClient) -> None:
        response = await client.get("/cardsets/777")

        assert response.status_code == 404

    async def test_update(
        self, client: AsyncClient, auth_header, alice: UserDB, token_game: GameDB
    ) -> None:
        card_set = await _create(client, auth_header(alice.id), token_game)

        response = await client.patch(
            f"/cardsets/{card_set['id']}",
            json={"description": "Updated"},
            headers=auth_header(alice.id),
        )

        assert response.status_code == 200
        assert response.json()["description"] == "Updated"
        assert response.json()["title"] == "Starter"

    async def test_update_by_other_user(
        self,
        client: AsyncClient,
        auth_header,
        alice: UserDB,
        bob: UserDB,
        token_game: GameDB,
    ) -> None:
        card_set = await _create(client, auth_header(alice.id), token_game)

        response = await client.patch(
            f"/cardsets/{card_set['id']}",
            json={"title": "Taken"},
            headers=auth_header(bob.id),
        )

        assert response.status_code == 403
        assert response.json()["failure"]["kind"] == "forbidden"

    async def test_delete(
        self,
        client: AsyncClient,
        auth_header,
        alice: UserDB,
        token_game: GameDB,
        token_cards_id: int,
    ) -> None:
        card_set = await _create(client, auth_header(alice.id), token_game)
        deck = await client.post(
            "/decks",
            json={
                "name": "Tier 1",
                "cardSetId": card_set["id"],
                "gameCardDefinitionId": token_cards_id,
            },
            headers=auth_header(alice.id),
        )

        response = await client.delete(
            f"/cardsets/{card_set['id']}", headers=auth_header(alice.id)
        )

        assert response.status_code == 200
        assert response.json() == {"id": card_set["id"], "deletedDecks": 1}
        assert (await client.get(f"/cardsets/{card_set['id']}")).status_code == 404
        assert (await client.get(f"/decks/{deck.json()['id']}")).status_code == 404

    async def test_delete_by_other_user(
        self,
        client: AsyncClient,
        auth_header,
        alice: UserDB,
        bob: UserDB,
        token_game: GameDB,
    ) -> None:
        card_set = await _create(client, auth_header(alice.id), token_game)

        response = await client.delete(
            f"/cardsets/{card_set['id']}", headers=auth_header(bob.id)
        )

        assert response.status_code == 403
        assert (await client.get(f"/cardsets/{card_set['id']}")).status_code == 200
