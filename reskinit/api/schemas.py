"""
Wire models shared by the API routers.

Field names are snake_case in Python and camelCase on the wire, matching
the existing web client. Requests accept either spelling.

Relations are copied explicitly from loaded ORM objects; nothing here reads
an attribute that was not eager-loaded.
"""

from collections.abc import Iterable
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, StrictInt
from pydantic.alias_generators import to_camel

from reskinit.db.operations import CardSetInclude
from reskinit.models.card_definition import (
    CardDefinition,
    DiscoveryCardDefinition,
    TokenCardDefinition,
)
from reskinit.models.cost import Color
from reskinit.models.db import CardSetDB, DeckDB, GameCardDefinitionDB, GameDB


class ApiModel(BaseModel):
    """Base for wire models: camelCase aliases, built from ORM attributes."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# --- Responses ---


class UserResponse(ApiModel):
    """Public profile. The password hash is never part of it."""

    id: int
    username: str
    email: str
    display_name: str | None = None
    bio: str | None = None
    avatar_url: str | None = None
    created_at: datetime
    updated_at: datetime


class GameCardDefinitionResponse(ApiModel):
    """Descriptor of one card table used by a game."""

    id: int
    game_id: int
    name: str
    description: str
    table_name: str
    created_at: datetime
    updated_at: datetime


class GameResponse(ApiModel):
    """A game without its descriptors."""

    id: int
    name: str
    summary: str
    rules: str
    created_at: datetime
    updated_at: datetime


class GameDetailResponse(GameResponse):
    """A game with the card tables it uses."""

    card_definitions: list[GameCardDefinitionResponse] = Field(default_factory=list)


class DeckResponse(ApiModel):
    """A deck and its selected card ids."""

    id: int
    name: str
    description: str | None = None
    card_set_id: int
    game_card_definition_id: int | None = None
    card_definition_ids: list[int] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class DeckInCardSetResponse(DeckResponse):
    """A deck listed under its card set, with its descriptor."""

    game_card_definition: GameCardDefinitionResponse | None = None


class CardSetResponse(ApiModel):
    """
    A card set.

    game, user and decks are present only when requested via include.
    """

    id: int
    title: str
    description: str
    image_url: str
    game_id: int
    user_id: int
    created_at: datetime
    updated_at: datetime
    game: GameResponse | None = None
    user: UserResponse | None = None
    decks: list[DeckInCardSetResponse] | None = None


class DeckDetailResponse(DeckResponse):
    """A deck with its card set and descriptor."""

    card_set: CardSetResponse
    game_card_definition: GameCardDefinitionResponse | None = None


class TokenCardDefinitionResponse(ApiModel):
    """A development card with its decoded cost."""

    id: int
    token: Color
    points: int
    tier: int
    cost: dict[Color, int]


class DiscoveryCardDefinitionResponse(ApiModel):
    """A discovery card with its decoded cost."""

    id: int
    points: int
    cost: dict[Color, int]


CardDefinitionResponse = TokenCardDefinitionResponse | DiscoveryCardDefinitionResponse


# --- Requests ---


class CardSetCreateRequest(ApiModel):
    """Request model for creating a card set."""

    title: str | None = None
    description: str | None = None
    image_url: str | None = None
    game_id: int | None = None


class CardSetUpdateRequest(ApiModel):
    """Request model for editing a card set. Omitted fields are unchanged."""

    title: str | None = None
    description: str | None = None
    image_url: str | None = None


class DeckCreateRequest(ApiModel):
    """Request model for creating a deck."""

    name: str | None = None
    description: str | None = None
    card_set_id: int
    game_card_definition_id: int
    card_definition_ids: list[StrictInt] = Field(default_factory=list)


class DeckSelectionRequest(ApiModel):
    """Request model for replacing a deck's card selection."""

    card_definition_ids: list[StrictInt] = Field(
        ...,
        description="Complete new selection; duplicates are ignored",
        examples=[[1, 2, 3]],
    )


class ProfileUpdateRequest(ApiModel):
    """Request model for editing the caller's profile."""

    display_name: str | None = None
    bio: str | None = None
    avatar_url: str | None = None


# --- Converters ---


def game_response(game: GameDB) -> GameResponse:
    """Convert a game row without touching its descriptors."""
    return GameResponse(
        id=game.id,
        name=game.name,
        summary=game.summary,
        rules=game.rules,
        created_at=game.created_at,
        updated_at=game.updated_at,
    )


def game_detail_response(game: GameDB) -> GameDetailResponse:
    """Convert a game row whose descriptors are loaded."""
    return GameDetailResponse(
        **game_response(game).model_dump(),
        card_definitions=[
            GameCardDefinitionResponse.model_validate(d) for d in game.card_definitions
        ],
    )


def descriptor_response(
    descriptor: GameCardDefinitionDB | None,
) -> GameCardDefinitionResponse | None:
    if descriptor is None:
        return None
    return GameCardDefinitionResponse.model_validate(descriptor)


def _deck_fields(deck: DeckDB) -> dict[str, object]:
    return {
        "id": deck.id,
        "name": deck.name,
        "description": deck.description,
        "card_set_id": deck.card_set_id,
        "game_card_definition_id": deck.game_card_definition_id,
        "card_definition_ids": list(deck.card_definition_ids or []),
        "created_at": deck.created_at,
        "updated_at": deck.updated_at,
    }


def card_set_response(
    card_set: CardSetDB,
    include: Iterable[CardSetInclude] = (),
) -> CardSetResponse:
    """Convert a card set row, copying only the relations that were loaded."""
    included = set(include)
    response = CardSetResponse(
        id=card_set.id,
        title=card_set.title,
        description=card_set.description,
        image_url=card_set.image_url,
        game_id=card_set.game_id,
        user_id=card_set.user_id,
        created_at=card_set.created_at,
        updated_at=card_set.updated_at,
    )
    if CardSetInclude.GAME in included:
        response.game = game_response(card_set.game)
    if CardSetInclude.USER in included:
        response.user = UserResponse.model_validate(card_set.user)
    if CardSetInclude.DECKS in included:
        response.decks = [
            DeckInCardSetResponse(
                **_deck_fields(deck),
                game_card_definition=descriptor_response(deck.game_card_definition),
            )
            for deck in card_set.decks
        ]
    return response


def deck_detail_response(
    deck: DeckDB,
    card_set: CardSetDB,
    descriptor: GameCardDefinitionDB | None,
) -> DeckDetailResponse:
    """Convert a deck with its card set and descriptor."""
    return DeckDetailResponse(
        **_deck_fields(deck),
        card_set=card_set_response(card_set),
        game_card_definition=descriptor_response(descriptor),
    )


def card_definition_response(card: CardDefinition) -> CardDefinitionResponse:
    """Convert a typed card definition, spelling out all five cost colors."""
    cost = dict(card.cost)
    match card:
        case TokenCardDefinition():
            return TokenCardDefinitionResponse(
                id=card.id,
                token=card.token,
                points=card.points,
                tier=card.tier,
                cost=cost,
            )
        case DiscoveryCardDefinition():
            return DiscoveryCardDefinitionResponse(id=card.id, points=card.points, cost=cost)
    raise TypeError(f"Not a card definition: {type(card).__name__}")
