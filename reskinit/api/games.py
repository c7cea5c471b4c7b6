"""
Game API endpoints.

Games are read-only over HTTP; they are written by the seeding job.
"""

from fastapi import APIRouter

from reskinit.api.dependencies import SessionDep
from reskinit.api.schemas import (
    GameCardDefinitionResponse,
    GameDetailResponse,
    GameResponse,
    game_detail_response,
    game_response,
)
from reskinit.services import games

router = APIRouter(prefix="/games", tags=["games"])


@router.get("", response_model=list[GameResponse])
async def list_games(session: SessionDep) -> list[GameResponse]:
    """List all games, ordered by name."""
    return [game_response(game) for game in await games.list_games(session)]


@router.get("/{game_id}", response_model=GameDetailResponse)
async def get_game(game_id: int, session: SessionDep) -> GameDetailResponse:
    """
    Get a game with the card tables it uses.

    Returns 404 if the game does not exist.
    """
    return game_detail_response(await games.get_game(session, game_id))


@router.get("/{game_id}/card-definitions", response_model=list[GameCardDefinitionResponse])
async def list_game_card_definitions(
    game_id: int, session: SessionDep
) -> list[GameCardDefinitionResponse]:
    """List a game's card table descriptors."""
    descriptors = await games.list_game_card_definitions(session, game_id)
    return [GameCardDefinitionResponse.model_validate(d) for d in descriptors]
