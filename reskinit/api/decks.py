"""
Deck API endpoints.

A deck's contents are replaced whole: PATCH carries the complete new
selection, never a diff.
"""

from fastapi import APIRouter, status

from reskinit.api.dependencies import Principal, SessionDep
from reskinit.api.schemas import (
    ApiModel,
    CardDefinitionResponse,
    DeckCreateRequest,
    DeckDetailResponse,
    DeckSelectionRequest,
    card_definition_response,
    deck_detail_response,
)
from reskinit.services import decks
from reskinit.services.decks import DeckWithRelations

router = APIRouter(prefix="/decks", tags=["decks"])


class DeckDeleteResponse(ApiModel):
    """Response model for a deleted deck."""

    id: int
    deleted: bool = True


def _detail(found: DeckWithRelations) -> DeckDetailResponse:
    return deck_detail_response(found.deck, found.card_set, found.game_card_definition)


@router.post("", response_model=DeckDetailResponse, status_code=status.HTTP_201_CREATED)
async def create_deck(
    body: DeckCreateRequest,
    session: SessionDep,
    principal: Principal,
) -> DeckDetailResponse:
    """
    Create a deck in one of the caller's card sets.

    The initial selection is deduplicated. Returns 400 if the descriptor
    belongs to another game or an id is not in the descriptor's table.
    """
    created = await decks.create_deck(
        session,
        name=body.name,
        description=body.description,
        card_set_id=body.card_set_id,
        game_card_definition_id=body.game_card_definition_id,
        initial_ids=body.card_definition_ids,
        acting_user_id=principal,
    )
    return _detail(created)


@router.get("/{deck_id}", response_model=DeckDetailResponse)
async def get_deck(deck_id: int, session: SessionDep) -> DeckDetailResponse:
    """Get a deck with its card set and descriptor."""
    return _detail(await decks.get_deck(session, deck_id))


@router.get("/{deck_id}/cards", response_model=list[CardDefinitionResponse])
async def list_deck_cards(deck_id: int, session: SessionDep) -> list[CardDefinitionResponse]:
    """
    Get the card definitions a deck selects.

    Returns 422 if the deck's card table has been removed from its game.
    """
    cards = await decks.list_deck_cards(session, deck_id)
    return [card_definition_response(card) for card in cards]


@router.patch("/{deck_id}", response_model=DeckDetailResponse)
async def replace_card_selection(
    deck_id: int,
    body: DeckSelectionRequest,
    session: SessionDep,
    principal: Principal,
) -> DeckDetailResponse:
    """
    Replace a deck's card selection.

    All ids must exist in the deck's table; otherwise nothing changes and
    the response lists the invalid ids.
    """
    updated = await decks.replace_card_selection(
        session,
        deck_id,
        new_ids=body.card_definition_ids,
        acting_user_id=principal,
    )
    return _detail(updated)


@router.delete("/{deck_id}", response_model=DeckDeleteResponse)
async def delete_deck(
    deck_id: int,
    session: SessionDep,
    principal: Principal,
) -> DeckDeleteResponse:
    """Delete a deck from one of the caller's card sets."""
    await decks.delete_deck(session, deck_id, acting_user_id=principal)
    return DeckDeleteResponse(id=deck_id)
