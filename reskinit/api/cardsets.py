"""
Card set API endpoints.

Reads are public. Writes need a bearer token; only a set's owner may edit
or delete it.
"""

from typing import Annotated

from fastapi import APIRouter, Query, status

from reskinit.api.dependencies import Principal, SessionDep
from reskinit.api.schemas import (
    ApiModel,
    CardSetCreateRequest,
    CardSetResponse,
    CardSetUpdateRequest,
    card_set_response,
)
from reskinit.db.operations import DEFAULT_CARD_SET_INCLUDE, CardSetInclude
from reskinit.models.failure import ValidationError
from reskinit.services import card_sets

router = APIRouter(prefix="/cardsets", tags=["cardsets"])

IncludeParam = Annotated[
    str | None,
    Query(description="Comma-separated relations: game, user, decks"),
]


class CardSetDeleteResponse(ApiModel):
    """Response model for a deleted card set."""

    id: int
    deleted_decks: int


def parse_include(raw: str | None) -> frozenset[CardSetInclude]:
    """
    Parse an include parameter. None selects the default relations.

    Raises:
        ValidationError: If a relation name is unknown
    """
    if raw is None:
        return DEFAULT_CARD_SET_INCLUDE
    names = [name.strip().lower() for name in raw.split(",") if name.strip()]
    try:
        return frozenset(CardSetInclude(name) for name in names)
    except ValueError:
        raise ValidationError(
            f"Unknown include: {raw}",
            detail=f"Valid relations: {[i.value for i in CardSetInclude]}",
        ) from None


@router.get("", response_model=list[CardSetResponse], response_model_exclude_unset=True)
async def list_card_sets(
    session: SessionDep,
    include: IncludeParam = None,
) -> list[CardSetResponse]:
    """List all card sets, newest first."""
    relations = parse_include(include)
    rows = await card_sets.list_card_sets(session, include=relations)
    return [card_set_response(row, relations) for row in rows]


@router.get("/user/me", response_model=list[CardSetResponse], response_model_exclude_unset=True)
async def list_my_card_sets(
    session: SessionDep,
    principal: Principal,
    include: IncludeParam = None,
) -> list[CardSetResponse]:
    """List the caller's own card sets, newest first."""
    relations = parse_include(include)
    rows = await card_sets.list_card_sets(session, owner_id=principal, include=relations)
    return [card_set_response(row, relations) for row in rows]


@router.get("/{card_set_id}", response_model=CardSetResponse, response_model_exclude_unset=True)
async def get_card_set(
    card_set_id: int,
    session: SessionDep,
    include: IncludeParam = None,
) -> CardSetResponse:
    """
    Get a card set.

    Returns 404 if the card set does not exist.
    """
    relations = parse_include(include)
    row = await card_sets.get_card_set(session, card_set_id, include=relations)
    return card_set_response(row, relations)


@router.post(
    "",
    response_model=CardSetResponse,
    response_model_exclude_unset=True,
    status_code=status.HTTP_201_CREATED,
)
async def create_card_set(
    body: CardSetCreateRequest,
    session: SessionDep,
    principal: Principal,
) -> CardSetResponse:
    """
    Create a card set owned by the caller.

    Returns 400 for blank fields, 404 for an unknown game and 409 if the
    caller already has a set with this title.
    """
    row = await card_sets.create_card_set(
        session,
        title=body.title,
        description=body.description,
        image_url=body.image_url,
        game_id=body.game_id,
        owner_id=principal,
    )
    return card_set_response(row, DEFAULT_CARD_SET_INCLUDE)


@router.patch("/{card_set_id}", response_model=CardSetResponse, response_model_exclude_unset=True)
async def update_card_set(
    card_set_id: int,
    body: CardSetUpdateRequest,
    session: SessionDep,
    principal: Principal,
) -> CardSetResponse:
    """Edit a card set's title, description or image."""
    row = await card_sets.update_card_set(
        session,
        card_set_id,
        acting_user_id=principal,
        title=body.title,
        description=body.description,
        image_url=body.image_url,
    )
    return card_set_response(row, DEFAULT_CARD_SET_INCLUDE)


@router.delete("/{card_set_id}", response_model=CardSetDeleteResponse)
async def delete_card_set(
    card_set_id: int,
    session: SessionDep,
    principal: Principal,
) -> CardSetDeleteResponse:
    """Delete a card set and all of its decks."""
    deck_count = await card_sets.delete_card_set(session, card_set_id, acting_user_id=principal)
    return CardSetDeleteResponse(id=card_set_id, deleted_decks=deck_count)
