"""
Card definition API endpoints.

Lists the rows of one card-definition table, addressed by the symbolic
table name a GameCardDefinition carries.

Query parameters:
    token: Colors to keep, repeated or comma-separated (token cards only)
    tier: Tiers to keep, repeated (token cards only)
    min_cost / max_cost: Per-color bounds such as "RED:2,BLUE:1"
    sort: id, points, tier, token or cost:<COLOR>
    direction: asc or desc
"""

from typing import Annotated, Literal

from fastapi import APIRouter, Query

from reskinit.api.dependencies import SessionDep
from reskinit.api.schemas import CardDefinitionResponse, card_definition_response
from reskinit.models.cost import Color
from reskinit.models.failure import ValidationError
from reskinit.services.card_definitions import CardDefinitionQuery, list_definitions

router = APIRouter(prefix="/card-definitions", tags=["card-definitions"])


def _split(values: list[str] | None) -> list[str]:
    if not values:
        return []
    return [part.strip() for value in values for part in value.split(",") if part.strip()]


def _parse_colors(values: list[str] | None) -> frozenset[Color]:
    colors = set()
    for name in _split(values):
        try:
            colors.add(Color(name.upper()))
        except ValueError:
            raise ValidationError(
                f"Unknown color: {name}",
                detail=f"Valid colors: {[c.value for c in Color]}",
            ) from None
    return frozenset(colors)


def _parse_bounds(raw: str | None, param: str) -> dict[Color, int]:
    bounds: dict[Color, int] = {}
    for part in _split([raw] if raw else None):
        name, sep, amount = part.partition(":")
        try:
            if not sep:
                raise ValueError(part)
            color = Color(name.strip().upper())
            value = int(amount)
        except ValueError:
            raise ValidationError(
                f"Malformed {param}: {part}",
                detail="Expected COLOR:AMOUNT pairs, e.g. RED:2,BLUE:1",
            ) from None
        bounds[color] = value
    return bounds


@router.get("/{table_name}", response_model=list[CardDefinitionResponse])
async def list_card_definitions(
    table_name: str,
    session: SessionDep,
    token: Annotated[list[str] | None, Query()] = None,
    tier: Annotated[list[int] | None, Query()] = None,
    min_cost: str | None = None,
    max_cost: str | None = None,
    sort: str | None = None,
    direction: Literal["asc", "desc"] = "asc",
) -> list[CardDefinitionResponse]:
    """
    List card definitions in a table.

    Without filters the table's default ordering applies. Returns 422 with
    an unsupported_table failure if the table name is unknown.
    """
    query = CardDefinitionQuery(
        tokens=_parse_colors(token),
        tiers=frozenset(tier or ()),
        min_cost=_parse_bounds(min_cost, "min_cost"),
        max_cost=_parse_bounds(max_cost, "max_cost"),
        sort_key=sort,
        descending=direction == "desc",
    )
    cards = await list_definitions(session, table_name, order_by=query)
    return [card_definition_response(card) for card in cards]
