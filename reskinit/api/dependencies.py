"""Request-scoped dependencies shared by the routers."""

from typing import Annotated

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from reskinit.db import operations as ops
from reskinit.db.database import get_session
from reskinit.models.failure import UnauthenticatedError
from reskinit.services.auth import TokenVerifier

SessionDep = Annotated[AsyncSession, Depends(get_session)]


def get_token_verifier(request: Request) -> TokenVerifier:
    """Return the verifier configured at startup."""
    verifier: TokenVerifier = request.app.state.token_verifier
    return verifier


async def get_principal(
    session: SessionDep,
    verifier: Annotated[TokenVerifier, Depends(get_token_verifier)],
    authorization: Annotated[str | None, Header()] = None,
) -> int:
    """
    Authenticated user id for this request.

    Raises:
        UnauthenticatedError: If the bearer token is missing or invalid, or
            its user no longer exists
    """
    user_id = verifier.principal_from_header(authorization)
    if await ops.get_user(session, user_id) is None:
        raise UnauthenticatedError("Unknown user")
    return user_id


Principal = Annotated[int, Depends(get_principal)]
