"""Profile endpoints for the authenticated user."""

from fastapi import APIRouter

from reskinit.api.dependencies import Principal, SessionDep
from reskinit.api.schemas import ProfileUpdateRequest, UserResponse
from reskinit.services import users

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserResponse)
async def get_me(session: SessionDep, principal: Principal) -> UserResponse:
    """Get the caller's profile."""
    return UserResponse.model_validate(await users.get_user(session, principal))


@router.patch("/me", response_model=UserResponse)
async def update_me(
    body: ProfileUpdateRequest,
    session: SessionDep,
    principal: Principal,
) -> UserResponse:
    """Edit the caller's display name, bio or avatar. Omitted fields are unchanged."""
    user = await users.update_profile(session, principal, body.model_dump(exclude_unset=True))
    return UserResponse.model_validate(user)
