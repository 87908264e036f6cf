"""Authentication controller providing login endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status
from sqlalchemy import select

from cohortdesk.config.settings import settings
from cohortdesk.controllers.dependencies import CurrentActorDep, SessionDep
from cohortdesk.models.admin import Admin
from cohortdesk.telemetry import increment_login
from cohortdesk.utils import create_access_token, verify_password
from cohortdesk.views import ActorResponse, LoginRequest, TokenResponse

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
async def login(
    payload: LoginRequest,
    session: SessionDep,
) -> TokenResponse:
    """Validate admin credentials and issue a JWT access token."""

    result = await session.execute(select(Admin).where(Admin.email == payload.email))
    admin = result.scalar_one_or_none()

    if not admin or not verify_password(payload.password, admin.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    access_token = create_access_token(subject=admin.id, admin=admin)
    increment_login()

    return TokenResponse(
        access_token=access_token,
        expires_in=settings.security.access_token_expires_minutes * 60,
        role=admin.role.value,
        name=admin.name,
        department=admin.department,
    )


@router.get("/me", response_model=ActorResponse)
async def me(current_actor: CurrentActorDep) -> ActorResponse:
    return ActorResponse(
        id=current_actor.id,
        email=current_actor.email,
        name=current_actor.name,
        role=current_actor.role.value,
        department=current_actor.department,
    )
