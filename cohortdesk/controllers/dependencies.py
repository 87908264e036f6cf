"""Common FastAPI dependencies reused across controllers."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from cohortdesk.database import get_session
from cohortdesk.services.identity import Actor, resolve_actor
from cohortdesk.utils import AuthenticationError, decode_access_token

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")
SessionDep = Annotated[AsyncSession, Depends(get_session)]


async def get_current_actor(
    token: Annotated[str, Depends(oauth2_scheme)],
    session: SessionDep,
) -> Actor:
    """Resolve the bearer token into the acting administrator.

    Non-admin principals surface as ``ForbiddenError`` from the resolver.
    """

    try:
        payload = decode_access_token(token)
    except AuthenticationError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        ) from None

    return await resolve_actor(session, payload.sub)


CurrentActorDep = Annotated[Actor, Depends(get_current_actor)]


__all__ = ["get_current_actor", "oauth2_scheme", "SessionDep", "CurrentActorDep"]
