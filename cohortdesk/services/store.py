"""Translate SQLAlchemy failures into the service error taxonomy."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.engine import Result
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cohortdesk.services.errors import ConflictError, StoreUnavailableError

logger = logging.getLogger(__name__)


async def execute(session: AsyncSession, statement: Any, *, action: str) -> Result:
    """Run ``statement``, raising :class:`StoreUnavailableError` on failure."""

    try:
        return await session.execute(statement)
    except SQLAlchemyError as exc:
        logger.exception("Store failure while trying to %s", action)
        raise StoreUnavailableError(f"Unable to {action}") from exc


async def commit(session: AsyncSession, *, action: str) -> None:
    """Commit the current unit of work or roll it back and raise."""

    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise ConflictError(
            f"Unable to {action}: conflicting record",
            reason="integrity-violation",
        ) from exc
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.exception("Store failure while trying to %s", action)
        raise StoreUnavailableError(f"Unable to {action}") from exc


__all__ = ["commit", "execute"]
