"""FastAPI dependencies for dependency injection."""

from collections.abc import AsyncGenerator
from dataclasses import dataclass
from typing import Annotated
from uuid import UUID

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from discipline_engine.config import Settings, get_settings
from discipline_engine.database import init_db
from discipline_engine.models import UserRole
from discipline_engine.services.discipline_service import DisciplineService


@dataclass(frozen=True)
class Caller:
    """Authenticated staff caller, as asserted by the upstream auth layer."""

    user_id: UUID
    role: UserRole


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Get database session dependency."""
    _, factory = init_db()
    async with factory() as session:
        try:
            yield session
        finally:
            await session.close()


async def get_caller(
    x_user_id: Annotated[str | None, Header()] = None,
    x_user_role: Annotated[str | None, Header()] = None,
) -> Caller:
    """Extract caller identity from headers."""
    if not x_user_id or not x_user_role:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="X-User-ID and X-User-Role headers are required",
        )
    try:
        user_id = UUID(x_user_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid X-User-ID format",
        )
    try:
        role = UserRole(x_user_role.lower())
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown role '{x_user_role}'",
        )
    if role == UserRole.SUBJECT_EMPLOYEE:
        # Only a verified signing link grants this role
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Role cannot be asserted by header",
        )
    return Caller(user_id=user_id, role=role)


async def get_discipline_service(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> DisciplineService:
    """Build the orchestrator for the request's session."""
    return DisciplineService(session, settings)


# Type aliases for cleaner dependency injection
DbSession = Annotated[AsyncSession, Depends(get_db_session)]
CurrentCaller = Annotated[Caller, Depends(get_caller)]
AppSettings = Annotated[Settings, Depends(get_settings)]
Discipline = Annotated[DisciplineService, Depends(get_discipline_service)]
