"""Per-record locking for corrective action mutations.

Every mutating operation opens its unit of work with a conditional UPDATE on
the action row (a compare-and-swap on ``status``). The UPDATE takes the row's
write lock, so sign, void and edit on the same action serialize: the second
caller blocks until the first commits and then evaluates its condition
against the committed status.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from discipline_engine.errors import NotFoundError
from discipline_engine.models import CorrectiveAction, CorrectiveActionStatus, utcnow


@dataclass(frozen=True)
class Claim:
    """Outcome of a conditional row claim.

    ``claimed`` is False when the row exists but its status was not one of
    the expected statuses. ``action`` always reflects the committed row.
    """

    claimed: bool
    action: CorrectiveAction


async def load_action(session: AsyncSession, action_id: UUID) -> CorrectiveAction:
    """Load an action with its signatures, bypassing stale identity-map state."""
    result = await session.execute(
        select(CorrectiveAction)
        .where(CorrectiveAction.corrective_action_id == action_id)
        .execution_options(populate_existing=True)
    )
    action = result.scalar_one_or_none()
    if action is None:
        raise NotFoundError("Corrective action", action_id)
    return action


async def claim_action(
    session: AsyncSession,
    action_id: UUID,
    expected: Iterable[CorrectiveActionStatus],
    values: dict[str, Any] | None = None,
) -> Claim:
    """Conditionally update an action row while its status is in ``expected``.

    ``values`` are written in the same statement; ``updated_at`` is always
    bumped. Returns the reloaded action and whether the condition matched.
    """
    statuses = [status.value for status in expected]
    params = {"updated_at": utcnow(), **(values or {})}
    result = await session.execute(
        update(CorrectiveAction)
        .where(
            CorrectiveAction.corrective_action_id == action_id,
            CorrectiveAction.status.in_(statuses),
        )
        .values(**params)
        .execution_options(synchronize_session=False)
    )
    claimed = (result.rowcount or 0) == 1
    action = await load_action(session, action_id)
    return Claim(claimed=claimed, action=action)
