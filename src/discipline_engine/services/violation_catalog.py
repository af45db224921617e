"""Violation catalog lookup.

Categories are reference data: the engine only reads them. Each severity tier
bounds the default points a category may carry.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from discipline_engine.errors import NotFoundError
from discipline_engine.models import SeverityLevel, ViolationCategory

# Inclusive point ranges per tier. IMMEDIATE_TERMINATION bypasses points.
SEVERITY_POINT_RANGES: dict[SeverityLevel, tuple[int, int] | None] = {
    SeverityLevel.MINOR: (1, 2),
    SeverityLevel.MODERATE: (3, 4),
    SeverityLevel.SERIOUS: (5, 6),
    SeverityLevel.CRITICAL: (8, 10),
    SeverityLevel.IMMEDIATE_TERMINATION: None,
}

SEVERITY_ORDER = list(SEVERITY_POINT_RANGES)


def points_range(severity: SeverityLevel | str) -> tuple[int, int] | None:
    """Inclusive point range for a tier, or None if the tier has no points."""
    return SEVERITY_POINT_RANGES[SeverityLevel(severity)]


def is_points_consistent(severity: SeverityLevel | str, points: int) -> bool:
    """Check default points against the tier range."""
    bounds = points_range(severity)
    if bounds is None:
        return points == 0
    low, high = bounds
    return low <= points <= high


class ViolationCatalog:
    """Read-only lookup of violation categories."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, category_id: UUID) -> ViolationCategory:
        """Get a category by id, raising NotFoundError if unknown."""
        category = await self.session.get(ViolationCategory, category_id)
        if category is None:
            raise NotFoundError("Violation category", category_id)
        return category

    async def list_active(self) -> list[ViolationCategory]:
        """Active categories ordered by severity, display order and name."""
        result = await self.session.execute(
            select(ViolationCategory).where(ViolationCategory.is_active.is_(True))
        )
        categories = list(result.scalars().all())
        categories.sort(
            key=lambda c: (
                SEVERITY_ORDER.index(SeverityLevel(c.severity_level)),
                c.display_order,
                c.category_name,
            )
        )
        return categories

    async def grouped_by_severity(self) -> dict[SeverityLevel, list[ViolationCategory]]:
        """Active categories grouped by tier, every tier present."""
        grouped: dict[SeverityLevel, list[ViolationCategory]] = {
            level: [] for level in SEVERITY_ORDER
        }
        for category in await self.list_active():
            grouped[SeverityLevel(category.severity_level)].append(category)
        return grouped
