"""Default violation catalog for direct support staff.

Tiers follow the point ranges in ``services.violation_catalog``. Immediate
termination categories carry no points; they route to termination review.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from discipline_engine.models import SeverityLevel, ViolationCategory
from discipline_engine.services.violation_catalog import is_points_consistent

logger = logging.getLogger(__name__)

_SUSPEND = "Immediate suspension pending investigation"
_TERMINATE = "Immediate termination"

# (category name, default points[, description]) per tier, in display order
_CATALOG: dict[SeverityLevel, list[tuple[Any, ...]]] = {
    SeverityLevel.MINOR: [
        ("Clock-in 1-15 minutes late", 1),
        ("Clock-out late - unapproved OT under 15 min", 1),
        ("Minor dress code/uniform violation", 1),
        ("Late timesheet submission", 1),
        ("Clock-in 16-30 minutes late", 2),
        ("Unapproved overtime 15-30 minutes", 2),
        ("Failure to notify supervisor of absence (but did call)", 2),
        ("Minor cleanliness/housekeeping issue", 2),
    ],
    SeverityLevel.MODERATE: [
        ("Progress notes not completed by end of shift", 3),
        ("Failure to follow communication protocols", 3),
        ("Unapproved overtime over 30 minutes", 3),
        ("Clock-in more than 30 minutes late", 3),
        ("Missing required training deadline", 3),
        ("Failure to complete shift checklist", 3),
        ("Inadequate shift documentation", 4),
        ("Failure to report maintenance issues", 4),
        ("Personal cell phone use during prohibited times", 4),
        ("Failure to attend mandatory meeting (without approval)", 4),
    ],
    SeverityLevel.SERIOUS: [
        ("Late medication administration (per eMAR/RTask)", 5),
        ("Progress notes missing after 24 hours", 5),
        ("Failure to document incident/injury", 5),
        ("Leaving shift early without approval", 5),
        ("Unauthorized visitors at site", 5),
        ("No-call/no-show", 6),
        ("Insubordination", 6),
        ("Failure to follow Individual Service Plan (ISP)", 6),
        ("Failure to maintain required supervision levels", 6),
        ("Sleeping during non-overnight awake shift", 6),
    ],
    SeverityLevel.CRITICAL: [
        ("Sleeping on overnight awake shift", 8),
        ("Client funds mishandling (minor)", 8),
        ("Unauthorized disclosure of client information", 8),
        ("Medication not administered at all", 10),
        ("Falsifying documentation", 10),
        ("Second no-call/no-show within 90 days", 10),
        ("Failure to report suspected abuse/neglect", 10),
        ("Working under the influence (unconfirmed)", 10),
        ("Leaving clients unsupervised", 10),
    ],
    SeverityLevel.IMMEDIATE_TERMINATION: [
        ("Abuse, neglect, or exploitation of clients", 0, _SUSPEND),
        ("Confirmed HIPAA violation", 0, _SUSPEND),
        ("Positive drug/alcohol test", 0, _TERMINATE),
        ("Theft of company or client property", 0, _TERMINATE),
        ("Physical altercation with staff or client", 0, _TERMINATE),
        ("Gross misconduct", 0, _SUSPEND),
        ("Falsifying employment documents", 0, _TERMINATE),
        ("Criminal conduct on premises", 0, _TERMINATE),
    ],
}


def default_categories() -> list[dict[str, Any]]:
    """Flatten the default catalog into ViolationCategory keyword dicts."""
    rows = []
    for severity, entries in _CATALOG.items():
        for order, entry in enumerate(entries, start=1):
            name, points = entry[0], entry[1]
            if not is_points_consistent(severity, points):
                raise ValueError(f"{name!r}: {points} points outside {severity.value} range")
            rows.append(
                {
                    "category_name": name,
                    "severity_level": severity.value,
                    "default_points": points,
                    "description": entry[2] if len(entry) > 2 else None,
                    "display_order": order,
                    "is_active": True,
                }
            )
    return rows


async def seed_violation_categories(session: AsyncSession) -> int:
    """Insert default categories not yet present by name. Returns the count added."""
    result = await session.execute(select(ViolationCategory.category_name))
    existing = set(result.scalars().all())

    created = 0
    for row in default_categories():
        if row["category_name"] in existing:
            continue
        session.add(ViolationCategory(**row))
        created += 1

    await session.flush()
    logger.info("Seeded %d violation categories (%d already present)", created, len(existing))
    return created
