"""Seed script for the default violation catalog.

Run with:
    python scripts/seed_violation_categories.py

Categories already present by name are left untouched, so the script can be
re-run safely.
"""

from __future__ import annotations

import asyncio

from discipline_engine.catalog_defaults import seed_violation_categories
from discipline_engine.database import create_schema, get_session, init_db


async def main():
    """Run seed script."""
    print("Seeding violation categories...")

    engine, _ = init_db()
    await create_schema(engine)

    async with get_session() as session:
        created = await seed_violation_categories(session)

    print(f"\nDone! {created} violation categories created.")


if __name__ == "__main__":
    asyncio.run(main())
