#!/usr/bin/env python3
"""
Seed script: creates a demo entry with text evidence and intent for the guest user.
Run after migrations: python scripts/seed.py
"""

import asyncio
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import select

from ledger.config import settings
from ledger.database import create_engine_from_settings, create_session_maker
from ledger.models import Entry
from ledger.storage import repositories as repo

DEMO_TITLE = "Inventory tracker for the family shop"
DEMO_EVIDENCE = (
    "I built a small inventory tracker using spreadsheets and basic formulas "
    "to manage stock for a shop."
)
DEMO_INTENT = "used it at my family's store"


async def seed():
    if not settings.guest_user_id:
        print("GUEST_USER_ID is not set; nothing to seed.")
        return

    engine = create_engine_from_settings(settings)
    session_maker = create_session_maker(engine)

    async with session_maker() as session:
        result = await session.execute(
            select(Entry).where(
                Entry.user_id == settings.guest_user_id, Entry.title == DEMO_TITLE
            )
        )
        entry = result.scalars().first()
        if entry:
            print("Demo entry already exists, using existing.")
        else:
            entry = await repo.create_entry(session, settings.guest_user_id, DEMO_TITLE)
            await repo.create_evidence(session, str(entry.id), "text", DEMO_EVIDENCE)
            entry.intent_prompt = DEMO_INTENT
            await session.commit()

    await engine.dispose()

    print("Seed complete!")
    print(f"Entry ID: {entry.id}")
    print("Next: curl -X POST http://localhost:8000/api/ai/analyze \\")
    print('  -H "Content-Type: application/json" \\')
    print(f"  -d '{{\"entry_id\":\"{entry.id}\"}}'")


if __name__ == "__main__":
    asyncio.run(seed())
