import asyncio
from core.database import Database

COUNTER_FIELDS = ["total_invites", "regular_invites", "bonus_invites", "fake_invites", "leaves"]

async def repair():
    print("Repairing DB...")
    await Database.connect()

    # Backfill counters missing on older inviter records
    for field in COUNTER_FIELDS:
        result = await Database.inviters().update_many(
            {field: {"$exists": False}},
            {"$set": {field: 0}}
        )
        print(f"Set {field} on {result.modified_count} inviter records.")

    result = await Database.inviters().update_many(
        {"invite_codes": {"$exists": False}},
        {"$set": {"invite_codes": []}}
    )
    print(f"Set invite_codes on {result.modified_count} inviter records.")

    await Database.close()

if __name__ == "__main__":
    asyncio.run(repair())
