import asyncio
from core.database import Database
from core.config import settings

async def debug_db():
    print(f"Connecting to DB: {settings.db_name} at {settings.mongo_uri}...")
    await Database.connect()

    # List collections
    collections = await Database.get_db().list_collection_names()
    print(f"Collections: {collections}")

    inviter_count = await Database.inviters().count_documents({})
    open_tickets = await Database.tickets().count_documents({"status": "open"})
    print(f"Inviter records: {inviter_count}")
    print(f"Open tickets: {open_tickets}")

    cursor = Database.inviters().find({}).sort([("total_invites", -1)])
    async for doc in cursor:
        print(
            f"Inviter: {doc.get('user_id')}, Total: {doc.get('total_invites')}, "
            f"Leaves: {doc.get('leaves')}, Codes: {len(doc.get('invite_codes', []))}"
        )

    await Database.close()

if __name__ == "__main__":
    asyncio.run(debug_db())
