import re
from datetime import datetime
from typing import Optional, List

from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from core.logger import setup_logger
from modules.invite_tracker.models import InviterRecord, LedgerResult

logger = setup_logger("invite_ledger")


class InviterLedger:
    """
    Persisted invite statistics, one document per inviter.

    Every mutation is a single atomic Mongo update, so concurrent writes for
    the same inviter never lose increments.
    """

    def __init__(self, collection):
        self.collection = collection

    async def record_join(self, inviter_id: str, code: str) -> LedgerResult:
        """Credit one regular invite to ``inviter_id``, creating the record on first use."""
        now = datetime.utcnow()
        try:
            doc = await self.collection.find_one_and_update(
                {"user_id": inviter_id},
                {
                    "$inc": {"total_invites": 1, "regular_invites": 1},
                    "$push": {"invite_codes": code},
                    "$set": {"updated_at": now},
                    "$setOnInsert": {
                        "bonus_invites": 0,
                        "fake_invites": 0,
                        "leaves": 0,
                        "created_at": now,
                    },
                },
                upsert=True,
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            return LedgerResult.failure(f"could not credit {inviter_id} for {code}: {e}")

        return LedgerResult.success(InviterRecord.from_mongo(doc))

    async def record_leave(self, token: str) -> LedgerResult:
        """
        Count a leave against the first inviter whose invite codes contain ``token``.

        The match is a substring match over each stored code.
        """
        try:
            doc = await self.collection.find_one(
                {"invite_codes": {"$regex": re.escape(token)}},
                sort=[("_id", 1)],
            )
            if doc is None:
                return LedgerResult(ok=True, reason=f"no inviter record contains {token}")

            doc = await self.collection.find_one_and_update(
                {"user_id": doc["user_id"]},
                {"$inc": {"leaves": 1}, "$set": {"updated_at": datetime.utcnow()}},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            return LedgerResult.failure(f"could not record leave for {token}: {e}")

        return LedgerResult.success(InviterRecord.from_mongo(doc))

    async def get_record(self, inviter_id: str) -> Optional[InviterRecord]:
        doc = await self.collection.find_one({"user_id": inviter_id})
        return InviterRecord.from_mongo(doc)

    async def get_total_invites(self, inviter_id: str) -> int:
        record = await self.get_record(inviter_id)
        return record.total_invites if record else 0

    async def leaderboard(self, limit: int = 10) -> List[InviterRecord]:
        """Top inviters by total invites."""
        cursor = self.collection.find({}).sort([("total_invites", -1)]).limit(limit)
        records = []
        async for doc in cursor:
            records.append(InviterRecord.from_mongo(doc))
        return records
