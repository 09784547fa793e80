import asyncio

from pymongo.errors import PyMongoError

from core.logger import setup_logger
from modules.invite_tracker.ledger import InviterLedger
from modules.invite_tracker.models import JoinOutcome, LedgerResult
from modules.invite_tracker.resolver import AttributionResolver
from modules.invite_tracker.snapshot import InviteSnapshotStore

logger = setup_logger("invite_tracker")


class InviteTrackerService:
    """Ties the snapshot store, the resolver and the ledger to guild events."""

    def __init__(self, store: InviteSnapshotStore, resolver: AttributionResolver, ledger: InviterLedger):
        self.store = store
        self.resolver = resolver
        self.ledger = ledger

        # Per-guild lock to ensure serial processing of cache updates/diffs
        self._locks: dict[int, asyncio.Lock] = {}

    def _get_lock(self, guild_id: int) -> asyncio.Lock:
        """Return a per-guild lock, creating it if needed"""
        if guild_id not in self._locks:
            self._locks[guild_id] = asyncio.Lock()
        return self._locks[guild_id]

    async def cache_guild(self, guild_id: int) -> bool:
        async with self._get_lock(guild_id):
            return await self.store.initialize(guild_id) is not None

    async def invite_created(self, guild_id: int, code: str, uses: int) -> None:
        async with self._get_lock(guild_id):
            self.store.record_created(guild_id, code, uses)

    async def invite_deleted(self, guild_id: int, code: str) -> None:
        async with self._get_lock(guild_id):
            self.store.discard(guild_id, code)

    def guild_removed(self, guild_id: int) -> None:
        self.store.forget(guild_id)
        self._locks.pop(guild_id, None)

    async def handle_join(self, guild_id: int, member_id: int) -> JoinOutcome:
        """
        Work out which invite a new member used and credit its owner.

        The inviter's total is read before it is credited, so
        ``total_before`` is the count prior to this join.
        """
        async with self._get_lock(guild_id):
            used_invite = await self.resolver.detect(guild_id)

            if used_invite is None:
                logger.info(f"[InviteTracker] Unknown invite for {member_id} in {guild_id}")
                return JoinOutcome()

            if used_invite.inviter_id is None:
                logger.warning(f"[InviteTracker] Invite {used_invite.code} has no inviter (vanity/server discovery?)")
                return JoinOutcome(invite=used_invite)

            try:
                total_before = await self.ledger.get_total_invites(used_invite.inviter_id)
            except PyMongoError as e:
                logger.error(f"[InviteTracker] Error checking inviter {used_invite.inviter_id}: {e}")
                total_before = 0
            result = await self.ledger.record_join(used_invite.inviter_id, used_invite.code)

        if not result.ok:
            logger.error(f"[InviteTracker] {result.reason}")

        return JoinOutcome(
            invite=used_invite,
            inviter_id=used_invite.inviter_id,
            total_before=total_before,
            ledger=result,
        )

    async def handle_leave(self, member_id: int) -> LedgerResult:
        result = await self.ledger.record_leave(str(member_id))
        if not result.ok:
            logger.error(f"[InviteTracker] {result.reason}")
        elif result.record:
            logger.info(f"[InviteTracker] Leave of {member_id} counted against {result.record.user_id}")
        return result

    def close(self) -> None:
        self.store.clear()
        self._locks.clear()
