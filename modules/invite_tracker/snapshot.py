from typing import Optional

from core.logger import setup_logger
from modules.invite_tracker.models import InviteInfo
from modules.invite_tracker.source import InviteSource, InviteFetchError

logger = setup_logger("invite_snapshot")

Snapshot = dict[str, int]


def snapshot_of(invites: list[InviteInfo]) -> Snapshot:
    return {invite.code: invite.uses for invite in invites}


class InviteSnapshotStore:
    """
    Last observed use count of every invite, per guild.

    Lives only in memory: the bot creates one at startup, seeds it for every
    guild and clears it on shutdown.
    """

    def __init__(self, source: InviteSource):
        self.source = source
        # Structure: { guild_id: { code: uses } }
        self._snapshots: dict[int, Snapshot] = {}

    def __contains__(self, guild_id: int) -> bool:
        return guild_id in self._snapshots

    def __len__(self) -> int:
        return len(self._snapshots)

    def get(self, guild_id: int) -> Optional[Snapshot]:
        """Return a copy of the guild snapshot, or None if it was never seeded."""
        snapshot = self._snapshots.get(guild_id)
        return dict(snapshot) if snapshot is not None else None

    async def initialize(self, guild_id: int) -> Optional[Snapshot]:
        """
        Fetch every live invite of a guild and use it as the baseline.
        On failure the guild stays absent and attribution is off for it.
        """
        try:
            invites = await self.source.fetch_invites(guild_id)
        except InviteFetchError as e:
            logger.error(f"[InviteTracker] {e}")
            return None

        snapshot = snapshot_of(invites)
        self._snapshots[guild_id] = snapshot
        logger.info(f"[InviteTracker] Cached {len(snapshot)} invites for guild {guild_id}")
        return dict(snapshot)

    def record_created(self, guild_id: int, code: str, uses: int = 0) -> None:
        snapshot = self._snapshots.get(guild_id)
        if snapshot is None:
            logger.debug(f"[InviteTracker] Dropped invite {code} for unseeded guild {guild_id}")
            return
        snapshot[code] = uses

    def discard(self, guild_id: int, code: str) -> None:
        snapshot = self._snapshots.get(guild_id)
        if snapshot is not None:
            snapshot.pop(code, None)

    def replace(self, guild_id: int, snapshot: Snapshot) -> None:
        self._snapshots[guild_id] = dict(snapshot)

    def forget(self, guild_id: int) -> None:
        self._snapshots.pop(guild_id, None)

    def clear(self) -> None:
        self._snapshots.clear()
