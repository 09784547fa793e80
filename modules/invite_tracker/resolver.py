from typing import Callable, Optional

from core.logger import setup_logger
from modules.invite_tracker.models import InviteInfo
from modules.invite_tracker.snapshot import InviteSnapshotStore, Snapshot, snapshot_of
from modules.invite_tracker.source import InviteFetchError

logger = setup_logger("invite_resolver")

InviteOrdering = Callable[[list[InviteInfo]], list[InviteInfo]]


def platform_order(invites: list[InviteInfo]) -> list[InviteInfo]:
    """Keep invites in whatever order the API returned them."""
    return list(invites)


def by_code(invites: list[InviteInfo]) -> list[InviteInfo]:
    return sorted(invites, key=lambda invite: invite.code)


ORDERINGS: dict[str, InviteOrdering] = {
    "platform": platform_order,
    "code": by_code,
}


class AttributionResolver:
    def __init__(self, store: InviteSnapshotStore, ordering: InviteOrdering = platform_order):
        self.store = store
        self.ordering = ordering

    def resolve(self, guild_id: int, previous: Snapshot, current: list[InviteInfo]) -> Optional[InviteInfo]:
        """
        Diff the previous snapshot against the freshly fetched invites and
        return the first invite whose use count went up.

        The stored snapshot is replaced with ``current`` whether or not an
        invite was found.
        """
        used_invite = None
        for invite in self.ordering(current):
            if invite.uses > previous.get(invite.code, 0):
                used_invite = invite
                break

        self.store.replace(guild_id, snapshot_of(current))
        return used_invite

    async def detect(self, guild_id: int) -> Optional[InviteInfo]:
        """
        Fetch the current invites of a guild and resolve the one just used.
        Caller should hold the guild lock.
        """
        try:
            current = await self.store.source.fetch_invites(guild_id)
        except InviteFetchError as e:
            logger.warning(f"[InviteTracker] {e}; snapshot left as is")
            return None

        previous = self.store.get(guild_id)
        if previous is None:
            # Never seeded, nothing to diff against. Use this fetch as the baseline.
            logger.warning(f"[InviteTracker] No snapshot for guild {guild_id}, cannot detect invite")
            self.store.replace(guild_id, snapshot_of(current))
            return None

        used_invite = self.resolve(guild_id, previous, current)
        if used_invite:
            logger.info(
                f"[InviteTracker] Detected invite {used_invite.code} "
                f"({previous.get(used_invite.code, 0)} -> {used_invite.uses}) in guild {guild_id}"
            )
        return used_invite
