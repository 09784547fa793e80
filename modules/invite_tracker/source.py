from typing import Protocol

import discord

from modules.invite_tracker.models import InviteInfo


class InviteFetchError(Exception):
    """Raised when the live invite list of a guild cannot be fetched."""

    def __init__(self, guild_id: int, reason: str):
        super().__init__(f"Cannot fetch invites for guild {guild_id}: {reason}")
        self.guild_id = guild_id
        self.reason = reason


class InviteSource(Protocol):
    async def fetch_invites(self, guild_id: int) -> list[InviteInfo]:
        ...


def to_invite_info(invite: discord.Invite) -> InviteInfo:
    return InviteInfo(
        code=invite.code,
        uses=invite.uses or 0,
        inviter_id=str(invite.inviter.id) if invite.inviter else None,
    )


class DiscordInviteSource:
    """Reads live invites straight from the Discord API."""

    def __init__(self, client: discord.Client):
        self.client = client

    async def fetch_invites(self, guild_id: int) -> list[InviteInfo]:
        guild = self.client.get_guild(guild_id)
        if guild is None:
            raise InviteFetchError(guild_id, "guild not in cache")

        try:
            invites = await guild.invites()
        except discord.Forbidden:
            raise InviteFetchError(guild_id, "missing 'Manage Guild' permission")
        except discord.HTTPException as e:
            raise InviteFetchError(guild_id, str(e))

        return [to_invite_info(invite) for invite in invites]
