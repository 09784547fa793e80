import datetime
from typing import Optional

import discord
from discord.ext import commands
from discord import app_commands
from loguru import logger

from core.config import settings
from core.embed_builder import embed_builder
from modules.invite_tracker.service import InviteTrackerService


class InviteTrackerCog(commands.Cog):
    def __init__(self, bot):
        self.bot = bot

    @property
    def tracker(self) -> InviteTrackerService:
        return self.bot.invite_tracker

    def _welcome_channel(self, guild: discord.Guild) -> Optional[discord.abc.Messageable]:
        if not settings.welcome_channel_id:
            return None
        channel = guild.get_channel(settings.welcome_channel_id)
        if channel is None:
            logger.error(f"[InviteTracker] Welcome channel {settings.welcome_channel_id} not found in {guild.id}")
        return channel

    async def _resolve_user(self, guild: discord.Guild, user_id: int) -> Optional[discord.abc.User]:
        member = guild.get_member(user_id)
        if member:
            return member
        try:
            return await self.bot.fetch_user(user_id)
        except discord.HTTPException as e:
            logger.error(f"[InviteTracker] Error fetching inviter {user_id}: {e}")
            return None

    @staticmethod
    async def _announce(channel, embed: discord.Embed):
        try:
            await channel.send(embed=embed)
        except discord.HTTPException as e:
            logger.error(f"[InviteTracker] Failed to send announcement: {e}")

    @commands.Cog.listener(name="on_member_join")
    async def on_member_join(self, member: discord.Member):
        guild = member.guild
        outcome = await self.tracker.handle_join(guild.id, member.id)

        # No welcome line unless we know who invited them
        if not outcome.attributed:
            return

        channel = self._welcome_channel(guild)
        if channel is None:
            return

        inviter = await self._resolve_user(guild, int(outcome.inviter_id))
        inviter_text = inviter.mention if inviter else f"<@{outcome.inviter_id}>"

        embed = discord.Embed(
            description=f"{member.mention} joined; invited by {inviter_text} ({outcome.total_before} invites)",
            color=discord.Color.green(),
            timestamp=datetime.datetime.utcnow(),
        )
        await self._announce(channel, embed)

    @commands.Cog.listener(name="on_member_remove")
    async def on_member_remove(self, member: discord.Member):
        channel = self._welcome_channel(member.guild)
        if channel is not None:
            embed = discord.Embed(
                description=f"{member} left the server",
                color=discord.Color.red(),
                timestamp=datetime.datetime.utcnow(),
            )
            await self._announce(channel, embed)

        await self.tracker.handle_leave(member.id)

    @app_commands.command(name="invites", description="Show invite stats for a member")
    @app_commands.guild_only()
    async def invites(self, interaction: discord.Interaction, user: discord.User = None):
        target = user or interaction.user
        record = await self.tracker.ledger.get_record(str(target.id))

        if record is None:
            await interaction.response.send_message(f"{target.mention} has no tracked invites yet.", ephemeral=True)
            return

        embed = embed_builder(
            title=f"📨 Invites: {target.display_name}",
            description=f"**{record.total_invites}** total invites",
            color=discord.Color.blurple(),
            fields=[
                ("Regular", str(record.regular_invites), True),
                ("Bonus", str(record.bonus_invites), True),
                ("Fake", str(record.fake_invites), True),
                ("Leaves", str(record.leaves), True),
            ],
            thumbnail=target.display_avatar.url if target.display_avatar else None,
        )
        await interaction.response.send_message(embed=embed)

    @app_commands.command(name="invites_leaderboard", description="View top inviters")
    @app_commands.guild_only()
    async def invites_leaderboard(self, interaction: discord.Interaction):
        records = await self.tracker.ledger.leaderboard(10)

        desc = ""
        for idx, record in enumerate(records, 1):
            desc += f"**{idx}.** <@{record.user_id}> - {record.total_invites} invites ({record.leaves} leaves)\n"

        embed = discord.Embed(
            title="🏆 Invite Leaderboard",
            description=desc or "No invites tracked yet.",
            color=discord.Color.gold(),
        )
        await interaction.response.send_message(embed=embed)


async def setup(bot):
    await bot.add_cog(InviteTrackerCog(bot))
