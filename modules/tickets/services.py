import asyncio
import io
from datetime import datetime
from typing import Optional

import chat_exporter
import discord
from pymongo.errors import PyMongoError

from core.config import settings
from core.database import Database
from core.logger import setup_logger
from modules.tickets.models import Ticket

logger = setup_logger("ticket_service")


class TicketService:
    @staticmethod
    async def get_open_ticket(user_id: int, guild_id: int) -> Optional[Ticket]:
        doc = await Database.tickets().find_one({"user_id": user_id, "guild_id": guild_id, "status": "open"})
        return Ticket.from_mongo(doc)

    @staticmethod
    async def get_ticket_by_channel(channel_id: int) -> Optional[Ticket]:
        doc = await Database.tickets().find_one({"channel_id": channel_id})
        return Ticket.from_mongo(doc)

    @staticmethod
    async def create_ticket(user: discord.Member, guild: discord.Guild, category: str) -> tuple[Ticket | None, str]:
        """
        Create a ticket document and a private channel for it.
        Returns the ticket and one of "created", "exists", "no_category".
        """
        existing_ticket = await TicketService.get_open_ticket(user.id, guild.id)
        if existing_ticket:
            channel = guild.get_channel(existing_ticket.channel_id)
            if channel:
                return existing_ticket, "exists"

        ticket_category = guild.get_channel(settings.ticket_category_id) if settings.ticket_category_id else None
        if not isinstance(ticket_category, discord.CategoryChannel):
            logger.error(f"Ticket category {settings.ticket_category_id} not found in guild {guild.id}")
            return None, "no_category"

        overwrites = {
            guild.default_role: discord.PermissionOverwrite(view_channel=False),
            user: discord.PermissionOverwrite(view_channel=True, send_messages=True, read_message_history=True),
            guild.me: discord.PermissionOverwrite(view_channel=True, send_messages=True, read_message_history=True),
        }
        channel = await ticket_category.create_text_channel(
            name=f"ticket-{user.name}",
            overwrites=overwrites,
            topic=f"{category} ticket for {user.id}",
        )

        ticket = Ticket(user_id=user.id, guild_id=guild.id, channel_id=channel.id, category=category)
        try:
            if existing_ticket:
                # Previous channel is gone, retire its document
                await Database.tickets().update_one(
                    {"_id": existing_ticket.id},
                    {"$set": {"status": "closed", "closed_at": datetime.utcnow()}}
                )
            await Database.tickets().insert_one(ticket.to_mongo())
        except PyMongoError as e:
            logger.error(f"Failed to save ticket for user {user.id}, removing channel {channel.id}: {e}")
            try:
                await channel.delete(reason="Ticket could not be saved")
            except discord.HTTPException as delete_error:
                logger.error(f"Failed to delete orphan ticket channel {channel.id}: {delete_error}")
            raise

        logger.info(f"Created {category} ticket {ticket.id} for user {user.id} in channel {channel.id}")
        return ticket, "created"

    @staticmethod
    async def send_ticket_transcript(channel: discord.TextChannel):
        transcript_channel = None
        if settings.ticket_transcript_channel_id:
            transcript_channel = channel.guild.get_channel(settings.ticket_transcript_channel_id)
        if transcript_channel is None:
            return

        try:
            transcript_html = await chat_exporter.export(channel)
            if transcript_html:
                transcript_file = discord.File(
                    io.BytesIO(transcript_html.encode("utf-8")),
                    filename=f"transcript-{channel.name}.html"
                )
                await transcript_channel.send(file=transcript_file)
        except discord.HTTPException as e:
            logger.error(f"Failed to send transcript for {channel.id}: {e}")

    @staticmethod
    async def close_ticket(channel: discord.TextChannel, closed_by_user_id: int, delay: float = None) -> bool:
        """Archive the transcript, mark the ticket closed and delete its channel after ``delay`` seconds."""
        delay = settings.ticket_close_delay if delay is None else delay

        await TicketService.send_ticket_transcript(channel)
        result = await Database.tickets().update_one(
            {"channel_id": channel.id, "status": "open"},
            {"$set": {"status": "closed", "closed_at": datetime.utcnow(), "closed_by": closed_by_user_id}}
        )
        if result.modified_count == 0:
            logger.warning(f"No open ticket document for channel {channel.id}")

        await asyncio.sleep(delay)
        try:
            await channel.delete(reason=f"Ticket closed by {closed_by_user_id}")
        except discord.HTTPException as e:
            logger.error(f"Failed to delete ticket channel {channel.id}: {e}")
            return False

        logger.info(f"Ticket channel {channel.id} closed by {closed_by_user_id}")
        return True
