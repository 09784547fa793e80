import discord
from discord import Interaction
from discord.ui import View, Select
from pymongo.errors import PyMongoError

from core.config import settings
from core.embed_builder import embed_builder
from core.logger import setup_logger
from modules.tickets.models import TICKET_CATEGORIES
from modules.tickets.services import TicketService

logger = setup_logger("ticket_ui")


def get_ticket_panel_embed() -> discord.Embed:
    return embed_builder(
        title="🎫 Create a Support Ticket",
        description="Please select a category from the dropdown menu below to create a ticket.",
        color=discord.Color.blue(),
        footer=("G3N Support", None),
    )


class TicketCategorySelect(Select):
    def __init__(self):
        options = [
            discord.SelectOption(label=name, description=description, value=name, emoji=emoji)
            for name, (emoji, description) in TICKET_CATEGORIES.items()
        ]
        super().__init__(
            custom_id="ticket_menu",
            placeholder="Select ticket category",
            min_values=1,
            max_values=1,
            options=options,
        )

    async def callback(self, interaction: Interaction):
        category = self.values[0]
        await interaction.response.defer(ephemeral=True)

        try:
            ticket, status = await TicketService.create_ticket(
                user=interaction.user, guild=interaction.guild, category=category
            )
        except discord.HTTPException as e:
            logger.error(f"Error creating ticket channel: {e}")
            await interaction.followup.send(f"❌ Error creating ticket: {e}", ephemeral=True)
            return
        except PyMongoError as e:
            logger.error(f"Database error creating ticket: {e}")
            await interaction.followup.send("❌ Could not save your ticket, please try again later.", ephemeral=True)
            return

        if status == "no_category":
            await interaction.followup.send("Ticket category not found! Please ask an admin to check the config.", ephemeral=True)
            return

        channel = interaction.guild.get_channel(ticket.channel_id)
        if status == "exists":
            await interaction.followup.send(f"You already have an open ticket: {channel.mention}", ephemeral=True)
            return

        embed = embed_builder(
            title=f"{category} Support Ticket",
            description=f"Welcome {interaction.user.mention}!\nSupport will be with you shortly.\n\nCategory: {category}",
            color=discord.Color.blue(),
            timestamp=True,
        )
        await channel.send(embed=embed, view=TicketControlView())
        await interaction.followup.send(f"Ticket created! Please check {channel.mention}", ephemeral=True)


class TicketPanelView(View):
    def __init__(self):
        super().__init__(timeout=None)
        self.add_item(TicketCategorySelect())


class TicketControlView(View):
    def __init__(self):
        super().__init__(timeout=None)

    @discord.ui.button(label="Close Ticket", style=discord.ButtonStyle.red, emoji="🔒", custom_id="close_ticket")
    async def close_ticket_btn(self, interaction: Interaction, button: discord.ui.Button):
        await interaction.response.send_message(f"Closing ticket in {settings.ticket_close_delay} seconds...")
        await TicketService.close_ticket(channel=interaction.channel, closed_by_user_id=interaction.user.id)
