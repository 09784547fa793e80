import discord
from discord.ext import commands
from discord import app_commands
from core.logger import setup_logger
from modules.tickets.ui import get_ticket_panel_embed, TicketPanelView, TicketControlView

logger = setup_logger("tickets_cog")


class TicketsCog(commands.Cog):
    def __init__(self, bot):
        self.bot = bot

    async def cog_load(self) -> None:
        # Persistent views so buttons keep working across restarts
        self.bot.add_view(TicketPanelView())
        self.bot.add_view(TicketControlView())
        logger.info(f"Loaded {TicketsCog.__name__} views")

    @app_commands.command(name="ticket_panel", description="Post the ticket creation panel")
    @app_commands.guild_only()
    @app_commands.checks.has_permissions(administrator=True)
    async def ticket_panel(self, interaction: discord.Interaction, channel: discord.TextChannel = None):
        channel = channel or interaction.channel
        try:
            await channel.send(embed=get_ticket_panel_embed(), view=TicketPanelView())
        except discord.HTTPException as e:
            logger.error(f"Error sending ticket menu: {e}")
            await interaction.response.send_message("There was an error creating the ticket menu.", ephemeral=True)
            return

        await interaction.response.send_message(f"Ticket panel posted in {channel.mention}", ephemeral=True)


async def setup(bot):
    await bot.add_cog(TicketsCog(bot))
