import discord
from discord import app_commands
from discord.ext import commands

from core.config import settings
from core.embed_builder import embed_builder, error_embed
from core.logger import setup_logger
from modules.generator.models import GeneratorError
from modules.generator.services import GeneratorService

logger = setup_logger("generator_cog")


class GeneratorCog(commands.Cog):
    def __init__(self, bot, service: GeneratorService = None):
        self.bot = bot
        self.service = service or GeneratorService.from_settings()

    async def tier_autocomplete(self, interaction: discord.Interaction, current: str) -> list[app_commands.Choice[str]]:
        return [
            app_commands.Choice(name=tier, value=tier)
            for tier in self.service.tiers
            if current.lower() in tier.lower()
        ][:25]

    def _redemption_embed(self, code: str, timestamp: str) -> discord.Embed:
        steps = "**Follow these steps to redeem your code:**\n"
        if settings.gen_redeem_link:
            steps += f"Step 1: Click on this [LINK]({settings.gen_redeem_link}), complete the steps and register with your Discord nickname.\n"
        steps += "Step 2: Go to the ticket channel\nStep 3: Open a **Code** ticket\nStep 4: Send this code to staff:"
        return embed_builder(
            title="G3N",
            description=steps,
            color=discord.Color.green(),
            fields=[("Code", f"```{code}```", False)],
            footer=(f"Generated by G3N • {timestamp}", None),
        )

    @app_commands.command(name="gen", description="Generate a code for a stocked service")
    @app_commands.guild_only()
    @app_commands.describe(tier="Generator tier", service="Service name")
    @app_commands.autocomplete(tier=tier_autocomplete)
    async def gen(self, interaction: discord.Interaction, tier: str, service: str):
        try:
            channel_id = self.service.channel_for(tier)
        except GeneratorError as e:
            await interaction.response.send_message(embed=error_embed(e.title, str(e), interaction.user), ephemeral=True)
            return

        if interaction.channel_id != channel_id:
            await interaction.response.send_message(
                embed=error_embed(
                    "Wrong command usage!",
                    f"You cannot use `/gen {tier}` in this channel! Try it in <#{channel_id}>!",
                    interaction.user,
                ),
                ephemeral=True,
            )
            return

        try:
            generated = await self.service.generate(tier, service, interaction.user.id)
        except GeneratorError as e:
            await interaction.response.send_message(embed=error_embed(e.title, str(e), interaction.user))
            return

        formatted_time = generated.generated_at.strftime("%Y-%m-%d %H:%M:%S")
        try:
            await interaction.user.send(embed=self._redemption_embed(generated.code, formatted_time))
        except discord.HTTPException as e:
            logger.error(f"Failed to send DM to {interaction.user}: {e}")

        embed = embed_builder(
            title="Account generated successfully!",
            description=f"Check your private messages {interaction.user.mention}! If you do not receive the message, please unlock your DMs!",
            color=discord.Color.green(),
            footer=(str(interaction.user), interaction.user.display_avatar.url),
            timestamp=True,
        )
        await interaction.response.send_message(embed=embed)

    @app_commands.command(name="stock", description="Show how many codes are left in a tier")
    @app_commands.guild_only()
    @app_commands.autocomplete(tier=tier_autocomplete)
    async def stock(self, interaction: discord.Interaction, tier: str):
        try:
            counts = await self.service.stock(tier)
        except GeneratorError as e:
            await interaction.response.send_message(embed=error_embed(e.title, str(e), interaction.user), ephemeral=True)
            return

        desc = "\n".join(f"**{name}**: {count}" for name, count in counts.items())
        embed = embed_builder(
            title=f"📦 {tier.capitalize()} stock",
            description=desc or "No services stocked.",
            color=discord.Color.purple(),
        )
        await interaction.response.send_message(embed=embed)


async def setup(bot):
    await bot.add_cog(GeneratorCog(bot))
