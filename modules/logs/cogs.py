import discord
from discord.ext import commands
from loguru import logger

from modules.logs.service import WebhookLogService


class WebhookLogsCog(commands.Cog):
    def __init__(self, bot: commands.Bot):
        self.bot = bot

    @commands.Cog.listener()
    async def on_message(self, message: discord.Message):
        if not WebhookLogService.should_log(message):
            return
        try:
            await WebhookLogService.append(message.content)
        except OSError as e:
            logger.error(f"Failed to append webhook message {message.id}: {e}")


async def setup(bot):
    await bot.add_cog(WebhookLogsCog(bot))
