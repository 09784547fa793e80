import asyncio
from pathlib import Path

import discord

from core.config import settings


class WebhookLogService:

    @staticmethod
    def should_log(message: discord.Message) -> bool:
        if not settings.verified_channel_id:
            return False
        return message.webhook_id is not None and message.channel.id == settings.verified_channel_id

    @staticmethod
    def _append(path: Path, content: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as f:
            f.write(f"{content}\n")

    @staticmethod
    async def append(content: str, path: str = None) -> None:
        await asyncio.to_thread(WebhookLogService._append, Path(path or settings.verified_log_file), content)
