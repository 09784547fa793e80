import datetime
from typing import Optional

import discord


def embed_builder(
        title: Optional[str] = None,
        description: str = None,
        color: discord.Color = discord.Color.red(),
        fields: list[tuple[str, str, bool]] = None,
        footer: tuple[str, Optional[str]] = None,
        thumbnail: str = None,
        image_url: str = None,
        timestamp: bool = False,
) -> discord.Embed:
    embed = discord.Embed(
        title=title,
        description=description if description else None,
        color=color,
        timestamp=datetime.datetime.utcnow() if timestamp else None,
    )
    if fields:
        for name, value, inline in fields:
            embed.add_field(name=name, value=value, inline=inline)

    if footer:
        footer_text, icon_url = footer
        embed.set_footer(text=footer_text, icon_url=icon_url)

    if thumbnail:
        embed.set_thumbnail(url=thumbnail)
    if image_url:
        embed.set_image(url=image_url)

    return embed


def error_embed(title: str, description: str, user: discord.abc.User = None) -> discord.Embed:
    """Red embed with the requesting user in the footer."""
    footer = (str(user), user.display_avatar.url) if user else None
    return embed_builder(title=title, description=description, color=discord.Color.red(), footer=footer, timestamp=True)
