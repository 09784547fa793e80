import discord
from discord.ext import commands
from core.config import settings
from core.database import Database
from loguru import logger
import os

from modules.invite_tracker.ledger import InviterLedger
from modules.invite_tracker.resolver import AttributionResolver, ORDERINGS
from modules.invite_tracker.service import InviteTrackerService
from modules.invite_tracker.snapshot import InviteSnapshotStore
from modules.invite_tracker.source import DiscordInviteSource

# Helper files that live next to cogs but are not extensions
NON_EXTENSION_FILES = {
    "models.py", "services.py", "service.py", "ui.py", "ledger.py",
    "resolver.py", "snapshot.py", "source.py",
}


class GenBot(commands.Bot):
    def __init__(self):
        intents = discord.Intents.default()
        intents.members = True
        intents.invites = True
        intents.message_content = True

        super().__init__(
            command_prefix=commands.when_mentioned,
            intents=intents,
            help_command=None,
            owner_id=settings.owner_id
        )
        self.invite_tracker: InviteTrackerService | None = None

    async def setup_hook(self):
        """Called when bot is logging in."""
        logger.info("Starting up...")

        # Connect to Database
        await Database.connect()

        store = InviteSnapshotStore(DiscordInviteSource(self))
        self.invite_tracker = InviteTrackerService(
            store=store,
            resolver=AttributionResolver(store, ORDERINGS[settings.invite_order]),
            ledger=InviterLedger(Database.inviters()),
        )

        # Load extensions/modules
        await self.load_modules()

        # Sync slash commands
        logger.info("Syncing commands...")
        try:
            synced = await self.tree.sync()
            logger.info(f"Synced {len(synced)} command(s).")
        except discord.HTTPException as e:
            logger.error(f"Failed to sync commands: {e}")

    async def load_modules(self):
        """Load every cog under 'modules'."""
        if not os.path.exists("modules"):
            logger.warning("No 'modules' directory found, nothing to load")
            return

        for root, dirs, files in os.walk("modules"):
            for file in sorted(files):
                if not file.endswith(".py") or file.startswith("__") or file in NON_EXTENSION_FILES:
                    continue

                # Construct module path: modules.tickets.cog
                rel_path = os.path.relpath(os.path.join(root, file), ".")
                module_name = rel_path.replace(os.path.sep, ".")[:-3]

                try:
                    await self.load_extension(module_name)
                    logger.info(f"Loaded extension: {module_name}")
                except commands.NoEntryPointError:
                    pass
                except commands.ExtensionError as e:
                    logger.error(f"Failed to load extension {module_name}: {e}")

    async def on_ready(self):
        logger.info(f"Logged in as {self.user} (ID: {self.user.id})")
        await self.change_presence(activity=discord.Game(name="/gen │ G3N"))

        for guild in self.guilds:
            await self.invite_tracker.cache_guild(guild.id)

    async def on_guild_join(self, guild: discord.Guild):
        """Seed the cache when bot joins a new guild."""
        await self.invite_tracker.cache_guild(guild.id)

    async def on_guild_remove(self, guild: discord.Guild):
        self.invite_tracker.guild_removed(guild.id)

    async def on_invite_create(self, invite: discord.Invite):
        """Keep cache fresh when a new invite is created."""
        await self.invite_tracker.invite_created(invite.guild.id, invite.code, invite.uses or 0)

    async def on_invite_delete(self, invite: discord.Invite):
        """Remove deleted invite from cache to avoid stale diffs."""
        await self.invite_tracker.invite_deleted(invite.guild.id, invite.code)

    async def close(self):
        """Called when bot is shutting down."""
        logger.info("Shutting down...")
        if self.invite_tracker:
            self.invite_tracker.close()
        await Database.close()
        await super().close()
