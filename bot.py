"""
Birch - A Discord support ticket and welcome bot
"""

import discord
from discord.ext import commands
from config import DISCORD_TOKEN, PORT
from constants import LOG_FORMAT, LOG_DATE_FORMAT
import logging
import sys
from datetime import datetime
from pathlib import Path

logs_dir = Path("logs")
logs_dir.mkdir(exist_ok=True)

logging.basicConfig(
    level=logging.INFO,
    format=LOG_FORMAT,
    datefmt=LOG_DATE_FORMAT,
    handlers=[
        logging.FileHandler(logs_dir / f'birch_{datetime.now().strftime("%Y%m%d")}.log', encoding="utf-8"),
        logging.StreamHandler(sys.stdout)
    ]
)

logging.getLogger('discord').setLevel(logging.WARNING)
logging.getLogger('discord.http').setLevel(logging.WARNING)

logger = logging.getLogger(__name__)

intents = discord.Intents.default()
intents.guilds = True            # Required for channels, categories and roles
intents.members = True           # Required for member joins and member lookups

REQUIRED_INTENTS = {
    "guilds": "Required for accessing guild channels and roles",
    "members": "Required for welcome messages and ticket opener lookups"
}

for intent_name, reason in REQUIRED_INTENTS.items():
    if not getattr(intents, intent_name, False):
        logger.error(f"Missing required intent: {intent_name}")
        logger.error(f"Reason: {reason}")
        logger.error("Please enable this intent in the Discord Developer Portal:")
        logger.error("https://discord.com/developers/applications")
        sys.exit(1)


class Birch(commands.Bot):
    """Birch - ticket and welcome bot."""

    def __init__(self):
        super().__init__(command_prefix=commands.when_mentioned, intents=intents, help_command=None)
        self.health_runner = None

    async def setup_hook(self):
        from core.health import start_health_server

        try:
            self.health_runner = await start_health_server(PORT)

            logger.info("Loading branches...")
            await self.load_branches()

            logger.info("Birch setup complete!")
        except Exception as e:
            logger.critical(f"Failed to setup Birch: {e}", exc_info=True)
            raise

    async def load_branches(self):
        """Load every enabled branch, generating configs on first run."""
        from core.branch_loader import get_branch_loader

        loader = get_branch_loader()
        branch_names = loader.discover_branches()

        loaded_branches = []
        failed_branches = []

        logger.info(f"Discovered {len(branch_names)} branches")

        for branch_name in branch_names:
            try:
                config = loader.load_config(branch_name)

                if not config.get("enabled", True):
                    logger.info(f"⏭️  Skipped {branch_name} (disabled in config)")
                    continue

                await self.load_extension(loader.get_load_path(branch_name))
                loaded_branches.append(branch_name)
                logger.info(f"✅ Loaded branch: {branch_name}")

            except commands.ExtensionError as e:
                failed_branches.append((branch_name, str(e)))
                logger.error(f"❌ Failed to load branch {branch_name}: {e}", exc_info=True)

        logger.info(f"Loaded {len(loaded_branches)}/{len(branch_names)} branches: {', '.join(loaded_branches)}")

        for branch_name, error in failed_branches:
            logger.warning(f"  - {branch_name}: {error}")

    async def on_ready(self):
        logger.info(f"🟢 Logged in as {self.user} (ID: {self.user.id})")
        logger.info(f"Connected to {len(self.guilds)} guild(s)")

    async def on_error(self, event_method: str, *args, **kwargs):
        logger.error(f"Error in {event_method}", exc_info=True)

    async def close(self):
        if self.health_runner is not None:
            await self.health_runner.cleanup()
        await super().close()


def main():
    try:
        logger.info("Starting Birch...")
        bot = Birch()
        bot.run(DISCORD_TOKEN, log_handler=None)  # We handle logging ourselves
    except KeyboardInterrupt:
        logger.info("Birch shutting down...")
    except Exception as e:
        logger.critical(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)

if __name__ == "__main__":
    main()
