"""
Tickets Branch - Main Module
Channel-based support tickets: panel setup and interaction hook.
"""

import discord
from discord.ext import commands
import logging

from config import GUILD_ID, OWNER_ROLE_ID, SUPPORT_ROLE_ID, TICKET_SETUP_CHANNEL_ID
from constants import PANEL_HISTORY_LIMIT

from .categories import CategoryProvisioner
from .helpers import DEFAULT_CONFIG, build_ticket_settings, get_tickets_config
from .manager import TicketManager
from .router import InteractionRouter
from .views import TicketPanelView, build_panel_embed

logger = logging.getLogger(__name__)

__all__ = ["Tickets", "DEFAULT_CONFIG"]


class Tickets(commands.Cog):
    """Private per-user ticket channels opened from a panel."""

    def __init__(self, bot: commands.Bot):
        self.bot = bot
        self.config = get_tickets_config()
        self.panel_config = self.config.get("settings", {}).get("panel", {})
        self.panel_channel_id = TICKET_SETUP_CHANNEL_ID

        self.settings = build_ticket_settings(self.config, SUPPORT_ROLE_ID, OWNER_ROLE_ID)
        if not self.settings.types:
            logger.error("No ticket types enabled in tickets config")

        self.provisioner = CategoryProvisioner(self.settings.category_pairs())
        self.manager = TicketManager(self.provisioner, self.settings)
        self.router = InteractionRouter(self.manager)

        # on_ready fires again after reconnects; setup only runs once
        self._setup_done = False

        logger.info(f"Tickets branch initialized ({len(self.settings.types)} ticket types)")

    def get_guild(self):
        if GUILD_ID:
            return self.bot.get_guild(GUILD_ID)
        return self.bot.guilds[0] if self.bot.guilds else None

    @commands.Cog.listener()
    async def on_ready(self):
        if self._setup_done:
            return
        self._setup_done = True

        guild = self.get_guild()
        if guild is None:
            logger.error("Bot must be in at least one server, skipping ticket setup")
            return

        await self.provisioner.ensure(guild)
        self.manager.reconcile(guild)
        await self.create_panel()

    async def create_panel(self):
        """Replace the ticket panel in the setup channel."""
        channel = self.bot.get_channel(self.panel_channel_id)
        if not isinstance(channel, discord.TextChannel):
            logger.error(f"Ticket setup channel {self.panel_channel_id} not found")
            return

        if not self.settings.types:
            logger.error("No ticket types enabled, not posting the ticket panel")
            return

        title = self.panel_config.get("title")
        try:
            async for message in channel.history(limit=PANEL_HISTORY_LIMIT):
                if message.author.id == self.bot.user.id and message.embeds and message.embeds[0].title == title:
                    await message.delete()
                    logger.info(f"Deleted old panel message {message.id}")
        except discord.HTTPException as e:
            logger.warning(f"Failed to clean up old panel: {e}")

        try:
            await channel.send(
                embed=build_panel_embed(self.panel_config),
                view=TicketPanelView(self.settings, self.panel_config)
            )
        except discord.HTTPException as e:
            logger.error(f"Failed to send ticket panel: {e}")
            return

        logger.info("🎟️ Ticket panel successfully sent!")

    @commands.Cog.listener()
    async def on_interaction(self, interaction: discord.Interaction):
        await self.router.dispatch(interaction)
