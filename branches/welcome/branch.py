import discord
from discord.ext import commands
from pathlib import Path
import logging
from typing import Dict, Any

from config import GUILD_ID, WELCOME_CHANNEL_ID, WELCOME_ROLE_ID

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = {
    "enabled": True,
    "version": "1.0.0",
    "settings": {
        "embed": {
            "title": "🎉 Welcome to the Server!",
            "description": "Welcome {mention} to the server!\nWe're glad to have you here.",
            "color": 0x00FF00,
        }
    }
}


class Welcome(commands.Cog):
    """Auto role and welcome message for new members."""

    def __init__(self, bot: commands.Bot, role_id: int = WELCOME_ROLE_ID, channel_id: int = WELCOME_CHANNEL_ID) -> None:
        self.bot = bot
        self.role_id = role_id
        self.channel_id = channel_id

        self.config = self.load_config()
        embed_settings = self.config.get("settings", {}).get("embed", {})
        self.embed_title: str = embed_settings.get("title", DEFAULT_CONFIG["settings"]["embed"]["title"])
        self.embed_description: str = embed_settings.get("description", DEFAULT_CONFIG["settings"]["embed"]["description"])
        self.embed_color: int = embed_settings.get("color", DEFAULT_CONFIG["settings"]["embed"]["color"])

        logger.info("Welcome branch initialized")

    def load_config(self) -> Dict[str, Any]:
        """Load config from config.yml in this branch's folder."""
        from utils import load_branch_config
        config_path = Path(__file__).parent / "config.yml"
        return load_branch_config(config_path, DEFAULT_CONFIG, "Welcome")

    def build_embed(self, member: discord.Member) -> discord.Embed:
        embed = discord.Embed(
            title=self.embed_title,
            description=self.embed_description.format(mention=member.mention, name=member.display_name),
            color=self.embed_color
        )
        embed.set_thumbnail(url=member.display_avatar.url)
        return embed

    @commands.Cog.listener()
    async def on_member_join(self, member: discord.Member) -> None:
        if GUILD_ID and member.guild.id != GUILD_ID:
            return

        if self.role_id:
            role = member.guild.get_role(self.role_id)
            if role is None:
                logger.error(f"Welcome role {self.role_id} not found")
            else:
                try:
                    await member.add_roles(role, reason="Welcome role")
                except discord.HTTPException as e:
                    logger.error(f"Error assigning welcome role to {member}: {e}")

        if not self.channel_id:
            return

        channel = self.bot.get_channel(self.channel_id)
        if not isinstance(channel, discord.abc.Messageable):
            logger.warning(f"Welcome channel {self.channel_id} not found")
            return

        try:
            await channel.send(embed=self.build_embed(member))
        except discord.HTTPException as e:
            logger.error(f"Failed to send welcome message for {member}: {e}")
