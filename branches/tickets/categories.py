"""
Ticket Category Provisioner
Makes sure every ticket type has a channel category to live under.
"""

import asyncio
import logging
from typing import Dict, List, Optional, Tuple

import discord

from .helpers import TicketType

logger = logging.getLogger(__name__)


class CategoryProvisioner:
    """
    Owns the ticket type -> category ID registry.

    Cached IDs are only a hint: an administrator can delete a category at any
    time, so ``resolve`` re-checks the guild before trusting them.
    """

    def __init__(self, categories: List[Tuple[str, TicketType]]):
        self._categories = list(categories)
        self._registry: Dict[TicketType, int] = {}
        self._lock = asyncio.Lock()

    @property
    def registry(self) -> Dict[TicketType, int]:
        return dict(self._registry)

    async def ensure(self, guild: discord.Guild) -> Dict[TicketType, int]:
        """
        Find or create a category for every configured ticket type.

        Names match case-insensitively, so repeated calls never create
        duplicates. A failed creation is logged and skipped; the other
        categories are still provisioned.
        """
        async with self._lock:
            for name, ticket_type in self._categories:
                category = discord.utils.find(
                    lambda c: c.name.lower() == name.lower(),
                    guild.categories
                )

                if category is None:
                    try:
                        category = await guild.create_category(name, reason="Ticket category")
                        logger.info(f"✅ Created category: {name}")
                    except discord.HTTPException as e:
                        logger.error(f"❌ Could not create category '{name}': {e}")
                        continue

                self._registry[ticket_type] = category.id

            return dict(self._registry)

    def _cached_category(self, guild: discord.Guild, ticket_type: TicketType) -> Optional[discord.CategoryChannel]:
        category_id = self._registry.get(ticket_type)
        if category_id is None:
            return None

        channel = guild.get_channel(category_id)
        if channel is None or channel.type != discord.ChannelType.category:
            return None
        return channel

    async def resolve(self, guild: discord.Guild, ticket_type: TicketType) -> Optional[discord.CategoryChannel]:
        """Return the live category for ``ticket_type``, re-provisioning once if it is gone."""
        category = self._cached_category(guild, ticket_type)
        if category is not None:
            return category

        logger.info(f"Category for {ticket_type.value} missing, refreshing")
        await self.ensure(guild)
        return self._cached_category(guild, ticket_type)
