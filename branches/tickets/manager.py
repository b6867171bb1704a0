"""
Ticket Manager
Ticket lifecycle: open, form submission, close, and startup reconciliation.

Each user can hold at most one ticket. A placeholder entry is reserved
before the first await so two near-simultaneous opens by the same user
cannot both create a channel.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Set

import discord

from constants import MODAL_TEXT_INPUT_VALUE_MAX
from utils import sanitize_text

from .categories import CategoryProvisioner
from .helpers import (
    TicketSettings,
    TicketType,
    TicketTypeConfig,
    sanitize_username,
    split_channel_name,
    ticket_channel_name,
)
from .modals import TicketFormModal
from .views import TicketControlView, build_application_embed, build_opening_embed

logger = logging.getLogger(__name__)

ALREADY_OPEN = "❌ You already have an open ticket!"
TYPE_UNAVAILABLE = "❌ That ticket type is not available."
CATEGORY_UNAVAILABLE = "❌ Could not find or recreate the ticket category."
CREATE_FAILED = "❌ Failed to create ticket channel. Please try again later."
NOT_A_TICKET = "❌ This can only be used inside a ticket."
ALREADY_CLOSING = "⏳ This ticket is already closing."
CLOSING = "✅ Closing this ticket..."


@dataclass(frozen=True)
class OpenTicket:
    user_id: int
    ticket_type: TicketType
    # None while the channel is still being created
    channel_id: Optional[int] = None


async def _reply(interaction: discord.Interaction, content: str):
    """Send an ephemeral reply whether or not the interaction was deferred."""
    if interaction.response.is_done():
        await interaction.followup.send(content, ephemeral=True)
    else:
        await interaction.response.send_message(content, ephemeral=True)


class TicketManager:
    """Sole owner of the user -> open ticket mapping."""

    def __init__(self, provisioner: CategoryProvisioner, settings: TicketSettings):
        self.provisioner = provisioner
        self.settings = settings
        self._tickets: Dict[int, OpenTicket] = {}
        self._closing: Set[int] = set()

    @property
    def open_tickets(self) -> Dict[int, OpenTicket]:
        return dict(self._tickets)

    def ticket_for(self, user_id: int) -> Optional[OpenTicket]:
        return self._tickets.get(user_id)

    # ------------------------------------------------------------------
    # Opening
    # ------------------------------------------------------------------

    async def open(self, interaction: discord.Interaction, ticket_type: TicketType):
        """Open a ticket of ``ticket_type`` for the interacting user, or show its form."""
        if interaction.user.id in self._tickets:
            await _reply(interaction, ALREADY_OPEN)
            return

        type_config = self.settings.types.get(ticket_type)
        if type_config is None:
            await _reply(interaction, TYPE_UNAVAILABLE)
            return

        if type_config.requires_form:
            await interaction.response.send_modal(TicketFormModal(type_config))
            return

        embed = build_opening_embed(interaction.user, type_config, self.settings.open_color)
        await self._create_ticket(interaction, type_config, embed)

    async def submit_form(self, interaction: discord.Interaction, ticket_type: TicketType, answers: List[str]):
        """Create a form-gated ticket whose first message shows the submitted answers."""
        if interaction.user.id in self._tickets:
            await _reply(interaction, ALREADY_OPEN)
            return

        type_config = self.settings.types.get(ticket_type)
        if type_config is None or not type_config.requires_form:
            await _reply(interaction, TYPE_UNAVAILABLE)
            return

        answers = [sanitize_text(answer, max_length=MODAL_TEXT_INPUT_VALUE_MAX, strip=False) for answer in answers]
        embed = build_application_embed(interaction.user, type_config, answers, self.settings.application_color)
        await self._create_ticket(interaction, type_config, embed, follow_up=type_config.follow_up)

    async def _create_ticket(
        self,
        interaction: discord.Interaction,
        type_config: TicketTypeConfig,
        embed: discord.Embed,
        follow_up: str = "",
    ):
        user = interaction.user
        self._tickets[user.id] = OpenTicket(user.id, type_config.ticket_type)

        channel = None
        try:
            channel = await self._provision_channel(interaction, type_config, embed, follow_up)
        finally:
            if channel is None:
                self._tickets.pop(user.id, None)

        if channel is None:
            return

        self._tickets[user.id] = OpenTicket(user.id, type_config.ticket_type, channel.id)
        logger.info(f"Opened {type_config.ticket_type.value} ticket {channel.id} for {user} ({user.id})")

        await interaction.followup.send(f"✅ Your ticket has been created: {channel.mention}", ephemeral=True)

    async def _provision_channel(
        self,
        interaction: discord.Interaction,
        type_config: TicketTypeConfig,
        embed: discord.Embed,
        follow_up: str,
    ) -> Optional[discord.TextChannel]:
        """Create and greet the ticket channel. Replies to the user and returns None on failure."""
        guild = interaction.guild
        user = interaction.user

        await interaction.response.defer(ephemeral=True, thinking=True)

        category = await self.provisioner.resolve(guild, type_config.ticket_type)
        if category is None:
            logger.error(f"No category available for {type_config.ticket_type.value} tickets")
            await interaction.followup.send(CATEGORY_UNAVAILABLE, ephemeral=True)
            return None

        channel = None
        try:
            channel = await guild.create_text_channel(
                name=ticket_channel_name(type_config.ticket_type, user.name),
                category=category,
                overwrites=self._build_overwrites(guild, user, type_config),
                reason=f"{type_config.label} ticket for {user}",
            )
            await channel.send(embed=embed, view=TicketControlView())
            if follow_up:
                await channel.send(follow_up)
        except discord.HTTPException as e:
            logger.error(f"Error creating ticket channel for {user} ({user.id}): {e}")
            if channel is not None:
                await self._discard_channel(channel)
            await interaction.followup.send(CREATE_FAILED, ephemeral=True)
            return None

        return channel

    def _build_overwrites(self, guild: discord.Guild, user: discord.abc.User, type_config: TicketTypeConfig):
        """Hide the channel from everyone except the opener, the policy role and the owner role."""
        allow = discord.PermissionOverwrite(view_channel=True, send_messages=True)
        overwrites = {
            guild.default_role: discord.PermissionOverwrite(view_channel=False),
            user: allow,
        }

        role_ids = dict.fromkeys([
            self.settings.role_id_for(type_config.role_policy),
            self.settings.owner_role_id,
        ])
        for role_id in role_ids:
            role = guild.get_role(role_id)
            if role is None:
                logger.warning(f"Role {role_id} not cached, granting by ID")
                role = discord.Object(id=role_id, type=discord.Role)
            overwrites[role] = allow

        return overwrites

    async def _discard_channel(self, channel: discord.abc.GuildChannel):
        try:
            await channel.delete(reason="Ticket setup failed")
        except discord.HTTPException as e:
            logger.error(f"Failed to delete half-created ticket channel {channel.id}: {e}")

    # ------------------------------------------------------------------
    # Closing
    # ------------------------------------------------------------------

    async def close(self, interaction: discord.Interaction):
        """Close the ticket channel the interaction came from."""
        channel = interaction.channel
        if channel is None or getattr(channel, "category_id", None) is None:
            await _reply(interaction, NOT_A_TICKET)
            return

        if channel.id in self._closing:
            await _reply(interaction, ALREADY_CLOSING)
            return

        self._closing.add(channel.id)
        try:
            ticket = self._remove_by_channel(channel.id)
            await interaction.response.send_message(CLOSING, ephemeral=True)
            logger.info(f"Ticket {channel.name} ({channel.id}) closed by {interaction.user} ({interaction.user.id})")

            opener = await self._resolve_opener(interaction.guild, channel, ticket)
            if opener is None:
                logger.info(f"No opener found to notify for ticket {channel.name}")
            elif not await self._notify_closed(opener, channel.name):
                logger.info(f"Closed ticket {channel.name} without notifying {opener} (DM undeliverable)")

            await asyncio.sleep(self.settings.close_delay)
            try:
                await channel.delete(reason=f"Ticket closed by {interaction.user}")
            except discord.HTTPException as e:
                logger.error(f"Failed to delete ticket channel {channel.id}: {e}")
        finally:
            self._closing.discard(channel.id)

    def _remove_by_channel(self, channel_id: int) -> Optional[OpenTicket]:
        for user_id, ticket in self._tickets.items():
            if ticket.channel_id == channel_id:
                return self._tickets.pop(user_id)
        return None

    async def _resolve_opener(
        self,
        guild: discord.Guild,
        channel: discord.abc.GuildChannel,
        ticket: Optional[OpenTicket],
    ) -> Optional[discord.Member]:
        if ticket is not None:
            member = guild.get_member(ticket.user_id)
            if member is not None:
                return member
            try:
                return await guild.fetch_member(ticket.user_id)
            except discord.HTTPException as e:
                logger.debug(f"Could not fetch ticket opener {ticket.user_id}: {e}")
                return None

        # Untracked channel (e.g. opened before a restart): match on the name suffix
        _, suffix = split_channel_name(channel.name)
        if not suffix:
            return None
        return discord.utils.find(lambda m: sanitize_username(m.name) == suffix, guild.members)

    async def _notify_closed(self, member: discord.abc.User, channel_name: str) -> bool:
        """DM the opener that their ticket closed. Returns False if the DM could not be delivered."""
        try:
            await member.send(f"✅ Your ticket (**{channel_name}**) has been closed.")
        except discord.HTTPException as e:
            logger.debug(f"Could not notify {member} about closed ticket {channel_name}: {e}")
            return False
        return True

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------

    def reconcile(self, guild: discord.Guild) -> int:
        """
        Rebuild entries for ticket channels that survived a restart.

        Looks at text channels under the registered ticket categories and
        takes the opener from the member overwrite that allows viewing and
        matches the name suffix of the channel.
        Existing entries are never replaced. Returns how many were restored.
        """
        category_ids = set(self.provisioner.registry.values())
        tracked_channels = {t.channel_id for t in self._tickets.values()}
        restored = 0

        for channel in guild.text_channels:
            if channel.category_id not in category_ids or channel.id in tracked_channels:
                continue

            ticket_type, _ = split_channel_name(channel.name)
            if ticket_type is None:
                continue

            user_id = self._opener_from_overwrites(guild, channel)
            if user_id is None or user_id in self._tickets:
                continue

            self._tickets[user_id] = OpenTicket(user_id, ticket_type, channel.id)
            restored += 1

        if restored:
            logger.info(f"Restored {restored} open ticket(s) from existing channels")
        return restored

    @staticmethod
    def _opener_from_overwrites(guild: discord.Guild, channel: discord.abc.GuildChannel) -> Optional[int]:
        # Staff may hold member overwrites too; only the member the channel is named after counts
        _, suffix = split_channel_name(channel.name)
        if not suffix:
            return None
        for target, overwrite in channel.overwrites.items():
            if not overwrite.view_channel:
                continue
            member = guild.get_member(target.id)
            if member is not None and sanitize_username(member.name) == suffix:
                return member.id
        return None
