"""
Ticket System Views
Discord UI components and embeds for the ticket panel and ticket channels.

Components here carry no callbacks: every interaction they produce is
routed by custom_id in router.py, so they keep working across restarts.
"""

import discord
import logging
from typing import Any, Dict, List

from constants import (
    BUTTON_LABEL_MAX,
    EMBED_FIELD_NAME_MAX,
    SELECT_MAX_OPTIONS,
    SELECT_OPTION_DESCRIPTION_MAX,
    SELECT_OPTION_LABEL_MAX,
    truncate_for_embed_field,
)
from .helpers import TicketSettings, TicketType, TicketTypeConfig

logger = logging.getLogger(__name__)

MENU_CUSTOM_ID = "ticket-menu"
CLOSE_CUSTOM_ID = "close-ticket"
OPEN_BUTTON_PREFIX = "ticket-open:"
FORM_PREFIX = "ticket-form:"

BUTTON_STYLES = {
    "primary": discord.ButtonStyle.primary,
    "secondary": discord.ButtonStyle.secondary,
    "success": discord.ButtonStyle.success,
    "danger": discord.ButtonStyle.danger,
    "blurple": discord.ButtonStyle.primary,
    "grey": discord.ButtonStyle.secondary,
    "gray": discord.ButtonStyle.secondary,
    "green": discord.ButtonStyle.success,
    "red": discord.ButtonStyle.danger,
}


def open_button_id(ticket_type: TicketType) -> str:
    return f"{OPEN_BUTTON_PREFIX}{ticket_type.value}"


def form_id(ticket_type: TicketType) -> str:
    return f"{FORM_PREFIX}{ticket_type.value}"


class TicketPanelView(discord.ui.View):
    """Ticket panel: a type dropdown, or one button per ticket type."""

    def __init__(self, settings: TicketSettings, panel_config: Dict[str, Any]):
        super().__init__(timeout=None)
        type_configs = list(settings.types.values())

        if panel_config.get("style", "menu") == "buttons":
            self._build_buttons(type_configs)
        else:
            self._build_menu(type_configs, panel_config.get("placeholder", "Choose a ticket type..."))

    def _build_menu(self, type_configs: List[TicketTypeConfig], placeholder: str):
        options = [
            discord.SelectOption(
                label=cfg.label[:SELECT_OPTION_LABEL_MAX],
                value=cfg.ticket_type.value,
                description=cfg.description[:SELECT_OPTION_DESCRIPTION_MAX] or None,
                emoji=cfg.emoji,
            )
            for cfg in type_configs[:SELECT_MAX_OPTIONS]
        ]
        self.add_item(discord.ui.Select(
            custom_id=MENU_CUSTOM_ID,
            placeholder=placeholder,
            options=options,
        ))

    def _build_buttons(self, type_configs: List[TicketTypeConfig]):
        for cfg in type_configs:
            style = BUTTON_STYLES.get(cfg.button_style.lower(), discord.ButtonStyle.primary)
            self.add_item(discord.ui.Button(
                label=cfg.label[:BUTTON_LABEL_MAX],
                emoji=cfg.emoji,
                style=style,
                custom_id=open_button_id(cfg.ticket_type),
            ))


class TicketControlView(discord.ui.View):
    """Close button posted in every ticket channel."""

    def __init__(self):
        super().__init__(timeout=None)
        self.add_item(discord.ui.Button(
            label="Close Ticket",
            style=discord.ButtonStyle.danger,
            custom_id=CLOSE_CUSTOM_ID,
        ))


def build_panel_embed(panel_config: Dict[str, Any]) -> discord.Embed:
    return discord.Embed(
        title=panel_config.get("title", "🎫 Open a Ticket"),
        description=panel_config.get("description", ""),
        color=panel_config.get("color", 0x0099FF),
    )


def build_opening_embed(user: discord.abc.User, type_config: TicketTypeConfig, color: int) -> discord.Embed:
    """Greeting posted when a ticket channel is created."""
    return discord.Embed(
        title=f"📬 Ticket opened by {user.name}",
        description=(
            f"Hello {user.mention}, a staff member will assist you shortly.\n"
            f"**Type:** {type_config.label}"
        ),
        color=color,
        timestamp=discord.utils.utcnow(),
    )


def build_application_embed(
    user: discord.abc.User,
    type_config: TicketTypeConfig,
    answers: List[str],
    color: int,
) -> discord.Embed:
    """Opening message for form-gated tickets: each question with its answer."""
    embed = discord.Embed(
        title=f"📝 {type_config.form_title} from {user.name}",
        description=f"{user.mention} submitted the following answers:",
        color=color,
        timestamp=discord.utils.utcnow(),
    )

    for i, answer in enumerate(answers):
        if i < len(type_config.questions):
            label = type_config.questions[i].get("label", f"Question {i + 1}")
        else:
            label = f"Question {i + 1}"
        embed.add_field(
            name=label[:EMBED_FIELD_NAME_MAX],
            value=truncate_for_embed_field(answer) or "*No answer*",
            inline=False,
        )

    return embed
