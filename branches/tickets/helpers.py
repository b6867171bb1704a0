"""
Ticket System Helper Functions
Ticket types, settings and shared utility functions.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from constants import CHANNEL_NAME_MAX, MODAL_MAX_INPUTS
from utils import load_branch_config

logger = logging.getLogger(__name__)


DEFAULT_CONFIG = {
    "enabled": True,
    "version": "1.0.0",
    "settings": {
        # Seconds between the close acknowledgement and channel deletion
        "close_delay_seconds": 2,

        "panel": {
            "title": "🎫 Open a Ticket",
            "description": "Please select the type of ticket you'd like to open:",
            "placeholder": "Choose a ticket type...",
            # "menu" shows a dropdown, "buttons" shows one button per ticket type
            "style": "menu",
            "color": 0x0099FF,
        },

        "ui": {
            "colors": {
                "open": 0x2ECC71,
                "application": 0x5865F2,
            },
        },

        "ticket_types": {
            "join_team": {
                "enabled": True,
                "label": "Join Team",
                "description": "Apply to join the team.",
                "emoji": "👥",
                "category_name": "Join Team Tickets",
                "role_policy": "support",
                "button_style": "primary",
            },
            "support": {
                "enabled": True,
                "label": "Support",
                "description": "Get help with something.",
                "emoji": "🛠️",
                "category_name": "Support Tickets",
                "role_policy": "support",
                "button_style": "success",
            },
            "contact_owner": {
                "enabled": True,
                "label": "Contact Owner",
                "description": "Speak directly to management.",
                "emoji": "👑",
                "category_name": "Contact Owner Tickets",
                "role_policy": "owner",
                "button_style": "danger",
            },
            "join_staff": {
                "enabled": True,
                "label": "Join Staff",
                "description": "Apply for a staff position.",
                "emoji": "📝",
                "category_name": "Join Staff Tickets",
                "role_policy": "support",
                "button_style": "secondary",
                "form": {
                    "title": "Staff Application",
                    "questions": [
                        {"label": "How old are you?", "style": "short", "max_length": 10},
                        {"label": "What timezone are you in?", "style": "short", "max_length": 50},
                        {"label": "Why do you want to join the staff?", "max_length": 1000},
                        {"label": "Do you have previous staff experience?", "max_length": 1000},
                        {"label": "How many hours a week can you help?", "style": "short", "max_length": 100},
                    ],
                    # Sent as a second message in the new channel, e.g. a link to an assessment
                    "follow_up": "",
                },
            },
        },
    },
}


class TicketType(str, Enum):
    JOIN_TEAM = "join_team"
    SUPPORT = "support"
    CONTACT_OWNER = "contact_owner"
    JOIN_STAFF = "join_staff"

    @property
    def tag(self) -> str:
        """Prefix used in ticket channel names."""
        return self.value


class RolePolicy(str, Enum):
    """Which configured role gets access to a ticket type's channels."""
    SUPPORT = "support"
    OWNER = "owner"


@dataclass(frozen=True)
class TicketTypeConfig:
    ticket_type: TicketType
    label: str
    description: str
    emoji: Optional[str]
    category_name: str
    role_policy: RolePolicy
    button_style: str = "primary"
    form_title: str = ""
    questions: Tuple[Dict[str, Any], ...] = ()
    follow_up: str = ""

    @property
    def requires_form(self) -> bool:
        return bool(self.questions)


@dataclass
class TicketSettings:
    """Resolved ticket settings: role IDs from .env plus the branch config."""
    support_role_id: int
    owner_role_id: int
    types: Dict[TicketType, TicketTypeConfig] = field(default_factory=dict)
    close_delay: float = 2
    open_color: int = 0x2ECC71
    application_color: int = 0x5865F2

    def role_id_for(self, policy: RolePolicy) -> int:
        if policy is RolePolicy.OWNER:
            return self.owner_role_id
        return self.support_role_id

    def category_pairs(self) -> List[Tuple[str, TicketType]]:
        """(display name, ticket type) for every enabled type, in panel order."""
        return [(cfg.category_name, ticket_type) for ticket_type, cfg in self.types.items()]


def get_config_path() -> Path:
    return Path(__file__).parent / "config.yml"


def get_tickets_config() -> Dict[str, Any]:
    """Load tickets config from config.yml, merged over the defaults."""
    return load_branch_config(get_config_path(), DEFAULT_CONFIG, "Tickets")


def _parse_ticket_type(key: str, raw: Dict[str, Any]) -> Optional[TicketTypeConfig]:
    try:
        ticket_type = TicketType(key)
    except ValueError:
        logger.warning(f"Unknown ticket type '{key}' in config, skipping")
        return None

    try:
        role_policy = RolePolicy(raw.get("role_policy", "support"))
    except ValueError:
        logger.warning(f"Ticket type '{key}' has invalid role_policy {raw.get('role_policy')!r}, using support")
        role_policy = RolePolicy.SUPPORT

    form = raw.get("form") or {}
    questions = tuple(form.get("questions", [])[:MODAL_MAX_INPUTS])

    return TicketTypeConfig(
        ticket_type=ticket_type,
        label=raw.get("label", key.replace("_", " ").title()),
        description=raw.get("description", ""),
        emoji=raw.get("emoji") or None,
        category_name=raw.get("category_name", f"{key.replace('_', ' ').title()} Tickets"),
        role_policy=role_policy,
        button_style=raw.get("button_style", "primary"),
        form_title=form.get("title", "Application"),
        questions=questions,
        follow_up=form.get("follow_up", "") or "",
    )


def build_ticket_settings(config: Dict[str, Any], support_role_id: int, owner_role_id: int) -> TicketSettings:
    """
    Build TicketSettings from a tickets config dict.

    Disabled and unknown ticket types are left out.
    """
    settings = config.get("settings", {})
    colors = settings.get("ui", {}).get("colors", {})

    types = {}
    for key, raw in settings.get("ticket_types", {}).items():
        if not raw or not raw.get("enabled", True):
            continue
        type_config = _parse_ticket_type(key, raw)
        if type_config:
            types[type_config.ticket_type] = type_config

    return TicketSettings(
        support_role_id=support_role_id,
        owner_role_id=owner_role_id,
        types=types,
        close_delay=settings.get("close_delay_seconds", 2),
        open_color=colors.get("open", 0x2ECC71),
        application_color=colors.get("application", 0x5865F2),
    )


def sanitize_username(name: str) -> str:
    """
    Make a username safe for a channel name.

    Every character outside [a-z0-9] (case-insensitive) becomes ``-``,
    then the result is lowercased: ``"Alice.B"`` -> ``"alice-b"``.
    """
    return re.sub(r'[^a-z0-9]', '-', name, flags=re.IGNORECASE).lower()


def ticket_channel_name(ticket_type: TicketType, username: str) -> str:
    return f"{ticket_type.tag}-{sanitize_username(username)}"[:CHANNEL_NAME_MAX]


def split_channel_name(name: str) -> Tuple[Optional[TicketType], str]:
    """
    Split a ticket channel name into its ticket type and username suffix.

    Returns (None, "") if the name does not start with a known type tag.
    """
    for ticket_type in sorted(TicketType, key=lambda t: len(t.tag), reverse=True):
        prefix = f"{ticket_type.tag}-"
        if name.startswith(prefix) and len(name) > len(prefix):
            return ticket_type, name[len(prefix):]
    return None, ""
