"""
Interaction Router
Maps inbound component and modal interactions to ticket manager operations.

The panel, close button and form carry no callbacks and are never passed to
``bot.add_view``; every click and submission arrives through ``on_interaction``
and is routed here by custom id, so panels posted before a restart keep working.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Sequence, Tuple

import discord

from .helpers import TicketType
from .manager import TicketManager
from .modals import read_modal_answers
from .views import CLOSE_CUSTOM_ID, MENU_CUSTOM_ID, form_id, open_button_id

logger = logging.getLogger(__name__)


class ActionKind(Enum):
    OPEN = "open"
    CLOSE = "close"
    SUBMIT_FORM = "submit_form"


@dataclass(frozen=True)
class Route:
    kind: ActionKind
    # None means "take the type from the selected menu value"
    ticket_type: Optional[TicketType] = None


def _build_routes() -> Dict[Tuple[discord.InteractionType, str], Route]:
    component = discord.InteractionType.component
    routes = {
        (component, MENU_CUSTOM_ID): Route(ActionKind.OPEN),
        (component, CLOSE_CUSTOM_ID): Route(ActionKind.CLOSE),
    }
    for ticket_type in TicketType:
        routes[(component, open_button_id(ticket_type))] = Route(ActionKind.OPEN, ticket_type)
        routes[(discord.InteractionType.modal_submit, form_id(ticket_type))] = Route(ActionKind.SUBMIT_FORM, ticket_type)
    return routes


ROUTES = _build_routes()


def resolve_route(
    interaction_type: discord.InteractionType,
    custom_id: Optional[str],
    values: Sequence[str] = (),
) -> Optional[Route]:
    """
    Find the route for an interaction, or None if it is not ours.

    Menu routes are completed with the ticket type from the selected value;
    an unknown value yields None.
    """
    if not custom_id:
        return None

    route = ROUTES.get((interaction_type, custom_id))
    if route is None or route.kind is not ActionKind.OPEN or route.ticket_type is not None:
        return route

    if not values:
        return None
    try:
        return Route(ActionKind.OPEN, TicketType(values[0]))
    except ValueError:
        logger.warning(f"Ignoring unknown ticket menu value: {values[0]!r}")
        return None


class InteractionRouter:
    """Dispatches exactly one ticket manager operation per matching interaction."""

    def __init__(self, manager: TicketManager):
        self.manager = manager
        self._handlers = {
            ActionKind.OPEN: self._handle_open,
            ActionKind.CLOSE: self._handle_close,
            ActionKind.SUBMIT_FORM: self._handle_submit_form,
        }

    async def dispatch(self, interaction: discord.Interaction) -> bool:
        """Handle the interaction if it is a ticket interaction. Returns True if handled."""
        if interaction.type not in (discord.InteractionType.component, discord.InteractionType.modal_submit):
            return False

        data = interaction.data or {}
        route = resolve_route(interaction.type, data.get("custom_id"), data.get("values") or ())
        if route is None:
            return False

        await self._handlers[route.kind](interaction, route)
        return True

    async def _handle_open(self, interaction: discord.Interaction, route: Route):
        await self.manager.open(interaction, route.ticket_type)

    async def _handle_close(self, interaction: discord.Interaction, route: Route):
        await self.manager.close(interaction)

    async def _handle_submit_form(self, interaction: discord.Interaction, route: Route):
        answers = read_modal_answers(interaction.data or {})
        await self.manager.submit_form(interaction, route.ticket_type, answers)
