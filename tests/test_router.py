from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from branches.tickets.helpers import TicketType
from branches.tickets.modals import read_modal_answers
from branches.tickets.router import ActionKind, InteractionRouter, Route, resolve_route
from branches.tickets.views import (
    CLOSE_CUSTOM_ID,
    MENU_CUSTOM_ID,
    TicketPanelView,
    form_id,
    open_button_id,
)

from conftest import FakeInteraction, FakeMember, make_settings

COMPONENT = discord.InteractionType.component
MODAL = discord.InteractionType.modal_submit


@pytest.fixture
def ticket_manager():
    manager = MagicMock()
    manager.open = AsyncMock()
    manager.close = AsyncMock()
    manager.submit_form = AsyncMock()
    return manager


@pytest.fixture
def router(ticket_manager):
    return InteractionRouter(ticket_manager)


def interaction_for(interaction_type, data):
    return FakeInteraction(FakeMember(11, "Alice"), guild=None, interaction_type=interaction_type, data=data)


def modal_payload(custom_id, values):
    return {
        "custom_id": custom_id,
        "components": [
            {"type": 1, "components": [{"type": 4, "custom_id": f"q{i}", "value": value}]}
            for i, value in enumerate(values)
        ],
    }


def test_resolve_route_table():
    assert resolve_route(COMPONENT, MENU_CUSTOM_ID, ["support"]) == Route(ActionKind.OPEN, TicketType.SUPPORT)
    assert resolve_route(COMPONENT, open_button_id(TicketType.JOIN_TEAM)) == Route(ActionKind.OPEN, TicketType.JOIN_TEAM)
    assert resolve_route(COMPONENT, CLOSE_CUSTOM_ID) == Route(ActionKind.CLOSE)
    assert resolve_route(MODAL, form_id(TicketType.JOIN_STAFF)) == Route(ActionKind.SUBMIT_FORM, TicketType.JOIN_STAFF)


def test_resolve_route_ignores_unknown_events():
    assert resolve_route(COMPONENT, "some-other-button") is None
    assert resolve_route(COMPONENT, MENU_CUSTOM_ID, ["pizza"]) is None
    assert resolve_route(COMPONENT, MENU_CUSTOM_ID, []) is None
    assert resolve_route(COMPONENT, None) is None
    # same tag, wrong interaction kind
    assert resolve_route(MODAL, CLOSE_CUSTOM_ID) is None
    assert resolve_route(COMPONENT, form_id(TicketType.JOIN_STAFF)) is None


async def test_menu_selection_opens_ticket(router, ticket_manager):
    interaction = interaction_for(COMPONENT, {"custom_id": MENU_CUSTOM_ID, "values": ["contact_owner"]})

    assert await router.dispatch(interaction)

    ticket_manager.open.assert_awaited_once_with(interaction, TicketType.CONTACT_OWNER)
    ticket_manager.close.assert_not_awaited()


async def test_type_button_opens_ticket(router, ticket_manager):
    interaction = interaction_for(COMPONENT, {"custom_id": open_button_id(TicketType.SUPPORT)})

    await router.dispatch(interaction)

    ticket_manager.open.assert_awaited_once_with(interaction, TicketType.SUPPORT)


async def test_close_button_closes_ticket(router, ticket_manager):
    interaction = interaction_for(COMPONENT, {"custom_id": CLOSE_CUSTOM_ID})

    await router.dispatch(interaction)

    ticket_manager.close.assert_awaited_once_with(interaction)
    ticket_manager.open.assert_not_awaited()


async def test_form_submission_passes_answers(router, ticket_manager):
    answers = ["19", "UTC", "Why not", "Yes", "5"]
    interaction = interaction_for(MODAL, modal_payload(form_id(TicketType.JOIN_STAFF), answers))

    await router.dispatch(interaction)

    ticket_manager.submit_form.assert_awaited_once_with(interaction, TicketType.JOIN_STAFF, answers)


async def test_unrelated_interactions_are_ignored(router, ticket_manager):
    command = interaction_for(discord.InteractionType.application_command, {"name": "ping"})
    other = interaction_for(COMPONENT, {"custom_id": "verify-button"})

    assert not await router.dispatch(command)
    assert not await router.dispatch(other)

    ticket_manager.open.assert_not_awaited()
    ticket_manager.close.assert_not_awaited()
    ticket_manager.submit_form.assert_not_awaited()


def test_read_modal_answers_handles_label_components():
    data = {"components": [
        {"type": 18, "component": {"type": 4, "custom_id": "q0", "value": "first"}},
        {"type": 1, "components": [{"type": 4, "custom_id": "q1", "value": "second"}]},
    ]}

    assert read_modal_answers(data) == ["first", "second"]


async def test_panel_menu_lists_enabled_types():
    settings = make_settings({"settings": {"ticket_types": {"join_staff": {"enabled": False}}}})

    view = TicketPanelView(settings, {"style": "menu"})

    (select,) = view.children
    assert select.custom_id == MENU_CUSTOM_ID
    assert [option.value for option in select.options] == ["join_team", "support", "contact_owner"]


async def test_panel_buttons_one_per_type():
    settings = make_settings()

    view = TicketPanelView(settings, {"style": "buttons"})

    assert [item.custom_id for item in view.children] == [open_button_id(t) for t in settings.types]
