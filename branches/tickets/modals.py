"""
Ticket System Modals
Pre-submission forms for form-gated ticket types.
"""

import discord
import logging
from typing import Any, Dict, List

from constants import (
    MODAL_TEXT_INPUT_LABEL_MAX,
    MODAL_TEXT_INPUT_PLACEHOLDER_MAX,
    MODAL_TEXT_INPUT_VALUE_MAX,
    MODAL_TITLE_MAX,
)
from .helpers import TicketTypeConfig
from .views import form_id

logger = logging.getLogger(__name__)


class TicketFormModal(discord.ui.Modal):
    """
    Questions asked before a form-gated ticket is created.

    Submission is handled by the interaction router via the modal's
    custom_id, not by ``on_submit``.
    """

    def __init__(self, type_config: TicketTypeConfig):
        super().__init__(
            title=type_config.form_title[:MODAL_TITLE_MAX],
            custom_id=form_id(type_config.ticket_type),
            timeout=None,
        )

        for i, question in enumerate(type_config.questions):
            style = discord.TextStyle.short if question.get("style") == "short" else discord.TextStyle.paragraph
            self.add_item(discord.ui.TextInput(
                label=question.get("label", f"Question {i + 1}")[:MODAL_TEXT_INPUT_LABEL_MAX],
                style=style,
                placeholder=question.get("placeholder", "")[:MODAL_TEXT_INPUT_PLACEHOLDER_MAX] or None,
                required=question.get("required", True),
                max_length=min(question.get("max_length", 1000), MODAL_TEXT_INPUT_VALUE_MAX),
                custom_id=f"q{i}",
            ))


def read_modal_answers(data: Dict[str, Any]) -> List[str]:
    """
    Pull text input values out of a raw modal-submit payload, in order.

    Handles both action-row wrapped inputs and label wrapped inputs.
    """
    answers = []
    for row in data.get("components", []):
        children = row.get("components")
        if children is None:
            child = row.get("component")
            children = [child] if child else []

        for component in children:
            if "value" in component:
                answers.append(component.get("value") or "")

    return answers
