"""
Global constants for Birch.

Discord API limits and framework values used throughout the bot and branches.
"""

# ============================================================================
# Discord API Limits
# ============================================================================

# Embed Limits
EMBED_FIELD_NAME_MAX = 256
EMBED_FIELD_VALUE_MAX = 1024

# Modal Limits
MODAL_TITLE_MAX = 45
MODAL_TEXT_INPUT_LABEL_MAX = 45
MODAL_TEXT_INPUT_PLACEHOLDER_MAX = 100
MODAL_TEXT_INPUT_VALUE_MAX = 4000
MODAL_MAX_INPUTS = 5

# Select Menu Limits
SELECT_OPTION_LABEL_MAX = 100
SELECT_OPTION_DESCRIPTION_MAX = 100
SELECT_MAX_OPTIONS = 25

# Button Limits
BUTTON_LABEL_MAX = 80

# Channel Name Limits
CHANNEL_NAME_MAX = 100

# ============================================================================
# Birch Framework Constants
# ============================================================================

# Branch Configuration
BRANCH_CONFIG_FILE = "config.yml"

# Logging
LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# How many recent messages to scan for an old ticket panel
PANEL_HISTORY_LIMIT = 10


def truncate_for_embed_field(text: str, suffix: str = "...") -> str:
    """
    Truncate text to fit in an embed field value.

    Args:
        text: Text to truncate
        suffix: Suffix to add if truncated (default: "...")

    Returns:
        Truncated text that fits within EMBED_FIELD_VALUE_MAX
    """
    if not text:
        return ""

    if len(text) <= EMBED_FIELD_VALUE_MAX:
        return text

    return text[:EMBED_FIELD_VALUE_MAX - len(suffix)] + suffix
