"""
Global configuration loader for Birch.
Loads environment variables from .env file.
"""
from dotenv import load_dotenv
import os
import sys

load_dotenv()

def get_env(key: str, required: bool = True, default=None):
    """Safely get environment variable with validation."""
    value = os.getenv(key, default)
    if required and value is None:
        print(f"ERROR: Missing required environment variable: {key}")
        print(f"Please add {key} to your .env file")
        sys.exit(1)
    return value

def get_env_int(key: str, required: bool = True, default=None):
    """Get environment variable as integer."""
    value = get_env(key, required, default)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        print(f"ERROR: Environment variable {key} must be a valid integer, got: {value}")
        sys.exit(1)

# ============================================================================
# Bot Configuration (from .env)
# ============================================================================
# Discord Bot Token (REQUIRED)
DISCORD_TOKEN = get_env("DISCORD_TOKEN")

PLACEHOLDER_TOKENS = ["your_bot_token_here", "your_token_here", "placeholder", ""]
if DISCORD_TOKEN in PLACEHOLDER_TOKENS:
    print("ERROR: DISCORD_TOKEN is still set to a placeholder value!")
    print("Please update your .env file with a real Discord bot token.")
    print("Get one from: https://discord.com/developers/applications")
    sys.exit(1)

# Optional: pin the bot to one server. 0 means "first guild the bot is in".
GUILD_ID = get_env_int("GUILD_ID", required=False, default=0)

# Channel where the "Open a Ticket" panel is posted
TICKET_SETUP_CHANNEL_ID = get_env_int("TICKET_SETUP_CHANNEL_ID")

# Roles allowed into ticket channels
SUPPORT_ROLE_ID = get_env_int("SUPPORT_ROLE_ID")
OWNER_ROLE_ID = get_env_int("OWNER_ROLE_ID")

# Welcome flow (0 disables the step)
WELCOME_ROLE_ID = get_env_int("WELCOME_ROLE_ID", required=False, default=0)
WELCOME_CHANNEL_ID = get_env_int("WELCOME_CHANNEL_ID", required=False, default=0)

# Liveness endpoint for uptime monitors
PORT = get_env_int("PORT", required=False, default=8080)
