import asyncio
import itertools
import os
from types import SimpleNamespace

# config.py reads these at import time
os.environ.setdefault("DISCORD_TOKEN", "test-token")
os.environ.setdefault("TICKET_SETUP_CHANNEL_ID", "1000")
os.environ.setdefault("SUPPORT_ROLE_ID", "100")
os.environ.setdefault("OWNER_ROLE_ID", "200")
os.environ["GUILD_ID"] = "0"

import discord
import pytest

from branches.tickets.categories import CategoryProvisioner
from branches.tickets.helpers import DEFAULT_CONFIG, build_ticket_settings
from branches.tickets.manager import TicketManager
from utils import merge_config

SUPPORT_ROLE_ID = 100
OWNER_ROLE_ID = 200

_ids = itertools.count(5000)


def http_error(cls=discord.Forbidden, status=403, reason="Forbidden"):
    return cls(SimpleNamespace(status=status, reason=reason), "Missing Permissions")


class FakeRole:
    def __init__(self, role_id, name):
        self.id = role_id
        self.name = name


class FakeMember:
    def __init__(self, member_id, name, dm_fails=False):
        self.id = member_id
        self.name = name
        self.dm_fails = dm_fails
        self.dms = []

    @property
    def mention(self):
        return f"<@{self.id}>"

    async def send(self, content=None, **kwargs):
        if self.dm_fails:
            raise http_error()
        self.dms.append(content)

    def __str__(self):
        return self.name


class FakeCategory:
    type = discord.ChannelType.category

    def __init__(self, category_id, name):
        self.id = category_id
        self.name = name


class FakeTextChannel:
    type = discord.ChannelType.text

    def __init__(self, channel_id, name, category_id=None, overwrites=None, guild=None, send_fails=False):
        self.id = channel_id
        self.name = name
        self.category_id = category_id
        self.overwrites = overwrites or {}
        self.guild = guild
        self.send_fails = send_fails
        self.messages = []
        self.deleted = False

    @property
    def mention(self):
        return f"<#{self.id}>"

    async def send(self, content=None, *, embed=None, view=None, **kwargs):
        if self.send_fails:
            raise http_error()
        self.messages.append(SimpleNamespace(content=content, embed=embed, view=view))

    async def delete(self, reason=None):
        self.deleted = True
        if self.guild is not None:
            self.guild.channels.pop(self.id, None)


class FakeGuild:
    def __init__(self, guild_id=1):
        self.id = guild_id
        self.default_role = FakeRole(guild_id, "@everyone")
        self.roles = {
            SUPPORT_ROLE_ID: FakeRole(SUPPORT_ROLE_ID, "Support"),
            OWNER_ROLE_ID: FakeRole(OWNER_ROLE_ID, "Owner"),
        }
        self._members = {}
        self.channels = {}
        self.fail_categories = set()
        self.fail_channel_create = False
        self.fail_channel_send = False
        self.category_creations = 0

    # members / roles
    def add_member(self, member):
        self._members[member.id] = member
        return member

    @property
    def members(self):
        return list(self._members.values())

    def get_member(self, member_id):
        return self._members.get(member_id)

    async def fetch_member(self, member_id):
        member = self._members.get(member_id)
        if member is None:
            raise http_error(discord.NotFound, 404, "Not Found")
        return member

    def get_role(self, role_id):
        return self.roles.get(role_id)

    # channels
    @property
    def categories(self):
        return [c for c in self.channels.values() if c.type == discord.ChannelType.category]

    @property
    def text_channels(self):
        return [c for c in self.channels.values() if c.type == discord.ChannelType.text]

    def get_channel(self, channel_id):
        return self.channels.get(channel_id)

    def add_category(self, name):
        category = FakeCategory(next(_ids), name)
        self.channels[category.id] = category
        return category

    async def create_category(self, name, reason=None):
        await asyncio.sleep(0)
        if name in self.fail_categories:
            raise http_error()
        self.category_creations += 1
        return self.add_category(name)

    async def create_text_channel(self, name, category=None, overwrites=None, reason=None):
        await asyncio.sleep(0)
        if self.fail_channel_create:
            raise http_error()
        channel = FakeTextChannel(
            next(_ids), name,
            category_id=category.id if category else None,
            overwrites=overwrites,
            guild=self,
            send_fails=self.fail_channel_send,
        )
        self.channels[channel.id] = channel
        return channel


class FakeResponse:
    def __init__(self):
        self._done = False
        self.messages = []
        self.modal = None
        self.deferred = False

    def is_done(self):
        return self._done

    async def send_message(self, content=None, ephemeral=False, **kwargs):
        self._done = True
        self.messages.append(content)

    async def defer(self, ephemeral=False, thinking=False):
        self._done = True
        self.deferred = True

    async def send_modal(self, modal):
        self._done = True
        self.modal = modal


class FakeFollowup:
    def __init__(self):
        self.messages = []

    async def send(self, content=None, ephemeral=False, **kwargs):
        self.messages.append(content)


class FakeInteraction:
    def __init__(self, user, guild, channel=None, interaction_type=discord.InteractionType.component, data=None):
        self.user = user
        self.guild = guild
        self.channel = channel
        self.type = interaction_type
        self.data = data or {}
        self.response = FakeResponse()
        self.followup = FakeFollowup()

    @property
    def replies(self):
        """Everything sent back to the user, in order."""
        return self.response.messages + self.followup.messages


def make_settings(overrides=None):
    config = merge_config(DEFAULT_CONFIG, {"settings": {"close_delay_seconds": 0}})
    if overrides:
        config = merge_config(config, overrides)
    return build_ticket_settings(config, SUPPORT_ROLE_ID, OWNER_ROLE_ID)


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def guild():
    return FakeGuild()


@pytest.fixture
def alice(guild):
    return guild.add_member(FakeMember(11, "Alice"))


@pytest.fixture
def bob(guild):
    return guild.add_member(FakeMember(12, "Bob"))


@pytest.fixture
def provisioner(settings):
    return CategoryProvisioner(settings.category_pairs())


@pytest.fixture
def manager(provisioner, settings):
    return TicketManager(provisioner, settings)
