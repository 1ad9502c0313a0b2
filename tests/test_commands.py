"""Exercise slash-command callbacks through a dummy command tree."""

import asyncio
import types
from pathlib import Path

import discord

from roster_bot.adapters.base import INSIGHTS_UNAVAILABLE, RosterSource
from roster_bot.bot import _auto_sync_members, attach_store
from roster_bot.commands import register
from roster_bot.core.models import ExternalMember, GroupMetadata, GroupRank, MetricKind
from roster_bot.core.storage import JSONStorage
from roster_bot.data.store import NOT_LOGGED_IN, RosterStore
from roster_bot.ui.modals import GrantModal
from roster_bot.ui.views import StaffDetailView


class StaticSource(RosterSource):
    def __init__(self) -> None:
        self.members = [
            ExternalMember(external_id=1, display_name="Alice", external_rank_id=255),
            ExternalMember(external_id=2, display_name="Bob", external_rank_id=1),
        ]

    async def fetch_group_ranks(self, group_id):
        return GroupMetadata(
            group_name="Cafe",
            ranks=[
                GroupRank(external_rank_id=255, name="Owner"),
                GroupRank(external_rank_id=1, name="Member"),
            ],
        )

    async def fetch_group_members(self, group_id, page_size=25):
        return list(self.members)


class DummyTree:
    def command(self, *args, **kwargs):
        def deco(func):
            setattr(self, func.__name__, func)
            return func
        return deco


class DummyBot:
    def __init__(self):
        self.tree = DummyTree()
        self.log = types.SimpleNamespace(
            info=lambda *a, **k: None, warning=lambda *a, **k: None
        )


class Response:
    def __init__(self):
        self.messages = []
        self.deferred = False
        self.modal = None

    async def send_message(self, content=None, *, embed=None, view=None, ephemeral=False):
        self.messages.append({"content": content, "embed": embed, "view": view})

    async def defer(self, ephemeral=False, thinking=False):
        self.deferred = True

    async def send_modal(self, modal):
        self.modal = modal


class Interaction:
    def __init__(self):
        self.user = types.SimpleNamespace(id=1, name="admin")
        self.response = Response()
        self.edited = None

    async def edit_original_response(self, content=None, view=None):
        self.edited = content

    @property
    def last(self):
        return self.response.messages[-1]


def make_console(tmp_path: Path):
    store = RosterStore(JSONStorage(tmp_path / "data.json"), StaticSource())
    bot = DummyBot()
    register.register_commands(bot, store)
    return bot.tree, store


def Choice(value):
    return discord.app_commands.Choice(name=value.title(), value=value)


def test_mutating_commands_require_login(tmp_path: Path) -> None:
    tree, store = make_console(tmp_path)

    async def scenario():
        inter = Interaction()
        await tree.link_group(inter, "42")
        assert inter.last["content"] == NOT_LOGGED_IN
        inter = Interaction()
        await tree.sync(inter)
        assert inter.last["content"] == NOT_LOGGED_IN
        inter = Interaction()
        await tree.grant_cmd(inter, "Alice", Choice("points"), 5)
        assert inter.last["content"] == NOT_LOGGED_IN

    asyncio.run(scenario())
    assert store.roster == []


def test_link_sync_grant_and_stats(tmp_path: Path) -> None:
    tree, store = make_console(tmp_path)

    async def scenario():
        inter = Interaction()
        await tree.login(inter, "pw")
        assert inter.last["content"] == "Logged in as `admin`."

        inter = Interaction()
        await tree.link_group(inter, "42")
        assert inter.response.deferred is True
        assert inter.edited.startswith("Linked **Cafe** with 2 ranks")
        assert len(store.roster) == 2

        inter = Interaction()
        await tree.sync(inter)
        assert inter.edited == "Roster is up to date; no new members."

        store.source.members.append(
            ExternalMember(external_id=3, display_name="Carol", external_rank_id=1)
        )
        inter = Interaction()
        await tree.sync(inter)
        assert inter.edited == "Added 1 staff: Carol"

        inter = Interaction()
        await tree.grant_cmd(inter, "alice", Choice("points"), 1500)
        assert inter.last["content"] == "Granted 1500 points to Alice."

        inter = Interaction()
        await tree.grant_cmd(inter, "alice", Choice("points"), -3)
        assert inter.last["content"] == "Amount must be a positive whole number."

        inter = Interaction()
        await tree.grant_cmd(inter, "nobody", Choice("minutes"), 3)
        assert inter.last["content"] == "Staff member not found."

        inter = Interaction()
        await tree.stats(inter)
        embed = inter.last["embed"]
        fields = {f.name: f.value for f in embed.fields}
        assert fields["Total staff"] == "3"
        assert fields["Pending promotions"] == "1"
        assert fields["Points issued today"] == "1500"

    asyncio.run(scenario())


def test_staff_view_and_grant_modal(tmp_path: Path) -> None:
    tree, store = make_console(tmp_path)

    async def scenario():
        store.login("admin", "pw")
        await store.link_group("42")

        inter = Interaction()
        await tree.staff_view(inter, "Bob")
        message = inter.last
        assert message["embed"].title == "Bob"
        assert isinstance(message["view"], StaffDetailView)

        bob = store.find_staff("Bob")
        modal = GrantModal(store, bob.id, MetricKind.MINUTES)
        modal.amount_input._value = "30"
        inter = Interaction()
        await modal.on_submit(inter)
        assert inter.last["content"] == "Granted 30 minutes to Bob."
        assert store.get_staff(bob.id).total_minutes == 30

        for raw in ("abc", "--5", "5²", ""):
            modal.amount_input._value = raw
            inter = Interaction()
            await modal.on_submit(inter)
            assert inter.last["content"] == "Amount must be a positive whole number."
        assert store.get_staff(bob.id).total_minutes == 30

    asyncio.run(scenario())


def test_rank_mapping_commands(tmp_path: Path) -> None:
    tree, store = make_console(tmp_path)

    async def scenario():
        inter = Interaction()
        await tree.rank_mappings(inter)
        assert "No group linked" in inter.last["embed"].description

        store.login("admin", "pw")
        await store.link_group("42")

        inter = Interaction()
        await tree.map_rank(inter, 1, "junior_staff")
        assert inter.last["content"].startswith("Rank 1 now maps to Junior Staff.")

        inter = Interaction()
        await tree.map_rank(inter, 99, "junior_staff")
        assert inter.last["content"] == "No mapping for rank 99."

        inter = Interaction()
        await tree.rank_mappings(inter)
        assert "Member → Junior Staff" in inter.last["embed"].description

    asyncio.run(scenario())


def test_shift_commands(tmp_path: Path) -> None:
    tree, store = make_console(tmp_path)

    async def scenario():
        store.login("admin", "pw")
        await store.link_group("42")

        inter = Interaction()
        await tree.shift_start(inter, "Alice")
        assert inter.last["content"] == "Alice is now on shift."

        inter = Interaction()
        await tree.shift_end(inter, "Alice")
        assert inter.last["content"].startswith("Alice clocked out.")

        inter = Interaction()
        await tree.shift_end(inter, "Alice")
        assert inter.last["content"] == "Alice is not on shift."

    asyncio.run(scenario())


def test_busy_store_refuses_second_sync(tmp_path: Path) -> None:
    tree, store = make_console(tmp_path)

    async def scenario():
        store.login("admin", "pw")
        store.loading = True
        inter = Interaction()
        await tree.sync(inter)
        assert inter.last["content"] == register.BUSY

    asyncio.run(scenario())


def test_auto_sync_task(tmp_path: Path) -> None:
    _, store = make_console(tmp_path)
    bot = DummyBot()
    attach_store(store)

    # not linked yet: nothing happens
    asyncio.run(_auto_sync_members(bot))
    assert store.roster == []

    store.login("admin", "pw")
    asyncio.run(store.link_group("42"))
    store.source.members.append(
        ExternalMember(external_id=9, display_name="Zed", external_rank_id=1)
    )
    asyncio.run(_auto_sync_members(bot))
    assert [r.display_name for r in store.roster][-1] == "Zed"


def test_insights_without_narrator(tmp_path: Path) -> None:
    tree, store = make_console(tmp_path)

    async def scenario():
        store.login("admin", "pw")
        inter = Interaction()
        await tree.insights(inter)
        assert inter.last["content"] == "Connect a group to enable intelligence analytics."

        await store.link_group("42")
        inter = Interaction()
        await tree.insights(inter)
        assert inter.response.deferred
        assert inter.edited == INSIGHTS_UNAVAILABLE

    asyncio.run(scenario())
