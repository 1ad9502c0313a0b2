"""Discord bot hosting the roster commands and the periodic member sync."""

from __future__ import annotations

from typing import Any

import discord
from discord.ext import commands, tasks

from .data.store import RosterStore
from .logging_config import setup_logging


class RosterBot(commands.Bot):
    """Small ``discord.py`` based bot used as the roster's operator console."""

    background_task: tasks.Loop | None

    def __init__(self, **kwargs: Any) -> None:  # pragma: no cover - trivial
        """Initialize the bot with the minimal intents required."""
        intents = kwargs.pop("intents", None) or discord.Intents.default()
        # Slash commands and components only; message content is not read.
        intents.message_content = False
        self.auto_sync_minutes: int = kwargs.pop("auto_sync_minutes", 0)
        super().__init__(
            command_prefix=kwargs.pop("command_prefix", "!"),
            intents=intents,
        )
        self.log = setup_logging()
        self.background_task = None

    async def setup_hook(self) -> None:
        """Start the auto-sync loop and sync slash commands."""
        if self.auto_sync_minutes > 0:
            self.background_task = tasks.loop(
                minutes=float(self.auto_sync_minutes), reconnect=True
            )(_auto_sync_members)
            self.background_task.start(self)

        tree = getattr(self, "tree", None)
        if tree is not None:  # pragma: no cover - exercised in integration
            await tree.sync()

        await super().setup_hook()

    async def on_ready(self) -> None:  # pragma: no cover - requires discord
        """Log a short confirmation once the bot connected successfully."""
        await self.change_presence(activity=discord.Game(name="Staff Roster"))
        self.log.info(
            "Logged in as %s (%s)",
            self.user,
            self.user.id if self.user else "?",
        )


class _StoreHolder:
    """Simple indirection so the store can be attached after creation."""

    store: RosterStore | None = None


STORE_HOLDER = _StoreHolder()


def attach_store(store: RosterStore) -> None:
    """Attach a store so background tasks can access it."""
    STORE_HOLDER.store = store


async def _auto_sync_members(bot: RosterBot) -> None:
    """Background task importing new members of the linked group."""
    store = STORE_HOLDER.store
    if not store or store.session is None or not store.group.is_connected:
        return
    if store.loading:
        bot.log.info("Skipping auto-sync: a sync is already running")
        return
    outcome = await store.sync_members()
    if outcome.error:
        bot.log.warning("Auto-sync failed: %s", outcome.error)
    elif outcome.added:
        bot.log.info("Auto-sync added %d staff", len(outcome.added))


__all__ = [
    "RosterBot",
    "attach_store",
    "_auto_sync_members",
]
