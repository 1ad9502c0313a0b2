from __future__ import annotations

import discord

from ..data.store import RosterStore

MAX_CHOICES = 25


def staff_choices(
    store: RosterStore, current: str
) -> list[discord.app_commands.Choice[str]]:
    """Autocomplete choices for staff whose name contains ``current``."""
    current_lower = current.lower()
    return [
        discord.app_commands.Choice(
            name=f"{r.display_name} ({store.role_label(r.internal_role_id)})"[:100],
            value=r.id,
        )
        for r in store.roster
        if current_lower in r.display_name.lower()
    ][:MAX_CHOICES]


def role_choices(
    store: RosterStore, current: str
) -> list[discord.app_commands.Choice[str]]:
    current_lower = current.lower()
    return [
        discord.app_commands.Choice(name=store.role_label(role_id), value=role_id)
        for role_id in store.registry
        if current_lower in role_id or current_lower in store.role_label(role_id).lower()
    ][:MAX_CHOICES]
