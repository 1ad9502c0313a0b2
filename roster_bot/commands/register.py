"""Registration of slash commands for the bot."""

from __future__ import annotations

import discord
from discord.ext import commands

from ..data.store import NOT_LOGGED_IN, RosterStore
from ..ui.views import (
    StaffDetailView,
    mappings_embed,
    roster_embed,
    staff_embed,
    stats_embed,
)
from .utils import role_choices, staff_choices

BUSY = "A sync with Roblox is already running. Please wait for it to finish."


def register_commands(bot: commands.Bot, store: RosterStore) -> None:
    """Register bot commands with optional compatibility shims."""
    tree = bot.tree
    choices = getattr(
        discord.app_commands, "choices", lambda **_kwargs: (lambda func: func)
    )

    async def deny_if_logged_out(interaction: discord.Interaction) -> bool:
        if store.session is None:
            await interaction.response.send_message(NOT_LOGGED_IN, ephemeral=True)
            return True
        return False

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------
    @tree.command(name="login", description="Open an admin session")
    @discord.app_commands.describe(password="Admin password")
    async def login(interaction: discord.Interaction, password: str) -> None:
        err = store.login(interaction.user.name, password)
        if err:
            await interaction.response.send_message(err, ephemeral=True)
            return
        await interaction.response.send_message(
            f"Logged in as `{interaction.user.name}`.", ephemeral=True
        )

    @tree.command(name="logout", description="Close the admin session")
    async def logout(interaction: discord.Interaction) -> None:
        store.logout()
        await interaction.response.send_message("Logged out.", ephemeral=True)

    # ------------------------------------------------------------------
    # Group integration
    # ------------------------------------------------------------------
    @tree.command(name="link_group", description="Link a Roblox group and import its staff")
    @discord.app_commands.describe(group_id="Numeric Roblox group ID")
    async def link_group(interaction: discord.Interaction, group_id: str) -> None:
        if await deny_if_logged_out(interaction):
            return
        if store.loading:
            await interaction.response.send_message(BUSY, ephemeral=True)
            return
        await interaction.response.defer(ephemeral=True, thinking=True)
        err = await store.link_group(group_id)
        if err:
            await interaction.edit_original_response(content=err)
            return
        await interaction.edit_original_response(
            content=(
                f"Linked **{store.group.group_name}** with "
                f"{len(store.table)} ranks. Roster now has {len(store.roster)} staff."
            )
        )

    @tree.command(name="sync", description="Import new members from the linked group")
    async def sync(interaction: discord.Interaction) -> None:
        if await deny_if_logged_out(interaction):
            return
        if store.loading:
            await interaction.response.send_message(BUSY, ephemeral=True)
            return
        await interaction.response.defer(ephemeral=True, thinking=True)
        outcome = await store.sync_members()
        if outcome.error:
            await interaction.edit_original_response(content=outcome.error)
            return
        if not outcome.added:
            content = "Roster is up to date; no new members."
        else:
            names = ", ".join(r.display_name for r in outcome.added[:20])
            more = len(outcome.added) - 20
            content = f"Added {len(outcome.added)} staff: {names}"
            if more > 0:
                content += f" and {more} more"
        await interaction.edit_original_response(content=content)

    @tree.command(name="rank_mappings", description="Show how Roblox ranks map to roles")
    async def rank_mappings(interaction: discord.Interaction) -> None:
        await interaction.response.send_message(
            embed=mappings_embed(store), ephemeral=True
        )

    @tree.command(name="map_rank", description="Change the role a Roblox rank maps to")
    @discord.app_commands.describe(
        rank_id="Roblox rank number (0-255)", role="Internal role"
    )
    async def map_rank(interaction: discord.Interaction, rank_id: int, role: str) -> None:
        if await deny_if_logged_out(interaction):
            return
        err = store.update_mapping(rank_id, role)
        if err:
            await interaction.response.send_message(err, ephemeral=True)
            return
        await interaction.response.send_message(
            f"Rank {rank_id} now maps to {store.role_label(role)}. "
            "Existing staff keep their current role.",
            ephemeral=True,
        )

    if hasattr(map_rank, "autocomplete"):
        @map_rank.autocomplete("role")
        async def map_rank_role_autocomplete(
            interaction: discord.Interaction, current: str
        ) -> list[discord.app_commands.Choice[str]]:
            return role_choices(store, current)

    # ------------------------------------------------------------------
    # Staff
    # ------------------------------------------------------------------
    @tree.command(name="staff", description="List tracked staff")
    async def staff(interaction: discord.Interaction) -> None:
        if not store.roster:
            await interaction.response.send_message(
                "No staff yet. Use `/link_group` to import a Roblox group.",
                ephemeral=True,
            )
            return
        await interaction.response.send_message(
            embed=roster_embed(store), ephemeral=True
        )

    @tree.command(name="staff_view", description="Show a staff member's record")
    @discord.app_commands.describe(member="Staff member name or ID")
    async def staff_view(interaction: discord.Interaction, member: str) -> None:
        record = store.find_staff(member)
        if record is None:
            await interaction.response.send_message(
                "Staff member not found.", ephemeral=True
            )
            return
        view = StaffDetailView(store, record.id) if store.session else None
        await interaction.response.send_message(
            embed=staff_embed(store, record), view=view, ephemeral=True
        )

    @tree.command(name="grant", description="Grant points or minutes to a staff member")
    @discord.app_commands.describe(
        member="Staff member name or ID",
        kind="What to grant",
        amount="Positive amount",
    )
    @choices(
        kind=[
            discord.app_commands.Choice(name="Points", value="points"),
            discord.app_commands.Choice(name="Minutes", value="minutes"),
        ]
    )
    async def grant_cmd(
        interaction: discord.Interaction,
        member: str,
        kind: discord.app_commands.Choice[str],
        amount: int,
    ) -> None:
        if await deny_if_logged_out(interaction):
            return
        record = store.find_staff(member)
        if record is None:
            await interaction.response.send_message(
                "Staff member not found.", ephemeral=True
            )
            return
        err = store.grant_metric(record.id, kind.value, amount)
        if err:
            await interaction.response.send_message(err, ephemeral=True)
            return
        await interaction.response.send_message(
            f"Granted {amount} {kind.value} to {record.display_name}.",
            ephemeral=True,
        )

    @tree.command(name="shift_start", description="Clock a staff member in")
    @discord.app_commands.describe(member="Staff member name or ID")
    async def shift_start(interaction: discord.Interaction, member: str) -> None:
        if await deny_if_logged_out(interaction):
            return
        record = store.find_staff(member)
        if record is None:
            await interaction.response.send_message(
                "Staff member not found.", ephemeral=True
            )
            return
        err = store.start_shift(record.id)
        await interaction.response.send_message(
            err or f"{record.display_name} is now on shift.", ephemeral=True
        )

    @tree.command(name="shift_end", description="Clock a staff member out")
    @discord.app_commands.describe(member="Staff member name or ID")
    async def shift_end(interaction: discord.Interaction, member: str) -> None:
        if await deny_if_logged_out(interaction):
            return
        record = store.find_staff(member)
        if record is None:
            await interaction.response.send_message(
                "Staff member not found.", ephemeral=True
            )
            return
        err = store.end_shift(record.id)
        if err:
            await interaction.response.send_message(err, ephemeral=True)
            return
        updated = store.get_staff(record.id)
        await interaction.response.send_message(
            f"{record.display_name} clocked out. "
            f"Total minutes: {updated.total_minutes if updated else '?'}.",
            ephemeral=True,
        )

    for cmd in (staff_view, grant_cmd, shift_start, shift_end):
        if hasattr(cmd, "autocomplete"):
            @cmd.autocomplete("member")
            async def member_autocomplete(
                interaction: discord.Interaction, current: str
            ) -> list[discord.app_commands.Choice[str]]:
                return staff_choices(store, current)

    # ------------------------------------------------------------------
    # Dashboard
    # ------------------------------------------------------------------
    @tree.command(name="stats", description="Show dashboard figures")
    async def stats(interaction: discord.Interaction) -> None:
        await interaction.response.send_message(
            embed=stats_embed(store.stats(), store.group.group_name),
            ephemeral=True,
        )

    @tree.command(name="insights", description="AI audit of the whole staff body")
    async def insights(interaction: discord.Interaction) -> None:
        if await deny_if_logged_out(interaction):
            return
        if not store.roster:
            await interaction.response.send_message(
                "Connect a group to enable intelligence analytics.", ephemeral=True
            )
            return
        await interaction.response.defer(ephemeral=True, thinking=True)
        text = await store.workforce_insights()
        if len(text) > 1900:
            text = text[:1900] + "…"
        await interaction.edit_original_response(content=text)
