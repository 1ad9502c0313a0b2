from __future__ import annotations

import discord

from ..core.models import HRMStats, MetricKind, StaffAnalysis, StaffRecord
from ..data.store import RosterStore
from .modals import GrantModal

LOG_PREVIEW = 5


def staff_embed(store: RosterStore, record: StaffRecord) -> discord.Embed:
    e = discord.Embed(
        title=record.display_name,
        description=f"{store.role_label(record.internal_role_id)} · {record.status.value}",
        color=discord.Color.green() if record.is_active_session else discord.Color.blurple(),
    )
    if record.avatar_ref:
        e.set_thumbnail(url=record.avatar_ref)
    e.add_field(name="Points", value=str(record.total_points), inline=True)
    e.add_field(name="Minutes", value=str(record.total_minutes), inline=True)
    e.add_field(name="Shifts", value=str(record.shifts_completed), inline=True)
    e.add_field(
        name="On shift", value="Yes" if record.is_active_session else "No", inline=True
    )
    e.add_field(name="Joined", value=record.joined_date.isoformat(), inline=True)
    e.add_field(name="Roblox ID", value=str(record.external_id), inline=True)
    if record.logs:
        lines = [
            f"`{log.date.isoformat()}` [{log.kind.value}] {log.description} (by {log.issued_by})"
            for log in record.logs[:LOG_PREVIEW]
        ]
        e.add_field(name="Recent activity", value="\n".join(lines)[:1024], inline=False)
    else:
        e.add_field(name="Recent activity", value="No activity logged.", inline=False)
    e.set_footer(text=f"Staff ID {record.id}")
    return e


def stats_embed(stats: HRMStats, group_name: str = "") -> discord.Embed:
    e = discord.Embed(
        title=f"Dashboard: {group_name}" if group_name else "Dashboard",
        color=discord.Color.blurple(),
    )
    e.add_field(name="Total staff", value=str(stats.total_staff), inline=True)
    e.add_field(name="Active now", value=str(stats.active_now), inline=True)
    e.add_field(
        name="Points issued today", value=str(stats.points_issued_today), inline=True
    )
    e.add_field(
        name="Pending promotions", value=str(stats.pending_promotions), inline=True
    )
    e.add_field(
        name="Minutes this week (est.)",
        value=f"{stats.total_minutes_this_week:.0f}",
        inline=True,
    )
    return e


def roster_embed(store: RosterStore, limit: int = 25) -> discord.Embed:
    e = discord.Embed(
        title=f"Staff of {store.group.group_name}" if store.group.group_name else "Staff",
        color=discord.Color.blurple(),
    )
    for record in store.roster[:limit]:
        marker = "🟢 " if record.is_active_session else ""
        e.add_field(
            name=f"{marker}{record.display_name}",
            value=(
                f"{store.role_label(record.internal_role_id)}\n"
                f"Points: {record.total_points} | Minutes: {record.total_minutes}"
            ),
            inline=True,
        )
    if len(store.roster) > limit:
        e.set_footer(text=f"Showing {limit} of {len(store.roster)} staff members")
    return e


def mappings_embed(store: RosterStore) -> discord.Embed:
    e = discord.Embed(title="Rank mappings", color=discord.Color.blurple())
    if not store.table:
        e.description = "No group linked yet. Use `/link_group`."
        return e
    lines = [
        f"`{m.external_rank_id:>3}` {m.label} → {store.role_label(m.internal_role_id)}"
        for m in store.table
    ]
    e.description = "\n".join(lines)[:4000]
    e.set_footer(text="Unmapped ranks use the last entry.")
    return e


def analysis_embed(record: StaffRecord, analysis: StaffAnalysis) -> discord.Embed:
    e = discord.Embed(
        title=f"AI analysis: {record.display_name}",
        description=analysis.summary[:4000],
        color=discord.Color.purple(),
    )
    e.add_field(name="Recommendation", value=analysis.recommendation[:1024], inline=False)
    e.add_field(
        name="Potential", value=f"{analysis.potential_rating:.1f}/10", inline=True
    )
    e.add_field(name="Sentiment", value=analysis.sentiment[:1024], inline=True)
    return e


class StaffDetailView(discord.ui.View):
    def __init__(self, store: RosterStore, staff_id: str) -> None:
        super().__init__(timeout=300)
        self.store = store
        self.staff_id = staff_id

    @discord.ui.button(label="Grant Points", style=discord.ButtonStyle.primary)
    async def grant_points(
        self, interaction: discord.Interaction, button: discord.ui.Button
    ) -> None:
        await interaction.response.send_modal(
            GrantModal(self.store, self.staff_id, MetricKind.POINTS)
        )

    @discord.ui.button(label="Grant Minutes", style=discord.ButtonStyle.secondary)
    async def grant_minutes(
        self, interaction: discord.Interaction, button: discord.ui.Button
    ) -> None:
        await interaction.response.send_modal(
            GrantModal(self.store, self.staff_id, MetricKind.MINUTES)
        )

    @discord.ui.button(label="AI Analysis", style=discord.ButtonStyle.success)
    async def analyze(
        self, interaction: discord.Interaction, button: discord.ui.Button
    ) -> None:
        await interaction.response.defer(ephemeral=True, thinking=True)
        record = self.store.get_staff(self.staff_id)
        if record is None:
            await interaction.followup.send("Staff member not found.", ephemeral=True)
            return
        analysis = await self.store.analyze_staff(self.staff_id)
        if analysis is None:
            await interaction.followup.send(
                "AI analysis is unavailable right now.", ephemeral=True
            )
            return
        await interaction.followup.send(
            embed=analysis_embed(record, analysis), ephemeral=True
        )
