from __future__ import annotations

import discord

from ..core.models import MetricKind
from ..data.store import RosterStore


class GrantModal(discord.ui.Modal, title="Grant Metric"):
    def __init__(self, store: RosterStore, staff_id: str, kind: MetricKind) -> None:
        super().__init__()
        self.store = store
        self.staff_id = staff_id
        self.kind = kind
        self.amount_input = discord.ui.TextInput(
            label=f"Amount of {kind.value}",
            style=discord.TextStyle.short,
            placeholder="e.g. 50",
            required=True,
            max_length=7,
        )
        self.add_item(self.amount_input)

    async def on_submit(self, interaction: discord.Interaction) -> None:
        try:
            amount = int(self.amount_input.value.strip())
        except ValueError:
            await interaction.response.send_message(
                "Amount must be a positive whole number.", ephemeral=True
            )
            return
        err = self.store.grant_metric(self.staff_id, self.kind, amount)
        if err:
            await interaction.response.send_message(err, ephemeral=True)
            return
        record = self.store.get_staff(self.staff_id)
        name = record.display_name if record else "staff member"
        await interaction.response.send_message(
            f"Granted {amount} {self.kind.value} to {name}.", ephemeral=True
        )
