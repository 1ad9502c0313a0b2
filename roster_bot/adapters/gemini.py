"""Gemini adapter implementing :class:`~roster_bot.adapters.base.NarrativeService`.

Requests go straight to the Generative Language REST API through
:mod:`httpx`. Every public method swallows API failures and returns the
neutral value documented on the interface, so a broken or unconfigured
model never interferes with roster updates.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from typing import Any

import httpx
from pydantic import ValidationError

from ..core.models import GroupRank, RankMapping, StaffAnalysis, StaffRecord
from ..core.roles import RoleRegistry
from .base import INSIGHTS_UNAVAILABLE, NarrativeService

log = logging.getLogger("roster.gemini")

WORKFORCE_SYSTEM_PROMPT = (
    "Strategic HR Consultant specializing in online communities."
)

_ANALYSIS_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "summary": {"type": "STRING"},
        "recommendation": {"type": "STRING"},
        "potentialRating": {"type": "NUMBER"},
        "sentiment": {"type": "STRING"},
    },
    "required": ["summary", "recommendation", "potentialRating", "sentiment"],
}

_MAPPINGS_SCHEMA = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "robloxRankId": {"type": "NUMBER"},
            "internalRole": {"type": "STRING"},
            "label": {"type": "STRING"},
        },
        "required": ["robloxRankId", "internalRole", "label"],
    },
}


class NarrativeError(Exception):
    """A Gemini request failed or produced an unusable answer."""


class GeminiAdapter(NarrativeService):
    """Adapter that asks a Gemini model for staff assessments."""

    api_base = "https://generativelanguage.googleapis.com/v1beta"

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-flash",
        client: httpx.AsyncClient | None = None,
    ) -> None:
        if not api_key:
            raise ValueError("GEMINI_API_KEY is not configured")
        self.api_key = api_key
        self.model = model
        self.client = client or httpx.AsyncClient(timeout=30)

    @property
    def url(self) -> str:
        return f"{self.api_base}/models/{self.model}:generateContent"

    # ------------------------------------------------------------------
    async def _generate(
        self,
        prompt: str,
        *,
        schema: dict[str, Any] | None = None,
        system: str | None = None,
    ) -> str:
        payload: dict[str, Any] = {"contents": [{"parts": [{"text": prompt}]}]}
        if schema is not None:
            payload["generationConfig"] = {
                "responseMimeType": "application/json",
                "responseSchema": schema,
            }
        if system is not None:
            payload["systemInstruction"] = {"parts": [{"text": system}]}
        try:
            r = await self.client.post(
                self.url, params={"key": self.api_key}, json=payload
            )
            r.raise_for_status()
        except httpx.HTTPStatusError as err:
            raise NarrativeError(
                f"Gemini returned HTTP {err.response.status_code}"
            ) from err
        except httpx.RequestError as err:
            raise NarrativeError(f"Gemini unreachable: {err}") from err
        try:
            return r.json()["candidates"][0]["content"]["parts"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError) as err:
            raise NarrativeError(f"Unexpected Gemini response: {r.text}") from err

    async def _generate_json(self, prompt: str, schema: dict[str, Any]) -> Any:
        text = await self._generate(prompt, schema=schema)
        try:
            return json.loads(text)
        except ValueError as err:
            raise NarrativeError("Gemini returned invalid JSON") from err

    # ------------------------------------------------------------------
    async def summarize_individual(
        self, record: StaffRecord, role_label: str
    ) -> StaffAnalysis | None:
        logs = "\n".join(
            f"{e.date.isoformat()}: [{e.kind.value}] {e.description} (by {e.issued_by})"
            for e in record.logs
        )
        prompt = (
            f"Analyze performance: {record.display_name} ({role_label}). "
            f"Points: {record.total_points}. Minutes: {record.total_minutes}. "
            f"Logs: {logs or 'None'}."
        )
        try:
            data = await self._generate_json(prompt, _ANALYSIS_SCHEMA)
            return StaffAnalysis(
                summary=data["summary"],
                recommendation=data["recommendation"],
                potential_rating=data["potentialRating"],
                sentiment=data["sentiment"],
            )
        except (NarrativeError, KeyError, TypeError, ValidationError) as err:
            log.warning("Staff analysis unavailable for %s: %s", record.id, err)
            return None

    async def summarize_workforce(self, roster: Sequence[StaffRecord]) -> str:
        data = [
            {"user": r.display_name, "rank": r.internal_role_id, "points": r.total_points}
            for r in roster
        ]
        try:
            text = await self._generate(
                f"Audit this staff body: {json.dumps(data)}",
                system=WORKFORCE_SYSTEM_PROMPT,
            )
        except NarrativeError as err:
            log.warning("Workforce insights unavailable: %s", err)
            return INSIGHTS_UNAVAILABLE
        return text or INSIGHTS_UNAVAILABLE

    async def infer_mappings(
        self,
        group_name: str,
        ranks: Sequence[GroupRank],
        registry: RoleRegistry,
    ) -> list[RankMapping] | None:
        rank_lines = "\n".join(
            f"Rank ID {r.external_rank_id}: {r.name}" for r in ranks
        )
        prompt = (
            f'I have a Roblox group called "{group_name}" with the following ranks:\n'
            f"{rank_lines}\n\n"
            "Map each of these Roblox ranks to the most appropriate internal role.\n"
            f"Available internal roles: {', '.join(registry.ids())}.\n\n"
            'Return a JSON array of mappings: { "robloxRankId": number, '
            '"internalRole": "role id", "label": "Original Name" }, ordered '
            "from the highest rank to the lowest. The label should be the "
            "original Roblox rank name."
        )
        try:
            data = await self._generate_json(prompt, _MAPPINGS_SCHEMA)
            return [
                RankMapping(
                    external_rank_id=int(item["robloxRankId"]),
                    internal_role_id=str(item["internalRole"]),
                    label=str(item["label"]),
                )
                for item in data
            ]
        except (NarrativeError, KeyError, TypeError, ValueError) as err:
            log.warning("AI rank mapping unavailable for %s: %s", group_name, err)
            return None

    async def close(self) -> None:
        await self.client.aclose()
