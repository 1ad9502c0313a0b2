"""Roblox adapter implementing :class:`~roster_bot.adapters.base.RosterSource`.

Only the public, unauthenticated group and thumbnail endpoints are used. It
uses :mod:`httpx` so that all requests stay asynchronous.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..core.models import ExternalMember, GroupMetadata, GroupRank
from .base import MEMBER_PAGE_SIZES, RosterSource, RosterSourceError

log = logging.getLogger("roster.roblox")


class RobloxAdapter(RosterSource):
    """Adapter that reads group data from the Roblox web API."""

    groups_base = "https://groups.roblox.com/v1"
    thumbnails_base = "https://thumbnails.roblox.com/v1"

    def __init__(
        self, client: httpx.AsyncClient | None = None, max_pages: int = 1
    ) -> None:
        """Use the optional HTTP ``client`` and read up to ``max_pages`` pages."""
        self.client = client or httpx.AsyncClient(timeout=30)
        self.max_pages = max_pages

    # ------------------------------------------------------------------
    async def _get(self, url: str, params: dict[str, Any] | None = None) -> Any:
        try:
            response = await self.client.get(url, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as err:
            log.error(
                "Roblox API request failed: %s (status %s)",
                url,
                err.response.status_code,
            )
            raise RosterSourceError(
                err.response.status_code, f"HTTP error for {url}"
            ) from err
        except httpx.RequestError as err:
            log.error("Roblox API unreachable: %s (%s)", url, err)
            raise RosterSourceError(None, str(err)) from err
        try:
            return response.json()
        except ValueError:
            log.warning("Roblox API returned non-JSON body for %s", url)
            return None

    async def fetch_group_ranks(self, group_id: str) -> GroupMetadata:
        """Return the group's name and its ranks, highest rank first."""
        group = await self._get(f"{self.groups_base}/groups/{group_id}")
        roles = await self._get(f"{self.groups_base}/groups/{group_id}/roles")

        name = group.get("name") if isinstance(group, dict) else None
        ranks: list[GroupRank] = []
        raw_roles = roles.get("roles") if isinstance(roles, dict) else None
        for role in raw_roles or []:
            try:
                ranks.append(
                    GroupRank(external_rank_id=int(role["rank"]), name=str(role["name"]))
                )
            except (KeyError, TypeError, ValueError):
                log.warning("Skipping malformed role entry: %r", role)
        ranks.sort(key=lambda r: r.external_rank_id, reverse=True)
        return GroupMetadata(group_name=name or f"Group {group_id}", ranks=ranks)

    async def fetch_group_members(
        self, group_id: str, page_size: int = 25
    ) -> list[ExternalMember]:
        """Return members of the group, newest first.

        Raises :class:`ValueError` if ``page_size`` is not accepted by Roblox.
        """
        if page_size not in MEMBER_PAGE_SIZES:
            raise ValueError(
                f"page_size must be one of {MEMBER_PAGE_SIZES}, got {page_size}"
            )

        raw: list[dict[str, Any]] = []
        cursor: str | None = None
        for _ in range(self.max_pages):
            params: dict[str, Any] = {"sortOrder": "Desc", "limit": page_size}
            if cursor:
                params["cursor"] = cursor
            data = await self._get(
                f"{self.groups_base}/groups/{group_id}/users", params=params
            )
            if not isinstance(data, dict) or not isinstance(data.get("data"), list):
                break
            raw.extend(data["data"])
            cursor = data.get("nextPageCursor")
            if not cursor:
                break

        members: list[ExternalMember] = []
        for item in raw:
            try:
                user = item["user"]
                members.append(
                    ExternalMember(
                        external_id=int(user["userId"]),
                        display_name=str(user["username"]),
                        external_rank_id=int(item["role"]["rank"]),
                    )
                )
            except (KeyError, TypeError, ValueError):
                log.warning("Skipping malformed member entry: %r", item)
        if not members:
            log.warning("No members returned for group %s", group_id)
            return []

        avatars = await self._fetch_headshots([m.external_id for m in members])
        return [
            m.model_copy(update={"avatar_url": avatars[m.external_id]})
            if m.external_id in avatars
            else m
            for m in members
        ]

    async def _fetch_headshots(self, user_ids: list[int]) -> dict[int, str]:
        """Best-effort avatar lookup; failures yield an empty mapping."""
        try:
            data = await self._get(
                f"{self.thumbnails_base}/users/avatar-headshot",
                params={
                    "userIds": ",".join(str(uid) for uid in user_ids),
                    "size": "150x150",
                    "format": "Png",
                    "isCircular": "true",
                },
            )
        except RosterSourceError as err:
            log.warning("Avatar fetch failed, using fallback: %s", err)
            return {}
        if not isinstance(data, dict):
            return {}
        thumbs: dict[int, str] = {}
        entries = data.get("data")
        for entry in entries if isinstance(entries, list) else []:
            if not isinstance(entry, dict) or not entry.get("imageUrl"):
                continue
            try:
                thumbs[int(entry["targetId"])] = str(entry["imageUrl"])
            except (KeyError, TypeError, ValueError):
                log.warning("Skipping malformed thumbnail entry: %r", entry)
        return thumbs

    async def close(self) -> None:
        """Close the underlying :class:`httpx.AsyncClient`."""
        await self.client.aclose()
