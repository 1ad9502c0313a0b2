"""Base interfaces for the external services the roster depends on."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from ..core.models import (
    ExternalMember,
    GroupMetadata,
    GroupRank,
    RankMapping,
    StaffAnalysis,
    StaffRecord,
)
from ..core.roles import RoleRegistry

MEMBER_PAGE_SIZES = (10, 25, 50, 100)

INSIGHTS_UNAVAILABLE = "Unable to generate insights at this time."


class RosterSourceError(Exception):
    """The roster source could not be reached or refused the request."""

    def __init__(self, status_code: int | None, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(
            f"Roster source error {status_code}: {message}"
            if status_code is not None
            else f"Roster source error: {message}"
        )


class RosterSource(ABC):
    """Abstract source of group ranks and members."""

    @abstractmethod
    async def fetch_group_ranks(self, group_id: str) -> GroupMetadata:
        """Return the group's name and ranks.

        Raises :class:`RosterSourceError` when the group cannot be fetched.
        """

    @abstractmethod
    async def fetch_group_members(
        self, group_id: str, page_size: int = 25
    ) -> list[ExternalMember]:
        """Return group members; an empty list when there is nothing to read.

        ``page_size`` must be one of :data:`MEMBER_PAGE_SIZES`.
        """


class NarrativeService(ABC):
    """Abstract generator of written staff assessments.

    Implementations never raise: failures produce the neutral results
    documented on each method.
    """

    @abstractmethod
    async def summarize_individual(
        self, record: StaffRecord, role_label: str
    ) -> StaffAnalysis | None:
        """Assess one staff member, or ``None`` if unavailable."""

    @abstractmethod
    async def summarize_workforce(self, roster: Sequence[StaffRecord]) -> str:
        """Audit the whole roster, or :data:`INSIGHTS_UNAVAILABLE`."""

    @abstractmethod
    async def infer_mappings(
        self,
        group_name: str,
        ranks: Sequence[GroupRank],
        registry: RoleRegistry,
    ) -> list[RankMapping] | None:
        """Suggest a rank mapping table, or ``None`` if unavailable."""
