"""Application state for the roster: session, linked group and staff."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ..adapters.base import (
    INSIGHTS_UNAVAILABLE,
    NarrativeService,
    RosterSource,
    RosterSourceError,
)
from ..core.models import (
    AuthUser,
    GroupConfig,
    GroupMetadata,
    HRMStats,
    MetricKind,
    RankMapping,
    StaffAnalysis,
    StaffRecord,
)
from ..core.ranks import RankMappingTable, infer_mappings
from ..core.reconcile import compute_stats, grant, reconcile
from ..core.roles import DEFAULT_ROLES, RoleRegistry
from ..core.shifts import end_shift, start_shift
from ..core.storage import JSONStorage

log = logging.getLogger("roster.store")

NOT_LOGGED_IN = "You must be logged in to do that."
STAFF_NOT_FOUND = "Staff member not found."


@dataclass
class SyncOutcome:
    added: list[StaffRecord] = field(default_factory=list)
    error: str | None = None


class RosterStore:
    """Single owner of the roster and everything that mutates it.

    Presentation code reads the public attributes and calls the methods
    below; each mutating method writes through to ``storage``. Methods that
    can fail return an operator-facing message, or ``None`` on success.
    """

    def __init__(
        self,
        storage: JSONStorage,
        source: RosterSource,
        narrator: NarrativeService | None = None,
        *,
        registry: RoleRegistry = DEFAULT_ROLES,
        page_size: int = 25,
    ) -> None:
        self.storage = storage
        self.source = source
        self.narrator = narrator
        self.registry = registry
        self.page_size = page_size
        self.session: AuthUser | None = storage.get_session()
        self.group: GroupConfig = storage.load_group() or GroupConfig()
        try:
            self.table = RankMappingTable(self.group.rank_mappings)
        except ValueError as err:
            log.error("Stored group config is invalid, starting unlinked: %s", err)
            self.group = GroupConfig()
            self.table = RankMappingTable()
        self.roster: list[StaffRecord] = storage.load_roster()
        # Set while a fetch from the roster source is outstanding.
        self.loading = False

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------
    def login(self, identity: str, secret: str) -> str | None:
        user = self.storage.authenticate(identity.strip(), secret)
        if user is None:
            return "Username and password are required."
        self.session = user
        log.info("Session opened for %s", user.username)
        return None

    def logout(self) -> None:
        if self.session is not None:
            log.info("Session closed for %s", self.session.username)
        self.storage.end_session()
        self.session = None

    def _is_stale(self, token: str) -> bool:
        return self.session is None or self.session.token != token

    # ------------------------------------------------------------------
    # Group link and member sync
    # ------------------------------------------------------------------
    async def link_group(self, group_id: str) -> str | None:
        """Link ``group_id``, build its rank mapping table and sync members."""
        if self.session is None:
            return NOT_LOGGED_IN
        group_id = group_id.strip()
        if not group_id.isdigit():
            return "Group ID must be a number."
        token = self.session.token
        self.loading = True
        try:
            meta = await self.source.fetch_group_ranks(group_id)
            if not meta.ranks:
                log.warning("Group %s returned no ranks", group_id)
                return f"Could not verify group {group_id}."
            mappings = await self._build_mappings(meta)
            if self._is_stale(token):
                log.info("Discarding link result for %s: session ended", group_id)
                return "Session ended before the group was linked."
            self.table = RankMappingTable(mappings)
            self.group = GroupConfig(
                group_id=group_id,
                group_name=meta.group_name,
                is_connected=True,
                rank_mappings=self.table.mappings,
            )
            self.storage.save_group(self.group)
        except RosterSourceError as err:
            log.warning("Could not verify group %s: %s", group_id, err)
            return f"Could not verify group {group_id}."
        except Exception:
            log.exception("Link group %s failed", group_id)
            return "Internal error while linking group."
        finally:
            self.loading = False
        log.info("Linked group %s (%s)", group_id, self.group.group_name)
        outcome = await self.sync_members()
        return outcome.error

    async def _build_mappings(self, meta: GroupMetadata) -> list[RankMapping]:
        if self.narrator is not None:
            suggested = await self.narrator.infer_mappings(
                meta.group_name, meta.ranks, self.registry
            )
            if suggested and self._valid_suggestion(meta, suggested):
                return sorted(
                    suggested, key=lambda m: m.external_rank_id, reverse=True
                )
            log.warning("Falling back to heuristic rank mapping for %s", meta.group_name)
        return infer_mappings(meta.ranks, self.registry)

    def _valid_suggestion(
        self, meta: GroupMetadata, suggested: list[RankMapping]
    ) -> bool:
        rank_ids = [m.external_rank_id for m in suggested]
        return (
            len(rank_ids) == len(set(rank_ids))
            and set(rank_ids) == {r.external_rank_id for r in meta.ranks}
            and all(m.internal_role_id in self.registry for m in suggested)
        )

    async def sync_members(self) -> SyncOutcome:
        """Fetch the linked group's members and admit the new ones."""
        if self.session is None:
            return SyncOutcome(error=NOT_LOGGED_IN)
        if not self.group.group_id or not self.table:
            return SyncOutcome(error="Link a group before syncing members.")
        token = self.session.token
        group_id = self.group.group_id
        self.loading = True
        try:
            fetched = await self.source.fetch_group_members(group_id, self.page_size)
        except RosterSourceError as err:
            log.warning("Member sync for %s failed: %s", group_id, err)
            return SyncOutcome(error=f"Could not fetch members of group {group_id}.")
        except Exception:
            log.exception("Member sync for %s failed", group_id)
            return SyncOutcome(error="Internal error while syncing members.")
        finally:
            self.loading = False

        if self._is_stale(token):
            log.info("Discarding member sync for %s: session ended", group_id)
            return SyncOutcome(error="Session ended during sync; results discarded.")

        before = len(self.roster)
        self.roster = reconcile(self.roster, fetched, self.table)
        added = self.roster[before:]
        if added:
            self.storage.save_roster(self.roster)
        log.info(
            "Synced group %s: %d fetched, %d new", group_id, len(fetched), len(added)
        )
        return SyncOutcome(added=added)

    def update_mapping(self, external_rank_id: int, internal_role_id: str) -> str | None:
        """Re-point one rank at another role; existing staff keep their role."""
        if self.session is None:
            return NOT_LOGGED_IN
        err = self.table.update(external_rank_id, internal_role_id, self.registry)
        if err:
            return err
        self.group = self.group.model_copy(
            update={"rank_mappings": self.table.mappings}
        )
        self.storage.save_group(self.group)
        return None

    # ------------------------------------------------------------------
    # Staff records
    # ------------------------------------------------------------------
    def get_staff(self, staff_id: str) -> StaffRecord | None:
        return next((r for r in self.roster if r.id == staff_id), None)

    def find_staff(self, query: str) -> StaffRecord | None:
        """Look a record up by local id, external id or display name."""
        query = query.strip()
        record = self.get_staff(query)
        if record:
            return record
        if query.isdigit():
            ext = int(query)
            record = next((r for r in self.roster if r.external_id == ext), None)
            if record:
                return record
        lowered = query.lower()
        return next(
            (r for r in self.roster if r.display_name.lower() == lowered), None
        )

    def role_label(self, role_id: str) -> str:
        return self.registry.label(role_id)

    def _replace(self, updated: StaffRecord) -> None:
        self.roster = [updated if r.id == updated.id else r for r in self.roster]
        self.storage.save_roster(self.roster)

    def grant_metric(
        self, staff_id: str, kind: MetricKind | str, amount: int
    ) -> str | None:
        if self.session is None:
            return NOT_LOGGED_IN
        try:
            kind = MetricKind(kind)
        except ValueError:
            return f"Unknown metric `{kind}`."
        if amount <= 0:
            return "Amount must be a positive whole number."
        record = self.get_staff(staff_id)
        if record is None:
            return STAFF_NOT_FOUND
        self._replace(grant(record, kind, amount, self.session.username))
        return None

    def start_shift(self, staff_id: str) -> str | None:
        if self.session is None:
            return NOT_LOGGED_IN
        record = self.get_staff(staff_id)
        if record is None:
            return STAFF_NOT_FOUND
        if record.is_active_session:
            return f"{record.display_name} is already on shift."
        self._replace(start_shift(record))
        return None

    def end_shift(self, staff_id: str) -> str | None:
        if self.session is None:
            return NOT_LOGGED_IN
        record = self.get_staff(staff_id)
        if record is None:
            return STAFF_NOT_FOUND
        if not record.is_active_session:
            return f"{record.display_name} is not on shift."
        self._replace(end_shift(record, self.session.username))
        return None

    def stats(self) -> HRMStats:
        return compute_stats(self.roster)

    # ------------------------------------------------------------------
    # Narratives
    # ------------------------------------------------------------------
    async def analyze_staff(self, staff_id: str) -> StaffAnalysis | None:
        record = self.get_staff(staff_id)
        if record is None or self.narrator is None:
            return None
        try:
            return await self.narrator.summarize_individual(
                record, self.role_label(record.internal_role_id)
            )
        except Exception:
            log.exception("Staff analysis failed for %s", staff_id)
            return None

    async def workforce_insights(self) -> str:
        if self.narrator is None:
            return INSIGHTS_UNAVAILABLE
        try:
            return await self.narrator.summarize_workforce(self.roster)
        except Exception:
            log.exception("Workforce insights failed")
            return INSIGHTS_UNAVAILABLE
