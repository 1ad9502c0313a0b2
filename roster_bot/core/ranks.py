"""Translation of external rank ids into internal role ids."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from .models import GroupRank, RankMapping
from .roles import DEFAULT_ROLES, RoleRegistry


class EmptyMappingError(LookupError):
    """Raised when resolving against a table with no entries."""


class RankMappingTable:
    """Ordered collection of :class:`RankMapping` entries.

    The table holds at most one entry per external rank id. Order is the
    order of discovery; the last entry doubles as the catch-all for ranks
    that have no entry of their own.
    """

    def __init__(self, mappings: Iterable[RankMapping] = ()) -> None:
        self._mappings: list[RankMapping] = []
        seen: set[int] = set()
        for mapping in mappings:
            if mapping.external_rank_id in seen:
                raise ValueError(
                    f"Duplicate mapping for external rank {mapping.external_rank_id}"
                )
            seen.add(mapping.external_rank_id)
            self._mappings.append(mapping)

    def __len__(self) -> int:
        return len(self._mappings)

    def __bool__(self) -> bool:
        return bool(self._mappings)

    def __iter__(self):
        return iter(self._mappings)

    @property
    def mappings(self) -> list[RankMapping]:
        return list(self._mappings)

    def get(self, external_rank_id: int) -> RankMapping | None:
        return next(
            (m for m in self._mappings if m.external_rank_id == external_rank_id),
            None,
        )

    def resolve(self, external_rank_id: int) -> str:
        """Return the internal role id for ``external_rank_id``.

        Unmatched ids fall back to the last entry's role.
        """
        if not self._mappings:
            raise EmptyMappingError("Rank mapping table is empty.")
        mapping = self.get(external_rank_id)
        if mapping is None:
            mapping = self._mappings[-1]
        return mapping.internal_role_id

    def update(
        self,
        external_rank_id: int,
        internal_role_id: str,
        registry: RoleRegistry = DEFAULT_ROLES,
    ) -> str | None:
        """Point an existing entry at another role.

        Returns an error message, or ``None`` on success.
        """
        if internal_role_id not in registry:
            return f"Unknown role `{internal_role_id}`."
        for i, mapping in enumerate(self._mappings):
            if mapping.external_rank_id == external_rank_id:
                self._mappings[i] = mapping.model_copy(
                    update={"internal_role_id": internal_role_id}
                )
                return None
        return f"No mapping for rank {external_rank_id}."


def infer_mappings(
    ranks: Sequence[GroupRank], registry: RoleRegistry = DEFAULT_ROLES
) -> list[RankMapping]:
    """Spread ``ranks`` over the registry ladder, highest rank first.

    With more ranks than roles several ranks share a role; with fewer, roles
    are skipped so that the top and bottom ranks still land on the top and
    bottom roles.
    """
    ordered = sorted(ranks, key=lambda r: r.external_rank_id, reverse=True)
    role_ids = registry.ids()
    count = len(ordered)
    mappings: list[RankMapping] = []
    for i, rank in enumerate(ordered):
        if count == 1:
            idx = 0
        else:
            idx = round(i * (len(role_ids) - 1) / (count - 1))
        mappings.append(
            RankMapping(
                external_rank_id=rank.external_rank_id,
                internal_role_id=role_ids[idx],
                label=rank.name,
            )
        )
    return mappings
