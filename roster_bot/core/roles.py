"""Registry of internal roles.

Roles are referred to everywhere by an opaque identifier; the registry owns
the display label and the precedence order (highest first).
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator


class RoleRegistry:
    """Ordered mapping of role id to display label."""

    def __init__(self, roles: Iterable[tuple[str, str]]) -> None:
        self._roles: dict[str, str] = {}
        for role_id, label in roles:
            if role_id in self._roles:
                raise ValueError(f"Duplicate role id: {role_id}")
            self._roles[role_id] = label
        if not self._roles:
            raise ValueError("A role registry needs at least one role.")

    def __contains__(self, role_id: object) -> bool:
        return role_id in self._roles

    def __iter__(self) -> Iterator[str]:
        return iter(self._roles)

    def __len__(self) -> int:
        return len(self._roles)

    def ids(self) -> list[str]:
        return list(self._roles)

    def label(self, role_id: str) -> str:
        """Return the display label, or the raw id for unknown roles."""
        return self._roles.get(role_id, role_id)


DEFAULT_ROLES = RoleRegistry(
    [
        ("chief_executive", "Chief Executive Officer"),
        ("hr_director", "HR Director"),
        ("manager", "Manager"),
        ("supervisor", "Supervisor"),
        ("senior_staff", "Senior Staff"),
        ("junior_staff", "Junior Staff"),
        ("trainee", "Trainee"),
    ]
)
