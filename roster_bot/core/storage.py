"""Simple JSON-backed storage for the roster, session and group link."""

from __future__ import annotations

import datetime
import json
import os
from collections.abc import Sequence
from pathlib import Path

from .models import AuthUser, GroupConfig, StaffRecord


class JSONStorage:
    """Persist the whole roster, the operator session and the group config.

    Everything lives in one JSON file which is rewritten atomically on
    every save. Each section is written as a blob: saving the roster
    replaces the previously stored roster entirely.
    """

    def __init__(self, path: Path | str) -> None:
        """Initialise storage using JSON file at ``path``."""
        self.path = Path(path)
        self._data: dict = {"roster": [], "session": None, "group": None}
        if self.path.exists():
            self._load()
        else:
            self._save()

    # ------------------------------------------------------------------
    # Internal helpers
    def _load(self) -> None:
        data = json.loads(self.path.read_text(encoding="utf-8"))
        self._data.update(data)

    def _save(self) -> None:
        tmp = self.path.with_name(self.path.name + ".tmp")
        tmp.write_text(
            json.dumps(self._data, indent=2, ensure_ascii=False), encoding="utf-8"
        )
        os.replace(tmp, self.path)

    # ------------------------------------------------------------------
    # Roster
    def save_roster(self, roster: Sequence[StaffRecord]) -> None:
        """Replace the stored roster with ``roster``."""
        self._data["roster"] = [r.model_dump(mode="json") for r in roster]
        self._save()

    def load_roster(self) -> list[StaffRecord]:
        """Return the stored roster, or an empty list if none was saved."""
        return [StaffRecord(**item) for item in self._data.get("roster") or []]

    # ------------------------------------------------------------------
    # Group link
    def save_group(self, group: GroupConfig) -> None:
        self._data["group"] = group.model_dump(mode="json")
        self._save()

    def load_group(self) -> GroupConfig | None:
        data = self._data.get("group")
        return GroupConfig(**data) if data else None

    # ------------------------------------------------------------------
    # Session
    def authenticate(self, identity: str, secret: str) -> AuthUser | None:
        """Open a session for ``identity``.

        Any non-empty identity/secret pair is accepted; credentials are not
        checked against anything.
        """
        if not identity or not secret:
            return None
        user = AuthUser(
            username=identity,
            last_login=datetime.datetime.now(tz=datetime.UTC),
        )
        self._data["session"] = user.model_dump(mode="json")
        self._save()
        return user

    def get_session(self) -> AuthUser | None:
        data = self._data.get("session")
        return AuthUser(**data) if data else None

    def end_session(self) -> None:
        self._data["session"] = None
        self._save()
