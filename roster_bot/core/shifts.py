"""Clock-in/clock-out tracking that feeds a record's live session fields."""

from __future__ import annotations

import datetime

from .models import LogEntry, LogKind, StaffRecord


def _now() -> datetime.datetime:
    return datetime.datetime.now(tz=datetime.UTC)


def start_shift(
    record: StaffRecord, now: datetime.datetime | None = None
) -> StaffRecord:
    """Open a shift. Already-active records are returned unchanged."""
    if record.is_active_session:
        return record
    return record.model_copy(
        update={"is_active_session": True, "shift_started_at": now or _now()},
        deep=True,
    )


def end_shift(
    record: StaffRecord,
    issued_by: str,
    now: datetime.datetime | None = None,
) -> StaffRecord:
    """Close the open shift, crediting whole elapsed minutes.

    Records without an open shift are returned unchanged.
    """
    if not record.is_active_session or record.shift_started_at is None:
        return record
    now = now or _now()
    minutes = max(0, int((now - record.shift_started_at).total_seconds() // 60))
    entry = LogEntry(
        date=now.date(),
        kind=LogKind.SHIFT,
        description=f"Completed shift of {minutes} minutes",
        issued_by=issued_by,
        amount=minutes,
    )
    return record.model_copy(
        update={
            "is_active_session": False,
            "shift_started_at": None,
            "total_minutes": record.total_minutes + minutes,
            "shifts_completed": record.shifts_completed + 1,
            "logs": [entry, *record.logs],
        },
        deep=True,
    )
