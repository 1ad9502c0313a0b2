"""Merging fetched members into the roster, manual grants and dashboard stats."""

from __future__ import annotations

import datetime
import uuid
from collections.abc import Callable, Iterable, Sequence

from .models import (
    ExternalMember,
    HRMStats,
    LogEntry,
    LogKind,
    MetricKind,
    StaffRecord,
    StaffStatus,
)
from .ranks import RankMappingTable

PROMOTION_THRESHOLD = 1000
# Weekly minutes are approximated as the all-time total over this many weeks.
WEEKS_IN_LOOKBACK = 4


def default_avatar(name: str) -> str:
    return f"https://picsum.photos/seed/{name}/200"


def reconcile(
    current: Sequence[StaffRecord],
    fetched: Iterable[ExternalMember],
    table: RankMappingTable,
    *,
    today: datetime.date | None = None,
    new_id: Callable[[], str] = lambda: uuid.uuid4().hex,
) -> list[StaffRecord]:
    """Return the roster that results from admitting ``fetched`` members.

    Records already in ``current`` are carried over untouched and in their
    original order, even when the fetched data for them differs. Members
    whose external id is new are appended in the order received, with their
    role resolved through ``table``. Nothing is ever removed.
    """
    today = today or datetime.date.today()
    seen = {record.external_id for record in current}
    result = list(current)
    for member in fetched:
        if member.external_id in seen:
            continue
        seen.add(member.external_id)
        result.append(
            StaffRecord(
                id=new_id(),
                external_id=member.external_id,
                display_name=member.display_name,
                internal_role_id=table.resolve(member.external_rank_id),
                status=StaffStatus.ACTIVE,
                joined_date=today,
                avatar_ref=member.avatar_url or default_avatar(member.display_name),
            )
        )
    return result


def grant(
    record: StaffRecord,
    kind: MetricKind | str,
    amount: int,
    issued_by: str,
    *,
    today: datetime.date | None = None,
) -> StaffRecord:
    """Apply a manual points/minutes grant to ``record``.

    Non-positive amounts are ignored and ``record`` is returned as is.
    Otherwise a new record is returned with the counter raised and a log
    entry prepended; ``record`` itself is not modified.
    """
    kind = MetricKind(kind)
    if amount <= 0:
        return record
    today = today or datetime.date.today()
    if kind is MetricKind.POINTS:
        update = {"total_points": record.total_points + amount}
        entry = LogEntry(
            date=today,
            kind=LogKind.POINT,
            description=f"Manual addition of {amount} points",
            issued_by=issued_by,
            amount=amount,
        )
    else:
        update = {"total_minutes": record.total_minutes + amount}
        entry = LogEntry(
            date=today,
            kind=LogKind.SHIFT,
            description=f"Manual addition of {amount} minutes",
            issued_by=issued_by,
            amount=amount,
        )
    update["logs"] = [entry, *record.logs]
    return record.model_copy(update=update, deep=True)


def compute_stats(
    roster: Sequence[StaffRecord], *, today: datetime.date | None = None
) -> HRMStats:
    today = today or datetime.date.today()
    points_today = sum(
        entry.amount or 0
        for record in roster
        for entry in record.logs
        if entry.kind is LogKind.POINT and entry.date == today
    )
    return HRMStats(
        total_staff=len(roster),
        active_now=sum(1 for r in roster if r.is_active_session),
        points_issued_today=points_today,
        pending_promotions=sum(
            1 for r in roster if r.total_points > PROMOTION_THRESHOLD
        ),
        total_minutes_this_week=sum(r.total_minutes for r in roster)
        / WEEKS_IN_LOOKBACK,
    )
