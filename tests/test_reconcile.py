"""Tests for merging fetched members into the roster."""

import datetime
import itertools

import pytest

from roster_bot.core.models import ExternalMember, RankMapping
from roster_bot.core.ranks import EmptyMappingError, RankMappingTable
from roster_bot.core.reconcile import reconcile

TODAY = datetime.date(2024, 5, 1)


@pytest.fixture
def table() -> RankMappingTable:
    return RankMappingTable(
        [
            RankMapping(external_rank_id=1, internal_role_id="A", label="Officer"),
            RankMapping(external_rank_id=2, internal_role_id="B", label="Cadet"),
        ]
    )


def counter_ids():
    counter = itertools.count(1)
    return lambda: f"id-{next(counter)}"


def member(ext_id: int, name: str, rank: int) -> ExternalMember:
    return ExternalMember(external_id=ext_id, display_name=name, external_rank_id=rank)


def test_first_sync_assigns_mapped_and_fallback_roles(table) -> None:
    fetched = [member(100, "Alice", 1), member(101, "Bob", 5)]
    roster = reconcile([], fetched, table, today=TODAY)

    assert len(roster) == 2
    alice, bob = roster
    assert alice.display_name == "Alice" and alice.internal_role_id == "A"
    assert bob.display_name == "Bob" and bob.internal_role_id == "B"


def test_new_records_are_initialised(table) -> None:
    roster = reconcile([], [member(100, "Alice", 1)], table, today=TODAY)
    record = roster[0]

    assert record.status.value == "Active"
    assert record.joined_date == TODAY
    assert record.total_points == 0
    assert record.total_minutes == 0
    assert record.is_active_session is False
    assert record.shifts_completed == 0
    assert record.logs == []
    assert record.avatar_ref == "https://picsum.photos/seed/Alice/200"


def test_avatar_from_source_is_used(table) -> None:
    fetched = [
        ExternalMember(
            external_id=7, display_name="Eve", external_rank_id=1, avatar_url="http://img/7"
        )
    ]
    assert reconcile([], fetched, table)[0].avatar_ref == "http://img/7"


def test_repeat_sync_adds_only_new_member(table) -> None:
    first = reconcile(
        [], [member(100, "Alice", 1), member(101, "Bob", 5)], table, today=TODAY
    )
    second = reconcile(
        first, [member(100, "Alice", 1), member(102, "Carol", 2)], table, today=TODAY
    )

    assert len(second) == 3
    assert second[0] == first[0]
    assert second[1] == first[1]
    assert second[0].id == first[0].id and second[1].id == first[1].id
    carol = second[2]
    assert carol.display_name == "Carol"
    assert carol.internal_role_id == "B"


def test_reconcile_is_idempotent(table) -> None:
    fetched = [member(100, "Alice", 1), member(101, "Bob", 2), member(102, "Cy", 9)]
    once = reconcile([], fetched, table, new_id=counter_ids())
    twice = reconcile(once, fetched, table, new_id=counter_ids())
    assert twice == once


def test_existing_records_are_never_overwritten(table) -> None:
    roster = reconcile([], [member(100, "Alice", 1)], table, today=TODAY)
    # the platform now reports a renamed, re-ranked Alice
    again = reconcile(roster, [member(100, "Alicia", 2)], table)

    assert len(again) == 1
    assert again[0].display_name == "Alice"
    assert again[0].internal_role_id == "A"


def test_missing_members_are_kept(table) -> None:
    roster = reconcile([], [member(1, "A", 1), member(2, "B", 1)], table)
    after = reconcile(roster, [], table)
    assert {r.external_id for r in after} == {1, 2}


def test_duplicate_ids_in_batch_are_admitted_once(table) -> None:
    roster = reconcile([], [member(5, "Dup", 1), member(5, "Dup", 2)], table)
    assert len(roster) == 1
    assert roster[0].internal_role_id == "A"


def test_ordering_existing_first_then_source_order(table) -> None:
    roster = reconcile([], [member(3, "C", 1), member(1, "A", 1)], table)
    roster = reconcile(roster, [member(9, "Z", 1), member(2, "B", 1), member(1, "A", 1)], table)
    assert [r.external_id for r in roster] == [3, 1, 9, 2]


def test_input_roster_is_not_mutated(table) -> None:
    current = reconcile([], [member(1, "A", 1)], table)
    snapshot = list(current)
    reconcile(current, [member(2, "B", 1)], table)
    assert current == snapshot


def test_empty_table_is_a_precondition_violation() -> None:
    with pytest.raises(EmptyMappingError):
        reconcile([], [member(1, "A", 1)], RankMappingTable())


def test_empty_table_with_nothing_new_is_fine(table) -> None:
    roster = reconcile([], [member(1, "A", 1)], table)
    assert reconcile(roster, [member(1, "A", 1)], RankMappingTable()) == roster
