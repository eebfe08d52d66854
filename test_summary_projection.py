#!/usr/bin/env python3
"""
Tests for the summary projection: last-write-wins per object, history counts,
ordering and the search filter.
"""

import random

from specver.models.history import HistoryEntry
from specver.services.summary import (
    filter_summaries, history_log, project_summaries, registry_stats,
)


def _entry(id, object_id, logged_at, version, **kw) -> HistoryEntry:
    data = dict(
        id=id, object_id=object_id, document_name=kw.pop("document_name", f"FS {object_id}"),
        version=version, logged_at=logged_at, document_date=kw.pop("document_date", logged_at),
    )
    data.update(kw)
    return HistoryEntry(**data)


def test_empty_input_yields_empty_projection():
    """No entries -> no summaries, not an error"""
    assert project_summaries([]) == []
    assert history_log([]) == []


def test_last_write_wins_in_any_input_order():
    a = _entry("a", "X", 10, "1.0")
    b = _entry("b", "X", 20, "1.1")
    for entries in ([a, b], [b, a]):
        (s,) = project_summaries(entries)
        assert s.object_id == "X"
        assert s.current_version == "1.1"
        assert s.history_count == 2
        assert s.latest_entry_id == "b"
        assert s.last_updated == 20


def test_all_summary_fields_come_from_latest_entry():
    old = _entry("e1", "R-1", 100, "1.0", document_name="Old name", transaction_code="VA01",
                 region="EU", uploaded=True, release_reference="R1", document_date=5)
    new = _entry("e2", "R-1", 200, "2.0", document_name="Corrected name", transaction_code="",
                 region="US", uploaded=False, release_reference="R2", document_date=7)
    (s,) = project_summaries([new, old])
    assert s.document_name == "Corrected name"
    assert s.transaction_code == ""
    assert s.region == "US"
    assert s.uploaded is False
    assert s.last_release == "R2"
    assert s.document_date == 7


def test_shuffling_never_changes_the_projection():
    entries = [
        _entry(f"e{i}", f"OBJ-{i % 4}", 1000 + i * 7 % 23, f"1.{i}")
        for i in range(40)
    ]
    expected = project_summaries(entries)
    rng = random.Random(7)
    for _ in range(10):
        shuffled = entries[:]
        rng.shuffle(shuffled)
        assert project_summaries(shuffled) == expected
    assert sum(s.history_count for s in expected) == 40


def test_equal_logged_at_is_broken_by_id():
    """Same timestamp for one object: the greater id wins, whatever the input order"""
    x1 = _entry("id-a", "X", 50, "1.0")
    x2 = _entry("id-b", "X", 50, "9.9")
    assert project_summaries([x1, x2])[0].current_version == "9.9"
    assert project_summaries([x2, x1])[0].current_version == "9.9"


def test_result_sorted_by_last_updated_desc():
    entries = [
        _entry("1", "OLD", 10, "1"),
        _entry("2", "MID", 20, "1"),
        _entry("3", "NEW", 30, "1"),
        _entry("4", "OLD", 5, "0"),   # older entry, doesn't move OLD up
    ]
    assert [s.object_id for s in project_summaries(entries)] == ["NEW", "MID", "OLD"]


def test_repeated_runs_are_identical():
    entries = [_entry("p", "A", 1, "1"), _entry("q", "B", 2, "1"), _entry("r", "A", 2, "2")]
    first = [s.to_wire() for s in project_summaries(entries)]
    for _ in range(5):
        assert [s.to_wire() for s in project_summaries(entries)] == first
    # equal lastUpdated across objects falls back to object id
    assert [s["RICEFWID"] for s in first] == ["A", "B"]


def test_history_log_newest_first_and_per_object():
    entries = [_entry("1", "A", 1, "1"), _entry("2", "B", 3, "1"), _entry("3", "A", 2, "2")]
    assert [e.id for e in history_log(entries)] == ["2", "3", "1"]
    assert [e.id for e in history_log(entries, "A")] == ["3", "1"]
    assert history_log(entries, "missing") == []


def test_filter_matches_name_id_tcode_and_release():
    summaries = project_summaries([
        _entry("1", "R-100", 1, "1", document_name="Sales Order Interface",
               transaction_code="VA01", release_reference="Wave 2"),
        _entry("2", "E-200", 2, "1", document_name="Invoice Print",
               transaction_code="VF03", release_reference="Hotfix"),
    ])
    ids = lambda xs: sorted(s.object_id for s in xs)
    assert ids(filter_summaries(summaries, "sales")) == ["R-100"]
    assert ids(filter_summaries(summaries, "e-2")) == ["E-200"]
    assert ids(filter_summaries(summaries, "vf03")) == ["E-200"]
    assert ids(filter_summaries(summaries, "WAVE")) == ["R-100"]
    assert ids(filter_summaries(summaries, "  ")) == ["E-200", "R-100"]
    assert filter_summaries(summaries, "nothing-like-this") == []


def test_registry_stats_counts_current_upload_state():
    entries = [
        _entry("1", "A", 1, "1", uploaded=True),
        _entry("2", "A", 2, "2", uploaded=False),
        _entry("3", "B", 1, "1", uploaded=True),
    ]
    assert registry_stats(entries) == {"totalObjects": 2, "totalEntries": 3, "uploadedObjects": 1}


if __name__ == "__main__":
    import pytest, sys
    sys.exit(pytest.main([__file__, "-v"]))
