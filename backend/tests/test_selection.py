import pytest

from trackview.core.errors import InvalidRangeError
from trackview.core.normalize import normalize
from trackview.core.selection import SelectionState, select_subset
from trackview.models.selection import FULL, Selection, SelectionKind


def _state(raw_factory, n=100):
    return SelectionState(normalize(raw_factory(n)))


def test_starts_full_with_every_record(raw_factory):
    state = _state(raw_factory)
    assert state.current is FULL
    assert state.current.kind is SelectionKind.full
    assert len(state.subset()) == 100


def test_range_is_inclusive(raw_factory):
    state = _state(raw_factory)
    assert state.select_range(10, 20) is True
    subset = state.subset()
    assert len(subset) == 11
    assert subset[0].timestamp_seconds == 10.0
    assert subset[-1].timestamp_seconds == 20.0


def test_subset_grows_as_range_widens(raw_factory):
    records = normalize(raw_factory()).records
    sizes = [len(select_subset(records, Selection.between(50 - w, 50 + w))) for w in range(0, 60, 5)]
    assert sizes == sorted(sizes)
    for w in range(0, 60, 5):
        subset = select_subset(records, Selection.between(50 - w, 50 + w))
        assert all(50 - w <= r.timestamp_seconds <= 50 + w for r in subset)


def test_empty_range_is_a_no_op(raw_factory):
    state = _state(raw_factory)
    assert state.select_range(10, 20)
    before = state.current

    assert state.select_range(200, 300) is False
    assert state.current == before
    assert len(state.subset()) == 11


def test_empty_range_from_full_stays_full(raw_factory):
    state = _state(raw_factory)
    assert state.select_range(200, 300) is False
    assert state.current is FULL


def test_latest_range_replaces_previous(raw_factory):
    state = _state(raw_factory)
    state.select_range(0, 50)
    state.select_range(10, 20)
    subset = state.subset()
    assert [r.index for r in subset] == list(range(10, 21))


def test_reset_is_idempotent(raw_factory):
    state = _state(raw_factory)
    initial = (state.current, [r.index for r in state.subset()])
    state.select_range(5, 6)
    state.reset()
    state.reset()
    assert (state.current, [r.index for r in state.subset()]) == initial


def test_full_span_range_is_not_full(raw_factory):
    state = _state(raw_factory)
    assert state.select_range(0, 99)
    assert not state.current.is_full
    assert len(state.subset()) == 100


@pytest.mark.parametrize("start, end", [
    (20, 10),
    (float("nan"), 10),
    (0, float("inf")),
    (None, 10),
    ("0", 10),
])
def test_invalid_ranges_raise(raw_factory, start, end):
    state = _state(raw_factory, 10)
    with pytest.raises(InvalidRangeError):
        state.select_range(start, end)
    assert state.current is FULL


def test_records_without_time_never_match_a_range(raw_factory):
    raw = raw_factory(10)
    raw.records[4]["timestamp"] = "garbage"
    state = SelectionState(normalize(raw))

    assert len(state.subset()) == 10
    state.select_range(0, 9)
    assert 4 not in [r.index for r in state.subset()]
    assert len(state.subset()) == 9


def test_single_point_range(raw_factory):
    state = _state(raw_factory)
    assert state.select_range(42, 42)
    assert [r.index for r in state.subset()] == [42]
