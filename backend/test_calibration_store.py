"""Tests for the in-memory interaction recorder"""

import pytest

from infraflow.learning import CalibrationStore, RingBuffer


def test_counts_and_rates():
    store = CalibrationStore()
    for _ in range(3):
        store.record_shown("AP-1", session_id="s1")
    store.record_ignored("AP-1", session_id="s1")
    store.record_ignored("AP-1", session_id="s1")
    store.record_fixed("AP-1", session_id="s1")

    record = store.get_calibration_data()["AP-1"]

    assert record.total_shown == 3
    assert record.ignored_count == 2
    assert record.fixed_count == 1
    assert record.ignore_rate == pytest.approx(2 / 3)
    assert record.fix_rate == pytest.approx(1 / 3)


def test_reactions_imply_shown():
    store = CalibrationStore()
    store.record_ignored("AP-1")
    store.record_ignored("AP-1")

    record = store.get_calibration_data()["AP-1"]
    assert record.total_shown == 2
    assert record.ignore_rate == 1.0


def test_ring_buffer_overwrites_oldest():
    store = CalibrationStore(capacity=3)
    for i in range(5):
        store.record_shown(f"ap-{i}")

    assert store.count() == 3
    assert [i.anti_pattern_id for i in store.get_interactions()] == ["ap-2", "ap-3", "ap-4"]


def test_ring_buffer_direct():
    buffer = RingBuffer(2)
    buffer.append("a")
    assert list(buffer) == ["a"]
    buffer.append("b")
    buffer.append("c")
    assert list(buffer) == ["b", "c"]
    assert buffer.total_written == 3

    buffer.clear()
    assert len(buffer) == 0

    with pytest.raises(ValueError):
        RingBuffer(0)


def test_filter_interactions():
    store = CalibrationStore()
    store.record_shown("AP-1")
    store.record_shown("AP-2")
    store.record_fixed("AP-1")

    assert [i.action for i in store.get_interactions("AP-1")] == ["shown", "fixed"]


def test_unknown_action():
    with pytest.raises(ValueError):
        CalibrationStore().record("AP-1", "dismissed")


def test_calibrated_severity_filled_in():
    store = CalibrationStore()
    for _ in range(12):
        store.record_shown("AP-1")
        store.record_ignored("AP-1")

    record = store.get_calibration_data(severities={"AP-1": "high"})["AP-1"]

    assert record.original_severity == "high"
    assert record.calibrated_severity == "suppressed"
    assert record.to_dict()["calibratedSeverity"] == "suppressed"


def test_last_updated_is_latest_timestamp():
    store = CalibrationStore()
    store.record("AP-1", "shown", timestamp="2026-01-02T10:00:00+00:00")
    store.record("AP-1", "ignored", timestamp="2026-01-03T10:00:00+00:00")

    assert store.get_calibration_data()["AP-1"].last_updated == "2026-01-03T10:00:00+00:00"


def test_interaction_ids_are_unique():
    store = CalibrationStore()
    first = store.record_shown("AP-1")
    second = store.record_shown("AP-1")
    assert first.id != second.id


def test_clear():
    store = CalibrationStore()
    store.record_shown("AP-1")
    store.clear()
    assert store.count() == 0
    assert store.get_calibration_data() == {}
