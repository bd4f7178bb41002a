"""Tests for anti-pattern severity calibration"""

import pytest

from infraflow.config import CalibrationConfig
from infraflow.learning import (
    AntiPattern,
    AntiPatternCalibration,
    calibrate_anti_patterns,
    calibrate_severity,
    compute_false_positive_rate,
    get_suppressed_ids,
)


def test_single_step_downgrade():
    assert calibrate_severity("high", {"totalShown": 15, "ignoreRate": 0.75}) == "medium"
    assert calibrate_severity("medium", {"totalShown": 15, "ignoreRate": 0.75}) == "low"


def test_strong_downgrade_suppresses_high():
    assert calibrate_severity("high", {"totalShown": 20, "ignoreRate": 0.92}) == "suppressed"


def test_strong_downgrade_from_low():
    assert calibrate_severity("low", {"totalShown": 20, "ignoreRate": 0.95}) == "suppressed"


@pytest.mark.parametrize("severity", ["critical", "high", "medium", "low", "suppressed"])
def test_not_enough_samples(severity):
    record = {"totalShown": 9, "ignoreRate": 1.0, "fixRate": 0.0}
    assert calibrate_severity(severity, record) == severity
    assert calibrate_severity(severity, None) == severity


def test_fix_rate_upgrade():
    assert calibrate_severity("medium", {"totalShown": 10, "fixRate": 0.6}) == "high"
    assert calibrate_severity("critical", {"totalShown": 10, "fixRate": 0.9}) == "critical"


def test_downgrade_and_upgrade_cancel():
    config = CalibrationConfig(fix_rate_upgrade=0.25)
    record = {"totalShown": 10, "ignoreRate": 0.7, "fixRate": 0.3}
    assert calibrate_severity("medium", record, config) == "medium"


def test_critical_floor():
    record = {"totalShown": 50, "ignoreRate": 0.95}
    assert calibrate_severity("critical", record) == "medium"
    assert calibrate_severity("critical", record, CalibrationConfig(critical_min_severity="high")) == "high"


def test_strong_downgrade_offset_by_upgrade_is_single_step():
    config = CalibrationConfig(ignore_rate_downgrade2=0.5, fix_rate_upgrade=0.3)
    record = {"totalShown": 20, "ignoreRate": 0.6, "fixRate": 0.4}

    assert calibrate_severity("medium", record, config) == "low"
    assert calibrate_severity("high", record, config) == "medium"


def test_critical_floor_with_mixed_signals():
    record = {"totalShown": 20, "ignoreRate": 0.6, "fixRate": 0.4}

    config = CalibrationConfig(ignore_rate_downgrade2=0.5, fix_rate_upgrade=0.3)
    assert calibrate_severity("critical", record, config) == "high"

    strict = CalibrationConfig(ignore_rate_downgrade2=0.5, fix_rate_upgrade=0.3, critical_min_severity="critical")
    assert calibrate_severity("critical", record, strict) == "critical"


def test_accepts_record_objects():
    record = AntiPatternCalibration.from_counts("AP-1", total_shown=20, ignored_count=15, fixed_count=0)
    assert record.ignore_rate == 0.75
    assert calibrate_severity("high", record) == "medium"


def test_unknown_severity_unchanged():
    assert calibrate_severity("informational", {"totalShown": 50, "ignoreRate": 1.0}) == "informational"


def test_custom_min_samples():
    config = CalibrationConfig(min_samples_for_calibration=3)
    assert calibrate_severity("high", {"totalShown": 3, "ignoreRate": 0.8}, config) == "medium"


CATALOG = [
    AntiPattern(id="AP-SEC-001", name="Database exposed to internet", severity="high"),
    AntiPattern(id="AP-SEC-002", name="No WAF in front of web tier", severity="medium"),
    AntiPattern(id="AP-REL-001", name="Single point of failure", severity="critical"),
]

RECORDS = {
    "AP-SEC-001": {"totalShown": 20, "ignoreRate": 0.92},
    "AP-REL-001": {"totalShown": 40, "ignoreRate": 0.75},
}


def test_calibrate_anti_patterns_filters_suppressed():
    calibrated = calibrate_anti_patterns(CATALOG, RECORDS)

    assert [c.id for c in calibrated] == ["AP-SEC-002", "AP-REL-001"]

    no_waf, spof = calibrated
    assert not no_waf.was_calibrated
    assert no_waf.total_shown == 0
    assert spof.was_calibrated
    assert spof.original_severity == "critical"
    assert spof.calibrated_severity == "high"
    assert spof.ignore_rate == 0.75


def test_calibrate_anti_patterns_accepts_dicts():
    catalog = [{"id": "AP-1", "name": "Flat network", "severity": "low"}]
    calibrated = calibrate_anti_patterns(catalog, {})
    assert calibrated[0].calibrated_severity == "low"


def test_get_suppressed_ids():
    assert get_suppressed_ids(CATALOG, RECORDS) == ["AP-SEC-001"]


def test_false_positive_rate():
    records = {
        "a": AntiPatternCalibration.from_counts("a", total_shown=10, ignored_count=5, fixed_count=0),
        "b": AntiPatternCalibration.from_counts("b", total_shown=10, ignored_count=1, fixed_count=2),
    }
    assert compute_false_positive_rate(records) == pytest.approx(0.3)
    assert compute_false_positive_rate({}) == 0.0


@pytest.mark.parametrize("record", [
    {"totalShown": 30, "ignoreRate": None, "fixRate": 0.1},
    {"totalShown": None, "ignoreRate": 0.95},
    {"totalShown": "many", "ignoreRate": 0.95},
    {"totalShown": 20, "ignoreRate": "0.9", "fixRate": None},
    {"totalShown": float("nan"), "ignoreRate": 0.95},
    {},
    "not a record",
])
def test_partial_records_leave_severity_unchanged(record):
    assert calibrate_severity("high", record) == "high"


def test_partial_records_in_catalog_helpers():
    records = {
        "AP-SEC-001": {"totalShown": None, "ignoreRate": 0.92},
        "AP-REL-001": {"totalShown": 40, "ignoreRate": None, "fixRate": None},
    }

    calibrated = calibrate_anti_patterns(CATALOG, records)

    assert [c.id for c in calibrated] == ["AP-SEC-001", "AP-SEC-002", "AP-REL-001"]
    assert not any(c.was_calibrated for c in calibrated)
    assert calibrated[2].ignore_rate == 0.0
    assert get_suppressed_ids(CATALOG, records) == []


def test_false_positive_rate_skips_unusable_records():
    records = {
        "a": {"totalShown": None, "ignoredCount": 3},
        "b": {"totalShown": 10, "ignoredCount": None},
        "c": AntiPatternCalibration.from_counts("c", total_shown=10, ignored_count=4, fixed_count=0),
    }
    assert compute_false_positive_rate(records) == pytest.approx(0.2)
