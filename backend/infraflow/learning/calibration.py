"""
Calibration Engine - Anti-pattern severity adjustment from user feedback.

Rules (once a rule has been shown at least min_samples_for_calibration times):
- ignore_rate >= ignore_rate_downgrade2  -> severity -2 steps (skips 'low' when not offset)
- ignore_rate >= ignore_rate_downgrade1  -> severity -1 step
- fix_rate    >= fix_rate_upgrade        -> severity +1 step
Steps add up, so a -1 downgrade and a +1 upgrade cancel out.

Safety: a critical rule never drops below critical_min_severity.

All functions are pure and never raise. A record without a usable
totalShown leaves the severity unchanged; unreadable rates count as 0.
"""

import math
from dataclasses import replace
from typing import Any, Iterable, List, Mapping, Optional

from infraflow.config import CalibrationConfig
from infraflow.learning.models import (
    SEVERITY_ORDER,
    AntiPatternCalibration,
    CalibratedAntiPattern,
)

DEFAULT_CALIBRATION_CONFIG = CalibrationConfig()

# Ladder for strong downgrades: the advisory 'low' rung is skipped
_STRONG_LADDER = tuple(s for s in SEVERITY_ORDER if s != "low")


def _number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def _as_record(record: Any) -> Optional[AntiPatternCalibration]:
    """Normalised copy of a calibration record, or None when it carries no usable sample count."""
    if isinstance(record, Mapping):
        record = AntiPatternCalibration.from_dict(record)
    if not isinstance(record, AntiPatternCalibration):
        return None
    if _number(record.total_shown) is None:
        return None

    return replace(
        record,
        ignored_count=_number(record.ignored_count) or 0,
        fixed_count=_number(record.fixed_count) or 0,
        ignore_rate=_number(record.ignore_rate) or 0.0,
        fix_rate=_number(record.fix_rate) or 0.0,
    )


def _walk(severity: str, steps: int, ladder: tuple) -> str:
    """Move ``steps`` rungs up (positive) or down (negative), clamped at both ends."""
    index = ladder.index(severity) - steps
    return ladder[max(0, min(index, len(ladder) - 1))]


def calibrate_severity(
    original: str,
    record: Any = None,
    config: Optional[CalibrationConfig] = None,
) -> str:
    """
    Calibrated severity for a single anti-pattern.

    Args:
        original: Baseline severity from the catalog
        record: AntiPatternCalibration (or its dict form) for this rule
        config: Calibration thresholds, defaults to DEFAULT_CALIBRATION_CONFIG

    Returns:
        One of critical, high, medium, low, suppressed
    """
    config = config or DEFAULT_CALIBRATION_CONFIG
    stats = _as_record(record)

    if original not in SEVERITY_ORDER:
        return original
    if stats is None or stats.total_shown < config.min_samples_for_calibration:
        return original

    steps = 0
    strong = False
    if stats.ignore_rate >= config.ignore_rate_downgrade2:
        steps -= 2
        strong = True
    elif stats.ignore_rate >= config.ignore_rate_downgrade1:
        steps -= 1

    if stats.fix_rate >= config.fix_rate_upgrade:
        steps += 1

    # Only a net two-step drop skips the low rung
    ladder = _STRONG_LADDER if strong and steps <= -2 and original != "low" else SEVERITY_ORDER
    severity = _walk(original, steps, ladder)

    # Safety floor for critical rules
    if original == "critical":
        floor = config.critical_min_severity
        if SEVERITY_ORDER.index(severity) > SEVERITY_ORDER.index(floor):
            severity = floor

    return severity


def _field(entry: Any, name: str, default: Any = None) -> Any:
    if isinstance(entry, Mapping):
        return entry.get(name, default)
    return getattr(entry, name, default)


def _calibrate_entry(
    entry: Any,
    records_by_id: Mapping[str, Any],
    config: Optional[CalibrationConfig],
) -> CalibratedAntiPattern:
    entry_id = _field(entry, "id")
    original = _field(entry, "severity")
    stats = _as_record(records_by_id.get(entry_id))
    calibrated = calibrate_severity(original, stats, config)

    return CalibratedAntiPattern(
        id=entry_id,
        name=_field(entry, "name", entry_id),
        original_severity=original,
        calibrated_severity=calibrated,
        was_calibrated=calibrated != original,
        ignore_rate=stats.ignore_rate if stats else 0.0,
        fix_rate=stats.fix_rate if stats else 0.0,
        total_shown=stats.total_shown if stats else 0,
    )


def calibrate_anti_patterns(
    catalog: Iterable[Any],
    records_by_id: Mapping[str, Any],
    config: Optional[CalibrationConfig] = None,
) -> List[CalibratedAntiPattern]:
    """
    Calibrate a list of catalog anti-patterns.

    Entries whose calibrated severity is 'suppressed' are dropped.
    """
    calibrated = [_calibrate_entry(entry, records_by_id, config) for entry in catalog]
    return [c for c in calibrated if c.calibrated_severity != "suppressed"]


def get_suppressed_ids(
    catalog: Iterable[Any],
    records_by_id: Mapping[str, Any],
    config: Optional[CalibrationConfig] = None,
) -> List[str]:
    """IDs of catalog entries that calibrate to 'suppressed'."""
    return [
        c.id
        for c in (_calibrate_entry(entry, records_by_id, config) for entry in catalog)
        if c.calibrated_severity == "suppressed"
    ]


def compute_false_positive_rate(records_by_id: Mapping[str, Any]) -> float:
    """Total ignored / total shown across all anti-patterns (0 when nothing shown)."""
    total_shown = 0
    total_ignored = 0

    for record in records_by_id.values():
        stats = _as_record(record)
        if stats is None:
            continue
        total_shown += stats.total_shown
        total_ignored += stats.ignored_count

    return total_ignored / total_shown if total_shown > 0 else 0.0
