"""
Learning loop: spec diffs, modification scoring and anti-pattern calibration.
"""

from infraflow.learning.calibration import (
    DEFAULT_CALIBRATION_CONFIG,
    calibrate_anti_patterns,
    calibrate_severity,
    compute_false_positive_rate,
    get_suppressed_ids,
)
from infraflow.learning.calibration_store import (
    CalibrationStore,
    RingBuffer,
    compute_calibration_data,
)
from infraflow.learning.models import (
    SEVERITY_ORDER,
    AntiPattern,
    AntiPatternCalibration,
    AntiPatternInteraction,
    CalibratedAntiPattern,
    DiffOperation,
    DiffResult,
    PlacementChange,
)
from infraflow.learning.scoring import compute_modification_score
from infraflow.learning.spec_differ import (
    compute_spec_diff,
    has_significant_changes,
    summarize_diff,
)

__all__ = [
    "DEFAULT_CALIBRATION_CONFIG",
    "calibrate_anti_patterns",
    "calibrate_severity",
    "compute_false_positive_rate",
    "get_suppressed_ids",
    "CalibrationStore",
    "RingBuffer",
    "compute_calibration_data",
    "SEVERITY_ORDER",
    "AntiPattern",
    "AntiPatternCalibration",
    "AntiPatternInteraction",
    "CalibratedAntiPattern",
    "DiffOperation",
    "DiffResult",
    "PlacementChange",
    "compute_modification_score",
    "compute_spec_diff",
    "has_significant_changes",
    "summarize_diff",
]
