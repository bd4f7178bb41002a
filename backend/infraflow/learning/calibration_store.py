"""
Calibration Store - In-memory anti-pattern interaction recorder.

Keeps the most recent interactions in a fixed-capacity ring buffer and
derives AntiPatternCalibration records from them. Not durable: callers that
need persistence copy the records into their own store.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Dict, Generic, Iterable, Iterator, List, Mapping, Optional, TypeVar

from infraflow.config import INTERACTION_CAPACITY, CalibrationConfig
from infraflow.learning.calibration import calibrate_severity
from infraflow.learning.models import AntiPatternCalibration, AntiPatternInteraction

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RingBuffer(Generic[T]):
    """
    Fixed-capacity buffer with a monotonic write cursor.

    Once full, each append overwrites the oldest slot. Iteration yields
    items oldest first.
    """

    def __init__(self, capacity: int):
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self.capacity = capacity
        self._slots: List[Optional[T]] = [None] * capacity
        self._cursor = 0  # total writes ever made

    def append(self, item: T) -> None:
        self._slots[self._cursor % self.capacity] = item
        self._cursor += 1

    @property
    def total_written(self) -> int:
        return self._cursor

    def __len__(self) -> int:
        return min(self._cursor, self.capacity)

    def __iter__(self) -> Iterator[T]:
        for position in range(self._cursor - len(self), self._cursor):
            yield self._slots[position % self.capacity]

    def clear(self) -> None:
        self._slots = [None] * self.capacity
        self._cursor = 0


def compute_calibration_data(
    interactions: Iterable[AntiPatternInteraction],
    severities: Optional[Mapping[str, str]] = None,
    config: Optional[CalibrationConfig] = None,
) -> Dict[str, AntiPatternCalibration]:
    """
    Group interactions by anti-pattern and compute ignore/fix rates.

    totalShown is max(shown, ignored + fixed): an ignore or fix always
    implies the warning was displayed, even if the 'shown' event was lost.
    When ``severities`` maps an id to its catalog severity, the record's
    original and calibrated severities are filled in.
    """
    grouped: Dict[str, List[AntiPatternInteraction]] = {}
    for interaction in interactions:
        grouped.setdefault(interaction.anti_pattern_id, []).append(interaction)

    records: Dict[str, AntiPatternCalibration] = {}
    for ap_id, items in grouped.items():
        shown = sum(1 for i in items if i.action == "shown")
        ignored = sum(1 for i in items if i.action == "ignored")
        fixed = sum(1 for i in items if i.action == "fixed")

        record = AntiPatternCalibration.from_counts(
            anti_pattern_id=ap_id,
            total_shown=max(shown, ignored + fixed),
            ignored_count=ignored,
            fixed_count=fixed,
            last_updated=max(i.timestamp for i in items),
        )

        if severities and ap_id in severities:
            record.original_severity = severities[ap_id]
            record.calibrated_severity = calibrate_severity(severities[ap_id], record, config)

        records[ap_id] = record

    return records


class CalibrationStore:
    """
    Records shown/ignored/fixed reactions to anti-pattern warnings.

    Usage:
        store = CalibrationStore()
        store.record_shown("AP-SEC-001", session_id="s1")
        store.record_ignored("AP-SEC-001", session_id="s1")
        records = store.get_calibration_data()
    """

    def __init__(self, capacity: int = INTERACTION_CAPACITY):
        self._log: RingBuffer[AntiPatternInteraction] = RingBuffer(capacity)

    def record(
        self,
        anti_pattern_id: str,
        action: str,
        session_id: str = "",
        timestamp: Optional[str] = None,
    ) -> AntiPatternInteraction:
        if action not in ("shown", "ignored", "fixed"):
            raise ValueError(f"Unknown interaction action: {action}")

        interaction = AntiPatternInteraction(
            id=str(uuid.uuid4()),
            timestamp=timestamp or datetime.now(timezone.utc).isoformat(),
            anti_pattern_id=anti_pattern_id,
            action=action,
            session_id=session_id,
        )
        if len(self._log) == self._log.capacity:
            logger.debug("[CALIBRATION] Interaction log full, overwriting oldest entry")
        self._log.append(interaction)
        return interaction

    def record_shown(self, anti_pattern_id: str, session_id: str = "") -> AntiPatternInteraction:
        return self.record(anti_pattern_id, "shown", session_id)

    def record_ignored(self, anti_pattern_id: str, session_id: str = "") -> AntiPatternInteraction:
        return self.record(anti_pattern_id, "ignored", session_id)

    def record_fixed(self, anti_pattern_id: str, session_id: str = "") -> AntiPatternInteraction:
        return self.record(anti_pattern_id, "fixed", session_id)

    def get_interactions(self, anti_pattern_id: Optional[str] = None) -> List[AntiPatternInteraction]:
        if anti_pattern_id is None:
            return list(self._log)
        return [i for i in self._log if i.anti_pattern_id == anti_pattern_id]

    def get_calibration_data(
        self,
        severities: Optional[Mapping[str, str]] = None,
        config: Optional[CalibrationConfig] = None,
    ) -> Dict[str, AntiPatternCalibration]:
        return compute_calibration_data(self._log, severities, config)

    def count(self) -> int:
        return len(self._log)

    def clear(self) -> None:
        self._log.clear()
