"""
Learning Models - Data types for diffs, feedback and anti-pattern calibration.

Wire dictionaries use camelCase keys (nodeId, ignoreRate, ...); the Python
attributes are snake_case.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional


Severity = Literal["critical", "high", "medium", "low", "suppressed"]

# Most to least severe
SEVERITY_ORDER = ("critical", "high", "medium", "low", "suppressed")

InteractionAction = Literal["shown", "ignored", "fixed"]


# ============================================================
# SPEC DIFF
# ============================================================

@dataclass
class DiffOperation:
    """One atomic structural change between two specs"""
    type: str  # add-node | remove-node | modify-node | add-connection | remove-connection | modify-connection
    node_id: Optional[str] = None
    node_type: Optional[str] = None
    field: Optional[str] = None
    old_value: Any = None
    new_value: Any = None
    source: Optional[str] = None
    target: Optional[str] = None

    def to_dict(self) -> dict:
        data = {"type": self.type}
        for key, attr in (
            ("nodeId", "node_id"),
            ("nodeType", "node_type"),
            ("field", "field"),
            ("source", "source"),
            ("target", "target"),
        ):
            value = getattr(self, attr)
            if value is not None:
                data[key] = value
        if self.field is not None:
            data["oldValue"] = self.old_value
            data["newValue"] = self.new_value
        return data


@dataclass
class PlacementChange:
    """A tier correction on a node present in both specs"""
    node_id: str
    node_type: str
    original_tier: Optional[str]
    new_tier: Optional[str]
    moved: bool

    def to_dict(self) -> dict:
        return {
            "nodeId": self.node_id,
            "nodeType": self.node_type,
            "originalTier": self.original_tier,
            "newTier": self.new_tier,
            "moved": self.moved,
        }


@dataclass
class DiffResult:
    operations: List[DiffOperation] = field(default_factory=list)
    nodes_added: int = 0
    nodes_removed: int = 0
    nodes_modified: int = 0
    connections_added: int = 0
    connections_removed: int = 0
    placement_changes: List[PlacementChange] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "operations": [op.to_dict() for op in self.operations],
            "nodesAdded": self.nodes_added,
            "nodesRemoved": self.nodes_removed,
            "nodesModified": self.nodes_modified,
            "connectionsAdded": self.connections_added,
            "connectionsRemoved": self.connections_removed,
            "placementChanges": [p.to_dict() for p in self.placement_changes],
        }


# ============================================================
# ANTI-PATTERN CALIBRATION
# ============================================================

@dataclass(frozen=True)
class AntiPattern:
    """Catalog risk rule. Owned by the knowledge catalog, read-only here."""
    id: str
    name: str
    severity: str
    description: str = ""


@dataclass
class AntiPatternInteraction:
    """A single user reaction to an anti-pattern warning"""
    id: str
    timestamp: str
    anti_pattern_id: str
    action: InteractionAction
    session_id: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "antiPatternId": self.anti_pattern_id,
            "action": self.action,
            "sessionId": self.session_id,
        }


@dataclass
class AntiPatternCalibration:
    """Accumulated interaction statistics for one anti-pattern"""
    anti_pattern_id: str = ""
    total_shown: int = 0
    ignored_count: int = 0
    fixed_count: int = 0
    ignore_rate: float = 0.0
    fix_rate: float = 0.0
    original_severity: Optional[str] = None
    calibrated_severity: Optional[str] = None
    last_updated: Optional[str] = None

    @classmethod
    def from_counts(
        cls,
        anti_pattern_id: str,
        total_shown: int,
        ignored_count: int,
        fixed_count: int,
        last_updated: Optional[str] = None,
    ) -> "AntiPatternCalibration":
        return cls(
            anti_pattern_id=anti_pattern_id,
            total_shown=total_shown,
            ignored_count=ignored_count,
            fixed_count=fixed_count,
            ignore_rate=ignored_count / total_shown if total_shown > 0 else 0.0,
            fix_rate=fixed_count / total_shown if total_shown > 0 else 0.0,
            last_updated=last_updated,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AntiPatternCalibration":
        """Accepts camelCase wire keys or snake_case attribute names."""
        def pick(camel: str, snake: str, default=None):
            if camel in data:
                return data[camel]
            return data.get(snake, default)

        return cls(
            anti_pattern_id=pick("antiPatternId", "anti_pattern_id", ""),
            total_shown=pick("totalShown", "total_shown", 0),
            ignored_count=pick("ignoredCount", "ignored_count", 0),
            fixed_count=pick("fixedCount", "fixed_count", 0),
            ignore_rate=pick("ignoreRate", "ignore_rate", 0.0),
            fix_rate=pick("fixRate", "fix_rate", 0.0),
            original_severity=pick("originalSeverity", "original_severity"),
            calibrated_severity=pick("calibratedSeverity", "calibrated_severity"),
            last_updated=pick("lastUpdated", "last_updated"),
        )

    def to_dict(self) -> dict:
        return {
            "antiPatternId": self.anti_pattern_id,
            "totalShown": self.total_shown,
            "ignoredCount": self.ignored_count,
            "fixedCount": self.fixed_count,
            "ignoreRate": self.ignore_rate,
            "fixRate": self.fix_rate,
            "originalSeverity": self.original_severity,
            "calibratedSeverity": self.calibrated_severity,
            "lastUpdated": self.last_updated,
        }


@dataclass
class CalibratedAntiPattern:
    """Catalog entry decorated with its calibrated severity"""
    id: str
    name: str
    original_severity: str
    calibrated_severity: str
    was_calibrated: bool
    ignore_rate: float = 0.0
    fix_rate: float = 0.0
    total_shown: int = 0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "originalSeverity": self.original_severity,
            "calibratedSeverity": self.calibrated_severity,
            "wasCalibrated": self.was_calibrated,
            "ignoreRate": self.ignore_rate,
            "fixRate": self.fix_rate,
            "totalShown": self.total_shown,
        }
