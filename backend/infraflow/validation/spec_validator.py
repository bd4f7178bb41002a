"""
Spec Validator - Checks the structural invariants of an infrastructure spec.

Catches issues like:
- Duplicate node IDs
- Connections referencing missing nodes
- Tiers outside the known tier set
- Self-loops and duplicate connections
- Orphaned nodes (no connections)

Errors break the spec contract and are raised at the applier boundary;
warnings and info are reported only.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Set, Tuple

from infraflow.ir.errors import SpecContractError
from infraflow.ir.spec import FLOW_TYPES, TIERS, Spec


class IssueSeverity(Enum):
    ERROR = "error"      # Spec breaks its invariants
    WARNING = "warning"  # Spec is usable but suspicious
    INFO = "info"        # Suggestions for improvement


@dataclass
class SpecIssue:
    """A single issue found in the spec"""
    severity: IssueSeverity
    code: str           # Machine-readable issue code
    message: str        # Human-readable description
    node_id: Optional[str] = None
    connection: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "severity": self.severity.value,
            "code": self.code,
            "message": self.message,
            "node_id": self.node_id,
            "connection": self.connection,
        }


@dataclass
class SpecValidationResult:
    """Result of spec validation"""
    is_valid: bool
    issues: List[SpecIssue] = field(default_factory=list)
    stats: Dict[str, int] = field(default_factory=dict)

    @property
    def error_count(self) -> int:
        return sum(1 for i in self.issues if i.severity == IssueSeverity.ERROR)

    @property
    def warning_count(self) -> int:
        return sum(1 for i in self.issues if i.severity == IssueSeverity.WARNING)

    @property
    def info_count(self) -> int:
        return sum(1 for i in self.issues if i.severity == IssueSeverity.INFO)

    def codes(self) -> Set[str]:
        return {i.code for i in self.issues}

    def to_dict(self) -> dict:
        return {
            "is_valid": self.is_valid,
            "error_count": self.error_count,
            "warning_count": self.warning_count,
            "info_count": self.info_count,
            "issues": [i.to_dict() for i in self.issues],
            "stats": self.stats,
        }

    def get_summary(self) -> str:
        status = "Valid" if self.is_valid else "Invalid"
        return (
            f"{status} | "
            f"Errors: {self.error_count}, Warnings: {self.warning_count}, Info: {self.info_count}"
        )


class SpecValidator:
    """
    Validates an infrastructure Spec.

    Usage:
        validator = SpecValidator()
        result = validator.validate(spec)
    """

    def __init__(self, strict_mode: bool = False):
        self.strict_mode = strict_mode

    def validate(self, spec: Spec) -> SpecValidationResult:
        issues: List[SpecIssue] = []
        node_ids = set(spec.node_ids())

        issues.extend(self._check_duplicate_node_ids(spec))
        issues.extend(self._check_missing_references(spec, node_ids))
        issues.extend(self._check_tiers(spec))
        issues.extend(self._check_flow_types(spec))
        issues.extend(self._check_self_loops(spec))
        issues.extend(self._check_duplicate_connections(spec))
        issues.extend(self._check_orphaned_nodes(spec, node_ids))

        has_errors = any(i.severity == IssueSeverity.ERROR for i in issues)
        has_warnings = any(i.severity == IssueSeverity.WARNING for i in issues)

        is_valid = not has_errors
        if self.strict_mode:
            is_valid = not has_errors and not has_warnings

        return SpecValidationResult(
            is_valid=is_valid,
            issues=issues,
            stats=self._calculate_stats(spec, node_ids),
        )

    def _check_duplicate_node_ids(self, spec: Spec) -> List[SpecIssue]:
        issues = []
        seen_ids: Dict[str, int] = defaultdict(int)
        for node in spec.nodes:
            seen_ids[node.id] += 1
        for node_id, count in seen_ids.items():
            if count > 1:
                issues.append(SpecIssue(
                    severity=IssueSeverity.ERROR,
                    code="DUPLICATE_NODE_ID",
                    message=f"Duplicate node ID '{node_id}' appears {count} times",
                    node_id=node_id,
                ))
        return issues

    def _check_missing_references(self, spec: Spec, node_ids: Set[str]) -> List[SpecIssue]:
        issues = []
        for conn in spec.connections:
            if conn.source not in node_ids:
                issues.append(SpecIssue(
                    severity=IssueSeverity.ERROR,
                    code="MISSING_SOURCE_NODE",
                    message=f"Connection references non-existent source node '{conn.source}'",
                    connection=f"{conn.source} -> {conn.target}",
                ))
            if conn.target not in node_ids:
                issues.append(SpecIssue(
                    severity=IssueSeverity.ERROR,
                    code="MISSING_TARGET_NODE",
                    message=f"Connection references non-existent target node '{conn.target}'",
                    connection=f"{conn.source} -> {conn.target}",
                ))
        return issues

    def _check_tiers(self, spec: Spec) -> List[SpecIssue]:
        issues = []
        for node in spec.nodes:
            if node.tier is not None and node.tier not in TIERS:
                issues.append(SpecIssue(
                    severity=IssueSeverity.WARNING,
                    code="UNKNOWN_TIER",
                    message=f"Node '{node.id}' has unknown tier '{node.tier}'",
                    node_id=node.id,
                ))
        return issues

    def _check_flow_types(self, spec: Spec) -> List[SpecIssue]:
        # Catalog extensions (wan-link, tunnel, ...) are allowed but noted
        issues = []
        for conn in spec.connections:
            if conn.flow_type is not None and conn.flow_type not in FLOW_TYPES:
                issues.append(SpecIssue(
                    severity=IssueSeverity.INFO,
                    code="EXTENDED_FLOW_TYPE",
                    message=f"Connection uses extended flow type '{conn.flow_type}'",
                    connection=f"{conn.source} -> {conn.target}",
                ))
        return issues

    def _check_self_loops(self, spec: Spec) -> List[SpecIssue]:
        issues = []
        for conn in spec.connections:
            if conn.source == conn.target:
                issues.append(SpecIssue(
                    severity=IssueSeverity.WARNING,
                    code="SELF_LOOP",
                    message=f"Connection creates self-loop on node '{conn.source}'",
                    node_id=conn.source,
                    connection=f"{conn.source} -> {conn.target}",
                ))
        return issues

    def _check_duplicate_connections(self, spec: Spec) -> List[SpecIssue]:
        issues = []
        counts: Dict[Tuple[str, str], int] = defaultdict(int)
        for conn in spec.connections:
            counts[conn.key] += 1
        for (source, target), count in counts.items():
            if count > 1:
                issues.append(SpecIssue(
                    severity=IssueSeverity.INFO,
                    code="DUPLICATE_CONNECTION",
                    message=f"Connection '{source}' -> '{target}' appears {count} times; only the last is tracked by diffs",
                    connection=f"{source} -> {target}",
                ))
        return issues

    def _check_orphaned_nodes(self, spec: Spec, node_ids: Set[str]) -> List[SpecIssue]:
        if len(spec.nodes) < 2:
            return []
        connected = set()
        for conn in spec.connections:
            connected.add(conn.source)
            connected.add(conn.target)
        return [
            SpecIssue(
                severity=IssueSeverity.INFO,
                code="ORPHANED_NODE",
                message=f"Node '{node_id}' has no connections",
                node_id=node_id,
            )
            for node_id in spec.node_ids()
            if node_id not in connected
        ]

    def _calculate_stats(self, spec: Spec, node_ids: Set[str]) -> Dict[str, int]:
        tier_counts: Dict[str, int] = defaultdict(int)
        for node in spec.nodes:
            tier_counts[node.tier or "unassigned"] += 1

        connected = set()
        for conn in spec.connections:
            connected.add(conn.source)
            connected.add(conn.target)

        stats = {
            "nodes": len(spec.nodes),
            "connections": len(spec.connections),
            "orphaned_nodes": len(node_ids - connected),
        }
        stats.update({f"tier_{tier}": count for tier, count in tier_counts.items()})
        return stats


def validate_spec(spec: Spec, strict: bool = False) -> SpecValidationResult:
    """Convenience function to validate a spec."""
    return SpecValidator(strict_mode=strict).validate(spec)


def raise_on_errors(spec: Spec) -> None:
    """Validate spec and raise SpecContractError if its invariants are broken."""
    result = validate_spec(spec)
    if not result.is_valid:
        error_messages = [
            f"[{i.code}] {i.message}"
            for i in result.issues
            if i.severity == IssueSeverity.ERROR
        ]
        raise SpecContractError(
            f"Spec validation failed with {result.error_count} errors:\n" +
            "\n".join(error_messages)
        )
