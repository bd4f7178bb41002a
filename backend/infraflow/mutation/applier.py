"""
Operation Applier - Executes validated operations against a Spec.

Operations run strictly in array order against an accumulating copy of the
spec, so later operations see the effects of earlier ones. A failing
operation is recorded and skipped; operations already applied in the same
batch stay applied (no rollback). Contradictory operations on the same node
resolve as last write wins.
"""

import logging
import uuid
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional

from infraflow.catalog.components import label_for_type, tier_for_type
from infraflow.ir.errors import ApplicationError, ErrorCode
from infraflow.ir.operations import (
    AddOperation,
    ConnectOperation,
    DisconnectOperation,
    ModifyOperation,
    Operation,
    RemoveOperation,
    ReplaceOperation,
)
from infraflow.ir.spec import DEFAULT_FLOW_TYPE, Connection, Node, Spec
from infraflow.validation.spec_validator import raise_on_errors

logger = logging.getLogger(__name__)


@dataclass
class OperationError:
    """Failure of a single operation within a batch"""
    index: int
    op_type: str
    code: ErrorCode
    message: str

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "op_type": self.op_type,
            "code": self.code.value,
            "message": self.message,
        }


@dataclass
class ApplyResult:
    """Result of applying an operation batch"""
    success: bool
    spec: Spec
    applied_ops: int = 0
    errors: List[OperationError] = field(default_factory=list)
    node_id_mappings: Dict[str, str] = field(default_factory=dict)  # old id -> new id (replace)
    changes_made: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "spec": self.spec.to_dict(),
            "applied_ops": self.applied_ops,
            "errors": [e.to_dict() for e in self.errors],
            "node_id_mappings": dict(self.node_id_mappings),
            "changes_made": list(self.changes_made),
        }


# ============================================================
# NODE LOOKUP HELPERS
# ============================================================

def find_node(spec: Spec, target: str) -> Optional[Node]:
    """
    Resolve an operation target to a node.

    Tries, in order: exact id, first node of that type, first node whose
    id or type contains the target text.
    """
    node = spec.get_node(target)
    if node is None:
        node = spec.first_of_type(target)
    if node is None:
        node = next(
            (n for n in spec.nodes if target in n.id or target in n.type),
            None,
        )
    return node


def generate_node_id(kind: str, existing: Iterable[str]) -> str:
    """Fresh node id of the form '<kind>-<8 hex chars>', unique within ``existing``."""
    taken = set(existing)
    while True:
        candidate = f"{kind}-{uuid.uuid4().hex[:8]}"
        if candidate not in taken:
            return candidate


class OperationApplier:
    """
    Applies typed operations to an infrastructure spec.

    Usage:
        applier = OperationApplier()
        result = applier.apply(spec, validation_result.operations)

        for error in result.errors:
            print(f"op #{error.index} ({error.op_type}): {error.message}")
    """

    def __init__(self):
        self._handlers: Dict[str, Callable[[Spec, Operation, ApplyResult], str]] = {
            "replace": self._apply_replace,
            "add": self._apply_add,
            "remove": self._apply_remove,
            "modify": self._apply_modify,
            "connect": self._apply_connect,
            "disconnect": self._apply_disconnect,
        }

    def apply(self, spec: Spec, operations: List[Operation]) -> ApplyResult:
        # Caller contract: duplicate ids or dangling connections raise
        raise_on_errors(spec)

        working = spec.copy()
        result = ApplyResult(success=True, spec=working)

        for index, op in enumerate(operations):
            handler = self._handlers.get(op.type)
            if handler is None:
                self._record_failure(
                    result, index, op.type,
                    ApplicationError(f"Unknown operation type: {op.type}", ErrorCode.INVALID_OPERATION),
                )
                continue
            try:
                change = handler(working, op, result)
            except ApplicationError as e:
                self._record_failure(result, index, op.type, e)
                continue

            result.applied_ops += 1
            result.changes_made.append(change)
            logger.debug("[APPLIER] #%d %s: %s", index, op.type, change)

        result.success = not result.errors
        return result

    def _record_failure(self, result: ApplyResult, index: int, op_type: str, error: ApplicationError) -> None:
        logger.warning("[APPLIER] Operation #%d (%s) failed: %s", index, op_type, error.message)
        result.errors.append(OperationError(
            index=index,
            op_type=op_type,
            code=error.code,
            message=error.message,
        ))

    def _require_node(self, spec: Spec, target: str) -> Node:
        node = find_node(spec, target)
        if node is None:
            raise ApplicationError.node_not_found(target)
        return node

    # ============================================================
    # OPERATION HANDLERS
    # ============================================================

    def _apply_replace(self, spec: Spec, op: ReplaceOperation, result: ApplyResult) -> str:
        old_node = self._require_node(spec, op.target)
        new_type = op.data.new_type
        new_id = generate_node_id(new_type, spec.node_ids())

        new_node = Node(
            id=new_id,
            type=new_type,
            label=op.data.label or label_for_type(new_type),
            tier=old_node.tier or tier_for_type(new_type),
            zone=old_node.zone,
            description=op.data.description or old_node.description,
        )
        index = spec.node_ids().index(old_node.id)
        spec.nodes[index] = new_node
        result.node_id_mappings[old_node.id] = new_id

        if op.data.preserve_connections:
            for conn in spec.connections:
                if conn.source == old_node.id:
                    conn.source = new_id
                if conn.target == old_node.id:
                    conn.target = new_id
        else:
            spec.connections = [
                c for c in spec.connections
                if c.source != old_node.id and c.target != old_node.id
            ]

        return f"Replaced {old_node.id} with {new_id} ({new_type})"

    def _apply_add(self, spec: Spec, op: AddOperation, result: ApplyResult) -> str:
        kind = op.target
        data = op.data

        # Resolve references before touching the spec
        between = None
        if data.between_nodes:
            first, second = data.between_nodes
            between = (self._require_node(spec, first), self._require_node(spec, second))
        after = find_node(spec, data.after_node) if data.after_node else None
        before = find_node(spec, data.before_node) if data.before_node else None

        new_id = generate_node_id(kind, spec.node_ids())
        spec.nodes.append(Node(
            id=new_id,
            type=kind,
            label=data.label or label_for_type(kind),
            tier=data.tier or tier_for_type(kind),
            description=data.description,
        ))

        if between:
            source, target = between
            spec.connections = [
                c for c in spec.connections
                if not (c.source == source.id and c.target == target.id)
            ]
            spec.connections.append(Connection(source.id, new_id, DEFAULT_FLOW_TYPE))
            spec.connections.append(Connection(new_id, target.id, DEFAULT_FLOW_TYPE))
        else:
            if after is not None:
                spec.connections.append(Connection(after.id, new_id, DEFAULT_FLOW_TYPE))
            if before is not None:
                spec.connections.append(Connection(new_id, before.id, DEFAULT_FLOW_TYPE))

        return f"Added {new_id} ({kind})"

    def _apply_remove(self, spec: Spec, op: RemoveOperation, result: ApplyResult) -> str:
        node = self._require_node(spec, op.target)
        spec.remove_node(node.id)
        return f"Removed {node.id}"

    def _apply_modify(self, spec: Spec, op: ModifyOperation, result: ApplyResult) -> str:
        node = self._require_node(spec, op.target)
        changed = []
        for attr in ("label", "description", "tier"):
            value = getattr(op.data, attr)
            if value:
                setattr(node, attr, value)
                changed.append(attr)
        return f"Modified {node.id} ({', '.join(changed) or 'no fields'})"

    def _apply_connect(self, spec: Spec, op: ConnectOperation, result: ApplyResult) -> str:
        source = find_node(spec, op.data.source)
        if source is None:
            raise ApplicationError(f"Source node not found: {op.data.source}", ErrorCode.NODE_NOT_FOUND)
        target = find_node(spec, op.data.target)
        if target is None:
            raise ApplicationError(f"Target node not found: {op.data.target}", ErrorCode.NODE_NOT_FOUND)

        if any(c.source == source.id and c.target == target.id for c in spec.connections):
            return f"Connection {source.id} -> {target.id} already exists"

        spec.connections.append(Connection(
            source=source.id,
            target=target.id,
            flow_type=op.data.flow_type or DEFAULT_FLOW_TYPE,
            label=op.data.label,
        ))
        return f"Connected {source.id} -> {target.id}"

    def _apply_disconnect(self, spec: Spec, op: DisconnectOperation, result: ApplyResult) -> str:
        source = find_node(spec, op.data.source)
        target = find_node(spec, op.data.target)
        before = len(spec.connections)

        if source is None or target is None:
            # Unresolved endpoints: match connection ids directly
            src, tgt = op.data.source, op.data.target
            spec.connections = [
                c for c in spec.connections
                if not (
                    (c.source == src or src in c.source)
                    and (c.target == tgt or tgt in c.target)
                )
            ]
            label = f"{src} -> {tgt}"
        else:
            spec.connections = [
                c for c in spec.connections
                if not (c.source == source.id and c.target == target.id)
            ]
            label = f"{source.id} -> {target.id}"

        removed = before - len(spec.connections)
        return f"Disconnected {label} ({removed} removed)"


def apply_operations(spec: Spec, operations: List[Operation]) -> ApplyResult:
    """Convenience function to apply an operation batch."""
    return OperationApplier().apply(spec, operations)
