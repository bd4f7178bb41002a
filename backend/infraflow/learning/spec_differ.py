"""
Spec Differ - Structural diff between two infrastructure specs.

Compares the spec the engine produced with the spec the user ended up
with. Nodes are matched by id, connections by the ordered (source, target)
pair; both sides are indexed into dicts so the diff is linear in the size
of the specs.
"""

from collections import Counter
from typing import Dict, List, Tuple

from infraflow.ir.spec import Connection, Node, Spec
from infraflow.learning.models import DiffOperation, DiffResult, PlacementChange

NODE_FIELDS = ("type", "label", "description", "zone", "tier")
CONNECTION_FIELDS = (("flowType", "flow_type"), ("label", "label"))


def compute_spec_diff(original: Spec, modified: Spec) -> DiffResult:
    """Compute the structural diff from ``original`` to ``modified``. Pure."""
    result = DiffResult()

    original_nodes: Dict[str, Node] = {n.id: n for n in original.nodes}
    modified_nodes: Dict[str, Node] = {n.id: n for n in modified.nodes}

    # ---- Removed nodes ----
    for node_id, node in original_nodes.items():
        if node_id not in modified_nodes:
            result.operations.append(DiffOperation(
                type="remove-node",
                node_id=node_id,
                node_type=node.type,
            ))
            result.nodes_removed += 1

    # ---- Added and modified nodes ----
    for node_id, mod_node in modified_nodes.items():
        orig_node = original_nodes.get(node_id)

        if orig_node is None:
            result.operations.append(DiffOperation(
                type="add-node",
                node_id=node_id,
                node_type=mod_node.type,
            ))
            result.nodes_added += 1
            continue

        changes = _diff_node(orig_node, mod_node)
        if changes:
            result.operations.extend(changes)
            result.nodes_modified += 1

        if orig_node.tier != mod_node.tier:
            result.placement_changes.append(PlacementChange(
                node_id=node_id,
                node_type=mod_node.type,
                original_tier=orig_node.tier,
                new_tier=mod_node.tier,
                moved=orig_node.tier != mod_node.tier,
            ))

    # ---- Connections ----
    added, removed, ops = _diff_connections(original.connections, modified.connections)
    result.operations.extend(ops)
    result.connections_added = added
    result.connections_removed = removed

    return result


def _diff_node(original: Node, modified: Node) -> List[DiffOperation]:
    """One modify-node operation per differing field."""
    return [
        DiffOperation(
            type="modify-node",
            node_id=modified.id,
            node_type=modified.type,
            field=name,
            old_value=getattr(original, name),
            new_value=getattr(modified, name),
        )
        for name in NODE_FIELDS
        if getattr(original, name) != getattr(modified, name)
    ]


def _diff_connections(
    original: List[Connection],
    modified: List[Connection],
) -> Tuple[int, int, List[DiffOperation]]:
    ops: List[DiffOperation] = []
    # Last connection wins for a repeated (source, target) pair
    orig_map = {c.key: c for c in original}
    mod_map = {c.key: c for c in modified}

    added = 0
    removed = 0

    for key, conn in orig_map.items():
        if key not in mod_map:
            ops.append(DiffOperation(type="remove-connection", source=conn.source, target=conn.target))
            removed += 1

    for key, conn in mod_map.items():
        orig = orig_map.get(key)
        if orig is None:
            ops.append(DiffOperation(type="add-connection", source=conn.source, target=conn.target))
            added += 1
            continue

        for wire_name, attr in CONNECTION_FIELDS:
            old_value = getattr(orig, attr)
            new_value = getattr(conn, attr)
            if old_value != new_value:
                ops.append(DiffOperation(
                    type="modify-connection",
                    source=conn.source,
                    target=conn.target,
                    field=wire_name,
                    old_value=old_value,
                    new_value=new_value,
                ))

    return added, removed, ops


def has_significant_changes(diff: DiffResult) -> bool:
    """True if any node or connection was added, removed or modified."""
    return (
        diff.nodes_added > 0
        or diff.nodes_removed > 0
        or diff.nodes_modified > 0
        or diff.connections_added > 0
        or diff.connections_removed > 0
    )


def summarize_diff(diff: DiffResult) -> List[Dict[str, object]]:
    """Diff operation counts by type, most common first."""
    counts = Counter(op.type for op in diff.operations)
    return [{"type": op_type, "count": count} for op_type, count in counts.most_common()]
