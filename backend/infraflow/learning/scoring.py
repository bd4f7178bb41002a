from infraflow.learning.models import DiffResult


def compute_modification_score(diff: DiffResult, original_node_count: int) -> float:
    """
    How much of the original spec was changed, in [0, 1].

    Only node changes count toward the magnitude; connection changes make a
    diff significant but do not move the score. A change count equal to the
    original node count scores 1.0.
    """
    if original_node_count <= 0:
        return 0.0

    change_units = diff.nodes_added + diff.nodes_removed + diff.nodes_modified
    return min(1.0, change_units / original_node_count)
