"""
Spec mutation: explicit operation batches and intent-driven changes.
"""

from infraflow.mutation.applier import (
    ApplyResult,
    OperationApplier,
    OperationError,
    apply_operations,
    find_node,
)
from infraflow.mutation.intent import (
    Intent,
    IntentComponent,
    IntentSynthesizer,
    MutationResult,
    PositionInfo,
    SpecModification,
    apply_intent,
)

__all__ = [
    "ApplyResult",
    "OperationApplier",
    "OperationError",
    "apply_operations",
    "find_node",
    "Intent",
    "IntentComponent",
    "IntentSynthesizer",
    "MutationResult",
    "PositionInfo",
    "SpecModification",
    "apply_intent",
]
