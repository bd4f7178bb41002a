"""
Validation module for LLM operation payloads and spec invariants.
"""

from infraflow.validation.operation_validator import (
    OperationValidator,
    parse_and_validate,
    raise_on_errors,
    validate_operations,
)

from infraflow.validation.spec_validator import (
    IssueSeverity,
    SpecIssue,
    SpecValidationResult,
    SpecValidator,
    validate_spec,
)

__all__ = [
    "OperationValidator",
    "parse_and_validate",
    "raise_on_errors",
    "validate_operations",
    "IssueSeverity",
    "SpecIssue",
    "SpecValidationResult",
    "SpecValidator",
    "validate_spec",
]
