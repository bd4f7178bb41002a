"""
Operation Validator - LLM trust boundary for diagram modifications.

Turns a decoded JSON payload of the form

    {"reasoning": "...", "operations": [{"type": "add", ...}, ...]}

into a list of typed operations. Validation is all-or-nothing: one bad
operation rejects the whole batch. Bad payloads never raise; they come back
as a failed ValidationResult carrying ordered {path, message} issues.
"""

import logging
from typing import Any, List, Sequence

from pydantic import ValidationError as PydanticValidationError

from infraflow.ir.errors import (
    ErrorCode,
    JSONExtractionError,
    OperationValidationError,
    ValidationIssue,
)
from infraflow.ir.operations import OPERATION_TYPES, OperationBatch
from infraflow.ir.validation import ValidationResult
from infraflow.utils.json_extract import extract_json

logger = logging.getLogger(__name__)


def _format_path(loc: Sequence[Any]) -> str:
    """
    Dotted path for a pydantic error location.

    Discriminated unions add the variant tag after the list index
    (operations.0.connect.data.source); the tag is dropped.
    """
    parts: List[str] = []
    previous = None
    for item in loc:
        if isinstance(previous, int) and item in OPERATION_TYPES:
            previous = item
            continue
        parts.append(str(item))
        previous = item
    return ".".join(parts)


def _issues_from_error(exc: PydanticValidationError) -> List[ValidationIssue]:
    return [
        ValidationIssue(path=_format_path(err["loc"]), message=err["msg"])
        for err in exc.errors(include_url=False)
    ]


class OperationValidator:
    """
    Validates LLM responses against the operation schema.

    Usage:
        validator = OperationValidator()
        result = validator.parse(llm_text)

        if not result.is_valid:
            for issue in result.issues:
                print(f"{issue.path}: {issue.message}")
    """

    def validate(self, payload: Any) -> ValidationResult:
        """Validate an already-decoded JSON payload."""
        try:
            batch = OperationBatch.model_validate(payload)
        except PydanticValidationError as e:
            issues = _issues_from_error(e)
            logger.warning("[VALIDATOR] Rejected response with %d issue(s)", len(issues))
            for issue in issues:
                logger.debug("[VALIDATOR]   %s", issue)
            return ValidationResult.failure(issues, ErrorCode.INVALID_RESPONSE)

        logger.debug("[VALIDATOR] Accepted %d operation(s)", len(batch.operations))
        return ValidationResult.success(batch.reasoning, batch.operations)

    def parse(self, text: str) -> ValidationResult:
        """Extract JSON from raw LLM text, then validate it."""
        try:
            payload = extract_json(text)
        except JSONExtractionError as e:
            logger.warning("[VALIDATOR] %s", e.message)
            return ValidationResult.failure(
                [ValidationIssue(path="", message=e.message)],
                ErrorCode.NO_JSON,
            )
        return self.validate(payload)


def validate_operations(payload: Any) -> ValidationResult:
    """Convenience function to validate a decoded payload."""
    return OperationValidator().validate(payload)


def parse_and_validate(text: str) -> ValidationResult:
    """Convenience function to extract and validate raw LLM output."""
    return OperationValidator().parse(text)


def raise_on_errors(result: ValidationResult) -> None:
    """Raise if the validation result is a failure."""
    if result.is_valid:
        return
    if result.error_code is ErrorCode.NO_JSON:
        raise JSONExtractionError(result.get_summary())
    raise OperationValidationError(
        f"LLM response validation failed: {result.get_summary()}",
        result.issues,
    )
