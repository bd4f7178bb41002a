from dataclasses import dataclass, field
from typing import List, Optional

from .errors import ErrorCode, ValidationIssue
from .operations import Operation


@dataclass
class ValidationResult:
    is_valid: bool
    issues: List[ValidationIssue] = field(default_factory=list)
    operations: List[Operation] = field(default_factory=list)
    reasoning: Optional[str] = None
    error_code: Optional[ErrorCode] = None

    @classmethod
    def success(cls, reasoning: str, operations: List[Operation]):
        return cls(is_valid=True, operations=list(operations), reasoning=reasoning)

    @classmethod
    def failure(cls, issues: List[ValidationIssue], error_code: ErrorCode = ErrorCode.INVALID_RESPONSE):
        return cls(is_valid=False, issues=list(issues), error_code=error_code)

    def get_summary(self) -> str:
        if self.is_valid:
            return f"Valid: {len(self.operations)} operation(s)"
        return "; ".join(str(i) for i in self.issues) or "Invalid response"

    def to_dict(self) -> dict:
        return {
            "is_valid": self.is_valid,
            "reasoning": self.reasoning,
            "operations": [op.to_dict() for op in self.operations],
            "issues": [i.to_dict() for i in self.issues],
            "error_code": self.error_code.value if self.error_code else None,
        }
