from dataclasses import dataclass
from enum import Enum
from typing import List, Optional


class ErrorCode(Enum):
    # Parsing errors
    NO_JSON = "NO_JSON"
    INVALID_RESPONSE = "INVALID_RESPONSE"
    INVALID_OPERATION = "INVALID_OPERATION"

    # Application errors
    NODE_NOT_FOUND = "NODE_NOT_FOUND"
    EMPTY_DIAGRAM = "EMPTY_DIAGRAM"
    MISSING_COMPONENTS = "MISSING_COMPONENTS"
    OPERATION_FAILED = "OPERATION_FAILED"

    # Caller contract
    INVALID_SPEC = "INVALID_SPEC"


@dataclass
class ValidationIssue:
    path: str
    message: str

    def to_dict(self) -> dict:
        return {"path": self.path, "message": self.message}

    def __str__(self) -> str:
        return f"{self.path}: {self.message}" if self.path else self.message


class InfraFlowError(Exception):
    code: ErrorCode = ErrorCode.OPERATION_FAILED

    def __init__(self, message: str, code: Optional[ErrorCode] = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    @property
    def recoverable(self) -> bool:
        return self.code is not ErrorCode.INVALID_SPEC

    def to_dict(self) -> dict:
        return {
            "code": self.code.value,
            "message": self.message,
            "recoverable": self.recoverable,
        }


class JSONExtractionError(InfraFlowError):
    """No JSON object or array could be located in the text."""
    code = ErrorCode.NO_JSON


class OperationValidationError(InfraFlowError):
    """Payload was JSON but did not match the operation schema."""
    code = ErrorCode.INVALID_RESPONSE

    def __init__(self, message: str, issues: Optional[List[ValidationIssue]] = None):
        super().__init__(message)
        self.issues = issues or []

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["issues"] = [i.to_dict() for i in self.issues]
        return data


class ApplicationError(InfraFlowError):
    """An operation could not be applied to the current spec."""

    @classmethod
    def node_not_found(cls, target: str) -> "ApplicationError":
        return cls(f"Node not found: {target}", ErrorCode.NODE_NOT_FOUND)

    @classmethod
    def empty_diagram(cls) -> "ApplicationError":
        return cls("No diagram yet: create an architecture first", ErrorCode.EMPTY_DIAGRAM)

    @classmethod
    def missing_components(cls, message: str) -> "ApplicationError":
        return cls(message, ErrorCode.MISSING_COMPONENTS)


class SpecContractError(InfraFlowError):
    """The caller handed over a spec that breaks its own invariants."""
    code = ErrorCode.INVALID_SPEC
