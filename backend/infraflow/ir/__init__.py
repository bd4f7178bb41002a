from .spec import FLOW_TYPES, TIERS, Connection, Node, Spec
from .errors import (
    ApplicationError,
    ErrorCode,
    InfraFlowError,
    JSONExtractionError,
    OperationValidationError,
    SpecContractError,
    ValidationIssue,
)
from .operations import Operation, OperationBatch
from .validation import ValidationResult
