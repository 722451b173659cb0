"""
errors/taxonomy.py - Error classification for the optimization engine.

Every failure the engine can raise carries a code, a category and a
recoverability flag so callers can render it without parsing messages.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from enum import Enum


class ErrorSeverity(Enum):
    """Error severity levels."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories."""
    # Input errors (1xxx)
    VALIDATION = "validation"

    # Constraint errors (2xxx)
    CONSTRAINT = "constraint"

    # Bounds errors (3xxx)
    BOUNDS = "bounds"

    # Numerical errors (4xxx)
    NUMERICAL = "numerical"

    # Configuration errors (6xxx)
    CONFIGURATION = "configuration"


class ErrorCode(Enum):
    """Specific error codes."""

    # Validation (1xxx)
    VAL_FAILED = 1001
    VAL_SCHEMA = 1002
    VAL_OUT_OF_RANGE = 1003

    # Constraint (2xxx)
    CON_INFEASIBLE = 2001
    CON_VIOLATED = 2002

    # Bounds (3xxx)
    BND_EXCEEDED = 3001

    # Numerical (4xxx)
    NUM_DEGENERATE = 4001
    NUM_NON_FINITE = 4002

    # Configuration (6xxx)
    CFG_INVALID = 6001


class OptimizationError(Exception):
    """
    Base exception for optimization engine failures.

    Carries a structured code so the calculator layer can map failures
    to user messages without string matching.
    """

    code: ErrorCode = ErrorCode.VAL_FAILED
    category: ErrorCategory = ErrorCategory.VALIDATION
    severity: ErrorSeverity = ErrorSeverity.ERROR

    def __init__(
        self,
        message: str = "",
        *,
        recoverable: bool = False,
        details: Optional[Dict[str, Any]] = None,
        **kwargs,
    ):
        self.message = message or self.__class__.__doc__ or "Optimization error"
        self.recoverable = recoverable
        self.details = details or {}
        self.details.update(kwargs)
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code.value,
            "category": self.category.value,
            "severity": self.severity.value,
            "message": self.message,
            "recoverable": self.recoverable,
            "details": self.details,
        }


class ValidationError(OptimizationError):
    """Top-level optimization input is malformed or out of range."""

    code = ErrorCode.VAL_SCHEMA
    category = ErrorCategory.VALIDATION

    def __init__(
        self,
        message: str = "Invalid optimization input",
        field_errors: Optional[List[str]] = None,
        **kwargs,
    ):
        super().__init__(message, recoverable=True, **kwargs)
        self.field_errors = field_errors or []

    def __str__(self) -> str:
        if not self.field_errors:
            return self.message
        return f"{self.message}: {'; '.join(self.field_errors)}"


class InvalidParameterError(OptimizationError):
    """A parameter vector lies outside its material bounds."""

    code = ErrorCode.BND_EXCEEDED
    category = ErrorCategory.BOUNDS

    def __init__(
        self,
        parameter: str,
        value: float,
        lower: float,
        upper: float,
        message: Optional[str] = None,
    ):
        msg = message or (
            f"Parameter '{parameter}'={value} outside bounds [{lower}, {upper}]"
        )
        super().__init__(msg, parameter=parameter, value=value, lower=lower, upper=upper)
        self.parameter = parameter
        self.value = value
        self.lower = lower
        self.upper = upper


class EvaluationError(OptimizationError):
    """The objective model could not evaluate a structurally valid vector."""

    code = ErrorCode.NUM_DEGENERATE
    category = ErrorCategory.NUMERICAL
    severity = ErrorSeverity.CRITICAL

    def __init__(
        self,
        message: str = "Objective evaluation failed",
        original_error: Optional[Exception] = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.original_error = original_error


@dataclass
class InfeasibleConstraintWarning:
    """
    Soft constraint problem detected before or after a run.

    Never raised; collected into the result's warnings list.
    """

    constraint: str
    message: str
    requested: Optional[float] = None
    achievable: Optional[float] = None
    code: ErrorCode = ErrorCode.CON_INFEASIBLE
    severity: ErrorSeverity = ErrorSeverity.WARNING
    context: Dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        return {
            "constraint": self.constraint,
            "message": self.message,
            "requested": self.requested,
            "achievable": self.achievable,
            "code": self.code.value,
            "severity": self.severity.value,
        }
