"""
errors/ - Error taxonomy for the optimization engine.
"""

from .taxonomy import (
    ErrorSeverity,
    ErrorCategory,
    ErrorCode,
    OptimizationError,
    ValidationError,
    InvalidParameterError,
    EvaluationError,
    InfeasibleConstraintWarning,
)

__all__ = [
    "ErrorSeverity",
    "ErrorCategory",
    "ErrorCode",
    "OptimizationError",
    "ValidationError",
    "InvalidParameterError",
    "EvaluationError",
    "InfeasibleConstraintWarning",
]
