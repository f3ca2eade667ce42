"""Error taxonomy for solver construction, usage and numerical failures.

Three families, each tagged with a machine-readable reason:

- ConfigurationError: bad construction parameters (never retried)
- UsageError: API contract violations such as re-consuming a sequence
- ComputationError: numerical failures raised while iterating
"""

from __future__ import annotations

from enum import Enum


class ErrorReason(Enum):
    """Reason tags carried by every solver error."""

    INVALID_DIMENSIONS = "invalid_dimensions"
    INVALID_PARAMETER = "invalid_parameter"
    UNKNOWN_METHOD = "unknown_method"
    SEQUENCE_ALREADY_CONSUMED = "sequence_already_consumed"
    MALFORMED_UPDATE = "malformed_update"
    DEGENERATE_DIAGONAL = "degenerate_diagonal"
    SINGULAR_SYSTEM = "singular_system"
    BREAKDOWN = "breakdown"
    NON_FINITE = "non_finite"
    EMPTY_SEQUENCE = "empty_sequence"


class SolverError(Exception):
    """Base class for all convergence-lab errors."""

    def __init__(self, reason: ErrorReason, message: str) -> None:
        super().__init__(message)
        self.reason = reason


class ConfigurationError(SolverError, ValueError):
    """Raised at construction time for invalid systems or parameters."""


class UsageError(SolverError, RuntimeError):
    """Raised when the solver API is used out of contract."""


class ComputationError(SolverError, ArithmeticError):
    """Raised when an update rule cannot produce the next approximation."""


class MalformedUpdateError(ComputationError):
    """Update rule returned a vector of the wrong shape."""

    def __init__(
        self, expected: tuple[int, ...], actual: tuple[int, ...]
    ) -> None:
        super().__init__(
            ErrorReason.MALFORMED_UPDATE,
            f"Update rule returned malformed vector: "
            f"expected shape {expected}, got {actual}",
        )
        self.expected = expected
        self.actual = actual


__all__ = [
    "ComputationError",
    "ConfigurationError",
    "ErrorReason",
    "MalformedUpdateError",
    "SolverError",
    "UsageError",
]
