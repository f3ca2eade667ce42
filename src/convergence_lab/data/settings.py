"""
Solver Settings - Defaults and Validation

Central place for the numeric defaults shared by the engine, the solver
registry and the comparison harness.
"""

from dataclasses import dataclass, replace

import numpy as np

from convergence_lab.errors import ConfigurationError, ErrorReason

# =============================================================================
# DEFAULTS
# =============================================================================

DEFAULT_EPSILON: float = 1e-10
"""Default precision threshold on ||x_k - x_{k-1}||."""

DEFAULT_NORM: float = np.inf
"""Default vector norm order for the convergence test (max-abs norm)."""

HARNESS_ITERATION_CEILING: int = 10_000
"""Iterations after which the harness treats a run as hung."""

DEFAULT_RELAXATION_FACTORS: tuple[float, ...] = (0.3, 1.8)
"""Relaxation factors compared by the default harness solver set."""

_VALID_NORMS: tuple[float, ...] = (1, 2, np.inf)


@dataclass(frozen=True, slots=True)
class SolverSettings:
    """Validated iteration settings for one solver instance."""

    epsilon: float = DEFAULT_EPSILON
    """Stop once the delta norm falls at or below this value."""

    max_iterations: int | None = None
    """Iteration cap (None: unbounded)."""

    norm: float = DEFAULT_NORM
    """Norm order passed to numpy.linalg.norm."""

    def __post_init__(self) -> None:
        if not np.isfinite(self.epsilon) or self.epsilon < 0:
            raise ConfigurationError(
                ErrorReason.INVALID_PARAMETER,
                f"epsilon must be a finite non-negative number, got {self.epsilon}",
            )
        if self.max_iterations is not None and self.max_iterations < 1:
            raise ConfigurationError(
                ErrorReason.INVALID_PARAMETER,
                f"max_iterations must be at least 1, got {self.max_iterations}",
            )
        if self.norm not in _VALID_NORMS:
            raise ConfigurationError(
                ErrorReason.INVALID_PARAMETER,
                f"Unknown norm order: {self.norm}. Valid: {list(_VALID_NORMS)}",
            )

    def with_overrides(self, **overrides: object) -> "SolverSettings":
        """Return a copy with the given fields replaced (None values ignored)."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes)


DEFAULT_SETTINGS = SolverSettings()


__all__ = [
    "DEFAULT_EPSILON",
    "DEFAULT_NORM",
    "DEFAULT_RELAXATION_FACTORS",
    "DEFAULT_SETTINGS",
    "HARNESS_ITERATION_CEILING",
    "SolverSettings",
]
