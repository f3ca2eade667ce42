"""Convergence tests for the approximation sequence.

A convergence test decides, after every step, whether two successive
approximations are close enough to stop. Tests are swapped via dependency
injection into the engine.

Key Tests:
- NormThreshold: ||x_k - x_{k-1}|| <= epsilon
- IterationBudget: wraps another test and forces a stop once a step cap is hit
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from convergence_lab.data.settings import DEFAULT_EPSILON, DEFAULT_NORM, SolverSettings

if TYPE_CHECKING:
    from numpy.typing import NDArray


class ConvergenceTest(ABC):
    """Abstract base class for convergence tests."""

    __slots__ = ()

    @abstractmethod
    def is_converged(self, delta: NDArray[np.float64], steps: int) -> bool:
        """Decide whether iteration may stop.

        Args:
            delta: Difference between the two most recent approximations.
            steps: Number of approximations produced so far.

        Returns:
            True once the sequence should end.
        """

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


@dataclass(frozen=True, slots=True)
class NormThreshold(ConvergenceTest):
    """Stop when a vector norm of delta falls at or below epsilon.

    Args:
        epsilon: Precision threshold.
        norm: Norm order for numpy.linalg.norm (default: infinity norm).
    """

    epsilon: float = DEFAULT_EPSILON
    norm: float = DEFAULT_NORM

    def is_converged(self, delta: NDArray[np.float64], steps: int) -> bool:  # noqa: ARG002
        # NaN never compares <= epsilon, so a NaN delta keeps iterating
        return bool(np.linalg.norm(delta, ord=self.norm) <= self.epsilon)

    def __repr__(self) -> str:
        return f"NormThreshold(epsilon={self.epsilon:g}, norm={self.norm})"


@dataclass(frozen=True, slots=True)
class IterationBudget(ConvergenceTest):
    """Report convergence once max_iterations steps were taken.

    Whether the run stopped on precision or on the budget is not part of the
    decision; callers compare the step count against ``max_iterations``.
    """

    inner: ConvergenceTest
    max_iterations: int

    def is_converged(self, delta: NDArray[np.float64], steps: int) -> bool:
        if steps >= self.max_iterations:
            return True
        return self.inner.is_converged(delta, steps)

    def __repr__(self) -> str:
        return f"IterationBudget({self.inner!r}, max_iterations={self.max_iterations})"


def create_test(settings: SolverSettings) -> ConvergenceTest:
    """Build the convergence test described by solver settings."""
    test: ConvergenceTest = NormThreshold(settings.epsilon, settings.norm)
    if settings.max_iterations is not None:
        test = IterationBudget(test, settings.max_iterations)
    return test


__all__ = [
    "ConvergenceTest",
    "IterationBudget",
    "NormThreshold",
    "create_test",
]
