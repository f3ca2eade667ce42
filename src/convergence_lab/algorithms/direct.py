"""Direct solvers used as comparison entrants and as the error baseline.

Both rules produce the exact solution in a single step. They are flagged
one_shot, so their approximation sequence has exactly one element however
they are bound.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from convergence_lab.algorithms.engine import UpdateRule
from convergence_lab.errors import ComputationError, ErrorReason

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from convergence_lab.data.linear_system import LinearSystem


def gaussian_elimination(
    A: NDArray[np.float64], b: NDArray[np.float64]
) -> NDArray[np.float64]:
    """Solve A x = b by Gaussian elimination with partial pivoting.

    Raises:
        ComputationError: SINGULAR_SYSTEM if a pivot is numerically zero.
    """
    n = A.shape[0]
    M = A.astype(np.float64, copy=True)
    y = b.astype(np.float64, copy=True)

    scale = float(np.max(np.abs(M))) if M.size else 0.0
    tolerance = n * np.finfo(np.float64).eps * scale

    for k in range(n):
        pivot_row = k + int(np.argmax(np.abs(M[k:, k])))
        if abs(M[pivot_row, k]) <= tolerance:
            raise ComputationError(
                ErrorReason.SINGULAR_SYSTEM,
                f"Singular system: pivot {M[pivot_row, k]:.3e} in column {k}",
            )

        if pivot_row != k:
            M[[k, pivot_row]] = M[[pivot_row, k]]
            y[[k, pivot_row]] = y[[pivot_row, k]]

        factors = M[k + 1 :, k] / M[k, k]
        M[k + 1 :, k:] -= np.outer(factors, M[k, k:])
        y[k + 1 :] -= factors * y[k]

    x = np.zeros(n)
    for k in range(n - 1, -1, -1):
        x[k] = (y[k] - M[k, k + 1 :] @ x[k + 1 :]) / M[k, k]

    return x


def reference_solution(system: LinearSystem) -> NDArray[np.float64]:
    """Exact solution via LAPACK LU (numpy.linalg.solve)."""
    try:
        return np.linalg.solve(system.A, system.b)
    except np.linalg.LinAlgError as exc:
        raise ComputationError(
            ErrorReason.SINGULAR_SYSTEM, f"Singular system: {exc}"
        ) from exc


class GaussianElimination(UpdateRule):
    """One-shot Gaussian elimination with partial pivoting."""

    label = "gauss"
    one_shot = True

    def compute_next(self, current: NDArray[np.float64]) -> NDArray[np.float64]:  # noqa: ARG002
        return gaussian_elimination(self.system.A, self.system.b)


class LUReference(UpdateRule):
    """One-shot LAPACK LU solve, the ground truth for error measurement."""

    label = "lu_reference"
    one_shot = True

    def compute_next(self, current: NDArray[np.float64]) -> NDArray[np.float64]:  # noqa: ARG002
        return reference_solution(self.system)


__all__ = [
    "GaussianElimination",
    "LUReference",
    "gaussian_elimination",
    "reference_solution",
]
