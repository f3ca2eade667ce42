"""Stationary iterative methods: Jacobi, Gauss-Seidel and relaxed Gauss-Seidel.

All three split A into its diagonal and off-diagonal parts and solve for one
component at a time:

    x_{k+1}[i] = (b[i] - sum_{j != i} A[i][j] * x[j]) / A[i][i]

Jacobi takes every x[j] from the previous iterate; Gauss-Seidel uses the
components already updated in the current sweep. Both converge for strictly
diagonally dominant A.

References:
- Saad: "Iterative Methods for Sparse Linear Systems" (2nd ed.), §4.1
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from convergence_lab.algorithms.engine import UpdateRule
from convergence_lab.errors import ComputationError, ConfigurationError, ErrorReason

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from convergence_lab.data.linear_system import LinearSystem


class _DiagonalSplitting(UpdateRule):
    """Shared diagonal bookkeeping for the stationary methods."""

    def __init__(self, system: LinearSystem) -> None:
        super().__init__(system)
        self._diagonal = np.diag(system.A).copy()
        self._checked = False

    def _check_diagonal(self) -> None:
        """Raise DEGENERATE_DIAGONAL for (near-)zero pivots, once per run."""
        if self._checked:
            return

        row_scale = np.max(np.abs(self.system.A), axis=1)
        tolerance = np.finfo(np.float64).eps * row_scale
        degenerate = np.flatnonzero(np.abs(self._diagonal) <= tolerance)
        if degenerate.size:
            raise ComputationError(
                ErrorReason.DEGENERATE_DIAGONAL,
                f"{self.name}: zero or near-zero diagonal entries at rows "
                f"{degenerate.tolist()}",
            )
        self._checked = True


class Jacobi(_DiagonalSplitting):
    """Jacobi iteration: all components from the previous full vector."""

    label = "jacobi"

    def __init__(self, system: LinearSystem) -> None:
        super().__init__(system)
        self._off_diagonal = system.A - np.diag(self._diagonal)

    def compute_next(self, current: NDArray[np.float64]) -> NDArray[np.float64]:
        self._check_diagonal()
        return (self.system.b - self._off_diagonal @ current) / self._diagonal


class GaussSeidel(_DiagonalSplitting):
    """Gauss-Seidel iteration: sequential substitution within each sweep."""

    label = "gauss_seidel"

    def _sweep(self, current: NDArray[np.float64]) -> NDArray[np.float64]:
        A = self.system.A
        b = self.system.b
        x = current.copy()

        for i in range(self.system.size):
            # x[:i] already holds this sweep's values, x[i+1:] the previous ones
            sigma = A[i, :i] @ x[:i] + A[i, i + 1 :] @ x[i + 1 :]
            x[i] = (b[i] - sigma) / self._diagonal[i]

        return x

    def compute_next(self, current: NDArray[np.float64]) -> NDArray[np.float64]:
        self._check_diagonal()
        return self._sweep(current)


class RelaxedGaussSeidel(GaussSeidel):
    """Gauss-Seidel blended with the previous iterate.

        x_{k+1} = ω · GS(x_k) + (1 - ω) · x_k

    ω < 1 under-relaxes (stabilizes), ω > 1 over-relaxes (accelerates).
    ω = 1 is plain Gauss-Seidel.

    Args:
        system: Linear system.
        omega: Relaxation factor in the open interval (0, 2).
    """

    label = "relaxed_gauss_seidel"

    def __init__(self, system: LinearSystem, omega: float = 1.0) -> None:
        if not 0.0 < omega < 2.0:
            raise ConfigurationError(
                ErrorReason.INVALID_PARAMETER,
                f"Relaxation factor must lie in (0, 2), got {omega}",
            )
        super().__init__(system)
        self.omega = float(omega)

    @property
    def name(self) -> str:
        return f"{self.label}(omega={self.omega:g})"

    def compute_next(self, current: NDArray[np.float64]) -> NDArray[np.float64]:
        self._check_diagonal()
        sweep = self._sweep(current)
        if self.omega == 1.0:
            return sweep
        return self.omega * sweep + (1.0 - self.omega) * current


__all__ = [
    "GaussSeidel",
    "Jacobi",
    "RelaxedGaussSeidel",
]
