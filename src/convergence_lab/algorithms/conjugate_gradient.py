"""Conjugate gradient family with interchangeable β strategies.

Solves A @ x = b by minimizing the quadratic f(x) = ½ xᵀAx - bᵀx along
A-conjugate search directions:

    α_k     = (r_k · r_k) / (p_k · A p_k)
    x_{k+1} = x_k + α_k p_k
    r_{k+1} = r_k - α_k A p_k
    p_{k+1} = r_{k+1} + β_k p_k

The four variants differ only in β_k. Writing g = -r for the gradient of f
and y_k = g_{k+1} - g_k = r_k - r_{k+1}:

    Fletcher-Reeves:   (r_{k+1} · r_{k+1}) / (r_k · r_k)
    Polak-Ribière:     (r_{k+1} · (r_{k+1} - r_k)) / (r_k · r_k)
    Hestenes-Stiefel:  (r_{k+1} · (r_{k+1} - r_k)) / (p_k · y_k)
    Dai-Yuan:          (r_{k+1} · r_{k+1}) / (p_k · y_k)

For symmetric positive definite A all four coincide in exact arithmetic and
terminate in at most n steps. Non-symmetric systems are solved through the
normal equations AᵀA x = Aᵀb.

References:
- Shewchuk: "An Introduction to the Conjugate Gradient Method Without the
  Agonizing Pain" (1994)
- Hager & Zhang: "A Survey of Nonlinear Conjugate Gradient Methods" (2006)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, ClassVar

import numpy as np

from convergence_lab.algorithms.engine import UpdateRule
from convergence_lab.errors import ComputationError, ErrorReason

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from convergence_lab.data.linear_system import LinearSystem


class BetaStrategy(ABC):
    """Direction-update coefficient β_k."""

    label: ClassVar[str]

    @abstractmethod
    def beta(
        self,
        r_new: NDArray[np.float64],
        r_old: NDArray[np.float64],
        p: NDArray[np.float64],
    ) -> float:
        """Compute β_k from r_{k+1}, r_k and p_k."""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


def _ratio(numerator: float, denominator: float, label: str) -> float:
    if denominator == 0.0:
        raise ComputationError(
            ErrorReason.BREAKDOWN,
            f"{label}: β denominator vanished with a non-zero residual",
        )
    return numerator / denominator


class FletcherReevesBeta(BetaStrategy):
    label = "fletcher_reeves"

    def beta(self, r_new, r_old, p) -> float:  # noqa: ARG002
        return _ratio(float(r_new @ r_new), float(r_old @ r_old), self.label)


class PolakRibiereBeta(BetaStrategy):
    label = "polak_ribiere"

    def beta(self, r_new, r_old, p) -> float:  # noqa: ARG002
        return _ratio(
            float(r_new @ (r_new - r_old)), float(r_old @ r_old), self.label
        )


class HestenesStiefelBeta(BetaStrategy):
    label = "hestenes_stiefel"

    def beta(self, r_new, r_old, p) -> float:
        return _ratio(
            float(r_new @ (r_new - r_old)), float(p @ (r_old - r_new)), self.label
        )


class DaiYuanBeta(BetaStrategy):
    label = "dai_yuan"

    def beta(self, r_new, r_old, p) -> float:
        return _ratio(float(r_new @ r_new), float(p @ (r_old - r_new)), self.label)


class ConjugateGradient(UpdateRule):
    """Conjugate gradient update rule parameterized by a β strategy.

    Internal state: residual r_k, direction p_k and r_k · r_k, initialized
    lazily from the first approximation the engine passes in.

    Args:
        system: Linear system (non-symmetric A is symmetrized via AᵀA).
        strategy: β strategy (default: Fletcher-Reeves).
    """

    label = "conjugate_gradient"

    def __init__(
        self, system: LinearSystem, strategy: BetaStrategy | None = None
    ) -> None:
        super().__init__(system)
        self.strategy = strategy if strategy is not None else FletcherReevesBeta()

        if system.is_symmetric:
            self._A = system.A
            self._b = system.b
        else:
            self._A = system.A.T @ system.A
            self._b = system.A.T @ system.b

        self._r: NDArray[np.float64] | None = None
        self._p: NDArray[np.float64] | None = None
        self._rr = 0.0

    @property
    def name(self) -> str:
        return self.strategy.label

    def compute_next(self, current: NDArray[np.float64]) -> NDArray[np.float64]:
        if self._r is None:
            self._r = self._b - self._A @ current
            self._p = self._r.copy()
            self._rr = float(self._r @ self._r)

        r, p = self._r, self._p

        # Exact solution reached: the sequence settles on the current iterate
        if self._rr == 0.0:
            return current.copy()

        Ap = self._A @ p
        curvature = float(p @ Ap)
        if curvature == 0.0 or not np.isfinite(curvature):
            raise ComputationError(
                ErrorReason.BREAKDOWN,
                f"{self.name}: search direction has curvature {curvature}",
            )

        alpha = self._rr / curvature
        x_new = current + alpha * p
        r_new = r - alpha * Ap

        rr_new = float(r_new @ r_new)
        beta = 0.0 if rr_new == 0.0 else self.strategy.beta(r_new, r, p)

        self._p = r_new + beta * p
        self._r = r_new
        self._rr = rr_new

        return x_new


class FletcherReeves(ConjugateGradient):
    """Classic linear CG coefficient."""

    label = FletcherReevesBeta.label

    def __init__(self, system: LinearSystem) -> None:
        super().__init__(system, FletcherReevesBeta())


class PolakRibiere(ConjugateGradient):
    label = PolakRibiereBeta.label

    def __init__(self, system: LinearSystem) -> None:
        super().__init__(system, PolakRibiereBeta())


class HestenesStiefel(ConjugateGradient):
    label = HestenesStiefelBeta.label

    def __init__(self, system: LinearSystem) -> None:
        super().__init__(system, HestenesStiefelBeta())


class DaiYuan(ConjugateGradient):
    label = DaiYuanBeta.label

    def __init__(self, system: LinearSystem) -> None:
        super().__init__(system, DaiYuanBeta())


__all__ = [
    "BetaStrategy",
    "ConjugateGradient",
    "DaiYuan",
    "DaiYuanBeta",
    "FletcherReeves",
    "FletcherReevesBeta",
    "HestenesStiefel",
    "HestenesStiefelBeta",
    "PolakRibiere",
    "PolakRibiereBeta",
]
