"""Named solver construction and a tracing convenience driver.

Maps method names to update rules so that callers (the comparison harness,
the CLI) can build solvers from configuration:

    >>> solver = create_solver("gauss_seidel", [[4, 1], [2, 3]], [1, 2], epsilon=1e-8)
    >>> solver.solve()
    array([0.1, 0.6])
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from functools import partial
from typing import TYPE_CHECKING

import numpy as np

from convergence_lab.algorithms.conjugate_gradient import (
    DaiYuan,
    FletcherReeves,
    HestenesStiefel,
    PolakRibiere,
)
from convergence_lab.algorithms.direct import GaussianElimination, LUReference
from convergence_lab.algorithms.engine import RuleFactory, Solver, UpdateRule
from convergence_lab.algorithms.stationary import GaussSeidel, Jacobi, RelaxedGaussSeidel
from convergence_lab.errors import ConfigurationError, ErrorReason

if TYPE_CHECKING:
    from numpy.typing import ArrayLike, NDArray


METHODS: dict[str, type[UpdateRule]] = {
    "jacobi": Jacobi,
    "gauss_seidel": GaussSeidel,
    "relaxed_gauss_seidel": RelaxedGaussSeidel,
    "fletcher_reeves": FletcherReeves,
    "polak_ribiere": PolakRibiere,
    "hestenes_stiefel": HestenesStiefel,
    "dai_yuan": DaiYuan,
    "gauss": GaussianElimination,
    "lu_reference": LUReference,
}
"""Registered update rules by method name."""

DIRECT_METHODS: frozenset[str] = frozenset(
    name for name, rule in METHODS.items() if rule.one_shot
)
"""Methods that finish in exactly one step."""

CONJUGATE_GRADIENT_METHODS: tuple[str, ...] = (
    "dai_yuan",
    "fletcher_reeves",
    "hestenes_stiefel",
    "polak_ribiere",
)


def create_solver(
    method: str,
    A: ArrayLike,
    b: ArrayLike | None = None,
    *,
    epsilon: float | None = None,
    max_iterations: int | None = None,
    norm: float | None = None,
    **params: float,
) -> Solver:
    """Factory function to create solvers by method name.

    Args:
        method: Registered method name (see METHODS).
        A: Coefficient matrix or an existing LinearSystem.
        b: Right-hand side (ignored when A is a LinearSystem).
        epsilon: Convergence threshold on the delta norm.
        max_iterations: Optional iteration cap.
        norm: Norm order of the delta test.
        **params: Rule-specific parameters (e.g. omega=1.8).

    Returns:
        Solver bound to a private copy of the system.

    Example:
        >>> solver = create_solver("relaxed_gauss_seidel", A, b, omega=1.8)
        >>> solver = create_solver("dai_yuan", A, b, epsilon=1e-12)
    """
    if method not in METHODS:
        msg = f"Unknown method: {method}. Available: {list(METHODS.keys())}"
        raise ConfigurationError(ErrorReason.UNKNOWN_METHOD, msg)

    rule_factory: RuleFactory = METHODS[method]
    if params:
        rule_factory = partial(METHODS[method], **params)

    try:
        return Solver(
            A,
            b,
            rule_factory,
            epsilon=epsilon,
            max_iterations=max_iterations,
            norm=norm,
        )
    except TypeError as exc:
        if not params:
            raise
        msg = f"Invalid parameters for {method}: {sorted(params)}"
        raise ConfigurationError(ErrorReason.INVALID_PARAMETER, msg) from exc


@dataclass(frozen=True, slots=True)
class SolverTrace:
    """Complete trace of one solver run."""

    name: str
    """Solver label."""

    solution: NDArray[np.float64]
    """Last approximation produced."""

    iterations: int
    """Number of approximations produced."""

    capped: bool
    """True if the run stopped because the iteration cap was reached."""

    total_time: float
    """Wall clock time (seconds)."""

    delta_history: tuple[float, ...]
    """Norm of x_k - x_{k-1} per iteration (inf for the first)."""

    error_history: tuple[float, ...]
    """Infinity-norm error against the reference (empty without reference)."""


def run_solver(
    method: str,
    A: ArrayLike,
    b: ArrayLike | None = None,
    *,
    reference: NDArray[np.floating] | None = None,
    max_iterations: int | None = None,
    **kwargs: float,
) -> SolverTrace:
    """Run a solver to the end of its sequence, recording its history.

    Convenience function that handles the iteration loop and tracking.

    Args:
        method: Registered method name.
        A: Coefficient matrix or LinearSystem.
        b: Right-hand side.
        reference: Optional exact solution for error tracking.
        max_iterations: Optional iteration cap.
        **kwargs: Forwarded to create_solver (epsilon, norm, omega, ...).

    Returns:
        SolverTrace with complete execution history.
    """
    solver = create_solver(method, A, b, max_iterations=max_iterations, **kwargs)

    deltas: list[float] = []
    errors: list[float] = []
    previous: NDArray[np.float64] | None = None
    solution: NDArray[np.float64] | None = None

    start_time = time.perf_counter()
    sequence = solver.sequence()

    for x in sequence:
        if previous is None:
            deltas.append(float("inf"))
        else:
            deltas.append(float(np.linalg.norm(x - previous, ord=np.inf)))
        if reference is not None:
            errors.append(float(np.linalg.norm(x - reference, ord=np.inf)))
        previous = x
        solution = x

    total_time = time.perf_counter() - start_time

    capped = (
        method not in DIRECT_METHODS
        and max_iterations is not None
        and sequence.steps >= max_iterations
    )

    return SolverTrace(
        name=solver.name,
        solution=solution if solution is not None else np.empty(0),
        iterations=sequence.steps,
        capped=capped,
        total_time=total_time,
        delta_history=tuple(deltas),
        error_history=tuple(errors),
    )


__all__ = [
    "CONJUGATE_GRADIENT_METHODS",
    "DIRECT_METHODS",
    "METHODS",
    "SolverTrace",
    "create_solver",
    "run_solver",
]
