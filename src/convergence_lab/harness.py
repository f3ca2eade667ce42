"""Comparison harness: drives solvers through their public API.

Two experiments, both returning in-memory tables:

- convergence_table(): log10 error against the exact solution per iteration
  and per solver, for one system
- iteration_counts(): average iterations to convergence per solver over a
  sweep of problem sizes

A solver that raises ComputationError, or runs past the iteration ceiling,
is recorded as failed (None cells) and the comparison moves on. The harness
never retries or swaps in another method.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass

import numpy as np

from convergence_lab.algorithms.direct import reference_solution
from convergence_lab.algorithms.engine import Solver
from convergence_lab.algorithms.solvers import create_solver
from convergence_lab.data.linear_system import LinearSystem
from convergence_lab.data.settings import (
    DEFAULT_RELAXATION_FACTORS,
    HARNESS_ITERATION_CEILING,
)
from convergence_lab.errors import ComputationError, ConfigurationError, ErrorReason

logger = logging.getLogger(__name__)

SolverSetFactory = Callable[[LinearSystem, float], list[Solver]]
"""Builds a fresh list of solvers for a system and an epsilon."""

DEFAULT_CONVERGENCE_ROWS: int = 50
DEFAULT_SWEEP_POINTS: int = 10


@dataclass(frozen=True, slots=True)
class ConvergenceTable:
    """log10 error per iteration (rows) and solver (columns)."""

    columns: tuple[str, ...]
    """Solver names."""

    rows: tuple[tuple[float | None, ...], ...]
    """rows[k][j]: log10 error of solver j at iteration k+1 (None if done)."""

    failed: tuple[str, ...]
    """Solvers that raised ComputationError."""


@dataclass(frozen=True, slots=True)
class IterationTable:
    """Average iteration counts per problem size (rows) and solver (columns)."""

    columns: tuple[str, ...]
    sizes: tuple[int, ...]
    rows: tuple[tuple[float | None, ...], ...]
    """rows[i][j]: mean iterations of solver j at sizes[i] (None if failed)."""


def construct_all_solvers(system: LinearSystem, epsilon: float) -> list[Solver]:
    """Default comparison set: four CG variants, the direct solver and the
    stationary methods (unbounded; the harness ceiling stops hung runs).
    """
    solvers = [
        create_solver(method, system, epsilon=epsilon)
        for method in (
            "dai_yuan",
            "fletcher_reeves",
            "hestenes_stiefel",
            "polak_ribiere",
            "gauss",
            "jacobi",
            "gauss_seidel",
        )
    ]
    solvers.extend(
        create_solver("relaxed_gauss_seidel", system, epsilon=epsilon, omega=omega)
        for omega in DEFAULT_RELAXATION_FACTORS
    )
    return solvers


def convergence_table(
    system: LinearSystem,
    epsilon: float,
    *,
    component: int = -1,
    max_rows: int = DEFAULT_CONVERGENCE_ROWS,
    solvers_factory: SolverSetFactory = construct_all_solvers,
) -> ConvergenceTable:
    """Record how fast each solver approaches the exact solution.

    Args:
        system: System to solve.
        epsilon: Convergence threshold (also the floor of the error axis).
        component: Index of the tracked solution component, or -1 for the
            infinity norm of the whole error vector.
        max_rows: Iterations recorded per solver.
        solvers_factory: Builds the compared solvers.
    """
    if not -1 <= component < system.size:
        raise ConfigurationError(
            ErrorReason.INVALID_PARAMETER,
            f"Component {component} out of range for a system of size {system.size}",
        )

    exact = reference_solution(system)
    solvers = solvers_factory(system, epsilon)

    def error(x: np.ndarray) -> float:
        diff = x - exact
        value = np.max(np.abs(diff)) if component == -1 else abs(diff[component])
        return safe_log10(max(float(value), epsilon))

    columns: list[list[float]] = []
    failed: list[str] = []

    for solver in solvers:
        history: list[float] = []
        try:
            for x in solver.sequence():
                history.append(error(x))
                if len(history) >= max_rows:
                    break
        except ComputationError as exc:
            logger.warning("%s failed: %s", solver.name, exc)
            failed.append(solver.name)
        columns.append(history)

    depth = max((len(c) for c in columns), default=0)
    rows = tuple(
        tuple(c[k] if k < len(c) else None for c in columns) for k in range(depth)
    )

    return ConvergenceTable(
        columns=tuple(s.name for s in solvers),
        rows=rows,
        failed=tuple(failed),
    )


def sweep_sizes(max_size: int, points: int, *, exponential: bool) -> list[int]:
    """Problem sizes from 1 to max_size, linearly or exponentially spaced."""
    if max_size < 1 or points < 1:
        raise ConfigurationError(
            ErrorReason.INVALID_PARAMETER,
            f"max_size and points must be positive, got {max_size} and {points}",
        )

    points = min(points, max_size)
    if points == 1:
        return [max_size]

    if exponential:
        return [
            round(10 ** (i / (points - 1) * math.log10(max_size)))
            for i in range(points)
        ]
    return [int(i / (points - 1) * (max_size - 1)) + 1 for i in range(points)]


def count_iterations(solver: Solver, ceiling: int = HARNESS_ITERATION_CEILING) -> int | None:
    """Iterations until the solver's sequence ends, or None on failure."""
    steps = 0
    try:
        for _ in solver.sequence():
            steps += 1
            if steps > ceiling:
                logger.info("%s exceeded %d iterations", solver.name, ceiling)
                return None
    except ComputationError as exc:
        logger.warning("%s failed: %s", solver.name, exc)
        return None
    return steps


def iteration_counts(
    system_factory: Callable[[int], LinearSystem],
    max_size: int,
    epsilon: float,
    *,
    points: int = DEFAULT_SWEEP_POINTS,
    exponential: bool = False,
    launches: int = 1,
    ceiling: int = HARNESS_ITERATION_CEILING,
    solvers_factory: SolverSetFactory = construct_all_solvers,
) -> IterationTable:
    """Average iterations to convergence over a sweep of problem sizes.

    Every launch draws a fresh system and a fresh solver set. A solver that
    fails on any launch at a given size is reported as None for that size;
    the remaining solvers are counted independently.

    Args:
        system_factory: size -> LinearSystem.
        max_size: Largest problem size.
        epsilon: Convergence threshold.
        points: Number of sizes in the sweep.
        exponential: Space sizes exponentially instead of linearly.
        launches: Runs per size to average over.
        ceiling: Iterations after which a run counts as hung.
        solvers_factory: Builds the compared solvers.
    """
    if launches < 1:
        raise ConfigurationError(
            ErrorReason.INVALID_PARAMETER, f"launches must be positive, got {launches}"
        )

    sizes = sweep_sizes(max_size, points, exponential=exponential)
    columns = tuple(s.name for s in solvers_factory(system_factory(1), epsilon))

    rows: list[tuple[float | None, ...]] = []
    for n in sizes:
        totals: list[int | None] = [0] * len(columns)

        for _ in range(launches):
            solvers = solvers_factory(system_factory(n), epsilon)
            for index, solver in enumerate(solvers):
                if totals[index] is None:
                    continue
                steps = count_iterations(solver, ceiling)
                totals[index] = None if steps is None else totals[index] + steps

        logger.debug("size %d: %s", n, totals)
        rows.append(tuple(None if t is None else t / launches for t in totals))

    return IterationTable(columns=columns, sizes=tuple(sizes), rows=tuple(rows))


def safe_log10(value: float) -> float:
    """log10 that maps zero (an exact hit with a zero floor) to -inf."""
    return math.log10(value) if value > 0 else float("-inf")


def format_cell(value: float | None, precision: int = 2) -> str:
    """Render a table cell; failed or finished entries are blank."""
    return "" if value is None else f"{value:.{precision}f}"


__all__ = [
    "ConvergenceTable",
    "IterationTable",
    "SolverSetFactory",
    "construct_all_solvers",
    "convergence_table",
    "count_iterations",
    "format_cell",
    "iteration_counts",
    "safe_log10",
    "sweep_sizes",
]
