"""Convergence Lab: Comparing iterative linear solvers under one protocol."""

__version__ = "0.1.0"

from convergence_lab.algorithms.engine import ApproximationSequence, Solver
from convergence_lab.algorithms.solvers import create_solver, run_solver
from convergence_lab.data.linear_system import LinearSystem
from convergence_lab.errors import (
    ComputationError,
    ConfigurationError,
    ErrorReason,
    SolverError,
    UsageError,
)

__all__ = [
    "__version__",
    "ApproximationSequence",
    "ComputationError",
    "ConfigurationError",
    "ErrorReason",
    "LinearSystem",
    "Solver",
    "SolverError",
    "UsageError",
    "create_solver",
    "run_solver",
]
