"""Solver algorithms module.

This module contains implementations of:
- The iterative engine (one-shot approximation sequences, Solver handle)
- Convergence tests (norm threshold, iteration budget)
- Stationary methods (Jacobi, Gauss-Seidel, relaxed Gauss-Seidel)
- Conjugate gradient variants (Fletcher-Reeves, Polak-Ribière,
  Hestenes-Stiefel, Dai-Yuan)
- Direct solvers (Gaussian elimination, LU reference)
"""

from convergence_lab.algorithms.conjugate_gradient import (
    BetaStrategy,
    ConjugateGradient,
    DaiYuan,
    FletcherReeves,
    HestenesStiefel,
    PolakRibiere,
)
from convergence_lab.algorithms.convergence import (
    ConvergenceTest,
    IterationBudget,
    NormThreshold,
    create_test,
)
from convergence_lab.algorithms.direct import (
    GaussianElimination,
    LUReference,
    gaussian_elimination,
    reference_solution,
)
from convergence_lab.algorithms.engine import (
    ApproximationSequence,
    SequenceState,
    Solver,
    UpdateRule,
    drive,
)
from convergence_lab.algorithms.solvers import (
    CONJUGATE_GRADIENT_METHODS,
    DIRECT_METHODS,
    METHODS,
    SolverTrace,
    create_solver,
    run_solver,
)
from convergence_lab.algorithms.stationary import (
    GaussSeidel,
    Jacobi,
    RelaxedGaussSeidel,
)

__all__ = [
    # Engine
    "ApproximationSequence",
    "SequenceState",
    "Solver",
    "UpdateRule",
    "drive",
    # Convergence tests
    "ConvergenceTest",
    "IterationBudget",
    "NormThreshold",
    "create_test",
    # Stationary methods
    "GaussSeidel",
    "Jacobi",
    "RelaxedGaussSeidel",
    # Conjugate gradient
    "BetaStrategy",
    "ConjugateGradient",
    "DaiYuan",
    "FletcherReeves",
    "HestenesStiefel",
    "PolakRibiere",
    # Direct solvers
    "GaussianElimination",
    "LUReference",
    "gaussian_elimination",
    "reference_solution",
    # Registry
    "CONJUGATE_GRADIENT_METHODS",
    "DIRECT_METHODS",
    "METHODS",
    "SolverTrace",
    "create_solver",
    "run_solver",
]
