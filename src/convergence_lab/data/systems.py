"""Test-system generation for solver comparisons.

This module provides reproducible generators for the three system families
the solvers are compared on:

- Symmetric positive definite (SPD) with a controlled spectrum, where every
  conjugate-gradient variant is exact in n steps
- Strictly diagonally dominant, where Jacobi and Gauss-Seidel converge
- General random systems, where only the direct solvers and the
  normal-equation CG variants are expected to succeed

References:
- Golub & Van Loan: "Matrix Computations" (4th ed.), Sections 10.1 and 11.3
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from convergence_lab.data.linear_system import LinearSystem
from convergence_lab.errors import ConfigurationError, ErrorReason

if TYPE_CHECKING:
    from collections.abc import Callable


DEFAULT_SEED: int = 42
"""Default random seed for reproducible experiments."""

SYSTEM_KINDS: tuple[str, ...] = ("spd", "dominant", "random")
"""Names accepted by create_system()."""


@dataclass(frozen=True, slots=True)
class SystemProfile:
    """Structural properties of a linear system.

    Used to explain why a given solver is (or is not) expected to converge.
    """

    size: int
    """System dimension n."""

    symmetric: bool
    """A == A^T within rounding."""

    positive_definite: bool
    """Symmetric with all eigenvalues > 0."""

    diagonally_dominant: bool
    """|a_ii| > sum_{j != i} |a_ij| for every row."""

    condition_number: float
    """2-norm condition number κ(A)."""

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "size": self.size,
            "symmetric": self.symmetric,
            "positive_definite": self.positive_definite,
            "diagonally_dominant": self.diagonally_dominant,
            "condition_number": self.condition_number,
        }


def create_spd_system(
    n: int,
    condition_number: float = 10.0,
    *,
    seed: int | None = None,
) -> LinearSystem:
    """Create SPD system with linearly spaced eigenvalues.

    Mathematical Construction:
        λ_i = 1 + (κ-1) * (i-1)/(n-1)  for i = 1, ..., n
        A = Q @ diag(λ) @ Q^T  where Q is random orthogonal

    Args:
        n: System dimension.
        condition_number: Desired condition number κ = λ_max / λ_min.
        seed: Random seed for reproducibility.

    Returns:
        LinearSystem with SPD matrix and standard normal right-hand side.

    Example:
        >>> system = create_spd_system(50, condition_number=100, seed=42)
        >>> eigenvalues = np.linalg.eigvalsh(system.A)
        >>> print(f"κ = {eigenvalues[-1]/eigenvalues[0]:.2f}")
        κ = 100.00
    """
    rng = np.random.default_rng(seed)

    eigenvalues = np.linspace(1.0, condition_number, n)
    Q, _ = np.linalg.qr(rng.standard_normal((n, n)))
    A = Q @ np.diag(eigenvalues) @ Q.T

    # Remove rounding asymmetry so the system is exactly symmetric
    A = (A + A.T) / 2.0

    return LinearSystem.from_arrays(A, rng.standard_normal(n))


def create_diagonally_dominant_system(
    n: int,
    *,
    dominance: float = 2.0,
    seed: int | None = None,
) -> LinearSystem:
    """Create strictly diagonally dominant system (not necessarily symmetric).

    Off-diagonal entries are uniform in [-1, 1]; each diagonal entry is set to
    ``dominance`` times its row's off-diagonal absolute sum (at least 1.0),
    with a random sign.

    Args:
        n: System dimension.
        dominance: Ratio |a_ii| / sum_{j != i} |a_ij| (must exceed 1).
        seed: Random seed for reproducibility.
    """
    if dominance <= 1.0:
        raise ConfigurationError(
            ErrorReason.INVALID_PARAMETER,
            f"dominance must exceed 1.0, got {dominance}",
        )

    rng = np.random.default_rng(seed)

    A = rng.uniform(-1.0, 1.0, (n, n))
    np.fill_diagonal(A, 0.0)
    row_sums = np.abs(A).sum(axis=1)
    signs = rng.choice([-1.0, 1.0], size=n)
    np.fill_diagonal(A, signs * np.maximum(dominance * row_sums, 1.0))

    return LinearSystem.from_arrays(A, rng.uniform(-1.0, 1.0, n))


def create_random_system(n: int, *, seed: int | None = None) -> LinearSystem:
    """Create a general random system with entries uniform in [-1, 1]."""
    rng = np.random.default_rng(seed)
    return LinearSystem.from_arrays(
        rng.uniform(-1.0, 1.0, (n, n)), rng.uniform(-1.0, 1.0, n)
    )


def create_system(
    n: int,
    kind: str = "dominant",
    *,
    seed: int | None = DEFAULT_SEED,
) -> LinearSystem:
    """Create a test system of the requested family.

    Args:
        n: System dimension.
        kind: "spd", "dominant" or "random".
        seed: Random seed (default: 42 for reproducibility).
    """
    if kind == "spd":
        return create_spd_system(n, seed=seed)
    if kind == "dominant":
        return create_diagonally_dominant_system(n, seed=seed)
    if kind == "random":
        return create_random_system(n, seed=seed)

    msg = f"Unknown system kind: {kind}. Available: {list(SYSTEM_KINDS)}"
    raise ConfigurationError(ErrorReason.INVALID_PARAMETER, msg)


def system_factory(
    kind: str = "dominant", *, seed: int | None = DEFAULT_SEED
) -> Callable[[int], LinearSystem]:
    """Return a size -> LinearSystem producer for problem-size sweeps.

    With a fixed seed, each call still draws a fresh system: the seed is
    offset by the number of systems produced so far.
    """
    if kind not in SYSTEM_KINDS:
        msg = f"Unknown system kind: {kind}. Available: {list(SYSTEM_KINDS)}"
        raise ConfigurationError(ErrorReason.INVALID_PARAMETER, msg)

    produced = 0

    def produce(n: int) -> LinearSystem:
        nonlocal produced
        call_seed = None if seed is None else seed + produced
        produced += 1
        return create_system(n, kind, seed=call_seed)

    return produce


def profile_system(system: LinearSystem) -> SystemProfile:
    """Compute structural properties of a system."""
    A = system.A
    symmetric = system.is_symmetric

    positive_definite = False
    if symmetric:
        positive_definite = bool(np.min(np.linalg.eigvalsh(A)) > 0)

    diagonal = np.abs(np.diag(A))
    off_diagonal = np.abs(A).sum(axis=1) - diagonal

    return SystemProfile(
        size=system.size,
        symmetric=symmetric,
        positive_definite=positive_definite,
        diagonally_dominant=bool(np.all(diagonal > off_diagonal)),
        condition_number=float(np.linalg.cond(A)),
    )


__all__ = [
    "DEFAULT_SEED",
    "SYSTEM_KINDS",
    "SystemProfile",
    "create_diagonally_dominant_system",
    "create_random_system",
    "create_spd_system",
    "create_system",
    "profile_system",
    "system_factory",
]
