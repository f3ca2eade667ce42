"""Data module for linear systems, settings and test-system generation."""

from convergence_lab.data.linear_system import LinearSystem
from convergence_lab.data.settings import (
    DEFAULT_EPSILON,
    DEFAULT_RELAXATION_FACTORS,
    DEFAULT_SETTINGS,
    HARNESS_ITERATION_CEILING,
    SolverSettings,
)
from convergence_lab.data.systems import (
    DEFAULT_SEED,
    SYSTEM_KINDS,
    SystemProfile,
    create_diagonally_dominant_system,
    create_random_system,
    create_spd_system,
    create_system,
    profile_system,
    system_factory,
)

__all__ = [
    "DEFAULT_EPSILON",
    "DEFAULT_RELAXATION_FACTORS",
    "DEFAULT_SEED",
    "DEFAULT_SETTINGS",
    "HARNESS_ITERATION_CEILING",
    "LinearSystem",
    "SYSTEM_KINDS",
    "SolverSettings",
    "SystemProfile",
    "create_diagonally_dominant_system",
    "create_random_system",
    "create_spd_system",
    "create_system",
    "profile_system",
    "system_factory",
]
