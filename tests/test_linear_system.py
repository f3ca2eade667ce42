"""Tests for LinearSystem and solver settings."""

import numpy as np
import pytest

from convergence_lab.data.linear_system import LinearSystem
from convergence_lab.data.settings import (
    DEFAULT_EPSILON,
    DEFAULT_SETTINGS,
    SolverSettings,
)
from convergence_lab.errors import ConfigurationError, ErrorReason


class TestLinearSystem:
    """Tests for LinearSystem construction and invariants."""

    def test_from_lists(self) -> None:
        """Plain nested lists should be accepted and converted to float64."""
        system = LinearSystem.from_arrays([[4, 1], [2, 3]], [1, 2])
        assert system.size == 2
        assert system.A.dtype == np.float64
        assert system.b.dtype == np.float64

    def test_column_vector_flattened(self) -> None:
        """An n×1 right-hand side should be flattened to shape (n,)."""
        system = LinearSystem.from_arrays(np.eye(3), np.ones((3, 1)))
        assert system.b.shape == (3,)

    def test_defensive_copy(self) -> None:
        """Mutating the caller's arrays must not affect the system."""
        A = np.array([[4.0, 1.0], [2.0, 3.0]])
        b = np.array([1.0, 2.0])
        system = LinearSystem.from_arrays(A, b)

        A[0, 0] = 100.0
        b[1] = -5.0

        assert system.A[0, 0] == 4.0
        assert system.b[1] == 2.0

    def test_arrays_read_only(self) -> None:
        """System arrays should reject in-place writes."""
        system = LinearSystem.from_arrays(np.eye(2), [1.0, 2.0])
        with pytest.raises(ValueError):
            system.A[0, 0] = 5.0
        with pytest.raises(ValueError):
            system.b[0] = 5.0

    def test_immutable(self) -> None:
        """Fields cannot be reassigned."""
        system = LinearSystem.from_arrays(np.eye(2), [1.0, 2.0])
        with pytest.raises(AttributeError):
            system.b = np.zeros(2)  # type: ignore[misc]

    @pytest.mark.parametrize(
        "A,b",
        [
            (np.ones((2, 3)), np.ones(2)),  # non-square
            (np.ones((3, 3)), np.ones(2)),  # length mismatch
            (np.ones(3), np.ones(3)),  # A not a matrix
            (np.ones((2, 2)), np.ones((2, 2))),  # b not a vector
            (np.ones((0, 0)), np.ones(0)),  # empty
        ],
    )
    def test_invalid_dimensions(self, A: np.ndarray, b: np.ndarray) -> None:
        """Bad shapes should raise ConfigurationError(INVALID_DIMENSIONS)."""
        with pytest.raises(ConfigurationError, match="Invalid dimensions") as info:
            LinearSystem.from_arrays(A, b)
        assert info.value.reason is ErrorReason.INVALID_DIMENSIONS

    def test_non_numeric_input(self) -> None:
        """Non-numeric entries should raise ConfigurationError."""
        with pytest.raises(ConfigurationError) as info:
            LinearSystem.from_arrays([["a", "b"], ["c", "d"]], [1, 2])
        assert info.value.reason is ErrorReason.INVALID_DIMENSIONS

    def test_configuration_error_is_value_error(self) -> None:
        """ConfigurationError should be catchable as ValueError."""
        with pytest.raises(ValueError):
            LinearSystem.from_arrays(np.ones((2, 3)), np.ones(2))

    def test_residual(self) -> None:
        """residual() should compute b - A x."""
        system = LinearSystem.from_arrays([[4, 1], [2, 3]], [1, 2])
        np.testing.assert_allclose(system.residual(np.array([0.1, 0.6])), 0.0, atol=1e-15)

    def test_is_symmetric(self) -> None:
        """Symmetry detection."""
        assert LinearSystem.from_arrays([[4, 1], [1, 3]], [1, 2]).is_symmetric
        assert not LinearSystem.from_arrays([[4, 1], [2, 3]], [1, 2]).is_symmetric


class TestSolverSettings:
    """Tests for SolverSettings validation."""

    def test_defaults(self) -> None:
        """Default settings: epsilon, no cap, infinity norm."""
        assert DEFAULT_SETTINGS.epsilon == DEFAULT_EPSILON
        assert DEFAULT_SETTINGS.max_iterations is None
        assert DEFAULT_SETTINGS.norm == np.inf

    def test_slots(self) -> None:
        """SolverSettings should use slots (no __dict__)."""
        assert not hasattr(SolverSettings(), "__dict__")

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"epsilon": -1.0},
            {"epsilon": float("nan")},
            {"max_iterations": 0},
            {"norm": 3},
        ],
    )
    def test_invalid_parameters(self, kwargs: dict) -> None:
        """Invalid settings should raise ConfigurationError(INVALID_PARAMETER)."""
        with pytest.raises(ConfigurationError) as info:
            SolverSettings(**kwargs)
        assert info.value.reason is ErrorReason.INVALID_PARAMETER

    def test_with_overrides_ignores_none(self) -> None:
        """None overrides should keep the current value."""
        settings = DEFAULT_SETTINGS.with_overrides(epsilon=1e-4, max_iterations=None)
        assert settings.epsilon == 1e-4
        assert settings.max_iterations is None

    def test_with_overrides_validates(self) -> None:
        """Overrides go through the same validation."""
        with pytest.raises(ConfigurationError):
            DEFAULT_SETTINGS.with_overrides(max_iterations=-3)
