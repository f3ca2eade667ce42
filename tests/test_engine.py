"""Tests for the iterative engine and convergence tests."""

import itertools

import numpy as np
import pytest

from convergence_lab.algorithms.convergence import (
    ConvergenceTest,
    IterationBudget,
    NormThreshold,
    create_test,
)
from convergence_lab.algorithms.engine import (
    ApproximationSequence,
    SequenceState,
    Solver,
    UpdateRule,
    drive,
)
from convergence_lab.algorithms.stationary import Jacobi
from convergence_lab.data.linear_system import LinearSystem
from convergence_lab.data.settings import SolverSettings
from convergence_lab.errors import (
    ComputationError,
    ConfigurationError,
    ErrorReason,
    MalformedUpdateError,
    UsageError,
)

A = [[4.0, 1.0], [2.0, 3.0]]
B = [1.0, 2.0]


class Halving(UpdateRule):
    """x_{k+1} = x_k / 2 starting from ones: converges to zero."""

    label = "halving"

    def initial_guess(self) -> np.ndarray:
        return np.ones(self.system.size)

    def compute_next(self, current: np.ndarray) -> np.ndarray:
        return current / 2.0


class WrongShape(UpdateRule):
    label = "wrong_shape"

    def compute_next(self, current: np.ndarray) -> np.ndarray:
        return np.zeros(self.system.size + 1)


class NotAnArray(UpdateRule):
    label = "not_an_array"

    def compute_next(self, current: np.ndarray) -> list:  # type: ignore[override]
        return [0.0] * self.system.size


class ProducesNaN(UpdateRule):
    label = "produces_nan"

    def compute_next(self, current: np.ndarray) -> np.ndarray:
        return np.full(self.system.size, np.nan)


class Constant(UpdateRule):
    """Returns the same vector every step."""

    label = "constant"

    def compute_next(self, current: np.ndarray) -> np.ndarray:
        return np.full(self.system.size, 3.0)


class AlwaysConverged(ConvergenceTest):
    def is_converged(self, delta: np.ndarray, steps: int) -> bool:
        return True


class NeverConverged(ConvergenceTest):
    def is_converged(self, delta: np.ndarray, steps: int) -> bool:
        return False


class TestNormThreshold:
    """Tests for NormThreshold."""

    def test_immutable(self) -> None:
        """NormThreshold should be immutable."""
        test = NormThreshold(1e-6)
        with pytest.raises(AttributeError):
            test.epsilon = 1.0  # type: ignore[misc]

    def test_slots(self) -> None:
        """NormThreshold should use slots (no __dict__)."""
        assert not hasattr(NormThreshold(1e-6), "__dict__")

    def test_threshold_inclusive(self) -> None:
        """A delta norm equal to epsilon counts as converged."""
        test = NormThreshold(0.5)
        assert test.is_converged(np.array([0.5, -0.25]), steps=3)
        assert not test.is_converged(np.array([0.5001, 0.0]), steps=3)

    def test_sentinel_delta_never_converges(self) -> None:
        """The -inf - (+inf) sentinel delta must fail the test."""
        test = NormThreshold(1e300)
        delta = np.full(3, -np.inf) - np.full(3, np.inf)
        assert not test.is_converged(delta, steps=0)

    def test_nan_delta_never_converges(self) -> None:
        """NaN deltas are not precise."""
        assert not NormThreshold(1.0).is_converged(np.array([np.nan]), steps=1)

    def test_norm_order(self) -> None:
        """The configured norm order is used."""
        delta = np.array([0.6, 0.6])
        assert NormThreshold(0.7, norm=np.inf).is_converged(delta, steps=1)
        assert not NormThreshold(0.7, norm=1).is_converged(delta, steps=1)


class TestIterationBudget:
    """Tests for IterationBudget."""

    def test_converged_at_cap(self) -> None:
        """Budget reports converged once the cap is reached."""
        test = IterationBudget(NeverConverged(), max_iterations=3)
        assert not test.is_converged(np.ones(2), steps=2)
        assert test.is_converged(np.ones(2), steps=3)

    def test_inner_test_still_applies(self) -> None:
        """Precision before the cap ends iteration too."""
        test = IterationBudget(NormThreshold(1e-3), max_iterations=100)
        assert test.is_converged(np.zeros(2), steps=5)

    def test_create_test_without_cap(self) -> None:
        """No cap: a bare NormThreshold."""
        test = create_test(SolverSettings(epsilon=1e-4))
        assert isinstance(test, NormThreshold)
        assert test.epsilon == 1e-4

    def test_create_test_with_cap(self) -> None:
        """A cap wraps the threshold in an IterationBudget."""
        test = create_test(SolverSettings(max_iterations=7))
        assert isinstance(test, IterationBudget)
        assert test.max_iterations == 7


class TestApproximationSequence:
    """Tests for the one-shot approximation sequence state machine."""

    @pytest.fixture
    def system(self) -> LinearSystem:
        return LinearSystem.from_arrays(A, B)

    def test_yields_at_least_one_value(self, system: LinearSystem) -> None:
        """Sentinel seeding guarantees a first real approximation."""
        sequence = ApproximationSequence(Constant(system), NormThreshold(1e300))
        assert sequence.has_next()
        values = list(sequence)
        assert len(values) == 2
        np.testing.assert_array_equal(values[0], [3.0, 3.0])

    def test_stops_when_delta_small(self, system: LinearSystem) -> None:
        """A constant rule settles after its second value (delta = 0)."""
        sequence = ApproximationSequence(Constant(system), NormThreshold(0.0))
        assert len(list(sequence)) == 2
        assert sequence.state is SequenceState.EXHAUSTED
        assert not sequence.has_next()

    def test_first_step_uses_initial_guess(self, system: LinearSystem) -> None:
        """The rule's initial guess, not the sentinel, feeds the first step."""
        sequence = ApproximationSequence(Halving(system), NormThreshold(1e-3))
        np.testing.assert_array_equal(sequence.next(), [0.5, 0.5])
        np.testing.assert_array_equal(sequence.next(), [0.25, 0.25])

    def test_lazy_evaluation(self, system: LinearSystem) -> None:
        """Nothing is computed until values are pulled."""
        sequence = ApproximationSequence(Halving(system), NeverConverged())
        assert sequence.steps == 0
        first = list(itertools.islice(sequence, 5))
        assert len(first) == 5
        assert sequence.steps == 5

    def test_unbounded_without_convergence(self, system: LinearSystem) -> None:
        """A never-converging test yields as many values as requested."""
        sequence = ApproximationSequence(Halving(system), NeverConverged())
        assert len(list(itertools.islice(sequence, 200))) == 200
        assert sequence.has_next()

    def test_yielded_vectors_are_copies(self, system: LinearSystem) -> None:
        """Mutating a yielded vector must not disturb the iteration."""
        sequence = ApproximationSequence(Halving(system), NeverConverged())
        first = sequence.next()
        first[:] = 1000.0
        np.testing.assert_array_equal(sequence.next(), [0.25, 0.25])

    def test_stop_iteration_when_exhausted(self, system: LinearSystem) -> None:
        """next() on an exhausted sequence raises StopIteration."""
        sequence = ApproximationSequence(Constant(system), AlwaysConverged())
        assert not sequence.has_next()
        with pytest.raises(StopIteration):
            sequence.next()

    def test_malformed_update(self, system: LinearSystem) -> None:
        """Wrong-shaped output raises MALFORMED_UPDATE with both shapes."""
        sequence = ApproximationSequence(WrongShape(system), NeverConverged())
        with pytest.raises(MalformedUpdateError, match="expected shape") as info:
            sequence.next()
        assert info.value.reason is ErrorReason.MALFORMED_UPDATE
        assert info.value.expected == (2,)
        assert info.value.actual == (3,)
        assert not sequence.has_next()

    def test_non_array_update(self, system: LinearSystem) -> None:
        """Output that is not an ndarray is malformed too."""
        sequence = ApproximationSequence(NotAnArray(system), NeverConverged())
        with pytest.raises(ComputationError) as info:
            sequence.next()
        assert info.value.reason is ErrorReason.MALFORMED_UPDATE

    def test_non_finite_update(self, system: LinearSystem) -> None:
        """NaN output raises NON_FINITE."""
        sequence = ApproximationSequence(ProducesNaN(system), NeverConverged())
        with pytest.raises(ComputationError) as info:
            sequence.next()
        assert info.value.reason is ErrorReason.NON_FINITE

    def test_drive(self, system: LinearSystem) -> None:
        """drive() binds a rule factory and returns a fresh sequence."""
        sequence = drive(Halving, NormThreshold(1e-3), system)
        assert isinstance(sequence, ApproximationSequence)
        assert sequence.name == "halving"
        assert len(list(sequence)) > 1


class TestSolver:
    """Tests for the Solver handle."""

    def test_name_from_rule_label(self) -> None:
        """name is the rule's static label."""
        assert Solver(A, B, Jacobi).name == "jacobi"

    def test_solve_returns_vector_of_system_size(self) -> None:
        """solve() returns a length-n vector."""
        x = Solver(A, B, Jacobi, epsilon=1e-10).solve()
        assert x.shape == (2,)
        np.testing.assert_allclose(x, [0.1, 0.6], atol=1e-9)

    def test_second_sequence_request_fails(self) -> None:
        """Requesting the sequence twice raises UsageError."""
        solver = Solver(A, B, Jacobi, epsilon=1e-10)
        first = solver.sequence()
        with pytest.raises(UsageError) as info:
            solver.sequence()
        assert info.value.reason is ErrorReason.SEQUENCE_ALREADY_CONSUMED

        # The first sequence is unaffected
        values = list(first)
        np.testing.assert_allclose(values[-1], [0.1, 0.6], atol=1e-9)

    def test_solve_consumes_sequence(self) -> None:
        """solve() uses up the one-shot sequence."""
        solver = Solver(A, B, Jacobi)
        solver.solve()
        assert solver.consumed
        with pytest.raises(UsageError):
            solver.solve()
        with pytest.raises(UsageError):
            iter(solver)

    def test_iterating_solver_is_sequence(self) -> None:
        """for x in solver is the same one-shot sequence."""
        solver = Solver(A, B, Jacobi, epsilon=1e-6)
        values = [x for x in solver]
        assert len(values) > 1
        with pytest.raises(UsageError):
            solver.sequence()

    def test_usage_error_is_runtime_error(self) -> None:
        """UsageError should be catchable as RuntimeError."""
        solver = Solver(A, B, Jacobi)
        solver.sequence()
        with pytest.raises(RuntimeError):
            solver.sequence()

    def test_empty_sequence_is_internal_fault(self) -> None:
        """A sequence that yields nothing makes solve() fail."""
        solver = Solver(A, B, Jacobi, test=AlwaysConverged())
        with pytest.raises(ComputationError) as info:
            solver.solve()
        assert info.value.reason is ErrorReason.EMPTY_SEQUENCE

    def test_invalid_dimensions_rejected(self) -> None:
        """Non-square input fails at construction."""
        with pytest.raises(ConfigurationError):
            Solver([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]], [1.0, 2.0], Jacobi)

    def test_defensive_copy(self) -> None:
        """Caller mutations after construction do not reach the solver."""
        matrix = np.array(A)
        rhs = np.array(B)
        solver = Solver(matrix, rhs, Jacobi, epsilon=1e-10)
        matrix[:] = 0.0
        rhs[:] = 0.0
        np.testing.assert_allclose(solver.solve(), [0.1, 0.6], atol=1e-9)

    def test_linear_system_with_rhs_rejected(self) -> None:
        """A LinearSystem already carries b; passing another is an error."""
        system = LinearSystem.from_arrays(A, B)
        with pytest.raises(ConfigurationError) as info:
            Solver(system, [5.0, 6.0], Jacobi)
        assert info.value.reason is ErrorReason.INVALID_PARAMETER

    def test_for_system(self) -> None:
        """A LinearSystem can be bound directly."""
        system = LinearSystem.from_arrays(A, B)
        solver = Solver.for_system(system, Jacobi, epsilon=1e-8)
        assert solver.system is system

    def test_max_iterations_caps_sequence(self) -> None:
        """The iteration budget ends an otherwise unbounded sequence."""
        solver = Solver(A, B, Halving, epsilon=0.0, max_iterations=4)
        assert len(list(solver.sequence())) == 4

    def test_explicit_test_overrides_settings(self) -> None:
        """An explicit convergence test wins over epsilon/max_iterations."""
        solver = Solver(A, B, Halving, max_iterations=2, test=IterationBudget(NeverConverged(), 6))
        assert len(list(solver.sequence())) == 6
