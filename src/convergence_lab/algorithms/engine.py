"""Iterative engine: one-shot approximation sequences over pluggable rules.

Every solver in this package runs through the same template:

    1. has_next(): convergence test on delta = current - previous
    2. next():     previous <- current, current <- rule.compute_next(previous)
    3. validate:   current must be a finite vector of shape (n,)

Only the update rule and the convergence test vary between methods. The
sequence is seeded with divergent sentinels (previous = +inf,
current = -inf), so the first convergence check always fails and at least one
real approximation is produced.

A Solver hands its update rule over to the first sequence it creates. After
that the solver holds no rule, so a second request for a sequence fails with
UsageError instead of silently restarting a stateful rule.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar

import numpy as np

from convergence_lab.algorithms.convergence import (
    ConvergenceTest,
    IterationBudget,
    create_test,
)
from convergence_lab.data.linear_system import LinearSystem
from convergence_lab.data.settings import DEFAULT_SETTINGS, SolverSettings
from convergence_lab.errors import (
    ComputationError,
    ConfigurationError,
    ErrorReason,
    MalformedUpdateError,
    UsageError,
)

if TYPE_CHECKING:
    from numpy.typing import ArrayLike, NDArray


class UpdateRule(ABC):
    """Computes the next approximation from the current one.

    Rules are bound to a single LinearSystem and may keep private state
    between steps (e.g. conjugate-gradient residuals), so one rule instance
    serves exactly one approximation sequence.
    """

    label: ClassVar[str] = "update_rule"
    """Stable identifier used in reports."""

    one_shot: ClassVar[bool] = False
    """True for rules that are exact after a single step."""

    def __init__(self, system: LinearSystem) -> None:
        self.system = system

    @property
    def name(self) -> str:
        """Report label, including rule parameters where relevant."""
        return self.label

    def initial_guess(self) -> NDArray[np.float64]:
        """Starting approximation x_0 (zero vector)."""
        return np.zeros(self.system.size)

    @abstractmethod
    def compute_next(self, current: NDArray[np.float64]) -> NDArray[np.float64]:
        """Return x_{k+1} given x_k.

        The first call receives initial_guess(). Implementations must not
        modify ``current`` in place.
        """

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(n={self.system.size})"


RuleFactory = Callable[[LinearSystem], UpdateRule]
"""Anything that binds an update rule to a system (class or partial)."""


class SequenceState(Enum):
    """Lifecycle of an approximation sequence."""

    RUNNING = "running"
    EXHAUSTED = "exhausted"


class ApproximationSequence(Iterator["NDArray[np.float64]"]):
    """Lazily evaluated sequence of approximation vectors.

    Explicit state machine exposing has_next()/next(); also a regular Python
    iterator. Finite when the convergence test eventually passes, unbounded
    otherwise: the consumer must impose its own ceiling in that case. Rules
    flagged one_shot end after their first approximation.
    """

    __slots__ = (
        "_rule",
        "_test",
        "_n",
        "_previous",
        "_current",
        "_steps",
        "_state",
    )

    def __init__(self, rule: UpdateRule, test: ConvergenceTest) -> None:
        if rule.one_shot:
            test = IterationBudget(test, 1)

        self._rule = rule
        self._test = test
        self._n = rule.system.size
        self._previous = np.full(self._n, np.inf)
        self._current = np.full(self._n, -np.inf)
        self._steps = 0
        self._state = SequenceState.RUNNING

    @property
    def steps(self) -> int:
        """Number of approximations produced so far."""
        return self._steps

    @property
    def state(self) -> SequenceState:
        return self._state

    @property
    def name(self) -> str:
        return self._rule.name

    def has_next(self) -> bool:
        """Run the convergence test; False once the sequence is exhausted."""
        if self._state is SequenceState.EXHAUSTED:
            return False
        if self._test.is_converged(self._current - self._previous, self._steps):
            self._state = SequenceState.EXHAUSTED
            return False
        return True

    def next(self) -> NDArray[np.float64]:
        """Produce the next approximation.

        Raises:
            StopIteration: If the sequence is exhausted.
            ComputationError: If the rule fails or returns a malformed vector.
        """
        if not self.has_next():
            raise StopIteration

        # A first step replaces the sentinel with the rule's own starting point
        source = self._rule.initial_guess() if self._steps == 0 else self._current
        candidate = self._rule.compute_next(source)

        if not isinstance(candidate, np.ndarray) or candidate.shape != (self._n,):
            self._state = SequenceState.EXHAUSTED
            raise MalformedUpdateError(
                expected=(self._n,), actual=tuple(np.shape(candidate))
            )
        if not np.all(np.isfinite(candidate)):
            self._state = SequenceState.EXHAUSTED
            raise ComputationError(
                ErrorReason.NON_FINITE,
                f"{self.name} produced non-finite values at step {self._steps + 1}",
            )

        self._previous = self._current
        self._current = candidate.astype(np.float64, copy=True)
        self._steps += 1
        return self._current.copy()

    def __next__(self) -> NDArray[np.float64]:
        return self.next()

    def __iter__(self) -> ApproximationSequence:
        return self


def drive(
    rule_factory: RuleFactory,
    test: ConvergenceTest,
    system: LinearSystem,
) -> ApproximationSequence:
    """Generic driver: bind a rule to a system and start its sequence."""
    return ApproximationSequence(rule_factory(system), test)


class Solver:
    """Handle binding one update rule and one convergence test to a system.

    Args:
        A: Square coefficient matrix (copied).
        b: Right-hand side (copied).
        rule_factory: Update rule class or partial taking a LinearSystem.
        epsilon: Precision threshold on the delta norm.
        max_iterations: Optional step cap (capped runs report as converged).
        norm: Norm order of the delta test.
        test: Explicit convergence test (overrides epsilon/max_iterations/norm).

    Example:
        >>> from convergence_lab.algorithms.stationary import Jacobi
        >>> solver = Solver([[4, 1], [2, 3]], [1, 2], Jacobi, epsilon=1e-8)
        >>> for x in solver.sequence():
        ...     pass
    """

    __slots__ = ("_system", "_rule", "_test", "_name")

    def __init__(
        self,
        A: ArrayLike,
        b: ArrayLike | None,
        rule_factory: RuleFactory,
        *,
        epsilon: float | None = None,
        max_iterations: int | None = None,
        norm: float | None = None,
        test: ConvergenceTest | None = None,
    ) -> None:
        if isinstance(A, LinearSystem):
            if b is not None:
                raise ConfigurationError(
                    ErrorReason.INVALID_PARAMETER,
                    "b must be None when A is already a LinearSystem",
                )
            system = A
        else:
            system = LinearSystem.from_arrays(A, b)

        if test is None:
            settings: SolverSettings = DEFAULT_SETTINGS.with_overrides(
                epsilon=epsilon, max_iterations=max_iterations, norm=norm
            )
            test = create_test(settings)

        rule = rule_factory(system)

        self._system = system
        self._rule: UpdateRule | None = rule
        self._test = test
        self._name = rule.name

    @classmethod
    def for_system(
        cls, system: LinearSystem, rule_factory: RuleFactory, **kwargs: Any
    ) -> Solver:
        """Construct from an existing LinearSystem (already immutable)."""
        return cls(system, None, rule_factory, **kwargs)

    @property
    def name(self) -> str:
        """Stable label for report column headers."""
        return self._name

    @property
    def system(self) -> LinearSystem:
        return self._system

    @property
    def consumed(self) -> bool:
        """True once the sequence has been requested."""
        return self._rule is None

    def sequence(self) -> ApproximationSequence:
        """Return the one-shot approximation sequence.

        Raises:
            UsageError: If the sequence was already requested.
        """
        rule, self._rule = self._rule, None
        if rule is None:
            raise UsageError(
                ErrorReason.SEQUENCE_ALREADY_CONSUMED,
                f"Approximation sequence of {self._name} can not be requested again",
            )
        return ApproximationSequence(rule, self._test)

    def __iter__(self) -> ApproximationSequence:
        return self.sequence()

    def solve(self) -> NDArray[np.float64]:
        """Drain the sequence and return its last approximation."""
        answer = None
        for x in self.sequence():
            answer = x

        if answer is None:
            raise ComputationError(
                ErrorReason.EMPTY_SEQUENCE,
                f"{self._name} produced no approximation",
            )
        return answer

    def __repr__(self) -> str:
        return f"Solver({self._name}, n={self._system.size}, test={self._test!r})"


__all__ = [
    "ApproximationSequence",
    "RuleFactory",
    "SequenceState",
    "Solver",
    "UpdateRule",
    "drive",
]
