"""Immutable linear system snapshot (A, b)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import numpy as np

from convergence_lab.errors import ConfigurationError, ErrorReason

if TYPE_CHECKING:
    from numpy.typing import ArrayLike, NDArray


def _frozen_copy(values: ArrayLike, label: str) -> NDArray[np.float64]:
    try:
        array = np.array(values, dtype=np.float64, copy=True)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(
            ErrorReason.INVALID_DIMENSIONS,
            f"{label} must be a numeric array: {exc}",
        ) from exc
    array.setflags(write=False)
    return array


@dataclass(frozen=True, slots=True, eq=False)
class LinearSystem:
    """Square system A x = b with private read-only copies of its arrays.

    Example:
        >>> system = LinearSystem.from_arrays([[4, 1], [2, 3]], [1, 2])
        >>> system.size
        2
    """

    A: NDArray[np.float64]
    """Square coefficient matrix (read-only)."""

    b: NDArray[np.float64]
    """Right-hand side vector (read-only)."""

    @classmethod
    def from_arrays(cls, A: ArrayLike, b: ArrayLike) -> LinearSystem:
        """Copy and validate raw inputs.

        Raises:
            ConfigurationError: If A is not square or b does not match it.
        """
        matrix = _frozen_copy(A, "A")
        vector = _frozen_copy(b, "b")

        if vector.ndim == 2 and vector.shape[1] == 1:
            vector = vector.reshape(-1)

        if (
            matrix.ndim != 2
            or matrix.shape[0] != matrix.shape[1]
            or matrix.shape[0] == 0
            or vector.ndim != 1
            or vector.shape[0] != matrix.shape[0]
        ):
            raise ConfigurationError(
                ErrorReason.INVALID_DIMENSIONS,
                f"Invalid dimensions: A is {matrix.shape}, b is {vector.shape}; "
                "expected A of shape (n, n) and b of shape (n,)",
            )

        return cls(A=matrix, b=vector)

    @property
    def size(self) -> int:
        """System dimension n."""
        return int(self.A.shape[0])

    def residual(self, x: NDArray[np.floating[Any]]) -> NDArray[np.float64]:
        """Return b - A @ x."""
        return self.b - self.A @ x

    @property
    def is_symmetric(self) -> bool:
        return bool(np.allclose(self.A, self.A.T, rtol=1e-12, atol=1e-14))


__all__ = ["LinearSystem"]
