"""Dense linear-algebra providers for the NIPALS trainer.

The trainer only needs transpose, matrix multiply, element-wise and broadcast
arithmetic, slicing, column assignment, norms and sums. Both providers expose
those through the array namespace ``xp`` plus a few helpers for the operations
whose spelling differs between NumPy (mutable arrays) and JAX (immutable
arrays).

Classes
-------
ArrayBackend
    Provider interface.
NumpyBackend
    Default provider, float64 NumPy arrays.
JaxBackend
    float64 JAX arrays evaluated eagerly (``jax_enable_x64`` is switched on).
"""

from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from nipals_pls.exceptions import InvalidArgumentError
from nipals_pls.utils.backend import SUPPORTED_BACKENDS, check_backend_available


class ArrayBackend:
    """Interface of a dense-matrix provider."""

    name: str = "base"
    xp: Any = None

    def asarray(self, a: ArrayLike) -> Any:
        return self.xp.asarray(a, dtype=self.xp.float64)

    def zeros(self, shape: tuple[int, ...]) -> Any:
        return self.xp.zeros(shape, dtype=self.xp.float64)

    def outer(self, a: Any, b: Any) -> Any:
        return self.xp.outer(a, b)

    def norm(self, a: Any) -> float:
        """Frobenius norm of a matrix, Euclidean norm of a vector."""
        return float(self.xp.linalg.norm(a))

    def sum_of_squares(self, a: Any) -> float:
        return float((a * a).sum())

    def set_column(self, M: Any, j: int, v: Any) -> Any:
        """Return ``M`` with column ``j`` replaced by ``v``."""
        raise NotImplementedError

    def set_item(self, M: Any, i: int, j: int, value: float) -> Any:
        """Return ``M`` with entry ``(i, j)`` replaced by ``value``."""
        raise NotImplementedError

    def to_numpy(self, a: Any) -> NDArray[np.float64]:
        return np.asarray(a, dtype=np.float64)


class NumpyBackend(ArrayBackend):
    """NumPy provider. Assignments happen in place."""

    name = "numpy"
    xp = np

    def set_column(self, M: NDArray, j: int, v: NDArray) -> NDArray:
        M[:, j] = v
        return M

    def set_item(self, M: NDArray, i: int, j: int, value: float) -> NDArray:
        M[i, j] = value
        return M


class JaxBackend(ArrayBackend):
    """JAX provider. Assignments return updated copies."""

    name = "jax"

    def __init__(self) -> None:
        check_backend_available("jax")
        import jax
        import jax.numpy as jnp

        jax.config.update("jax_enable_x64", True)
        self.xp = jnp

    def set_column(self, M: Any, j: int, v: Any) -> Any:
        return M.at[:, j].set(v)

    def set_item(self, M: Any, i: int, j: int, value: float) -> Any:
        return M.at[i, j].set(value)


_NUMPY_BACKEND = NumpyBackend()
_JAX_BACKEND: JaxBackend | None = None


def get_backend(name: str | ArrayBackend | None = "numpy") -> ArrayBackend:
    """Return the provider registered under ``name``.

    Raises
    ------
    InvalidArgumentError
        If ``name`` is not a supported backend.
    ImportError
        If the backend's library is not installed.
    """
    global _JAX_BACKEND

    if isinstance(name, ArrayBackend):
        return name
    if name is None or name == "numpy":
        return _NUMPY_BACKEND
    if name == "jax":
        if _JAX_BACKEND is None:
            _JAX_BACKEND = JaxBackend()
        return _JAX_BACKEND
    raise InvalidArgumentError(
        f"backend must be one of {SUPPORTED_BACKENDS}, got {name!r}"
    )
