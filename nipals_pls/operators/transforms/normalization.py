"""Column normalization used before PLS training and prediction.

Each column is centered on its mean and divided by its sample standard
deviation (ddof=1). Columns whose deviation is below ``STD_FLOOR``, and every
column of a matrix with fewer than two rows, are divided by 1.0 instead so
the transform never produces NaN or Inf. Training and prediction both go
through :func:`feature_normalize`, so the clamping policy is shared.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from numpy.typing import ArrayLike

from nipals_pls.core.logging import get_logger
from nipals_pls.utils.linalg import ArrayBackend, get_backend

logger = get_logger(__name__)

STD_FLOOR = 1e-10


@dataclass(frozen=True)
class NormalizationResult:
    """Output of :func:`feature_normalize`.

    Attributes:
        result: Centered and scaled matrix, same shape as the input.
        means: Per-column means, shape (n_columns,).
        std: Per-column standard deviations after clamping, shape (n_columns,).
    """

    result: Any
    means: Any
    std: Any


def feature_normalize(
    M: ArrayLike,
    backend: str | ArrayBackend | None = None,
) -> NormalizationResult:
    """Center and scale the columns of ``M``.

    Args:
        M: Matrix of shape (n_rows, n_columns).
        backend: Linear-algebra provider (defaults to NumPy).

    Returns:
        NormalizationResult with a new matrix; ``M`` is left untouched.
    """
    la = get_backend(backend)
    xp = la.xp
    M = la.asarray(M)
    n_rows = M.shape[0]

    means = M.mean(axis=0)
    if n_rows < 2:
        std = xp.ones(M.shape[1], dtype=xp.float64)
        logger.debug(f"Single-row matrix: all {M.shape[1]} column deviations set to 1.0")
    else:
        std = M.std(axis=0, ddof=1)
        degenerate = std < STD_FLOOR
        n_degenerate = int(degenerate.sum())
        if n_degenerate:
            logger.debug(f"{n_degenerate} zero-variance column(s) scaled by 1.0")
        std = xp.where(degenerate, 1.0, std)

    return NormalizationResult(result=(M - means) / std, means=means, std=std)
