"""Fitted parameter set of a NIPALS PLS model and its exported record form.

A :class:`PLSState` is built once at the end of training and never mutated;
retraining replaces the whole object. ``to_record`` produces the plain
structure returned by ``PLS.export()``::

    {"modelName": "PLS", "E": [[...]], "F": [[...]], "R2X": 0.42,
     "ssqYcal": 6.0, "ymean": [...], "ystd": [...], "PBQ": [[...]],
     "T": [[...]], "P": [[...]], "U": [[...]], "Q": [[...]],
     "W": [[...]], "B": [[...]]}
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import NDArray

from nipals_pls.exceptions import ModelValidationError

MODEL_NAME = "PLS"

MATRIX_FIELDS = ("E", "F", "PBQ", "T", "P", "U", "Q", "W", "B")
VECTOR_FIELDS = ("ymean", "ystd")
SCALAR_FIELDS = ("R2X", "ssqYcal")


@dataclass(frozen=True)
class PLSState:
    """All artifacts of a trained model.

    Attributes
    ----------
    E : ndarray of shape (n_samples, n_features)
        X residual after the last deflation.
    F : ndarray of shape (n_samples, n_targets)
        Y residual after the last deflation.
    R2X : float
        Share of the normalized X sum of squares explained by the last
        extracted component (not cumulative).
    ssqYcal : float
        Sum of squares of the normalized training Y.
    ymean : ndarray of shape (n_targets,)
        Negated column means of the training Y.
    ystd : ndarray of shape (n_targets,)
        Column standard deviations of the training Y.
    PBQ : ndarray of shape (n_features, n_targets)
        Regression operator ``P @ B @ Q.T`` in normalized units.
    T, P, U, Q, W : ndarray
        X scores (n, k), X loadings (p, k), Y scores (n, k), Y loadings
        (q, k) and X weights (p, k).
    B : ndarray of shape (k, k)
        Diagonal matrix of the per-component inner regression coefficients.
    """

    E: NDArray[np.float64]
    F: NDArray[np.float64]
    R2X: float
    ssqYcal: float
    ymean: NDArray[np.float64]
    ystd: NDArray[np.float64]
    PBQ: NDArray[np.float64]
    T: NDArray[np.float64]
    P: NDArray[np.float64]
    U: NDArray[np.float64]
    Q: NDArray[np.float64]
    W: NDArray[np.float64]
    B: NDArray[np.float64]

    @property
    def n_components(self) -> int:
        return int(self.T.shape[1])

    @property
    def n_features(self) -> int:
        return int(self.PBQ.shape[0])

    @property
    def n_targets(self) -> int:
        return int(self.PBQ.shape[1])

    def to_record(self) -> dict[str, Any]:
        """Export the state as nested lists and Python floats."""
        record: dict[str, Any] = {"modelName": MODEL_NAME}
        for name in ("E", "F", "R2X", "ssqYcal", "ymean", "ystd", "PBQ", "T", "P", "U", "Q", "W", "B"):
            value = getattr(self, name)
            record[name] = float(value) if name in SCALAR_FIELDS else np.asarray(value).tolist()
        return record

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> PLSState:
        """Rebuild a state from the output of :meth:`to_record`.

        Raises
        ------
        ModelValidationError
            If the record is not a mapping, is not tagged ``"PLS"``, misses
            a field, or holds matrices of inconsistent shapes.
        """
        if not isinstance(record, Mapping):
            raise ModelValidationError(
                f"The current model is invalid: expected a mapping, got {type(record).__name__}"
            )
        if record.get("modelName") != MODEL_NAME:
            raise ModelValidationError(
                f"The current model is invalid: modelName must be {MODEL_NAME!r}, "
                f"got {record.get('modelName')!r}"
            )

        missing = [name for name in MATRIX_FIELDS + VECTOR_FIELDS + SCALAR_FIELDS if name not in record]
        if missing:
            raise ModelValidationError(f"The current model is invalid: missing field(s) {missing}")

        fields: dict[str, Any] = {}
        try:
            for name in MATRIX_FIELDS:
                fields[name] = _as_matrix(record[name], name)
            for name in VECTOR_FIELDS:
                fields[name] = np.asarray(record[name], dtype=np.float64).reshape(-1)
            for name in SCALAR_FIELDS:
                fields[name] = float(record[name])
        except (TypeError, ValueError) as exc:
            raise ModelValidationError(f"The current model is invalid: {exc}") from exc

        state = cls(**fields)
        state.check_consistency()
        return state

    def check_consistency(self) -> None:
        """Raise ModelValidationError if the artifact shapes disagree."""
        p, q = self.PBQ.shape
        k = self.T.shape[1]
        n = self.T.shape[0]
        expected = {
            "ymean": (q,),
            "ystd": (q,),
            "P": (p, k),
            "W": (p, k),
            "Q": (q, k),
            "U": (n, k),
            "B": (k, k),
            "E": (n, p),
            "F": (n, q),
        }
        for name, shape in expected.items():
            actual = getattr(self, name).shape
            if actual != shape:
                raise ModelValidationError(
                    f"The current model is invalid: {name} has shape {actual}, expected {shape}"
                )
        if k < 1:
            raise ModelValidationError("The current model is invalid: no latent component stored")


def _as_matrix(value: Any, name: str) -> NDArray[np.float64]:
    matrix = np.asarray(value, dtype=np.float64)
    if matrix.ndim != 2:
        raise ValueError(f"{name} must be a 2D table, got {matrix.ndim}D")
    return matrix
