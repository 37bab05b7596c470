"""NIPALS PLS regressor for nipals_pls.

Partial Least Squares regression of a response matrix Y on a predictor
matrix X, extracting latent components one at a time with the NIPALS
fixed-point iteration and deflating X and Y after each component.

Mathematical formulation
------------------------
Let X in R^{n x p} and Y in R^{n x q} be column-normalized. For k = 1..K:
  1. Start t from the column of X with the largest sum of squares and u
     from the column of Y with the largest sum of squares.
  2. Iterate until ||t_new - t_old|| <= tol:
     w = X^T u / ||X^T u||,  t = X w,  q = Y^T t / ||Y^T t||,  u = Y q
  3. p = X^T t / (t^T t); rescale p to unit norm and t, w by the same factor.
  4. b = u^T t / (t^T t)
  5. Deflate: X <- X - t p^T,  Y <- Y - b t q^T
Extraction stops once ||Y|| <= tol or K components are stored. The
regression operator is PBQ = P B Q^T with B = diag(b_1..b_K).

At prediction time the incoming batch is normalized with its own column
statistics, multiplied by PBQ and mapped back to response units with the
training Y deviations and means.

Classes
-------
PLS
    sklearn-compatible estimator with ``train``/``export``/``load``.
"""

from __future__ import annotations

import warnings
from collections.abc import Mapping
from typing import Any, NamedTuple

import numpy as np
from numpy.typing import ArrayLike, NDArray
from sklearn.base import BaseEstimator, RegressorMixin
from sklearn.exceptions import ConvergenceWarning
from sklearn.utils.validation import check_is_fitted

from nipals_pls.config import (
    TrainingOptions,
    validate_latent_vectors,
    validate_max_iter,
    validate_tolerance,
)
from nipals_pls.core.logging import get_logger
from nipals_pls.exceptions import (
    DimensionMismatchError,
    InvalidArgumentError,
    NumericalDegeneracyError,
)
from nipals_pls.operators.models.state import PLSState
from nipals_pls.operators.transforms.normalization import feature_normalize
from nipals_pls.utils.linalg import ArrayBackend, get_backend

logger = get_logger(__name__)

_EPS = 1e-12


# =============================================================================
# Input validation
# =============================================================================

def _check_matrix(M: ArrayLike, name: str) -> NDArray[np.float64]:
    """Convert ``M`` to a finite 2D float64 array (1D becomes one column)."""
    try:
        M = np.asarray(M, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise InvalidArgumentError(f"{name} must be a numeric table: {exc}") from exc
    if M.ndim == 1:
        M = M.reshape(-1, 1)
    if M.ndim != 2:
        raise InvalidArgumentError(f"{name} must be a 2D table, got {M.ndim}D")
    if M.shape[0] == 0 or M.shape[1] == 0:
        raise InvalidArgumentError(f"{name} must not be empty, got shape {M.shape}")
    if not np.all(np.isfinite(M)):
        raise InvalidArgumentError(f"{name} contains NaN or infinite values")
    return M


def _check_training_data(
    training_set: ArrayLike,
    predictions: ArrayLike,
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    X = _check_matrix(training_set, "training set")
    Y = _check_matrix(predictions, "predictions")
    if X.shape[0] != Y.shape[0]:
        raise InvalidArgumentError(
            "The number of predictions and elements in the dataset must be the same "
            f"({Y.shape[0]} != {X.shape[0]})"
        )
    return X, Y


# =============================================================================
# NIPALS core
# =============================================================================

def max_sum_col_index(M: Any, backend: str | ArrayBackend | None = None) -> int:
    """Index of the column of ``M * M`` with the largest sum.

    Used to pick the starting score vector of each component. On ties the
    first column wins.
    """
    la = get_backend(backend)
    return int(la.xp.argmax((M * M).sum(axis=0)))


class _Component(NamedTuple):
    t: Any
    p: Any
    u: Any
    q: Any
    w: Any
    b: float
    n_iter: int


def _extract_component(
    X: Any,
    Y: Any,
    tolerance: float,
    max_iter: int,
    la: ArrayBackend,
) -> _Component:
    """Run the fixed-point iteration for one latent component.

    Raises
    ------
    NumericalDegeneracyError
        If X has no variance left or a normalization hits a near-zero norm.
    """
    t_new = X[:, max_sum_col_index(X, la)]
    u = Y[:, max_sum_col_index(Y, la)]
    t_old = la.zeros(X.shape[0])

    if la.norm(t_new) <= tolerance:
        raise NumericalDegeneracyError("X residual has no variance left")

    w = q = None
    n_iter = 0
    while la.norm(t_new - t_old) > tolerance:
        if n_iter >= max_iter:
            warnings.warn(
                f"NIPALS inner loop did not converge in {max_iter} iterations "
                f"(||dt|| = {la.norm(t_new - t_old):.3e}, tolerance = {tolerance:.3e})",
                ConvergenceWarning,
                stacklevel=3,
            )
            break

        w = X.T @ u
        w_norm = la.norm(w)
        if w_norm < _EPS:
            raise NumericalDegeneracyError("X weight vector has zero norm")
        w = w / w_norm

        t_old = t_new
        t_new = X @ w

        q = Y.T @ t_new
        q_norm = la.norm(q)
        if q_norm < _EPS:
            raise NumericalDegeneracyError("Y loading vector has zero norm")
        q = q / q_norm

        u = Y @ q
        n_iter += 1

    t = t_new
    tt = float(t @ t)
    if tt < _EPS:
        raise NumericalDegeneracyError("X score vector has zero norm")

    p = (X.T @ t) / tt
    p_norm = la.norm(p)
    if p_norm < _EPS:
        raise NumericalDegeneracyError("X loading vector has zero norm")
    p = p / p_norm
    t = t * p_norm
    w = w * p_norm

    b = float(u @ t) / float(t @ t)
    return _Component(t=t, p=p, u=u, q=q, w=w, b=b, n_iter=n_iter)


def nipals_fit(
    training_set: ArrayLike,
    predictions: ArrayLike,
    latent_vectors: int,
    tolerance: float,
    max_iter: int = 500,
    backend: str | ArrayBackend | None = "numpy",
) -> tuple[PLSState, dict[str, list]]:
    """Fit a NIPALS PLS model.

    The inputs are copied; the caller's arrays are never modified.

    Parameters
    ----------
    training_set : array-like of shape (n_samples, n_features)
        Predictor matrix X.
    predictions : array-like of shape (n_samples, n_targets) or (n_samples,)
        Response matrix Y.
    latent_vectors : int
        Maximum number of latent components.
    tolerance : float
        Stop threshold for ||Y|| and for the per-component iteration.
    max_iter : int, default=500
        Cap on the per-component iterations.
    backend : str or ArrayBackend, default='numpy'
        Linear-algebra provider.

    Returns
    -------
    state : PLSState
        Fitted artifacts.
    diagnostics : dict
        ``n_iter`` (iterations per component) and ``y_residual_norms``
        (||Y|| after each deflation).

    Raises
    ------
    InvalidArgumentError
        On invalid options or data, before any computation.
    NumericalDegeneracyError
        If not a single component can be extracted.
    """
    latent_vectors = validate_latent_vectors(latent_vectors)
    tolerance = validate_tolerance(tolerance)
    max_iter = validate_max_iter(max_iter)
    X_raw, Y_raw = _check_training_data(training_set, predictions)
    la = get_backend(backend)

    X = feature_normalize(X_raw, la).result
    y_normalization = feature_normalize(Y_raw, la)
    Y = y_normalization.result
    ymean = -y_normalization.means
    ystd = y_normalization.std

    n_samples, n_features = X.shape
    n_targets = Y.shape[1]

    ssq_x = la.sum_of_squares(X)
    ssq_y = la.sum_of_squares(Y)

    T = la.zeros((n_samples, latent_vectors))
    P = la.zeros((n_features, latent_vectors))
    U = la.zeros((n_samples, latent_vectors))
    Q = la.zeros((n_targets, latent_vectors))
    W = la.zeros((n_features, latent_vectors))
    B = la.zeros((latent_vectors, latent_vectors))

    n_iter: list[int] = []
    y_residual_norms: list[float] = []
    last: _Component | None = None
    k = 0

    while la.norm(Y) > tolerance and k < latent_vectors:
        try:
            component = _extract_component(X, Y, tolerance, max_iter, la)
        except NumericalDegeneracyError as exc:
            if k == 0:
                raise NumericalDegeneracyError(
                    f"No latent component could be extracted: {exc}"
                ) from exc
            logger.warning(f"Stopping after {k} latent component(s): {exc}")
            break

        X = X - la.outer(component.t, component.p)
        Y = Y - component.b * la.outer(component.t, component.q)

        T = la.set_column(T, k, component.t)
        P = la.set_column(P, k, component.p)
        U = la.set_column(U, k, component.u)
        Q = la.set_column(Q, k, component.q)
        W = la.set_column(W, k, component.w)
        B = la.set_item(B, k, k, component.b)

        y_norm = la.norm(Y)
        n_iter.append(component.n_iter)
        y_residual_norms.append(y_norm)
        logger.debug(
            f"Component {k + 1}: {component.n_iter} iteration(s), "
            f"b = {component.b:.6g}, ||F|| = {y_norm:.6g}"
        )
        last = component
        k += 1

    if last is None:
        raise NumericalDegeneracyError(
            "No latent component could be extracted: the normalized responses "
            f"have no variance above tolerance {tolerance:g}"
        )

    T, P, U, Q, W = T[:, :k], P[:, :k], U[:, :k], Q[:, :k], W[:, :k]
    B = B[:k, :k]

    # last component only, not cumulative
    r2x = float(last.t @ last.t) * float(last.p @ last.p) / ssq_x

    state = PLSState(
        E=la.to_numpy(X),
        F=la.to_numpy(Y),
        R2X=r2x,
        ssqYcal=ssq_y,
        ymean=la.to_numpy(ymean),
        ystd=la.to_numpy(ystd),
        PBQ=la.to_numpy(P @ B @ Q.T),
        T=la.to_numpy(T),
        P=la.to_numpy(P),
        U=la.to_numpy(U),
        Q=la.to_numpy(Q),
        W=la.to_numpy(W),
        B=la.to_numpy(B),
    )
    logger.info(
        f"NIPALS PLS: {k}/{latent_vectors} latent component(s) on "
        f"{n_samples}x{n_features} -> {n_targets} target(s), R2X(last) = {r2x:.4f}"
    )
    return state, {"n_iter": n_iter, "y_residual_norms": y_residual_norms}


def nipals_predict(
    state: PLSState,
    dataset: ArrayLike,
    backend: str | ArrayBackend | None = "numpy",
) -> NDArray[np.float64]:
    """Apply a fitted state to ``dataset``.

    ``dataset`` is normalized with its own column statistics, not the
    training ones. A batch of one row is fully clamped and yields the
    training means.

    Raises
    ------
    InvalidArgumentError
        If ``dataset`` is not a finite numeric table.
    DimensionMismatchError
        If its column count differs from the fitted number of features.
    """
    X = _check_matrix(dataset, "dataset")
    if X.shape[1] != state.n_features:
        raise DimensionMismatchError(
            f"dataset has {X.shape[1]} column(s), the model expects {state.n_features}"
        )
    if X.shape[0] < 2:
        logger.warning(
            "Predicting on a single row: its column statistics are degenerate, "
            "the prediction falls back to the training means"
        )

    la = get_backend(backend)
    X = feature_normalize(X, la).result
    Y = X @ la.asarray(state.PBQ)
    Y = Y * la.asarray(state.ystd) - la.asarray(state.ymean)
    return la.to_numpy(Y)


# =============================================================================
# Estimator
# =============================================================================

class PLS(BaseEstimator, RegressorMixin):
    """NIPALS Partial Least Squares regressor.

    Parameters
    ----------
    latent_vectors : int, default=5
        Maximum number of latent components to extract.
    tolerance : float, default=1e-5
        Stop threshold for the residual Y norm and the per-component
        fixed-point iteration.
    max_iter : int, default=500
        Iteration cap of the per-component loop. Reaching it emits a
        ``ConvergenceWarning``.
    backend : str, default='numpy'
        Linear-algebra provider ('numpy' or 'jax').

    Attributes
    ----------
    state_ : PLSState
        All fitted artifacts (T, P, U, Q, W, B, PBQ, E, F, ymean, ystd,
        R2X, ssqYcal).
    n_features_in_ : int
        Number of features seen during fit.
    n_iter_ : list of int
        Inner iterations per component (not restored by ``load``).
    y_residual_norms_ : list of float
        ||F|| after each deflation (not restored by ``load``).

    Examples
    --------
    >>> from nipals_pls import PLS
    >>> X = [[0.1, 0.02], [0.25, 1.01], [0.95, 0.01], [1.01, 0.96]]
    >>> Y = [[1, 0], [1, 0], [1, 0], [0, 1]]
    >>> pls = PLS()
    >>> pls.train(X, Y, {"latentVectors": 2, "tolerance": 1e-5})
    >>> pls.predict(X).shape
    (4, 2)
    >>> restored = PLS.load(pls.export())
    """

    def __init__(
        self,
        latent_vectors: int = 5,
        tolerance: float = 1e-5,
        max_iter: int = 500,
        backend: str = "numpy",
    ):
        self.latent_vectors = latent_vectors
        self.tolerance = tolerance
        self.max_iter = max_iter
        self.backend = backend

    def fit(self, X: ArrayLike, y: ArrayLike) -> PLS:
        """Fit the model with the constructor parameters.

        Parameters
        ----------
        X : array-like of shape (n_samples, n_features)
            Training data.
        y : array-like of shape (n_samples,) or (n_samples, n_targets)
            Target values.

        Returns
        -------
        self : PLS
            Fitted estimator.
        """
        options = TrainingOptions(
            latent_vectors=self.latent_vectors,
            tolerance=self.tolerance,
            max_iter=self.max_iter,
        )
        self._fit(X, y, options)
        return self

    def train(
        self,
        training_set: ArrayLike,
        predictions: ArrayLike,
        options: Mapping[str, Any] | TrainingOptions | None = None,
    ) -> None:
        """Fit the model with explicit training options.

        Parameters
        ----------
        training_set : array-like of shape (n_samples, n_features)
            Predictor matrix.
        predictions : array-like of shape (n_samples, n_targets)
            Response matrix.
        options : TrainingOptions or mapping
            ``latentVectors`` (or ``latent_vectors``) and ``tolerance`` are
            required; ``max_iter`` is optional.

        Raises
        ------
        InvalidArgumentError
            If an option is missing or invalid, or the row counts differ.
            Raised before any state is modified.
        """
        options = TrainingOptions.from_mapping(options)
        self._fit(training_set, predictions, options)
        self.latent_vectors = options.latent_vectors
        self.tolerance = options.tolerance
        self.max_iter = options.max_iter

    def _fit(self, X: ArrayLike, Y: ArrayLike, options: TrainingOptions) -> None:
        state, diagnostics = nipals_fit(
            X,
            Y,
            options.latent_vectors,
            options.tolerance,
            max_iter=options.max_iter,
            backend=self.backend,
        )
        self.state_ = state
        self.n_features_in_ = state.n_features
        self.n_iter_ = diagnostics["n_iter"]
        self.y_residual_norms_ = diagnostics["y_residual_norms"]

    def predict(self, X: ArrayLike) -> NDArray[np.floating]:
        """Predict responses for ``X``.

        Parameters
        ----------
        X : array-like of shape (n_samples, n_features)
            Samples to predict. Normalized with their own column statistics.

        Returns
        -------
        y_pred : ndarray of shape (n_samples, n_targets)
            Predicted values.
        """
        check_is_fitted(self, "state_")
        return nipals_predict(self.state_, X, backend=self.backend)

    def get_explained_variance(self) -> float:
        """Return R2X, the X variance share of the last extracted component."""
        check_is_fitted(self, "state_")
        return self.state_.R2X

    def export(self) -> dict[str, Any]:
        """Export the fitted model as a plain record (see PLSState.to_record)."""
        check_is_fitted(self, "state_")
        return self.state_.to_record()

    @classmethod
    def load(cls, model: Mapping[str, Any]) -> PLS:
        """Rebuild a fitted estimator from an exported record.

        Raises
        ------
        ModelValidationError
            If ``model["modelName"]`` is not ``"PLS"`` or the record is
            malformed.
        """
        state = PLSState.from_record(model)
        pls = cls()
        pls.state_ = state
        pls.n_features_in_ = state.n_features
        logger.debug(
            f"Loaded PLS model with {state.n_components} component(s), "
            f"{state.n_features} feature(s), {state.n_targets} target(s)"
        )
        return pls

    @property
    def n_components_(self) -> int:
        """Number of latent components actually extracted."""
        check_is_fitted(self, "state_")
        return self.state_.n_components

    @property
    def explained_variance_(self) -> float:
        check_is_fitted(self, "state_")
        return self.state_.R2X

    @property
    def coef_(self) -> NDArray[np.float64]:
        """Regression operator PBQ in normalized units, shape (n_features, n_targets)."""
        check_is_fitted(self, "state_")
        return self.state_.PBQ

    @property
    def x_scores_(self) -> NDArray[np.float64]:
        check_is_fitted(self, "state_")
        return self.state_.T

    @property
    def x_loadings_(self) -> NDArray[np.float64]:
        check_is_fitted(self, "state_")
        return self.state_.P

    @property
    def y_scores_(self) -> NDArray[np.float64]:
        check_is_fitted(self, "state_")
        return self.state_.U

    @property
    def y_loadings_(self) -> NDArray[np.float64]:
        check_is_fitted(self, "state_")
        return self.state_.Q

    @property
    def x_weights_(self) -> NDArray[np.float64]:
        check_is_fitted(self, "state_")
        return self.state_.W

    def get_params(self, deep: bool = True) -> dict:
        """Get parameters for this estimator."""
        return {
            "latent_vectors": self.latent_vectors,
            "tolerance": self.tolerance,
            "max_iter": self.max_iter,
            "backend": self.backend,
        }

    def set_params(self, **params) -> PLS:
        """Set the parameters of this estimator."""
        valid = self.get_params()
        for key, value in params.items():
            if key not in valid:
                raise InvalidArgumentError(f"Invalid parameter {key!r} for estimator PLS")
            setattr(self, key, value)
        return self
