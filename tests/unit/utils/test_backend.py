"""Unit tests for nipals_pls.utils.backend and nipals_pls.utils.linalg."""

from unittest.mock import patch

import numpy as np
import pytest

from nipals_pls.exceptions import InvalidArgumentError
from nipals_pls.operators.models.sklearn.nipals import PLS, nipals_fit
from nipals_pls.utils.backend import (
    JAX_AVAILABLE,
    SUPPORTED_BACKENDS,
    check_backend_available,
    is_jax_available,
)
from nipals_pls.utils.linalg import ArrayBackend, NumpyBackend, get_backend


class TestAvailability:

    def test_supported_backends(self):
        assert SUPPORTED_BACKENDS == ('numpy', 'jax')

    def test_is_jax_available_matches_flag(self):
        assert is_jax_available() is JAX_AVAILABLE

    def test_numpy_always_available(self):
        check_backend_available('numpy')

    def test_missing_jax_raises_import_error(self):
        with patch('nipals_pls.utils.backend.JAX_AVAILABLE', False):
            with pytest.raises(ImportError, match="nipals-pls\\[jax\\]"):
                check_backend_available('jax')


class TestGetBackend:

    def test_default_is_numpy(self):
        assert isinstance(get_backend(), NumpyBackend)
        assert get_backend(None) is get_backend('numpy')

    def test_instance_passes_through(self):
        backend = NumpyBackend()
        assert get_backend(backend) is backend

    def test_unknown_backend(self):
        with pytest.raises(InvalidArgumentError, match="backend must be one of"):
            get_backend('torch')

    def test_base_class_assignments_are_abstract(self):
        with pytest.raises(NotImplementedError):
            ArrayBackend().set_column(np.zeros((2, 2)), 0, np.ones(2))


class TestNumpyBackend:

    def setup_method(self):
        self.la = get_backend('numpy')

    def test_asarray_is_float64(self):
        assert self.la.asarray([[1, 2], [3, 4]]).dtype == np.float64

    def test_norm_and_sum_of_squares(self):
        a = np.array([3.0, 4.0])
        assert self.la.norm(a) == pytest.approx(5.0)
        assert self.la.sum_of_squares(a) == pytest.approx(25.0)
        assert isinstance(self.la.norm(a), float)

    def test_frobenius_norm(self):
        assert self.la.norm(np.ones((2, 2))) == pytest.approx(2.0)

    def test_set_column_in_place(self):
        M = self.la.zeros((3, 2))
        out = self.la.set_column(M, 1, np.array([1.0, 2.0, 3.0]))

        assert out is M
        np.testing.assert_array_equal(M[:, 1], [1.0, 2.0, 3.0])

    def test_set_item(self):
        M = self.la.zeros((2, 2))
        self.la.set_item(M, 1, 0, 4.0)
        assert M[1, 0] == 4.0

    def test_outer(self):
        np.testing.assert_array_equal(self.la.outer(np.array([1.0, 2.0]), np.array([3.0])), [[3.0], [6.0]])


@pytest.mark.skipif(not JAX_AVAILABLE, reason="JAX not installed")
class TestJaxBackend:

    def setup_method(self):
        self.la = get_backend('jax')

    def test_cached_instance(self):
        assert get_backend('jax') is self.la

    def test_float64_enabled(self):
        assert self.la.asarray([[1, 2]]).dtype == np.float64

    def test_set_column_returns_copy(self):
        M = self.la.zeros((3, 2))
        out = self.la.set_column(M, 0, self.la.asarray([1.0, 2.0, 3.0]))

        np.testing.assert_array_equal(self.la.to_numpy(M), np.zeros((3, 2)))
        np.testing.assert_array_equal(self.la.to_numpy(out)[:, 0], [1.0, 2.0, 3.0])

    def test_fit_matches_numpy(self, regression_data):
        X, Y = regression_data
        state_np, _ = nipals_fit(X, Y, 3, 1e-8, backend='numpy')
        state_jax, _ = nipals_fit(X, Y, 3, 1e-8, backend='jax')

        np.testing.assert_allclose(state_jax.PBQ, state_np.PBQ, atol=1e-8)
        np.testing.assert_allclose(state_jax.T, state_np.T, atol=1e-8)
        assert state_jax.R2X == pytest.approx(state_np.R2X)

    def test_estimator_predictions_match_numpy(self, regression_data):
        X, Y = regression_data
        pred_np = PLS(latent_vectors=3, backend='numpy').fit(X, Y).predict(X)
        pred_jax = PLS(latent_vectors=3, backend='jax').fit(X, Y).predict(X)

        assert isinstance(pred_jax, np.ndarray)
        np.testing.assert_allclose(pred_jax, pred_np, atol=1e-8)
