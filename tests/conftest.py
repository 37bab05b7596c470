"""
Pytest configuration for nipals_pls tests.

Provides the shared datasets used across the suite and makes sure every
test starts and ends with the library's default (silent) logging setup.
"""

import numpy as np
import pytest

from nipals_pls.core.logging import reset_logging


@pytest.fixture(autouse=True)
def _reset_logging():
    """Undo any configure_logging() call made by a test."""
    reset_logging()
    yield
    reset_logging()


@pytest.fixture
def and_data():
    """Pseudo logical-AND problem with one-hot targets."""
    X = np.array([[0.1, 0.02], [0.25, 1.01], [0.95, 0.01], [1.01, 0.96]])
    Y = np.array([[1, 0], [1, 0], [1, 0], [0, 1]], dtype=float)
    return X, Y


@pytest.fixture
def two_sample_data():
    """Two samples, four features, one target: exactly fitted by one component."""
    X = np.array([[0.323, 34, 56, 23], [2.23, 43, 32, 83]])
    Y = np.array([[23.0], [15.0]])
    return X, Y


@pytest.fixture
def regression_data():
    """Random multi-target regression problem."""
    rng = np.random.RandomState(42)
    X = rng.randn(30, 8)
    coef = rng.randn(8, 2)
    Y = X @ coef + 0.1 * rng.randn(30, 2)
    return X, Y
