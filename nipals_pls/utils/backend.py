"""
Utilities to detect optional numeric backends and allow conditional tests.
"""
import importlib.util

JAX_AVAILABLE = importlib.util.find_spec('jax') is not None

SUPPORTED_BACKENDS = ('numpy', 'jax')


def is_jax_available():
    """Check whether JAX is installed."""
    return JAX_AVAILABLE


def check_backend_available(backend_name: str):
    """
    Check that a numeric backend is available and raise otherwise.

    Args:
        backend_name: Backend name ('numpy' or 'jax').

    Raises:
        ImportError: If the backend is not installed.
    """
    if backend_name == 'jax' and not JAX_AVAILABLE:
        raise ImportError(
            "JAX is not installed. Please install it with `pip install nipals-pls[jax]`."
        )
