"""Utility helpers for nipals_pls."""

from .backend import (
    JAX_AVAILABLE,
    SUPPORTED_BACKENDS,
    check_backend_available,
    is_jax_available,
)

__all__ = [
    "JAX_AVAILABLE",
    "SUPPORTED_BACKENDS",
    "check_backend_available",
    "is_jax_available",
]
