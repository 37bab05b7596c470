"""Training options for the NIPALS PLS trainer.

Provides a single, typed entry point for the settings a ``train`` call needs.
Mappings with camelCase keys (``latentVectors``) are accepted as
well as snake_case keys.
"""

from __future__ import annotations

import math
import numbers
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from nipals_pls.exceptions import InvalidArgumentError

_KEY_ALIASES = {
    "latentVectors": "latent_vectors",
    "maxIter": "max_iter",
}


def validate_latent_vectors(value: Any) -> int:
    """Return ``value`` as a positive int or raise InvalidArgumentError."""
    if value is None:
        raise InvalidArgumentError("Latent vectors must be a number.")
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidArgumentError(
            f"Latent vectors must be a number, got {type(value).__name__}."
        )
    if not math.isfinite(value) or int(value) != value:
        raise InvalidArgumentError(f"Latent vectors must be an integer, got {value!r}.")
    if value < 1:
        raise InvalidArgumentError(f"Latent vectors must be positive, got {value!r}.")
    return int(value)


def validate_tolerance(value: Any) -> float:
    """Return ``value`` as a positive finite float or raise InvalidArgumentError."""
    if value is None:
        raise InvalidArgumentError("Tolerance must be a number.")
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidArgumentError(
            f"Tolerance must be a number, got {type(value).__name__}."
        )
    value = float(value)
    if not math.isfinite(value) or value <= 0.0:
        raise InvalidArgumentError(f"Tolerance must be positive and finite, got {value!r}.")
    return value


def validate_max_iter(value: Any) -> int:
    """Return ``value`` as a positive int or raise InvalidArgumentError."""
    if isinstance(value, bool) or not isinstance(value, numbers.Integral) or value < 1:
        raise InvalidArgumentError(f"max_iter must be a positive integer, got {value!r}.")
    return int(value)


@dataclass(frozen=True)
class TrainingOptions:
    """Options of a single PLS training call.

    Attributes:
        latent_vectors: Upper bound on the number of extracted components.
        tolerance: Stop threshold for both the residual Y norm and the
            per-component fixed-point iteration.
        max_iter: Iteration cap of the per-component fixed-point loop.
    """

    latent_vectors: int
    tolerance: float
    max_iter: int = 500

    def __post_init__(self) -> None:
        object.__setattr__(self, "latent_vectors", validate_latent_vectors(self.latent_vectors))
        object.__setattr__(self, "tolerance", validate_tolerance(self.tolerance))
        object.__setattr__(self, "max_iter", validate_max_iter(self.max_iter))

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any] | TrainingOptions | None) -> TrainingOptions:
        """Build options from a mapping such as ``{"latentVectors": 2, "tolerance": 1e-5}``.

        Raises:
            InvalidArgumentError: If ``options`` is not a mapping, contains
                unknown keys, or a required value is missing or invalid.
        """
        if isinstance(options, TrainingOptions):
            return options
        if options is None:
            options = {}
        if not isinstance(options, Mapping):
            raise InvalidArgumentError(
                f"options must be a mapping, got {type(options).__name__}."
            )

        kwargs: dict[str, Any] = {}
        for key, value in options.items():
            name = _KEY_ALIASES.get(key, key)
            if name not in ("latent_vectors", "tolerance", "max_iter"):
                raise InvalidArgumentError(f"Unknown training option: {key!r}.")
            kwargs[name] = value

        return cls(
            latent_vectors=kwargs.get("latent_vectors"),
            tolerance=kwargs.get("tolerance"),
            max_iter=kwargs.get("max_iter", 500),
        )
