"""Operators: column transforms and PLS models."""

from .transforms import NormalizationResult, feature_normalize
from .models import PLS, PLSState

__all__ = [
    "feature_normalize",
    "NormalizationResult",
    "PLS",
    "PLSState",
]
