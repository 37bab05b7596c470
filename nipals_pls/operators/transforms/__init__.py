"""Data transforms applied before and after PLS modelling."""

from .normalization import STD_FLOOR, NormalizationResult, feature_normalize

__all__ = [
    "feature_normalize",
    "NormalizationResult",
    "STD_FLOOR",
]
