"""Scikit-learn compatible model operators.

This module provides the NIPALS PLS estimator and its functional core.
"""

from .nipals import PLS, max_sum_col_index, nipals_fit, nipals_predict

__all__ = [
    "PLS",
    "max_sum_col_index",
    "nipals_fit",
    "nipals_predict",
]
