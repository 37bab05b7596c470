"""
Models module.

This module contains the PLS model definitions and the fitted-state record
shared by all backends.
"""

from .sklearn import PLS, max_sum_col_index, nipals_fit, nipals_predict
from .state import MODEL_NAME, PLSState

__all__ = [
    "PLS",
    "PLSState",
    "MODEL_NAME",
    "max_sum_col_index",
    "nipals_fit",
    "nipals_predict",
]
