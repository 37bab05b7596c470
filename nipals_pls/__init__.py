"""
nipals_pls - Partial Least Squares regression with the NIPALS algorithm.

This package fits PLS models relating a predictor matrix X to a response
matrix Y, predicts responses for new inputs, and exports/loads the fitted
parameter set as a plain record.
"""

__version__ = "0.1.0"
__author__ = "nipals_pls Project"

# Model - most commonly used
from .operators.models import PLS, PLSState, nipals_fit, nipals_predict
from .operators.transforms import feature_normalize

# Configuration and errors
from .config import TrainingOptions
from .exceptions import (
    DimensionMismatchError,
    InvalidArgumentError,
    ModelValidationError,
    NumericalDegeneracyError,
    PLSError,
)

# Logging
from .core.logging import configure_logging, get_logger

__all__ = [
    # Model
    "PLS",
    "PLSState",
    "nipals_fit",
    "nipals_predict",
    "feature_normalize",

    # Configuration
    "TrainingOptions",

    # Errors
    "PLSError",
    "InvalidArgumentError",
    "ModelValidationError",
    "DimensionMismatchError",
    "NumericalDegeneracyError",

    # Logging
    "configure_logging",
    "get_logger",
]
