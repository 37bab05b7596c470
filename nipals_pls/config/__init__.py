"""
Configuration module for nipals_pls.

Provides the TrainingOptions dataclass and the validators shared by the
estimator parameters and the ``train`` options mapping.
"""

from nipals_pls.config.training_config import (
    TrainingOptions,
    validate_latent_vectors,
    validate_max_iter,
    validate_tolerance,
)

__all__ = [
    'TrainingOptions',
    'validate_latent_vectors',
    'validate_tolerance',
    'validate_max_iter',
]
