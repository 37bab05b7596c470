"""Exception hierarchy for nipals_pls.

Argument and record validation errors derive from ``ValueError`` so callers
that only know the standard library can still catch them.
"""


class PLSError(Exception):
    """Base exception for nipals_pls errors."""
    pass

class InvalidArgumentError(PLSError, ValueError):
    """Raised when training options or input matrices are invalid."""
    pass

class ModelValidationError(PLSError, ValueError):
    """Raised when an exported model record cannot be loaded."""
    pass

class DimensionMismatchError(PLSError, ValueError):
    """Raised when prediction input does not match the fitted operator."""
    pass

class NumericalDegeneracyError(PLSError, ArithmeticError):
    """Raised when no latent component can be extracted from the data."""
    pass
