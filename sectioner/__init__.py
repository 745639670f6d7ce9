from .errors import CommitError, InputValidationError, NotFoundError, SectionerError
from .scheduler import DistributionResult, distribute

__version__ = "0.1.0"

__all__ = [
    "distribute",
    "DistributionResult",
    "SectionerError",
    "InputValidationError",
    "NotFoundError",
    "CommitError",
]
