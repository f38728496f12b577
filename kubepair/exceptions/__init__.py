"""Exception hierarchy for kubepair.

All exceptions carry a code, a message and a details dict. Backend errors
are split into the two conditions a run may tolerate (already exists,
not found) and everything else.
"""

from kubepair.exceptions.backend import (
    AlreadyExistsError,
    BackendError,
    DeadlineExceededError,
    NotFoundError,
)
from kubepair.exceptions.base import ConfigurationError, KubePairError, ValidationError
from kubepair.exceptions.run import FatalRunError

__all__ = [
    "KubePairError",
    "ValidationError",
    "ConfigurationError",
    "BackendError",
    "AlreadyExistsError",
    "NotFoundError",
    "DeadlineExceededError",
    "FatalRunError",
]
