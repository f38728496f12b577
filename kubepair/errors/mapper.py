"""Error classification and response mapping.

Turns exceptions raised anywhere in a run into an ``ErrorKind`` (used by the
orchestrator to decide what is tolerable) and into structured error
responses with machine-readable codes and recovery strategies (used by the
CLI and the run report).
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict

from kubepair.exceptions import (
    AlreadyExistsError,
    ConfigurationError,
    FatalRunError,
    KubePairError,
    NotFoundError,
    ValidationError,
)


class ErrorKind(str, Enum):
    ALREADY_EXISTS = "already_exists"
    NOT_FOUND = "not_found"
    OTHER = "other"


# Keyed by an error's own code or by its class-derived code; the own code wins.
RECOVERY_STRATEGIES: Dict[str, str] = {
    # Backend conditions
    "ALREADY_EXISTS": "An object with this name already exists. Use a different --prefix or run decommission first.",
    "NOT_FOUND": "The object does not exist. Verify the namespace and prefix match the provisioning run.",
    "BACKEND": "The cluster API rejected the request. Check RBAC permissions, quotas and API server health.",
    "BACKEND_UNAVAILABLE": "The cluster API could not be reached. Check network connectivity and the kubeconfig server URL.",
    "DEADLINE_EXCEEDED": "The object did not reach the target state in time. Check the storage class provisioner and events, or raise --poll-timeout.",

    # Input and configuration
    "VALIDATION": "Review the run parameters and correct the input.",
    "INVALID_PREFIX": "Use a lowercase prefix of letters, digits and '-' that starts and ends with a letter or digit.",
    "CONFIGURATION": "Check the kubeconfig path, cluster context and storage class.",
    "MISSING_STORAGE_CLASS": "Provide --storage-class or set KUBEPAIR_STORAGE_CLASS.",
    "KUBECONFIG_UNUSABLE": "Provide --kubeconfig or set KUBECONFIG to a readable kubeconfig file.",

    # Run outcome
    "FATAL_RUN": "Inspect the first fatal error; objects created before the failure may need a decommission run.",
}


def classify_error(error: BaseException) -> ErrorKind:
    """Map an exception onto the three conditions a run distinguishes."""
    if isinstance(error, AlreadyExistsError):
        return ErrorKind.ALREADY_EXISTS
    if isinstance(error, NotFoundError):
        return ErrorKind.NOT_FOUND
    return ErrorKind.OTHER


def get_error_code(error: BaseException) -> str:
    """Extract error code from exception class name.

    Converts class names like DeadlineExceededError to DEADLINE_EXCEEDED.
    """
    name = error.__class__.__name__
    # Remove 'Error' suffix
    if name.endswith("Error"):
        name = name[:-5]
    # Convert CamelCase to UPPER_SNAKE_CASE
    result = []
    for i, char in enumerate(name):
        if char.isupper() and i > 0:
            result.append("_")
        result.append(char.upper())
    return "".join(result)


def get_recovery_strategy(error_code: str, error: BaseException) -> str:
    """Get recovery strategy for an error.

    Returns specific strategy if available, otherwise a generic one.
    """
    own_code = getattr(error, "code", None)
    if isinstance(own_code, str) and own_code in RECOVERY_STRATEGIES:
        return RECOVERY_STRATEGIES[own_code]

    if error_code in RECOVERY_STRATEGIES:
        return RECOVERY_STRATEGIES[error_code]

    if isinstance(error, ValidationError):
        return RECOVERY_STRATEGIES["VALIDATION"]
    if isinstance(error, ConfigurationError):
        return RECOVERY_STRATEGIES["CONFIGURATION"]

    return "Review the error message and try again."


def create_error_response(error: BaseException) -> Dict[str, Any]:
    """Create a structured error payload from any exception.

    For a FatalRunError the first fatal error is nested under ``cause``.
    """
    error_code = get_error_code(error)

    response: Dict[str, Any] = {
        "error_code": error_code,
        "message": str(error),
        "details": {},
        "recovery_strategy": get_recovery_strategy(error_code, error),
    }
    if isinstance(error, KubePairError):
        response["code"] = error.code
        response["message"] = error.message
        response["details"] = dict(error.details)
    if isinstance(error, FatalRunError):
        response["cause"] = create_error_response(error.cause)
    return response
