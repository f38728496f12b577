from kubepair.errors.mapper import (
    ErrorKind,
    classify_error,
    create_error_response,
    get_error_code,
    get_recovery_strategy,
)

__all__ = [
    "ErrorKind",
    "classify_error",
    "create_error_response",
    "get_error_code",
    "get_recovery_strategy",
]
