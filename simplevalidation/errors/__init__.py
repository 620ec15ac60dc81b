"""Monadic Error Handling System

Result type and typed application errors used wherever the engine reports a
failure that is not a field violation (setup, option parsing, registry use).

Usage:
    from simplevalidation.errors import Ok, Err, Result, AppError

    match checker.configure(["min=3"]):
        case Ok(_):
            ...
        case Err(error):
            log.warning("checker_misconfigured", code=error.code.name)
"""
from .types import (
    # Core types
    Result,
    Ok,
    Err,
    AppError,
    AppErrorException,
    ErrorCode,
    ErrorContext,
    # Constructors
    from_exception,
    try_result,
    # Combinators
    require,
)

from .builders import (
    validation_error,
    invalid_option,
    not_registered,
    no_unit_provided,
    registry_frozen,
    reserved_name,
    unresolved_annotation,
)

__all__ = [
    "Result",
    "Ok",
    "Err",
    "AppError",
    "AppErrorException",
    "ErrorCode",
    "ErrorContext",
    "from_exception",
    "try_result",
    "require",
    "validation_error",
    "invalid_option",
    "not_registered",
    "no_unit_provided",
    "registry_frozen",
    "reserved_name",
    "unresolved_annotation",
]
