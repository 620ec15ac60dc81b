"""Validation Error Builders

Ergonomic constructors for the typed errors raised outside of field
validation: checker option parsing, registry misuse and engine setup.
Each builder creates an AppError with the appropriate code and context.
"""
from .types import AppError, ErrorCode, ErrorContext, Err


def validation_error(
    message: str,
    *,
    code: ErrorCode = ErrorCode.E2000_VALIDATION_GENERIC,
    field: str | None = None,
    value: str | None = None,
    origin: str = "",
    cause: Exception | None = None,
    **metadata,
) -> Err[AppError]:
    """Create validation error."""
    meta = {"field": field, "value": value, **metadata}
    return Err(AppError(
        code=code,
        message=message,
        context=ErrorContext(origin=origin),
        metadata={k: v for k, v in meta.items() if v is not None},
        cause=cause,
    ))


def invalid_option(
    checker: str,
    option: str,
    reason: str,
    *,
    value: str | None = None,
    cause: Exception | None = None,
) -> Err[AppError]:
    return validation_error(
        f"{checker} option {option} value invalid: {reason}",
        code=ErrorCode.E2007_INVALID_OPTION,
        value=value,
        origin=checker,
        cause=cause,
        option=option,
    )


def not_registered(name: str, field: str | None = None, origin: str = "") -> Err[AppError]:
    return validation_error(
        f"Validator of type {name} is not registered.",
        code=ErrorCode.E2009_NOT_REGISTERED,
        field=field,
        origin=origin,
        checker=name,
    )


def no_unit_provided(origin: str = "") -> Err[AppError]:
    return validation_error(
        "no unit provided",
        code=ErrorCode.E2006_NO_UNIT_PROVIDED,
        origin=origin,
    )


def registry_frozen(name: str, origin: str = "") -> Err[AppError]:
    return validation_error(
        f"cannot register checker {name!r}: the registry is frozen",
        code=ErrorCode.E2008_REGISTRY_FROZEN,
        origin=origin,
        checker=name,
    )


def reserved_name(name: str, origin: str = "") -> Err[AppError]:
    return validation_error(
        f"cannot register checker {name!r}: the name is reserved by the instruction grammar",
        code=ErrorCode.E2005_CONSTRAINT_VIOLATION,
        origin=origin,
        checker=name,
    )


def unresolved_annotation(record: str, field: str, reason: str) -> Err[AppError]:
    return validation_error(
        f"cannot read the instruction of {record}.{field}: {reason}",
        code=ErrorCode.E2015_UNRESOLVED_ANNOTATION,
        field=field,
        origin="instruction",
        record=record,
    )
