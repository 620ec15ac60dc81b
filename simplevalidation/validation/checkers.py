"""Constraint Checkers

One checker instance validates one field. A checker is created fresh by its
registry factory, configured from the option tokens of the field's
instruction, then asked to validate the field's value.

Features:
- Stable message prefixes ("required:", "invalid:", "type:", "min:", "max:",
  "not before:", "not after:", "no empty:") that callers can key off
- Permissive option parsing: unknown option keys are ignored
- Inclusive numeric and timestamp bounds
- Optional MX lookup for email domains with a bounded timeout
"""
from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Sequence
from uuid import UUID

import dns.exception
import dns.resolver

from simplevalidation.config import get_settings
from simplevalidation.errors import AppError, Err, ErrorCode, Ok, Result, invalid_option, try_result
from simplevalidation.logging import checker_logger

log = checker_logger()

INVALID_TYPE_TEMPLATE = "type: the value of {field} is of type {kind} which is not valid"

INT64_MIN, INT64_MAX = -(2 ** 63), 2 ** 63 - 1
UINT64_MAX = 2 ** 64 - 1


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Result of a validation check with rich context."""
    is_valid: bool
    error_message: str | None = None
    error_code: ErrorCode | None = None
    constraint: str | None = None
    actual: Any = None

    @classmethod
    def valid(cls) -> ValidationResult: return cls(is_valid=True)

    @classmethod
    def invalid(cls, message: str, code: ErrorCode = ErrorCode.E2000_VALIDATION_GENERIC, *,
                constraint: str | None = None, actual: Any = None) -> ValidationResult:
        return cls(is_valid=False, error_message=message, error_code=code,
            constraint=constraint or message.split(":", 1)[0], actual=actual)

    @classmethod
    def invalid_type(cls, field_name: str, kind: type, actual: Any = None) -> ValidationResult:
        return cls.invalid(INVALID_TYPE_TEMPLATE.format(field=field_name, kind=kind.__name__),
            ErrorCode.E2004_INVALID_TYPE, constraint="type", actual=actual)


class Checker(ABC):
    """Base class for constraint checkers.

    Implementations must be pure functions of (value, configured options):
    ``validate`` never mutates shared state, and ``configure`` only touches
    the instance it is called on.
    """
    name: str = "checker"

    @abstractmethod
    def validate(self, value: Any, field_name: str, kind: type) -> ValidationResult:
        """Validate a value. ``kind`` is the runtime type of ``value``."""

    @abstractmethod
    def configure(self, options: Sequence[str]) -> Result[None, AppError]:
        """Read "key" / "key=value" option tokens into the checker."""


CheckerFactory = Callable[[], Checker]


def split_option(item: str) -> tuple[str, str | None]:
    key, sep, value = item.partition("=")
    return key, (value if sep else None)


def parse_int_option(checker: str, key: str, raw: str | None, low: int, high: int,
                     base: int = 0) -> Result[int, AppError]:
    """Parse an integer option value. The default base 0 accepts 0x/0o/0b prefixes."""
    if raw is None:
        return invalid_option(checker, key, "missing value")
    try:
        value = int(raw, base)
    except ValueError as e:
        return invalid_option(checker, key, str(e), value=raw, cause=e)
    if not low <= value <= high:
        return invalid_option(checker, key, f"{value} is outside [{low}, {high}]", value=raw)
    return Ok(value)


def parse_float_option(checker: str, key: str, raw: str | None) -> Result[float, AppError]:
    if raw is None:
        return invalid_option(checker, key, "missing value")
    try:
        return Ok(float(raw))
    except ValueError as e:
        return invalid_option(checker, key, str(e), value=raw, cause=e)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


# ============================================================================
# String
# ============================================================================

class StringChecker(Checker):
    """Length bounds and emptiness for strings.

    A configured ``min`` never rejects the empty string: whether a value must
    be present is decided by ``required`` alone.
    """
    name = "string"

    def __init__(self):
        self.min: int | None = None
        self.max: int | None = None
        self.required = False

    def validate(self, value: Any, field_name: str, kind: type) -> ValidationResult:
        if not isinstance(value, str):
            return ValidationResult.invalid_type(field_name, kind, value)
        length = len(value)
        if self.min is not None and length > 0 and length < self.min:
            return ValidationResult.invalid(
                f"min: the value of {field_name} is {value!r} of length {length} "
                f"which is less than the minimum length {self.min}",
                ErrorCode.E2003_OUT_OF_RANGE, actual=value)
        if self.max is not None and length > self.max:
            return ValidationResult.invalid(
                f"max: the value of {field_name} is {value!r} of length {length} "
                f"which is greater than the maximum length {self.max}",
                ErrorCode.E2003_OUT_OF_RANGE, actual=value)
        if self.required and length == 0:
            return ValidationResult.invalid(f"required: the value of {field_name} is blank",
                ErrorCode.E2001_REQUIRED_FIELD_MISSING, actual=value)
        return ValidationResult.valid()

    def configure(self, options: Sequence[str]) -> Result[None, AppError]:
        for item in options:
            key, raw = split_option(item)
            match key:
                case "min" | "max":
                    match parse_int_option(self.name, key, raw, INT64_MIN, INT64_MAX, base=10):
                        case Ok(parsed): setattr(self, key, parsed)
                        case Err() as failure: return failure
                case "required":
                    self.required = True
        return Ok(None)


# ============================================================================
# Numeric
# ============================================================================

class _BoundedNumberChecker(Checker):
    """Inclusive [min, max] bounds shared by the numeric checkers."""

    def __init__(self):
        self.min: Any = None
        self.max: Any = None

    def check_bounds(self, value: int | float, field_name: str) -> ValidationResult:
        if self.min is not None and value < self.min:
            return ValidationResult.invalid(
                f"min: the field {field_name} value {value} is less than the minimum value {self.min}",
                ErrorCode.E2003_OUT_OF_RANGE, actual=value)
        if self.max is not None and value > self.max:
            return ValidationResult.invalid(
                f"max: the field {field_name} value {value} is greater than the maximum value {self.max}",
                ErrorCode.E2003_OUT_OF_RANGE, actual=value)
        return ValidationResult.valid()

    @abstractmethod
    def parse_bound(self, key: str, raw: str | None) -> Result[Any, AppError]:
        """Parse the value of a ``min`` / ``max`` option."""

    def configure(self, options: Sequence[str]) -> Result[None, AppError]:
        for item in options:
            key, raw = split_option(item)
            if key in ("min", "max"):
                match self.parse_bound(key, raw):
                    case Ok(parsed): setattr(self, key, parsed)
                    case Err() as failure: return failure
        return Ok(None)


class IntChecker(_BoundedNumberChecker):
    """Signed integers within the 64-bit range."""
    name = "int"

    def validate(self, value: Any, field_name: str, kind: type) -> ValidationResult:
        if not _is_int(value) or not INT64_MIN <= value <= INT64_MAX:
            return ValidationResult.invalid_type(field_name, kind, value)
        return self.check_bounds(value, field_name)

    def parse_bound(self, key: str, raw: str | None) -> Result[int, AppError]:
        return parse_int_option(self.name, key, raw, INT64_MIN, INT64_MAX)


class UintChecker(_BoundedNumberChecker):
    """Unsigned integers: non-negative ints within the 64-bit range."""
    name = "uint"

    def validate(self, value: Any, field_name: str, kind: type) -> ValidationResult:
        if not _is_int(value) or not 0 <= value <= UINT64_MAX:
            return ValidationResult.invalid_type(field_name, kind, value)
        return self.check_bounds(value, field_name)

    def parse_bound(self, key: str, raw: str | None) -> Result[int, AppError]:
        return parse_int_option(self.name, key, raw, 0, UINT64_MAX)


class FloatChecker(_BoundedNumberChecker):
    name = "float"

    def validate(self, value: Any, field_name: str, kind: type) -> ValidationResult:
        if not isinstance(value, float):
            return ValidationResult.invalid_type(field_name, kind, value)
        return self.check_bounds(value, field_name)

    def parse_bound(self, key: str, raw: str | None) -> Result[float, AppError]:
        return parse_float_option(self.name, key, raw)


# ============================================================================
# Format
# ============================================================================

EMAIL_PATTERN = re.compile(
    r"[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*"
)
POSTAL_CODE_PATTERN = re.compile(r"[0-9]{5}")


def lookup_mx(domain: str, timeout: float) -> list[str]:
    """MX exchanges for a domain. Raises dns.exception.DNSException on failure."""
    answer = dns.resolver.resolve(domain, "MX", lifetime=timeout, raise_on_no_answer=False)
    return [str(record.exchange) for record in answer]


class EmailChecker(Checker):
    """Email syntax, optionally backed by an MX record lookup (``checkdomainmx``)."""
    name = "email"

    def __init__(self):
        self.required = False
        self.check_domain_mx = False

    def validate(self, value: Any, field_name: str, kind: type) -> ValidationResult:
        if not isinstance(value, str):
            return ValidationResult.invalid_type(field_name, kind, value)
        if not value:
            if self.required:
                return ValidationResult.invalid(f"required: the field {field_name} is required",
                    ErrorCode.E2001_REQUIRED_FIELD_MISSING, actual=value)
            return ValidationResult.valid()
        if not EMAIL_PATTERN.fullmatch(value):
            return ValidationResult.invalid(
                f"invalid: the field {field_name} does not contain a valid email. {value!r} was provided",
                ErrorCode.E2010_INVALID_EMAIL, actual=value)
        if self.check_domain_mx:
            return self._check_mx(value.split("@", 1)[1], field_name, value)
        return ValidationResult.valid()

    def _check_mx(self, domain: str, field_name: str, value: str) -> ValidationResult:
        timeout = get_settings().MX_LOOKUP_TIMEOUT
        match try_result(lambda: lookup_mx(domain, timeout), code=ErrorCode.E2014_DNS_LOOKUP_FAILED,
                         origin=self.name, exceptions=(dns.exception.DNSException,)):
            case Err(error):
                log.warning("mx_lookup_failed", domain=domain, error=error.message)
                return ValidationResult.invalid(
                    f"invalid: the field {field_name} encountered an error while looking up MX records "
                    f"for domain {domain}: {error.message}",
                    ErrorCode.E2014_DNS_LOOKUP_FAILED, actual=value)
            case Ok(records) if not records:
                return ValidationResult.invalid(
                    f"invalid: the field {field_name} had no MX records found for domain {domain}",
                    ErrorCode.E2010_INVALID_EMAIL, actual=value)
        return ValidationResult.valid()

    def configure(self, options: Sequence[str]) -> Result[None, AppError]:
        for item in options:
            match split_option(item)[0]:
                case "required": self.required = True
                case "checkdomainmx": self.check_domain_mx = True
        return Ok(None)


class PostalCodeChecker(Checker):
    """Five-digit postal codes."""
    name = "postalcode"

    def __init__(self):
        self.required = False

    def validate(self, value: Any, field_name: str, kind: type) -> ValidationResult:
        if not isinstance(value, str):
            return ValidationResult.invalid_type(field_name, kind, value)
        if not value:
            if self.required:
                return ValidationResult.invalid(f"required: the field {field_name} is required",
                    ErrorCode.E2001_REQUIRED_FIELD_MISSING, actual=value)
            return ValidationResult.valid()
        if not POSTAL_CODE_PATTERN.fullmatch(value):
            return ValidationResult.invalid(
                f"invalid: the field {field_name} does not contain a valid postal code. {value!r} was provided",
                ErrorCode.E2002_INVALID_FORMAT, actual=value)
        return ValidationResult.valid()

    def configure(self, options: Sequence[str]) -> Result[None, AppError]:
        if any(split_option(item)[0] == "required" for item in options):
            self.required = True
        return Ok(None)


NIL_UUID = UUID(int=0)


class UUIDChecker(Checker):
    """``uuid.UUID`` values, or UUID strings when ``allowstring`` is set.

    The nil UUID is rejected unless ``allowemptyuuid`` is set. ``required``
    only concerns empty strings.
    """
    name = "uuid"

    def __init__(self):
        self.required = False
        self.allow_empty_uuid = False
        self.allow_string = False

    def validate(self, value: Any, field_name: str, kind: type) -> ValidationResult:
        no_value = empty_uuid = False
        parse_error: ValueError | None = None
        if isinstance(value, str):
            if not self.allow_string:
                return ValidationResult.invalid(
                    f"type: the field {field_name} is a string, but allowstring was not provided",
                    ErrorCode.E2004_INVALID_TYPE, actual=value)
            if not value:
                no_value = True
            else:
                try:
                    empty_uuid = UUID(value) == NIL_UUID
                except ValueError as e:
                    parse_error = e
        elif isinstance(value, UUID):
            empty_uuid = value == NIL_UUID
        else:
            return ValidationResult.invalid_type(field_name, kind, value)

        if self.required and no_value:
            return ValidationResult.invalid(f"required: the field {field_name} had an empty value",
                ErrorCode.E2001_REQUIRED_FIELD_MISSING, actual=value)
        if not self.allow_empty_uuid and empty_uuid:
            return ValidationResult.invalid(
                f"no empty: the field {field_name} has an empty uuid value, but allowemptyuuid was not provided",
                ErrorCode.E2013_EMPTY_VALUE, actual=value)
        if parse_error is not None:
            return ValidationResult.invalid(
                f"invalid: the field {field_name} has the value {value!r} which could not be parsed into a UUID",
                ErrorCode.E2011_INVALID_UUID, actual=value)
        return ValidationResult.valid()

    def configure(self, options: Sequence[str]) -> Result[None, AppError]:
        for item in options:
            match split_option(item)[0]:
                case "required": self.required = True
                case "allowemptyuuid": self.allow_empty_uuid = True
                case "allowstring": self.allow_string = True
        return Ok(None)


# ============================================================================
# Time
# ============================================================================

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def epoch_seconds(value: datetime) -> int:
    """Whole seconds since the Unix epoch, floored. Naive datetimes are read as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    delta = value - _EPOCH
    return delta.days * 86400 + delta.seconds


def format_epoch(seconds: int) -> str:
    try:
        return (_EPOCH + timedelta(seconds=seconds)).isoformat()
    except OverflowError:
        return f"{seconds} (epoch seconds)"


def is_zero_time(value: datetime) -> bool:
    return value.replace(tzinfo=None) == datetime.min


class TimeChecker(Checker):
    """Timestamp window checks.

    Accepts ``datetime`` values, or integer epoch seconds when ``allowint`` is
    set. ``nbf`` (not before) and ``naf`` (not after) are epoch seconds and
    both bounds are inclusive. ``datetime.min`` counts as an unset timestamp.
    """
    name = "time"

    def __init__(self):
        self.required = False
        self.allow_int = False
        self.nbf: int | None = None
        self.naf: int | None = None

    def validate(self, value: Any, field_name: str, kind: type) -> ValidationResult:
        no_value = False
        if isinstance(value, datetime):
            seconds = epoch_seconds(value)
            no_value = is_zero_time(value)
        elif _is_int(value):
            if not self.allow_int:
                return ValidationResult.invalid(
                    f"type: the field {field_name} is an int, but allowint was not provided",
                    ErrorCode.E2004_INVALID_TYPE, actual=value)
            seconds = value
        else:
            return ValidationResult.invalid_type(field_name, kind, value)

        if self.nbf is not None and seconds < self.nbf:
            return ValidationResult.invalid(
                f"not before: the field {field_name} has a value of '{format_epoch(seconds)}' "
                f"which is before '{format_epoch(self.nbf)}'",
                ErrorCode.E2012_INVALID_DATE, constraint="not before", actual=value)
        if self.naf is not None and seconds > self.naf:
            return ValidationResult.invalid(
                f"not after: the field {field_name} has a value of '{format_epoch(seconds)}' "
                f"which is after '{format_epoch(self.naf)}'",
                ErrorCode.E2012_INVALID_DATE, constraint="not after", actual=value)
        if self.required and no_value:
            return ValidationResult.invalid(f"required: the field {field_name} had an empty value",
                ErrorCode.E2001_REQUIRED_FIELD_MISSING, actual=value)
        return ValidationResult.valid()

    def configure(self, options: Sequence[str]) -> Result[None, AppError]:
        for item in options:
            key, raw = split_option(item)
            match key:
                case "allowint": self.allow_int = True
                case "required": self.required = True
                case "nbf" | "naf":
                    match parse_int_option(self.name, key, raw, INT64_MIN, INT64_MAX):
                        case Ok(parsed): setattr(self, key, parsed)
                        case Err() as failure: return failure
        return Ok(None)


BUILTIN_CHECKERS: dict[str, CheckerFactory] = {
    "string": StringChecker,
    "int": IntChecker,
    "uint": UintChecker,
    "float": FloatChecker,
    "email": EmailChecker,
    "postalcode": PostalCodeChecker,
    "uuid": UUIDChecker,
    "time": TimeChecker,
}
