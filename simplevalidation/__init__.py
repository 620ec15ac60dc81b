"""simplevalidation - declarative validation for nested records

Annotate fields with instructions, validate whole records in one pass, get
every violation back keyed by field path.

Key Features:
- Instruction strings on dataclass and pydantic fields ("int,min=0,max=150")
- Nested records ("struct"), None references and N-deep lists ("[][]int")
- Built-in checkers: string, int, uint, float, email, postalcode, uuid, time
- Custom checkers through a thread-safe registry
- Collect-all error reporting with stable message prefixes

Usage:
    from dataclasses import dataclass
    from typing import Annotated
    from simplevalidation import Tag, validate_tagged

    @dataclass
    class Details:
        name: Annotated[str, Tag("string,max=50")]

    @dataclass
    class Person:
        name: Annotated[str, Tag("string,required,min=3,max=50")]
        scores: Annotated[list[int], Tag("[]int,min=0,max=150")]
        detail: Annotated[Details, Tag("struct")]

    error = validate_tagged(Person(name="", scores=[1, 999], detail=Details("x")))
    if error is not None:
        print(error.errors["scores[1]"][0].message)
"""
from .validation import (
    Checker,
    CheckerFactory,
    CheckerRegistry,
    Instruction,
    Tag,
    ValidationError,
    ValidationErrorDetail,
    ValidationResult,
    ValidationUnit,
    Validator,
    ValueShape,
    get_default_registry,
    parse_instruction,
    register_checker,
    tag,
    validate_or_raise,
    validate_tagged,
    validate_unit,
)
from .errors import AppError, AppErrorException, Err, ErrorCode, Ok, Result

__version__ = "0.1.0"

__all__ = [
    "Checker",
    "CheckerFactory",
    "CheckerRegistry",
    "Instruction",
    "Tag",
    "ValidationError",
    "ValidationErrorDetail",
    "ValidationResult",
    "ValidationUnit",
    "Validator",
    "ValueShape",
    "get_default_registry",
    "parse_instruction",
    "register_checker",
    "tag",
    "validate_or_raise",
    "validate_tagged",
    "validate_unit",
    "AppError",
    "AppErrorException",
    "Err",
    "ErrorCode",
    "Ok",
    "Result",
]
