"""Declarative Validation

Records declare per-field instructions; the engine walks a record (nested
records, None references, lists of any depth) and reports every violation in
one ValidationError keyed by field path.
"""
from .checkers import (
    Checker,
    CheckerFactory,
    ValidationResult,
    StringChecker,
    IntChecker,
    UintChecker,
    FloatChecker,
    EmailChecker,
    PostalCodeChecker,
    UUIDChecker,
    TimeChecker,
    BUILTIN_CHECKERS,
)
from .engine import (
    Validator,
    get_validator,
    validate_unit,
    validate_tagged,
    validate_or_raise,
)
from .errors import (
    ValidationError,
    ValidationErrorDetail,
    ErrorCollector,
)
from .instruction import (
    Instruction,
    Tag,
    tag,
    parse_instruction,
    iter_struct_fields,
)
from .registry import (
    CheckerRegistry,
    get_default_registry,
    register_checker,
)
from .unit import (
    ValidationUnit,
    ValueShape,
    resolve_shape,
)

__all__ = [
    "Checker",
    "CheckerFactory",
    "ValidationResult",
    "StringChecker",
    "IntChecker",
    "UintChecker",
    "FloatChecker",
    "EmailChecker",
    "PostalCodeChecker",
    "UUIDChecker",
    "TimeChecker",
    "BUILTIN_CHECKERS",
    "Validator",
    "get_validator",
    "validate_unit",
    "validate_tagged",
    "validate_or_raise",
    "ValidationError",
    "ValidationErrorDetail",
    "ErrorCollector",
    "Instruction",
    "Tag",
    "tag",
    "parse_instruction",
    "iter_struct_fields",
    "CheckerRegistry",
    "get_default_registry",
    "register_checker",
    "ValidationUnit",
    "ValueShape",
    "resolve_shape",
]
