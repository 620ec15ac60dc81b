"""Traversal Engine

Walks a value depth-first and checks every tagged field, collecting all
violations in one pass. Rules, in priority order, for each unit:

1. None: skipped, or a "required" error when the unit is required.
2. Record without a bound checker: each tagged field is resolved to a checker
   through the registry and walked with struct depth + 1. Unknown checker
   names and bad options are recorded on the field and its siblings continue.
3. Declared array depth left: the value must be a list or tuple; each element
   is walked as "name[i]" with one level less to unwrap.
4. Bound checker: the checker runs on the value.

Nothing short-circuits; only a missing unit is reported as a setup failure.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Any

from simplevalidation.config import get_settings
from simplevalidation.errors import AppError, Err, ErrorCode, Ok, Result, no_unit_provided, require
from simplevalidation.logging import engine_logger

from .checkers import CheckerFactory
from .errors import ErrorCollector, ValidationError
from .instruction import iter_struct_fields, parse_instruction
from .registry import CheckerRegistry, get_default_registry
from .unit import ValidationUnit, ValueShape, is_struct

log = engine_logger()

NIL_REQUIRED_TEMPLATE = "required: field {name} was nil but is required"
NOT_SEQUENCE_TEMPLATE = (
    "type: the value of {name} is of type {kind} but {depth} more array level(s) were declared"
)


class Validator:
    """Validates values against the instructions declared on their fields."""

    def __init__(self, registry: CheckerRegistry | None = None, tag_key: str | None = None):
        self.registry = registry or get_default_registry()
        self.tag_key = tag_key or get_settings().TAG_KEY

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def validate_unit(self, unit: ValidationUnit | None) -> Result[ValidationError | None, AppError]:
        """Validate a hand-built unit, e.g. a bare value with an explicit checker.

        Returns Ok(None) when valid, Ok(ValidationError) when violations were
        found, and Err when no unit was given.
        """
        return require(unit, no_unit_provided(origin="engine").unwrap_err()).map(
            lambda present: self._run(present, data_type=None))

    def validate_tagged(self, value: Any, data_type: str | None = None) -> ValidationError | None:
        """Validate a record against its own field instructions.

        The record's class name labels the error unless ``data_type`` is given.
        Raises AppErrorException when a record type declares an instruction
        that cannot be read.
        """
        if data_type is None and is_struct(value):
            data_type = type(value).__name__
        return self._run(ValidationUnit(value=value), data_type=data_type)

    def validate_or_raise(self, value: Any, data_type: str | None = None) -> None:
        if (error := self.validate_tagged(value, data_type)) is not None:
            raise error

    def register_checker(self, name: str, factory: CheckerFactory) -> None:
        self.registry.register(name, factory)

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------

    def _run(self, unit: ValidationUnit, data_type: str | None) -> ValidationError | None:
        collector = ErrorCollector()
        log.debug("validation_started", data_type=data_type or "value", name=unit.name)
        self._walk(unit, collector)
        log.debug("validation_completed", data_type=data_type or "value", error_count=collector.error_count)
        return collector.to_validation_error(data_type)

    def _walk(self, unit: ValidationUnit, collector: ErrorCollector) -> None:
        match unit.shape:
            case ValueShape.NIL:
                self._visit_nil(unit, collector)
            case ValueShape.STRUCT if unit.checker is None:
                self._visit_struct(unit, collector)
            case ValueShape.SEQUENCE if unit.array_depth > 0:
                self._visit_sequence(unit, collector)
            case ValueShape.STRUCT | ValueShape.LEAF if unit.array_depth > 0:
                self._visit_not_sequence(unit, collector)
            case _ if unit.checker is not None:
                self._visit_leaf(unit, collector)
            case ValueShape.SEQUENCE | ValueShape.LEAF:
                # tagged "struct" on a value that is not a record
                log.debug("unit_skipped", name=unit.name, kind=type(unit.value).__name__)

    def _visit_nil(self, unit: ValidationUnit, collector: ErrorCollector) -> None:
        if unit.required:
            collector.add_error(unit.name, "required", NIL_REQUIRED_TEMPLATE.format(name=unit.name),
                error_code=ErrorCode.E2001_REQUIRED_FIELD_MISSING)

    def _visit_struct(self, unit: ValidationUnit, collector: ErrorCollector) -> None:
        for field_name, field_value, text in iter_struct_fields(unit.value, self.tag_key):
            if (instruction := parse_instruction(text)) is None:
                continue
            path = unit.field_path(field_name)
            checker = None
            if not instruction.is_struct:
                match self.registry.resolve(instruction.name, field=path):
                    case Err(error):
                        collector.add_error(path, "not registered", error.message, error_code=error.code)
                        continue
                    case Ok(checker):
                        pass
                match checker.configure(instruction.options):
                    case Err(error):
                        log.warning("checker_misconfigured", field=path, checker=instruction.name, error=error.message)
                        collector.add_error(path, "option", error.message, error_code=error.code)
                        continue
            self._walk(ValidationUnit(
                value=field_value,
                name=path,
                required=instruction.required,
                array_depth=instruction.array_depth,
                struct_depth=unit.struct_depth + 1,
                checker=checker,
            ), collector)

    def _visit_not_sequence(self, unit: ValidationUnit, collector: ErrorCollector) -> None:
        collector.add_error(unit.name, "type", NOT_SEQUENCE_TEMPLATE.format(
            name=unit.name, kind=type(unit.value).__name__, depth=unit.array_depth),
            actual_value=unit.value, error_code=ErrorCode.E2004_INVALID_TYPE)

    def _visit_sequence(self, unit: ValidationUnit, collector: ErrorCollector) -> None:
        for index, element in enumerate(unit.value):
            self._walk(unit.element(index, element), collector)

    def _visit_leaf(self, unit: ValidationUnit, collector: ErrorCollector) -> None:
        result = unit.checker.validate(unit.value, unit.name, type(unit.value))
        if not result.is_valid:
            collector.add_error(unit.name, result.constraint or "invalid", result.error_message or "validation failed",
                actual_value=result.actual, error_code=result.error_code)


# ============================================================================
# Module-level convenience API on a shared Validator
# ============================================================================

@lru_cache
def get_validator() -> Validator:
    return Validator()


def validate_unit(unit: ValidationUnit | None) -> Result[ValidationError | None, AppError]:
    return get_validator().validate_unit(unit)


def validate_tagged(value: Any, data_type: str | None = None) -> ValidationError | None:
    return get_validator().validate_tagged(value, data_type)


def validate_or_raise(value: Any, data_type: str | None = None) -> None:
    get_validator().validate_or_raise(value, data_type)
