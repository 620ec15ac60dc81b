"""Validation units and value shapes.

A ValidationUnit is the immutable bundle of value plus metadata handed to one
step of the traversal. Each step derives fresh units for its children instead
of mutating the one it received.
"""
from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

if TYPE_CHECKING:
    from .checkers import Checker


class ValueShape(str, Enum):
    """Traversal rule selector, resolved once per recursive step."""
    NIL = "nil"
    STRUCT = "struct"
    SEQUENCE = "sequence"
    LEAF = "leaf"


def is_struct(value: Any) -> bool:
    """True for dataclass instances and pydantic model instances."""
    if isinstance(value, BaseModel):
        return True
    return dataclasses.is_dataclass(value) and not isinstance(value, type)


def is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def resolve_shape(value: Any) -> ValueShape:
    if value is None:
        return ValueShape.NIL
    if is_struct(value):
        return ValueShape.STRUCT
    if is_sequence(value):
        return ValueShape.SEQUENCE
    return ValueShape.LEAF


@dataclass(frozen=True, slots=True)
class ValidationUnit:
    """One step of work for the traversal.

    - value: the raw data being validated
    - name: path name used as the error key ("value" for ad-hoc validation)
    - required: a None value is an error instead of being skipped
    - array_depth: sequence levels still to unwrap before the checker applies
      ("[]int" is 1, "[][]int" is 2)
    - struct_depth: record boundaries crossed since the root; past the first
      level field names are prefixed with the parent path ("B.C")
    - checker: bound checker, or None while the unit still needs record traversal
    """
    value: Any
    name: str = "value"
    required: bool = False
    array_depth: int = 0
    struct_depth: int = 0
    checker: Checker | None = None

    def __post_init__(self):
        if self.array_depth < 0:
            raise ValueError(f"array_depth must be non-negative, got {self.array_depth}")
        if self.struct_depth < 0:
            raise ValueError(f"struct_depth must be non-negative, got {self.struct_depth}")

    @property
    def shape(self) -> ValueShape:
        return resolve_shape(self.value)

    def element(self, index: int, value: Any) -> ValidationUnit:
        """Unit for one element of the sequence this unit wraps."""
        return dataclasses.replace(self, value=value, name=f"{self.name}[{index}]",
            array_depth=self.array_depth - 1)

    def field_path(self, field_name: str) -> str:
        """Path of a field of the record this unit wraps."""
        # fields of the root record keep their bare names
        if self.struct_depth > 0:
            return f"{self.name}.{field_name}"
        return field_name
