"""Field discovery when annotations are postponed strings."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Annotated, Optional

import pytest

import simplevalidation as sv
from simplevalidation import AppErrorException, ErrorCode, Tag, Validator
from simplevalidation.validation.instruction import field_instructions


@dataclass
class Shared:
    X: Annotated[int, Tag("int,max=1")] = 0


def test_module_level_records_resolve():
    assert dict(field_instructions(Shared, "validate")) == {"X": "int,max=1"}


def test_local_records_keep_their_instructions(validator: Validator):
    @dataclass
    class Inner:
        X: Annotated[int, Tag("int,max=1")] = 0

    @dataclass
    class Outer:
        Age: Annotated[int, Tag("int,max=150")] = 0
        In: Annotated[Inner, Tag("struct")] = field(default_factory=Inner)
        Maybe: Optional[Annotated[Inner, Tag(instruction="struct")]] = None
        Plain: Inner = field(default_factory=Inner)

    error = validator.validate_tagged(Outer(Age=200, In=Inner(X=5), Maybe=Inner(X=3), Plain=Inner(X=9)))
    assert set(error.errors) == {"Age", "In.X", "Maybe.X"}


def test_qualified_tag_name(validator: Validator):
    @dataclass
    class Local:
        Name: Annotated[str, sv.Tag("string,required")] = ""

    @dataclass
    class Holder:
        Item: Annotated[Local, sv.Tag("struct")] = field(default_factory=Local)

    assert list(validator.validate_tagged(Holder()).errors) == ["Item.Name"]


def test_non_literal_instruction_is_reported(validator: Validator):
    rule = "struct"

    @dataclass
    class Local:
        X: int = 0

    @dataclass
    class Holder:
        Item: Annotated[Local, Tag(rule)] = field(default_factory=Local)

    with pytest.raises(AppErrorException) as exc_info:
        validator.validate_tagged(Holder())
    error = exc_info.value.error
    assert error.code is ErrorCode.E2015_UNRESOLVED_ANNOTATION
    assert error.metadata["field"] == "Item"
    assert "Tag(rule)" in error.message
