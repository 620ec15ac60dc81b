"""Tests for instruction parsing and field discovery."""

from dataclasses import dataclass, field
from typing import Annotated, Optional

import pytest
from pydantic import BaseModel, Field

from simplevalidation.validation import Instruction, Tag, iter_struct_fields, parse_instruction, tag
from simplevalidation.validation.instruction import field_instructions, split_array_prefix


# ============================================================================
# Grammar
# ============================================================================

def test_parse_name_only():
    assert parse_instruction("int") == Instruction(name="int")


def test_parse_required_and_options():
    instruction = parse_instruction("string,required,min=3,max=50")
    assert instruction.name == "string"
    assert instruction.required is True
    assert instruction.array_depth == 0
    assert instruction.options == ("required", "min=3", "max=50")


def test_required_only_counts_in_second_position():
    instruction = parse_instruction("string,min=3,required")
    assert instruction.required is False
    assert "required" in instruction.options


@pytest.mark.parametrize("text, name, depth", [
    ("[]int", "int", 1),
    ("[][]string", "string", 2),
    ("[][][]uint,min=1", "uint", 3),
    ("[]struct", "struct", 1),
])
def test_parse_array_prefix(text, name, depth):
    instruction = parse_instruction(text)
    assert (instruction.name, instruction.array_depth) == (name, depth)


@pytest.mark.parametrize("text", [None, "", "-"])
def test_parse_skipped(text):
    assert parse_instruction(text) is None


def test_struct_marker():
    assert parse_instruction("struct").is_struct
    assert not parse_instruction("string").is_struct


def test_parse_is_cached():
    assert parse_instruction("int,min=0") is parse_instruction("int,min=0")


def test_split_array_prefix():
    assert split_array_prefix("[][]int") == ("int", 2)
    assert split_array_prefix("int") == ("int", 0)
    assert split_array_prefix("[]") == ("", 1)


# ============================================================================
# Discovery
# ============================================================================

@dataclass
class Inner:
    label: Annotated[str, Tag("string,max=5")] = ""


@dataclass
class Annotations:
    name: Annotated[str, Tag("string,required")]
    maybe: Annotated[Optional[int], Tag("int,min=1")] = None
    optional_outer: Optional[Annotated[int, Tag("int,max=9")]] = None
    ages: int = tag("[]int,min=0", default_factory=list)
    plain: str = ""
    skipped: Annotated[str, Tag("-")] = ""
    inner: Annotated[Inner, Tag("struct")] = field(default_factory=Inner)


class Account(BaseModel):
    email: str = Field(default="", json_schema_extra={"validate": "email,required"})
    age: Annotated[int, Tag("int,min=18")] = 18
    note: str = ""


def test_dataclass_field_instructions():
    assert dict(field_instructions(Annotations, "validate")) == {
        "name": "string,required",
        "maybe": "int,min=1",
        "optional_outer": "int,max=9",
        "ages": "[]int,min=0",
        "plain": None,
        "skipped": "-",
        "inner": "struct",
    }


def test_field_instructions_keep_declaration_order():
    names = [name for name, _ in field_instructions(Annotations, "validate")]
    assert names == ["name", "maybe", "optional_outer", "ages", "plain", "skipped", "inner"]


def test_tag_helper_merges_metadata():
    @dataclass
    class Merged:
        code: str = tag("postalcode", default="", metadata={"doc": "zip"})

    merged = Merged.__dataclass_fields__["code"].metadata
    assert merged["doc"] == "zip"
    assert merged["validate"] == "postalcode"


def test_metadata_under_another_key():
    @dataclass
    class CustomKey:
        value: int = field(default=0, metadata={"check": "int,max=3"})

    assert dict(field_instructions(CustomKey, "check")) == {"value": "int,max=3"}
    assert dict(field_instructions(CustomKey, "validate")) == {"value": None}


def test_model_field_instructions():
    assert dict(field_instructions(Account, "validate")) == {
        "email": "email,required",
        "age": "int,min=18",
        "note": None,
    }


def test_iter_struct_fields_yields_values():
    record = Annotations(name="Ann", ages=[1, 2])
    fields = {name: (value, text) for name, value, text in iter_struct_fields(record)}
    assert fields["name"] == ("Ann", "string,required")
    assert fields["ages"] == ([1, 2], "[]int,min=0")
    assert fields["inner"][0] == Inner()


def test_iter_struct_fields_on_model():
    fields = list(iter_struct_fields(Account(email="a@b.co", age=20)))
    assert fields[0] == ("email", "a@b.co", "email,required")
    assert fields[1] == ("age", 20, "int,min=18")
