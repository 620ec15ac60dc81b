"""Field instructions: grammar and discovery.

An instruction is the comma-separated directive attached to a record field:

    instruction := "[]"* name ("," "required")? ("," option)*
    option      := key | key "=" value

    "string,required,min=3,max=50"   string checker, required, length bounds
    "[]int,min=0,max=150"            list of bounded integers
    "struct"                         nested record, traversed without a checker
    "-" or ""                        field is skipped

Instructions are attached through ``Annotated`` metadata, dataclass field
metadata or pydantic ``json_schema_extra``:

    @dataclass
    class Person:
        name: Annotated[str, Tag("string,required,min=3")]
        age: int = tag("int,min=0,max=150", default=0)

    class Order(BaseModel):
        email: str = Field(json_schema_extra={"validate": "email,required"})
"""
from __future__ import annotations

import ast
import dataclasses
import types
import typing
from dataclasses import dataclass
from functools import lru_cache
from typing import Annotated, Any, Iterator, Union, get_args, get_origin

from pydantic import BaseModel

from simplevalidation.config import get_settings
from simplevalidation.errors import AppErrorException, unresolved_annotation

STRUCT_NAME = "struct"
SKIP_MARKERS = frozenset({"", "-"})
ARRAY_PREFIX = "[]"
REQUIRED_TOKEN = "required"


@dataclass(frozen=True, slots=True)
class Tag:
    """Instruction marker for ``Annotated`` field types."""
    instruction: str


def tag(instruction: str, **kwargs: Any) -> Any:
    """Dataclass field carrying an instruction in its metadata."""
    metadata = {**kwargs.pop("metadata", {}), get_settings().TAG_KEY: instruction}
    return dataclasses.field(metadata=metadata, **kwargs)


@dataclass(frozen=True, slots=True)
class Instruction:
    """Parsed form of an instruction string.

    ``options`` holds every token after the name, the ``required`` token
    included, so checkers can configure their own emptiness rules from it.
    """
    name: str
    array_depth: int = 0
    required: bool = False
    options: tuple[str, ...] = ()

    @property
    def is_struct(self) -> bool:
        return self.name == STRUCT_NAME


def split_array_prefix(raw_name: str) -> tuple[str, int]:
    """Strip leading "[]" pairs, returning the bare name and how many were removed."""
    depth = 0
    while raw_name.startswith(ARRAY_PREFIX):
        raw_name = raw_name[len(ARRAY_PREFIX):]
        depth += 1
    return raw_name, depth


@lru_cache(maxsize=1024)
def parse_instruction(text: str | None) -> Instruction | None:
    """Parse an instruction; None for absent or skipped fields."""
    if text is None or text in SKIP_MARKERS:
        return None
    tokens = text.split(",")
    name, array_depth = split_array_prefix(tokens[0])
    return Instruction(
        name=name,
        array_depth=array_depth,
        required=len(tokens) > 1 and tokens[1] == REQUIRED_TOKEN,
        options=tuple(tokens[1:]),
    )


# ============================================================================
# Discovery
# ============================================================================

def _tag_from_hint(hint: Any) -> str | None:
    if get_origin(hint) is Annotated:
        for meta in hint.__metadata__:
            if isinstance(meta, Tag):
                return meta.instruction
        hint = get_args(hint)[0]
    if get_origin(hint) in (Union, types.UnionType):
        for arg in get_args(hint):
            if (found := _tag_from_hint(arg)) is not None:
                return found
    return None


def _called_name(func: ast.expr) -> str | None:
    match func:
        case ast.Name(id=name) | ast.Attribute(attr=name):
            return name
    return None


def _tag_from_source(cls: type, field_name: str, annotation: str) -> str | None:
    """Read a ``Tag("...")`` literal straight from an annotation string.

    Used for postponed annotations that cannot be resolved, typically records
    declared inside a function. Raises AppErrorException when a Tag is present
    but its instruction is not a string literal.
    """
    try:
        tree = ast.parse(annotation, mode="eval")
    except SyntaxError as e:
        raise AppErrorException(unresolved_annotation(
            cls.__qualname__, field_name, f"invalid annotation {annotation!r}").unwrap_err()) from e
    for node in ast.walk(tree):
        if not (isinstance(node, ast.Call) and _called_name(node.func) == Tag.__name__):
            continue
        match node.args, node.keywords:
            case [ast.Constant(value=str() as text)], []:
                return text
            case [], [ast.keyword(arg="instruction", value=ast.Constant(value=str() as text))]:
                return text
        raise AppErrorException(unresolved_annotation(
            cls.__qualname__, field_name, f"{ast.unparse(node)} is not a literal instruction").unwrap_err())
    return None


def _dataclass_instructions(cls: type, key: str) -> tuple[tuple[str, str | None], ...]:
    try:
        hints = typing.get_type_hints(cls, include_extras=True)
    except (NameError, AttributeError, TypeError):
        hints = None
    found = []
    for f in dataclasses.fields(cls):
        text = f.metadata.get(key)
        if text is None:
            if hints is not None:
                text = _tag_from_hint(hints[f.name])
            elif isinstance(f.type, str):
                text = _tag_from_source(cls, f.name, f.type)
            else:
                text = _tag_from_hint(f.type)
        found.append((f.name, text))
    return tuple(found)


def _model_instructions(cls: type[BaseModel], key: str) -> tuple[tuple[str, str | None], ...]:
    found = []
    for name, info in cls.model_fields.items():
        text = None
        if isinstance(info.json_schema_extra, dict):
            text = info.json_schema_extra.get(key)
        if text is None:
            text = next((m.instruction for m in info.metadata if isinstance(m, Tag)), None)
        if text is None:
            text = _tag_from_hint(info.annotation)
        found.append((name, text))
    return tuple(found)


@lru_cache(maxsize=256)
def field_instructions(cls: type, key: str) -> tuple[tuple[str, str | None], ...]:
    """(field name, instruction text) pairs for a record type, in declaration order."""
    if issubclass(cls, BaseModel):
        return _model_instructions(cls, key)
    return _dataclass_instructions(cls, key)


def iter_struct_fields(record: Any, key: str | None = None) -> Iterator[tuple[str, Any, str | None]]:
    """Yield (field name, field value, instruction text) for every field of a record."""
    key = key or get_settings().TAG_KEY
    for name, text in field_instructions(type(record), key):
        yield name, getattr(record, name), text
