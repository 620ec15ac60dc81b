"""Tests for validation errors, the collector and the Result helpers."""

import pytest

from simplevalidation.errors import (
    AppError,
    AppErrorException,
    Err,
    ErrorCode,
    Ok,
    invalid_option,
    not_registered,
    require,
    try_result,
)
from simplevalidation.validation import ErrorCollector, ValidationError, ValidationErrorDetail


# ============================================================================
# ValidationError
# ============================================================================

def make_error() -> ValidationError:
    collector = ErrorCollector()
    collector.add_error("Age", "max", "max: the field Age value 200 is greater than the maximum value 150",
        actual_value=200, error_code=ErrorCode.E2003_OUT_OF_RANGE)
    collector.add_error("Items[0]", "min", "min: first")
    collector.add_error("Items[0]", "type", "type: second")
    return collector.to_validation_error("Person")


def test_render_lists_every_path():
    assert str(make_error()) == (
        "Person validation failed:"
        "\tAge: max: the field Age value 200 is greater than the maximum value 150"
        "\tItems[0]: min: first; type: second"
    )


def test_render_default_label():
    error = ValidationError(errors={"value": [ValidationErrorDetail("value", "min", "min: too small")]})
    assert str(error) == "value validation failed:\tvalue: min: too small"


def test_is_raisable():
    with pytest.raises(ValidationError) as exc_info:
        raise make_error()
    assert exc_info.value.error_count == 3


def test_same_path_errors_are_appended():
    error = make_error()
    assert [d.constraint for d in error.get_errors_for_field("Items[0]")] == ["min", "type"]
    assert error.get_errors_for_field("Missing") == []


def test_first_error():
    assert make_error().first_error.field_path == "Age"


def test_to_dict():
    payload = make_error().to_dict()["error"]
    assert payload["data_type"] == "Person"
    assert payload["error_count"] == 3
    assert payload["errors"][0] == {
        "field": "Age",
        "constraint": "max",
        "message": "max: the field Age value 200 is greater than the maximum value 150",
        "value": "200",
        "code": "E2003_OUT_OF_RANGE",
    }
    assert payload["errors"][1] == {"field": "Items[0]", "constraint": "min", "message": "min: first"}


def test_to_app_error():
    app_error = make_error().to_app_error()
    assert app_error.code is ErrorCode.E2000_VALIDATION_GENERIC
    assert app_error.metadata["paths"] == ["Age", "Items[0]"]
    assert app_error.message.startswith("Person validation failed:")


def test_detail_str_is_message():
    assert str(ValidationErrorDetail("Name", "required", "required: blank")) == "required: blank"


def test_empty_collector():
    collector = ErrorCollector()
    assert not collector.has_errors
    assert collector.error_count == 0
    assert collector.to_validation_error("Person") is None


# ============================================================================
# Result helpers and builders
# ============================================================================

def test_ok_and_err():
    assert Ok(3).map(lambda v: v + 1) == Ok(4)
    failure = not_registered("phone")
    assert failure.map(lambda v: v + 1) is failure
    assert failure.unwrap_or("fallback") == "fallback"
    with pytest.raises(ValueError):
        failure.unwrap()


def test_match_on_result():
    assert Ok(2).match(ok=lambda v: v * 2, err=lambda e: -1) == 4
    assert not_registered("phone").match(ok=lambda v: v, err=lambda e: e.code) is ErrorCode.E2009_NOT_REGISTERED


def test_invalid_option_builder():
    error = invalid_option("int", "min", "not a number", value="abc").unwrap_err()
    assert error.code is ErrorCode.E2007_INVALID_OPTION
    assert error.message == "int option min value invalid: not a number"
    assert error.metadata == {"value": "abc", "option": "min"}
    assert error.context.origin == "int"


def test_try_result_converts_listed_exceptions():
    result = try_result(lambda: int("x"), code=ErrorCode.E2007_INVALID_OPTION, exceptions=(ValueError,))
    assert isinstance(result, Err)
    assert isinstance(result.error.cause, ValueError)
    assert try_result(lambda: 5) == Ok(5)


def test_try_result_propagates_other_exceptions():
    with pytest.raises(ZeroDivisionError):
        try_result(lambda: 1 / 0, exceptions=(ValueError,))


def test_require():
    error = AppError(code=ErrorCode.E2000_VALIDATION_GENERIC, message="nope")
    assert require(None, error).unwrap_err() is error
    assert require(None, error).map(lambda v: v + 1).is_err()
    assert require(0, error) == Ok(0)


def test_app_error_exception():
    error = AppError(code=ErrorCode.E2008_REGISTRY_FROZEN, message="frozen")
    exc = AppErrorException(error)
    assert str(exc) == "frozen"
    assert exc.error.to_dict()["error"]["category"] == "validation"
