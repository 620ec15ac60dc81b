"""Validation Error Collection

Every violation found during one traversal is collected under the path of the
field it belongs to. The result is a single exception value whose text lists
all offending paths:

    TestStruct validation failed:\tAge: max: the field Age value 200 is greater
    than the maximum value 150\tItems[2]: min: ...

Paths use dots for nested records and brackets for sequence indices
(e.g. "Detail.Name", "Items[0][2]").
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from simplevalidation.errors import AppError, ErrorCode


@dataclass(frozen=True, slots=True)
class ValidationErrorDetail:
    """A single failure recorded for a field path.

    - field_path: path of the offending field (e.g., "Detail.Name", "Items[2]")
    - constraint: stable prefix of the violated constraint ("required", "max", "type", ...)
    - message: human-readable message, always starting with the constraint prefix
      for checker failures
    - actual_value: the value that failed, when known
    """
    field_path: str
    constraint: str
    message: str = ""
    actual_value: Any = None
    error_code: ErrorCode | None = None

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict[str, Any]:
        result = {"field": self.field_path, "constraint": self.constraint, "message": self.message}
        if self.actual_value is not None: result["value"] = repr(self.actual_value)
        if self.error_code is not None: result["code"] = self.error_code.name
        return result


@dataclass
class ValidationError(Exception):
    """Aggregated outcome of a failed validation.

    ``errors`` maps each offending field path to the ordered list of failures
    found for it. ``data_type`` labels the validated value in the rendered text.
    """
    errors: dict[str, list[ValidationErrorDetail]]
    data_type: str | None = None

    def __post_init__(self):
        super().__init__(self.render())

    def __str__(self) -> str:
        return self.render()

    def render(self) -> str:
        lines = [f"{self.data_type or 'value'} validation failed:"]
        for path, details in self.errors.items():
            lines.append(f"\t{path}: {'; '.join(d.message for d in details)}")
        return "".join(lines)

    @property
    def error_count(self) -> int:
        return sum(len(details) for details in self.errors.values())

    @property
    def first_error(self) -> ValidationErrorDetail | None:
        for details in self.errors.values():
            if details: return details[0]
        return None

    def get_errors_for_field(self, field_path: str) -> list[ValidationErrorDetail]:
        return list(self.errors.get(field_path, ()))

    def to_dict(self) -> dict[str, Any]:
        """Serialize for reporting."""
        return {"error": {"type": "validation_error", "data_type": self.data_type or "value",
            "error_count": self.error_count,
            "errors": [d.to_dict() for details in self.errors.values() for d in details]}}

    def to_app_error(self) -> AppError:
        """Convert to AppError for callers that handle errors through Result."""
        return AppError(code=ErrorCode.E2000_VALIDATION_GENERIC, message=self.render(),
            metadata={"data_type": self.data_type or "value", "error_count": self.error_count,
                "paths": list(self.errors)})


@dataclass
class ErrorCollector:
    """Collect-all accumulator the traversal writes into. Never stops early."""
    _errors: dict[str, list[ValidationErrorDetail]] = field(default_factory=dict)

    def add(self, detail: ValidationErrorDetail) -> None:
        self._errors.setdefault(detail.field_path, []).append(detail)

    def add_error(self, field_path: str, constraint: str, message: str, *,
                  actual_value: Any = None, error_code: ErrorCode | None = None) -> None:
        """Record a failure without building the detail by hand."""
        self.add(ValidationErrorDetail(field_path=field_path, constraint=constraint, message=message,
            actual_value=actual_value, error_code=error_code))

    @property
    def has_errors(self) -> bool: return bool(self._errors)

    @property
    def error_count(self) -> int: return sum(len(d) for d in self._errors.values())

    def to_validation_error(self, data_type: str | None = None) -> ValidationError | None:
        """Convert to ValidationError if errors exist."""
        if not self._errors: return None
        return ValidationError(errors={path: list(details) for path, details in self._errors.items()},
            data_type=data_type)
