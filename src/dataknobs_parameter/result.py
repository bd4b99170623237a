"""Error records and result types returned by validation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

MISSING_FIELD = "missing_field"
INVALID = "invalid"


def join_field(prefix: str, field_path: str) -> str:
    """Compose a field path from an enclosing prefix and a nested path.

    Bracketed indexes attach directly (``items[0]``), names attach with a dot
    (``user.name``).
    """
    if not prefix:
        return field_path
    if not field_path:
        return prefix
    if field_path.startswith("["):
        return f"{prefix}{field_path}"
    return f"{prefix}.{field_path}"


@dataclass(frozen=True)
class ErrorRecord:
    """A single validation failure located by its field path."""

    code: str
    field: str
    message: str

    def with_prefix(self, prefix: str) -> ErrorRecord:
        """Return a copy of this record nested under ``prefix``."""
        return ErrorRecord(
            code=self.code,
            field=join_field(prefix, self.field),
            message=self.message,
        )

    def to_dict(self) -> dict[str, str]:
        """Wire representation: ``{"code", "field", "message"}``."""
        return {"code": self.code, "field": self.field, "message": self.message}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ErrorRecord:
        return cls(
            code=data.get("code", INVALID),
            field=data.get("field", ""),
            message=data.get("message", ""),
        )


@dataclass
class ValidationResult:
    """Unified result object for validation and coercion operations.

    ``Parameter.check`` wraps a full validation pass in one of these, and the
    coercer reports conversion outcomes through it.
    """

    valid: bool
    value: Any  # The (possibly coerced) value
    errors: list[Any] = field(default_factory=list)

    def __bool__(self) -> bool:
        """Allow 'if result:' usage to check validity."""
        return self.valid

    def error_dicts(self) -> list[dict[str, str]]:
        """Errors in wire form, for records that are ``ErrorRecord`` instances."""
        return [e.to_dict() if isinstance(e, ErrorRecord) else {"message": str(e)} for e in self.errors]

    @classmethod
    def success(cls, value: Any) -> ValidationResult:
        """Create a successful validation result."""
        return cls(valid=True, value=value, errors=[])

    @classmethod
    def failure(cls, value: Any, errors: list[Any]) -> ValidationResult:
        """Create a failed validation result.

        Args:
            value: The value that failed validation
            errors: List of error messages or records

        Returns:
            Failed ValidationResult
        """
        return cls(valid=False, value=value, errors=errors)
