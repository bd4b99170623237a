"""Best-effort type coercion applied before a field is checked.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Mapping, MutableMapping
from typing import Any, Callable, Union

from .result import ValidationResult

logger = logging.getLogger(__name__)

ConversionTarget = Union[str, Callable[[Any, Any], Any]]

_LEADING_INT_RE = re.compile(r"\s*([+-]?\d+)")

# Names that denote a built-in coercion rather than a registered conversion.
BUILTIN_TARGETS = ("int", "number", "string", "bool", "boolean")


class Coercer:
    """Type coercion with predictable results.

    Always returns ValidationResult, never raises exceptions. A failed
    coercion leaves the original value for the checker to reject on its
    own terms.
    """

    def coerce(self, value: Any, target: ConversionTarget, obj: Any = None) -> ValidationResult:
        """Coerce a primitive value to the target representation.

        Args:
            value: Value to coerce
            target: Built-in target name or a ``(value, obj)`` callable
            obj: The subject holding the value, passed to callables

        Returns:
            ValidationResult with coerced value or error
        """
        if value is None or isinstance(value, (Mapping, list, tuple, set)):
            return ValidationResult.failure(value, [f"Cannot coerce {type(value).__name__}"])

        try:
            if callable(target):
                return ValidationResult.success(target(value, obj))
            return ValidationResult.success(self._coerce_value(value, target))
        except Exception as e:
            return ValidationResult.failure(
                value,
                [f"Cannot coerce {type(value).__name__} to {self._target_name(target)}: {e!s}"],
            )

    def _target_name(self, target: ConversionTarget) -> str:
        if callable(target):
            return getattr(target, "__name__", repr(target))
        return str(target)

    def _coerce_value(self, value: Any, target: str) -> Any:
        """Perform the actual coercion.

        Raises:
            ValueError: If coercion fails
        """
        # Integer coercion: leading digits of strings, truncation of numbers
        if target == "int":
            if isinstance(value, bool):
                raise ValueError("booleans are not integers")
            if isinstance(value, int):
                return value
            if isinstance(value, float):
                if not math.isfinite(value):
                    raise ValueError(f"Float {value} has no integer value")
                return math.trunc(value)
            match = _LEADING_INT_RE.match(str(value))
            if not match:
                raise ValueError(f"'{value}' does not start with an integer")
            return int(match.group(1))

        # Number coercion
        elif target == "number":
            if isinstance(value, bool):
                raise ValueError("booleans are not numbers")
            if isinstance(value, (int, float)):
                return value
            text = str(value).strip()
            try:
                return int(text)
            except ValueError:
                number = float(text)
                if not math.isfinite(number):
                    raise ValueError(f"'{value}' is not a finite number") from None
                return number

        # String coercion
        elif target == "string":
            return str(value)

        # Boolean coercion: truthiness, NaN counts as false
        elif target in ("bool", "boolean"):
            if isinstance(value, float) and math.isnan(value):
                return False
            return bool(value)

        raise ValueError(f"Unknown coercion target '{target}'")

    def resolve(self, rule: Mapping[str, Any], default_convert: bool, registry: Any) -> ConversionTarget | None:
        """Determine which coercion applies to a rule, if any.

        A per-rule ``convertType`` wins over the type's default coercion, which
        only applies when ``default_convert`` is on. A ``convertType`` naming a
        registered type resolves to that type's coercion.
        """
        target: ConversionTarget | None = None
        if default_convert:
            target = registry.get_conversion(rule.get("type"))
        if rule.get("convertType"):
            target = rule["convertType"]

        seen: set[str] = set()
        while isinstance(target, str) and target not in BUILTIN_TARGETS:
            if target in seen:
                logger.debug("Circular conversion reference at %r", target)
                return None
            seen.add(target)
            target = registry.get_conversion(target)
        return target

    def convert_field(
        self,
        rule: Mapping[str, Any],
        obj: MutableMapping[str, Any],
        key: str,
        default_convert: bool,
        registry: Any,
    ) -> Any:
        """Coerce ``obj[key]`` in place according to ``rule``.

        Returns:
            The field value after coercion (unchanged when no coercion applied)
        """
        value = obj[key]
        target = self.resolve(rule, default_convert, registry)
        if target is None:
            return value

        result = self.coerce(value, target, obj)
        if not result.valid:
            logger.debug("Coercion skipped for field %r: %s", key, result.errors[0])
            return value
        obj[key] = result.value
        return result.value
