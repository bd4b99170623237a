"""The validation engine.

Example:
    ```python
    from dataknobs_parameter import Parameter

    parameter = Parameter(convert=True)
    errors = parameter.validate(
        {
            "name": "string",
            "age": {"type": "int", "min": 0},
            "role": ["admin", "member"],
            "tags": {"type": "array", "itemType": "string", "required": False},
        },
        request_body,
    )
    if errors:
        return {"errors": [e.to_dict() for e in errors]}, 422
    ```
"""

from __future__ import annotations

import copy
import logging
import math
import re
import threading
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Union

from .checkers import pattern_checker
from .coercion import Coercer, ConversionTarget
from .config import ParameterOptions
from .exceptions import InvalidRuleError, InvalidSubjectError, NestingDepthError, RuleRegistrationError
from .registry import CheckerRegistry
from .result import INVALID, MISSING_FIELD, ErrorRecord, ValidationResult
from .rules import custom_message, normalize_rule

logger = logging.getLogger(__name__)


class Parameter:
    """Validates mappings against schemas of per-field rules.

    Each instance owns its checker registry, so rules added with
    :meth:`add_rule` on one instance do not leak into another unless a
    registry is shared explicitly.

    ``validate`` may modify the subject in place: coerced values, trimmed
    strings, widely-undefined values reset to None and defaults for missing
    optional fields are all written back, so later ``compare`` checks and the
    caller see the final values.

    Args:
        options: ParameterOptions or a dict of option names
        registry: Checker registry to use instead of a fresh built-in one
        **kwargs: Option names, merged over ``options``
    """

    def __init__(
        self,
        options: ParameterOptions | Mapping[str, Any] | None = None,
        registry: CheckerRegistry | None = None,
        **kwargs: Any,
    ):
        if isinstance(options, ParameterOptions):
            if kwargs:
                merged = {**options.to_dict(), "translate": options.translate, **kwargs}
                options = ParameterOptions.from_dict(merged)
        else:
            options = ParameterOptions.from_dict({**(options or {}), **kwargs})

        self.options = options
        self.translate = options.translate
        self.validate_root = options.validate_root
        self.convert = options.convert
        self.widely_undefined = options.widely_undefined
        self.max_depth = options.max_depth
        self.registry = registry if registry is not None else CheckerRegistry.with_builtins()
        self.coercer = Coercer()
        self._local = threading.local()

    @classmethod
    def from_config(cls, source: Union[str, Path, Mapping[str, Any]], **kwargs: Any) -> Parameter:
        """Create an engine from an options dict or a YAML/JSON options file."""
        if isinstance(source, Mapping):
            options = ParameterOptions.from_dict(source)
        else:
            options = ParameterOptions.from_file(source)
        return cls(options, **kwargs)

    def t(self, fmt: str, *args: Any) -> str:
        """Translate a message or code, interpolating printf-style arguments."""
        if self.translate is not None:
            return self.translate(fmt, *args)
        return fmt % args if args else fmt

    def validate(self, rules: Any, obj: Any) -> list[ErrorRecord] | None:
        """Validate ``obj`` against the schema ``rules``.

        Every field is checked in schema order and all failures are collected.
        A missing required field yields one ``missing_field`` record and no
        further checks for that field.

        Args:
            rules: Mapping of field name to rule, in any accepted shorthand
            obj: Mapping to validate; modified in place by coercion, trim,
                widely-undefined resets and defaults

        Returns:
            List of error records, or None when the subject is valid

        Raises:
            ConfigurationError: If the schema is broken (unknown type,
                malformed rule, nesting too deep)
            InvalidSubjectError: If ``obj`` is not a mapping and
                ``validate_root`` is off
        """
        if not isinstance(rules, Mapping):
            raise InvalidRuleError(
                "need object type rule",
                context={"schema_class": type(rules).__name__},
            )

        if not isinstance(obj, Mapping):
            if self.validate_root:
                return [
                    ErrorRecord(
                        code=self.t(INVALID),
                        field="",
                        message=self.t("the validated value should be a object"),
                    )
                ]
            raise InvalidSubjectError(
                "the validated value should be a object",
                context={"value_class": type(obj).__name__},
            )

        errors = self._validate_fields(rules, obj)
        logger.debug("Validated %d fields: %d errors", len(rules), len(errors))
        return errors or None

    def check(self, rules: Any, obj: Any) -> ValidationResult:
        """Validate and wrap the outcome in a :class:`ValidationResult`."""
        errors = self.validate(rules, obj)
        if errors:
            return ValidationResult.failure(obj, errors)
        return ValidationResult.success(obj)

    def validate_nested(self, rules: Any, obj: Mapping[str, Any]) -> list[ErrorRecord] | None:
        """Validate a nested mapping one level deeper than the current one."""
        if not isinstance(rules, Mapping):
            raise InvalidRuleError(
                "need object type rule",
                context={"schema_class": type(rules).__name__},
            )
        with self.nesting():
            return self._validate_fields(rules, obj) or None

    @contextmanager
    def nesting(self) -> Iterator[int]:
        """Track recursion into nested rules, enforcing ``max_depth``.

        Raises:
            NestingDepthError: If the depth limit is exceeded
        """
        depth = getattr(self._local, "depth", 0) + 1
        if depth > self.max_depth:
            raise NestingDepthError(self.max_depth)
        self._local.depth = depth
        try:
            yield depth
        finally:
            self._local.depth = depth - 1

    def collect(self, field: str, result: Any) -> list[ErrorRecord]:
        """Turn a checker result into error records located under ``field``."""
        if isinstance(result, str):
            return [ErrorRecord(code=self.t(INVALID), field=field, message=result)]
        if isinstance(result, (list, tuple)):
            records = []
            for error in result:
                if not isinstance(error, ErrorRecord):
                    error = ErrorRecord.from_dict(error)
                records.append(error.with_prefix(field))
            return records
        return []

    def _validate_fields(self, rules: Mapping[str, Any], obj: Any) -> list[ErrorRecord]:
        errors: list[ErrorRecord] = []
        for key, raw_rule in rules.items():
            rule = normalize_rule(raw_rule)
            errors.extend(self._validate_field(key, rule, obj))
        return errors

    def _validate_field(self, key: str, rule: dict[str, Any], obj: Any) -> list[ErrorRecord]:
        # A named type must resolve whether or not the field is present
        rule_type = rule.get("type")
        checker = self.registry.get(rule_type) if rule_type is not None else None
        value = obj.get(key)

        if isinstance(value, str) and rule.get("trim"):
            value = obj[key] = value.strip()

        if key in obj and self._is_widely_undefined(rule, value):
            value = obj[key] = None

        if value is None:
            if rule.get("required") is not False:
                return [
                    ErrorRecord(
                        code=self.t(MISSING_FIELD),
                        field=key,
                        message=custom_message(rule, "required") or self.t("required"),
                    )
                ]
            if "default" in rule:
                obj[key] = copy.deepcopy(rule["default"])
            return []

        if checker is None:
            checker = self.registry.get(rule_type)
        value = self.coercer.convert_field(rule, obj, key, self.convert, self.registry)
        return self.collect(key, checker(self, rule, value, obj))

    def _is_widely_undefined(self, rule: Mapping[str, Any], value: Any) -> bool:
        widely_undefined = rule.get("widelyUndefined", self.widely_undefined)
        if not widely_undefined:
            return False
        return value == "" or (isinstance(value, float) and math.isnan(value))

    def add_rule(
        self,
        type_name: str,
        checker: Callable[..., Any] | re.Pattern[str] | None = None,
        allow_override: bool | ConversionTarget = True,
        convert_type: ConversionTarget | None = None,
    ) -> None:
        """Register a custom rule type.

        Args:
            type_name: Name used as ``type`` in rules
            checker: ``checker(parameter, rule, value, obj)`` callable, or a
                compiled pattern that string values must match
            allow_override: Whether an existing type may be replaced. Any
                non-bool value here is taken as ``convert_type``.
            convert_type: Default coercion for this type: a built-in target
                name, another type's name, or a ``(value, obj)`` callable

        Raises:
            RuleRegistrationError: If ``type_name`` is empty, ``checker`` is
                neither callable nor a pattern, or the name exists and
                overriding is not allowed
        """
        if not type_name:
            raise RuleRegistrationError("`type` required")

        if not isinstance(allow_override, bool):
            convert_type = allow_override
            allow_override = True

        if isinstance(checker, re.Pattern):
            checker = pattern_checker(checker)
        elif not callable(checker):
            raise RuleRegistrationError(
                "check must be function or regexp",
                context={"type": type_name, "checker_class": type(checker).__name__},
            )

        self.registry.register(type_name, checker, allow_overwrite=allow_override)
        if convert_type is not None:
            self.registry.register_conversion(type_name, convert_type)
