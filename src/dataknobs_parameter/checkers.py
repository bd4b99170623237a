"""Built-in leaf checkers.

Every checker is called as ``checker(parameter, rule, value, obj)``:

- ``parameter``: the owning :class:`~dataknobs_parameter.parameter.Parameter`,
  used for message translation and nested validation
- ``rule``: the normalized rule descriptor
- ``value``: the field value (never None; missing fields are handled by the engine)
- ``obj``: the mapping or sequence that holds the value

and returns None when the value passes, a failure message, or a list of
:class:`~dataknobs_parameter.result.ErrorRecord` for composite values.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from numbers import Real
from re import Pattern as RegexPattern
from typing import Any, Callable

from .composite import check_array, check_object
from .exceptions import InvalidRuleError
from .rules import custom_message, resolve_allow_empty

DATE_TYPE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}\Z")
DATETIME_TYPE_RE = re.compile(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\Z")
ID_RE = re.compile(r"^\d+\Z")

# http://www.regular-expressions.info/email.html
EMAIL_RE = re.compile(
    r"^[a-z0-9!#$%&'*+/=?^_`{|}~-]+(?:\.[a-z0-9!#$%&'*+/=?^_`{|}~-]+)*"
    r"@(?:[a-z0-9](?:[a-z0-9-]*[a-z0-9])?\.)+[a-z0-9](?:[a-z0-9-]*[a-z0-9])?\Z"
)

PASSWORD_RE = re.compile(r"^[\w`~!@#$%^&*()\-=+\[\]{}|;:'\",<.>/?]+\Z", re.ASCII)

# https://gist.github.com/dperini/729294
URL_RE = re.compile(
    r"^(?:(?:https?|ftp)://)"
    r"(?:\S+(?::\S*)?@)?"
    r"(?:"
    r"(?!(?:10|127)(?:\.\d{1,3}){3})"
    r"(?!(?:169\.254|192\.168)(?:\.\d{1,3}){2})"
    r"(?!172\.(?:1[6-9]|2\d|3[0-1])(?:\.\d{1,3}){2})"
    r"(?:[1-9]\d?|1\d\d|2[01]\d|22[0-3])"
    r"(?:\.(?:1?\d{1,2}|2[0-4]\d|25[0-5])){2}"
    r"(?:\.(?:[1-9]\d?|1\d\d|2[0-4]\d|25[0-4]))"
    r"|"
    r"(?:(?:[a-z\u00a1-\uffff0-9]-*)*[a-z\u00a1-\uffff0-9]+)"
    r"(?:\.(?:[a-z\u00a1-\uffff0-9]-*)*[a-z\u00a1-\uffff0-9]+)*"
    r"(?:\.(?:[a-z\u00a1-\uffff]{2,}))"
    r")"
    r"(?::\d{2,5})?"
    r"(?:/\S*)?\Z",
    re.IGNORECASE,
)

DEFAULT_PASSWORD_MIN = 6


def fail(parameter: Any, rule: Mapping[str, Any], kind: str, fmt: str, *args: Any) -> str:
    """Failure message for ``kind``: the configured override or the translated default."""
    return custom_message(rule, kind) or parameter.t(fmt, *args)


def is_number(value: Any) -> bool:
    """Real numbers, excluding booleans."""
    return isinstance(value, Real) and not isinstance(value, bool)


def is_finite_number(value: Any) -> bool:
    if not is_number(value):
        return False
    return isinstance(value, int) or math.isfinite(value)


def display_value(value: Any) -> str:
    """Render an allowed value for messages: ``true``/``false``, and None as empty."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)


def strict_equal(left: Any, right: Any) -> bool:
    """Equality that does not conflate booleans with numbers."""
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left is right
    return left == right


def _check_bounds(parameter: Any, rule: Mapping[str, Any], value: Any) -> str | None:
    if rule.get("max") is not None and value > rule["max"]:
        return fail(parameter, rule, "max", "should smaller than %s", rule["max"])
    if rule.get("min") is not None and value < rule["min"]:
        return fail(parameter, rule, "min", "should bigger than %s", rule["min"])
    return None


def check_number(parameter: Any, rule: Mapping[str, Any], value: Any, obj: Any = None) -> str | None:
    """Finite number within optional ``min``/``max``."""
    if not is_finite_number(value):
        return fail(parameter, rule, "type", "should be a number")
    return _check_bounds(parameter, rule, value)


def check_int(parameter: Any, rule: Mapping[str, Any], value: Any, obj: Any = None) -> str | None:
    """Number with no fractional part, within optional ``min``/``max``."""
    if not is_finite_number(value) or value != math.trunc(value):
        return fail(parameter, rule, "type", "should be an integer")
    return _check_bounds(parameter, rule, value)


def check_string(
    parameter: Any,
    rule: Mapping[str, Any],
    value: Any,
    obj: Any = None,
    *,
    format_message: str | None = None,
) -> str | None:
    """String with optional emptiness, length bounds and ``format`` pattern.

    An allowed empty string skips the length and format checks.
    """
    if not isinstance(value, str):
        return fail(parameter, rule, "type", "should be a string")

    if value == "":
        if resolve_allow_empty(rule):
            return None
        return fail(parameter, rule, "empty", "should not be empty")

    if rule.get("max") is not None and len(value) > rule["max"]:
        return fail(parameter, rule, "max", "length should smaller than %s", rule["max"])
    if rule.get("min") is not None and len(value) < rule["min"]:
        return fail(parameter, rule, "min", "length should bigger than %s", rule["min"])

    pattern = rule.get("format")
    if pattern is not None:
        if isinstance(pattern, str):
            pattern = re.compile(pattern)
        if not pattern.search(value):
            if format_message is not None:
                return fail(parameter, rule, "format", format_message)
            return fail(parameter, rule, "format", "should match %s", pattern.pattern)
    return None


def format_rule(rule: Mapping[str, Any], pattern: RegexPattern[str]) -> dict[str, Any]:
    """String rule bound to a fixed pattern, keeping the caller's emptiness and messages."""
    derived: dict[str, Any] = {
        "type": rule.get("type"),
        "format": pattern,
        "allowEmpty": resolve_allow_empty(rule),
    }
    if rule.get("message") is not None:
        derived["message"] = rule["message"]
    return derived


def check_id(parameter: Any, rule: Mapping[str, Any], value: Any, obj: Any = None) -> str | None:
    return check_string(
        parameter, format_rule(rule, ID_RE), value, obj,
        format_message="should be digital string",
    )


def check_date(parameter: Any, rule: Mapping[str, Any], value: Any, obj: Any = None) -> str | None:
    return check_string(
        parameter, format_rule(rule, DATE_TYPE_RE), value, obj,
        format_message='should be "YYYY-MM-DD" date format string',
    )


def check_datetime(parameter: Any, rule: Mapping[str, Any], value: Any, obj: Any = None) -> str | None:
    return check_string(
        parameter, format_rule(rule, DATETIME_TYPE_RE), value, obj,
        format_message='should be "YYYY-MM-DD hh:mm:ss" date format string',
    )


def check_boolean(parameter: Any, rule: Mapping[str, Any], value: Any, obj: Any = None) -> str | None:
    if not isinstance(value, bool):
        return fail(parameter, rule, "type", "should be a boolean")
    return None


def check_enum(parameter: Any, rule: Mapping[str, Any], value: Any, obj: Any = None) -> str | None:
    """Value must strictly equal one of ``values``.

    Raises:
        InvalidRuleError: If ``values`` is not a non-empty list or tuple
    """
    values = rule.get("values")
    if not isinstance(values, (list, tuple)) or not values:
        raise InvalidRuleError(
            "check enum need array type values",
            context={"values": values},
        )
    if not any(strict_equal(candidate, value) for candidate in values):
        return fail(
            parameter, rule, "values", "should be one of %s",
            ", ".join(display_value(candidate) for candidate in values),
        )
    return None


def check_email(parameter: Any, rule: Mapping[str, Any], value: Any, obj: Any = None) -> str | None:
    return check_string(
        parameter, format_rule(rule, EMAIL_RE), value, obj,
        format_message="should be an email",
    )


def check_url(parameter: Any, rule: Mapping[str, Any], value: Any, obj: Any = None) -> str | None:
    return check_string(
        parameter, format_rule(rule, URL_RE), value, obj,
        format_message="should be a url",
    )


def check_password(parameter: Any, rule: Mapping[str, Any], value: Any, obj: Any = None) -> str | None:
    """Password characters, ``min`` defaulting to 6, and optional ``compare`` field.

    The caller's rule is left untouched; the defaults go into a derived rule.
    """
    derived = dict(rule)
    derived["format"] = PASSWORD_RE
    if not derived.get("min"):
        derived["min"] = DEFAULT_PASSWORD_MIN

    error = check_string(parameter, derived, value, obj)
    if error:
        return error

    compare = rule.get("compare")
    if compare:
        other = obj.get(compare) if isinstance(obj, Mapping) else None
        if not strict_equal(other, value):
            return fail(parameter, rule, "compare", "should equal to %s", compare)
    return None


def pattern_checker(pattern: RegexPattern[str]) -> Callable[..., str | None]:
    """Wrap a compiled pattern into a string-format checker."""

    def check_pattern(parameter: Any, rule: Mapping[str, Any], value: Any, obj: Any = None) -> str | None:
        return check_string(parameter, format_rule(rule, pattern), value, obj)

    return check_pattern


BUILTIN_CHECKERS: dict[str, Callable[..., Any]] = {
    "number": check_number,
    "int": check_int,
    "integer": check_int,
    "string": check_string,
    "id": check_id,
    "date": check_date,
    "dateTime": check_datetime,
    "datetime": check_datetime,
    "boolean": check_boolean,
    "bool": check_boolean,
    "array": check_array,
    "object": check_object,
    "enum": check_enum,
    "email": check_email,
    "password": check_password,
    "url": check_url,
}
