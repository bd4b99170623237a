"""Object and array checkers, which recurse back into the engine.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .result import ErrorRecord
from .rules import custom_message, normalize_rule


def check_object(
    parameter: Any, rule: Mapping[str, Any], value: Any, obj: Any = None
) -> str | list[ErrorRecord] | None:
    """Value must be a mapping; a nested ``rule`` schema is validated recursively.

    Nested records are returned with paths relative to this value, the engine
    prefixes them with the field name.
    """
    if not isinstance(value, Mapping):
        return custom_message(rule, "type") or parameter.t("should be an object")

    nested = rule.get("rule")
    if nested:
        return parameter.validate_nested(nested, value)
    return None


def check_array(
    parameter: Any, rule: Mapping[str, Any], value: Any, obj: Any = None
) -> str | list[ErrorRecord] | None:
    """Value must be a list or tuple within optional length bounds.

    With ``itemType`` set, every item is checked and its failures are reported
    under its bracketed index, e.g. ``[2]`` or ``[0].name``. Without it the
    items are not inspected.

    Raises:
        UnknownRuleTypeError: If ``itemType`` is not a registered type
    """
    if not isinstance(value, (list, tuple)):
        return custom_message(rule, "type") or parameter.t("should be an array")

    if rule.get("max") is not None and len(value) > rule["max"]:
        return custom_message(rule, "max") or parameter.t("length should smaller than %s", rule["max"])
    if rule.get("min") is not None and len(value) < rule["min"]:
        return custom_message(rule, "min") or parameter.t("length should bigger than %s", rule["min"])

    item_type = rule.get("itemType")
    if not item_type:
        return None

    checker = parameter.registry.get(item_type)
    if item_type == "object":
        sub_rule = rule
    elif rule.get("rule"):
        sub_rule = normalize_rule(rule["rule"])
    else:
        sub_rule = normalize_rule(item_type)

    errors: list[ErrorRecord] = []
    with parameter.nesting():
        for index, item in enumerate(value):
            result = checker(parameter, sub_rule, item, value)
            errors.extend(parameter.collect(f"[{index}]", result))
    return errors
