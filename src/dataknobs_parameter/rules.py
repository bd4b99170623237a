"""Rule normalization: every accepted rule shorthand becomes one descriptor.

A schema maps field names to rules. A rule may be written as:

- a bare type name, ``"int"`` (``"int?"`` marks it not required)
- a list or tuple of literals, shorthand for an ``enum`` rule
- a compiled pattern, shorthand for a ``string`` rule with that ``format``
- a full descriptor mapping, ``{"type": "string", "max": 10}``
- ``None``, an empty descriptor

:func:`normalize_rule` resolves the shape once and returns a fresh dict, so
checkers only ever see the canonical descriptor.

Custom messages can be given per failure kind. The kinds used by the built-in
checkers are ``required``, ``type``, ``empty``, ``min``, ``max``, ``format``,
``values`` and ``compare``. A single string message applies to every failure
on the field and is stored under the rule's type.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from enum import Enum
from typing import Any

from .exceptions import InvalidRuleError

RuleDescriptor = dict[str, Any]


class RuleShape(Enum):
    """The written form a rule was given in."""

    TYPE_NAME = "type_name"
    ENUM_SHORTHAND = "enum_shorthand"
    PATTERN_SHORTHAND = "pattern_shorthand"
    FULL_DESCRIPTOR = "full_descriptor"
    EMPTY = "empty"


def classify_rule(rule: Any) -> RuleShape:
    """Determine which shorthand ``rule`` is written in.

    Raises:
        InvalidRuleError: If the rule is none of the accepted shapes
    """
    if rule is None:
        return RuleShape.EMPTY
    if isinstance(rule, str):
        return RuleShape.TYPE_NAME
    if isinstance(rule, re.Pattern):
        return RuleShape.PATTERN_SHORTHAND
    if isinstance(rule, Mapping):
        return RuleShape.FULL_DESCRIPTOR
    if isinstance(rule, (list, tuple)):
        return RuleShape.ENUM_SHORTHAND
    raise InvalidRuleError(
        f"unsupported rule {rule!r}",
        context={"rule_class": type(rule).__name__},
    )


def normalize_rule(rule: Any) -> RuleDescriptor:
    """Convert any accepted rule shorthand into a canonical descriptor.

    The caller's rule object is never modified. Normalizing an already
    normalized descriptor returns an equal descriptor.

    Args:
        rule: Rule in any accepted shorthand

    Returns:
        A new descriptor dict, with ``type`` set whenever it is resolvable
    """
    shape = classify_rule(rule)
    if shape is RuleShape.EMPTY:
        descriptor: RuleDescriptor = {}
    elif shape is RuleShape.TYPE_NAME:
        descriptor = {"type": rule}
    elif shape is RuleShape.ENUM_SHORTHAND:
        descriptor = {"type": "enum", "values": list(rule)}
    elif shape is RuleShape.PATTERN_SHORTHAND:
        descriptor = {"type": "string", "format": rule}
    else:
        descriptor = dict(rule)

    rule_type = descriptor.get("type")
    if isinstance(rule_type, str) and rule_type.endswith("?"):
        descriptor["type"] = rule_type.rstrip("?")
        descriptor["required"] = False

    if "message" not in descriptor and "customMsg" in descriptor:
        descriptor["message"] = descriptor["customMsg"]

    message = descriptor.get("message")
    if isinstance(message, str) and descriptor.get("type"):
        descriptor["message"] = {descriptor["type"]: message}

    return descriptor


def compile_schema(schema: Any) -> dict[str, RuleDescriptor]:
    """Normalize every top-level rule of a schema.

    The compiled schema is itself a valid schema, so it can be reused across
    ``validate`` calls without normalizing again. Nested ``rule`` schemas are
    normalized when validation reaches them.

    Raises:
        InvalidRuleError: If ``schema`` is not a mapping
    """
    if not isinstance(schema, Mapping):
        raise InvalidRuleError(
            "need object type rule",
            context={"schema_class": type(schema).__name__},
        )
    return {key: normalize_rule(rule) for key, rule in schema.items()}


def resolve_allow_empty(rule: Mapping[str, Any]) -> bool:
    """Whether an empty string is acceptable for this rule.

    Precedence: explicit ``allowEmpty``, then explicit ``empty``, then
    ``required: False``.
    """
    if "allowEmpty" in rule:
        return bool(rule["allowEmpty"])
    if "empty" in rule:
        return bool(rule["empty"])
    return rule.get("required") is False


def custom_message(rule: Mapping[str, Any], kind: str) -> str | None:
    """Look up a configured message override for a failure kind.

    A per-kind entry wins over the whole-field entry stored under the type.
    """
    message = rule.get("message")
    if isinstance(message, str):
        return message
    if isinstance(message, Mapping):
        return message.get(kind) or message.get(rule.get("type"))
    return None
