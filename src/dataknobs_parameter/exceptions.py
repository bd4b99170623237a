"""Exception hierarchy for the parameter validation engine.

Two disjoint kinds of problems exist when validating input:

- Configuration errors: the schema or the rule registry is broken (unknown
  rule type, malformed enum values, bad ``add_rule`` arguments). These are
  programming mistakes and are raised immediately.
- Validation errors: the subject does not satisfy the schema. These are never
  raised; they are returned as :class:`~dataknobs_parameter.result.ErrorRecord`
  lists.

Example:
    ```python
    from dataknobs_parameter import Parameter
    from dataknobs_parameter.exceptions import UnknownRuleTypeError

    try:
        Parameter().validate({"key": {"type": "bogus"}}, {"key": 1})
    except UnknownRuleTypeError as e:
        logger.error(f"Broken schema: {e}")
        logger.error(f"Context: {e.context}")
    ```
"""

from typing import Any

from dataknobs_common import (
    ConfigurationError as BaseConfigurationError,
    DataknobsError,
    ValidationError as BaseValidationError,
)


class ParameterError(DataknobsError):
    """Base exception for the parameter package.

    Carries the ``context``/``details`` dictionary of
    :class:`~dataknobs_common.exceptions.DataknobsError`.
    """

    pass


class ConfigurationError(ParameterError, BaseConfigurationError):
    """Raised when a schema, rule or engine option is invalid.

    These errors indicate a programming mistake, not bad user input, and
    always halt the current ``validate`` call.
    """

    pass


class UnknownRuleTypeError(ConfigurationError):
    """Raised when a rule type has no registered checker.

    Example:
        ```python
        raise UnknownRuleTypeError(
            "bogus",
            available=["number", "int", "string"],
        )
        ```
    """

    def __init__(self, rule_type: Any, available: list[str]):
        super().__init__(
            f"rule type must be one of {', '.join(available)}, "
            f"but the following type was passed: {rule_type}",
            context={"type": rule_type, "available_types": available},
        )
        self.rule_type = rule_type


class RuleRegistrationError(ConfigurationError):
    """Raised when ``add_rule`` receives invalid arguments or a name collision."""

    pass


class InvalidRuleError(ConfigurationError):
    """Raised when a rule descriptor or schema is malformed."""

    pass


class NestingDepthError(ConfigurationError):
    """Raised when nested object/array validation exceeds the depth limit."""

    def __init__(self, max_depth: int):
        super().__init__(
            f"nested rules exceed the maximum depth of {max_depth}",
            context={"max_depth": max_depth},
        )
        self.max_depth = max_depth


class InvalidSubjectError(ParameterError, BaseValidationError):
    """Raised when the validated value is not a mapping and root validation is off."""

    pass


__all__ = [
    "ParameterError",
    "ConfigurationError",
    "UnknownRuleTypeError",
    "RuleRegistrationError",
    "InvalidRuleError",
    "NestingDepthError",
    "InvalidSubjectError",
]
