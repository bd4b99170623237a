"""Declarative parameter validation for untrusted input.

A schema maps field names to rules; :meth:`Parameter.validate` checks a
mapping against it and returns every violation as an :class:`ErrorRecord`,
or None when the mapping is valid.

Example:
    ```python
    from dataknobs_parameter import Parameter

    errors = Parameter().validate({"id": "id", "age": "int?"}, {"id": "x1"})
    # [ErrorRecord(code='invalid', field='id', message='should be digital string')]
    ```
"""

from .checkers import BUILTIN_CHECKERS
from .coercion import Coercer
from .config import ParameterOptions
from .exceptions import (
    ConfigurationError,
    InvalidRuleError,
    InvalidSubjectError,
    NestingDepthError,
    ParameterError,
    RuleRegistrationError,
    UnknownRuleTypeError,
)
from .parameter import Parameter
from .registry import CheckerRegistry
from .result import INVALID, MISSING_FIELD, ErrorRecord, ValidationResult
from .rules import RuleShape, classify_rule, compile_schema, normalize_rule

__version__ = "0.1.0"

__all__ = [
    # Engine
    "Parameter",
    "ParameterOptions",
    # Rules
    "RuleShape",
    "classify_rule",
    "normalize_rule",
    "compile_schema",
    # Registry
    "CheckerRegistry",
    "BUILTIN_CHECKERS",
    # Coercion
    "Coercer",
    # Results
    "ErrorRecord",
    "ValidationResult",
    "MISSING_FIELD",
    "INVALID",
    # Exceptions
    "ParameterError",
    "ConfigurationError",
    "UnknownRuleTypeError",
    "RuleRegistrationError",
    "InvalidRuleError",
    "NestingDepthError",
    "InvalidSubjectError",
]
