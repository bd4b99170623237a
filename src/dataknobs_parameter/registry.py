"""Registry of rule checkers keyed by type name.

Each :class:`~dataknobs_parameter.parameter.Parameter` owns a
:class:`CheckerRegistry`. Registration is a startup-time operation: the lock
keeps the mapping itself consistent, but registering a type while other
threads are validating against it is not supported.

Example:
    ```python
    from dataknobs_parameter.registry import CheckerRegistry

    registry = CheckerRegistry.with_builtins()
    registry.register("prefix", check_prefix)
    checker = registry.get("prefix")
    ```
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Union

from dataknobs_common import Registry

from .exceptions import RuleRegistrationError, UnknownRuleTypeError

logger = logging.getLogger(__name__)

Checker = Callable[..., Any]
Conversion = Union[str, Callable[[Any, Any], Any]]

# Default coercion target per built-in type, used when ``convert`` is enabled.
DEFAULT_CONVERSIONS: Dict[str, str] = {
    "number": "number",
    "int": "int",
    "integer": "int",
    "string": "string",
    "id": "string",
    "date": "string",
    "dateTime": "string",
    "datetime": "string",
    "email": "string",
    "password": "string",
    "url": "string",
    "boolean": "bool",
    "bool": "bool",
}


class CheckerRegistry(Registry[Checker]):
    """Registry of checker functions by rule type name.

    Also holds the default coercion for each type name.

    Args:
        name: Registry name for identification in errors and logs
    """

    def __init__(self, name: str = "checkers"):
        super().__init__(name)
        self._conversions: Dict[str, Conversion] = {}

    @classmethod
    def with_builtins(cls, name: str = "checkers") -> CheckerRegistry:
        """Create a registry seeded with every built-in type and alias."""
        from .checkers import BUILTIN_CHECKERS

        registry = cls(name)
        for type_name, checker in BUILTIN_CHECKERS.items():
            registry.register(type_name, checker)
        for type_name, conversion in DEFAULT_CONVERSIONS.items():
            registry.register_conversion(type_name, conversion)
        return registry

    def register(
        self,
        key: str,
        item: Checker,
        metadata: Dict[str, Any] | None = None,
        allow_overwrite: bool = False,
    ) -> None:
        """Register a checker under a type name.

        Raises:
            RuleRegistrationError: If the name exists and overwriting is not allowed
        """
        with self._lock:
            if self.has(key):
                if not allow_overwrite:
                    raise RuleRegistrationError(
                        f"rule `{key}` exists",
                        context={"type": key, "registry": self.name},
                    )
                logger.warning("Overriding rule %r in %s", key, self.name)
            super().register(key, item, metadata=metadata, allow_overwrite=True)
            logger.debug("Registered rule %r in %s", key, self.name)

    def unregister(self, key: str) -> Checker:
        """Unregister and return the checker for a type name.

        Raises:
            UnknownRuleTypeError: If the name is not registered
        """
        with self._lock:
            if not self.has(key):
                raise UnknownRuleTypeError(key, self.list_keys())
            self._conversions.pop(key, None)
            return super().unregister(key)

    def get(self, key: Any) -> Checker:
        """Get the checker for a type name.

        Raises:
            UnknownRuleTypeError: If the name is not registered
        """
        with self._lock:
            if not isinstance(key, str) or not self.has(key):
                raise UnknownRuleTypeError(key, self.list_keys())
            return super().get(key)

    def clear(self) -> None:
        with self._lock:
            super().clear()
            self._conversions.clear()

    def register_conversion(self, key: str, conversion: Conversion) -> None:
        """Install the default coercion for a type name.

        Args:
            key: Rule type name
            conversion: A coercion target name or a ``(value, obj)`` callable
        """
        with self._lock:
            self._conversions[key] = conversion

    def get_conversion(self, key: Any) -> Conversion | None:
        """Get the default coercion for a type name, if any."""
        with self._lock:
            return self._conversions.get(key) if isinstance(key, str) else None

    def copy(self, name: str | None = None) -> CheckerRegistry:
        """Create an independent registry with the same checkers and coercions."""
        with self._lock:
            clone = CheckerRegistry(name or self.name)
            for key, checker in self.items():
                clone.register(key, checker)
            clone._conversions = dict(self._conversions)
            return clone

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.has(key)
