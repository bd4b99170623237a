"""Engine options: construction from dicts, option files and the environment."""

import dataclasses
import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Union

import yaml  # type: ignore[import-untyped]

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

ENV_PREFIX = "DATAKNOBS_PARAMETER_"

# Accepted spellings of each option name
_OPTION_ALIASES = {
    "translate": "translate",
    "validateRoot": "validate_root",
    "validate_root": "validate_root",
    "convert": "convert",
    "widelyUndefined": "widely_undefined",
    "widely_undefined": "widely_undefined",
    "maxDepth": "max_depth",
    "max_depth": "max_depth",
}


@dataclass(frozen=True)
class ParameterOptions:
    """Options recognized by :class:`~dataknobs_parameter.parameter.Parameter`.

    Attributes:
        translate: Called as ``translate(fmt, *args)`` for every generated
            message and error code. Defaults to printf-style interpolation.
        validate_root: Report a non-mapping subject as an error record instead
            of raising.
        convert: Apply each type's default coercion before checking.
        widely_undefined: Treat ``""`` and NaN like a missing value (rules can
            override this with ``widelyUndefined``).
        max_depth: Maximum nesting of object/array rules per validate call.
    """

    translate: Callable[..., str] | None = None
    validate_root: bool = False
    convert: bool = False
    widely_undefined: bool = False
    max_depth: int = 64

    def __post_init__(self) -> None:
        if self.translate is not None and not callable(self.translate):
            raise ConfigurationError(
                "translate must be callable",
                context={"translate": repr(self.translate)},
            )
        if isinstance(self.max_depth, bool) or not isinstance(self.max_depth, int) or self.max_depth < 1:
            raise ConfigurationError(
                "max_depth must be a positive integer",
                context={"max_depth": self.max_depth},
            )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ParameterOptions":
        """Create options from a dictionary.

        Both the camelCase names (``validateRoot``) and the snake_case names
        (``validate_root``) are accepted.

        Raises:
            ConfigurationError: If an option name is not recognized
        """
        kwargs: Dict[str, Any] = {}
        for key, value in data.items():
            name = _OPTION_ALIASES.get(key)
            if name is None:
                raise ConfigurationError(
                    f"Unknown parameter option: {key}",
                    context={"option": key, "available_options": sorted(_OPTION_ALIASES)},
                )
            kwargs[name] = value
        return cls(**kwargs)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "ParameterOptions":
        """Load options from a YAML or JSON file.

        The options may sit at the top level or under a ``parameter`` key.

        Raises:
            ConfigurationError: If the file is missing or not YAML/JSON
        """
        path = Path(path).resolve()
        if not path.exists():
            raise ConfigurationError(
                f"Configuration file not found: {path}",
                context={"path": str(path)},
            )

        suffix = path.suffix.lower()
        with open(path) as f:
            if suffix in [".yaml", ".yml"]:
                data = yaml.safe_load(f)
            elif suffix == ".json":
                data = json.load(f)
            else:
                raise ConfigurationError(
                    f"Unsupported file format: {suffix}",
                    context={"path": str(path)},
                )

        data = data or {}
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Configuration file must contain a mapping: {path}",
                context={"path": str(path)},
            )
        if isinstance(data.get("parameter"), dict):
            data = data["parameter"]
        logger.debug("Loaded parameter options from %s", path)
        return cls.from_dict(data)

    def with_environment(self, prefix: str = ENV_PREFIX) -> "ParameterOptions":
        """Return a copy with ``<PREFIX><OPTION>`` environment overrides applied.

        For example ``DATAKNOBS_PARAMETER_CONVERT=true`` or
        ``DATAKNOBS_PARAMETER_MAX_DEPTH=16``.
        """
        overrides: Dict[str, Any] = {}
        for field in dataclasses.fields(self):
            if field.name == "translate":
                continue
            raw = os.environ.get(f"{prefix}{field.name.upper()}")
            if raw is None:
                continue
            if field.name == "max_depth":
                try:
                    overrides[field.name] = int(raw)
                except ValueError as e:
                    raise ConfigurationError(
                        f"Invalid integer for {prefix}{field.name.upper()}: {raw}",
                        context={"option": field.name, "value": raw},
                    ) from e
            else:
                overrides[field.name] = _parse_flag(raw)
        if overrides:
            logger.debug("Applying environment overrides: %s", sorted(overrides))
            return dataclasses.replace(self, **overrides)
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Convert options to a dictionary (camelCase names, translate omitted)."""
        return {
            "validateRoot": self.validate_root,
            "convert": self.convert,
            "widelyUndefined": self.widely_undefined,
            "maxDepth": self.max_depth,
        }


def _parse_flag(value: str) -> bool:
    """Parse an environment variable value as a boolean flag."""
    if value.lower() in ["true", "yes", "1", "on"]:
        return True
    elif value.lower() in ["false", "no", "0", "off", ""]:
        return False
    raise ConfigurationError(
        f"Invalid boolean option value: {value}",
        context={"value": value},
    )
