"""Generator settings and command-line run options.

Settings come from an optional YAML file; ``${VAR}`` and ``${VAR:default}``
references inside it are substituted from the environment before validation.
Defaults reproduce the stock generation rules.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from reportgen.exceptions import ConfigValidationError

logger = logging.getLogger(__name__)

DEFAULT_OUT_FILE = "generated_data.json"
DEFAULT_ORDER = "1"
DEFAULT_MINIMUM_OCCURRENCE = 100

_ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::([^}]*))?\}")
_LEGACY_OCTAL = re.compile(r"[+-]?0[0-7_]+")
_INT_LITERAL = re.compile(r"[+-]?[0-9A-Za-z_]+")
MAX_ROW_COUNT = 2**63 - 1


def substitute_env_vars(value: Any) -> Any:
    """Recursively substitute environment variables in config values.

    Raises:
        ValueError: If a referenced variable is unset and has no default
    """
    if isinstance(value, str):

        def replacer(match: re.Match) -> str:
            var_name = match.group(1)
            default_value = match.group(2)

            env_value = os.environ.get(var_name)
            if env_value is not None:
                return env_value
            if default_value is not None:
                return default_value
            raise ValueError(
                f"Environment variable '{var_name}' is not set and no default provided"
            )

        return _ENV_VAR_PATTERN.sub(replacer, value)

    elif isinstance(value, dict):
        return {k: substitute_env_vars(v) for k, v in value.items()}

    elif isinstance(value, list):
        return [substitute_env_vars(item) for item in value]

    else:
        return value


class DateTimeSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    # Roughly one in every `minimum_occurrence` values is the sentinel date; 0 disables it
    minimum_occurrence: int = DEFAULT_MINIMUM_OCCURRENCE

    @field_validator("minimum_occurrence")
    def _validate_minimum_occurrence(cls, value: int) -> int:
        if value < 0:
            raise ValueError("minimum_occurrence must be >= 0")
        return value


class GeneratorSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    datetime: DateTimeSettings = Field(default_factory=DateTimeSettings)


class Settings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    generators: GeneratorSettings = Field(default_factory=GeneratorSettings)

    @property
    def minimum_occurrence(self) -> int:
        return self.generators.datetime.minimum_occurrence

    def with_minimum_occurrence(self, value: Optional[int]) -> "Settings":
        """Return a copy with the datetime sentinel denominator overridden."""
        if value is None:
            return self
        data = self.model_dump()
        data["generators"]["datetime"]["minimum_occurrence"] = value
        try:
            return Settings.model_validate(data)
        except ValidationError as exc:
            raise ConfigValidationError(
                str(exc.errors()[0]["msg"]), key="generators.datetime.minimum_occurrence"
            ) from exc


def _read_yaml(path: Union[str, Path]) -> Dict[str, Any]:
    logger.info(f"Loading settings from {path}")

    config_path = Path(path)
    if not config_path.exists():
        raise ConfigValidationError(f"Settings file not found: {path}", config_path=str(path))

    try:
        with open(config_path, "r", encoding="utf-8") as handle:
            cfg = yaml.safe_load(handle)
    except yaml.YAMLError as exc:
        raise ConfigValidationError(f"Invalid YAML in settings file: {exc}", config_path=str(path))

    if cfg is None:
        return {}
    if not isinstance(cfg, dict):
        raise ConfigValidationError(
            "Settings must be a YAML dictionary/object", config_path=str(path)
        )
    return cfg


def load_settings(path: Optional[Union[str, Path]] = None) -> Settings:
    """Load generator settings, or the defaults when no path is given."""
    if path is None:
        return Settings()

    raw = _read_yaml(path)
    try:
        raw = substitute_env_vars(raw)
    except ValueError as exc:
        raise ConfigValidationError(str(exc), config_path=str(path)) from exc

    try:
        return Settings.model_validate(raw)
    except ValidationError as exc:
        first = exc.errors()[0]
        raise ConfigValidationError(
            f"Invalid settings: {first['msg']}",
            config_path=str(path),
            key=".".join(str(p) for p in first["loc"]),
        ) from exc


def parse_row_count(value: str) -> int:
    """Parse the --order value as a literal row count.

    Accepts integer literals with ``0x``/``0o``/``0b`` prefixes and the
    leading-zero octal form (``010`` is 8). Surrounding whitespace and
    values outside the signed 64-bit range are rejected.

    Raises:
        ConfigValidationError: If the value is not an integer literal
    """
    if not _INT_LITERAL.fullmatch(value):
        raise ConfigValidationError("order must be an int", key="order")
    try:
        if _LEGACY_OCTAL.fullmatch(value):
            count = int(value, 8)
        else:
            count = int(value, 0)
    except ValueError as exc:
        raise ConfigValidationError("order must be an int", key="order") from exc
    if not -MAX_ROW_COUNT - 1 <= count <= MAX_ROW_COUNT:
        raise ConfigValidationError("order must be an int", key="order")
    return count


@dataclass
class RunOptions:
    """Validated command-line options for one generation run."""

    ddl_file: str
    out_file: str = DEFAULT_OUT_FILE
    order: str = DEFAULT_ORDER
    row_count: int = 1
    seed: Optional[int] = None
    sort_by_name: bool = False
    settings: Settings = field(default_factory=Settings)

    @classmethod
    def validate(
        cls,
        ddl_file: str,
        out_file: str = DEFAULT_OUT_FILE,
        order: str = DEFAULT_ORDER,
        **kwargs: Any,
    ) -> "RunOptions":
        """Build options, raising ConfigValidationError on bad input."""
        if not ddl_file:
            raise ConfigValidationError("must supply a ddl file", key="ddl")
        row_count = parse_row_count(order)
        return cls(ddl_file=ddl_file, out_file=out_file, order=order, row_count=row_count, **kwargs)
