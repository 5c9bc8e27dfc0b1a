"""Settings dataclass plus environment and command-line overrides."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields, replace
from typing import Any, Mapping

__all__ = ["Settings", "DEFAULT_WRAP_WIDTH", "load_settings", "apply_overrides"]

LOGGER = logging.getLogger(__name__)
DEFAULT_WRAP_WIDTH = 80
_ENV_OVERRIDES: Mapping[str, str] = {
    "SMARTWRAP_LOG_DIR": "log_dir",
}
_BOOL_ENV_OVERRIDES: Mapping[str, str] = {
    "SMARTWRAP_DEBUG_LOGGING": "debug_logging",
}
_INT_ENV_OVERRIDES: Mapping[str, str] = {
    "SMARTWRAP_WRAP_WIDTH": "wrap_width",
    "SMARTWRAP_MAX_DOCUMENT_CHARS": "max_document_chars",
}
_TRUE_VALUES = {"1", "true", "yes", "on", "debug"}
_FALSE_VALUES = {"0", "false", "no", "off", "disabled"}


@dataclass(slots=True)
class Settings:
    """Formatter configuration; read once per invocation, never persisted."""

    wrap_width: int = DEFAULT_WRAP_WIDTH
    max_document_chars: int = 2_000_000
    debug_logging: bool = False
    log_dir: str | None = None

    def __post_init__(self) -> None:
        if self.wrap_width < 1:
            raise ValueError(f"wrap_width must be positive, got {self.wrap_width}")
        if self.max_document_chars < 0:
            raise ValueError(f"max_document_chars must not be negative, got {self.max_document_chars}")


def load_settings(
    env: Mapping[str, str] | None = None,
    *,
    overrides: Mapping[str, Any] | None = None,
) -> Settings:
    """Build settings from defaults, then ``env``, then explicit ``overrides``."""

    source = os.environ if env is None else env
    values: dict[str, Any] = {}
    for env_name, field_name in _ENV_OVERRIDES.items():
        raw = source.get(env_name)
        if raw:
            values[field_name] = raw
    for env_name, field_name in _BOOL_ENV_OVERRIDES.items():
        raw = source.get(env_name)
        if raw is not None:
            values[field_name] = raw.strip().lower() in _TRUE_VALUES
    for env_name, field_name in _INT_ENV_OVERRIDES.items():
        raw = source.get(env_name)
        if raw is None or not raw.strip():
            continue
        try:
            values[field_name] = int(raw)
        except ValueError as exc:
            raise ValueError(f"{env_name} must be an integer, got {raw!r}") from exc

    settings = Settings(**values)
    if overrides:
        settings = apply_overrides(settings, overrides)
    LOGGER.debug("Settings resolved: %s", settings)
    return settings


def apply_overrides(settings: Settings, overrides: Mapping[str, Any]) -> Settings:
    """Return a copy of ``settings`` with ``overrides`` coerced to each field's type."""

    known = {field.name: field for field in fields(Settings)}
    changes: dict[str, Any] = {}
    for key, value in overrides.items():
        field = known.get(key)
        if field is None:
            raise ValueError(f"Unknown setting: {key}")
        changes[key] = _coerce(key, field.type, value)
    return replace(settings, **changes)


def _coerce(name: str, annotation: Any, value: Any) -> Any:
    kind = str(annotation)
    if kind == "bool":
        if isinstance(value, bool):
            return value
        text = str(value).strip().lower()
        if text in _TRUE_VALUES:
            return True
        if text in _FALSE_VALUES:
            return False
        raise ValueError(f"{name} expects a boolean, got {value!r}")
    if kind == "int":
        try:
            return int(value)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"{name} expects an integer, got {value!r}") from exc
    if value is None or str(value).strip().lower() in {"", "none", "null"}:
        return None
    return str(value)
