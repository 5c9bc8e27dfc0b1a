"""Service layer helpers (settings)."""

from .settings import DEFAULT_WRAP_WIDTH, Settings, apply_overrides, load_settings

__all__ = ["DEFAULT_WRAP_WIDTH", "Settings", "apply_overrides", "load_settings"]
