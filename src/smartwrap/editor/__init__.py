"""Editor package containing the document model, buffer and formatting trigger."""

from importlib import import_module
from typing import Any

from . import document_model, text_buffer

__all__ = ["document_model", "text_buffer"]


def __getattr__(name: str) -> Any:
	if name in {"smart_format", "syntax"}:
		module = import_module(f"{__name__}.{name}")
		globals()[name] = module
		return module
	raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
