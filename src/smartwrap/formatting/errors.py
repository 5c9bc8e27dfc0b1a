"""Exceptions raised by the paragraph reflow engine."""

from __future__ import annotations


class FormatError(RuntimeError):
    """Base class for reflow failures."""

    def __init__(self, message: str, *, reason: str = "format_error", **details: object) -> None:
        super().__init__(message)
        self.reason = reason
        self._details = dict(details)

    def details(self) -> dict[str, object]:
        return {"reason": self.reason, **self._details}


class ParagraphRangeError(FormatError):
    """Raised when a paragraph's offsets disagree with the buffer it targets.

    This always means the tree is out of sync with the buffer, so callers
    should re-parse rather than retry.
    """

    def __init__(self, message: str, *, reason: str = "range_mismatch", **details: object) -> None:
        super().__init__(message, reason=reason, **details)


class DocumentTooLargeError(FormatError):
    """Raised when a buffer exceeds the configured soft size cap."""

    def __init__(self, length: int, limit: int) -> None:
        super().__init__(
            f"Document has {length} characters; formatting is capped at {limit}",
            reason="document_too_large",
            length=length,
            limit=limit,
        )


__all__ = ["FormatError", "ParagraphRangeError", "DocumentTooLargeError"]
