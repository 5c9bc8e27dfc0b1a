"""Range patch descriptors and batch application helpers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple


class PatchApplyError(RuntimeError):
    """Raised when a batch of range patches cannot be applied cleanly."""

    def __init__(
        self,
        message: str,
        *,
        reason: str = "range_mismatch",
        expected: str | None = None,
        actual: str | None = None,
    ) -> None:
        super().__init__(message)
        self.reason = reason
        self.expected = expected
        self.actual = actual

    def details(self) -> dict[str, str | None]:
        return {
            "reason": self.reason,
            "expected": self.expected,
            "actual": self.actual,
        }


@dataclass(slots=True)
class PatchResult:
    """Result of applying range patches to a document."""

    text: str
    spans: Tuple[Tuple[int, int], ...]
    summary: str


@dataclass(slots=True)
class RangePatch:
    """Replacement of ``[start:end]`` in the original text.

    ``match_text`` is the slice the patch expects to find, so a buffer that
    drifted since the offsets were computed is rejected instead of corrupted.
    """

    start: int
    end: int
    replacement: str
    match_text: str


def apply_streamed_ranges(original_text: str, ranges: Sequence[RangePatch]) -> PatchResult:
    """Apply range-based replacements, highest offset first."""

    if not ranges:
        raise PatchApplyError("Range patches require at least one entry", reason="empty_range_patch")

    normalized = tuple(sorted(ranges, key=lambda item: (item.start, item.end)))
    _ensure_non_overlapping(normalized)

    updated_text = original_text
    for entry in reversed(normalized):
        start = entry.start
        end = entry.end
        if start < 0 or end < start:
            raise PatchApplyError(
                f"Patch range ({start}, {end}) is inverted or negative",
                reason="invalid_range",
                expected=entry.match_text,
            )
        if end > len(updated_text):
            raise PatchApplyError(
                "Patch range exceeds document length",
                reason="range_overflow",
                expected=entry.match_text,
                actual=None,
            )
        current_slice = updated_text[start:end]
        if current_slice != entry.match_text:
            raise PatchApplyError(
                "Range patch content mismatch",
                reason="range_mismatch",
                expected=entry.match_text,
                actual=current_slice,
            )
        updated_text = updated_text[:start] + entry.replacement + updated_text[end:]

    spans = _compute_spans(normalized)
    summary = _summarize_patch(original_text, updated_text)
    return PatchResult(text=updated_text, spans=spans, summary=summary)


def _compute_spans(ranges: Sequence[RangePatch]) -> Tuple[Tuple[int, int], ...]:
    """Return the spans of the replacement text inside the patched document."""

    spans: list[tuple[int, int]] = []
    shift = 0
    for entry in ranges:
        start = entry.start + shift
        spans.append((start, start + len(entry.replacement)))
        shift += len(entry.replacement) - (entry.end - entry.start)
    return tuple(spans)


def _summarize_patch(before: str, after: str) -> str:
    delta = len(after) - len(before)
    if delta == 0:
        return "patch: Δ0"
    sign = "+" if delta > 0 else "-"
    return f"patch: {sign}{abs(delta)} chars"


def _ensure_non_overlapping(ranges: Sequence[RangePatch]) -> None:
    previous_end = -1
    for entry in ranges:
        if entry.start < previous_end:
            raise PatchApplyError("Range patches may not overlap", reason="range_overlap")
        previous_end = max(previous_end, entry.end)


__all__ = [
    "PatchApplyError",
    "PatchResult",
    "apply_streamed_ranges",
    "RangePatch",
]
