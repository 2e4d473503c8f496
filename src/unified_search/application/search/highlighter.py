"""
Highlighter - bounded excerpts with highlight offsets.

Builds a text window around the first case-insensitive occurrence of a keyword
and reports highlight spans relative to the window, not the original text.

Invariants:
- len(excerpt.text) <= max_length
- every highlight satisfies 0 <= start < end <= len(excerpt.text)
"""

from __future__ import annotations

from collections.abc import Sequence

from unified_search.domain.entities.result import Excerpt, Highlight

DEFAULT_RADIUS = 50
MAX_EXCERPT_LENGTH = 120


def find_occurrence(text: str, keyword: str) -> int:
    """Index of the first case-insensitive occurrence of keyword, or -1."""
    if not keyword:
        return -1
    return text.lower().find(keyword.lower())


class Highlighter:
    """Stateless excerpt builder shared by all source matchers."""

    def __init__(self, radius: int = DEFAULT_RADIUS, max_length: int = MAX_EXCERPT_LENGTH) -> None:
        self.radius = radius
        self.max_length = max_length

    def build_excerpt(
        self,
        text: str,
        keywords: Sequence[str],
        field: str,
    ) -> Excerpt | None:
        """
        Build one excerpt for ``field``.

        The window is centred on the first keyword (in keyword order) that
        occurs in ``text``; every keyword occurring inside the window gets a
        highlight.

        Returns:
            The excerpt, or None if no keyword occurs in the text
        """
        anchor_idx = -1
        anchor_len = 0
        for keyword in keywords:
            idx = find_occurrence(text, keyword)
            if idx != -1:
                anchor_idx, anchor_len = idx, len(keyword)
                break
        if anchor_idx == -1:
            return None

        start, end = self._window(len(text), anchor_idx, anchor_len)
        window = text[start:end]

        # Search the full text so a match cut off by the window edge is clipped, not lost
        highlights: set[tuple[int, int]] = set()
        lower_text = text.lower()
        for keyword in keywords:
            if not keyword:
                continue
            idx = lower_text.find(keyword.lower(), start)
            if idx != -1 and idx < end:
                highlights.add((idx - start, min(idx + len(keyword), end) - start))

        return Excerpt(
            field=field,
            text=window,
            highlights=tuple(Highlight(s, e) for s, e in sorted(highlights) if s < e),
        )

    def _window(self, text_len: int, idx: int, keyword_len: int) -> tuple[int, int]:
        if keyword_len >= self.max_length:
            return idx, min(text_len, idx + self.max_length)
        radius = min(self.radius, (self.max_length - keyword_len) // 2)
        start = max(0, idx - radius)
        end = min(text_len, idx + keyword_len + radius)
        return start, end
