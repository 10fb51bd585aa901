"""
Brace scanner — depth counting over raw text.

No lexical analysis is done: braces inside string literals, char literals
and comments count like any other brace.
"""

from __future__ import annotations

from dataclasses import dataclass

from .errors import UnbalancedBracesError


@dataclass(frozen=True)
class Span:
    """A half-open ``[start, end)`` offset pair into one source text."""
    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0 or self.end < self.start:
            raise ValueError(f"Invalid span ({self.start}, {self.end})")

    def __len__(self) -> int:
        return self.end - self.start

    def slice(self, text: str) -> str:
        """Return the part of *text* covered by this span."""
        if self.end > len(text):
            raise ValueError(
                f"Span ({self.start}, {self.end}) exceeds text of length {len(text)}"
            )
        return text[self.start:self.end]


def find_matching_brace(text: str, open_brace: int) -> int:
    """Return the offset of the ``}`` that closes the ``{`` at *open_brace*.

    Raises
    ------
    ValueError
        If ``text[open_brace]`` is not ``{``.
    UnbalancedBracesError
        If the end of *text* is reached before depth returns to zero.
    """
    if not 0 <= open_brace < len(text) or text[open_brace] != "{":
        raise ValueError(f"No '{{' at offset {open_brace}")

    depth = 0
    for i in range(open_brace, len(text)):
        c = text[i]
        if c == "{":
            depth += 1
        elif c == "}":
            depth -= 1
            if depth == 0:
                return i

    raise UnbalancedBracesError(open_brace, depth)


def scan_balanced(text: str, open_brace: int) -> Span:
    """Return the span of the body between the brace at *open_brace* and its match.

    The braces themselves are excluded.
    """
    close = find_matching_brace(text, open_brace)
    return Span(open_brace + 1, close)


def is_balanced(text: str) -> bool:
    """True when every ``}`` closes an earlier ``{`` and none stay open."""
    depth = 0
    for c in text:
        if c == "{":
            depth += 1
        elif c == "}":
            depth -= 1
            if depth < 0:
                return False
    return depth == 0
