"""
Marker block stripper — removes regions bounded by a begin/end comment pair
and stray single-line comments carrying the marker prefix.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_MARKER_PREFIX = "// scaffold-merge:"
DEFAULT_MARKER_BEGIN = "// scaffold-merge:begin-notice"
DEFAULT_MARKER_END = "// scaffold-merge:end-notice"

# Lines placed between the begin/end markers of an inserted notice
NOTICE_LINES = (
    "// The statements below were carried over from the previous",
    "// OnModelCreating body and are re-applied on every regeneration.",
)
CARRY_OVER_FOOTER = "end of carried-over statements"


@dataclass(frozen=True)
class MarkerPair:
    """Begin/end comment literals plus the prefix shared by legacy markers."""
    begin: str = DEFAULT_MARKER_BEGIN
    end: str = DEFAULT_MARKER_END
    prefix: str = DEFAULT_MARKER_PREFIX

    def __post_init__(self) -> None:
        if not self.begin or not self.end:
            raise ValueError("Marker begin and end literals must be non-empty")

    @property
    def footer(self) -> str:
        """The trailing single-line banner written after carried-over code."""
        return f"{self.prefix} {CARRY_OVER_FOOTER}"


def _prefix_line_pattern(prefix: str) -> re.Pattern:
    return re.compile(
        r"^[ \t]*" + re.escape(prefix) + r"[^\r\n]*(?:\r?\n|\Z)",
        re.MULTILINE,
    )


_REST_OF_LINE = re.compile(r"[^\r\n]*(?:\r?\n)?")


def _drop_marker_line(body: str, start: int) -> str:
    """Remove the marker at *start* through the end of its line."""
    line_start = body.rfind("\n", 0, start) + 1
    if body[line_start:start].strip():
        line_start = start
    return body[:line_start] + body[_REST_OF_LINE.match(body, start).end():]


def _strip_once(body: str, markers: MarkerPair) -> str:
    while True:
        start = body.find(markers.begin)
        if start == -1:
            break
        end = body.find(markers.end, start + len(markers.begin))
        if end == -1:
            logger.warning(
                "[Merge] Begin marker at offset %d has no end marker, "
                "dropping only the marker line and keeping the code after it",
                start,
            )
            body = _drop_marker_line(body, start)
            continue
        body = body[:start] + body[end + len(markers.end):]

    if markers.prefix:
        body = _prefix_line_pattern(markers.prefix).sub("", body)
    return body


def strip_marker_blocks(body: str, markers: MarkerPair) -> str:
    """Remove marker-delimited regions and marker-prefixed comment lines.

    The begin..end region is removed inclusively.  A begin marker with no
    end marker after it loses only its own line.  Whole lines starting
    with ``markers.prefix`` are removed anywhere in *body*.  The removal is
    repeated until nothing changes, so a second call is always a no-op.
    """
    while True:
        stripped = _strip_once(body, markers)
        if stripped == body:
            return stripped
        body = stripped


def render_notice(indent: str, markers: MarkerPair) -> str:
    """Return the marker-bounded notice block, one indented line per entry."""
    lines = [markers.begin, *NOTICE_LINES, markers.end]
    return "".join(f"{indent}{line}\n" for line in lines)
