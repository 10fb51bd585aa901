"""
Entity block stripper — removes generated ``<builder>.Entity<T>(e => { ... });``
configuration statements from a method body.

A statement is recognized by its anchor token, the first ``{`` that opens
the lambda body, the matching ``}`` and the ``)``/``;`` terminator after it.
Anything that does not fit that shape is left untouched.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional

from .braces import Span, find_matching_brace

logger = logging.getLogger(__name__)

_EXCESS_BLANK_LINES = re.compile(r"(?:\r?\n){3,}")


@dataclass(frozen=True)
class EntityBlock:
    """One recognized entity configuration statement."""
    anchor_span: Span
    lambda_open_brace: int
    lambda_close_brace: int
    statement_end: int     # offset just past the terminator


def entity_anchor(param_name: str) -> str:
    """Return the anchor token for a builder parameter, e.g. ``modelBuilder.Entity<``."""
    return f"{param_name}.Entity<"


def _skip_ws(text: str, i: int) -> int:
    while i < len(text) and text[i].isspace():
        i += 1
    return i


def _find_lambda_open(text: str, pos: int) -> tuple[Optional[int], int, int]:
    """Scan from *pos* for the lambda's ``{``.

    Returns ``(open_brace, paren_depth, stop)``.  ``open_brace`` is None when
    the statement ends first (a ``;`` at depth 0, a ``)`` that closes the
    enclosing call, or end of text); ``stop`` is where scanning may resume.
    """
    depth = 0
    for i in range(pos, len(text)):
        c = text[i]
        if c == "(":
            depth += 1
        elif c == ")":
            depth -= 1
            if depth < 0:
                return None, 0, i + 1
        elif c == ";" and depth == 0:
            return None, 0, i + 1
        elif c == "{":
            return i, depth, i
    return None, 0, len(text)


def _consume_terminator(text: str, close_brace: int, parens: int) -> Optional[int]:
    """Return the offset after ``}``, *parens* ``)`` and the closing ``;``.

    None when the statement does not end there, e.g. the ``{`` belonged to
    one argument of a call that takes more arguments.
    """
    i = _skip_ws(text, close_brace + 1)
    for _ in range(parens):
        if i >= len(text) or text[i] != ")":
            return None
        i = _skip_ws(text, i + 1)
    if i < len(text) and text[i] == ";":
        return i + 1
    return None


def _scan(body: str, anchor_token: str):
    """Yield ``(kind, match, block_or_stop)`` for each anchor occurrence."""
    pattern = re.compile(re.escape(anchor_token), re.IGNORECASE)
    cursor = 0
    while True:
        match = pattern.search(body, cursor)
        if match is None:
            return

        open_brace, parens, stop = _find_lambda_open(body, match.end())
        if open_brace is None:
            logger.debug(
                "[Merge] Anchor at offset %d has no lambda body, keeping it as is",
                match.start(),
            )
            yield "malformed", match, stop
            cursor = stop
            continue

        close_brace = find_matching_brace(body, open_brace)
        statement_end = _consume_terminator(body, close_brace, parens)
        if statement_end is None:
            logger.debug(
                "[Merge] Anchor at offset %d does not end after its block, keeping it as is",
                match.start(),
            )
            yield "malformed", match, close_brace + 1
            cursor = close_brace + 1
            continue

        block = EntityBlock(
            anchor_span=Span(match.start(), match.end()),
            lambda_open_brace=open_brace,
            lambda_close_brace=close_brace,
            statement_end=statement_end,
        )
        yield "block", match, block
        cursor = block.statement_end


def find_entity_blocks(body: str, anchor_token: str) -> list[EntityBlock]:
    """Return every well-formed entity block in *body*, in document order.

    :class:`UnbalancedBracesError` propagates when a lambda never closes.
    """
    return [item for kind, _, item in _scan(body, anchor_token) if kind == "block"]


def _removal_extent(body: str, cursor: int, block: EntityBlock) -> tuple[int, int]:
    """Widen a block to whole lines when it sits alone on its lines."""
    start = block.anchor_span.start
    end = block.statement_end

    line_start = max(body.rfind("\n", 0, start) + 1, cursor)
    if body[line_start:start].strip():
        return start, end

    j = end
    while j < len(body) and body[j] in " \t":
        j += 1
    if body.startswith("\r\n", j):
        j += 2
    elif body.startswith("\n", j):
        j += 1
    elif j < len(body):
        return start, end

    return line_start, j


def strip_entity_blocks(body: str, anchor_token: str) -> str:
    """Remove every entity configuration statement introduced by *anchor_token*.

    Malformed occurrences (no lambda body, or a block that does not end
    the statement) are copied through unchanged.  Runs of three or more
    line breaks collapse to two only when at least one block was removed;
    a body without removals is returned exactly as given.
    """
    out: list[str] = []
    cursor = 0
    removed = 0

    for kind, match, item in _scan(body, anchor_token):
        if kind == "malformed":
            out.append(body[cursor:item])
            cursor = item
            continue
        start, end = _removal_extent(body, cursor, item)
        out.append(body[cursor:start])
        cursor = end
        removed += 1

    out.append(body[cursor:])
    result = "".join(out)

    if not removed:
        return result

    logger.debug("[Merge] Removed %d entity block(s)", removed)
    return _EXCESS_BLANK_LINES.sub(
        lambda m: ("\r\n" if m.group(0).startswith("\r") else "\n") * 2,
        result,
    )
