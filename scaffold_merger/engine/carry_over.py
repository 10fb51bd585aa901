"""
Carry-over — extracts the hand-written statements of the old
``OnModelCreating`` body and splices them into a freshly generated one.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional

from .entity_blocks import entity_anchor, strip_entity_blocks
from .errors import NoMethodFoundError
from .markers import render_notice, strip_marker_blocks
from .method_locator import MethodBody, locate_method_body
from .rules import MergeRules

logger = logging.getLogger(__name__)

_LEADING_BLANK_LINES = re.compile(r"\A(?:[ \t]*\r?\n)+")
_DEFAULT_INDENT = "        "


@dataclass(frozen=True)
class MergePlan:
    """Where and what to insert into the new source text."""
    insertion_offset: int      # absolute offset into the new text
    preserved_text: str
    insertion_text: str        # preserved text wrapped in the banner
    anchored: bool             # True when placed before the forwarding call


def locate_required(text: str, rules: MergeRules, source: str = "") -> MethodBody:
    """Locate the configured method or raise :class:`NoMethodFoundError`."""
    method = locate_method_body(
        text, rules.signature_pattern(), strict=rules.strict, name=rules.method_name,
    )
    if method is None:
        raise NoMethodFoundError(rules.method_name, source)
    return method


def remove_partial_calls(body: str, rules: MergeRules, param_name: str) -> str:
    """Drop every ``OnModelCreatingPartial(<param>);`` statement from *body*."""
    return rules.partial_call_pattern(param_name).sub("", body)


def extract_carry_over(old_text: str, rules: MergeRules, source: str = "") -> str:
    """Return the custom statements of the old method body.

    Prior carry-over banners, generated entity blocks and the forwarding
    call are removed; what is left is the code to preserve, with leading
    blank lines and trailing whitespace trimmed.

    Raises
    ------
    NoMethodFoundError
        If the method cannot be located in *old_text*.
    UnbalancedBracesError
        If the method body or an entity lambda never closes.
    """
    method = locate_required(old_text, rules, source)

    body = strip_marker_blocks(method.content, rules.markers)
    body = strip_entity_blocks(body, entity_anchor(method.param_name))
    body = remove_partial_calls(body, rules, method.param_name)
    preserved = _LEADING_BLANK_LINES.sub("", body).rstrip()

    logger.debug(
        "[Merge] Extracted %d line(s) of carry-over from %s",
        len(preserved.splitlines()), source or "old text",
    )
    return preserved


def _line_indent(text: str, pos: int) -> str:
    line_start = text.rfind("\n", 0, pos) + 1
    line = text[line_start:]
    return line[: len(line) - len(line.lstrip(" \t"))]


def _body_indent(body: str) -> str:
    """Indentation of the last non-blank body line."""
    for line in reversed(body.splitlines()):
        if line.strip():
            return line[: len(line) - len(line.lstrip(" \t"))]
    return _DEFAULT_INDENT


def wrap_carry_over(preserved: str, indent: str, rules: MergeRules) -> str:
    """Wrap *preserved* in the notice region and footer line.

    Only the notice and footer are indented with *indent*; the carried-over
    code is inserted character for character, since its lines may continue
    verbatim or raw string literals.
    """
    return (
        render_notice(indent, rules.markers)
        + preserved + "\n"
        + f"{indent}{rules.markers.footer}\n"
    )


def plan_insertion(
    new_text: str,
    preserved: str,
    rules: MergeRules,
    source: str = "",
) -> Optional[MergePlan]:
    """Compute where the carry-over goes in *new_text*.

    Returns None when *preserved* is blank.  Raises
    :class:`NoMethodFoundError` when the method is missing from *new_text*,
    even if there is nothing to insert.
    """
    method = locate_required(new_text, rules, source)
    if not preserved.strip():
        return None

    body = method.content
    base = method.body_span.start
    anchor = rules.partial_call_pattern(method.param_name).search(body)

    if anchor is not None:
        call_start = anchor.start() + len(anchor.group(0)) - len(anchor.group(0).lstrip(" \t"))
        line_start = body.rfind("\n", 0, call_start) + 1
        prefix = body[line_start:call_start]
        if prefix.strip():
            indent = _line_indent(body, call_start)
            text = "\n" + wrap_carry_over(preserved, indent, rules) + "\n" + indent
            offset = call_start
        else:
            text = wrap_carry_over(preserved, prefix, rules) + "\n"
            offset = line_start
        return MergePlan(base + offset, preserved, text, anchored=True)

    logger.warning(
        "[Merge] No %s call in %s, appending carry-over at the end of %s",
        rules.partial_method, source or "new text", rules.method_name,
    )
    content_end = len(body.rstrip())
    indent = _body_indent(body)
    if content_end == 0:
        text = "\n" + wrap_carry_over(preserved, indent, rules).rstrip("\n")
    else:
        text = "\n\n" + wrap_carry_over(preserved, indent, rules).rstrip("\n")
    return MergePlan(base + content_end, preserved, text, anchored=False)


def apply_plan(new_text: str, plan: Optional[MergePlan]) -> str:
    if plan is None:
        return new_text
    offset = plan.insertion_offset
    return new_text[:offset] + plan.insertion_text + new_text[offset:]


def insert_carry_over(
    new_text: str,
    preserved: str,
    rules: MergeRules,
    source: str = "",
) -> str:
    """Return *new_text* with *preserved* spliced into the method body."""
    return apply_plan(new_text, plan_insertion(new_text, preserved, rules, source))
