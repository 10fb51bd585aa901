"""
Method body locator — finds a method by signature pattern and returns its
body span using the brace scanner.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional

from .braces import Span, scan_balanced
from .errors import AmbiguousMethodError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MethodBody:
    """One located method: signature, braces and body text."""
    signature_span: Span
    open_brace: int
    body_span: Span
    content: str
    param_name: str = ""

    @property
    def close_brace(self) -> int:
        return self.body_span.end


def build_signature_pattern(
    method_name: str = "OnModelCreating",
    builder_type: str = "ModelBuilder",
) -> re.Pattern:
    """Compile the ``protected override void <method>(<builder> <param>)`` pattern.

    The builder type may be namespace-qualified
    (``Microsoft.EntityFrameworkCore.ModelBuilder``); the parameter name is
    captured in the ``param`` group.
    """
    return re.compile(
        r"protected\s+override\s+void\s+"
        + re.escape(method_name)
        + r"\s*\(\s*(?:[A-Za-z_][\w]*\s*\.\s*)*"
        + re.escape(builder_type)
        + r"\s+(?P<param>[A-Za-z_]\w*)\s*\)"
    )


def locate_method_body(
    text: str,
    signature: re.Pattern,
    strict: bool = False,
    name: str = "",
) -> Optional[MethodBody]:
    """Locate the body of the first method matching *signature*.

    Parameters
    ----------
    text:
        The full source text.
    signature:
        Compiled signature pattern; a ``param`` group, when present, is
        reported as ``MethodBody.param_name``.
    strict:
        Raise :class:`AmbiguousMethodError` instead of warning when more
        than one signature matches.
    name:
        Method name used in messages; defaults to the pattern source.

    Returns
    -------
    MethodBody or None
        ``None`` when no signature matches or no ``{`` follows it.
        :class:`UnbalancedBracesError` propagates from the scanner.
    """
    matches = list(signature.finditer(text))
    if not matches:
        return None

    if len(matches) > 1:
        if strict:
            raise AmbiguousMethodError(name or signature.pattern, len(matches))
        logger.warning(
            "[Merge] %d signatures match, using the first at offset %d",
            len(matches), matches[0].start(),
        )

    match = matches[0]
    open_brace = text.find("{", match.end())
    if open_brace == -1:
        logger.debug("[Merge] Signature at offset %d has no block body", match.start())
        return None

    body_span = scan_balanced(text, open_brace)
    param = match.groupdict().get("param") or ""

    return MethodBody(
        signature_span=Span(match.start(), match.end()),
        open_brace=open_brace,
        body_span=body_span,
        content=body_span.slice(text),
        param_name=param,
    )
