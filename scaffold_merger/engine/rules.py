"""
Merge rules — the literal contracts the engine matches against, bundled in
one immutable value so every helper receives them explicitly.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from .markers import MarkerPair
from .method_locator import build_signature_pattern


@dataclass(frozen=True)
class MergeRules:
    """Names and markers that identify the generated method and its parts."""
    method_name: str = "OnModelCreating"
    builder_type: str = "ModelBuilder"
    partial_method: str = "OnModelCreatingPartial"
    markers: MarkerPair = field(default_factory=MarkerPair)
    strict: bool = False   # fail on more than one matching signature

    def signature_pattern(self) -> re.Pattern:
        return build_signature_pattern(self.method_name, self.builder_type)

    def partial_call_pattern(self, param_name: str) -> re.Pattern:
        """Match the ``OnModelCreatingPartial(<param>);`` forwarding call.

        Leading indentation and the rest of the line are included so the
        statement can be removed as a whole line.
        """
        return re.compile(
            r"[ \t]*(?:this\s*\.\s*)?\b"
            + re.escape(self.partial_method)
            + r"\s*\(\s*"
            + re.escape(param_name)
            + r"\s*\)\s*;[ \t]*(?:\r?\n)?"
        )
