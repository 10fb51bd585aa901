"""
Merge errors — fatal conditions raised by the merge engine.

Every subclass of :class:`MergeError` means "do not write anything".
"""

from __future__ import annotations


class MergeError(Exception):
    """Base class for conditions that abort a merge before any write."""

    kind = "merge_error"


class NoMethodFoundError(MergeError):
    """The target method signature could not be located in a source text."""

    kind = "no_method_found"

    def __init__(self, method_name: str, source: str = "") -> None:
        self.method_name = method_name
        self.source = source
        where = f" in {source}" if source else ""
        super().__init__(f"Method '{method_name}' not found{where}")


class UnbalancedBracesError(MergeError):
    """An opening brace has no matching closing brace before end of text."""

    kind = "unbalanced_braces"

    def __init__(self, offset: int, depth: int) -> None:
        self.offset = offset
        self.depth = depth
        super().__init__(
            f"Unbalanced braces: '{{' at offset {offset} is never closed "
            f"(depth {depth} at end of text)"
        )


class AmbiguousMethodError(MergeError):
    """More than one signature matched while strict matching is on."""

    kind = "ambiguous_method"

    def __init__(self, method_name: str, count: int) -> None:
        self.method_name = method_name
        self.count = count
        super().__init__(
            f"Found {count} candidate signatures for '{method_name}', expected one"
        )
