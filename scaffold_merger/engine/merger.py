"""
Context merger — runs extract → locate → compose → validate over an old and
a new context source text and reports the outcome without raising.

Any failure ends in the ``aborted`` stage with no merged text, so callers
can guarantee that nothing is written.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .braces import is_balanced
from .carry_over import (
    MergePlan,
    apply_plan,
    extract_carry_over,
    locate_required,
    plan_insertion,
)
from .errors import MergeError
from .rules import MergeRules

logger = logging.getLogger(__name__)

STAGE_EXTRACT_OLD = "extract_old"
STAGE_LOCATE_NEW = "locate_new"
STAGE_COMPOSE = "compose"
STAGE_VALIDATE = "validate"
STAGE_DONE = "done"
STAGE_ABORTED = "aborted"


@dataclass
class MergeResult:
    """Outcome of one context merge."""
    success: bool = False
    merged_text: Optional[str] = None
    preserved_text: str = ""
    plan: Optional[MergePlan] = None
    stage: str = STAGE_EXTRACT_OLD   # last stage reached
    failed_stage: str = ""
    error_kind: str = ""
    error: str = ""

    @property
    def changed(self) -> bool:
        """True when carry-over was actually inserted."""
        return self.plan is not None


class ContextMerger:
    """Merge the custom part of an old context file into a regenerated one."""

    def __init__(self, rules: Optional[MergeRules] = None) -> None:
        self._rules = rules or MergeRules()

    @property
    def rules(self) -> MergeRules:
        return self._rules

    def merge(
        self,
        old_text: str,
        new_text: str,
        old_source: str = "",
        new_source: str = "",
    ) -> MergeResult:
        """Merge *old_text*'s carry-over into *new_text*.

        Parameters
        ----------
        old_text:
            Context file as it was before regeneration.
        new_text:
            Freshly generated context file.
        old_source, new_source:
            File names used in log and error messages.

        Returns
        -------
        MergeResult
            ``success`` with ``merged_text`` set, or ``stage == "aborted"``
            with the failing stage, error kind and message.
        """
        result = MergeResult()

        try:
            result.stage = STAGE_EXTRACT_OLD
            result.preserved_text = extract_carry_over(old_text, self._rules, old_source)

            result.stage = STAGE_LOCATE_NEW
            locate_required(new_text, self._rules, new_source)

            result.stage = STAGE_COMPOSE
            result.plan = plan_insertion(
                new_text, result.preserved_text, self._rules, new_source,
            )
            merged = apply_plan(new_text, result.plan)

            result.stage = STAGE_VALIDATE
            self._validate(merged, new_source)
        except MergeError as exc:
            return self._abort(result, exc, old_source, new_source)

        result.merged_text = merged
        result.stage = STAGE_DONE
        result.success = True
        logger.info(
            "[Merge] %s: %s",
            new_source or "context",
            "carry-over inserted" if result.changed else "nothing to carry over",
        )
        return result

    def _validate(self, merged: Optional[str], source: str) -> None:
        if merged is None:
            raise MergeError(f"Merge produced no output for {source or 'context'}")
        method = locate_required(merged, self._rules, source)
        if not is_balanced(method.content):
            raise MergeError(
                f"Merged {self._rules.method_name} body in {source or 'context'} "
                "is not brace-balanced"
            )

    def _abort(
        self,
        result: MergeResult,
        exc: MergeError,
        old_source: str,
        new_source: str,
    ) -> MergeResult:
        source = old_source if result.stage == STAGE_EXTRACT_OLD else new_source
        where = f" ({source})" if source else ""
        result.failed_stage = result.stage
        result.stage = STAGE_ABORTED
        result.error_kind = exc.kind
        result.merged_text = None
        result.plan = None
        result.error = (
            f"Cannot safely merge {self._rules.method_name}{where}: {exc}. "
            "Aborting to avoid data loss; no changes were applied."
        )
        logger.error("[Merge] %s", result.error)
        return result
