"""
scaffold_merger — keeps hand-written OnModelCreating code alive across
EF Core re-scaffolds and reports model property changes.

Public API for library usage::

    from scaffold_merger import ContextMerger, diff_properties

    result = ContextMerger().merge(old_context_text, new_context_text)
    if result.success:
        write(result.merged_text)
"""

from .engine import (
    ContextMerger, MergeResult, MergeRules, MarkerPair,
    extract_carry_over, insert_carry_over,
    diff_properties, aggregate, ChangeSetReport, DiffResult,
    MergeError, NoMethodFoundError, UnbalancedBracesError,
)
from .workflow import merge_context_files, diff_model_directories

__all__ = [
    "ContextMerger", "MergeResult", "MergeRules", "MarkerPair",
    "extract_carry_over", "insert_carry_over",
    "diff_properties", "aggregate", "ChangeSetReport", "DiffResult",
    "MergeError", "NoMethodFoundError", "UnbalancedBracesError",
    "merge_context_files", "diff_model_directories",
]
