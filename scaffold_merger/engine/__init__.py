"""Structural source-merge engine — brace-depth scanning, carry-over and property diffs."""

from .errors import (
    MergeError, NoMethodFoundError, UnbalancedBracesError, AmbiguousMethodError,
)
from .braces import Span, scan_balanced, find_matching_brace, is_balanced
from .method_locator import MethodBody, build_signature_pattern, locate_method_body
from .markers import MarkerPair, strip_marker_blocks
from .entity_blocks import EntityBlock, entity_anchor, find_entity_blocks, strip_entity_blocks
from .rules import MergeRules
from .carry_over import MergePlan, extract_carry_over, insert_carry_over, plan_insertion
from .merger import ContextMerger, MergeResult
from .properties import (
    PropertySignature, PropertyChange, DiffResult, extract_properties, diff_properties,
)
from .changeset import (
    ChangeSetReport, EntitySetComparison, aggregate, compare_entity_names,
)

__all__ = [
    "MergeError", "NoMethodFoundError", "UnbalancedBracesError", "AmbiguousMethodError",
    "Span", "scan_balanced", "find_matching_brace", "is_balanced",
    "MethodBody", "build_signature_pattern", "locate_method_body",
    "MarkerPair", "strip_marker_blocks",
    "EntityBlock", "entity_anchor", "find_entity_blocks", "strip_entity_blocks",
    "MergeRules",
    "MergePlan", "extract_carry_over", "insert_carry_over", "plan_insertion",
    "ContextMerger", "MergeResult",
    "PropertySignature", "PropertyChange", "DiffResult",
    "extract_properties", "diff_properties",
    "ChangeSetReport", "EntitySetComparison", "aggregate", "compare_entity_names",
]
