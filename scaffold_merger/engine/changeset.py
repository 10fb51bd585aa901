"""
Change-set aggregation — combines per-entity property diffs into one report.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Mapping

from .properties import DiffResult


@dataclass
class EntitySetComparison:
    """Entity names present only in the new set, only in the old, or in both."""
    added: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    common: list[str] = field(default_factory=list)


@dataclass
class ChangeSetReport:
    """Aggregated model changes across all entities."""
    entities: dict[str, DiffResult] = field(default_factory=dict)
    added_entities: list[str] = field(default_factory=list)
    removed_entities: list[str] = field(default_factory=list)
    total_properties_added: int = 0
    total_properties_removed: int = 0
    total_properties_changed: int = 0

    @property
    def has_changes(self) -> bool:
        return bool(
            self.added_entities
            or self.removed_entities
            or self.total_properties_added
            or self.total_properties_removed
            or self.total_properties_changed
        )

    def to_dict(self) -> dict:
        return {
            "added_entities": list(self.added_entities),
            "removed_entities": list(self.removed_entities),
            "entities": {name: diff.to_dict() for name, diff in self.entities.items()},
            "total_properties_added": self.total_properties_added,
            "total_properties_removed": self.total_properties_removed,
            "total_properties_changed": self.total_properties_changed,
        }


def compare_entity_names(old: Iterable[str], new: Iterable[str]) -> EntitySetComparison:
    """Split entity names into added / removed / common, each sorted."""
    old_set, new_set = set(old), set(new)
    return EntitySetComparison(
        added=sorted(new_set - old_set),
        removed=sorted(old_set - new_set),
        common=sorted(old_set & new_set),
    )


def aggregate(
    per_entity: Mapping[str, DiffResult],
    added_entities: Iterable[str] = (),
    removed_entities: Iterable[str] = (),
) -> ChangeSetReport:
    """Combine per-entity diffs and sum the property totals."""
    report = ChangeSetReport(
        entities=dict(per_entity),
        added_entities=list(added_entities),
        removed_entities=list(removed_entities),
    )
    for diff in report.entities.values():
        report.total_properties_added += len(diff.added)
        report.total_properties_removed += len(diff.removed)
        report.total_properties_changed += len(diff.changed)
    return report
