"""
Property differ — compares the auto-properties declared in two versions of
a generated model file.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Iterable, Union

logger = logging.getLogger(__name__)

# public [virtual|required] <Type> <Name> { get; set; }
_PROPERTY_PATTERN = re.compile(
    r"^\s*public\s+(?:(?:virtual|required)\s+)*"
    r"(?P<type>[A-Za-z_][\w.]*(?:\s*<[\w.?,\s<>\[\]]+>)?\??(?:\[\])*\??)\s+"
    r"(?P<name>[A-Za-z_]\w*)\s*\{\s*get;\s*set;\s*\}"
)


@dataclass(frozen=True)
class PropertySignature:
    """One declared property: name and type text as written."""
    name: str
    type: str


@dataclass(frozen=True)
class PropertyChange:
    """A property whose type text differs between two versions."""
    name: str
    from_type: str
    to_type: str


@dataclass
class DiffResult:
    """Added, removed and changed properties of one entity."""
    added: list[PropertySignature] = field(default_factory=list)
    removed: list[PropertySignature] = field(default_factory=list)
    changed: list[PropertyChange] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.added or self.removed or self.changed)

    def to_dict(self) -> dict:
        return {
            "added": [{"name": p.name, "type": p.type} for p in self.added],
            "removed": [{"name": p.name, "type": p.type} for p in self.removed],
            "changed": [
                {"name": c.name, "from_type": c.from_type, "to_type": c.to_type}
                for c in self.changed
            ],
        }


Lines = Union[str, Iterable[str]]


def _as_lines(source: Lines) -> Iterable[str]:
    if isinstance(source, str):
        return source.splitlines()
    return source


def parse_property(line: str) -> PropertySignature | None:
    """Return the auto-property declared on *line*, or None.

    Runs of whitespace inside the type are collapsed to one space, so
    ``Dictionary<string,  int>`` and ``Dictionary<string, int>`` read the same.
    """
    m = _PROPERTY_PATTERN.match(line)
    if not m:
        return None
    type_text = re.sub(r"\s+", " ", m.group("type")).strip()
    return PropertySignature(m.group("name"), type_text)


def extract_properties(source: Lines) -> dict[str, str]:
    """Map property name → type for every declaration line in *source*.

    *source* is either the file text or its lines.  When a name is
    declared twice the later type wins; the name keeps its first position.
    """
    props: dict[str, str] = {}
    for line in _as_lines(source):
        prop = parse_property(line)
        if prop is not None:
            props[prop.name] = prop.type
    return props


def diff_properties(old_source: Lines, new_source: Lines) -> DiffResult:
    """Classify property differences between two versions of a model file.

    ``added`` and ``changed`` follow the new file's declaration order,
    ``removed`` the old file's.  Types are compared as exact strings after
    :func:`parse_property` has normalized their whitespace.
    """
    old = extract_properties(old_source)
    new = extract_properties(new_source)
    result = DiffResult()

    for name, new_type in new.items():
        if name not in old:
            result.added.append(PropertySignature(name, new_type))
        elif old[name] != new_type:
            result.changed.append(PropertyChange(name, old[name], new_type))

    for name, old_type in old.items():
        if name not in new:
            result.removed.append(PropertySignature(name, old_type))

    return result
