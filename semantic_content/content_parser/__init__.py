"""Semantic content parser package."""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from . import analyze, by_type, elements, groups, options, sequence, text
from .groups import Structure, structure
from .options import ParseOptions

__all__ = [
    "analyze",
    "by_type",
    "elements",
    "groups",
    "options",
    "sequence",
    "text",
    "ParseOptions",
    "ParsedContent",
    "Structure",
    "parse_content",
    "structure",
]


@dataclass(frozen=True)
class ParsedContent:
    raw: Mapping[str, Any]
    sequence: tuple[elements.Element, ...]
    groups: Structure
    by_type: by_type.TypeIndex

    def to_dict(self) -> dict[str, Any]:
        return {
            "raw": self.raw,
            "sequence": [element.to_dict() for element in self.sequence],
            "groups": self.groups.to_dict(),
            "byType": self.by_type.to_dict(),
        }


def parse_content(document: Mapping[str, Any], options: ParseOptions | None = None) -> ParsedContent:
    """Run every view over ``document``: the flat sequence, groups and type index."""
    flat = sequence.flatten(document, options)
    segmentation = groups.segment(flat)
    analyzed = [analyze.analyze_group(raw) for raw in segmentation.groups]
    return ParsedContent(
        raw=document,
        sequence=flat,
        groups=groups.classify(analyzed, segmentation),
        by_type=by_type.index_by_type(flat),
    )
