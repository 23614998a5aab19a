"""Segment a flat element sequence into groups and pick the main group.

Segmentation works in one of two modes. When the sequence holds any divider
the dividers are the only boundaries. Otherwise headings drive it: a run of
headings with strictly increasing levels (H2 then H3, say) opens a new group,
a heading directly above a more important heading is a pretitle that opens a
group ahead of it, and a leading image directly above a heading is a banner
that belongs to the first group.
"""
from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from .analyze import Group, analyze_group, is_banner_image, is_pretitle
from .elements import Divider, Element, Heading
from .options import ParseOptions
from .sequence import flatten

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Segmentation:
    groups: tuple[tuple[Element, ...], ...] = ()
    divider_mode: bool = False
    starts_with_divider: bool = False


@dataclass(frozen=True)
class StructureMetadata:
    divider_mode: bool = False
    groups: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {"dividerMode": self.divider_mode, "groups": self.groups}


@dataclass(frozen=True)
class Structure:
    main: Group | None = None
    items: tuple[Group, ...] = ()
    metadata: StructureMetadata = field(default_factory=StructureMetadata)

    def to_dict(self) -> dict[str, Any]:
        return {
            "main": self.main.to_dict() if self.main else None,
            "items": [item.to_dict() for item in self.items],
            "metadata": self.metadata.to_dict(),
        }


def segment(sequence: Sequence[Element]) -> Segmentation:
    if any(isinstance(element, Divider) for element in sequence):
        return _segment_by_dividers(sequence)
    return Segmentation(groups=_segment_by_headings(sequence))


def _segment_by_dividers(sequence: Sequence[Element]) -> Segmentation:
    groups: list[tuple[Element, ...]] = []
    current: list[Element] = []
    for element in sequence:
        if isinstance(element, Divider):
            if current:
                groups.append(tuple(current))
            current = []
            continue
        current.append(element)
    if current:
        groups.append(tuple(current))
    starts_with_divider = bool(sequence) and isinstance(sequence[0], Divider)
    logger.debug("Divider segmentation produced %d groups", len(groups))
    return Segmentation(
        groups=tuple(groups),
        divider_mode=True,
        starts_with_divider=starts_with_divider,
    )


def read_heading_run(sequence: Sequence[Element], start: int) -> int:
    """Return the index just past the heading run beginning at ``start``."""
    end = start + 1
    while end < len(sequence):
        previous, following = sequence[end - 1], sequence[end]
        if not isinstance(following, Heading) or not isinstance(previous, Heading):
            break
        if following.level <= previous.level:
            break
        end += 1
    return end


def _segment_by_headings(sequence: Sequence[Element]) -> tuple[tuple[Element, ...], ...]:
    groups: list[tuple[Element, ...]] = []
    current: list[Element] = []
    # True while ``current`` only holds a banner or pretitle waiting for its heading.
    pre_opened = False

    def start_group(elements: Sequence[Element], *, pre_open: bool) -> None:
        nonlocal current, pre_opened
        if pre_opened:
            current.extend(elements)
        else:
            if current:
                groups.append(tuple(current))
            current = list(elements)
        pre_opened = pre_open

    index = 0
    while index < len(sequence):
        element = sequence[index]
        if index == 0 and is_banner_image(sequence, index):
            start_group([element], pre_open=True)
            index += 1
            continue
        if isinstance(element, Heading):
            if is_pretitle(sequence, index):
                start_group([element], pre_open=True)
                index += 1
                continue
            end = read_heading_run(sequence, index)
            start_group(sequence[index:end], pre_open=False)
            index = end
            continue
        current.append(element)
        pre_opened = False
        index += 1

    if current:
        groups.append(tuple(current))
    logger.debug("Heading segmentation produced %d groups", len(groups))
    return tuple(groups)


def group_level(group: Group, *, include_overflow: bool = False) -> float:
    """Most important heading level of ``group``; infinite when it has none."""
    levels: list[float] = []
    if group.metadata.level is not None:
        levels.append(group.metadata.level)
    if include_overflow:
        levels.extend(group.metadata.overflow_levels)
    return min(levels, default=math.inf)


def classify(groups: Sequence[Group], segmentation: Segmentation) -> Structure:
    metadata = StructureMetadata(divider_mode=segmentation.divider_mode, groups=len(groups))
    if not groups:
        return Structure(metadata=metadata)
    if segmentation.divider_mode and segmentation.starts_with_divider:
        return Structure(items=tuple(groups), metadata=metadata)
    if len(groups) == 1:
        return Structure(main=groups[0], metadata=metadata)

    first_level = group_level(groups[0])
    rest_level = min(group_level(group, include_overflow=True) for group in groups[1:])
    if first_level < rest_level:
        return Structure(main=groups[0], items=tuple(groups[1:]), metadata=metadata)
    return Structure(items=tuple(groups), metadata=metadata)


def structure(document: Mapping[str, Any], options: ParseOptions | None = None) -> Structure:
    """Organize ``document`` into an optional main group plus item groups."""
    sequence = flatten(document, options)
    segmentation = segment(sequence)
    groups = [analyze_group(raw) for raw in segmentation.groups]
    return classify(groups, segmentation)
