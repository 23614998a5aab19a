"""Index a flat element sequence by element kind, keeping positional context."""
from __future__ import annotations

from collections import Counter
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from .elements import Divider, Element, Heading, Image, ListBlock, Paragraph

IMAGE_ROLES = ("background", "content", "gallery", "icon")


@dataclass(frozen=True)
class ElementContext:
    position: int
    previous: Element | None = None
    next: Element | None = None
    nearest_heading: Heading | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "position": self.position,
            "previous": self.previous.to_dict() if self.previous else None,
            "next": self.next.to_dict() if self.next else None,
            "nearestHeading": self.nearest_heading.to_dict() if self.nearest_heading else None,
        }


@dataclass(frozen=True)
class IndexedElement:
    element: Element
    context: ElementContext

    def to_dict(self) -> dict[str, Any]:
        payload = self.element.to_dict()
        payload["context"] = self.context.to_dict()
        return payload


@dataclass(frozen=True)
class TypeIndex:
    headings: tuple[IndexedElement, ...] = ()
    paragraphs: tuple[IndexedElement, ...] = ()
    images: dict[str, tuple[IndexedElement, ...]] = field(default_factory=dict)
    lists: tuple[IndexedElement, ...] = ()
    dividers: tuple[IndexedElement, ...] = ()
    total_elements: int = 0
    dominant_type: str | None = None
    has_media: bool = False

    def headings_by_level(self, level: int) -> list[IndexedElement]:
        return [
            entry
            for entry in self.headings
            if isinstance(entry.element, Heading) and entry.element.level == level
        ]

    def elements_under(self, predicate: Callable[[Heading], bool]) -> list[IndexedElement]:
        """Paragraphs, images and lists whose nearest preceding heading matches."""
        candidates = [*self.paragraphs]
        for entries in self.images.values():
            candidates.extend(entries)
        candidates.extend(self.lists)
        return [
            entry
            for entry in candidates
            if entry.context.nearest_heading is not None
            and predicate(entry.context.nearest_heading)
        ]

    def to_dict(self) -> dict[str, Any]:
        return {
            "headings": [entry.to_dict() for entry in self.headings],
            "paragraphs": [entry.to_dict() for entry in self.paragraphs],
            "images": {
                role: [entry.to_dict() for entry in entries]
                for role, entries in self.images.items()
            },
            "lists": [entry.to_dict() for entry in self.lists],
            "dividers": [entry.to_dict() for entry in self.dividers],
            "metadata": {
                "totalElements": self.total_elements,
                "dominantType": self.dominant_type,
                "hasMedia": self.has_media,
            },
        }


def element_context(
    sequence: Sequence[Element], position: int, nearest: Heading | None = None
) -> ElementContext:
    """Context for ``sequence[position]``; ``nearest`` is the last heading before it."""
    return ElementContext(
        position=position,
        previous=sequence[position - 1] if position > 0 else None,
        next=sequence[position + 1] if position + 1 < len(sequence) else None,
        nearest_heading=nearest,
    )


def index_by_type(sequence: Sequence[Element]) -> TypeIndex:
    headings: list[IndexedElement] = []
    paragraphs: list[IndexedElement] = []
    images: dict[str, list[IndexedElement]] = {role: [] for role in IMAGE_ROLES}
    lists: list[IndexedElement] = []
    dividers: list[IndexedElement] = []
    frequency: Counter[str] = Counter()
    nearest: Heading | None = None

    for position, element in enumerate(sequence):
        frequency[element.kind] += 1
        context = element_context(sequence, position, nearest)
        entry = IndexedElement(element=element, context=context)
        if isinstance(element, Heading):
            headings.append(entry)
            nearest = element
        elif isinstance(element, Paragraph):
            paragraphs.append(entry)
        elif isinstance(element, Image):
            images.setdefault(element.role or "content", []).append(entry)
        elif isinstance(element, ListBlock):
            lists.append(entry)
        elif isinstance(element, Divider):
            dividers.append(entry)

    # Counter keeps insertion order, so ties go to the kind seen first.
    dominant = None
    highest = 0
    for kind, count in frequency.items():
        if count > highest:
            dominant, highest = kind, count

    return TypeIndex(
        headings=tuple(headings),
        paragraphs=tuple(paragraphs),
        images={role: tuple(entries) for role, entries in images.items()},
        lists=tuple(lists),
        dividers=tuple(dividers),
        total_elements=len(sequence),
        dominant_type=dominant,
        has_media=any(images.values()),
    )
