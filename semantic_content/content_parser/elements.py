"""Typed sequence elements produced by the flattener.

Every element is a frozen dataclass; the set of element classes is closed and
``kind`` is fixed per class, so later stages dispatch on the class rather
than on node type strings.
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, ClassVar

from .text import TextRun


@dataclass(frozen=True)
class Element:
    kind: ClassVar[str] = "element"

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind}


@dataclass(frozen=True)
class Heading(Element):
    kind: ClassVar[str] = "heading"

    level: int
    text: str
    alignment: str | None = None
    attrs: Mapping[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind,
            "level": self.level,
            "text": self.text,
            "alignment": self.alignment,
            "attrs": dict(self.attrs),
        }


@dataclass(frozen=True)
class Paragraph(Element):
    kind: ClassVar[str] = "paragraph"

    text: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind, "text": self.text}


@dataclass(frozen=True)
class Image(Element):
    kind: ClassVar[str] = "image"

    src: str
    caption: str = ""
    alt: str = ""
    role: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind,
            "src": self.src,
            "caption": self.caption,
            "alt": self.alt,
            "role": self.role,
        }


@dataclass(frozen=True)
class Video(Element):
    kind: ClassVar[str] = "video"

    src: str
    caption: str = ""
    alt: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind, "src": self.src, "caption": self.caption, "alt": self.alt}


@dataclass(frozen=True)
class Icon(Element):
    kind: ClassVar[str] = "icon"

    svg: str | None = None
    url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind, "svg": self.svg, "url": self.url}


@dataclass(frozen=True)
class Button(Element):
    kind: ClassVar[str] = "button"

    text: str
    attrs: Mapping[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind, "text": self.text, "attrs": dict(self.attrs)}


@dataclass(frozen=True)
class Link(Element):
    kind: ClassVar[str] = "link"

    href: str
    label: str
    target: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind, "href": self.href, "label": self.label, "target": self.target}


@dataclass(frozen=True)
class StyledLink(Element):
    """A paragraph whose runs all share one link, kept with the link removed."""

    kind: ClassVar[str] = "styledLink"

    href: str
    target: str
    runs: tuple[TextRun, ...]
    text: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind,
            "href": self.href,
            "target": self.target,
            "text": self.text,
            "runs": [run.to_dict() for run in self.runs],
        }


@dataclass(frozen=True)
class ListItem:
    content: tuple[Element, ...] = ()
    items: tuple[ListItem, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "content": [element.to_dict() for element in self.content],
            "items": [item.to_dict() for item in self.items],
        }


@dataclass(frozen=True)
class ListBlock(Element):
    kind: ClassVar[str] = "list"

    style: str
    items: tuple[ListItem, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind, "style": self.style, "items": [i.to_dict() for i in self.items]}


@dataclass(frozen=True)
class Divider(Element):
    kind: ClassVar[str] = "divider"


@dataclass(frozen=True)
class Blockquote(Element):
    kind: ClassVar[str] = "blockquote"

    content: tuple[Element, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind, "content": [element.to_dict() for element in self.content]}


@dataclass(frozen=True)
class CodeBlock(Element):
    kind: ClassVar[str] = "codeBlock"

    text: str
    parsed: Any = None

    @property
    def value(self) -> Any:
        return self.parsed if self.parsed is not None else self.text

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind, "text": self.text, "parsed": self.parsed}


@dataclass(frozen=True)
class CardGroup(Element):
    kind: ClassVar[str] = "cardGroup"

    cards: tuple[Mapping[str, Any], ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind, "cards": [dict(card) for card in self.cards]}


@dataclass(frozen=True)
class DocumentGroup(Element):
    kind: ClassVar[str] = "documentGroup"

    documents: tuple[Mapping[str, Any], ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind, "documents": [dict(doc) for doc in self.documents]}


@dataclass(frozen=True)
class Form(Element):
    kind: ClassVar[str] = "form"

    data: Any = None
    attrs: Mapping[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind, "data": self.data, "attrs": dict(self.attrs)}


@dataclass(frozen=True)
class Generic(Element):
    """Fallback for node types without a dedicated element."""

    kind: ClassVar[str] = "generic"

    node_type: str
    text: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind, "nodeType": self.node_type, "text": self.text}
