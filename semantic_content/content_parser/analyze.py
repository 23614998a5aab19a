"""Turn one raw group of elements into a structured group record."""
from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from .elements import (
    Blockquote,
    Button,
    CardGroup,
    CodeBlock,
    DocumentGroup,
    Element,
    Form,
    Heading,
    Icon,
    Image,
    Link,
    ListBlock,
    ListItem,
    Paragraph,
    StyledLink,
    Video,
)
from .text import render_runs

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Media:
    url: str
    caption: str = ""
    alt: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"url": self.url, "caption": self.caption, "alt": self.alt}


@dataclass(frozen=True)
class LinkRef:
    href: str
    label: str
    target: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"href": self.href, "label": self.label, "target": self.target}


@dataclass(frozen=True)
class Header:
    pretitle: str = ""
    title: str = ""
    subtitle: str = ""
    subtitle2: str = ""
    alignment: str | None = None
    description: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "pretitle": self.pretitle,
            "title": self.title,
            "subtitle": self.subtitle,
            "subtitle2": self.subtitle2,
            "alignment": self.alignment,
            "description": self.description,
        }


@dataclass(frozen=True)
class Body:
    paragraphs: tuple[str, ...] = ()
    headings: tuple[str, ...] = ()
    imgs: tuple[Media, ...] = ()
    videos: tuple[Media, ...] = ()
    lists: tuple[tuple[Body, ...], ...] = ()
    links: tuple[LinkRef, ...] = ()
    icons: tuple[dict[str, Any], ...] = ()
    buttons: tuple[dict[str, Any], ...] = ()
    cards: tuple[dict[str, Any], ...] = ()
    documents: tuple[dict[str, Any], ...] = ()
    forms: tuple[Any, ...] = ()
    form: Any = None
    quotes: tuple[Body, ...] = ()
    properties: Any = field(default_factory=dict)
    property_blocks: tuple[Any, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "paragraphs": list(self.paragraphs),
            "headings": list(self.headings),
            "imgs": [img.to_dict() for img in self.imgs],
            "videos": [video.to_dict() for video in self.videos],
            "lists": [[item.to_dict() for item in entries] for entries in self.lists],
            "links": [link.to_dict() for link in self.links],
            "icons": [dict(icon) for icon in self.icons],
            "buttons": [dict(button) for button in self.buttons],
            "cards": [dict(card) for card in self.cards],
            "documents": [dict(document) for document in self.documents],
            "forms": list(self.forms),
            "form": self.form,
            "quotes": [quote.to_dict() for quote in self.quotes],
            "properties": self.properties,
            "propertyBlocks": list(self.property_blocks),
        }


@dataclass(frozen=True)
class GroupMetadata:
    level: int | None = None
    content_types: tuple[str, ...] = ()
    overflow_levels: tuple[int, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "level": self.level,
            "contentTypes": list(self.content_types),
            "overflowLevels": list(self.overflow_levels),
        }


@dataclass(frozen=True)
class Group:
    header: Header
    body: Body
    banner: Media | None = None
    metadata: GroupMetadata = field(default_factory=GroupMetadata)

    def to_dict(self) -> dict[str, Any]:
        return {
            "header": self.header.to_dict(),
            "banner": self.banner.to_dict() if self.banner else None,
            "body": self.body.to_dict(),
            "metadata": self.metadata.to_dict(),
        }


@dataclass
class _BodyBuilder:
    """Mutable accumulator for a single group's body; discarded after build()."""

    paragraphs: list[str] = field(default_factory=list)
    headings: list[str] = field(default_factory=list)
    imgs: list[Media] = field(default_factory=list)
    videos: list[Media] = field(default_factory=list)
    lists: list[tuple[Body, ...]] = field(default_factory=list)
    links: list[LinkRef] = field(default_factory=list)
    icons: list[dict[str, Any]] = field(default_factory=list)
    buttons: list[dict[str, Any]] = field(default_factory=list)
    cards: list[dict[str, Any]] = field(default_factory=list)
    documents: list[dict[str, Any]] = field(default_factory=list)
    forms: list[Any] = field(default_factory=list)
    form: Any = None
    quotes: list[Body] = field(default_factory=list)
    properties: Any = field(default_factory=dict)
    property_blocks: list[Any] = field(default_factory=list)
    content_types: list[str] = field(default_factory=list)
    overflow_levels: list[int] = field(default_factory=list)

    def add(self, element: Element) -> None:
        if element.kind not in self.content_types:
            self.content_types.append(element.kind)
        if isinstance(element, Heading):
            self.headings.append(element.text)
            self.overflow_levels.append(element.level)
        elif isinstance(element, Paragraph):
            self.paragraphs.append(element.text)
        elif isinstance(element, Image):
            self.imgs.append(Media(url=element.src, caption=element.caption, alt=element.alt))
        elif isinstance(element, Video):
            self.videos.append(Media(url=element.src, caption=element.caption, alt=element.alt))
        elif isinstance(element, Link):
            self.links.append(LinkRef(href=element.href, label=element.label, target=element.target))
        elif isinstance(element, StyledLink):
            label = render_runs(element.runs)
            self.links.append(LinkRef(href=element.href, label=label, target=element.target))
        elif isinstance(element, Icon):
            self.icons.append({"svg": element.svg, "url": element.url})
        elif isinstance(element, Button):
            self.buttons.append({"label": element.text, "attrs": dict(element.attrs)})
        elif isinstance(element, ListBlock):
            self.lists.append(tuple(analyze_list_item(item) for item in element.items))
        elif isinstance(element, Blockquote):
            self.quotes.append(analyze_group(element.content).body)
        elif isinstance(element, CodeBlock):
            self.properties = element.value
            self.property_blocks.append(element.value)
        elif isinstance(element, CardGroup):
            self.cards.extend(dict(card) for card in element.cards)
        elif isinstance(element, DocumentGroup):
            self.documents.extend(dict(document) for document in element.documents)
        elif isinstance(element, Form):
            self.forms.append(element.data)
            self.form = element.data
        else:
            logger.debug("Dropping %s element from group body", element.kind)

    def build(self) -> Body:
        return Body(
            paragraphs=tuple(self.paragraphs),
            headings=tuple(self.headings),
            imgs=tuple(self.imgs),
            videos=tuple(self.videos),
            lists=tuple(self.lists),
            links=tuple(self.links),
            icons=tuple(self.icons),
            buttons=tuple(self.buttons),
            cards=tuple(self.cards),
            documents=tuple(self.documents),
            forms=tuple(self.forms),
            form=self.form,
            quotes=tuple(self.quotes),
            properties=self.properties,
            property_blocks=tuple(self.property_blocks),
        )


def is_pretitle(elements: Sequence[Element], index: int) -> bool:
    """A heading directly followed by a more important heading."""
    if index + 1 >= len(elements):
        return False
    current, following = elements[index], elements[index + 1]
    return (
        isinstance(current, Heading)
        and isinstance(following, Heading)
        and current.level > following.level
    )


def is_banner_image(elements: Sequence[Element], index: int) -> bool:
    """An image directly followed by a heading."""
    if index + 1 >= len(elements):
        return False
    return isinstance(elements[index], Image) and isinstance(elements[index + 1], Heading)


def analyze_group(elements: Sequence[Element]) -> Group:
    header: dict[str, Any] = {
        "pretitle": "",
        "title": "",
        "subtitle": "",
        "subtitle2": "",
        "alignment": None,
    }
    banner: Media | None = None
    level: int | None = None
    body = _BodyBuilder()
    in_body = False

    for index, element in enumerate(elements):
        if in_body:
            body.add(element)
            continue

        if isinstance(element, Heading):
            if not header["title"] and is_pretitle(elements, index):
                # In a chain (H3, H2, H1) the first heading is the pretitle and
                # the ones between it and the title are kept as body headings.
                if header["pretitle"]:
                    body.add(element)
                else:
                    header["pretitle"] = element.text
                continue
            if level is None:
                level = element.level
                header["alignment"] = element.alignment
            if not header["title"]:
                header["title"] = element.text
            elif not header["subtitle"]:
                header["subtitle"] = element.text
            else:
                header["subtitle2"] = element.text
                in_body = True
            continue

        if banner is None and isinstance(element, Image) and is_banner_image(elements, index):
            banner = Media(url=element.src, caption=element.caption, alt=element.alt)
            continue

        in_body = True
        body.add(element)

    built = body.build()
    description = header["subtitle2"] or (built.paragraphs[0] if built.paragraphs else "")
    return Group(
        header=Header(description=description, **header),
        body=built,
        banner=banner,
        metadata=GroupMetadata(
            level=level,
            content_types=tuple(body.content_types),
            overflow_levels=tuple(body.overflow_levels),
        ),
    )


def analyze_list_item(item: ListItem) -> Body:
    """Analyze one list item; its nested sub-items become the item's own list."""
    result = analyze_group(item.content).body
    if not item.items:
        return result
    nested = tuple(analyze_list_item(sub_item) for sub_item in item.items)
    return Body(
        paragraphs=result.paragraphs,
        headings=result.headings,
        imgs=result.imgs,
        videos=result.videos,
        lists=result.lists + (nested,),
        links=result.links,
        icons=result.icons,
        buttons=result.buttons,
        cards=result.cards,
        documents=result.documents,
        forms=result.forms,
        form=result.form,
        quotes=result.quotes,
        properties=result.properties,
        property_blocks=result.property_blocks,
    )
