"""Flatten a ProseMirror/TipTap document into a sequence of typed elements."""
from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

from .elements import (
    Blockquote,
    Button,
    CardGroup,
    CodeBlock,
    Divider,
    DocumentGroup,
    Element,
    Form,
    Generic,
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
from .options import ParseOptions
from .text import TextRun, plain_text, render_inline, render_runs, strip_tags, to_run

logger = logging.getLogger(__name__)

IMAGE_NODES = {"image", "ImageBlock"}
VIDEO_NODES = {"video", "Video"}
ICON_NODES = {"icon", "Icon", "UniwebIcon"}
DIVIDER_NODES = {"horizontalRule", "DividerBlock"}
FORM_NODES = {"form-block", "FormBlock"}
LIST_NODES = {"bulletList": "bullet", "orderedList": "ordered"}


def flatten(document: Mapping[str, Any], options: ParseOptions | None = None) -> tuple[Element, ...]:
    """Return the top-level elements of ``document`` in document order."""
    if not isinstance(document, Mapping):
        raise TypeError(f"document must be a mapping, got {type(document).__name__}")
    opts = options or ParseOptions()
    return _flatten_nodes(document.get("content"), opts, depth=0)


def _flatten_nodes(nodes: Any, options: ParseOptions, *, depth: int) -> tuple[Element, ...]:
    if not isinstance(nodes, list):
        return ()
    elements: list[Element] = []
    for node in nodes:
        if not isinstance(node, Mapping):
            continue
        element = build_element(node, options, depth=depth)
        if element is not None:
            elements.append(element)
    return tuple(elements)


def _attrs(node: Mapping[str, Any]) -> dict[str, Any]:
    attrs = node.get("attrs")
    return dict(attrs) if isinstance(attrs, Mapping) else {}


def _children(node: Mapping[str, Any]) -> list[Mapping[str, Any]]:
    content = node.get("content")
    if not isinstance(content, list):
        return []
    return [child for child in content if isinstance(child, Mapping)]


def _is_blank_text(child: Mapping[str, Any]) -> bool:
    return child.get("type") == "text" and not str(child.get("text") or "").strip()


def build_element(
    node: Mapping[str, Any], options: ParseOptions, *, depth: int = 0
) -> Element | None:
    """Build one element, or ``None`` for nodes that carry nothing to render."""
    node_type = str(node.get("type") or "")
    if node_type == "paragraph":
        return _classify_paragraph(node)
    if node_type == "heading":
        attrs = _attrs(node)
        return Heading(
            level=_level(attrs.get("level")),
            text=render_inline(node.get("content")),
            alignment=attrs.get("textAlign") or None,
            attrs=attrs,
        )
    if node_type in IMAGE_NODES:
        return _image(_attrs(node))
    if node_type in VIDEO_NODES:
        return _video(_attrs(node))
    if node_type in ICON_NODES:
        return _icon(_attrs(node))
    if node_type in LIST_NODES:
        return ListBlock(
            style=LIST_NODES[node_type],
            items=_list_items(node, options, depth=depth + 1),
        )
    if node_type in DIVIDER_NODES:
        return Divider()
    if node_type == "blockquote":
        if depth + 1 > options.max_depth:
            logger.warning("Blockquote nested deeper than %d levels truncated", options.max_depth)
            return Blockquote()
        return Blockquote(content=_flatten_nodes(node.get("content"), options, depth=depth + 1))
    if node_type == "codeBlock":
        return _code_block(node, options)
    if node_type == "card-group":
        cards = [
            project_card(_attrs(child))
            for child in _children(node)
            if child.get("type") == "card" and not _attrs(child).get("hidden")
        ]
        return CardGroup(cards=tuple(cards))
    if node_type == "document-group":
        documents = [
            project_document(_attrs(child))
            for child in _children(node)
            if child.get("type") == "document"
        ]
        return DocumentGroup(documents=tuple(documents))
    if node_type in FORM_NODES:
        attrs = _attrs(node)
        return Form(data=parse_payload(attrs.get("data")), attrs=attrs)
    if node_type == "button":
        text = render_inline(node.get("content"))
        if not text:
            return None
        return Button(text=text, attrs=_attrs(node))
    if node_type == "text":
        return None
    logger.debug("Unrecognised node type %r kept as generic element", node_type)
    return Generic(node_type=node_type, text=render_inline(node.get("content")))


def _level(value: Any) -> int:
    try:
        return max(int(value), 1)
    except (TypeError, ValueError, OverflowError):
        return 1


def _classify_paragraph(node: Mapping[str, Any]) -> Element | None:
    children = _children(node)
    eligible = [child for child in children if not _is_blank_text(child)]

    if len(eligible) == 1:
        only = eligible[0]
        only_type = only.get("type")
        if only_type in IMAGE_NODES:
            attrs = _attrs(only)
            role = attrs.get("role")
            if role == "icon":
                return _icon(attrs)
            if role == "video":
                return _video(attrs)
            return _image(attrs)
        elif only_type == "text":
            run = to_run(only)
            if run is not None:
                button = run.mark("button")
                if button is not None:
                    return Button(text=run.text, attrs=dict(button.attrs))
                link = run.mark("link")
                if link is not None:
                    return Link(
                        href=str(link.attrs.get("href") or ""),
                        label=run.text,
                        target=link.attrs.get("target") or None,
                    )

    styled = _styled_link(children)
    if styled is not None:
        return styled

    text = render_inline(children)
    if not text:
        return None
    return Paragraph(text=text)


def _styled_link(children: list[Mapping[str, Any]]) -> StyledLink | None:
    parts = [
        child
        for child in children
        if child.get("type") not in ICON_NODES and child.get("type") not in IMAGE_NODES
    ]
    if len(parts) < 2:
        return None
    runs: list[TextRun] = []
    for part in parts:
        run = to_run(part)
        if run is None:
            return None
        runs.append(run)
    first_link = runs[0].mark("link")
    if first_link is None:
        return None
    href = first_link.attrs.get("href")
    for run in runs:
        link = run.mark("link")
        if link is None or link.attrs.get("href") != href:
            return None
    cleaned = tuple(run.without("link") for run in runs)
    return StyledLink(
        href=str(href or ""),
        target=first_link.attrs.get("target") or "_self",
        runs=cleaned,
        text=render_runs(cleaned),
    )


def _image(attrs: Mapping[str, Any]) -> Image:
    caption = strip_tags(attrs.get("caption") or attrs.get("title") or "")
    return Image(
        src=str(attrs.get("src") or attrs.get("url") or ""),
        caption=caption,
        alt=str(attrs.get("alt") or caption),
        role=attrs.get("role") or None,
    )


def _video(attrs: Mapping[str, Any]) -> Video:
    caption = strip_tags(attrs.get("caption") or attrs.get("title") or "")
    return Video(
        src=str(attrs.get("src") or ""),
        caption=caption,
        alt=str(attrs.get("alt") or caption),
    )


def _icon(attrs: Mapping[str, Any]) -> Icon:
    return Icon(svg=attrs.get("svg") or None, url=attrs.get("url") or attrs.get("src") or None)


def _list_items(
    node: Mapping[str, Any], options: ParseOptions, *, depth: int
) -> tuple[ListItem, ...]:
    if depth > options.max_depth:
        logger.warning("List nested deeper than %d levels truncated", options.max_depth)
        return ()
    items: list[ListItem] = []
    for child in _children(node):
        if child.get("type") != "listItem":
            continue
        parts = _children(child)
        content = [part for part in parts if part.get("type") not in LIST_NODES]
        nested: list[ListItem] = []
        for part in parts:
            if part.get("type") in LIST_NODES:
                nested.extend(_list_items(part, options, depth=depth + 1))
        items.append(
            ListItem(
                content=_flatten_nodes(content, options, depth=depth),
                items=tuple(nested),
            )
        )
    return tuple(items)


def _code_block(node: Mapping[str, Any], options: ParseOptions) -> CodeBlock:
    text = plain_text(node.get("content"))
    parsed = None
    if options.parse_code_as_json:
        try:
            parsed = json.loads(text)
        except (ValueError, RecursionError):
            logger.debug("Code block is not valid JSON; keeping raw text")
    return CodeBlock(text=text, parsed=parsed)


def parse_payload(value: Any) -> Any:
    """Decode a JSON string payload, returning the value unchanged on failure."""
    if not isinstance(value, str):
        return value
    try:
        return json.loads(value)
    except (ValueError, RecursionError):
        logger.debug("Payload is not valid JSON; keeping raw value")
        return value


def _asset_url(value: Any) -> str:
    if isinstance(value, Mapping):
        return str(value.get("src") or value.get("url") or "")
    if isinstance(value, str):
        return value
    return ""


def project_card(attrs: Mapping[str, Any]) -> dict[str, Any]:
    card = {key: value for key, value in attrs.items() if key != "hidden"}
    address = card.get("address")
    decoded = None
    if isinstance(address, str) and address:
        try:
            decoded = json.loads(address)
        except (ValueError, RecursionError):
            logger.debug("Card address is not valid JSON; dropping it")
    elif isinstance(address, Mapping):
        decoded = dict(address)
    card["address"] = decoded
    card["coverImg"] = _asset_url(card.get("coverImg"))
    icon = card.get("icon")
    if isinstance(icon, Mapping):
        card["icon"] = _icon(icon).to_dict()
    card["type"] = "card"
    return card


def project_document(attrs: Mapping[str, Any]) -> dict[str, Any]:
    document = {key: value for key, value in attrs.items() if key not in {"src", "info"}}
    document["coverImg"] = _asset_url(attrs.get("coverImg"))
    if attrs.get("src"):
        document["href"] = attrs["src"]
    document["type"] = "document"
    return document

