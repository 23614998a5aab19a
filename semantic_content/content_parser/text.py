"""Inline text model and markup rendering."""
from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Any
from urllib.parse import urlsplit

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

COLOR_MARKS = {"textStyle", "color"}
BREAK_NODES = {"hardBreak", "lineBreak"}

FILE_EXTENSIONS = {
    "pdf",
    "doc",
    "docx",
    "xls",
    "xlsx",
    "ppt",
    "pptx",
    "jpg",
    "jpeg",
    "png",
    "webp",
    "gif",
    "svg",
    "mp4",
    "mp3",
    "wav",
    "mov",
    "zip",
}

BREAK_TOKEN = "<br>"


@dataclass(frozen=True)
class Mark:
    """One inline decoration (bold, link, ...) with its attributes."""

    type: str
    attrs: Mapping[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "attrs": dict(self.attrs)}


@dataclass(frozen=True)
class TextRun:
    """A run of text carrying the same decorations, or a line break."""

    text: str
    marks: tuple[Mark, ...] = ()
    is_break: bool = False

    def mark(self, mark_type: str) -> Mark | None:
        for mark in self.marks:
            if mark.type == mark_type:
                return mark
        return None

    def has_mark(self, mark_type: str) -> bool:
        return self.mark(mark_type) is not None

    def without(self, mark_type: str) -> TextRun:
        kept = tuple(mark for mark in self.marks if mark.type != mark_type)
        return TextRun(text=self.text, marks=kept, is_break=self.is_break)

    def to_dict(self) -> dict[str, Any]:
        if self.is_break:
            return {"type": "hardBreak"}
        return {"type": "text", "text": self.text, "marks": [m.to_dict() for m in self.marks]}


def parse_marks(raw_marks: Any) -> tuple[Mark, ...]:
    if not isinstance(raw_marks, list):
        return ()
    marks: list[Mark] = []
    for raw in raw_marks:
        if not isinstance(raw, Mapping):
            continue
        mark_type = str(raw.get("type") or "")
        if not mark_type:
            continue
        attrs = raw.get("attrs")
        marks.append(Mark(type=mark_type, attrs=dict(attrs) if isinstance(attrs, Mapping) else {}))
    return tuple(marks)


def to_run(node: Mapping[str, Any]) -> TextRun | None:
    """Convert an inline node to a run; ``None`` for non-text inline nodes."""
    node_type = node.get("type")
    if node_type == "text":
        return TextRun(text=str(node.get("text") or ""), marks=parse_marks(node.get("marks")))
    if node_type in BREAK_NODES:
        return TextRun(text="", is_break=True)
    return None


def to_runs(content: Iterable[Any] | None) -> tuple[TextRun, ...]:
    if not content:
        return ()
    runs: list[TextRun] = []
    for node in content:
        if not isinstance(node, Mapping):
            continue
        run = to_run(node)
        if run is None:
            logger.debug("Ignoring inline node of type %r", node.get("type"))
            continue
        runs.append(run)
    return tuple(runs)


def is_file_link(href: str) -> bool:
    suffix = PurePosixPath(urlsplit(href).path).suffix
    return suffix.lstrip(".").lower() in FILE_EXTENSIONS


def render_run(run: TextRun) -> str:
    if run.is_break:
        return BREAK_TOKEN
    styled = run.text
    for mark in run.marks:
        if mark.type in COLOR_MARKS:
            color = mark.attrs.get("color")
            if color:
                styled = f'<span style="color: var(--{color})">{styled}</span>'
            break
    if run.has_mark("highlight"):
        styled = f'<span style="background-color: var(--highlight)">{styled}</span>'
    if run.has_mark("bold"):
        styled = f"<strong>{styled}</strong>"
    if run.has_mark("italic"):
        styled = f"<em>{styled}</em>"
    link = run.mark("link")
    if link is not None:
        href = str(link.attrs.get("href") or "")
        target = link.attrs.get("target") or "_self"
        download = " download" if is_file_link(href) else ""
        styled = f'<a href="{href}" target="{target}"{download}>{styled}</a>'
    return styled


def render_runs(runs: Iterable[TextRun]) -> str:
    """Render runs to markup.

    Decorations nest color, highlight, bold, italic, link from the inside
    out, so a link always wraps the other styles.
    """
    return "".join(render_run(run) for run in runs).strip()


def render_inline(content: Iterable[Any] | None) -> str:
    return render_runs(to_runs(content))


def plain_text(content: Iterable[Any] | None) -> str:
    """Concatenate the raw text of inline nodes, ignoring decorations."""
    return "".join(run.text for run in to_runs(content) if not run.is_break)


def strip_tags(value: Any) -> str:
    if not value or not isinstance(value, str):
        return ""
    if "<" not in value and "&" not in value:
        return value
    return BeautifulSoup(value, "lxml").get_text()
