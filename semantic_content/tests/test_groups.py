from __future__ import annotations

import json
from typing import Any

import pytest

from semantic_content.content_parser.elements import Divider
from semantic_content.content_parser.groups import segment, structure
from semantic_content.content_parser.sequence import flatten

SAMPLE_NAMES = [
    "simple_document",
    "divider_groups",
    "heading_groups",
    "nested_headings",
    "multiple_h1s",
    "academic_experience",
    "subtitle_and_items",
    "complex_hierarchy",
    "simple_list",
    "skipped_levels",
    "mixed_content",
    "rich_body",
]


def doc(*nodes: dict[str, Any]) -> dict[str, Any]:
    return {"type": "doc", "content": list(nodes)}


def h(level: int, value: str) -> dict[str, Any]:
    return {"type": "heading", "attrs": {"level": level}, "content": [{"type": "text", "text": value}]}


def p(value: str) -> dict[str, Any]:
    return {"type": "paragraph", "content": [{"type": "text", "text": value}]}


def img(src: str) -> dict[str, Any]:
    return {"type": "image", "attrs": {"src": src}}


HR = {"type": "horizontalRule"}


@pytest.mark.parametrize("name", SAMPLE_NAMES)
def test_segments_partition_the_sequence(load_sample, name: str) -> None:
    sequence = flatten(load_sample(name))
    segmentation = segment(sequence)
    rebuilt = [element for group in segmentation.groups for element in group]
    assert rebuilt == [element for element in sequence if not isinstance(element, Divider)]
    assert all(segmentation.groups)


@pytest.mark.parametrize("name", SAMPLE_NAMES)
def test_structure_is_deterministic_and_main_is_not_an_item(load_sample, name: str) -> None:
    document = load_sample(name)
    first = structure(document)
    second = structure(document)
    assert json.dumps(first.to_dict()) == json.dumps(second.to_dict())
    assert all(item is not first.main for item in first.items)
    for group in ([first.main] if first.main else []) + list(first.items):
        header = group.header
        if header.subtitle:
            assert header.title
        if header.subtitle2:
            assert header.subtitle


def test_simple_document_has_main_only(load_sample) -> None:
    result = structure(load_sample("simple_document"))
    assert result.main is not None
    assert result.main.header.title == "Main Title"
    assert result.items == ()


def test_divider_groups(load_sample) -> None:
    result = structure(load_sample("divider_groups"))
    assert result.metadata.divider_mode
    assert result.main is not None
    assert result.main.header.title == "Main Section"
    assert len(result.items) == 2
    assert [item.body.paragraphs for item in result.items] == [
        ("First group content.",),
        ("Second group content.",),
    ]


def test_resume_pattern(load_sample) -> None:
    result = structure(load_sample("academic_experience"))
    assert result.main is not None
    assert result.main.header.title == "Academic Experience"
    assert result.main.header.subtitle != "Ph.D. in CS"
    assert len(result.items) == 2
    assert result.items[0].header.title == "Ph.D. in CS"
    assert result.items[0].header.subtitle == "2014-2018"
    assert result.items[0].body.paragraphs == ("MIT",)
    assert result.items[1].header.title == "Masters in Data"


def test_resume_pattern_without_separator_folds_first_run_into_main() -> None:
    result = structure(
        doc(
            h(1, "Academic Experience"),
            h(2, "Ph.D. in CS"),
            h(3, "2014-2018"),
            p("MIT"),
            h(2, "Masters in Data"),
            h(3, "2012-2014"),
            p("Berkeley"),
        )
    )
    assert result.main is not None
    assert result.main.header.subtitle == "Ph.D. in CS"
    assert result.main.header.subtitle2 == "2014-2018"
    assert [item.header.title for item in result.items] == ["Masters in Data"]


def test_leaf_heading_is_subtitle_and_branches_are_items(load_sample) -> None:
    result = structure(load_sample("subtitle_and_items"))
    assert result.main is not None
    assert result.main.header.subtitle == "A summary of my roles."
    assert len(result.items) == 2
    assert result.items[0].header.title == "Google"
    assert result.items[0].header.subtitle == "2020-Present"
    assert result.items[1].header.title == "Facebook"


def test_siblings_without_enclosing_heading_have_no_main(load_sample) -> None:
    result = structure(load_sample("simple_list"))
    assert result.main is None
    assert [item.header.title for item in result.items] == ["Apple", "Banana"]


def test_multiple_h1s_have_no_main(load_sample) -> None:
    result = structure(load_sample("multiple_h1s"))
    assert result.main is None
    assert [item.header.title for item in result.items] == ["First H1", "Second H1"]


def test_heading_groups(load_sample) -> None:
    result = structure(load_sample("heading_groups"))
    assert result.main is not None
    assert result.main.header.description == "Our main features."
    assert [item.header.title for item in result.items] == ["Feature One", "Feature Two"]


def test_nested_headings_fill_the_whole_header(load_sample) -> None:
    result = structure(load_sample("nested_headings"))
    assert result.main is not None
    header = result.main.header
    assert (header.pretitle, header.title, header.subtitle, header.subtitle2) == (
        "WELCOME",
        "Main Title",
        "Subtitle",
        "Subsubtitle",
    )
    assert result.main.body.paragraphs == ("Content.",)
    assert result.items == ()


def test_complex_hierarchy(load_sample) -> None:
    result = structure(load_sample("complex_hierarchy"))
    assert result.main is not None
    assert result.main.header.pretitle == "INTRO"
    assert result.main.header.title == "About Me"
    assert result.main.header.subtitle == "Short Bio"
    (item,) = result.items
    assert item.header.title == "My Hobbies"
    assert item.header.subtitle == "Reading"
    assert item.body.paragraphs == ("I love books.",)


def test_skipped_levels(load_sample) -> None:
    result = structure(load_sample("skipped_levels"))
    assert result.main is not None
    assert result.main.header.title == "Skills"
    assert [item.header.title for item in result.items] == ["JavaScript", "Python"]


def test_pretitle_at_a_later_group_start() -> None:
    result = structure(doc(h(1, "Main"), p("Intro."), h(3, "KICKER"), h(2, "Item"), p("Body.")))
    assert result.main is not None
    assert result.main.body.paragraphs == ("Intro.",)
    (item,) = result.items
    assert item.header.pretitle == "KICKER"
    assert item.header.title == "Item"


def test_banner_at_document_start() -> None:
    result = structure(doc(img("hero.jpg"), h(1, "Main"), p("Intro.")))
    assert result.main is not None
    assert result.main.banner is not None
    assert result.main.banner.url == "hero.jpg"
    assert result.main.header.title == "Main"
    assert result.main.body.imgs == ()


def test_banner_later_in_document_stays_with_previous_group() -> None:
    result = structure(doc(h(1, "Main"), p("Intro."), img("card.jpg"), h(2, "Item"), p("Body.")))
    assert result.main is not None
    assert [image.url for image in result.main.body.imgs] == ["card.jpg"]
    (item,) = result.items
    assert item.banner is None
    assert item.header.title == "Item"


def test_leading_divider_means_no_main() -> None:
    result = structure(doc(HR, h(1, "One"), p("a"), HR, HR, h(2, "Two"), p("b")))
    assert result.main is None
    assert len(result.items) == 2
    assert result.metadata.to_dict() == {"dividerMode": True, "groups": 2}


def test_empty_and_divider_only_documents() -> None:
    assert structure(doc()).to_dict() == {
        "main": None,
        "items": [],
        "metadata": {"dividerMode": False, "groups": 0},
    }
    only_dividers = structure(doc(HR, HR))
    assert only_dividers.main is None
    assert only_dividers.items == ()


def test_overflow_levels_count_against_the_first_group() -> None:
    result = structure(doc(h(2, "First"), p("a"), HR, h(3, "Second"), p("b"), h(1, "Big")))
    assert result.main is None
    assert [item.header.title for item in result.items] == ["First", "Second"]


def test_non_monotonic_levels_compare_against_the_minimum() -> None:
    result = structure(doc(h(2, "A"), p("a"), h(1, "B"), p("b"), h(3, "C"), p("c")))
    assert result.main is None
    assert len(result.items) == 3

    promoted = structure(doc(h(1, "A"), p("a"), h(3, "B"), p("b"), h(2, "C"), p("c")))
    assert promoted.main is not None
    assert promoted.main.header.title == "A"
    assert [item.header.title for item in promoted.items] == ["B", "C"]


def test_group_without_headings_never_outranks_the_first() -> None:
    result = structure(doc(h(3, "Title"), p("a"), HR, p("b")))
    assert result.main is not None
    assert result.main.header.title == "Title"
    assert result.items[0].body.paragraphs == ("b",)


EDGE_SHAPES = {
    "banner_then_pretitle_chain": [img("hero.jpg"), h(3, "A"), h(2, "B"), h(1, "C"), p("c")],
    "pretitle_chain_mid_document": [h(1, "Main"), p("m"), h(4, "A"), h(3, "B"), h(2, "C"), p("c")],
    "banner_only": [img("hero.jpg"), h(2, "Only")],
    "image_without_heading": [img("a.jpg"), p("a"), img("b.jpg")],
    "dividers_between_heading_runs": [
        img("hero.jpg"),
        h(1, "A"),
        h(2, "B"),
        HR,
        h(3, "C"),
        h(2, "D"),
        HR,
        HR,
        p("d"),
        h(1, "E"),
    ],
    "trailing_pretitle": [h(2, "A"), p("a"), h(3, "B"), h(1, "C")],
    "headings_only_descending": [h(6, "A"), h(5, "B"), h(4, "C"), h(3, "D")],
    "repeated_equal_levels": [h(2, "A"), h(2, "B"), h(2, "C")],
}


@pytest.mark.parametrize("name", sorted(EDGE_SHAPES))
def test_partition_and_single_main_hold_for_edge_shapes(name: str) -> None:
    document = doc(*EDGE_SHAPES[name])
    sequence = flatten(document)
    segmentation = segment(sequence)
    rebuilt = [element for group in segmentation.groups for element in group]
    assert rebuilt == [element for element in sequence if not isinstance(element, Divider)]
    assert all(segmentation.groups)

    result = structure(document)
    assert all(item is not result.main for item in result.items)
    assert len(result.items) + (1 if result.main else 0) == len(segmentation.groups)
    for group in ([result.main] if result.main else []) + list(result.items):
        if group.header.subtitle:
            assert group.header.title
        if group.header.subtitle2:
            assert group.header.subtitle


def test_banner_and_pretitle_chain_share_the_first_group() -> None:
    result = structure(doc(*EDGE_SHAPES["banner_then_pretitle_chain"]))
    assert result.main is not None
    assert result.items == ()
    assert result.main.banner is not None
    assert result.main.banner.url == "hero.jpg"
    assert result.main.header.pretitle == "A"
    assert result.main.header.title == "C"
    assert result.main.metadata.level == 1


def test_empty_paragraph_between_headings_does_not_split_the_header() -> None:
    empty = {"type": "paragraph", "content": []}
    result = structure(doc(h(1, "Title"), empty, h(2, "Tagline"), p("Body.")))
    assert result.main is not None
    assert result.items == ()
    assert result.main.header.title == "Title"
    assert result.main.header.subtitle == "Tagline"
    assert result.main.body.paragraphs == ("Body.",)
