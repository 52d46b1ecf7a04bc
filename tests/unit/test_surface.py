# pylint: disable=missing-module-docstring,missing-function-docstring
import pytest
from soupsieve import SelectorSyntaxError

from surface.elements import Surface

from conftest import ballot, candidate_card, el, surface


def test_query_by_tag_id_class_and_attribute() -> None:
    page = surface(
        el("main", text="Rules"),
        el("button", ref="login", id="btn-login", cls="btn primary"),
        el("a", ref="link", href="voting.html"),
    )

    assert page.query("main") is not None
    assert page.query("#btn-login").ref == "login"
    assert page.query(".btn.primary").ref == "login"
    assert page.query('a[href="voting.html"]').ref == "link"
    assert page.query("a[href='voting.html']").ref == "link"
    assert page.query("a[href]").ref == "link"
    assert page.query('a[href="home.html"]') is None


def test_descendant_combinator_requires_ancestor_match() -> None:
    page = surface(ballot(candidate_card(1, "Asha"), candidate_card(2, "Ravi")))

    hit = page.query('.card[data-candidate-number="2"] .btn-vote')
    assert hit is not None
    assert hit.ref == "vote-2"
    assert page.query('.card[data-candidate-number="3"] .btn-vote') is None


def test_query_all_is_document_order() -> None:
    page = surface(ballot(candidate_card(1, "Asha"), candidate_card(2, "Ravi")))
    assert [b.ref for b in page.query_all(".btn-vote")] == ["vote-1", "vote-2"]


def test_query_within_searches_descendants_only() -> None:
    card = candidate_card(1, "Asha", "Unity Party")
    page = surface(card)

    title = page.query(".card-title", within=card)
    assert title is not None and title.text == "Asha"
    assert page.query(".card", within=card) is None


def test_visibility_and_lookup_helpers() -> None:
    page = surface(ballot(visible=False), el("div", id="face-verify-section"))

    assert not page.is_visible("voting-section")
    assert page.is_visible("face-verify-section")
    assert not page.is_visible("missing")
    assert len(page) == 2


def test_closest_with_attribute_walks_ancestors() -> None:
    button = el("button", cls="btn-vote")
    page = surface(el("div", el("span", button), data_candidate_number="04"))

    holder = page.query(".btn-vote").closest_with_attribute("data-candidate-number")
    assert holder is not None
    assert holder.get_attribute("data-candidate-number") == "04"


def test_text_content_collects_descendant_text() -> None:
    main = el("main", el("h1", text="Voting rules"), el("p", text="One vote each."))
    assert main.text_content() == "Voting rules One vote each."


def test_from_snapshot_builds_tree_and_generates_refs() -> None:
    page = Surface.from_snapshot({
        "elements": [
            {
                "id": "voting-section",
                "tag": "SECTION",
                "children": [
                    {"ref": "b1", "tag": "button", "classes": ["btn", "btn-vote"],
                     "attrs": {"data-candidate-number": 1}},
                ],
            },
            {"tag": "div", "class": "modal-content", "visible": False},
        ]
    })

    section = page.get_by_id("voting-section")
    assert section is not None
    assert section.tag == "section"
    assert section.ref.startswith("auto-")

    button = page.get_by_ref("b1")
    assert button is not None
    assert button.parent is section
    assert button.get_attribute("data-candidate-number") == "1"

    modal = page.query(".modal-content")
    assert modal is not None and not modal.visible


def test_from_snapshot_rejects_non_list_payload() -> None:
    with pytest.raises(ValueError):
        Surface.from_snapshot({"elements": "nope"})
    with pytest.raises(ValueError):
        Surface.from_snapshot([1, 2])


@pytest.mark.parametrize("bad", ["div >", "[href=", "a:no-such-state"])
def test_malformed_selectors_raise(bad: str) -> None:
    page = surface(el("div"))
    with pytest.raises(SelectorSyntaxError):
        page.query(bad)


def test_child_combinator_and_not() -> None:
    page = surface(
        el("div", el("span", el("button", ref="deep", cls="btn")), cls="modal-content"),
        el("div", el("button", ref="direct", cls="btn"), cls="modal-content"),
    )

    assert page.query(".modal-content > .btn").ref == "direct"
    assert [b.ref for b in page.query_all(".btn:not(.missing)")] == ["deep", "direct"]


def test_query_within_foreign_element_finds_nothing() -> None:
    page = surface(el("div", el("button", cls="btn")))
    stranger = el("div", el("button", cls="btn"))

    assert page.query(".btn", within=stranger) is None
    assert page.query_all(".btn", within=stranger) == []


def test_snapshot_classes_may_be_a_string_and_scalars_are_coerced() -> None:
    page = Surface.from_snapshot([
        {"ref": 7, "id": "x", "classes": "btn  btn-vote", "text": 3, "attrs": {"data-n": True}},
    ])

    element = page.get_by_id("x")
    assert element is not None
    assert element.ref == "7"
    assert element.classes == frozenset({"btn", "btn-vote"})
    assert element.text == "3"
    assert element.get_attribute("data-n") == "True"


@pytest.mark.parametrize("element", [
    {"id": "x", "attrs": ["bad"]},
    {"id": "x", "children": 5},
    {"id": "x", "classes": 5},
    {"id": "x", "classes": [{"nested": 1}]},
    {"id": "x", "attrs": {"data-n": [1]}},
    {"id": {"nested": 1}},
    {"tag": ["div"]},
    {"children": [{"children": {"not": "a list"}}]},
])
def test_malformed_snapshot_elements_raise_value_error(element: dict[str, object]) -> None:
    with pytest.raises(ValueError):
        Surface.from_snapshot([element])
