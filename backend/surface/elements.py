"""
Interaction-surface snapshot model.

A Surface is a read-only tree of Elements describing what the hosting
page currently renders: identifiers, classes, attributes, text,
visibility, and disabled flags. The host page pushes a fresh snapshot
whenever it re-renders; every lookup reads the latest one.

Element.ref is the opaque handle the host page uses to invoke or clear
an element. It is unique within one snapshot only.

CSS selector queries are answered by soupsieve (through BeautifulSoup).
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, Mapping

from bs4 import BeautifulSoup, Tag


_INDEX_ATTR = "data-surface-index"


@dataclass(eq=False)
class Element:
    """Single node of a surface snapshot."""

    ref: str
    tag: str = "div"
    element_id: str | None = None
    classes: frozenset[str] = frozenset()
    attrs: dict[str, str] = field(default_factory=dict)
    text: str = ""
    visible: bool = True
    disabled: bool = False
    children: list[Element] = field(default_factory=list)
    parent: Element | None = field(default=None, repr=False)

    def get_attribute(self, name: str) -> str | None:
        if name == "id":
            return self.element_id
        if name == "class":
            return " ".join(sorted(self.classes)) if self.classes else None
        return self.attrs.get(name)

    def iter_descendants(self) -> Iterator[Element]:
        """Pre-order traversal excluding self."""
        for child in self.children:
            yield child
            yield from child.iter_descendants()

    def closest_with_attribute(self, name: str) -> Element | None:
        """Nearest element (self first, then ancestors) carrying attribute `name`."""
        node: Element | None = self
        while node is not None:
            if node.get_attribute(name) is not None:
                return node
            node = node.parent
        return None

    def text_content(self) -> str:
        """Own text followed by descendant text, whitespace-joined."""
        parts = [self.text] + [d.text for d in self.iter_descendants()]
        return " ".join(p for p in parts if p)

    def describe(self) -> dict[str, Any]:
        """Compact identity for log records."""
        return {
            "ref": self.ref,
            "id": self.element_id,
            "tag": self.tag,
            "classes": sorted(self.classes),
            "visible": self.visible,
            "disabled": self.disabled,
        }


class Surface:
    """
    Read-only snapshot of the hosting page.

    Selector queries run on a BeautifulSoup mirror of the element tree,
    built on first use; each mirrored tag carries the index of its
    Element so matches map back to snapshot elements.
    """

    def __init__(self, roots: Iterable[Element] = ()) -> None:
        self._roots: list[Element] = list(roots)
        for root in self._roots:
            _link_parents(root)
        self._document: BeautifulSoup | None = None
        self._indexed: list[Element] = []
        self._tags: dict[Element, Tag] = {}

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def empty(cls) -> Surface:
        return cls()

    @classmethod
    def from_snapshot(cls, data: Any) -> Surface:
        """
        Build a surface from the host page's JSON snapshot.

        Accepts a list of element dicts or a dict with an "elements" list.
        Missing refs are generated; unknown keys are ignored.

        Raises:
            ValueError if the payload or any element has the wrong shape.
        """
        if isinstance(data, Mapping):
            data = data.get("elements", [])
        if not isinstance(data, list):
            raise ValueError("Surface snapshot must be a list of elements")
        counter = itertools.count(1)
        return cls([_element_from_dict(item, counter) for item in data])

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def iter_elements(self) -> Iterator[Element]:
        for root in self._roots:
            yield root
            yield from root.iter_descendants()

    def get_by_id(self, element_id: str) -> Element | None:
        for element in self.iter_elements():
            if element.element_id == element_id:
                return element
        return None

    def get_by_ref(self, ref: str) -> Element | None:
        for element in self.iter_elements():
            if element.ref == ref:
                return element
        return None

    def query(self, selector: str, within: Element | None = None) -> Element | None:
        """
        First element in document order matching a CSS selector, or None.

        With `within`, only its descendants are searched.

        Raises:
            soupsieve.SelectorSyntaxError for malformed selectors.
        """
        scope = self._scope(within)
        if scope is None:
            return None
        tag = scope.select_one(selector)
        return self._element_for(tag) if tag is not None else None

    def query_all(self, selector: str, within: Element | None = None) -> list[Element]:
        scope = self._scope(within)
        if scope is None:
            return []
        return [self._element_for(tag) for tag in scope.select(selector)]

    def is_visible(self, element_id: str) -> bool:
        """True if the element exists and is visible."""
        element = self.get_by_id(element_id)
        return element is not None and element.visible

    def __len__(self) -> int:
        return sum(1 for _ in self.iter_elements())

    # ------------------------------------------------------------------
    # Markup mirror
    # ------------------------------------------------------------------

    def _scope(self, within: Element | None) -> Tag | None:
        document = self._mirror()
        if within is None:
            return document
        return self._tags.get(within)

    def _mirror(self) -> BeautifulSoup:
        if self._document is None:
            document = BeautifulSoup("", "html.parser")
            for root in self._roots:
                document.append(self._mirror_element(document, root))
            self._document = document
        return self._document

    def _mirror_element(self, document: BeautifulSoup, element: Element) -> Tag:
        attrs = dict(element.attrs)
        if element.element_id:
            attrs["id"] = element.element_id
        if element.classes:
            attrs["class"] = " ".join(sorted(element.classes))
        attrs[_INDEX_ATTR] = str(len(self._indexed))
        self._indexed.append(element)

        tag = document.new_tag(element.tag, attrs=attrs)
        self._tags[element] = tag
        for child in element.children:
            tag.append(self._mirror_element(document, child))
        return tag

    def _element_for(self, tag: Tag) -> Element:
        return self._indexed[int(str(tag[_INDEX_ATTR]))]


# ---------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------

def _link_parents(element: Element) -> None:
    for child in element.children:
        child.parent = element
        _link_parents(child)


def _scalar(raw: Any, field_name: str) -> str | None:
    if raw is None:
        return None
    if isinstance(raw, (str, int, float, bool)):
        return str(raw)
    raise ValueError(f"Surface element {field_name!r} must be a scalar")


def _element_from_dict(raw: Any, counter: Iterator[int]) -> Element:
    if not isinstance(raw, Mapping):
        raise ValueError("Surface element must be an object")

    classes = raw.get("classes", raw.get("class")) or ()
    if isinstance(classes, str):
        classes = classes.split()
    if not isinstance(classes, (list, tuple)):
        raise ValueError("Surface element 'classes' must be a list or string")

    attrs = raw.get("attrs") or {}
    if not isinstance(attrs, Mapping):
        raise ValueError("Surface element 'attrs' must be an object")

    children = raw.get("children") or []
    if not isinstance(children, list):
        raise ValueError("Surface element 'children' must be a list")

    tag = _scalar(raw.get("tag"), "tag") or "div"

    return Element(
        ref=_scalar(raw.get("ref"), "ref") or f"auto-{next(counter)}",
        tag=tag.lower(),
        element_id=_scalar(raw.get("id"), "id") or None,
        classes=frozenset(_scalar(c, "classes") or "" for c in classes) - {""},
        attrs={str(k): _scalar(v, k) or "" for k, v in attrs.items()},
        text=_scalar(raw.get("text"), "text") or "",
        visible=bool(raw.get("visible", True)),
        disabled=bool(raw.get("disabled", False)),
        children=[_element_from_dict(c, counter) for c in children],
    )
