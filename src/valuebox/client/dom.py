"""Minimal document model for the client runtime.

Pages are parsed into ``xml.etree.ElementTree`` elements under a synthetic
``<document>`` root so bindings can discover and update fragments without
a browser.  The parser is forgiving in the way HTML is: void elements never
take children, unclosed elements are closed by their parent's end tag, and
stray end tags are ignored.
"""

from __future__ import annotations

from html.parser import HTMLParser
from xml.etree.ElementTree import Element, TreeBuilder, tostring

DOCUMENT_TAG = "document"

VOID_ELEMENTS = frozenset({
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "link", "meta", "source", "track", "wbr",
})


class _TreeParser(HTMLParser):
    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self._builder = TreeBuilder()
        self._open: list[str] = [DOCUMENT_TAG]
        self._builder.start(DOCUMENT_TAG, {})

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        self._builder.start(tag, {k: v if v is not None else "" for k, v in attrs})
        if tag in VOID_ELEMENTS:
            self._builder.end(tag)
        else:
            self._open.append(tag)

    def handle_startendtag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        self._builder.start(tag, {k: v if v is not None else "" for k, v in attrs})
        self._builder.end(tag)

    def handle_endtag(self, tag: str) -> None:
        if tag not in self._open[1:]:
            return
        while self._open[-1] != tag:
            self._builder.end(self._open.pop())
        self._builder.end(self._open.pop())

    def handle_data(self, data: str) -> None:
        self._builder.data(data)

    def finish(self) -> Element:
        self.close()
        while self._open:
            self._builder.end(self._open.pop())
        return self._builder.close()


def parse_html(source: str) -> Element:
    """Parse an HTML page or fragment into a tree rooted at ``<document>``."""
    parser = _TreeParser()
    parser.feed(source)
    return parser.finish()


def to_html(element: Element) -> str:
    """Serialize an element; a ``<document>`` root serializes its contents only."""
    if element.tag != DOCUMENT_TAG:
        return tostring(element, encoding="unicode", method="html")
    parts = [element.text or ""]
    parts.extend(tostring(child, encoding="unicode", method="html") for child in element)
    return "".join(parts)


def has_class(element: Element, name: str) -> bool:
    return name in element.get("class", "").split()


def find_by_id(scope: Element, element_id: str) -> Element | None:
    """First element under ``scope`` (inclusive) whose id is ``element_id``."""
    for element in scope.iter():
        if element.get("id") == element_id:
            return element
    return None


def set_text(element: Element, text: str) -> None:
    """Replace everything inside ``element`` with ``text``."""
    for child in list(element):
        element.remove(child)
    element.text = text


def set_style(element: Element, prop: str, value: str) -> None:
    """Set one inline style declaration, keeping the others."""
    declarations: dict[str, str] = {}
    for part in element.get("style", "").split(";"):
        name, sep, val = part.partition(":")
        if sep and name.strip():
            declarations[name.strip()] = val.strip()
    declarations[prop] = value
    element.set("style", "; ".join(f"{k}: {v}" for k, v in declarations.items()))
