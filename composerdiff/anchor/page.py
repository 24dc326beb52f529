"""Live page model: a BeautifulSoup document with mutation notifications.

All writes go through :class:`Page` so that observers see every change,
mirroring a browser ``MutationObserver``: callbacks run synchronously, in
registration order, right after the mutation is applied.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

import structlog
from bs4 import BeautifulSoup, NavigableString, PageElement, Tag

log = structlog.get_logger("composerdiff.anchor")

HTML_PARSER = "lxml"
FRAGMENT_PARSER = "html.parser"


def is_text(node: object) -> bool:
    """Whether *node* is literal page text (not a comment or other markup string)."""
    return type(node) is NavigableString


@dataclass(frozen=True)
class MutationRecord:
    """A single child-list change under *target*."""

    target: Tag
    added: tuple[PageElement, ...] = ()
    removed: tuple[PageElement, ...] = ()


MutationCallback = Callable[[MutationRecord], None]


def _check_not_ancestor(parent: Tag, child: Tag) -> None:
    if parent is child or any(p is child for p in parent.parents):
        raise ValueError("cannot insert an element into itself")


@dataclass(eq=False)
class MutationObserver:
    """Handle returned by :meth:`Page.observe`."""

    page: Page
    callback: MutationCallback
    connected: bool = field(default=True)

    def disconnect(self) -> None:
        if self.connected:
            self.connected = False
            self.page._observers.remove(self)


class Page:
    """A mutable HTML page plus the URL it was loaded from."""

    def __init__(self, markup: str | BeautifulSoup = "", url: str = "") -> None:
        if isinstance(markup, BeautifulSoup):
            self.soup = markup
        else:
            self.soup = BeautifulSoup(markup, HTML_PARSER)
        self.url = url
        self._observers: list[MutationObserver] = []

    # ── reads ────────────────────────────────────────────────────────────

    @property
    def body(self) -> Tag | None:
        """The root content element, if the document has one."""
        return self.soup.body

    def select(self, selector: str, root: Tag | None = None) -> list[Tag]:
        """CSS query in document order. Raises ``SelectorSyntaxError`` on a bad selector."""
        return list((root if root is not None else self.soup).select(selector))

    def select_one(self, selector: str, root: Tag | None = None) -> Tag | None:
        return (root if root is not None else self.soup).select_one(selector)

    def closest(self, element: Tag, selector: str) -> Tag | None:
        """Nearest ancestor of *element* (itself included) matching *selector*."""
        return element.css.closest(selector)

    def contains(self, element: PageElement) -> bool:
        """Whether *element* is still attached to this document."""
        if element is self.soup:
            return True
        return any(parent is self.soup for parent in element.parents)

    def text_nodes_containing(self, needle: str) -> list[Tag]:
        """Parents of text nodes that contain *needle*, in document order.

        Comments, doctypes and CDATA sections are not text.
        """
        parents: list[Tag] = []
        for node in self.soup.find_all(string=lambda s: is_text(s) and needle in s):
            parent = node.parent
            if parent is None or parent.name in ("script", "style", "head", "title"):
                continue
            parents.append(parent)
        return parents

    def html(self) -> str:
        return str(self.soup)

    # ── writes ───────────────────────────────────────────────────────────

    def new_tag(self, name: str, *, classes: list[str] | None = None, text: str | None = None) -> Tag:
        tag = self.soup.new_tag(name)
        if classes:
            tag["class"] = list(classes)
        if text is not None:
            tag.string = text
        return tag

    def prepend(self, parent: Tag, child: Tag) -> None:
        """Insert *child* as the first child of *parent*."""
        _check_not_ancestor(parent, child)
        parent.insert(0, child)
        self._notify(MutationRecord(target=parent, added=(child,)))

    def append(self, parent: Tag, child: Tag) -> None:
        """Insert *child* as the last child of *parent*."""
        _check_not_ancestor(parent, child)
        parent.append(child)
        self._notify(MutationRecord(target=parent, added=(child,)))

    def remove(self, element: Tag) -> None:
        parent = element.parent
        element.extract()
        if parent is not None:
            self._notify(MutationRecord(target=parent, removed=(element,)))

    def replace_children(self, parent: Tag, markup: str) -> None:
        """Swap out the whole subtree of *parent* for freshly parsed *markup*.

        This is what client-rendered pages do on lazy loads: any injected
        children of *parent* are discarded.
        """
        removed = tuple(parent.contents)
        parent.clear()
        fragment = BeautifulSoup(markup, FRAGMENT_PARSER)
        added = tuple(fragment.contents)
        for node in added:
            parent.append(node)
        self._notify(MutationRecord(target=parent, added=added, removed=removed))

    # ── observers ────────────────────────────────────────────────────────

    def observe(self, callback: MutationCallback) -> MutationObserver:
        observer = MutationObserver(page=self, callback=callback)
        self._observers.append(observer)
        return observer

    @property
    def observer_count(self) -> int:
        return len(self._observers)

    def _notify(self, record: MutationRecord) -> None:
        for observer in list(self._observers):
            if not observer.connected:
                continue
            try:
                observer.callback(record)
            except Exception:
                log.exception("page.observer_failed")
