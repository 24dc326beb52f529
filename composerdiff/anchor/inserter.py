"""Panel inserter — put the diff panel on the page and keep it there.

The host page re-renders subtrees on its own schedule and drops anything we
injected. A single mutation observer feeds a debouncer; once the page has
been quiet for ``debounce_delay`` seconds the inserter checks whether the
panel survived and, if not, runs the locate-and-insert cycle again with the
cached document.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field

import structlog
from bs4 import Tag

from composerdiff.anchor.locator import AnchorCandidate, AnchorLocator
from composerdiff.anchor.page import MutationObserver, MutationRecord, Page
from composerdiff.anchor.panel import PANEL_SELECTOR, build_panel
from composerdiff.anchor.selectors import CONTENT_SELECTORS
from composerdiff.exceptions import AnchorNotFound, InsertionFailure
from composerdiff.lockdiff.renderer import DisplayDocument

log = structlog.get_logger("composerdiff.anchor")

DEFAULT_DEBOUNCE_DELAY = 0.2  # seconds


class Debouncer:
    """Coalesce a burst of triggers into one call of *action*.

    Each trigger restarts the timer on the running event loop, so *action*
    runs once, *delay* seconds after the last trigger. With no running loop
    the action runs immediately.
    """

    def __init__(self, delay: float, action: Callable[[], None]) -> None:
        self.delay = delay
        self._action = action
        self._handle: asyncio.TimerHandle | None = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def trigger(self) -> None:
        self.cancel()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            log.debug("debounce.no_event_loop")
            self._action()
            return
        self._handle = loop.call_later(self.delay, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        self._action()


@dataclass
class PanelState:
    """What the inserter believes about the page.

    One instance per page, shared by every inserter working on that page.
    It owns the single observer and its debouncer. While ``inserting`` is
    set the observer ignores mutations, since they are our own writes.
    """

    present: bool = False
    watching: bool = False
    document: DisplayDocument | None = None
    insert_count: int = 0
    inserting: bool = False
    observer: MutationObserver | None = field(default=None, repr=False)
    debouncer: Debouncer | None = field(default=None, repr=False)


class PanelInserter:
    def __init__(
        self,
        page: Page,
        locator: AnchorLocator | None = None,
        *,
        state: PanelState | None = None,
        debounce_delay: float = DEFAULT_DEBOUNCE_DELAY,
    ) -> None:
        self.page = page
        self.locator = locator or AnchorLocator(page)
        self.state = state or PanelState()
        self.debounce_delay = debounce_delay

    # ── public ───────────────────────────────────────────────────────────

    def ensure_present(self, document: DisplayDocument) -> bool:
        """Insert (or replace) the panel for *document* and start watching.

        Returns whether a panel is on the page afterwards. Never raises: a
        failed cycle is logged and the watcher still retries on the next
        mutation.
        """
        self.state.document = document
        try:
            inserted = self._insert(document)
        except Exception:
            log.exception("panel.cycle_failed")
            self.state.present = False
            inserted = False

        try:
            self._watch()
        except Exception:
            log.exception("panel.watch_failed")
        return inserted

    def stop(self) -> None:
        """Disconnect the observer and drop any pending check."""
        if self.state.debouncer is not None:
            self.state.debouncer.cancel()
            self.state.debouncer = None
        if self.state.observer is not None:
            self.state.observer.disconnect()
            self.state.observer = None
        self.state.watching = False

    @property
    def check_pending(self) -> bool:
        debouncer = self.state.debouncer
        return debouncer is not None and debouncer.pending

    # ── cycle ────────────────────────────────────────────────────────────

    def _insert(self, document: DisplayDocument) -> bool:
        self.state.inserting = True
        try:
            return self._insert_once(document)
        finally:
            self.state.inserting = False

    def _insert_once(self, document: DisplayDocument) -> bool:
        try:
            candidate = self._locate()
        except AnchorNotFound as exc:
            log.error("panel.anchor_not_found", error=str(exc))
            self.state.present = False
            return False

        self._remove_existing()
        target = self._content_target(candidate.element)
        panel = build_panel(self.page, document)

        try:
            technique = self._place(panel, target)
        except InsertionFailure as exc:
            log.error("panel.insertion_failed", error=str(exc))
            self.state.present = False
            return False

        self.state.present = True
        self.state.insert_count += 1
        log.info(
            "panel.inserted",
            strategy=candidate.strategy_name,
            technique=technique,
            target=target.name,
            count=self.state.insert_count,
        )
        return True

    def _locate(self) -> AnchorCandidate:
        candidate = self.locator.locate()
        if candidate is None:
            raise AnchorNotFound("no strategy produced an insertion point")
        return candidate

    def _remove_existing(self) -> None:
        for stale in self.page.select(PANEL_SELECTOR):
            log.debug("panel.removing_existing")
            self.page.remove(stale)

    def _content_target(self, container: Tag) -> Tag:
        """Prefer the diff body inside *container* over its header chrome."""
        if container is self.page.body:
            return container
        for selector in CONTENT_SELECTORS:
            found = self.page.select_one(selector, root=container)
            if found is not None:
                log.debug("panel.content_target", selector=selector)
                return found
        return container

    def _place(self, panel: Tag, target: Tag) -> str:
        """Try each insertion technique in turn; return the one that worked."""

        def root_prepend() -> None:
            body = self.page.body
            if body is None:
                raise InsertionFailure("page has no body")
            self.page.prepend(body, panel)

        techniques: list[tuple[str, Callable[[], None]]] = [
            ("prepend", lambda: self.page.prepend(target, panel)),
            ("append", lambda: self.page.append(target, panel)),
            ("root-prepend", root_prepend),
        ]
        for name, technique in techniques:
            try:
                technique()
                return name
            except Exception as exc:
                log.warning("panel.technique_failed", technique=name, error=str(exc))
        raise InsertionFailure("all insertion techniques failed")

    # ── watcher ──────────────────────────────────────────────────────────

    def _watch(self) -> None:
        if self.state.watching:
            log.debug("panel.watcher_already_registered")
            return
        self.state.debouncer = Debouncer(self.debounce_delay, self._check_presence)
        self.state.observer = self.page.observe(self._on_mutation)
        self.state.watching = True
        log.debug("panel.watcher_registered")

    def _on_mutation(self, record: MutationRecord) -> None:
        # Our own removals and insertions are not host re-renders.
        if self.state.inserting or self.state.debouncer is None:
            return
        self.state.debouncer.trigger()

    def _check_presence(self) -> None:
        if self.page.select_one(PANEL_SELECTOR) is not None:
            self.state.present = True
            return

        self.state.present = False
        document = self.state.document
        if document is None:
            return
        log.info("panel.missing_reinserting")
        try:
            self._insert(document)
        except Exception:
            log.exception("panel.reinsert_failed")
