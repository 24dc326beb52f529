"""Anchor locator — find where the panel goes on a page we don't control.

Strategies run in order, most precise first. The first strategy that yields
an element wins; later strategies are fallbacks and their results are never
merged with earlier ones. Locating never mutates the page.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import structlog
from bs4 import Tag
from soupsieve import SelectorSyntaxError

from composerdiff.anchor.page import Page, is_text
from composerdiff.anchor.panel import PANEL_CLASS, PANEL_SELECTOR
from composerdiff.anchor.selectors import (
    CONTAINER_SELECTORS,
    MANIFEST_SELECTORS,
    REGION_SELECTORS,
)
from composerdiff.core.config import DEFAULT_MANIFEST

log = structlog.get_logger("composerdiff.anchor")


@dataclass(frozen=True)
class AnchorCandidate:
    """An element to insert into, and which strategy found it."""

    element: Tag
    strategy_index: int
    strategy_name: str


@runtime_checkable
class LocatorStrategy(Protocol):
    name: str

    def find(self, page: Page) -> Tag | None: ...


# ── helpers ──────────────────────────────────────────────────────────────


def _query(page: Page, selector: str) -> list[Tag]:
    try:
        return page.select(selector)
    except SelectorSyntaxError:
        log.error("anchor.bad_selector", selector=selector)
        return []


def _inside_panel(page: Page, element: Tag) -> bool:
    return page.closest(element, PANEL_SELECTOR) is not None


def _closest_container(page: Page, element: Tag, containers: Sequence[str]) -> Tag | None:
    for selector in containers:
        try:
            found = page.closest(element, selector)
        except SelectorSyntaxError:
            log.error("anchor.bad_selector", selector=selector)
            continue
        if found is not None:
            return found
    return None


def _first_match(page: Page, selectors: Sequence[str]) -> Tag | None:
    for selector in selectors:
        matches = _query(page, selector)
        if matches:
            log.debug("anchor.selector_matched", selector=selector, count=len(matches))
            return matches[0]
    return None


def _text_outside_panel(element: Tag) -> str:
    return "".join(
        s
        for s in element.find_all(string=is_text)
        if s.find_parent(class_=PANEL_CLASS) is None
    )


def names_manifest(element: Tag, manifest_name: str) -> bool:
    """Whether the element's text, ``data-path`` or ``title`` mentions the file.

    Text inside an already inserted panel does not count.
    """
    if manifest_name in _text_outside_panel(element):
        return True
    for attr in ("data-path", "title"):
        value = element.get(attr)
        if isinstance(value, str) and manifest_name in value:
            return True
    return False


# ── strategies ───────────────────────────────────────────────────────────


class ManifestHeaderStrategy:
    """File header elements that name the manifest, lifted to their container."""

    name = "manifest-header"

    def __init__(
        self,
        manifest_name: str,
        selectors: Sequence[str] = MANIFEST_SELECTORS,
        containers: Sequence[str] = CONTAINER_SELECTORS,
    ) -> None:
        self.manifest_name = manifest_name
        self.selectors = [s.format(manifest=manifest_name) for s in selectors]
        self.containers = containers

    def find(self, page: Page) -> Tag | None:
        for selector in self.selectors:
            for element in _query(page, selector):
                if _inside_panel(page, element):
                    continue
                if not names_manifest(element, self.manifest_name):
                    continue
                container = _closest_container(page, element, self.containers)
                if container is not None:
                    return container
        return None


class ManifestTextStrategy:
    """Any literal text mentioning the manifest, lifted to its container."""

    name = "manifest-text"

    def __init__(self, manifest_name: str, containers: Sequence[str] = CONTAINER_SELECTORS) -> None:
        self.manifest_name = manifest_name
        self.containers = containers

    def find(self, page: Page) -> Tag | None:
        for element in page.text_nodes_containing(self.manifest_name):
            if _inside_panel(page, element):
                continue
            container = _closest_container(page, element, self.containers)
            if container is not None:
                return container
        return None


class FirstContainerStrategy:
    """The first per-file container on the page, whatever file it holds."""

    name = "first-container"

    def __init__(self, containers: Sequence[str] = CONTAINER_SELECTORS) -> None:
        self.containers = containers

    def find(self, page: Page) -> Tag | None:
        return _first_match(page, self.containers)


class RegionStrategy:
    """The whole comparison area."""

    name = "region"

    def __init__(self, regions: Sequence[str] = REGION_SELECTORS) -> None:
        self.regions = regions

    def find(self, page: Page) -> Tag | None:
        return _first_match(page, self.regions)


class RootStrategy:
    name = "root"

    def find(self, page: Page) -> Tag | None:
        return page.body


def default_strategies(manifest_name: str = DEFAULT_MANIFEST) -> list[LocatorStrategy]:
    return [
        ManifestHeaderStrategy(manifest_name),
        ManifestTextStrategy(manifest_name),
        FirstContainerStrategy(),
        RegionStrategy(),
        RootStrategy(),
    ]


class AnchorLocator:
    """Runs the strategy chain against a page."""

    def __init__(
        self,
        page: Page,
        manifest_name: str = DEFAULT_MANIFEST,
        strategies: Sequence[LocatorStrategy] | None = None,
    ) -> None:
        self.page = page
        self.manifest_name = manifest_name
        self.strategies = list(strategies) if strategies is not None else default_strategies(manifest_name)

    def locate(self) -> AnchorCandidate | None:
        for index, strategy in enumerate(self.strategies):
            if index > 0:
                log.warning(
                    "anchor.fallback",
                    strategy=strategy.name,
                    index=index,
                    manifest=self.manifest_name,
                )
            element = strategy.find(self.page)
            if element is not None:
                log.info("anchor.located", strategy=strategy.name, index=index, tag=element.name)
                return AnchorCandidate(element=element, strategy_index=index, strategy_name=strategy.name)

        log.error("anchor.not_found", manifest=self.manifest_name)
        return None
