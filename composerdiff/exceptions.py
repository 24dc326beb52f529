"""Custom exceptions for composer-diff.

None of these cross a public entry point: they are raised inside the engine
and caught where the failure can be degraded (empty registry, skipped
insertion, absent manifest).
"""

from __future__ import annotations


class ComposerDiffError(Exception):
    """Base exception for all composer-diff errors."""


class ParseFailure(ComposerDiffError):
    """Raised when manifest text is not a well-formed lock document."""


class FetchFailure(ComposerDiffError):
    """Raised when a GitLab request does not produce a usable response."""

    def __init__(self, url: str, status: int | None = None, reason: str = "") -> None:
        self.url = url
        self.status = status
        detail = f"status {status}" if status is not None else (reason or "request failed")
        super().__init__(f"fetch failed for {url}: {detail}")


class AnchorNotFound(ComposerDiffError):
    """Raised when no locator strategy yields an insertion point."""


class InsertionFailure(ComposerDiffError):
    """Raised when every panel insertion technique has failed."""
