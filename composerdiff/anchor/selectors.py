"""CSS selector lists for GitLab merge request diff views.

Each list is ordered from most to least specific. GitLab markup changes
between releases, so several generations of class names are listed.
"""

from __future__ import annotations

# Elements that may carry the file name of a diffed file. ``{manifest}`` is
# replaced with the lock file name.
MANIFEST_SELECTORS: tuple[str, ...] = (
    ".file-title-name",
    ".file-header-content .file-title-name",
    ".diff-file-header .file-title-name",
    ".diff-file .file-title",
    ".diff-file .file-header-content",
    ".js-file-title",
    ".file-header .file-title-name",
    ".file-title",
    '[data-path*="{manifest}"]',
    '[title*="{manifest}"]',
    ".diff-file-header",
    ".diff-file",
)

# Per-file containers that wrap a header and its diff body.
CONTAINER_SELECTORS: tuple[str, ...] = (
    ".diff-file",
    ".file",
    ".diff-file-holder",
    ".js-file-holder",
    ".file-holder",
    ".diff-content",
    ".diff-wrap",
)

# Inner regions of a container that hold the actual diff lines.
CONTENT_SELECTORS: tuple[str, ...] = (
    ".diff-content",
    ".file-content",
    ".diff-file-content",
    ".js-file-content",
    ".file-holder",
    ".diff-table",
    ".content-wrapper",
    ".diff-wrap-lines",
    ".diff-wrap",
)

# Whole comparison area, used when no per-file container exists.
REGION_SELECTORS: tuple[str, ...] = (
    ".diffs",
    ".diff-files-holder",
    "#diffs",
    ".content-wrapper",
)
