"""Debug information about a merge request page."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass

import structlog

from composerdiff.anchor.page import Page

log = structlog.get_logger("composerdiff.anchor")

UNKNOWN = "Unknown"

_MR_SELECTOR = "#content-body > div.merge-request"
_BRANCH_LINK_SELECTOR = (
    "#content-body > div.merge-request > div.merge-request-details.issuable-details"
    " > div.detail-page-description.is-merge-request > a[title]"
)


@dataclass
class DebugInfo:
    is_gitlab: bool
    is_self_hosted: bool
    is_merge_request: bool
    source_branch: str = UNKNOWN
    target_branch: str = UNKNOWN
    mr_data_url: str | None = None

    def to_dict(self) -> dict:
        return asdict(self)


def _text(page: Page, *selectors: str) -> str | None:
    for selector in selectors:
        element = page.select_one(selector)
        if element is not None:
            return element.get_text().strip()
    return None


def get_debug_info(page: Page) -> DebugInfo:
    """Describe *page*: GitLab or not, merge request or not, which branches."""
    url = page.url
    is_gitlab = "gitlab.com" in url or page.select_one('meta[content*="GitLab"]') is not None
    info = DebugInfo(
        is_gitlab=is_gitlab,
        is_self_hosted=is_gitlab and "gitlab.com" not in url,
        is_merge_request="/merge_requests/" in url,
    )

    mr_element = page.select_one(_MR_SELECTOR)
    if mr_element is not None:
        data_url = mr_element.get("data-url")
        info.mr_data_url = data_url if isinstance(data_url, str) else None
        raw_meta = mr_element.get("data-mr-metadata")
        if info.mr_data_url and isinstance(raw_meta, str):
            try:
                meta = json.loads(raw_meta or "{}")
            except json.JSONDecodeError as exc:
                log.error("anchor.bad_mr_metadata", error=str(exc))
                meta = {}
            if isinstance(meta, dict):
                info.source_branch = meta.get("source_branch") or info.source_branch
                info.target_branch = meta.get("target_branch") or info.target_branch

    if UNKNOWN in (info.source_branch, info.target_branch):
        links = page.select(_BRANCH_LINK_SELECTOR)
        if len(links) >= 2:
            info.source_branch = links[0].get_text().strip()
            info.target_branch = links[1].get_text().strip()

    if UNKNOWN in (info.source_branch, info.target_branch):
        refs = page.select(".ref-name")
        if len(refs) >= 2:
            info.source_branch = refs[0].get_text().strip()
            info.target_branch = refs[1].get_text().strip()

    if info.source_branch == UNKNOWN:
        info.source_branch = _text(page, ".js-source-branch", ".source-branch-name") or UNKNOWN
    if info.target_branch == UNKNOWN:
        info.target_branch = _text(page, ".js-target-branch", ".target-branch-name") or UNKNOWN

    return info
