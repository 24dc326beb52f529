"""Async GitLab API client for merge request changes and raw file content."""

from __future__ import annotations

import asyncio
import os
import re
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote, urlsplit

import httpx
import structlog

from composerdiff.anchor.page import Page
from composerdiff.core.config import DEFAULT_HTTP_TIMEOUT, DEFAULT_MANIFEST
from composerdiff.exceptions import FetchFailure

log = structlog.get_logger("composerdiff.gitlab")

_MAX_RETRIES = 3
_RETRY_BASE_DELAY = 1.0  # seconds
_MAX_RETRY_AFTER = 60

_MR_URL_RE = re.compile(r"^/(?P<path>.+?)/-/merge_requests/(?P<iid>\d+)(?:/.*)?$")


@dataclass(frozen=True)
class ProjectInfo:
    project_path: str | None
    project_id: str | None
    merge_request_id: str | None

    @property
    def complete(self) -> bool:
        return bool(self.project_path and self.project_id and self.merge_request_id)


@dataclass(frozen=True)
class ManifestPair:
    """Raw manifest text on both sides; ``""`` means the side is absent."""

    old: str
    new: str


@dataclass(frozen=True)
class MergeRequestRef:
    base_url: str
    project_path: str
    iid: str


def is_merge_request_diff_page(url: str) -> bool:
    return "/merge_requests/" in url and "/diffs" in url


def extract_project_info(page: Page) -> ProjectInfo:
    """Read project and merge request identifiers from the page ``body``."""
    body = page.body
    if body is None:
        log.error("gitlab.no_body")
        return ProjectInfo(None, None, None)

    def attr(name: str) -> str | None:
        value = body.get(name)
        return value if isinstance(value, str) and value else None

    info = ProjectInfo(
        project_path=attr("data-project-full-path"),
        project_id=attr("data-project-id"),
        merge_request_id=attr("data-page-type-id"),
    )
    log.debug(
        "gitlab.project_info",
        project_path=info.project_path,
        project_id=info.project_id,
        merge_request_id=info.merge_request_id,
    )
    return info


def parse_merge_request_url(url: str) -> MergeRequestRef:
    """Split ``https://host/group/project/-/merge_requests/N[/diffs]``.

    Raises ValueError if the URL is not a merge request URL.
    """
    parts = urlsplit(url.strip())
    match = _MR_URL_RE.match(parts.path.rstrip("/"))
    if not parts.scheme or not parts.netloc or match is None:
        raise ValueError(f"not a GitLab merge request URL: {url!r}")
    return MergeRequestRef(
        base_url=f"{parts.scheme}://{parts.netloc}",
        project_path=match.group("path"),
        iid=match.group("iid"),
    )


class GitLabClient:
    """Thin async wrapper around the GitLab REST API and raw file endpoint."""

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        *,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
    ) -> None:
        resolved_token = token or os.environ.get("COMPOSERDIFF_GITLAB_TOKEN")
        headers: dict[str, str] = {"Accept": "application/json"}
        if resolved_token:
            headers["PRIVATE-TOKEN"] = resolved_token
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
            follow_redirects=True,
        )

    # ── lifecycle ──────────────────────────────────────────────────────────

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> GitLabClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    # ── public ─────────────────────────────────────────────────────────────

    async def is_gitlab_instance(self) -> bool:
        """Whether the host serves GitLab's PWA manifest."""
        try:
            response = await self._client.get("/-/manifest.json")
            if response.status_code != 200:
                return False
            return response.json().get("name") == "GitLab"
        except (httpx.HTTPError, ValueError, AttributeError) as exc:
            log.error("gitlab.instance_check_failed", error=str(exc))
            return False

    async def load_merge_request_changes(
        self, project_id: str, merge_request_id: str
    ) -> dict[str, Any]:
        """GET the changes of a merge request. Raises FetchFailure."""
        if not project_id or not merge_request_id:
            raise ValueError("project id and merge request id are required")
        path = (
            f"/api/v4/projects/{quote(str(project_id), safe='')}"
            f"/merge_requests/{merge_request_id}/changes"
        )
        log.info("gitlab.fetch_changes", path=path)
        response = await self._request_with_retry(path)
        try:
            data = response.json()
        except ValueError as exc:
            raise FetchFailure(path, response.status_code, "invalid JSON") from exc
        if not isinstance(data, dict):
            raise FetchFailure(path, response.status_code, "unexpected payload")
        return data

    @staticmethod
    def has_manifest(changes: dict[str, Any] | None, manifest_name: str = DEFAULT_MANIFEST) -> bool:
        """Whether any changed path (old or new) names the manifest."""
        if not changes or not changes.get("changes"):
            log.warning("gitlab.no_changes")
            return False
        for change in changes["changes"]:
            new_path = change.get("new_path") or ""
            old_path = change.get("old_path") or ""
            if manifest_name in new_path or manifest_name in old_path:
                log.info("gitlab.manifest_changed", manifest=manifest_name)
                return True
        log.info("gitlab.manifest_unchanged", manifest=manifest_name)
        return False

    async def fetch_manifest_contents(
        self,
        project_path: str,
        source_branch: str,
        target_branch: str,
        manifest_name: str = DEFAULT_MANIFEST,
    ) -> ManifestPair:
        """Fetch the manifest from both branches concurrently.

        The target branch is the old side, the source branch the new side.
        A side that cannot be fetched comes back as ``""`` (absent).
        """
        if not project_path or not source_branch or not target_branch:
            raise ValueError("project path, source branch and target branch are required")

        new_text, old_text = await asyncio.gather(
            self.fetch_raw(project_path, source_branch, manifest_name),
            self.fetch_raw(project_path, target_branch, manifest_name),
        )
        return ManifestPair(old=old_text, new=new_text)

    async def fetch_raw(self, project_path: str, ref: str, file_path: str) -> str:
        """Raw file content at *ref*, or ``""`` when it cannot be fetched."""
        url = f"/{project_path.strip('/')}/-/raw/{quote(ref, safe='/')}/{quote(file_path, safe='/')}"
        try:
            response = await self._request_with_retry(url)
        except FetchFailure as exc:
            log.warning("gitlab.raw_fetch_failed", url=url, status=exc.status, error=str(exc))
            return ""
        return response.text

    # ── internal ───────────────────────────────────────────────────────────

    async def _request_with_retry(self, url: str) -> httpx.Response:
        """GET with exponential backoff on 5xx, 429 and timeouts.

        Any other non-2xx status fails at once. Raises FetchFailure.
        """
        last_exc: FetchFailure | None = None
        for attempt in range(_MAX_RETRIES):
            delay = _RETRY_BASE_DELAY * (2**attempt)
            try:
                resp = await self._client.get(url)
            except httpx.TimeoutException:
                log.warning(
                    "gitlab.timeout", url=url, attempt=attempt + 1, max_retries=_MAX_RETRIES
                )
                last_exc = FetchFailure(url, reason="timeout")
            except httpx.HTTPError as exc:
                raise FetchFailure(url, reason=str(exc)) from exc
            else:
                if resp.status_code < 300:
                    return resp
                if resp.status_code == 429:
                    delay = self._retry_after(resp, delay)
                    log.warning("gitlab.rate_limit", url=url, wait_seconds=delay, attempt=attempt + 1)
                elif resp.status_code >= 500:
                    log.warning(
                        "gitlab.server_error",
                        url=url,
                        status=resp.status_code,
                        attempt=attempt + 1,
                        max_retries=_MAX_RETRIES,
                    )
                else:
                    raise FetchFailure(url, resp.status_code)
                last_exc = FetchFailure(url, resp.status_code)

            if attempt < _MAX_RETRIES - 1:
                await asyncio.sleep(delay)

        raise last_exc  # type: ignore[misc]

    @staticmethod
    def _retry_after(response: httpx.Response, default: float) -> float:
        value = response.headers.get("Retry-After")
        if value is None:
            return default
        try:
            return float(min(max(int(value), 1), _MAX_RETRY_AFTER))
        except (ValueError, TypeError):
            return default
