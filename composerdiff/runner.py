"""ComposerDiffRunner — wires GitLab fetches into the diff and panel pipeline."""

from __future__ import annotations

from typing import Any

import structlog

from composerdiff.anchor.debug_info import get_debug_info
from composerdiff.anchor.inserter import PanelInserter
from composerdiff.anchor.locator import AnchorLocator
from composerdiff.anchor.page import Page
from composerdiff.core.config import DEFAULT_MANIFEST
from composerdiff.exceptions import ComposerDiffError
from composerdiff.gitlab.client import (
    GitLabClient,
    extract_project_info,
    is_merge_request_diff_page,
)
from composerdiff.lockdiff.classifier import diff_manifests
from composerdiff.lockdiff.renderer import DisplayDocument, render

log = structlog.get_logger("composerdiff.runner")


async def diff_merge_request(
    client: GitLabClient,
    project_path: str,
    merge_request_id: str,
    *,
    project_id: str | None = None,
    manifest_name: str = DEFAULT_MANIFEST,
) -> DisplayDocument | None:
    """Render the manifest diff of one merge request.

    Returns None when the merge request does not touch *manifest_name*.
    *project_id* defaults to the project path, which the API also accepts.
    Raises FetchFailure if the change list cannot be loaded.
    """
    changes = await client.load_merge_request_changes(project_id or project_path, merge_request_id)
    if not client.has_manifest(changes, manifest_name):
        log.info("runner.manifest_unchanged", manifest=manifest_name)
        return None

    manifests = await client.fetch_manifest_contents(
        project_path,
        changes.get("source_branch") or "",
        changes.get("target_branch") or "",
        manifest_name,
    )
    return render(diff_manifests(manifests.old, manifests.new))


class ComposerDiffRunner:
    """Runs the whole flow for one merge request page.

    Every failure is logged and reported as ``False`` from :meth:`run`;
    nothing propagates to the caller.
    """

    def __init__(
        self,
        client: GitLabClient,
        page: Page,
        *,
        manifest_name: str = DEFAULT_MANIFEST,
        inserter: PanelInserter | None = None,
    ) -> None:
        self._client = client
        self.page = page
        self.manifest_name = manifest_name
        self.inserter = inserter or PanelInserter(page, AnchorLocator(page, manifest_name))
        self.manifest_found = False
        self.diff_generated = False

    async def run(self) -> bool:
        """Detect a changed manifest, diff it, and put the panel on the page."""
        log.info("runner.start", url=self.page.url)
        try:
            return await self._run()
        except (ComposerDiffError, ValueError) as exc:
            log.error("runner.failed", error=str(exc))
        except Exception:
            log.exception("runner.unexpected_error")
        return False

    async def _run(self) -> bool:
        if not await self._client.is_gitlab_instance():
            log.info("runner.not_gitlab")
            return False

        if not is_merge_request_diff_page(self.page.url):
            log.info("runner.not_mr_diff_page", url=self.page.url)
            return False

        info = extract_project_info(self.page)
        if not info.complete:
            log.error("runner.missing_project_info")
            return False

        document = await diff_merge_request(
            self._client,
            info.project_path,  # type: ignore[arg-type]
            info.merge_request_id,  # type: ignore[arg-type]
            project_id=info.project_id,
            manifest_name=self.manifest_name,
        )
        self.manifest_found = document is not None
        if document is None:
            return False

        self.diff_generated = self.inserter.ensure_present(document)
        if self.diff_generated:
            log.info("runner.panel_inserted")
        else:
            log.error("runner.panel_not_inserted")
        return self.diff_generated

    def status(self) -> dict[str, Any]:
        """Page debug info plus what this runner found."""
        info = get_debug_info(self.page).to_dict()
        info["manifest_found"] = self.manifest_found
        info["diff_generated"] = self.diff_generated
        return info
