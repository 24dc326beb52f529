"""CLI entry point: composer-diff.

Subcommands:
    composer-diff diff old.lock new.lock             # Diff two local lock files
    composer-diff annotate page.html --old A --new B # Insert the panel into a saved page
    composer-diff mr https://host/g/p/-/merge_requests/1  # Diff a merge request
    composer-diff mr g/p/-/merge_requests/1          # Same, on $COMPOSERDIFF_GITLAB_URL
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import click

from composerdiff.anchor.inserter import PanelInserter
from composerdiff.anchor.locator import AnchorLocator
from composerdiff.anchor.page import Page
from composerdiff.anchor.panel import build_panel
from composerdiff.core.config import Settings
from composerdiff.core.logging import setup_logging
from composerdiff.exceptions import FetchFailure
from composerdiff.gitlab.client import GitLabClient, parse_merge_request_url
from composerdiff.lockdiff.classifier import diff_manifests
from composerdiff.lockdiff.renderer import DisplayDocument, render, render_text
from composerdiff.runner import diff_merge_request


def _read_optional(path: str | None) -> str:
    """File content, or ``""`` when the file does not exist (absent manifest)."""
    if not path:
        return ""
    p = Path(path)
    if not p.is_file():
        return ""
    return p.read_text(encoding="utf-8", errors="replace")


def _emit(document: DisplayDocument, fmt: str) -> str:
    if fmt == "json":
        return document.model_dump_json(indent=2)
    if fmt == "html":
        page = Page("<html><body></body></html>")
        return str(build_panel(page, document))
    return render_text(document)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """composer-diff: show composer.lock changes between two branches."""
    setup_logging("DEBUG" if verbose else None)
    ctx.obj = Settings.from_env()


@main.command("diff")
@click.argument("old", type=click.Path(dir_okay=False))
@click.argument("new", type=click.Path(dir_okay=False))
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["text", "json", "html"]),
    default="text",
    show_default=True,
    help="Output format",
)
def diff_cmd(old: str, new: str, fmt: str) -> None:
    """Diff two local lock files. A missing file counts as an empty manifest."""
    document = render(diff_manifests(_read_optional(old), _read_optional(new)))
    click.echo(_emit(document, fmt))


@main.command("annotate")
@click.argument("page_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--old", "old", type=click.Path(dir_okay=False), help="Old (target branch) lock file")
@click.option("--new", "new", type=click.Path(dir_okay=False), help="New (source branch) lock file")
@click.option("-o", "--output", default=None, help="Output file (default: stdout)")
@click.pass_obj
def annotate(settings: Settings, page_file: str, old: str | None, new: str | None, output: str | None) -> None:
    """Insert the diff panel into a saved merge request page."""
    page = Page(Path(page_file).read_text(encoding="utf-8", errors="replace"))
    document = render(diff_manifests(_read_optional(old), _read_optional(new)))

    inserter = PanelInserter(
        page,
        AnchorLocator(page, settings.manifest_name),
        debounce_delay=settings.debounce_delay,
    )
    inserted = inserter.ensure_present(document)
    inserter.stop()
    if not inserted:
        click.echo("Could not find anywhere to insert the panel", err=True)
        sys.exit(1)

    if output:
        Path(output).write_text(page.html(), encoding="utf-8")
        click.echo(f"Annotated page written to {output}")
    else:
        click.echo(page.html())


@main.command("mr")
@click.argument("url")
@click.option("--token", default=None, help="GitLab token (default: $COMPOSERDIFF_GITLAB_TOKEN)")
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["text", "json", "html"]),
    default="text",
    show_default=True,
    help="Output format",
)
@click.pass_obj
def mr_cmd(settings: Settings, url: str, token: str | None, fmt: str) -> None:
    """Diff the lock file of a GitLab merge request.

    URL may be a bare project path when COMPOSERDIFF_GITLAB_URL is set.
    """
    try:
        ref = parse_merge_request_url(_absolute_url(url, settings.gitlab_url))
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="URL") from exc

    try:
        document = asyncio.run(_diff_merge_request(settings, ref.base_url, ref.project_path, ref.iid, token))
    except (FetchFailure, ValueError) as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    if document is None:
        click.echo(f"{settings.manifest_name} is not changed in this merge request.")
        return
    click.echo(_emit(document, fmt))


def _absolute_url(url: str, gitlab_url: str | None) -> str:
    if "://" in url or not gitlab_url:
        return url
    return f"{gitlab_url.rstrip('/')}/{url.lstrip('/')}"


async def _diff_merge_request(
    settings: Settings,
    base_url: str,
    project_path: str,
    iid: str,
    token: str | None,
) -> DisplayDocument | None:
    async with GitLabClient(
        base_url, token or settings.gitlab_token, timeout=settings.http_timeout
    ) as client:
        return await diff_merge_request(
            client, project_path, iid, manifest_name=settings.manifest_name
        )


if __name__ == "__main__":
    main()
