"""Classify packages across two registries as added, updated, or removed."""

from __future__ import annotations

import structlog

from composerdiff.lockdiff.models import ChangeRecord, DiffResult, PackageRegistry
from composerdiff.lockdiff.parser import parse

log = structlog.get_logger("composerdiff.lockdiff")


def classify(old: PackageRegistry, new: PackageRegistry) -> DiffResult:
    """Compare two registries and bucket every differing package.

    Packages whose version and section are identical on both sides are not
    reported. A section move with an unchanged version is an update.
    Each category is filled in package-name order.
    """
    result = DiffResult()

    for name in sorted(set(old) | set(new)):
        before = old.get(name)
        after = new.get(name)
        record = ChangeRecord(
            name=name,
            previous_section=before.section if before else None,
            new_section=after.section if after else None,
            previous_version=before.version if before else None,
            new_version=after.version if after else None,
        )

        kind = record.kind
        if kind == "added":
            result.added[name] = record
        elif kind == "removed":
            result.removed[name] = record
        elif kind == "updated":
            result.updated[name] = record

    log.debug("lockdiff.classified", **result.counts)
    return result


def diff_manifests(old_text: str | None, new_text: str | None) -> DiffResult:
    """Parse two raw lock files and classify the difference."""
    log.info("lockdiff.diff_started")
    return classify(parse(old_text), parse(new_text))
