"""Parser for composer.lock files."""

from __future__ import annotations

import json
from typing import Any

import structlog

from composerdiff.exceptions import ParseFailure
from composerdiff.lockdiff.models import PackageEntry, PackageRegistry, RegistryEntry, Section

log = structlog.get_logger("composerdiff.lockdiff")

# Read order matters: a name declared in both sections ends up in the later one.
_SECTION_KEYS: tuple[tuple[str, Section], ...] = (
    ("packages", Section.DIRECT),
    ("packages-dev", Section.DEVELOPMENT),
)


def parse(raw_text: str | None) -> PackageRegistry:
    """Parse raw composer.lock text into a :class:`PackageRegistry`.

    Empty input is an absent manifest and yields an empty registry. Input
    that is not a JSON object also yields an empty registry, with the
    failure logged and kept on ``registry.error``; this never raises.
    """
    if raw_text is None or not raw_text.strip():
        log.info("lockdiff.manifest_absent")
        return PackageRegistry.empty()

    try:
        data = _load(raw_text)
    except ParseFailure as exc:
        log.error("lockdiff.parse_failed", error=str(exc))
        return PackageRegistry.empty(error=str(exc))

    entries: list[RegistryEntry] = []
    for key, section in _SECTION_KEYS:
        for record in _section_records(data, key):
            entry = _to_entry(record)
            if entry is None:
                log.debug("lockdiff.entry_skipped", section=key, record=repr(record)[:200])
                continue
            entries.append(RegistryEntry(entry=entry, section=section))

    registry = PackageRegistry(entries)
    log.debug("lockdiff.parsed", packages=len(registry), records=len(entries))
    return registry


def _load(raw_text: str) -> dict[str, Any]:
    try:
        data = json.loads(raw_text)
    except json.JSONDecodeError as exc:
        raise ParseFailure(f"invalid JSON: {exc}") from exc
    except RecursionError as exc:
        raise ParseFailure("JSON nested too deeply") from exc
    if not isinstance(data, dict):
        raise ParseFailure(f"expected a JSON object, got {type(data).__name__}")
    return data


def _section_records(data: dict[str, Any], key: str) -> list[Any]:
    records = data.get(key)
    if records is None:
        return []
    if not isinstance(records, list):
        log.warning("lockdiff.section_not_a_list", section=key, type=type(records).__name__)
        return []
    return records


def _to_entry(record: Any) -> PackageEntry | None:
    if not isinstance(record, dict):
        return None
    name = record.get("name")
    if not isinstance(name, str) or not name:
        return None
    version = record.get("version")
    if version is None:
        version = ""
    elif not isinstance(version, str):
        version = str(version)
    return PackageEntry(name=name, version=version)
