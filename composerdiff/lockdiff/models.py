"""Data models for the lock file diff engine."""

from __future__ import annotations

import enum
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType


class Section(str, enum.Enum):
    """Which lock section a package was declared in."""

    DIRECT = "require"
    DEVELOPMENT = "require-dev"


@dataclass(frozen=True)
class PackageEntry:
    """A single ``{name, version}`` record from a lock section."""

    name: str
    version: str


@dataclass(frozen=True)
class RegistryEntry:
    entry: PackageEntry
    section: Section

    @property
    def name(self) -> str:
        return self.entry.name

    @property
    def version(self) -> str:
        return self.entry.version


class PackageRegistry(Mapping[str, RegistryEntry]):
    """Read-only mapping of package name to entry and section.

    Built once per manifest snapshot. ``error`` carries the parse failure
    message when the snapshot could not be read; the registry is then empty.
    """

    __slots__ = ("_entries", "error")

    def __init__(
        self,
        entries: Iterable[RegistryEntry] = (),
        *,
        error: str | None = None,
    ) -> None:
        data: dict[str, RegistryEntry] = {}
        for item in entries:
            # Later entries override earlier ones with the same name.
            data[item.name] = item
        self._entries: Mapping[str, RegistryEntry] = MappingProxyType(data)
        self.error = error

    @classmethod
    def empty(cls, error: str | None = None) -> PackageRegistry:
        return cls((), error=error)

    def __getitem__(self, name: str) -> RegistryEntry:
        return self._entries[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"PackageRegistry({len(self)} packages, error={self.error!r})"


@dataclass(frozen=True)
class ChangeRecord:
    """The before/after state of one package across two snapshots.

    ``previous_section is None`` means added, ``new_section is None`` means
    removed; otherwise the package was updated if version or section differ.
    """

    name: str
    previous_section: Section | None
    new_section: Section | None
    previous_version: str | None
    new_version: str | None

    @property
    def version_changed(self) -> bool:
        return self.previous_version != self.new_version

    @property
    def section_changed(self) -> bool:
        return self.previous_section != self.new_section

    @property
    def kind(self) -> str:
        if self.previous_section is None:
            return "added"
        if self.new_section is None:
            return "removed"
        if self.version_changed or self.section_changed:
            return "updated"
        return "unchanged"


@dataclass
class DiffResult:
    """Three disjoint categories of change, each keyed by package name."""

    added: dict[str, ChangeRecord] = field(default_factory=dict)
    updated: dict[str, ChangeRecord] = field(default_factory=dict)
    removed: dict[str, ChangeRecord] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not (self.added or self.updated or self.removed)

    @property
    def counts(self) -> dict[str, int]:
        return {
            "added": len(self.added),
            "updated": len(self.updated),
            "removed": len(self.removed),
        }
