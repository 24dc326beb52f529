"""Lock diff engine — parse, classify, and render composer.lock changes."""

from composerdiff.lockdiff.classifier import classify, diff_manifests
from composerdiff.lockdiff.models import (
    ChangeRecord,
    DiffResult,
    PackageEntry,
    PackageRegistry,
    RegistryEntry,
    Section,
)
from composerdiff.lockdiff.parser import parse
from composerdiff.lockdiff.renderer import DisplayDocument, render, render_text

__all__ = [
    "ChangeRecord",
    "DiffResult",
    "DisplayDocument",
    "PackageEntry",
    "PackageRegistry",
    "RegistryEntry",
    "Section",
    "classify",
    "diff_manifests",
    "parse",
    "render",
    "render_text",
]
