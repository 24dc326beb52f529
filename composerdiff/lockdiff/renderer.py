"""Render a :class:`DiffResult` into a display document.

The document is a tree of pydantic models (blocks, rows, cells) rather than
markup, so it serializes cleanly and can be turned into HTML for the page
panel or plain text for the terminal. Rendering is deterministic: identical
input yields an identical document, which keeps panel re-insertion
idempotent.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from composerdiff.lockdiff.models import ChangeRecord, DiffResult, Section

NO_CHANGES_TEXT = "No changes found in composer.lock file."
COLUMNS: tuple[str, ...] = ("Package", "Version", "Section")

_TITLES: dict[str, str] = {
    "added": "Added packages",
    "updated": "Updated packages",
    "removed": "Removed packages",
}


class TextCell(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    value: str


class ChangeCell(BaseModel):
    """A field that changed: rendered as ``previous`` to ``current``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["change"] = "change"
    field: Literal["version", "section"]
    previous: str
    current: str


Cell = Annotated[Union[TextCell, ChangeCell], Field(discriminator="kind")]


class Row(BaseModel):
    model_config = ConfigDict(frozen=True)

    cells: list[Cell]


class TableBlock(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["added", "updated", "removed"]
    title: str
    columns: list[str]
    rows: list[Row]


class MessageBlock(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["message"] = "message"
    text: str


Block = Annotated[Union[TableBlock, MessageBlock], Field(discriminator="kind")]


class DisplayDocument(BaseModel):
    model_config = ConfigDict(frozen=True)

    blocks: list[Block]

    @property
    def has_changes(self) -> bool:
        return any(isinstance(b, TableBlock) for b in self.blocks)


def render(diff: DiffResult) -> DisplayDocument:
    """Build the display document for *diff*.

    Empty categories are omitted; when all three are empty the document
    holds a single "no changes" message instead.
    """
    blocks: list[Block] = []
    for kind, records in (
        ("added", diff.added),
        ("updated", diff.updated),
        ("removed", diff.removed),
    ):
        if not records:
            continue
        rows = [_row(kind, records[name]) for name in sorted(records)]
        blocks.append(
            TableBlock(kind=kind, title=_TITLES[kind], columns=list(COLUMNS), rows=rows)
        )

    if not blocks:
        blocks.append(MessageBlock(text=NO_CHANGES_TEXT))
    return DisplayDocument(blocks=blocks)


def _section_label(section: Section | None) -> str:
    return section.value if section is not None else ""


def _row(kind: str, record: ChangeRecord) -> Row:
    name = TextCell(value=record.name)
    if kind == "added":
        return Row(
            cells=[
                name,
                TextCell(value=record.new_version or ""),
                TextCell(value=_section_label(record.new_section)),
            ]
        )
    if kind == "removed":
        return Row(
            cells=[
                name,
                TextCell(value=record.previous_version or ""),
                TextCell(value=_section_label(record.previous_section)),
            ]
        )

    # updated: only a field that actually changed is shown as from -> to
    version: Cell
    if record.version_changed:
        version = ChangeCell(
            field="version",
            previous=record.previous_version or "",
            current=record.new_version or "",
        )
    else:
        version = TextCell(value=record.new_version or "")

    section: Cell
    if record.section_changed:
        section = ChangeCell(
            field="section",
            previous=_section_label(record.previous_section),
            current=_section_label(record.new_section),
        )
    else:
        section = TextCell(value=_section_label(record.new_section))

    return Row(cells=[name, version, section])


# ── plain text ───────────────────────────────────────────────────────────


def _cell_text(cell: TextCell | ChangeCell) -> str:
    if isinstance(cell, ChangeCell):
        return f"{cell.previous} -> {cell.current}"
    return cell.value


def render_text(document: DisplayDocument) -> str:
    """Render *document* as aligned plain-text tables."""
    parts: list[str] = []
    for block in document.blocks:
        if isinstance(block, MessageBlock):
            parts.append(block.text)
            continue

        grid = [list(block.columns)] + [[_cell_text(c) for c in row.cells] for row in block.rows]
        widths = [max(len(line[i]) for line in grid) for i in range(len(block.columns))]
        lines = [block.title, "=" * len(block.title)]
        for idx, line in enumerate(grid):
            lines.append("  ".join(text.ljust(widths[i]) for i, text in enumerate(line)).rstrip())
            if idx == 0:
                lines.append("  ".join("-" * w for w in widths))
        parts.append("\n".join(lines))
    return "\n\n".join(parts)
