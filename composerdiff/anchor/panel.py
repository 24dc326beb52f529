"""Build the panel element for a display document."""

from __future__ import annotations

from bs4 import Tag

from composerdiff.anchor.page import Page
from composerdiff.lockdiff.renderer import ChangeCell, DisplayDocument, MessageBlock, TableBlock

PANEL_CLASS = "composer-diff-container"
PANEL_SELECTOR = f".{PANEL_CLASS}"
PANEL_TITLE = "Composer Diff"


def build_panel(page: Page, document: DisplayDocument) -> Tag:
    """Return a detached ``div.composer-diff-container`` for *document*.

    All values are set as text nodes, never parsed as markup.
    """
    panel = page.new_tag("div", classes=[PANEL_CLASS])

    header = page.new_tag("div", classes=["composer-diff-header"])
    header.append(page.new_tag("h3", classes=["composer-diff-title"], text=PANEL_TITLE))
    panel.append(header)

    content = page.new_tag("div", classes=["markdown-content"])
    for block in document.blocks:
        if isinstance(block, MessageBlock):
            content.append(page.new_tag("p", text=block.text))
        else:
            content.append(page.new_tag("h2", text=block.title))
            content.append(_table(page, block))
    panel.append(content)
    return panel


def _table(page: Page, block: TableBlock) -> Tag:
    table = page.new_tag("table")

    thead = page.new_tag("thead")
    head_row = page.new_tag("tr")
    for column in block.columns:
        head_row.append(page.new_tag("th", text=column))
    thead.append(head_row)
    table.append(thead)

    tbody = page.new_tag("tbody")
    for row in block.rows:
        tr = page.new_tag("tr", classes=[f"package-{block.kind}"])
        for cell in row.cells:
            td = page.new_tag("td")
            if isinstance(cell, ChangeCell):
                td.append(page.new_tag("span", classes=[f"{cell.field}-from"], text=cell.previous))
                td.append(" → ")
                td.append(page.new_tag("span", classes=[f"{cell.field}-to"], text=cell.current))
            else:
                td.string = cell.value
            tr.append(td)
        tbody.append(tr)
    table.append(tbody)
    return table
