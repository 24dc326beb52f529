"""Tests for the display document renderer."""

from __future__ import annotations

import json

from composerdiff.lockdiff.classifier import classify, diff_manifests
from composerdiff.lockdiff.parser import parse
from composerdiff.lockdiff.renderer import (
    NO_CHANGES_TEXT,
    ChangeCell,
    DisplayDocument,
    MessageBlock,
    TableBlock,
    TextCell,
    render,
    render_text,
)
from tests.helpers import lock_json


def _cells(block: TableBlock, row: int) -> list:
    return block.rows[row].cells


class TestRender:
    def test_no_changes_placeholder(self):
        reg = parse(lock_json([("a/a", "1.0")], [("b/b", "2.0")]))
        doc = render(classify(reg, reg))
        assert doc.blocks == [MessageBlock(text=NO_CHANGES_TEXT)]
        assert not doc.has_changes

    def test_empty_categories_are_omitted(self):
        doc = render(diff_manifests("", lock_json([("a/a", "1.0")])))
        assert [b.kind for b in doc.blocks] == ["added"]

    def test_block_order(self):
        old = lock_json([("gone/pkg", "1"), ("upd/pkg", "1")])
        new = lock_json([("new/pkg", "1"), ("upd/pkg", "2")])
        doc = render(diff_manifests(old, new))
        assert [b.kind for b in doc.blocks] == ["added", "updated", "removed"]
        assert [b.title for b in doc.blocks] == [
            "Added packages",
            "Updated packages",
            "Removed packages",
        ]
        assert all(b.columns == ["Package", "Version", "Section"] for b in doc.blocks)

    def test_added_and_removed_rows(self):
        doc = render(diff_manifests(lock_json([("old/pkg", "1.0")]), lock_json([], [("new/pkg", "0.1")])))
        added, removed = doc.blocks
        assert _cells(added, 0) == [
            TextCell(value="new/pkg"),
            TextCell(value="0.1"),
            TextCell(value="require-dev"),
        ]
        assert _cells(removed, 0) == [
            TextCell(value="old/pkg"),
            TextCell(value="1.0"),
            TextCell(value="require"),
        ]

    def test_updated_version_only(self):
        doc = render(diff_manifests(lock_json([("foo/bar", "1.0")]), lock_json([("foo/bar", "2.0")])))
        (block,) = doc.blocks
        name, version, section = _cells(block, 0)
        assert version == ChangeCell(field="version", previous="1.0", current="2.0")
        assert section == TextCell(value="require")

    def test_updated_section_only(self):
        doc = render(diff_manifests(lock_json([("foo/bar", "1.0")]), lock_json([], [("foo/bar", "1.0")])))
        (block,) = doc.blocks
        _, version, section = _cells(block, 0)
        assert version == TextCell(value="1.0")
        assert section == ChangeCell(field="section", previous="require", current="require-dev")

    def test_rows_sorted_by_name(self):
        doc = render(diff_manifests("", lock_json([("z/z", "1"), ("a/a", "1"), ("m/m", "1")])))
        names = [row.cells[0].value for row in doc.blocks[0].rows]
        assert names == ["a/a", "m/m", "z/z"]

    def test_render_is_stable(self):
        old = lock_json([("a/a", "1"), ("b/b", "1")])
        new = lock_json([("b/b", "2"), ("c/c", "1")])
        first = render(diff_manifests(old, new))
        second = render(diff_manifests(old, new))
        assert first == second
        assert first.model_dump_json() == second.model_dump_json()

    def test_document_round_trips_through_json(self):
        doc = render(diff_manifests(lock_json([("a/a", "1")]), lock_json([("a/a", "2")])))
        payload = json.loads(doc.model_dump_json())
        assert payload["blocks"][0]["rows"][0]["cells"][1]["kind"] == "change"
        assert DisplayDocument.model_validate(payload) == doc


class TestRenderText:
    def test_message(self):
        assert render_text(render(diff_manifests("", ""))) == NO_CHANGES_TEXT

    def test_table(self):
        doc = render(diff_manifests(lock_json([("foo/bar", "1.0")]), lock_json([("foo/bar", "2.0")])))
        text = render_text(doc)
        assert text.splitlines()[0] == "Updated packages"
        assert "1.0 -> 2.0" in text
        assert "foo/bar" in text
