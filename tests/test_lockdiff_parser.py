"""Tests for the composer.lock parser."""

from __future__ import annotations

import json

import pytest
from structlog.testing import capture_logs

from composerdiff.lockdiff.classifier import diff_manifests
from composerdiff.lockdiff.models import PackageRegistry, Section
from composerdiff.lockdiff.parser import parse

from tests.helpers import lock_json


class TestParse:
    def test_both_sections(self):
        reg = parse(lock_json([("foo/bar", "1.0")], [("baz/qux", "0.1")]))
        assert len(reg) == 2
        assert reg["foo/bar"].section is Section.DIRECT
        assert reg["foo/bar"].version == "1.0"
        assert reg["baz/qux"].section is Section.DEVELOPMENT
        assert reg.error is None

    def test_missing_sections_are_empty(self):
        reg = parse(json.dumps({"content-hash": "abc"}))
        assert len(reg) == 0
        assert reg.error is None

    def test_only_dev_section(self):
        reg = parse(json.dumps({"packages-dev": [{"name": "a/a", "version": "1"}]}))
        assert list(reg) == ["a/a"]
        assert reg["a/a"].section is Section.DEVELOPMENT

    @pytest.mark.parametrize("text", ["", "   \n", None])
    def test_empty_text_is_absent_not_error(self, text):
        reg = parse(text)
        assert len(reg) == 0
        assert reg.error is None

    def test_malformed_json_yields_empty_registry(self):
        with capture_logs() as logs:
            reg = parse("{not json")
        assert len(reg) == 0
        assert reg.error is not None
        assert "invalid JSON" in reg.error
        assert any(e["event"] == "lockdiff.parse_failed" and e["log_level"] == "error" for e in logs)

    def test_deeply_nested_json_is_a_parse_failure(self):
        reg = parse("[" * 100000)
        assert len(reg) == 0
        assert reg.error == "JSON nested too deeply"

    def test_deeply_nested_new_side_still_diffs(self):
        result = diff_manifests(lock_json([("foo/bar", "1.0")]), "[" * 100000)
        assert list(result.removed) == ["foo/bar"]

    def test_non_object_top_level(self):
        reg = parse("[1, 2, 3]")
        assert len(reg) == 0
        assert "expected a JSON object" in reg.error

    def test_duplicate_in_section_last_write_wins(self):
        reg = parse(lock_json([("foo/bar", "1.0"), ("foo/bar", "1.1")]))
        assert len(reg) == 1
        assert reg["foo/bar"].version == "1.1"

    def test_name_in_both_sections_later_section_wins(self):
        reg = parse(lock_json([("foo/bar", "1.0")], [("foo/bar", "1.0")]))
        assert reg["foo/bar"].section is Section.DEVELOPMENT

    def test_skips_records_without_name(self):
        text = json.dumps(
            {"packages": [{"version": "1.0"}, "garbage", {"name": "ok/pkg", "version": "2"}]}
        )
        reg = parse(text)
        assert list(reg) == ["ok/pkg"]

    def test_missing_version_becomes_empty_string(self):
        reg = parse(json.dumps({"packages": [{"name": "a/a"}]}))
        assert reg["a/a"].version == ""

    def test_non_string_version_is_stringified(self):
        reg = parse(json.dumps({"packages": [{"name": "a/a", "version": 2}]}))
        assert reg["a/a"].version == "2"

    def test_section_not_a_list_is_empty(self):
        reg = parse(json.dumps({"packages": {"name": "a/a"}, "packages-dev": []}))
        assert len(reg) == 0
        assert reg.error is None


class TestPackageRegistry:
    def test_is_read_only(self):
        reg = parse(lock_json([("foo/bar", "1.0")]))
        with pytest.raises(TypeError):
            reg["x"] = reg["foo/bar"]  # type: ignore[index]

    def test_empty_carries_error(self):
        reg = PackageRegistry.empty(error="boom")
        assert len(reg) == 0
        assert reg.error == "boom"
        assert "boom" in repr(reg)
