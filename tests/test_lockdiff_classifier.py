"""Tests for the diff classifier."""

from __future__ import annotations

from composerdiff.lockdiff.classifier import classify, diff_manifests
from composerdiff.lockdiff.models import ChangeRecord, PackageRegistry, Section
from composerdiff.lockdiff.parser import parse

from tests.helpers import lock_json


def _reg(packages=(), packages_dev=()) -> PackageRegistry:
    return parse(lock_json(packages, packages_dev))


class TestClassifyProperties:
    def test_identical_registries_produce_no_changes(self):
        reg = _reg([("a/a", "1.0"), ("b/b", "2.0")], [("c/c", "0.1")])
        result = classify(reg, reg)
        assert result.added == {}
        assert result.updated == {}
        assert result.removed == {}
        assert result.is_empty

    def test_disjoint_registries(self):
        old = _reg([("a/a", "1.0")], [("b/b", "2.0")])
        new = _reg([("c/c", "3.0")], [("d/d", "4.0")])
        result = classify(old, new)
        assert set(result.added) == {"c/c", "d/d"}
        assert set(result.removed) == {"a/a", "b/b"}
        assert result.updated == {}

    def test_section_move_is_update_with_same_version(self):
        old = _reg([("a/a", "1.0")])
        new = _reg([], [("a/a", "1.0")])
        result = classify(old, new)
        assert result.added == {} and result.removed == {}
        record = result.updated["a/a"]
        assert record.previous_version == record.new_version == "1.0"
        assert record.previous_section is Section.DIRECT
        assert record.new_section is Section.DEVELOPMENT

    def test_order_within_section_is_irrelevant(self):
        old = _reg([("a/a", "1.0"), ("b/b", "2.0")])
        new = _reg([("b/b", "2.0"), ("a/a", "1.0")])
        assert classify(old, new).is_empty

    def test_categories_are_name_sorted(self):
        new = _reg([("zeta/z", "1"), ("alpha/a", "1"), ("mid/m", "1")])
        result = classify(PackageRegistry.empty(), new)
        assert list(result.added) == ["alpha/a", "mid/m", "zeta/z"]

    def test_counts(self):
        old = _reg([("a/a", "1"), ("b/b", "1")])
        new = _reg([("a/a", "2"), ("c/c", "1")])
        assert classify(old, new).counts == {"added": 1, "updated": 1, "removed": 1}


class TestClassifyScenarios:
    def test_update_and_add(self):
        old = _reg([("foo/bar", "1.0")])
        new = _reg([("foo/bar", "2.0")], [("baz/qux", "0.1")])
        result = classify(old, new)

        assert result.updated == {
            "foo/bar": ChangeRecord(
                name="foo/bar",
                previous_section=Section.DIRECT,
                new_section=Section.DIRECT,
                previous_version="1.0",
                new_version="2.0",
            )
        }
        assert result.added == {
            "baz/qux": ChangeRecord(
                name="baz/qux",
                previous_section=None,
                new_section=Section.DEVELOPMENT,
                previous_version=None,
                new_version="0.1",
            )
        }
        assert result.removed == {}

    def test_everything_removed(self):
        result = classify(_reg([("a/a", "1.0")]), PackageRegistry.empty())
        assert list(result.removed) == ["a/a"]
        assert result.removed["a/a"].new_section is None
        assert result.removed["a/a"].new_version is None
        assert result.added == {} and result.updated == {}

    def test_malformed_old_manifest(self):
        result = diff_manifests("{{{ broken", lock_json([("new/pkg", "1.2.3")]))
        assert list(result.added) == ["new/pkg"]
        assert result.removed == {} and result.updated == {}

    def test_both_absent(self):
        assert diff_manifests("", "").is_empty


class TestChangeRecord:
    def test_kinds(self):
        def rec(ps, ns, pv, nv):
            return ChangeRecord("x/x", ps, ns, pv, nv)

        assert rec(None, Section.DIRECT, None, "1").kind == "added"
        assert rec(Section.DIRECT, None, "1", None).kind == "removed"
        assert rec(Section.DIRECT, Section.DIRECT, "1", "2").kind == "updated"
        assert rec(Section.DIRECT, Section.DEVELOPMENT, "1", "1").kind == "updated"
        assert rec(Section.DIRECT, Section.DIRECT, "1", "1").kind == "unchanged"
