"""
Tests for tree planning -- pure functions over TreeEntry values.
"""

from __future__ import annotations

from pathlib import Path

from agvault.tree import (
    TreeEntry,
    list_files,
    match_requested,
    plan_copy_out,
    plan_prune,
    scan_tree,
)


def f(name: str) -> TreeEntry:
    return TreeEntry(name=name, is_dir=False)


def d(name: str, *children: TreeEntry) -> TreeEntry:
    return TreeEntry(name=name, is_dir=True, children=tuple(children))


WORKSPACE = d(
    "proj",
    f("README.md"),
    d("docs", f("a.md"), d("old", f("gone.md"))),
    d("notes", f("README.md")),
)


class TestListFiles:
    def test_traversal_order(self):
        assert list_files(WORKSPACE) == [
            "README.md",
            "docs/a.md",
            "docs/old/gone.md",
            "notes/README.md",
        ]

    def test_none(self):
        assert list_files(None) == []


class TestPlanPrune:
    def test_deletes_unlisted_and_empty_dirs(self):
        plan = plan_prune(WORKSPACE, {"README.md", "docs/a.md", "notes/README.md"})
        assert plan.files == ["docs/old/gone.md"]
        assert plan.dirs == ["docs/old"]

    def test_everything_removed_includes_root(self):
        plan = plan_prune(WORKSPACE, set())
        assert len(plan.files) == 4
        assert plan.dirs == ["docs/old", "docs", "notes", ""]

    def test_already_empty_dir(self):
        tree = d("ws", f("a.md"), d("empty"))
        plan = plan_prune(tree, {"a.md"})
        assert plan.files == []
        assert plan.dirs == ["empty"]

    def test_missing_tree(self):
        plan = plan_prune(None, {"a.md"})
        assert plan.files == [] and plan.dirs == []


class TestCopyOutPlan:
    def test_all_when_unfiltered(self):
        assert plan_copy_out(WORKSPACE, "proj") == list_files(WORKSPACE)
        assert plan_copy_out(WORKSPACE, "proj", []) == list_files(WORKSPACE)

    def test_exact_and_qualified(self):
        assert plan_copy_out(WORKSPACE, "proj", ["docs/a.md"]) == ["docs/a.md"]
        assert plan_copy_out(WORKSPACE, "proj", ["proj/docs/a.md"]) == ["docs/a.md"]

    def test_suffix(self):
        assert plan_copy_out(WORKSPACE, "proj", ["old/gone.md"]) == ["docs/old/gone.md"]

    def test_bare_filename_selects_every_match(self):
        assert plan_copy_out(WORKSPACE, "proj", ["README.md"]) == [
            "README.md",
            "notes/README.md",
        ]

    def test_suffix_is_segment_bounded(self):
        assert not match_requested("docs/xa.md", "proj", ["a.md"])
        assert match_requested("docs\\a.md".replace("\\", "/"), "proj", ["docs\\a.md"])


class TestScanTree:
    def test_scan(self, tmp_path: Path):
        tmp_path = tmp_path / "scan"
        tmp_path.mkdir()
        (tmp_path / "b").mkdir()
        (tmp_path / "b" / "c.md").write_text("c")
        (tmp_path / "a.md").write_text("a")

        tree = scan_tree(tmp_path)

        assert tree.is_dir
        assert list_files(tree) == ["a.md", "b/c.md"]

    def test_scan_missing(self, tmp_path: Path):
        assert scan_tree(tmp_path / "nope") is None
        (tmp_path / "file").write_text("x")
        assert scan_tree(tmp_path / "file") is None
