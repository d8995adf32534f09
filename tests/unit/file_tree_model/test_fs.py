"""Tests for file-tree domain filesystem builders."""

from __future__ import annotations

import os
import tempfile
import unittest
from pathlib import Path

from codefusion.exclusions import ExclusionMatcher
from codefusion.file_tree_model import (
    FileNode,
    build_file_tree,
    count_files,
    find_node,
    iter_files,
    list_directory_children,
    sorted_children,
)


def _make_tree(root: Path) -> None:
    (root / "src").mkdir()
    (root / "src" / "main.py").write_text("print('hi')\n", encoding="utf-8")
    (root / "src" / "util.py").write_text("x = 1\n", encoding="utf-8")
    (root / "docs").mkdir()
    (root / "docs" / "guide.md").write_text("# guide\n", encoding="utf-8")
    (root / "empty").mkdir()
    (root / "node_modules").mkdir()
    (root / "node_modules" / "dep.js").write_text("dep\n", encoding="utf-8")
    (root / "README.md").write_text("readme\n", encoding="utf-8")


class FileTreeFsTests(unittest.TestCase):
    def test_build_file_tree_drops_excluded_and_empty_directories(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _make_tree(root)

            tree = build_file_tree(root, ExclusionMatcher(("node_modules",)))

            assert tree is not None
            self.assertTrue(tree.is_dir)
            names = [child.name for child in tree.children]
            self.assertEqual(names, ["README.md", "docs", "src"])
            self.assertEqual(
                set(iter_files(tree)),
                {root / "README.md", root / "docs" / "guide.md", root / "src" / "main.py", root / "src" / "util.py"},
            )

    def test_build_file_tree_is_deterministic_across_worker_counts(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _make_tree(root)

            sequential = build_file_tree(root, max_workers=1)
            parallel = build_file_tree(root, max_workers=8)

            self.assertEqual(sequential, parallel)
            self.assertEqual(count_files(parallel), 5)

    def test_glob_exclusion_removes_matching_files(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _make_tree(root)

            tree = build_file_tree(root, ExclusionMatcher(("*.md", "node_modules")))

            assert tree is not None
            self.assertEqual(set(iter_files(tree)), {root / "src" / "main.py", root / "src" / "util.py"})

    def test_missing_empty_or_excluded_root_yields_none(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            self.assertIsNone(build_file_tree(root))
            self.assertIsNone(build_file_tree(root / "missing"))

            (root / "a.txt").write_text("a", encoding="utf-8")
            self.assertIsNone(build_file_tree(root, ExclusionMatcher((root.name,))))

    def test_file_root_yields_single_file_node(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            target = Path(tmp).resolve() / "one.txt"
            target.write_text("1", encoding="utf-8")

            self.assertEqual(build_file_tree(target), FileNode(path=target, is_dir=False))

    @unittest.skipUnless(hasattr(os, "symlink"), "symlinks unavailable")
    def test_symlinked_directory_is_listed_as_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            (root / "real").mkdir()
            (root / "real" / "x.txt").write_text("x", encoding="utf-8")
            try:
                os.symlink(root / "real", root / "link")
            except OSError:
                self.skipTest("cannot create symlink")

            children, error = list_directory_children(root)

            self.assertIsNone(error)
            by_name = {child.name: child for child in children}
            self.assertTrue(by_name["real"].is_dir)
            self.assertFalse(by_name["link"].is_dir)

    def test_list_directory_children_reports_scan_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            children, error = list_directory_children(Path(tmp) / "missing")
            self.assertEqual(children, [])
            self.assertIsInstance(error, OSError)


class FileTreeTypesTests(unittest.TestCase):
    def test_find_node_and_display_order(self) -> None:
        root = Path("/project")
        util = FileNode(path=root / "src" / "util.py", is_dir=False)
        src = FileNode(path=root / "src", is_dir=True, children=(util,))
        readme = FileNode(path=root / "README.md", is_dir=False)
        tree = FileNode(path=root, is_dir=True, children=(readme, src))

        self.assertIs(find_node(tree, root / "src" / "util.py"), util)
        self.assertIs(find_node(tree, root), tree)
        self.assertIsNone(find_node(tree, root / "nope.txt"))
        self.assertIsNone(find_node(tree, Path("/elsewhere/x")))
        self.assertEqual([child.name for child in sorted_children(tree)], ["src", "README.md"])


if __name__ == "__main__":
    unittest.main()
