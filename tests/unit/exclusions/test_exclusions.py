"""Tests for exclusion pattern matching and list editing."""

from __future__ import annotations

import unittest
from pathlib import Path

from codefusion.exclusions import (
    ExclusionList,
    ExclusionMatcher,
    extension_pattern,
    join_exclusion_list,
    name_pattern,
    parse_exclusion_list,
)


class ExclusionMatcherTests(unittest.TestCase):
    def test_exact_pattern_matches_whole_name_only(self) -> None:
        matcher = ExclusionMatcher(("node_modules",))
        self.assertTrue(matcher.is_excluded("node_modules"))
        self.assertFalse(matcher.is_excluded("node_modules_backup"))
        self.assertFalse(matcher.is_excluded("my_node_modules"))

        build = ExclusionMatcher(("build",))
        self.assertTrue(build.is_excluded("build"))
        self.assertFalse(build.is_excluded("rebuild"))
        self.assertFalse(build.is_excluded("build2"))

    def test_glob_pattern_matches_suffix(self) -> None:
        matcher = ExclusionMatcher(("*.log",))
        self.assertTrue(matcher.is_excluded("debug.log"))
        self.assertTrue(matcher.is_excluded(".log"))
        self.assertFalse(matcher.is_excluded("debug.txt"))
        self.assertFalse(matcher.is_excluded("app.logx"))

    def test_glob_with_leading_and_trailing_star_matches_contains(self) -> None:
        matcher = ExclusionMatcher(("*cache*",))
        self.assertTrue(matcher.is_excluded("__pycache__"))
        self.assertTrue(matcher.is_excluded("cache"))
        self.assertFalse(matcher.is_excluded("cach"))

    def test_regex_metacharacters_are_literal(self) -> None:
        matcher = ExclusionMatcher(("a+b.txt",))
        self.assertTrue(matcher.is_excluded("a+b.txt"))
        self.assertFalse(matcher.is_excluded("aab.txt"))
        self.assertFalse(matcher.is_excluded("a+bxtxt"))

    def test_empty_matcher_excludes_nothing(self) -> None:
        self.assertFalse(ExclusionMatcher().is_excluded("anything"))

    def test_is_path_excluded_uses_last_component(self) -> None:
        matcher = ExclusionMatcher(("build",))
        self.assertTrue(matcher.is_path_excluded(Path("/tmp/project/build")))
        self.assertFalse(matcher.is_path_excluded(Path("/tmp/build/main.py")))


class ExclusionListTests(unittest.TestCase):
    def test_add_strips_and_deduplicates(self) -> None:
        changes: list[list[str]] = []
        exclusions = ExclusionList(on_change=changes.append)

        self.assertTrue(exclusions.add("  *.log "))
        self.assertFalse(exclusions.add("*.log"))
        self.assertFalse(exclusions.add("   "))

        self.assertEqual(exclusions.patterns, ["*.log"])
        self.assertEqual(changes, [["*.log"]])
        self.assertTrue(exclusions.matcher().is_excluded("x.log"))

    def test_remove_returns_false_when_absent(self) -> None:
        exclusions = ExclusionList([".git", "dist"])
        self.assertFalse(exclusions.remove("build"))
        self.assertTrue(exclusions.remove(".git"))
        self.assertEqual(exclusions.patterns, ["dist"])
        self.assertFalse(exclusions.matcher().is_excluded(".git"))

    def test_remove_strips_like_add(self) -> None:
        exclusions = ExclusionList(["dist", "*.log"])
        self.assertTrue(exclusions.remove(" dist "))
        self.assertEqual(exclusions.patterns, ["*.log"])
        self.assertFalse(exclusions.remove("   "))

    def test_constructor_drops_blank_and_duplicate_patterns(self) -> None:
        exclusions = ExclusionList(["a", "", "a", " b "])
        self.assertEqual(exclusions.patterns, ["a", "b"])
        self.assertEqual(len(exclusions), 2)
        self.assertIn("b", exclusions)


class ExclusionHelperTests(unittest.TestCase):
    def test_parse_and_join_comma_list(self) -> None:
        self.assertEqual(parse_exclusion_list(" .git, node_modules,,*.log ,.git"), [".git", "node_modules", "*.log"])
        self.assertEqual(parse_exclusion_list(""), [])
        self.assertEqual(join_exclusion_list([".git", "*.log"]), ".git,*.log")

    def test_extension_and_name_patterns(self) -> None:
        self.assertEqual(extension_pattern(Path("/p/src/main.py")), "*.py")
        self.assertIsNone(extension_pattern(Path("/p/Makefile")))
        self.assertEqual(name_pattern(Path("/p/src")), "src")


if __name__ == "__main__":
    unittest.main()
