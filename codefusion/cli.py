"""Command-line front door for codefusion.

Opens a directory, applies name/content filters and exclusions, selects
files, and writes the combined export (and optionally its token estimate).
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from . import config
from .exclusions import ExclusionList
from .export import PathOption
from .file_tree_model import FileNode, sorted_children
from .runtime.engine import Engine


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def render_tree(node: FileNode | None, root: Path) -> str:
    """Render ``node`` as an indented listing in display order."""
    if node is None:
        return ""
    lines: list[str] = []

    def walk(current: FileNode, depth: int) -> None:
        label = current.path.name or str(current.path)
        if current.path == root:
            label = str(root)
        lines.append(("  " * depth) + label + ("/" if current.is_dir else ""))
        for child in sorted_children(current):
            walk(child, depth + 1)

    walk(node, 0)
    return "\n".join(lines) + "\n"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Select files under a directory and combine their contents into one text block."
    )
    parser.add_argument("path", nargs="?", default=None, help="Root directory. Defaults to current directory.")
    parser.add_argument("--name", default="", help="Keep files whose name contains this text.")
    parser.add_argument("--content", default="", help="Keep files whose content contains this text.")
    parser.add_argument("--name-case-sensitive", action="store_true", help="Match --name case-sensitively.")
    parser.add_argument("--content-case-sensitive", action="store_true", help="Match --content case-sensitively.")
    parser.add_argument(
        "--exclude",
        action="append",
        default=[],
        metavar="PATTERN",
        help="Extra exclusion pattern for this run (exact name or * glob). Repeatable.",
    )
    parser.add_argument("--add-exclusion", action="append", default=[], metavar="PATTERN", help="Persist an exclusion pattern.")
    parser.add_argument(
        "--remove-exclusion",
        action="append",
        default=[],
        metavar="PATTERN",
        help="Remove a persisted exclusion pattern.",
    )
    parser.add_argument(
        "--select",
        action="append",
        default=[],
        metavar="PATH",
        help="Toggle selection of a file or directory (relative to root or absolute). Repeatable.",
    )
    parser.add_argument("--all", action="store_true", help="Select every file in the filtered tree.")
    path_group = parser.add_mutually_exclusive_group()
    path_group.add_argument("--relative", action="store_true", help="Show paths relative to the root (persisted).")
    path_group.add_argument("--full", action="store_true", help="Show absolute paths (persisted).")
    parser.add_argument("--tree", action="store_true", help="Print the filtered tree instead of exporting.")
    parser.add_argument("--tokens", action="store_true", help="Print the estimated token count to stderr.")
    parser.add_argument("--output", metavar="FILE", default=None, help="Write the export to FILE instead of stdout.")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging on stderr.")
    return parser


def main(argv: list[str] | None = None, default_path: Path | None = None) -> int:
    """Parse CLI arguments and run one export.

    ``default_path`` is primarily for tests; when omitted the current working
    directory is used.
    """
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    if default_path is None:
        default_path = Path.cwd()
    root = Path(args.path or default_path)
    if not root.exists():
        raise SystemExit(f"Path not found: {root}")

    persisted = ExclusionList(config.load_excluded_items(), on_change=config.save_excluded_items)
    for pattern in args.add_exclusion:
        persisted.add(pattern)
    for pattern in args.remove_exclusion:
        persisted.remove(pattern)

    if args.relative:
        config.save_path_option(PathOption.RELATIVE)
    elif args.full:
        config.save_path_option(PathOption.FULL)

    exclusions = ExclusionList(persisted.patterns + list(args.exclude))
    with Engine(exclusions=exclusions, load_path_option=config.load_path_option) as engine:
        engine.open_directory(root)
        engine.wait_until_idle()
        if args.name or args.content or args.name_case_sensitive or args.content_case_sensitive:
            engine.set_name_case_sensitive(args.name_case_sensitive)
            engine.set_content_case_sensitive(args.content_case_sensitive)
            engine.set_name_query(args.name)
            engine.set_content_query(args.content)
            engine.wait_until_idle()

        resolved_root = engine.state.root
        assert resolved_root is not None
        if args.tree:
            sys.stdout.write(render_tree(engine.filtered_tree, resolved_root))
            return 0

        if args.all:
            engine.select_all()
        for raw in args.select:
            if not engine.toggle(raw):
                print(f"codefusion: nothing to select for {raw}", file=sys.stderr)
        engine.wait_until_idle()

        text = engine.export_text()
        if args.output:
            Path(args.output).write_text(text, encoding="utf-8")
        else:
            sys.stdout.write(text)
        if args.tokens:
            print(f"{engine.token_count()} tokens ({len(engine.selection)} files)", file=sys.stderr)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
