"""Command-line access to the layout engine.

Usage:
  mindlayout layout --input map.json --mode radial --output laid-out.json
  mindlayout import-outline --input notes.md --root-label "Project" --output map.json
  mindlayout export-outline --input map.json
  mindlayout check --input map.json
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from mindlayout import __version__
from mindlayout.integrity import check_snapshot
from mindlayout.layout import apply_layout
from mindlayout.model import LayoutMode, Node, SnapshotFormatError, dump_snapshot, load_snapshot
from mindlayout.outline import outline_to_snapshot, parse_outline, snapshot_to_outline
from mindlayout.settings import LayoutSettings

logger = logging.getLogger(__name__)


def _read_text(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    return Path(path).expanduser().read_text(encoding="utf-8")


def _write_text(path: str | None, text: str) -> None:
    if not path or path == "-":
        sys.stdout.write(text + "\n")
        return
    out = Path(path).expanduser()
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(text + "\n", encoding="utf-8")
    logger.info("Wrote %s", out.resolve())


def _load_settings(path: str | None) -> LayoutSettings:
    if not path:
        return LayoutSettings()
    return LayoutSettings.from_json(_read_text(path))


def _default_root(nodes: list[Node]) -> str | None:
    for node in nodes:
        if node.parent_id is None and node.depth == 0:
            return node.id
    return nodes[0].id if nodes else None


def _cmd_layout(args: argparse.Namespace) -> int:
    nodes, edges = load_snapshot(_read_text(args.input))
    settings = _load_settings(args.settings)
    root_id = args.root or _default_root(nodes)
    if root_id is None:
        sys.stderr.write("Snapshot has no nodes\n")
        return 1
    mode = LayoutMode(args.mode) if args.mode else settings.layout_mode
    nodes, edges = apply_layout(nodes, edges, root_id, mode, settings)
    _write_text(args.output, dump_snapshot(nodes, edges))
    return 0


def _cmd_import_outline(args: argparse.Namespace) -> int:
    items = parse_outline(_read_text(args.input))
    if not items:
        sys.stderr.write("No bullet lines found in outline\n")
        return 1
    settings = _load_settings(args.settings)
    nodes, edges = outline_to_snapshot(items, root_label=args.root_label, settings=settings)
    if args.layout:
        nodes, edges = apply_layout(nodes, edges, nodes[0].id, settings=settings)
    _write_text(args.output, dump_snapshot(nodes, edges))
    return 0


def _cmd_export_outline(args: argparse.Namespace) -> int:
    nodes, edges = load_snapshot(_read_text(args.input))
    root_id = args.root or _default_root(nodes)
    if root_id is None:
        sys.stderr.write("Snapshot has no nodes\n")
        return 1
    _write_text(args.output, snapshot_to_outline(nodes, edges, root_id))
    return 0


def _cmd_check(args: argparse.Namespace) -> int:
    nodes, edges = load_snapshot(_read_text(args.input))
    report = check_snapshot(nodes, edges)
    print(f"Nodes: {len(nodes)}  Edges: {len(edges)}")
    if report.ok:
        print("Integrity: OK")
        return 0
    print(f"Integrity: {len(report.issues)} issue(s)")
    for issue in report.issues:
        print(f"  [{issue.code}] {issue.node_id}: {issue.message}")
    return 1


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="mindlayout")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_lay = sub.add_parser("layout", help="Auto-layout a JSON snapshot")
    p_lay.add_argument("--input", required=True, help="Snapshot path ('-' for stdin)")
    p_lay.add_argument("--output", help="Output path (default: stdout)")
    p_lay.add_argument("--root", help="Root node id (default: first top-level node)")
    p_lay.add_argument("--mode", choices=[m.value for m in LayoutMode])
    p_lay.add_argument("--settings", help="LayoutSettings JSON file")
    p_lay.set_defaults(func=_cmd_layout)

    p_imp = sub.add_parser("import-outline", help="Build a snapshot from a bullet outline")
    p_imp.add_argument("--input", required=True, help="Outline path ('-' for stdin)")
    p_imp.add_argument("--output", help="Output path (default: stdout)")
    p_imp.add_argument("--root-label", default="Idea", help="Text of the root node")
    p_imp.add_argument("--layout", action="store_true", help="Run horizontal layout after import")
    p_imp.add_argument("--settings", help="LayoutSettings JSON file")
    p_imp.set_defaults(func=_cmd_import_outline)

    p_exp = sub.add_parser("export-outline", help="Write a snapshot as a bullet outline")
    p_exp.add_argument("--input", required=True, help="Snapshot path ('-' for stdin)")
    p_exp.add_argument("--output", help="Output path (default: stdout)")
    p_exp.add_argument("--root", help="Root node id (default: first top-level node)")
    p_exp.set_defaults(func=_cmd_export_outline)

    p_chk = sub.add_parser("check", help="Report integrity problems in a snapshot")
    p_chk.add_argument("--input", required=True, help="Snapshot path ('-' for stdin)")
    p_chk.set_defaults(func=_cmd_check)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        return int(args.func(args))
    except (OSError, SnapshotFormatError) as exc:
        sys.stderr.write(f"mindlayout: {exc}\n")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
