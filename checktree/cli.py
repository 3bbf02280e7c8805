from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Iterable, Optional, TextIO

from checktree import __version__
from checktree.core.config import load_config
from checktree.core.demo import load_demo
from checktree.core.errors import TreeError
from checktree.core.errors_log import log_error, resolve_errors_log_path
from checktree.core.models import StateChange
from checktree.core.tree import TreeStateEngine
from checktree.core.tri_state import CHECKED, MIXED, state_name

MARKERS = {
    CHECKED: "[x]",
    MIXED: "[-]",
}

COMMANDS = ("add-root", "add-child", "check", "uncheck", "delete", "rename", "clear", "demo")


class CommandError(ValueError):
    def __init__(self, message: str, line: str) -> None:
        super().__init__(message)
        self.line = line


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Checkbox tree CLI")
    parser.add_argument("--cli", action="store_true", help="Run in CLI mode")
    parser.add_argument("--config", type=Path, default=Path("config.yaml"), help="Config file path")
    parser.add_argument("--script", type=Path, help="Read commands from file (default: stdin)")
    parser.add_argument("--demo", action="store_true", help="Load the demo tree before running commands")
    parser.add_argument("--json", action="store_true", help="Print the final tree as JSON")
    parser.add_argument("--errors-log", type=Path, help="Errors JSONL log path")
    parser.add_argument("--quiet", action="store_true", help="Do not print per-command state changes")
    return parser


def _parse_id(value: str, line: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise CommandError(f"Expected a node id, got {value!r}", line) from None


def _split(line: str, count: int) -> list[str]:
    parts = line.split(maxsplit=count)
    if len(parts) <= count:
        raise CommandError(f"Expected {count} argument(s): {line}", line)
    return parts[1:]


def run_command(engine: TreeStateEngine, line: str) -> str:
    verb = line.split(maxsplit=1)[0].lower()

    if verb == "add-root":
        (label,) = _split(line, 1)
        node_id = engine.insert_root(label)
        return f"Added root {node_id}: {engine.get_label(node_id)}"
    if verb == "add-child":
        parent, label = _split(line, 2)
        node_id = engine.insert_child(_parse_id(parent, line), label)
        return f"Added child {node_id}: {engine.get_label(node_id)}"
    if verb in {"check", "uncheck"}:
        (node,) = _split(line, 1)
        node_id = _parse_id(node, line)
        engine.set_checked(node_id, verb == "check")
        return f"{verb.capitalize()}ed {node_id}"
    if verb == "delete":
        (node,) = _split(line, 1)
        node_id = _parse_id(node, line)
        label = engine.get_label(node_id)
        engine.delete(node_id)
        return f"Deleted {node_id}: {label}"
    if verb == "rename":
        node, label = _split(line, 2)
        node_id = _parse_id(node, line)
        engine.set_label(node_id, label)
        return f"Renamed {node_id}: {engine.get_label(node_id)}"
    if verb == "clear":
        engine.clear()
        return "Cleared all items"
    if verb == "demo":
        roots = load_demo(engine)
        return f"Loaded demo data ({len(roots)} roots)"
    raise CommandError(f"Unknown command {verb!r} (expected one of: {', '.join(COMMANDS)})", line)


def _iter_commands(lines: Iterable[str]) -> Iterable[str]:
    for raw in lines:
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        yield line


def _format_change(engine: TreeStateEngine, change: StateChange) -> str:
    return f"  {change.node_id} {engine.get_label(change.node_id)} -> {state_name(change.state)}"


def format_tree(engine: TreeStateEngine) -> list[str]:
    lines: list[str] = []
    for node_id in engine.walk():
        depth = 0
        parent = engine.get_parent(node_id)
        while parent is not None:
            depth += 1
            parent = engine.get_parent(parent)
        marker = MARKERS.get(engine.get_state(node_id), "[ ]")
        edited = " *" if engine.is_edited(node_id) else ""
        lines.append(f"{'  ' * depth}{marker} {engine.get_label(node_id)} (#{node_id}){edited}")
    return lines


def build_report(engine: TreeStateEngine, commands: int, errors: int) -> dict:
    nodes = []
    for node_id in engine.walk():
        info = engine.node_info(node_id)
        nodes.append(
            {
                "id": info.id,
                "label": info.label,
                "state": state_name(info.state),
                "parent": info.parent,
                "children": list(info.children),
                "edited": info.edited,
            }
        )
    return {
        "version": __version__,
        "commands": commands,
        "errors": errors,
        "roots": engine.list_roots(),
        "nodes": nodes,
    }


def run_script(
    engine: TreeStateEngine,
    lines: Iterable[str],
    *,
    errors_log: Optional[Path] = None,
    out: Optional[TextIO] = None,
    err: Optional[TextIO] = None,
    quiet: bool = False,
) -> tuple[int, int]:
    out = out or sys.stdout
    err = err or sys.stderr
    pending: list[StateChange] = []
    collect = pending.extend
    engine.subscribe(collect)
    commands = 0
    errors = 0
    try:
        for line in _iter_commands(lines):
            commands += 1
            pending.clear()
            try:
                message = run_command(engine, line)
            except (TreeError, CommandError) as exc:
                errors += 1
                print(f"Error: {line}: {exc}", file=err)
                log_error(errors_log, line.split(maxsplit=1)[0].lower(), exc, command=line)
                continue
            if quiet:
                continue
            print(message, file=out)
            for change in pending:
                print(_format_change(engine, change), file=out)
    finally:
        engine.unsubscribe(collect)
    return commands, errors


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.cli:
        print("Use --cli to run in headless mode.")
        return 1

    config = load_config(args.config)
    errors_log = resolve_errors_log_path(args.errors_log, config.errors_log_path)
    engine = TreeStateEngine(config)
    if args.demo:
        load_demo(engine)

    if args.script:
        try:
            lines = args.script.read_text(encoding="utf-8").splitlines()
        except OSError as exc:
            print(f"Cannot read script: {exc}", file=sys.stderr)
            return 1
    else:
        lines = sys.stdin.read().splitlines()

    commands, errors = run_script(
        engine,
        lines,
        errors_log=errors_log,
        quiet=args.quiet or args.json,
    )

    if args.json:
        print(json.dumps(build_report(engine, commands, errors), indent=2))
    else:
        print("\n".join(format_tree(engine) or ["(empty tree)"]))
        print(f"Commands: {commands}, errors: {errors}")
        if errors and errors_log:
            print(f"See errors log: {errors_log}")

    return 1 if errors else 0


if __name__ == "__main__":
    raise SystemExit(main())
