from __future__ import annotations

import argparse
import sys


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument("--cli", action="store_true")
    parser.add_argument("--gui", action="store_true")
    parser.add_argument("--script")
    return parser.parse_known_args(argv)[0]


def main(argv: list[str] | None = None) -> None:
    argv = sys.argv[1:] if argv is None else argv
    args = _parse_args(argv)

    # A command script only makes sense headless.
    if args.cli or (args.script and not args.gui):
        from checktree.cli import main as cli_main

        raise SystemExit(cli_main(argv if args.cli else ["--cli", *argv]))

    from checktree.main import main as gui_main

    gui_main()


if __name__ == "__main__":
    main()
