"""CLI entry point for CodeTrack: launch the GUI and inspect the saved session."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from codetrack.app.preference_store import JsonPreferenceStore
from codetrack.app.session_codec import clear_session, read_session
from codetrack.config import settings


def cmd_run(args: argparse.Namespace) -> int:  # pragma: no cover - runtime
    from codetrack.launcher import run

    return run(
        data_dir=args.data_dir,
        fragment=args.open or "",
        safe_mode=args.safe_mode,
        diagnostics_log=args.diagnostics_log,
    )


def cmd_show_session(args: argparse.Namespace) -> int:
    store = JsonPreferenceStore(args.data_dir)
    print(json.dumps(read_session(store), indent=2, ensure_ascii=False))
    return 0


def cmd_reset_session(args: argparse.Namespace) -> int:
    store = JsonPreferenceStore(args.data_dir)
    removed = clear_session(store)
    print(json.dumps({"removed": removed, "store": str(store.path)}, ensure_ascii=False))
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="codetrack")
    sub = p.add_subparsers(dest="command", required=True)

    def data_dir_arg(parser: argparse.ArgumentParser) -> None:
        parser.add_argument(
            "--data-dir", default=settings.DATA_DIR, help="Directory holding the session store"
        )

    run = sub.add_parser("run", help="Launch the CodeTrack window")
    data_dir_arg(run)
    run.add_argument("--open", required=False, help="Start fragment, e.g. 'edit/<id>' or 'add'")
    run.add_argument("--safe-mode", action="store_true", help="Do not restore the previous session")
    run.add_argument(
        "--diagnostics-log", type=Path, default=None, help="Write captured diagnostics here on every session save"
    )
    run.set_defaults(func=cmd_run)

    show = sub.add_parser("show-session", help="Print the saved session as JSON")
    data_dir_arg(show)
    show.set_defaults(func=cmd_show_session)

    reset = sub.add_parser("reset-session", help="Remove every saved session key")
    data_dir_arg(reset)
    reset.set_defaults(func=cmd_reset_session)

    return p


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv if argv is not None else sys.argv[1:])
    return args.func(args)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
