# -*- coding: utf-8 -*-
"""
Command line for the tracker: local data management, sync and the backend server.

Usage:
    python -m gymbro.cli serve [--host HOST] [--port PORT]
    python -m gymbro.cli export <file>
    python -m gymbro.cli import <file>
    python -m gymbro.cli clear [--yes]
    python -m gymbro.cli info
    python -m gymbro.cli register <email> <password> [--name NAME]
    python -m gymbro.cli login <email> <password>
    python -m gymbro.cli logout
    python -m gymbro.cli sync [push|pull|full]
    python -m gymbro.cli log-workout --type TYPE --date DATE --duration MIN
    python -m gymbro.cli log-weight <date> <weight>
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from .client import AppContext, create_app_context
from .config import settings
from .store.dispatcher import Intent


def cmd_serve(args: argparse.Namespace) -> int:
    """Run the sync backend."""
    import uvicorn

    uvicorn.run("gymbro.api:app", host=args.host or settings.host, port=args.port or settings.port)
    return 0


def cmd_export(ctx: AppContext, args: argparse.Namespace) -> int:
    """Write the local document to a JSON file."""
    target = Path(args.file)
    target.write_text(ctx.store.export(), encoding="utf-8")
    print(f"Exported data to {target}")
    return 0


def cmd_import(ctx: AppContext, args: argparse.Namespace) -> int:
    """Replace the local document with an exported file."""
    source = Path(args.file)
    if not source.exists():
        print(f"Error: File not found: {source}")
        return 1
    if not ctx.store.import_(source.read_text(encoding="utf-8")):
        print("Error: Import failed, file is not a valid export.")
        return 1
    ctx.manager.refresh()
    print(f"Imported data from {source}")
    return 0


def cmd_clear(ctx: AppContext, args: argparse.Namespace) -> int:
    """Delete all local tracker data."""
    if not args.yes:
        confirm = input("Are you sure you want to delete all local data? [y/N] ")
        if confirm.lower() != "y":
            print("Cancelled.")
            return 0
    if not ctx.store.clear():
        print("Error: Could not clear local data.")
        return 1
    print("Local data cleared.")
    return 0


def cmd_info(ctx: AppContext, args: argparse.Namespace) -> int:
    """Show local data statistics and sync status."""
    stats = ctx.manager.data_stats().to_document()
    print(json.dumps({"data": stats, "sync": ctx.sync.status()}, indent=2, ensure_ascii=False))
    return 0


def cmd_register(ctx: AppContext, args: argparse.Namespace) -> int:
    result = ctx.sync.register(args.email, args.password, name=args.name)
    if not result.success:
        print(f"Error: {result.error}")
        return 1
    print(f"Registered {result.user.get('email') if result.user else args.email}")
    return 0


def cmd_login(ctx: AppContext, args: argparse.Namespace) -> int:
    result = ctx.sync.login(args.email, args.password)
    if not result.success:
        print(f"Error: {result.error}")
        return 1
    print(f"Logged in as {result.user.get('email') if result.user else args.email}")
    return 0


def cmd_logout(ctx: AppContext, args: argparse.Namespace) -> int:
    ctx.sync.logout()
    print("Logged out.")
    return 0


def cmd_sync(ctx: AppContext, args: argparse.Namespace) -> int:
    """Push, pull or fully sync with the backend."""
    if args.direction == "push":
        ok, error = ctx.sync.push(), "Push failed"
    elif args.direction == "pull":
        ok, error = ctx.sync.pull(), "Pull failed"
    else:
        result = ctx.sync.full_sync()
        ok, error = result.success, result.error
    if not ok:
        print(f"Error: {error}")
        return 1
    print(f"Sync ({args.direction}) completed. Last sync: {ctx.sync.session.last_sync}")
    return 0


def cmd_log_workout(ctx: AppContext, args: argparse.Namespace) -> int:
    payload = {
        "type": args.type,
        "date": args.date,
        "duration": args.duration,
        "exercises": args.exercises or "",
        "notes": args.notes or "",
    }
    result = ctx.dispatcher.dispatch(Intent("log_workout", payload))
    if not result.ok:
        print(f"Error: {result.error}")
        return 1
    print(f"Logged workout {result.record.id}: {result.record.type} ({result.record.duration} min)")
    return 0


def cmd_log_weight(ctx: AppContext, args: argparse.Namespace) -> int:
    result = ctx.dispatcher.dispatch(Intent("add_weight_entry", {"date": args.date, "weight": args.weight}))
    if not result.ok:
        print(f"Error: {result.error}")
        return 1
    print(f"Recorded {result.record.weight:g} kg on {result.record.date}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gymbro",
        description="Gymbro fitness tracker CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    serve_parser = subparsers.add_parser("serve", help="Run the sync backend")
    serve_parser.add_argument("--host", help=f"Bind address (default: {settings.host})")
    serve_parser.add_argument("--port", type=int, help=f"Port (default: {settings.port})")

    export_parser = subparsers.add_parser("export", help="Export local data to a file")
    export_parser.add_argument("file", help="Target JSON file")

    import_parser = subparsers.add_parser("import", help="Import local data from a file")
    import_parser.add_argument("file", help="Exported JSON file")

    clear_parser = subparsers.add_parser("clear", help="Delete all local data")
    clear_parser.add_argument("-y", "--yes", action="store_true", help="Skip confirmation")

    subparsers.add_parser("info", help="Show data statistics")

    register_parser = subparsers.add_parser("register", help="Create an account")
    register_parser.add_argument("email")
    register_parser.add_argument("password")
    register_parser.add_argument("--name", help="Display name")

    login_parser = subparsers.add_parser("login", help="Sign in")
    login_parser.add_argument("email")
    login_parser.add_argument("password")

    subparsers.add_parser("logout", help="Sign out and clear local data")

    sync_parser = subparsers.add_parser("sync", help="Sync with the backend")
    sync_parser.add_argument("direction", nargs="?", choices=["push", "pull", "full"], default="full")

    workout_parser = subparsers.add_parser("log-workout", help="Log a workout")
    workout_parser.add_argument("--type", required=True, help="Workout type, e.g. Push")
    workout_parser.add_argument("--date", required=True, help="YYYY-MM-DD")
    workout_parser.add_argument("--duration", required=True, help="Minutes")
    workout_parser.add_argument("--exercises", help="Free-text exercise list")
    workout_parser.add_argument("--notes")

    weight_parser = subparsers.add_parser("log-weight", help="Record a weight entry")
    weight_parser.add_argument("date", help="YYYY-MM-DD")
    weight_parser.add_argument("weight", help="Weight in kg")

    return parser


_COMMANDS = {
    "export": cmd_export,
    "import": cmd_import,
    "clear": cmd_clear,
    "info": cmd_info,
    "register": cmd_register,
    "login": cmd_login,
    "logout": cmd_logout,
    "sync": cmd_sync,
    "log-workout": cmd_log_workout,
    "log-weight": cmd_log_weight,
}


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return 1

    if args.command == "serve":
        return cmd_serve(args)

    ctx = create_app_context()
    try:
        return _COMMANDS[args.command](ctx, args)
    finally:
        ctx.close()


if __name__ == "__main__":
    sys.exit(main())
