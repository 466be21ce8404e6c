"""!
@brief Primary entry point for the Kuri Uninstaller CLI.
@details Parses arguments, verifies administrative elevation once, configures
logging through :mod:`logging_ext`, and then either runs the interactive
console or one of the non-interactive modes (list programs, scan one program,
delete its leftovers).
"""
from __future__ import annotations

import argparse
import logging
import pathlib
import sys
from typing import Iterable, Mapping, Optional

from . import (
    app_state as app_state_module,
    confirm,
    deletion,
    elevation,
    fs_tools,
    logging_ext,
    programs,
    scanner,
    ui,
    version,
)
from .models import ProgramIdentity

EXIT_OK = 0
EXIT_FAILURE = 1


def build_arg_parser() -> argparse.ArgumentParser:
    """!
    @brief Create the top-level argument parser.
    """

    parser = argparse.ArgumentParser(
        prog="kuri-uninstaller",
        description="Find and remove files, folders and registry keys left behind by uninstalled programs.",
    )
    metadata = version.build_info()
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"{metadata['version']} ({metadata['build']})",
    )

    modes = parser.add_mutually_exclusive_group()
    modes.add_argument("--list", action="store_true", help="List installed programs and exit.")
    modes.add_argument("--program", metavar="NAME", help="Scan leftovers of the named program.")

    parser.add_argument(
        "--delete",
        action="store_true",
        help="With --program, delete every leftover found.",
    )
    parser.add_argument("--no-backup", action="store_true", help="Do not log registry keys before deleting them.")
    parser.add_argument("--dry-run", action="store_true", help="Simulate deletion without modifying the system.")
    parser.add_argument("-y", "--yes", action="store_true", help="Do not ask for confirmation before deleting.")
    parser.add_argument(
        "--elevate",
        action="store_true",
        help="Relaunch with administrator rights when started without them.",
    )
    parser.add_argument("--logdir", metavar="DIR", help="Directory for human/JSONL log output.")
    parser.add_argument("--quiet", action="store_true", help="Minimal console output (errors only).")
    parser.add_argument("--json", action="store_true", help="Mirror structured events to stdout.")
    return parser


def _resolve_log_directory(candidate: Optional[str]) -> pathlib.Path:
    if candidate:
        return pathlib.Path(candidate).expanduser().resolve()
    expanded = fs_tools.get_default_log_directory().expanduser()
    try:
        return expanded.resolve()
    except OSError:
        return expanded


def _bootstrap_logging(args: argparse.Namespace) -> tuple[logging.Logger, logging.Logger]:
    logdir = _resolve_log_directory(getattr(args, "logdir", None))
    setattr(args, "logdir", str(logdir))
    human_logger, machine_logger = logging_ext.setup_logging(
        logdir,
        json_to_stdout=getattr(args, "json", False),
    )
    if getattr(args, "quiet", False):
        human_logger.setLevel(logging.ERROR)
    return human_logger, machine_logger


def _ensure_elevated(args: argparse.Namespace, argv: list[str]) -> None:
    """!
    @brief Verify elevation, optionally asking Windows to relaunch elevated.
    """

    if elevation.is_admin():
        return
    if getattr(args, "elevate", False) and elevation.relaunch_as_admin(argv):
        raise SystemExit(EXIT_OK)
    elevation.require_admin()


def _echo(args: argparse.Namespace, message: str) -> None:
    if not getattr(args, "quiet", False):
        print(message)


def _find_program(name: str, installed: Iterable[ProgramIdentity]) -> ProgramIdentity:
    """!
    @brief Pick the installed program called ``name`` (case-insensitive).
    @details A program that is no longer listed is still scanned by name so
    leftovers of an already uninstalled program can be found.
    """

    lowered = name.lower()
    for program in installed:
        if program.name.lower() == lowered:
            return program
    return ProgramIdentity(name=name)


def _run_list(args: argparse.Namespace) -> int:
    for program in programs.load_installed_programs():
        location = f"  [{program.install_location}]" if program.install_location else ""
        _echo(args, f"{program.describe()}{location}")
    return EXIT_OK


def _run_program(args: argparse.Namespace, human_log: logging.Logger) -> int:
    program = _find_program(args.program, programs.load_installed_programs())
    try:
        result = scanner.scan_for_leftovers(program)
    except OSError as exc:
        human_log.error("Error during scan: %s", exc)
        print(f"Error during scan: {exc}", file=sys.stderr)
        return EXIT_FAILURE

    _echo(args, f"Scan Results for {program.name}: {len(result)} item(s)")
    for rendering in result.renderings():
        _echo(args, rendering)

    if not args.delete or len(result) == 0:
        return EXIT_OK

    approved = confirm.request_delete_confirmation(
        len(result), dry_run=bool(args.dry_run), force=bool(args.yes)
    )
    if not approved:
        _echo(args, "Deletion cancelled.")
        return EXIT_OK

    try:
        deletion.delete_items(
            result.selected_artifacts(),
            not args.no_backup,
            dry_run=bool(args.dry_run),
        )
    except deletion.DeletionError as exc:
        print(f"An error occurred: {exc}", file=sys.stderr)
        return EXIT_FAILURE
    _echo(args, "Dry-run complete; nothing was deleted." if args.dry_run else "Deletion complete.")
    return EXIT_OK


def _build_app_state(args: argparse.Namespace, human_log: logging.Logger) -> Mapping[str, object]:
    """!
    @brief Assemble the dependency mapping consumed by the console front end.
    """

    session = app_state_module.Session(
        backup_registry=not args.no_backup,
        dry_run=bool(args.dry_run),
    )
    return {
        "args": args,
        "human_logger": human_log,
        "session": session,
        "worker": app_state_module.Worker(),
    }


def _determine_mode(args: argparse.Namespace) -> str:
    if getattr(args, "list", False):
        return "list"
    if getattr(args, "program", None):
        return "program"
    return "interactive"


def main(argv: Optional[Iterable[str]] = None) -> int:
    """!
    @brief Entry point used by the console script and ``python -m``.
    @returns Process exit code integer.
    """

    arguments = list(argv) if argv is not None else sys.argv[1:]
    parser = build_arg_parser()
    args = parser.parse_args(arguments)
    if args.delete and not args.program:
        parser.error("--delete requires --program")

    _ensure_elevated(args, arguments)
    human_log, _ = _bootstrap_logging(args)

    mode = _determine_mode(args)
    logging_ext.emit_event(
        "startup", mode=mode, dry_run=bool(args.dry_run), backup=not args.no_backup
    )

    if mode == "list":
        return _run_list(args)
    if mode == "program":
        return _run_program(args, human_log)

    app_state = _build_app_state(args, human_log)
    worker: app_state_module.Worker = app_state["worker"]  # type: ignore[assignment]
    with worker:
        ui.run_cli(app_state)
    return EXIT_OK


if __name__ == "__main__":  # pragma: no cover - for manual execution
    sys.exit(main())
