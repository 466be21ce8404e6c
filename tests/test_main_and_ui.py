"""Integration tests for CLI and UI layers."""
from __future__ import annotations

import argparse
import io
import pathlib
import sys
from typing import List

import pytest

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from kuri_uninstaller import app_state, confirm, deletion, main, ui, version  # noqa: E402
from kuri_uninstaller.models import (  # noqa: E402
    DirectoryArtifact,
    ProgramIdentity,
    RegistryArtifact,
    ScanResult,
)

FOO = ProgramIdentity(name="Foo Bar", version="1.0", install_location=pathlib.PureWindowsPath(r"C:\FooBar"))
ITEMS = [
    DirectoryArtifact(pathlib.Path("/data/FooBar")),
    RegistryArtifact(r"HKEY_CURRENT_USER\Software\FooBar"),
]


def _no_op(*args, **kwargs):  # type: ignore[no-untyped-def]
    return None


@pytest.fixture
def cli(monkeypatch, tmp_path):
    """!
    @brief Neutralise elevation and route logs and registry reads to fakes.
    """

    monkeypatch.setattr(main, "_ensure_elevated", _no_op)
    monkeypatch.setattr(main, "_resolve_log_directory", lambda candidate: tmp_path / "logs")
    monkeypatch.setattr(main.programs, "load_installed_programs", lambda: [FOO])
    scanned: List[ProgramIdentity] = []

    def fake_scan(program):
        scanned.append(program)
        return ScanResult.from_artifacts(ITEMS)

    monkeypatch.setattr(main.scanner, "scan_for_leftovers", fake_scan)
    return scanned


def test_version_flag(capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main.main(["--version"])

    assert excinfo.value.code == 0
    assert version.__version__ in capsys.readouterr().out


def test_delete_without_program_is_a_usage_error(capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main.main(["--delete"])

    assert excinfo.value.code == 2
    assert "--delete requires --program" in capsys.readouterr().err


def test_list_and_program_are_exclusive() -> None:
    with pytest.raises(SystemExit):
        main.build_arg_parser().parse_args(["--list", "--program", "x"])


def test_list_prints_programs(cli, capsys) -> None:
    assert main.main(["--list"]) == 0

    out = capsys.readouterr().out
    assert "Foo Bar (1.0)" in out
    assert "C:\\FooBar" in out


def test_program_scan_prints_results(cli, capsys) -> None:
    assert main.main(["--program", "foo bar"]) == 0

    out = capsys.readouterr().out
    assert cli == [FOO]
    assert "Scan Results for Foo Bar: 2 item(s)" in out
    assert r"[Registry] HKEY_CURRENT_USER\Software\FooBar" in out


def test_unknown_program_is_scanned_by_name(cli) -> None:
    assert main.main(["--program", "Gone App"]) == 0

    assert cli == [ProgramIdentity(name="Gone App")]


def test_program_delete_with_yes(cli, monkeypatch, capsys) -> None:
    calls = []
    monkeypatch.setattr(
        main.deletion,
        "delete_items",
        lambda items, backup, dry_run=False: calls.append((list(items), backup, dry_run)),
    )

    assert main.main(["--program", "Foo Bar", "--delete", "--yes", "--no-backup"]) == 0

    assert calls == [(ITEMS, False, False)]
    assert "Deletion complete." in capsys.readouterr().out


def test_program_delete_failure_exits_non_zero(cli, monkeypatch, capsys) -> None:
    def failing(items, backup, dry_run=False):
        raise deletion.DeletionError(["Failed to delete /data/FooBar: denied"])

    monkeypatch.setattr(main.deletion, "delete_items", failing)

    assert main.main(["--program", "Foo Bar", "--delete", "--yes"]) == 1
    assert "An error occurred: Failed to delete /data/FooBar: denied" in capsys.readouterr().err


def test_program_delete_refused_without_terminal(cli, monkeypatch, capsys) -> None:
    calls = []
    monkeypatch.setattr(main.deletion, "delete_items", lambda *args, **kwargs: calls.append(args))
    monkeypatch.setattr(sys, "stdin", io.StringIO(""))

    assert main.main(["--program", "Foo Bar", "--delete"]) == 0

    assert calls == []
    assert "Deletion cancelled." in capsys.readouterr().out


def test_confirmation_rules() -> None:
    assert confirm.request_delete_confirmation(3, dry_run=True, force=False, interactive=False)
    assert confirm.request_delete_confirmation(3, dry_run=False, force=True, interactive=False)
    assert not confirm.request_delete_confirmation(3, dry_run=False, force=False, interactive=False)
    assert confirm.request_delete_confirmation(
        3, dry_run=False, force=False, interactive=True, input_func=lambda prompt: "Yes"
    )
    assert not confirm.request_delete_confirmation(
        3, dry_run=False, force=False, interactive=True, input_func=lambda prompt: ""
    )

    def eof(prompt):
        raise EOFError

    assert not confirm.request_delete_confirmation(
        3, dry_run=False, force=False, interactive=True, input_func=eof
    )


def _scripted_input(answers: List[str]):
    remaining = list(answers)

    def _input(prompt: str) -> str:
        return remaining.pop(0)

    return _input


def test_interactive_console_scan_and_delete(capsys) -> None:
    deleted = []
    session = app_state.Session(
        load_programs=lambda: [FOO],
        scan=lambda program: ScanResult.from_artifacts(ITEMS),
        delete=lambda items, backup, dry_run=False: deleted.append((list(items), backup)),
    )
    args = argparse.Namespace(quiet=False, json=False)

    with app_state.Worker() as worker:
        ui.run_cli(
            {
                "args": args,
                "session": session,
                "worker": worker,
                "input": _scripted_input(["1", "s", "1", "d", "y", "q"]),
            }
        )

    out = capsys.readouterr().out
    assert "Scan Results for Foo Bar" in out
    assert "Deletion complete." in out
    assert deleted == [([ITEMS[1]], True)]


def test_interactive_console_shows_and_dismisses_errors(capsys) -> None:
    def failing_delete(items, backup, dry_run=False):
        raise deletion.DeletionError(["Could not open parent key for: X\\Y\\Z"])

    session = app_state.Session(
        load_programs=lambda: [FOO],
        scan=lambda program: ScanResult.from_artifacts(ITEMS),
        delete=failing_delete,
    )

    with app_state.Worker() as worker:
        ui.run_cli(
            {
                "args": argparse.Namespace(quiet=False, json=False),
                "session": session,
                "worker": worker,
                "input": _scripted_input(["1", "s", "d", "y", "", "b", "q"]),
            }
        )

    out = capsys.readouterr().out
    assert "Error: An error occurred: Could not open parent key for: X\\Y\\Z" in out
    assert "Deletion complete." not in out


def test_interactive_console_suppressed_in_json_mode(capsys) -> None:
    session = app_state.Session(load_programs=lambda: [FOO])

    with app_state.Worker() as worker:
        ui.run_cli(
            {
                "args": argparse.Namespace(quiet=False, json=True),
                "session": session,
                "worker": worker,
            }
        )

    assert session.programs == []
    assert "Loading installed programs" not in capsys.readouterr().out


@pytest.mark.parametrize(
    "answers",
    [
        [],
        ["1", "s"],
        ["1", "s", "d"],
    ],
    ids=["program-list", "scan-results", "confirm-delete"],
)
def test_interactive_console_exits_on_end_of_input(answers, capsys) -> None:
    """!
    @brief Closing standard input ends the console from any view.
    """

    remaining = list(answers)
    deleted = []

    def _input(prompt: str) -> str:
        if not remaining:
            raise EOFError
        return remaining.pop(0)

    session = app_state.Session(
        load_programs=lambda: [FOO],
        scan=lambda program: ScanResult.from_artifacts(ITEMS),
        delete=lambda *args, **kwargs: deleted.append(args),
    )

    with app_state.Worker() as worker:
        ui.run_cli(
            {
                "args": argparse.Namespace(quiet=False, json=False),
                "session": session,
                "worker": worker,
                "input": _input,
            }
        )

    assert deleted == []
    assert "Exiting Kuri Uninstaller." in capsys.readouterr().out


def test_interactive_console_exits_on_end_of_input_at_error_prompt(capsys) -> None:
    def failing_scan(program):
        raise OSError("walk failed")

    remaining = ["1", "s"]

    def _input(prompt: str) -> str:
        if not remaining:
            raise EOFError
        return remaining.pop(0)

    session = app_state.Session(load_programs=lambda: [FOO], scan=failing_scan)

    with app_state.Worker() as worker:
        ui.run_cli(
            {
                "args": argparse.Namespace(quiet=False, json=False),
                "session": session,
                "worker": worker,
                "input": _input,
            }
        )

    out = capsys.readouterr().out
    assert "Error: Error during scan: walk failed" in out
    assert "Exiting Kuri Uninstaller." in out
