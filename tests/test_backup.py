"""!
@brief Tests for the registry key backup log.
"""

from __future__ import annotations

import datetime as _dt
import pathlib
import sys

import pytest

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from kuri_uninstaller import backup, constants  # noqa: E402

MOMENT = _dt.datetime(2024, 3, 9, 14, 5, 7)


def test_log_format(tmp_path) -> None:
    keys = [r"HKEY_CURRENT_USER\Software\FooBar", r"HKEY_LOCAL_MACHINE\SOFTWARE\FooBar"]

    path = backup.backup_registry_keys(keys, directory=tmp_path / "logs", now=MOMENT)

    assert path == tmp_path / "logs" / "deleted_keys_log-2024-03-09_14-05-07.txt"
    assert path.read_text(encoding="utf-8").splitlines() == [
        "Log of registry keys deleted by Kuri Uninstaller at 2024-03-09_14-05-07",
        "-" * 50,
        *keys,
    ]


def test_empty_key_list_still_writes_header(tmp_path) -> None:
    path = backup.backup_registry_keys([], directory=tmp_path, now=MOMENT)

    assert len(path.read_text(encoding="utf-8").splitlines()) == 2


def test_default_directory_uses_override(tmp_path, monkeypatch) -> None:
    target = tmp_path / "override"
    monkeypatch.setenv(constants.BACKUPDIR_ENV_VAR, str(target))

    path = backup.backup_registry_keys(["HKEY_CURRENT_USER\\Software\\X"], now=MOMENT)

    assert path.parent == target


def test_unwritable_destination_raises(tmp_path) -> None:
    blocker = tmp_path / "file"
    blocker.write_text("", encoding="utf-8")

    with pytest.raises(OSError):
        backup.backup_registry_keys(["HKEY_CURRENT_USER\\Software\\X"], directory=blocker)
