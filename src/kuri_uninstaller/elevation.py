"""!
@brief Elevation helpers.
@details Deleting machine-wide registry keys and files under protected folders
needs administrative rights, so the entry point verifies elevation once before
any scan or deletion and refuses to start without it.
"""
from __future__ import annotations

import ctypes
import os
import subprocess
import sys
from typing import Sequence

from . import logging_ext

ADMIN_REQUIRED_MESSAGE = (
    "[ERROR] Administrator Privileges Required\n"
    "This application needs to be run as an administrator to delete system-wide "
    "files and registry keys.\n"
    "Please right-click the executable and select 'Run as administrator'."
)


def is_admin() -> bool:
    """!
    @brief Determine whether the current process has administrative rights.
    @details Uses ``IsUserAnAdmin`` on Windows and an effective uid of ``0``
    elsewhere.
    """

    if os.name == "nt":
        try:
            shell32 = ctypes.windll.shell32  # type: ignore[attr-defined]
            return bool(shell32.IsUserAnAdmin())
        except Exception:
            return False

    geteuid = getattr(os, "geteuid", None)
    if callable(geteuid):
        try:
            return bool(geteuid() == 0)
        except Exception:
            return False
    return False


def relaunch_as_admin(argv: Sequence[str] | None = None) -> bool:
    """!
    @brief Relaunch the current interpreter with administrative rights.
    @returns ``True`` when the relaunch request was issued successfully.
    """

    if os.name != "nt":
        return False
    try:
        shell32 = ctypes.windll.shell32  # type: ignore[attr-defined]
    except Exception:
        return False

    arguments = list(argv) if argv is not None else list(sys.argv[1:])
    if not getattr(sys, "frozen", False):
        arguments = ["-m", "kuri_uninstaller", *arguments]
    params = subprocess.list2cmdline(arguments)
    result = shell32.ShellExecuteW(None, "runas", sys.executable, params, None, 1)
    return int(result) > 32


def require_admin() -> None:
    """!
    @brief Abort start-up unless the process is elevated.
    @raises SystemExit With status ``1`` when elevation is missing.
    """

    if is_admin():
        return

    logging_ext.get_human_logger().error("Administrator privileges are required; exiting.")
    print(f"\n{ADMIN_REQUIRED_MESSAGE}\n", file=sys.stderr)
    raise SystemExit(1)


__all__ = ["ADMIN_REQUIRED_MESSAGE", "is_admin", "relaunch_as_admin", "require_admin"]
