"""!
@brief Tests for the installed program listing.
"""

from __future__ import annotations

import pathlib
import sys
from pathlib import PureWindowsPath

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from kuri_uninstaller import constants, programs  # noqa: E402
from kuri_uninstaller.models import ProgramIdentity  # noqa: E402

UNINSTALL = r"SOFTWARE\Microsoft\Windows\CurrentVersion\Uninstall"
UNINSTALL_WOW = r"SOFTWARE\Wow6432Node\Microsoft\Windows\CurrentVersion\Uninstall"


def test_programs_are_read_sorted_and_unique(fake_winreg) -> None:
    fake_winreg.add_key(
        constants.HKLM,
        UNINSTALL + r"\{1}",
        {"DisplayName": "zeta Tool", "DisplayVersion": "3.0", "InstallLocation": r"C:\Zeta"},
    )
    fake_winreg.add_key(constants.HKLM, UNINSTALL + r"\{2}", {"DisplayName": "Alpha"})
    fake_winreg.add_key(constants.HKLM, UNINSTALL + r"\{3}", {"DisplayVersion": "1.0"})
    fake_winreg.add_key(constants.HKLM, UNINSTALL + r"\{4}", {"DisplayName": ""})
    fake_winreg.add_key(
        constants.HKLM, UNINSTALL_WOW + r"\{5}", {"DisplayName": "Alpha", "DisplayVersion": "9"}
    )
    fake_winreg.add_key(constants.HKLM, UNINSTALL_WOW + r"\{6}", {"DisplayName": "Beta"})

    found = programs.load_installed_programs()

    assert found == [
        ProgramIdentity(name="Alpha"),
        ProgramIdentity(name="Beta"),
        ProgramIdentity(name="zeta Tool", version="3.0", install_location=PureWindowsPath(r"C:\Zeta")),
    ]


def test_missing_uninstall_roots_yield_empty_list(fake_winreg) -> None:
    assert programs.load_installed_programs() == []
