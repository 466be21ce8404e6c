"""!
@brief Static data for Kuri Uninstaller.
@details Centralises registry hive handles, the registry roots enumerated for
leftovers and installed programs, and the naming of the backup log so the
scanner, the deletion executor and the front ends work from a single source of
truth.
"""
from __future__ import annotations

from typing import Dict, Tuple

try:  # pragma: no cover - Windows registry handles are optional on test hosts.
    import winreg
except ImportError:  # pragma: no cover - test scaffolding supplies substitutes.
    winreg = None  # type: ignore[assignment]


if winreg is not None:  # pragma: no branch - deterministic assignments.
    HKLM = winreg.HKEY_LOCAL_MACHINE
    HKCU = winreg.HKEY_CURRENT_USER
else:  # pragma: no cover - exercised implicitly in non-Windows CI.
    HKLM = 0x80000002
    HKCU = 0x80000001


HIVE_NAMES: Dict[str, int] = {
    "HKEY_LOCAL_MACHINE": HKLM,
    "HKEY_CURRENT_USER": HKCU,
}
"""!
@brief Hive tokens accepted at the start of a fully-qualified key path.
"""

REGISTRY_SCAN_ROOTS: Tuple[Tuple[int, str, str], ...] = (
    (HKLM, r"SOFTWARE", r"HKEY_LOCAL_MACHINE\SOFTWARE"),
    (HKLM, r"SOFTWARE\Wow6432Node", r"HKEY_LOCAL_MACHINE\SOFTWARE\Wow6432Node"),
    (HKCU, r"Software", r"HKEY_CURRENT_USER\Software"),
)
"""!
@brief ``(hive, path to open, display prefix)`` triples whose direct children
are matched against search terms.
"""

UNINSTALL_ROOTS: Tuple[Tuple[int, str], ...] = (
    (HKLM, r"SOFTWARE\Microsoft\Windows\CurrentVersion\Uninstall"),
    (HKLM, r"SOFTWARE\WOW6432Node\Microsoft\Windows\CurrentVersion\Uninstall"),
)

REGISTRY_SEPARATOR = "\\"

PRODUCT_NAME = "Kuri Uninstaller"

BACKUP_DIRECTORY_NAME = "KuriUninstaller_Backups"
BACKUP_FILENAME_TEMPLATE = "deleted_keys_log-{timestamp}.txt"
BACKUP_TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"
BACKUP_SEPARATOR = "-" * 50

LOGDIR_ENV_VAR = "KURI_UNINSTALLER_LOGDIR"
BACKUPDIR_ENV_VAR = "KURI_UNINSTALLER_BACKUPDIR"


__all__ = [
    "BACKUPDIR_ENV_VAR",
    "BACKUP_DIRECTORY_NAME",
    "BACKUP_FILENAME_TEMPLATE",
    "BACKUP_SEPARATOR",
    "BACKUP_TIMESTAMP_FORMAT",
    "HIVE_NAMES",
    "HKCU",
    "HKLM",
    "LOGDIR_ENV_VAR",
    "PRODUCT_NAME",
    "REGISTRY_SCAN_ROOTS",
    "REGISTRY_SEPARATOR",
    "UNINSTALL_ROOTS",
]
