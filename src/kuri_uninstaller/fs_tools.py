"""!
@brief Filesystem utilities for leftover discovery and removal.
@details Resolves the per-user folders that applications write to, walks them
while tolerating unreadable entries, and hands matched files and directories to
the platform recycle bin through :mod:`send2trash` so removals stay
recoverable.
"""
from __future__ import annotations

import ctypes
import os
import sys
from pathlib import Path, PurePath
from typing import Dict, Iterator, List, Mapping, Tuple

from send2trash import send2trash

from . import constants, logging_ext


def _current_platform() -> str:
    if os.name == "nt":
        return "nt"
    if sys.platform == "darwin":
        return "darwin"
    return "posix"


def _env_path(env: Mapping[str, str], name: str) -> Path | None:
    value = env.get(name)
    if value:
        return Path(value)
    return None


class _GUID(ctypes.Structure):
    _fields_ = [
        ("Data1", ctypes.c_uint32),
        ("Data2", ctypes.c_uint16),
        ("Data3", ctypes.c_uint16),
        ("Data4", ctypes.c_ubyte * 8),
    ]


_FOLDERID_DOCUMENTS = "{FDD39AD0-238F-46AF-ADB4-6C85480369C7}"


def _known_folder(folder_id: str) -> Path | None:
    """!
    @brief Ask the Windows shell where a known folder currently lives.
    @details Follows folder redirection, so a Documents folder moved to OneDrive
    or a network share is found. Returns ``None`` off Windows or when the shell
    cannot resolve the folder.
    """

    if os.name != "nt":
        return None
    try:
        shell32 = ctypes.windll.shell32  # type: ignore[attr-defined]
        ole32 = ctypes.windll.ole32  # type: ignore[attr-defined]
    except (AttributeError, OSError):
        return None

    guid = _GUID()
    if ole32.CLSIDFromString(ctypes.c_wchar_p(folder_id), ctypes.byref(guid)) != 0:
        return None
    buffer = ctypes.c_wchar_p()
    result = shell32.SHGetKnownFolderPath(ctypes.byref(guid), 0, None, ctypes.byref(buffer))
    try:
        if result != 0 or not buffer.value:
            return None
        return Path(buffer.value)
    finally:
        ole32.CoTaskMemFree(buffer)


def _home(env: Mapping[str, str], platform: str) -> Path | None:
    names = ("USERPROFILE", "HOME") if platform == "nt" else ("HOME",)
    for name in names:
        candidate = _env_path(env, name)
        if candidate is not None:
            return candidate
    return None


def resolve_user_directories(
    *,
    env: Mapping[str, str] | None = None,
    platform: str | None = None,
) -> Dict[str, Path | None]:
    """!
    @brief Resolve the per-user folders consulted by scans and backups.
    @details Returns a mapping with ``local_data``, ``roaming_data``, ``config``
    and ``documents`` keys. Values are ``None`` when the environment does not
    provide enough information to locate the folder.
    @param env Environment mapping, defaults to ``os.environ``.
    @param platform ``"nt"``, ``"darwin"`` or ``"posix"``; detected when omitted.
    """

    env = os.environ if env is None else env
    platform = platform or _current_platform()
    home = _home(env, platform)

    if platform == "nt":
        roaming = _env_path(env, "APPDATA")
        documents = _known_folder(_FOLDERID_DOCUMENTS)
        if documents is None and home is not None:
            documents = home / "Documents"
        return {
            "local_data": _env_path(env, "LOCALAPPDATA"),
            "roaming_data": roaming,
            "config": roaming,
            "documents": documents,
        }

    if platform == "darwin":
        support = home / "Library" / "Application Support" if home is not None else None
        return {
            "local_data": support,
            "roaming_data": support,
            "config": support,
            "documents": home / "Documents" if home is not None else None,
        }

    data_home = _env_path(env, "XDG_DATA_HOME")
    if data_home is None and home is not None:
        data_home = home / ".local" / "share"
    config_home = _env_path(env, "XDG_CONFIG_HOME")
    if config_home is None and home is not None:
        config_home = home / ".config"
    documents = _env_path(env, "XDG_DOCUMENTS_DIR")
    if documents is None and home is not None:
        documents = home / "Documents"
    return {
        "local_data": data_home,
        "roaming_data": data_home,
        "config": config_home,
        "documents": documents,
    }


def leftover_search_roots(
    install_location: PurePath | None,
    *,
    env: Mapping[str, str] | None = None,
    platform: str | None = None,
) -> List[Path]:
    """!
    @brief Build the ordered list of directories walked during a scan.
    @details The machine-wide application data folder is approximated by the
    per-user local data folder, so that folder appears twice; the aggregator
    removes the resulting duplicates. The install location is appended only
    when it exists on disk.
    """

    folders = resolve_user_directories(env=env, platform=platform)
    candidates = [
        folders["local_data"],
        folders["roaming_data"],
        folders["config"],
        folders["local_data"],  # stand-in for ProgramData
    ]
    roots = [path for path in candidates if path is not None]

    if install_location is not None:
        location = Path(str(install_location))
        if location.exists():
            roots.append(location)
    return roots


def iter_tree(root: Path) -> Iterator[Tuple[Path, bool]]:
    """!
    @brief Yield ``(path, is_directory)`` for ``root`` and everything below it.
    @details Entries that cannot be read are skipped and the walk continues with
    their siblings. Symbolic links are reported as non-directories and are not
    followed.
    """

    human_logger = logging_ext.get_human_logger()

    try:
        root_is_dir = root.is_dir()
        root_exists = root_is_dir or root.exists()
    except OSError as exc:
        human_logger.debug("Skipping unreadable scan root %s: %s", root, exc)
        return
    if not root_exists:
        human_logger.debug("Skipping missing scan root %s", root)
        return

    yield root, root_is_dir
    if not root_is_dir:
        return

    def _on_error(exc: OSError) -> None:
        human_logger.debug("Skipping unreadable entry %s: %s", exc.filename, exc)

    for dirpath, dirnames, filenames in os.walk(root, onerror=_on_error):
        for name in dirnames:
            path = os.path.join(dirpath, name)
            yield Path(path), not os.path.islink(path)
        for name in filenames:
            yield Path(os.path.join(dirpath, name)), False


def send_to_trash(path: Path) -> None:
    """!
    @brief Move ``path`` to the recycle bin.
    @raises OSError When the platform refuses the move.
    """

    send2trash(str(path))


def get_default_log_directory(
    *,
    env: Mapping[str, str] | None = None,
    platform: str | None = None,
) -> Path:
    """!
    @brief Resolve where the human and JSONL logs are written by default.
    """

    env = os.environ if env is None else env
    platform = platform or _current_platform()

    override = _env_path(env, constants.LOGDIR_ENV_VAR)
    if override is not None:
        return override

    if platform == "nt":
        base = _env_path(env, "ProgramData") or _env_path(env, "PROGRAMDATA")
        if base is not None:
            return base / "KuriUninstaller" / "logs"

    state_home = _env_path(env, "XDG_STATE_HOME")
    if state_home is not None:
        return state_home / "kuri-uninstaller" / "logs"
    home = _home(env, platform)
    if home is not None:
        return home / ".local" / "state" / "kuri-uninstaller" / "logs"
    return Path.cwd() / "kuri-uninstaller-logs"


def get_default_backup_directory(
    *,
    env: Mapping[str, str] | None = None,
    platform: str | None = None,
) -> Path:
    """!
    @brief Resolve the directory that receives registry deletion logs.
    @raises FileNotFoundError When no Documents directory can be located.
    """

    env = os.environ if env is None else env
    override = _env_path(env, constants.BACKUPDIR_ENV_VAR)
    if override is not None:
        return override

    documents = resolve_user_directories(env=env, platform=platform)["documents"]
    if documents is None:
        raise FileNotFoundError("Could not find Documents directory")
    return documents / constants.BACKUP_DIRECTORY_NAME


__all__ = [
    "get_default_backup_directory",
    "get_default_log_directory",
    "iter_tree",
    "leftover_search_roots",
    "resolve_user_directories",
    "send_to_trash",
]
