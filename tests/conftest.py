"""!
@brief Shared fixtures for the Kuri Uninstaller test-suite.
@details Supplies an in-memory stand-in for :mod:`winreg` so registry scanning
and deletion can be exercised on any host, and resets the package loggers
between tests to avoid handler leakage.
"""

from __future__ import annotations

import logging
import pathlib
import sys
from typing import Dict, Iterable, Tuple

import pytest

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from kuri_uninstaller import logging_ext, registry_tools  # noqa: E402


class FakeKey:
    """!
    @brief Registry key node holding named children and values.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self.children: Dict[str, "FakeKey"] = {}
        self.values: Dict[str, object] = {}

    def child(self, name: str) -> "FakeKey | None":
        lowered = name.lower()
        for child_name, child in self.children.items():
            if child_name.lower() == lowered:
                return child
        return None


class FakeHandle:
    def __init__(self, hive: int, parts: Tuple[str, ...], key: FakeKey) -> None:
        self.hive = hive
        self.parts = parts
        self.key = key
        self.closed = False


class FakeWinreg:
    """!
    @brief Minimal ``winreg`` replacement backed by nested dictionaries.
    @details Paths listed in ``denied_open`` raise ``PermissionError`` when
    opened and paths in ``denied_delete`` refuse deletion, mimicking ACL
    failures.
    """

    HKEY_CURRENT_USER = 0x80000001
    HKEY_LOCAL_MACHINE = 0x80000002
    KEY_READ = 0x20019
    KEY_WRITE = 0x20006
    KEY_ALL_ACCESS = 0xF003F

    def __init__(self) -> None:
        self.hives: Dict[int, FakeKey] = {
            self.HKEY_LOCAL_MACHINE: FakeKey("HKEY_LOCAL_MACHINE"),
            self.HKEY_CURRENT_USER: FakeKey("HKEY_CURRENT_USER"),
        }
        self.denied_open: set[Tuple[int, str]] = set()
        self.denied_delete: set[Tuple[int, str]] = set()
        self.open_handles = 0

    # -- test helpers -------------------------------------------------------

    def add_key(self, hive: int, path: str, values: Dict[str, object] | None = None) -> FakeKey:
        node = self.hives[hive]
        for part in path.split("\\"):
            existing = node.child(part)
            if existing is None:
                existing = FakeKey(part)
                node.children[part] = existing
            node = existing
        if values:
            node.values.update(values)
        return node

    def add_subkeys(self, hive: int, path: str, names: Iterable[str]) -> None:
        for name in names:
            self.add_key(hive, f"{path}\\{name}")

    def has_key(self, hive: int, path: str) -> bool:
        return self._walk(self.hives[hive], _split(path)) is not None

    def deny_open(self, hive: int, path: str) -> None:
        self.denied_open.add((hive, path.lower()))

    def deny_delete(self, hive: int, path: str) -> None:
        self.denied_delete.add((hive, path.lower()))

    # -- winreg API -----------------------------------------------------------

    def OpenKey(self, root, sub_key: str, reserved: int = 0, access: int = KEY_READ) -> FakeHandle:
        hive, base_parts, base_key = self._anchor(root)
        parts = _split(sub_key)
        full_parts = base_parts + parts
        if (hive, "\\".join(full_parts).lower()) in self.denied_open:
            raise PermissionError(13, "Access is denied")
        node = self._walk(base_key, parts)
        if node is None:
            raise FileNotFoundError(2, "The system cannot find the file specified")
        self.open_handles += 1
        return FakeHandle(hive, full_parts, node)

    def CloseKey(self, handle: FakeHandle) -> None:
        if not handle.closed:
            handle.closed = True
            self.open_handles -= 1

    def QueryInfoKey(self, handle: FakeHandle) -> Tuple[int, int, int]:
        return len(handle.key.children), len(handle.key.values), 0

    def EnumKey(self, handle: FakeHandle, index: int) -> str:
        names = list(handle.key.children)
        if index >= len(names):
            raise OSError(259, "No more data is available")
        return names[index]

    def EnumValue(self, handle: FakeHandle, index: int) -> Tuple[str, object, int]:
        items = list(handle.key.values.items())
        if index >= len(items):
            raise OSError(259, "No more data is available")
        name, value = items[index]
        return name, value, 1

    def DeleteKey(self, root, sub_key: str) -> None:
        hive, base_parts, base_key = self._anchor(root)
        parts = _split(sub_key)
        if (hive, "\\".join(base_parts + parts).lower()) in self.denied_delete:
            raise PermissionError(5, "Access is denied")
        parent = self._walk(base_key, parts[:-1])
        target = parent.child(parts[-1]) if parent is not None else None
        if target is None:
            raise FileNotFoundError(2, "The system cannot find the file specified")
        if target.children:
            raise PermissionError(5, "Access is denied")
        del parent.children[target.name]

    # -- internals ------------------------------------------------------------

    def _anchor(self, root) -> Tuple[int, Tuple[str, ...], FakeKey]:
        if isinstance(root, FakeHandle):
            return root.hive, root.parts, root.key
        return root, (), self.hives[root]

    @staticmethod
    def _walk(node: FakeKey | None, parts: Tuple[str, ...]) -> FakeKey | None:
        for part in parts:
            if node is None:
                return None
            node = node.child(part)
        return node


def _split(path: str) -> Tuple[str, ...]:
    return tuple(part for part in path.split("\\") if part)


@pytest.fixture
def fake_winreg(monkeypatch) -> FakeWinreg:
    """!
    @brief Route :mod:`registry_tools` through an empty in-memory registry.
    """

    fake = FakeWinreg()
    monkeypatch.setattr(registry_tools, "winreg", fake)
    return fake


@pytest.fixture(autouse=True)
def _reset_logging_state():
    """!
    @brief Reset logging between tests to avoid handler leakage.
    """

    yield
    for name in (logging_ext.HUMAN_LOGGER_NAME, logging_ext.MACHINE_LOGGER_NAME):
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
        for flt in list(logger.filters):
            logger.removeFilter(flt)
        logger.setLevel(logging.NOTSET)
