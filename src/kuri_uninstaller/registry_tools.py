"""!
@brief Registry management helpers.
@details Thin wrappers around :mod:`winreg` used by the leftover scanner, the
installed-program listing and the deletion executor. Fully-qualified key paths
use the ``HKEY_LOCAL_MACHINE\\SOFTWARE\\Vendor`` form shown to the user.
"""
from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Iterator, Tuple

from . import constants

try:  # pragma: no cover - exercised through mocks on non-Windows platforms.
    import winreg
except ImportError:  # pragma: no cover - handled gracefully during tests.
    winreg = None  # type: ignore[assignment]


class RegistryError(Exception):
    """!
    @brief Raised for malformed key paths and failed key deletions.
    @details The message is suitable for showing to the user as-is.
    """


def _ensure_winreg() -> None:
    if winreg is None:  # pragma: no cover - simplifies non-Windows test runs.
        raise FileNotFoundError("Windows registry APIs are unavailable on this platform")


@contextmanager
def open_key(root: Any, path: str, access: int | None = None) -> Iterator[Any]:
    """!
    @brief Context manager that mirrors ``winreg.OpenKey`` while ensuring
    handles are closed correctly.
    """

    _ensure_winreg()
    access_mask = access if access is not None else winreg.KEY_READ  # type: ignore[union-attr]
    handle = winreg.OpenKey(root, path, 0, access_mask)  # type: ignore[union-attr]
    try:
        yield handle
    finally:
        winreg.CloseKey(handle)  # type: ignore[union-attr]


def iter_subkeys(root: Any, path: str) -> Iterator[str]:
    """!
    @brief Yield the direct subkey names of ``root``/``path``.
    """

    _ensure_winreg()
    with open_key(root, path) as handle:
        subkey_count, _, _ = winreg.QueryInfoKey(handle)  # type: ignore[union-attr]
        for index in range(subkey_count):
            try:
                yield winreg.EnumKey(handle, index)  # type: ignore[union-attr]
            except OSError:
                continue


def iter_values(root: Any, path: str) -> Iterator[Tuple[str, Any]]:
    """!
    @brief Yield value name/value pairs for ``root``/``path``.
    """

    _ensure_winreg()
    with open_key(root, path) as handle:
        _, value_count, _ = winreg.QueryInfoKey(handle)  # type: ignore[union-attr]
        for index in range(value_count):
            name, value, _ = winreg.EnumValue(handle, index)  # type: ignore[union-attr]
            yield name, value


def read_values(root: Any, path: str) -> Dict[str, Any]:
    """!
    @brief Read all values beneath ``root``/``path`` into a dictionary.
    """

    data: Dict[str, Any] = {}
    try:
        for name, value in iter_values(root, path):
            data[name] = value
    except OSError:
        return {}
    return data


def split_key_path(key_path: str) -> Tuple[str, str]:
    """!
    @brief Split ``HIVE\\sub\\path`` into the hive token and the remainder.
    @raises RegistryError When the path has no separator after the hive or
    contains an empty component, such as a trailing separator.
    """

    hive_token, separator, sub_path = key_path.partition(constants.REGISTRY_SEPARATOR)
    components = sub_path.split(constants.REGISTRY_SEPARATOR)
    if not separator or not all(components):
        raise RegistryError(f"Invalid registry path format: {key_path}")
    return hive_token, sub_path


def resolve_hive(hive_token: str, key_path: str) -> int:
    """!
    @raises RegistryError When ``hive_token`` is not a recognised hive name.
    """

    try:
        return constants.HIVE_NAMES[hive_token]
    except KeyError:
        raise RegistryError(f"Unknown registry hive in path: {key_path}") from None


def delete_key_tree(parent: Any, name: str) -> None:
    """!
    @brief Delete ``name`` beneath the open ``parent`` handle including all
    descendants.
    """

    _ensure_winreg()
    with open_key(parent, name, winreg.KEY_ALL_ACCESS) as handle:  # type: ignore[union-attr]
        while True:
            try:
                child = winreg.EnumKey(handle, 0)  # type: ignore[union-attr]
            except OSError:
                break
            delete_key_tree(handle, child)
    winreg.DeleteKey(parent, name)  # type: ignore[union-attr]


def delete_registry_key(key_path: str) -> None:
    """!
    @brief Permanently delete the key named by a fully-qualified path.
    @details The parent key is opened with write access and the leaf subtree is
    removed. A leaf directly below the hive is removed from the hive handle.
    @raises RegistryError Describing the first problem met for this key.
    """

    hive_token, sub_path = split_key_path(key_path)
    hive = resolve_hive(hive_token, key_path)

    parent_path, separator, leaf = sub_path.rpartition(constants.REGISTRY_SEPARATOR)
    if not separator:
        try:
            delete_key_tree(hive, sub_path)
        except OSError as exc:
            raise RegistryError(f"Failed to delete registry key {key_path}: {exc}") from exc
        return

    try:
        _ensure_winreg()
        parent = winreg.OpenKey(hive, parent_path, 0, winreg.KEY_WRITE)  # type: ignore[union-attr]
    except OSError as exc:
        raise RegistryError(f"Could not open parent key for: {key_path}") from exc
    try:
        delete_key_tree(parent, leaf)
    except OSError as exc:
        raise RegistryError(f"Failed to delete registry key {key_path}: {exc}") from exc
    finally:
        winreg.CloseKey(parent)  # type: ignore[union-attr]


__all__ = [
    "RegistryError",
    "delete_key_tree",
    "delete_registry_key",
    "iter_subkeys",
    "iter_values",
    "open_key",
    "read_values",
    "resolve_hive",
    "split_key_path",
]
