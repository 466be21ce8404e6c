"""!
@brief Installed program listing from the uninstall registry.
@details Reads ``DisplayName``, ``DisplayVersion`` and ``InstallLocation`` from
every entry under the machine-wide uninstall roots and returns one
:class:`ProgramIdentity` per display name, sorted case-insensitively.
"""
from __future__ import annotations

from pathlib import PureWindowsPath
from typing import Any, Iterable, List, Tuple

from . import constants, logging_ext, registry_tools
from .models import ProgramIdentity


def _program_from_values(values: dict) -> ProgramIdentity | None:
    name = values.get("DisplayName")
    if not isinstance(name, str) or not name:
        return None

    display_version = values.get("DisplayVersion")
    version = display_version if isinstance(display_version, str) else ""

    raw_location = values.get("InstallLocation")
    location = None
    if isinstance(raw_location, str) and raw_location:
        location = PureWindowsPath(raw_location)

    return ProgramIdentity(name=name, version=version, install_location=location)


def load_installed_programs(
    roots: Iterable[Tuple[Any, str]] = constants.UNINSTALL_ROOTS,
) -> List[ProgramIdentity]:
    """!
    @brief Enumerate installed programs, first entry per display name wins.
    """

    human_logger = logging_ext.get_human_logger()
    programs: List[ProgramIdentity] = []
    seen: set[str] = set()

    for hive, base_path in roots:
        try:
            subkeys = list(registry_tools.iter_subkeys(hive, base_path))
        except OSError as exc:
            human_logger.debug("Skipping uninstall root %s: %s", base_path, exc)
            continue

        for subkey in subkeys:
            values = registry_tools.read_values(
                hive, f"{base_path}{constants.REGISTRY_SEPARATOR}{subkey}"
            )
            program = _program_from_values(values)
            if program is None or program.name in seen:
                continue
            seen.add(program.name)
            programs.append(program)

    programs.sort(key=lambda item: item.name.lower())
    human_logger.info("Found %d installed program(s)", len(programs))
    return programs


__all__ = ["load_installed_programs"]
