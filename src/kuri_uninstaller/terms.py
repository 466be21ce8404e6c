"""!
@brief Search term generation for leftover scans.
"""
from __future__ import annotations

from pathlib import PureWindowsPath
from typing import List

from .models import ProgramIdentity


def _folder_name(location: object) -> str:
    # PureWindowsPath splits on both separators and ignores a trailing one.
    name = PureWindowsPath(str(location)).name
    if name == "..":
        return ""
    return name


def generate_search_terms(program: ProgramIdentity) -> List[str]:
    """!
    @brief Derive lowercase substring-match tokens from a program identity.
    @details Produces the lowercased display name, the same name with spaces
    removed, and the lowercased folder name of the install location when one is
    known. Empty tokens are dropped. Only adjacent duplicates are collapsed, so
    callers must not assume the list is free of repeats.
    """

    terms = [program.name.lower(), program.name.replace(" ", "").lower()]

    if program.install_location is not None:
        folder = _folder_name(program.install_location)
        if folder:
            terms.append(folder.lower())

    deduped: List[str] = []
    for term in terms:
        # An empty term would match every entry on disk.
        if not term or (deduped and deduped[-1] == term):
            continue
        deduped.append(term)
    return deduped


def matches_any(name: str, terms: List[str]) -> bool:
    """!
    @brief Case-insensitive substring test of ``name`` against every term.
    """

    lowered = name.lower()
    return any(term in lowered for term in terms)


__all__ = ["generate_search_terms", "matches_any"]
