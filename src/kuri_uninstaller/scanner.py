"""!
@brief Leftover scanning for a single uninstalled program.
@details Search terms derived from the program identity are matched against
every entry below the per-user application folders and the install location,
and against the direct children of the software registry roots. Both result
lists are merged by :func:`aggregate_results`, which sorts by canonical
rendering before collapsing adjacent duplicates.

Locations that cannot be read are skipped without being reported to the
caller, so an empty result does not prove that every location was inspected.
"""
from __future__ import annotations

from pathlib import Path, PurePath
from typing import Any, Iterable, List, Mapping, Sequence, Tuple

from . import constants, fs_tools, logging_ext, registry_tools
from .models import (
    CandidateArtifact,
    DirectoryArtifact,
    FileArtifact,
    ProgramIdentity,
    RegistryArtifact,
    ScanResult,
    render_artifact,
)
from .terms import generate_search_terms, matches_any


def scan_filesystem(
    terms: Sequence[str],
    install_location: PurePath | None,
    *,
    roots: Iterable[Path] | None = None,
    env: Mapping[str, str] | None = None,
    platform: str | None = None,
) -> List[CandidateArtifact]:
    """!
    @brief Walk every search root and collect entries whose name matches a term.
    @details Matched directories are still descended into so nested leftovers
    are reported as well.
    @param roots Explicit roots to walk instead of the per-user defaults.
    """

    terms = list(terms)
    if roots is None:
        roots = fs_tools.leftover_search_roots(install_location, env=env, platform=platform)

    human_logger = logging_ext.get_human_logger()
    found: List[CandidateArtifact] = []
    for root in roots:
        human_logger.debug("Scanning %s", root)
        for path, is_dir in fs_tools.iter_tree(Path(root)):
            if not matches_any(path.name, terms):
                continue
            found.append(DirectoryArtifact(path) if is_dir else FileArtifact(path))
    return found


def scan_registry(
    terms: Sequence[str],
    *,
    roots: Iterable[Tuple[Any, str, str]] = constants.REGISTRY_SCAN_ROOTS,
) -> List[CandidateArtifact]:
    """!
    @brief Match the direct subkeys of each registry root against the terms.
    @details Only key names are compared. A root that cannot be opened is
    skipped and the remaining roots are still enumerated.
    """

    terms = list(terms)
    human_logger = logging_ext.get_human_logger()
    found: List[CandidateArtifact] = []
    for hive, path, display_prefix in roots:
        try:
            names = list(registry_tools.iter_subkeys(hive, path))
        except OSError as exc:
            human_logger.debug("Skipping registry root %s: %s", display_prefix, exc)
            continue
        for name in names:
            if matches_any(name, terms):
                found.append(
                    RegistryArtifact(f"{display_prefix}{constants.REGISTRY_SEPARATOR}{name}")
                )
    return found


def aggregate_results(
    filesystem_items: Iterable[CandidateArtifact],
    registry_items: Iterable[CandidateArtifact],
) -> ScanResult:
    """!
    @brief Merge scanner outputs into the canonical candidate list.
    @details The sort must happen before the adjacent-duplicate pass; together
    they remove every duplicate rendering.
    """

    combined = list(filesystem_items) + list(registry_items)
    combined.sort(key=render_artifact)

    unique: List[CandidateArtifact] = []
    previous: str | None = None
    for artifact in combined:
        rendering = render_artifact(artifact)
        if rendering == previous:
            continue
        unique.append(artifact)
        previous = rendering
    return ScanResult.from_artifacts(unique)


def scan_for_leftovers(
    program: ProgramIdentity,
    *,
    env: Mapping[str, str] | None = None,
    platform: str | None = None,
) -> ScanResult:
    """!
    @brief Run the complete leftover scan for ``program``.
    """

    human_logger = logging_ext.get_human_logger()

    terms = generate_search_terms(program)
    human_logger.info("Scanning for leftovers of %s using terms %s", program.name, terms)

    filesystem_items = scan_filesystem(
        terms, program.install_location, env=env, platform=platform
    )
    registry_items = scan_registry(terms)
    result = aggregate_results(filesystem_items, registry_items)

    human_logger.info("Scan for %s found %d item(s)", program.name, len(result))
    logging_ext.emit_event(
        "scan_complete",
        program=program.name,
        terms=terms,
        filesystem_matches=len(filesystem_items),
        registry_matches=len(registry_items),
        candidates=len(result),
    )
    return result


__all__ = [
    "aggregate_results",
    "scan_filesystem",
    "scan_for_leftovers",
    "scan_registry",
]
