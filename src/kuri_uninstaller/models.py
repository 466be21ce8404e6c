"""!
@brief Data model shared by the scanner, the deletion executor and the front ends.
@details A leftover candidate is exactly one of three frozen records: a file, a
directory or a registry key. The textual rendering produced by
:func:`render_artifact` doubles as the sort and deduplication key, so it must
stay stable between releases.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path, PurePath
from typing import Iterator, List, Sequence, Union


@dataclass(frozen=True)
class ProgramIdentity:
    """!
    @brief An installed program as reported by the uninstall registry.
    @details ``install_location`` is not required to exist; it is checked at
    scan time only.
    """

    name: str
    version: str = ""
    install_location: PurePath | None = None

    def describe(self) -> str:
        return f"{self.name} ({self.version})" if self.version else self.name


@dataclass(frozen=True)
class FileArtifact:
    path: Path

    def __str__(self) -> str:
        return f"[File] {self.path}"


@dataclass(frozen=True)
class DirectoryArtifact:
    path: Path

    def __str__(self) -> str:
        return f"[Folder] {self.path}"


@dataclass(frozen=True)
class RegistryArtifact:
    """!
    @brief Registry key addressed as ``<HIVE_NAME>\\<subpath>``.
    """

    key: str

    def __str__(self) -> str:
        return f"[Registry] {self.key}"


CandidateArtifact = Union[FileArtifact, DirectoryArtifact, RegistryArtifact]


def render_artifact(artifact: CandidateArtifact) -> str:
    """!
    @brief Return the canonical rendering used for display, sorting and dedup.
    """

    return str(artifact)


@dataclass
class ScanEntry:
    artifact: CandidateArtifact
    selected: bool = True

    def __str__(self) -> str:
        return render_artifact(self.artifact)


@dataclass
class ScanResult:
    """!
    @brief Ordered candidate list with a per-entry selection flag.
    @details Entries are produced sorted and deduplicated by
    :func:`kuri_uninstaller.scanner.aggregate_results`; only the selection flags
    change afterwards.
    """

    entries: List[ScanEntry] = field(default_factory=list)

    @classmethod
    def from_artifacts(cls, artifacts: Sequence[CandidateArtifact]) -> "ScanResult":
        return cls([ScanEntry(artifact) for artifact in artifacts])

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[ScanEntry]:
        return iter(self.entries)

    def __getitem__(self, index: int) -> ScanEntry:
        return self.entries[index]

    def set_selected(self, index: int, selected: bool) -> None:
        """!
        @brief Toggle one entry; out-of-range indexes are ignored.
        """

        if 0 <= index < len(self.entries):
            self.entries[index].selected = selected

    def select_all(self) -> None:
        for entry in self.entries:
            entry.selected = True

    def deselect_all(self) -> None:
        for entry in self.entries:
            entry.selected = False

    def any_selected(self) -> bool:
        return any(entry.selected for entry in self.entries)

    def selected_count(self) -> int:
        return sum(1 for entry in self.entries if entry.selected)

    def selected_artifacts(self) -> List[CandidateArtifact]:
        return [entry.artifact for entry in self.entries if entry.selected]

    def renderings(self) -> List[str]:
        return [render_artifact(entry.artifact) for entry in self.entries]


__all__ = [
    "CandidateArtifact",
    "DirectoryArtifact",
    "FileArtifact",
    "ProgramIdentity",
    "RegistryArtifact",
    "ScanEntry",
    "ScanResult",
    "render_artifact",
]
