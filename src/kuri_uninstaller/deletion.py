"""!
@brief Best-effort batch deletion of selected leftovers.
@details Files and directories are moved to the recycle bin; registry keys are
deleted permanently, optionally after their paths were written to the backup
log. A failure on one item is recorded and the batch moves on to the next, so
whatever was removed stays removed. All failures are reported together at the
end through :class:`DeletionError`.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List

from . import backup as backup_module
from . import fs_tools, logging_ext, registry_tools
from .models import CandidateArtifact, DirectoryArtifact, FileArtifact, RegistryArtifact


class DeletionError(RuntimeError):
    """!
    @brief Aggregate failure for a deletion batch.
    @details ``failures`` keeps the individual messages in processing order; the
    exception message joins them with newlines.
    """

    def __init__(self, failures: Iterable[str]) -> None:
        self.failures: List[str] = list(failures)
        super().__init__("\n".join(self.failures))


def _trash_path(path: Path, failures: List[str], *, dry_run: bool) -> None:
    human_logger = logging_ext.get_human_logger()

    if dry_run:
        human_logger.info("Dry-run: would move %s to the recycle bin", path)
        return

    try:
        fs_tools.send_to_trash(path)
    except OSError as exc:
        message = f"Failed to delete {path}: {exc}"
        failures.append(message)
        human_logger.warning(message)
        logging_ext.emit_event("trash_failed", level=logging.WARNING, path=path, error=str(exc))
        return

    human_logger.info("Moved %s to the recycle bin", path)
    logging_ext.emit_event("trashed", path=path)


def _delete_key(key_path: str, failures: List[str], *, dry_run: bool) -> None:
    human_logger = logging_ext.get_human_logger()

    if dry_run:
        human_logger.info("Dry-run: would delete registry key %s", key_path)
        return

    try:
        registry_tools.delete_registry_key(key_path)
    except registry_tools.RegistryError as exc:
        failures.append(str(exc))
        human_logger.warning(str(exc))
        logging_ext.emit_event(
            "registry_delete_failed", level=logging.WARNING, key=key_path, error=str(exc)
        )
        return

    human_logger.info("Deleted registry key %s", key_path)
    logging_ext.emit_event("registry_deleted", key=key_path)


def delete_items(
    items: Iterable[CandidateArtifact],
    backup: bool,
    *,
    dry_run: bool = False,
    backup_directory: Path | None = None,
) -> None:
    """!
    @brief Delete every selected candidate, continuing past failures.
    @param items Selected candidates in display order.
    @param backup Write the registry key log before any key is deleted.
    @param dry_run Log the intended actions without touching anything.
    @param backup_directory Override for the registry key log folder.
    @raises DeletionError When at least one item (or the backup log) failed.
    """

    human_logger = logging_ext.get_human_logger()

    items = list(items)
    failures: List[str] = []
    registry_keys = [item.key for item in items if isinstance(item, RegistryArtifact)]

    logging_ext.emit_event(
        "delete_start",
        items=len(items),
        registry_keys=len(registry_keys),
        backup=bool(backup),
        dry_run=bool(dry_run),
    )

    if backup and registry_keys:
        if dry_run:
            human_logger.info("Dry-run: would log %d registry key(s)", len(registry_keys))
        else:
            try:
                backup_module.backup_registry_keys(registry_keys, directory=backup_directory)
            except OSError as exc:
                message = f"Failed to create registry log: {exc}"
                failures.append(message)
                human_logger.warning(message)

    for item in items:
        if isinstance(item, (FileArtifact, DirectoryArtifact)):
            _trash_path(item.path, failures, dry_run=dry_run)
        elif isinstance(item, RegistryArtifact):
            _delete_key(item.key, failures, dry_run=dry_run)
        else:  # pragma: no cover - closed union
            raise TypeError(f"Unsupported candidate type: {type(item).__name__}")

    logging_ext.emit_event("delete_complete", items=len(items), failures=len(failures))

    if failures:
        human_logger.error("Deletion finished with %d failure(s)", len(failures))
        raise DeletionError(failures)
    human_logger.info("Deletion finished; %d item(s) processed", len(items))


__all__ = ["DeletionError", "delete_items"]
