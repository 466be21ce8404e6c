"""!
@brief Plain-text audit log of registry keys queued for deletion.
@details Registry deletions are permanent, so before they run the executor can
record every fully-qualified key path in a timestamped file under the user's
Documents folder. The log is best-effort: the caller decides what to do when it
cannot be written.
"""
from __future__ import annotations

import datetime as _dt
from pathlib import Path
from typing import Iterable

from . import constants, fs_tools, logging_ext


def backup_registry_keys(
    keys: Iterable[str],
    *,
    directory: Path | None = None,
    now: _dt.datetime | None = None,
) -> Path:
    """!
    @brief Write the key paths to ``deleted_keys_log-<timestamp>.txt``.
    @param keys Key paths in the order they will be deleted.
    @param directory Destination folder; defaults to
    :func:`fs_tools.get_default_backup_directory`.
    @param now Timestamp override used by tests.
    @returns Path of the file written.
    @raises OSError When the folder cannot be resolved, created or written.
    """

    destination = directory if directory is not None else fs_tools.get_default_backup_directory()
    destination.mkdir(parents=True, exist_ok=True)

    moment = now if now is not None else _dt.datetime.now()
    timestamp = moment.strftime(constants.BACKUP_TIMESTAMP_FORMAT)
    log_path = destination / constants.BACKUP_FILENAME_TEMPLATE.format(timestamp=timestamp)

    lines = [
        f"Log of registry keys deleted by {constants.PRODUCT_NAME} at {timestamp}",
        constants.BACKUP_SEPARATOR,
    ]
    lines.extend(keys)
    log_path.write_text("\n".join(lines) + "\n", encoding="utf-8")

    logging_ext.get_human_logger().info("Wrote registry key log to %s", log_path)
    return log_path


__all__ = ["backup_registry_keys"]
