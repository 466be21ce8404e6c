"""!
@brief Logging channels for Kuri Uninstaller.
@details Two channels are configured by :func:`setup_logging`. The human
channel is a plain text log of what the console reports. The event channel
records one JSON object per line for every scan, recycle-bin move and registry
deletion, so a run that removed something can be audited afterwards. Every
event carries the run id assigned when logging was set up.
"""
from __future__ import annotations

import datetime as _dt
import json
import logging
import sys
import uuid
from logging import handlers
from pathlib import Path
from typing import Dict, List, Tuple

from . import constants, version

HUMAN_LOGGER_NAME = "kuri_uninstaller.human"
MACHINE_LOGGER_NAME = "kuri_uninstaller.machine"

HUMAN_LOG_FILENAME = "kuri-uninstaller.log"
MACHINE_LOG_FILENAME = "kuri-uninstaller.jsonl"

_MAX_LOG_BYTES = 1_048_576
_KEPT_LOG_FILES = 5

_PAYLOAD_ATTRIBUTE = "event_payload"

_run_id: str | None = None


class _EventFormatter(logging.Formatter):
    """!
    @brief Serialise event records as single JSON lines.
    @details Only the payload attached by :func:`build_event_extra` is written
    next to the time and level. Paths and other objects are written with
    ``str``.
    """

    def format(self, record: logging.LogRecord) -> str:
        moment = _dt.datetime.fromtimestamp(record.created, tz=_dt.timezone.utc)
        line: Dict[str, object] = {
            "time": moment.isoformat(timespec="milliseconds"),
            "level": record.levelname,
        }
        line.update(getattr(record, _PAYLOAD_ATTRIBUTE, {"event": record.getMessage()}))
        return json.dumps(line, ensure_ascii=False, default=str)


def _rotating_file(path: Path) -> logging.Handler:
    return handlers.RotatingFileHandler(
        path, maxBytes=_MAX_LOG_BYTES, backupCount=_KEPT_LOG_FILES, encoding="utf-8"
    )


def _install(logger: logging.Logger, level: int, new_handlers: List[logging.Handler]) -> None:
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    for handler in new_handlers:
        logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False


def setup_logging(
    root_dir: Path,
    *,
    json_to_stdout: bool = False,
    level: int = logging.INFO,
) -> Tuple[logging.Logger, logging.Logger]:
    """!
    @brief Point both channels at ``root_dir`` and start a new run.
    @param json_to_stdout Also print event lines on standard output.
    @returns The human and event loggers.
    """

    global _run_id

    root_dir.mkdir(parents=True, exist_ok=True)
    _run_id = uuid.uuid4().hex

    human_file = _rotating_file(root_dir / HUMAN_LOG_FILENAME)
    human_file.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)-8s %(message)s", datefmt="%Y-%m-%d %H:%M:%S")
    )
    event_handlers: List[logging.Handler] = [_rotating_file(root_dir / MACHINE_LOG_FILENAME)]
    if json_to_stdout:
        event_handlers.append(logging.StreamHandler(stream=sys.stdout))
    for handler in event_handlers:
        handler.setFormatter(_EventFormatter())

    human_logger = get_human_logger()
    machine_logger = get_machine_logger()
    _install(human_logger, level, [human_file])
    _install(machine_logger, level, event_handlers)

    human_logger.info(
        "%s %s (%s) run %s, logs in %s",
        constants.PRODUCT_NAME,
        version.__version__,
        version.__build__,
        _run_id,
        root_dir,
    )
    emit_event(
        "run_start",
        version=version.__version__,
        build=version.__build__,
        python=sys.version.split()[0],
        logdir=root_dir,
    )
    return human_logger, machine_logger


def get_human_logger() -> logging.Logger:
    return logging.getLogger(HUMAN_LOGGER_NAME)


def get_machine_logger() -> logging.Logger:
    return logging.getLogger(MACHINE_LOGGER_NAME)


def build_event_extra(event: str, **payload: object) -> Dict[str, object]:
    """!
    @brief Compose the ``extra`` mapping for an event record.
    """

    body: Dict[str, object] = {"event": event}
    if _run_id is not None:
        body["run_id"] = _run_id
    body.update(payload)
    return {_PAYLOAD_ATTRIBUTE: body}


def emit_event(event: str, *, level: int = logging.INFO, **payload: object) -> None:
    """!
    @brief Record a scan, recycle-bin or registry event on the event channel.
    """

    get_machine_logger().log(level, event, extra=build_event_extra(event, **payload))


__all__ = [
    "HUMAN_LOGGER_NAME",
    "HUMAN_LOG_FILENAME",
    "MACHINE_LOGGER_NAME",
    "MACHINE_LOG_FILENAME",
    "build_event_extra",
    "emit_event",
    "get_human_logger",
    "get_machine_logger",
    "setup_logging",
]
