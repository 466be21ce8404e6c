"""!
@brief Shared confirmation helpers for destructive operations.
@details Provides reusable prompting logic so both the command line and the
interactive console ask the same question before files are recycled and
registry keys are removed.
"""

from __future__ import annotations

import sys
from typing import Callable

DELETE_WARNING = (
    "Files will be moved to the Recycle Bin, but registry keys will be "
    "permanently deleted."
)


def delete_prompt(count: int) -> str:
    return f"Are you sure you want to delete {count} selected items? (y/N)"


def request_delete_confirmation(
    count: int,
    *,
    dry_run: bool,
    force: bool,
    input_func: Callable[[str], str] | None = None,
    interactive: bool | None = None,
) -> bool:
    """!
    @brief Ask the user to confirm deletion of ``count`` items.
    @details Dry-runs and ``--yes`` bypass the prompt. Unlike a dry-run, an
    unattended invocation without ``--yes`` is refused so nothing is removed
    by accident.
    @param count Number of selected items.
    @param dry_run Whether the pending deletion is a dry-run.
    @param force Whether the caller supplied ``--yes``.
    @param input_func Optional input function override.
    @param interactive Optional override to signal if stdin is interactive.
    @returns ``True`` when the deletion should proceed.
    """

    if dry_run or force:
        return True

    if interactive is None:
        stdin = getattr(sys, "stdin", None)
        isatty = getattr(stdin, "isatty", None)
        interactive = bool(isatty and isatty())

    if not interactive:
        return False

    if input_func is None:
        input_func = input

    print(DELETE_WARNING)
    try:
        response = input_func(f"{delete_prompt(count)} ")
    except EOFError:
        return False

    return response.strip().lower() in ("y", "yes")


__all__ = ["DELETE_WARNING", "delete_prompt", "request_delete_confirmation"]
