"""!
@brief Plain console user interface.
@details Renders the current :class:`~kuri_uninstaller.app_state.Session` view
and translates typed commands into session messages. Scans and deletions run on
the session worker while this thread waits for their completion message.
"""
from __future__ import annotations

import textwrap
from typing import Callable, Mapping, Optional

from .app_state import Message, MessageKind, Session, ViewState, Worker, dispatch
from .confirm import DELETE_WARNING

InputFunc = Callable[[str], str]


def _ask(input_func: InputFunc, prompt: str) -> Optional[str]:
    """!
    @brief Read one answer, or ``None`` once standard input is exhausted.
    """

    try:
        return input_func(prompt).strip().lower()
    except EOFError:
        print("\nExiting Kuri Uninstaller.")
        return None


def run_cli(app_state: Mapping[str, object]) -> None:
    """!
    @brief Launch the interactive console loop.
    """

    args = app_state.get("args")
    human_logger = app_state.get("human_logger")
    session: Session = app_state["session"]  # type: ignore[assignment]
    worker: Worker = app_state["worker"]  # type: ignore[assignment]
    input_func: InputFunc = app_state.get("input", input)  # type: ignore[assignment]

    if getattr(args, "quiet", False) or getattr(args, "json", False):
        if human_logger:
            human_logger.warning(  # type: ignore[attr-defined]
                "Interactive menu suppressed because quiet/json output mode was requested."
            )
        return

    print("Loading installed programs...")
    command = session.start()
    session.update(worker.run(command))

    views = {
        ViewState.PROGRAM_LIST: _view_program_list,
        ViewState.SCAN_RESULTS: _view_scan_results,
        ViewState.CONFIRMING_DELETE: _view_confirm_delete,
    }

    running = True
    while running:
        if session.error_message:
            print(f"\nError: {session.error_message}")
            if _ask(input_func, "Press Enter to dismiss. ") is None:
                break
            dispatch(session, Message(MessageKind.DISMISS_ERROR), worker)
            continue
        view = views.get(session.view_state)
        if view is None:  # pragma: no cover - work states finish inside dispatch
            break
        running = view(session, worker, input_func)


def _view_program_list(session: Session, worker: Worker, input_func: InputFunc) -> bool:
    print("\n================ Installed Programs ================")
    for index, program in enumerate(session.programs, start=1):
        marker = "*" if program == session.selected_program else " "
        print(f"{marker} {index:3}. {program.describe()}")
    selected = session.selected_program
    print(selected.name if selected else "Select a program to scan")
    print("----------------------------------------------------")

    choice = _ask(input_func, "Number to select, 's' to scan, 'q' to quit: ")
    if choice is None:
        return False
    if choice == "q":
        print("Exiting Kuri Uninstaller.")
        return False
    if choice == "s":
        if selected is None:
            print("Select a program first.")
            return True
        print("Scanning... Please wait.")
        dispatch(session, Message(MessageKind.SCAN_REQUESTED), worker)
        return True
    if choice.isdigit() and 1 <= int(choice) <= len(session.programs):
        program = session.programs[int(choice) - 1]
        dispatch(session, Message(MessageKind.PROGRAM_SELECTED, program), worker)
        return True
    print("Please choose a listed program number.")
    return True


def _view_scan_results(session: Session, worker: Worker, input_func: InputFunc) -> bool:
    name = session.selected_program.name if session.selected_program else ""
    print(f"\n================ Scan Results for {name} ================")
    print(f"Found {len(session.scan_results)} items. Uncheck items to keep them.")
    for index, entry in enumerate(session.scan_results, start=1):
        mark = "x" if entry.selected else " "
        print(f"[{mark}] {index:3}. {entry}")
    print(
        textwrap.dedent(
            """
            --------------------------------------------------
            <number> toggle   a select all   n deselect all
            d delete selected   b back to list
            """
        ).strip("\n")
    )

    choice = _ask(input_func, "Choice: ")
    if choice is None:
        return False
    if choice == "a":
        dispatch(session, Message(MessageKind.SELECT_ALL), worker)
    elif choice == "n":
        dispatch(session, Message(MessageKind.DESELECT_ALL), worker)
    elif choice == "b":
        dispatch(session, Message(MessageKind.BACK), worker)
    elif choice == "d":
        if not session.scan_results.any_selected():
            print("Nothing is selected.")
        dispatch(session, Message(MessageKind.DELETE_REQUESTED), worker)
    elif choice.isdigit() and 1 <= int(choice) <= len(session.scan_results):
        index = int(choice) - 1
        checked = not session.scan_results[index].selected
        dispatch(session, Message(MessageKind.RESULT_CHECKED, (index, checked)), worker)
    else:
        print("Unrecognised choice.")
    return True


def _view_confirm_delete(session: Session, worker: Worker, input_func: InputFunc) -> bool:
    count = session.scan_results.selected_count()
    print(f"\nAre you sure you want to delete {count} selected items?")
    print(DELETE_WARNING)
    mark = "x" if session.backup_registry else " "
    print(f"[{mark}] Create a log of registry keys to be deleted")

    choice = _ask(input_func, "y delete   l toggle log   c cancel: ")
    if choice is None:
        return False
    if choice == "y":
        print("Deleting items... Please wait.")
        dispatch(session, Message(MessageKind.CONFIRM_DELETE), worker)
        if session.view_state is ViewState.PROGRAM_LIST:
            print("Deletion complete.")
    elif choice == "l":
        dispatch(session, Message(MessageKind.BACKUP_TOGGLED, not session.backup_registry), worker)
    elif choice in ("c", "n"):
        dispatch(session, Message(MessageKind.CANCEL_DELETE), worker)
    else:
        print("Unrecognised choice.")
    return True


__all__ = ["run_cli"]
