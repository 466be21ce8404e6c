"""!
@brief Orchestration state machine shared by the front ends.
@details :class:`Session` owns the program list, the current scan result and
the view state. Front ends feed it :class:`Message` objects; when a message
starts background work, :meth:`Session.update` returns a :class:`Command` that
a :class:`Worker` runs off the interactive thread, and the command's outcome
comes back as another message. Scans and deletions can only start from the
state that allows them, so at most one unit of work is ever in flight.
"""
from __future__ import annotations

import enum
import functools
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Sequence

from . import deletion, logging_ext, programs, scanner
from .models import CandidateArtifact, ProgramIdentity, ScanResult


class ViewState(enum.Enum):
    PROGRAM_LIST = "program-list"
    SCANNING = "scanning"
    SCAN_RESULTS = "scan-results"
    CONFIRMING_DELETE = "confirming-delete"
    DELETING = "deleting"


class MessageKind(enum.Enum):
    LOAD_PROGRAMS = "load-programs"
    PROGRAM_SELECTED = "program-selected"
    SCAN_REQUESTED = "scan-requested"
    SCAN_COMPLETED = "scan-completed"
    RESULT_CHECKED = "result-checked"
    SELECT_ALL = "select-all"
    DESELECT_ALL = "deselect-all"
    DELETE_REQUESTED = "delete-requested"
    BACKUP_TOGGLED = "backup-toggled"
    CONFIRM_DELETE = "confirm-delete"
    CANCEL_DELETE = "cancel-delete"
    DELETE_COMPLETED = "delete-completed"
    BACK = "back"
    DISMISS_ERROR = "dismiss-error"


@dataclass(frozen=True)
class Outcome:
    """!
    @brief Result of a background command: a value or an error message.
    """

    value: Any = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class Message:
    kind: MessageKind
    payload: Any = None


@dataclass(frozen=True)
class Command:
    """!
    @brief Background unit of work and the message kind reporting its outcome.
    """

    task: Callable[[], Any]
    completion: MessageKind

    def run(self) -> Message:
        try:
            value = self.task()
        except Exception as exc:
            logging_ext.get_human_logger().debug(
                "%s failed: %s", self.completion.value, exc, exc_info=True
            )
            return Message(self.completion, Outcome(error=str(exc)))
        return Message(self.completion, Outcome(value=value))


_BUSY_STATES = (ViewState.SCANNING, ViewState.DELETING)
_ALWAYS_ACCEPTED = (
    MessageKind.LOAD_PROGRAMS,
    MessageKind.SCAN_COMPLETED,
    MessageKind.DELETE_COMPLETED,
    MessageKind.DISMISS_ERROR,
)


class Session:
    """!
    @brief Finite state machine driving program selection, scan and deletion.
    @details The collaborators default to the real registry listing, scanner
    and deletion executor; tests replace them with plain callables.
    """

    def __init__(
        self,
        *,
        load_programs: Callable[[], Sequence[ProgramIdentity]] = programs.load_installed_programs,
        scan: Callable[[ProgramIdentity], ScanResult] = scanner.scan_for_leftovers,
        delete: Callable[..., None] = deletion.delete_items,
        backup_registry: bool = True,
        dry_run: bool = False,
    ) -> None:
        self._load_programs = load_programs
        self._scan = scan
        self._delete = delete
        self.dry_run = dry_run

        self.programs: List[ProgramIdentity] = []
        self.selected_program: Optional[ProgramIdentity] = None
        self.scan_results = ScanResult()
        self.view_state = ViewState.PROGRAM_LIST
        self.error_message: Optional[str] = None
        self.backup_registry = backup_registry

    @property
    def busy(self) -> bool:
        return self.view_state in _BUSY_STATES

    def start(self) -> Command:
        """!
        @brief Command that loads the installed program list.
        """

        return Command(lambda: list(self._load_programs()), MessageKind.LOAD_PROGRAMS)

    def update(self, message: Message) -> Optional[Command]:
        """!
        @brief Apply ``message`` and return the background work it starts, if any.
        """

        kind = message.kind
        if self.busy and kind not in _ALWAYS_ACCEPTED:
            logging_ext.get_human_logger().debug(
                "Ignoring %s while %s", kind.value, self.view_state.value
            )
            return None

        if kind is not MessageKind.DISMISS_ERROR:
            self.error_message = None

        handler = getattr(self, f"_on_{kind.name.lower()}")
        return handler(message.payload)

    # -- message handlers ------------------------------------------------

    def _on_load_programs(self, outcome: Outcome) -> None:
        if outcome.ok:
            self.programs = list(outcome.value)
        else:
            self.error_message = f"Failed to load programs: {outcome.error}"

    def _on_program_selected(self, program: ProgramIdentity) -> None:
        self.selected_program = program

    def _on_scan_requested(self, _payload: Any) -> Optional[Command]:
        if self.view_state is not ViewState.PROGRAM_LIST or self.selected_program is None:
            return None
        self.view_state = ViewState.SCANNING
        return Command(
            functools.partial(self._scan, self.selected_program), MessageKind.SCAN_COMPLETED
        )

    def _on_scan_completed(self, outcome: Outcome) -> None:
        if outcome.ok:
            self.scan_results = outcome.value
            self.view_state = ViewState.SCAN_RESULTS
        else:
            self.error_message = f"Error during scan: {outcome.error}"
            self.view_state = ViewState.PROGRAM_LIST

    def _on_result_checked(self, payload: tuple[int, bool]) -> None:
        index, checked = payload
        self.scan_results.set_selected(index, checked)

    def _on_select_all(self, _payload: Any) -> None:
        self.scan_results.select_all()

    def _on_deselect_all(self, _payload: Any) -> None:
        self.scan_results.deselect_all()

    def _on_delete_requested(self, _payload: Any) -> None:
        if self.view_state is ViewState.SCAN_RESULTS and self.scan_results.any_selected():
            self.view_state = ViewState.CONFIRMING_DELETE

    def _on_backup_toggled(self, checked: bool) -> None:
        self.backup_registry = bool(checked)

    def _on_confirm_delete(self, _payload: Any) -> Optional[Command]:
        if self.view_state is not ViewState.CONFIRMING_DELETE:
            return None
        self.view_state = ViewState.DELETING
        items: List[CandidateArtifact] = self.scan_results.selected_artifacts()
        return Command(
            functools.partial(self._delete, items, self.backup_registry, dry_run=self.dry_run),
            MessageKind.DELETE_COMPLETED,
        )

    def _on_cancel_delete(self, _payload: Any) -> None:
        if self.view_state is ViewState.CONFIRMING_DELETE:
            self.view_state = ViewState.SCAN_RESULTS

    def _on_back(self, _payload: Any) -> None:
        self._reset_to_program_list()

    def _on_delete_completed(self, outcome: Outcome) -> Optional[Command]:
        if not outcome.ok:
            self.error_message = f"An error occurred: {outcome.error}"
            self.view_state = ViewState.SCAN_RESULTS
            return None
        self._reset_to_program_list()
        return self.start()

    def _on_dismiss_error(self, _payload: Any) -> None:
        self.error_message = None

    def _reset_to_program_list(self) -> None:
        self.view_state = ViewState.PROGRAM_LIST
        self.selected_program = None
        self.scan_results = ScanResult()


class Worker:
    """!
    @brief Runs commands on a single background thread.
    """

    def __init__(self) -> None:
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="kuri-worker")

    def submit(self, command: Command) -> "Future[Message]":
        return self._executor.submit(command.run)

    def run(self, command: Command) -> Message:
        return self.submit(command).result()

    def shutdown(self) -> None:
        self._executor.shutdown(wait=True)

    def __enter__(self) -> "Worker":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()


def dispatch(session: Session, message: Message, worker: Worker) -> None:
    """!
    @brief Apply ``message`` and run any follow-up commands to completion.
    """

    command = session.update(message)
    while command is not None:
        command = session.update(worker.run(command))


__all__ = [
    "Command",
    "Message",
    "MessageKind",
    "Outcome",
    "Session",
    "ViewState",
    "Worker",
    "dispatch",
]
