"""Interactive caption editing.

:class:`EditSession` holds the state machine shared by every front-end: the
operator selects a record, optionally views the image with an external
program, then commits or cancels a new caption. Front-ends only raise events
on the session and redraw from it; records are addressed by index so the list
and the edit dialog always observe the same entry.
"""
from __future__ import annotations

import logging
import subprocess
import sys
from contextlib import contextmanager, nullcontext
from enum import Enum
from typing import (
    Callable,
    ContextManager,
    Iterator,
    List,
    Optional,
    Protocol,
    Sequence,
    TextIO,
)

from .records import CaptionRecord, ViewCommand

try:  # pragma: no cover - readline is missing on some platforms
    import readline
except ImportError:  # pragma: no cover
    readline = None  # type: ignore[assignment]


class SessionState(Enum):
    LISTING = "listing"
    EDITING = "editing"
    TERMINATED = "terminated"


class InvalidTransition(RuntimeError):
    """Raised when an event is not valid in the current session state."""


Launcher = Callable[[Sequence[str]], int]


def launch_viewer(argv: Sequence[str]) -> int:
    """Run ``argv`` to completion with its output discarded.

    Returns the exit status. ``OSError`` propagates when the program cannot be
    started.
    """

    logging.debug("Launching viewer: %s", " ".join(argv))
    result = subprocess.run(
        list(argv),
        stdin=subprocess.DEVNULL,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        check=False,
    )
    return result.returncode


class EditSession:
    """Manage the lifecycle of one interactive caption editing session."""

    def __init__(
        self,
        records: List[CaptionRecord],
        *,
        view_command: Optional[ViewCommand] = None,
        launcher: Launcher = launch_viewer,
    ) -> None:
        self._records = records
        self._view_command = view_command
        self._launcher = launcher
        self._state = SessionState.LISTING
        self._selected: Optional[int] = None

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def selected(self) -> Optional[int]:
        return self._selected

    @property
    def records(self) -> List[CaptionRecord]:
        return self._records

    def __len__(self) -> int:
        return len(self._records)

    def label(self, index: int) -> str:
        return self._records[index].label

    def labels(self) -> List[str]:
        return [record.label for record in self._records]

    def current(self) -> CaptionRecord:
        """Return the record being edited."""

        self._require(SessionState.EDITING, "current")
        assert self._selected is not None
        return self._records[self._selected]

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------
    def select(self, index: int) -> str:
        """Start editing the record at ``index`` and return its caption."""

        self._require(SessionState.LISTING, "select")
        if not 0 <= index < len(self._records):
            raise IndexError(f"No caption record at index {index}")
        self._selected = index
        record = self._records[index]
        self._view(record)
        self._state = SessionState.EDITING
        return record.caption

    def submit(self, text: str) -> str:
        """Store ``text`` as the caption being edited and return the new label."""

        record = self.current()
        record.caption = text
        self._state = SessionState.LISTING
        logging.debug("Caption for %s set to %r", record.filename, text)
        return record.label

    def cancel(self) -> None:
        self._require(SessionState.EDITING, "cancel")
        self._state = SessionState.LISTING

    def quit(self) -> List[CaptionRecord]:
        self._require(SessionState.LISTING, "quit")
        self._state = SessionState.TERMINATED
        return self._records

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _require(self, state: SessionState, event: str) -> None:
        if self._state is not state:
            raise InvalidTransition(
                f"Cannot {event} while the session is {self._state.value}"
            )

    def _view(self, record: CaptionRecord) -> None:
        if self._view_command is None:
            return
        argv = self._view_command.argv(record.image_path)
        try:
            status = self._launcher(argv)
        except OSError as exc:
            logging.warning("Unable to launch image viewer %r: %s", self._view_command.command, exc)
            return
        if status:
            logging.info("Image viewer exited with status %d for %s", status, record.filename)


class CaptionEditor(Protocol):
    """Front-end that drives an :class:`EditSession` until the operator quits."""

    def run(self, session: EditSession) -> None:
        ...


@contextmanager
def _prefilled_input(text: str) -> Iterator[None]:
    readline.set_startup_hook(lambda: readline.insert_text(text))
    try:
        yield
    finally:
        readline.set_startup_hook()


class ConsoleCaptionEditor:
    """Line-based front-end reading commands from standard input."""

    def __init__(
        self,
        *,
        input_func: Callable[[str], str] = input,
        output: Optional[TextIO] = None,
    ) -> None:
        self._input = input_func
        self._output = output

    def run(self, session: EditSession) -> None:
        while session.state is not SessionState.TERMINATED:
            self._show_list(session)
            try:
                response = self._input("Select an image number, or [q]uit.\n> ").strip()
            except EOFError:
                response = "q"
            lowered = response.lower()
            if lowered in {"q", "quit"}:
                session.quit()
                continue
            index = self._parse_index(response, len(session))
            if index is None:
                self._print(f"Please enter a number between 1 and {len(session)}, or 'q' to quit.")
                continue
            self._edit(session, index)

    def _edit(self, session: EditSession, index: int) -> None:
        caption = session.select(index)
        record = session.current()
        self._print(f"Editing caption for image {record.filename} (Ctrl-D cancels)")
        try:
            with self._prefill(caption):
                text = self._input("Caption: ")
        except EOFError:
            self._print("")
            session.cancel()
            return
        self._print(session.submit(text))

    def _prefill(self, caption: str) -> ContextManager[None]:
        if self._input is input and readline is not None:
            return _prefilled_input(caption)
        self._print(f"Current caption: {caption}")
        return nullcontext()

    def _show_list(self, session: EditSession) -> None:
        self._print("Caption Editor")
        for number, label in enumerate(session.labels(), start=1):
            marker = "*" if session.selected == number - 1 else " "
            self._print(f"{marker}{number:>4}. {label}")

    @staticmethod
    def _parse_index(response: str, count: int) -> Optional[int]:
        try:
            number = int(response)
        except ValueError:
            return None
        if 1 <= number <= count:
            return number - 1
        return None

    def _print(self, message: str) -> None:
        print(message, file=self._output or sys.stdout)


def edit_captions(
    records: List[CaptionRecord],
    *,
    enabled: bool = True,
    view_command: Optional[ViewCommand] = None,
    editor: Optional[CaptionEditor] = None,
    launcher: Launcher = launch_viewer,
) -> List[CaptionRecord]:
    """Let the operator edit ``records`` in place and return them."""

    if not enabled:
        return records
    session = EditSession(records, view_command=view_command, launcher=launcher)
    (editor or ConsoleCaptionEditor()).run(session)
    if session.state is not SessionState.TERMINATED:
        logging.debug("Editor closed without quitting; keeping edits made so far")
    return records


__all__ = [
    "CaptionEditor",
    "ConsoleCaptionEditor",
    "EditSession",
    "InvalidTransition",
    "SessionState",
    "edit_captions",
    "launch_viewer",
]
