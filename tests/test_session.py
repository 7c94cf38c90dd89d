"""Tests for the caption editing state machine and console front-end."""
from __future__ import annotations

import io
import logging
import subprocess
from pathlib import Path
from typing import Iterable, List
from unittest.mock import patch

import pytest

import captioner.session as session_module
from captioner.records import CaptionRecord, ViewCommand
from captioner.session import (
    ConsoleCaptionEditor,
    EditSession,
    InvalidTransition,
    SessionState,
    edit_captions,
    launch_viewer,
)


def _records(tmp_path: Path) -> List[CaptionRecord]:
    return [
        CaptionRecord(tmp_path / "a.jpg", "cat"),
        CaptionRecord(tmp_path / "b.png", ""),
        CaptionRecord(tmp_path / "c.jpeg", "dog"),
    ]


class RecordingLauncher:
    def __init__(self, status: int = 0, error: Exception | None = None) -> None:
        self.calls: List[List[str]] = []
        self._status = status
        self._error = error

    def __call__(self, argv):
        self.calls.append(list(argv))
        if self._error is not None:
            raise self._error
        return self._status


def _scripted(responses: Iterable[object]):
    queue = list(responses)
    prompts: List[str] = []

    def fake_input(prompt: str) -> str:
        prompts.append(prompt)
        value = queue.pop(0)
        if isinstance(value, BaseException):
            raise value
        return value

    fake_input.prompts = prompts  # type: ignore[attr-defined]
    return fake_input


def test_label_combines_filename_and_caption(tmp_path: Path):
    record = CaptionRecord(tmp_path / "a.jpg", "cat")
    assert record.label == "a.jpg: cat"
    record.caption = "dog"
    assert record.label == "a.jpg: dog"


def test_view_command_strips_backslashes(tmp_path: Path):
    command = ViewCommand.from_options("feh", ["\\-\\-scale-down", "--auto-zoom", "C:\\x"])
    assert command.argv(tmp_path / "a.jpg") == [
        "feh",
        "--scale-down",
        "--auto-zoom",
        "C:x",
        str(tmp_path / "a.jpg"),
    ]


def test_view_command_without_args(tmp_path: Path):
    assert ViewCommand.from_options("eog").argv(tmp_path / "b.png") == ["eog", str(tmp_path / "b.png")]


def test_submit_changes_only_selected_record(tmp_path: Path):
    records = _records(tmp_path)
    before = [(r.image_path, r.caption) for r in records]
    session = EditSession(records)

    assert session.select(1) == ""
    assert session.state is SessionState.EDITING
    label = session.submit("a bird")

    assert label == "b.png: a bird"
    assert session.state is SessionState.LISTING
    assert session.selected == 1
    assert session.label(1) == "b.png: a bird"
    after = [(r.image_path, r.caption) for r in records]
    assert len(after) == len(before)
    assert after[0] == before[0]
    assert after[2] == before[2]
    assert after[1] == (before[1][0], "a bird")


def test_cancel_discards_edit(tmp_path: Path):
    records = _records(tmp_path)
    session = EditSession(records)

    session.select(0)
    session.cancel()

    assert session.state is SessionState.LISTING
    assert records[0].caption == "cat"


def test_quit_returns_table_and_terminates(tmp_path: Path):
    records = _records(tmp_path)
    session = EditSession(records)

    assert session.quit() is records
    assert session.state is SessionState.TERMINATED
    with pytest.raises(InvalidTransition):
        session.select(0)


def test_invalid_transitions_are_rejected(tmp_path: Path):
    session = EditSession(_records(tmp_path))

    with pytest.raises(InvalidTransition):
        session.submit("text")
    with pytest.raises(InvalidTransition):
        session.cancel()

    session.select(0)
    with pytest.raises(InvalidTransition):
        session.select(1)
    with pytest.raises(InvalidTransition):
        session.quit()


def test_select_out_of_range(tmp_path: Path):
    session = EditSession(_records(tmp_path))
    with pytest.raises(IndexError):
        session.select(3)
    assert session.state is SessionState.LISTING


def test_select_launches_view_command(tmp_path: Path):
    records = _records(tmp_path)
    launcher = RecordingLauncher()
    session = EditSession(
        records,
        view_command=ViewCommand.from_options("viewer", ["\\-f"]),
        launcher=launcher,
    )

    session.select(2)

    assert launcher.calls == [["viewer", "-f", str(tmp_path / "c.jpeg")]]


def test_launch_failure_is_not_fatal(tmp_path: Path, caplog):
    launcher = RecordingLauncher(error=FileNotFoundError("no such program"))
    session = EditSession(
        _records(tmp_path),
        view_command=ViewCommand.from_options("missing-viewer"),
        launcher=launcher,
    )

    with caplog.at_level(logging.WARNING):
        caption = session.select(0)

    assert caption == "cat"
    assert session.state is SessionState.EDITING
    assert "missing-viewer" in caplog.text


def test_no_view_command_launches_nothing(tmp_path: Path):
    launcher = RecordingLauncher()
    session = EditSession(_records(tmp_path), launcher=launcher)
    session.select(0)
    assert launcher.calls == []


def test_launch_viewer_discards_output():
    completed = subprocess.CompletedProcess(args=["viewer"], returncode=3)
    with patch.object(session_module.subprocess, "run", return_value=completed) as run_mock:
        status = launch_viewer(["viewer", "image.png"])

    assert status == 3
    run_mock.assert_called_once()
    args, kwargs = run_mock.call_args
    assert args[0] == ["viewer", "image.png"]
    assert kwargs["stdout"] is subprocess.DEVNULL
    assert kwargs["stderr"] is subprocess.DEVNULL


def test_launch_viewer_missing_program_raises(tmp_path: Path):
    with pytest.raises(OSError):
        launch_viewer([str(tmp_path / "definitely-not-a-program")])


def test_console_editor_commits_and_quits(tmp_path: Path):
    records = _records(tmp_path)
    fake_input = _scripted(["2", "a bird", "q"])
    output = io.StringIO()

    result = edit_captions(records, editor=ConsoleCaptionEditor(input_func=fake_input, output=output))

    assert result is records
    assert [r.caption for r in records] == ["cat", "a bird", "dog"]
    text = output.getvalue()
    assert "Editing caption for image b.png" in text
    assert "b.png: a bird" in text


def test_console_editor_eof_cancels_edit(tmp_path: Path):
    records = _records(tmp_path)
    fake_input = _scripted(["1", EOFError(), "quit"])

    edit_captions(records, editor=ConsoleCaptionEditor(input_func=fake_input, output=io.StringIO()))

    assert records[0].caption == "cat"


def test_console_editor_rejects_bad_selection(tmp_path: Path):
    records = _records(tmp_path)
    fake_input = _scripted(["0", "abc", "9", "3", "", "q"])
    output = io.StringIO()

    edit_captions(records, editor=ConsoleCaptionEditor(input_func=fake_input, output=output))

    assert output.getvalue().count("Please enter a number between 1 and 3") == 3
    assert records[2].caption == ""


def test_console_editor_eof_at_list_quits(tmp_path: Path):
    records = _records(tmp_path)
    fake_input = _scripted([EOFError()])

    edit_captions(records, editor=ConsoleCaptionEditor(input_func=fake_input, output=io.StringIO()))

    assert [r.caption for r in records] == ["cat", "", "dog"]


def test_console_editor_launches_viewer_before_prompt(tmp_path: Path):
    records = _records(tmp_path)
    events: List[str] = []

    def launcher(argv):
        events.append("view")
        return 0

    def fake_input(prompt: str) -> str:
        events.append(prompt.strip().splitlines()[0])
        return {"Caption:": "edited"}.get(prompt.strip(), "1" if "view" not in events else "q")

    edit_captions(
        records,
        view_command=ViewCommand.from_options("viewer"),
        editor=ConsoleCaptionEditor(input_func=fake_input, output=io.StringIO()),
        launcher=launcher,
    )

    assert events.index("view") < events.index("Caption:")
    assert records[0].caption == "edited"


def test_edit_disabled_passes_table_through(tmp_path: Path):
    records = _records(tmp_path)

    class ExplodingEditor:
        def run(self, session):
            raise AssertionError("editor should not run")

    assert edit_captions(records, enabled=False, editor=ExplodingEditor()) is records
