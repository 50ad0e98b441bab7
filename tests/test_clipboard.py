"""Tests for clipboard copy/paste and the paste tri-state."""

import subprocess

import pytest

from weekgoals.foundation.errors import ClipboardError, ErrorCode, TransientIOError, storage_error
from weekgoals.goals import clipboard
from weekgoals.goals.clipboard import (
    PasteResult,
    copy_to_clipboard,
    paste_from_clipboard,
    read_clipboard,
    write_clipboard,
)
from weekgoals.goals.service import GoalService
from weekgoals.storage import MemoryGoalRepository


@pytest.fixture
def memory_service() -> GoalService:
    return GoalService(MemoryGoalRepository())


def _failing_reader() -> str:
    raise ClipboardError(ErrorCode.CLIPBOARD_UNAVAILABLE, {"detail": "denied"})


class TestPasteResult:
    """ok | empty | fail"""

    def test_ok_when_goals_imported(self, memory_service: GoalService, week: str) -> None:
        result = paste_from_clipboard(
            memory_service, week, reader=lambda: "- [ ] Gym\n  - [x] Warm up\n"
        )
        assert result is PasteResult.OK
        assert memory_service.list_goals(week)[0].subs[0].checked is True

    def test_empty_when_nothing_parsed(self, memory_service: GoalService, week: str) -> None:
        result = paste_from_clipboard(memory_service, week, reader=lambda: "just prose")
        assert result is PasteResult.EMPTY
        assert memory_service.list_goals(week) == []

    def test_fail_when_clipboard_unreadable(self, memory_service: GoalService, week: str) -> None:
        assert paste_from_clipboard(memory_service, week, reader=_failing_reader) is PasteResult.FAIL

    def test_fail_when_storage_rejects(self, week: str) -> None:
        class BrokenRepository(MemoryGoalRepository):
            def create_goal(self, goal):
                raise storage_error("disk full")

        service = GoalService(BrokenRepository())
        assert paste_from_clipboard(service, week, reader=lambda: "- [ ] A\n") is PasteResult.FAIL

    def test_fail_when_text_too_long(self, memory_service: GoalService, week: str) -> None:
        result = paste_from_clipboard(memory_service, week, reader=lambda: "- [ ] " + "x" * 200)
        assert result is PasteResult.FAIL
        assert memory_service.list_goals(week) == []


class TestCopy:
    def test_writes_export(self, memory_service: GoalService, week: str) -> None:
        memory_service.add_goal(week, "Gym")
        written: list[str] = []
        assert copy_to_clipboard(memory_service, week, writer=written.append)
        assert written[0].endswith("- [ ] Gym\n")

    def test_returns_false_on_failure(self, memory_service: GoalService, week: str) -> None:
        def writer(text: str) -> None:
            raise ClipboardError(ErrorCode.CLIPBOARD_UNAVAILABLE, {"detail": "denied"})

        assert copy_to_clipboard(memory_service, week, writer=writer) is False


class TestSystemClipboard:
    """Subprocess fallbacks across platform tools."""

    def test_no_tools_raises(self, monkeypatch) -> None:
        def missing(*args, **kwargs):
            raise FileNotFoundError(args[0][0])

        monkeypatch.setattr(clipboard.subprocess, "run", missing)
        with pytest.raises(TransientIOError):
            read_clipboard()
        with pytest.raises(ClipboardError):
            write_clipboard("text")

    def test_first_working_tool_wins(self, monkeypatch) -> None:
        calls: list[str] = []

        def fake_run(cmd, **kwargs):
            calls.append(cmd[0])
            if cmd[0] == "pbpaste":
                raise FileNotFoundError(cmd[0])
            return subprocess.CompletedProcess(cmd, 0, stdout="- [ ] A\n", stderr="")

        monkeypatch.setattr(clipboard.subprocess, "run", fake_run)
        assert read_clipboard() == "- [ ] A\n"
        assert calls == ["pbpaste", "wl-paste"]

    def test_nonzero_exit_tries_next(self, monkeypatch) -> None:
        def fake_run(cmd, **kwargs):
            code = 0 if cmd[0] == "xsel" else 1
            return subprocess.CompletedProcess(cmd, code, stdout="", stderr="")

        monkeypatch.setattr(clipboard.subprocess, "run", fake_run)
        write_clipboard("text")
