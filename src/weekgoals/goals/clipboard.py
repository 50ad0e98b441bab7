"""System clipboard access for copy/paste of a week's goals.

Reading and writing shell out to the platform clipboard tools; the first
one that is installed and succeeds wins. Paste reports a tri-state result
instead of raising, so callers can show "pasted", "nothing to paste" or
"clipboard unavailable".
"""

import logging
import subprocess
from collections.abc import Callable
from enum import Enum

from weekgoals.foundation.errors import (
    ClipboardError,
    ErrorCode,
    TransientIOError,
    WeekGoalsError,
)
from weekgoals.goals.service import GoalService

logger = logging.getLogger(__name__)

# (read command, write command) per platform, tried in order
_CLIPBOARD_TOOLS: tuple[tuple[list[str], list[str]], ...] = (
    (["pbpaste"], ["pbcopy"]),
    (["wl-paste", "--no-newline"], ["wl-copy"]),
    (["xclip", "-selection", "clipboard", "-o"], ["xclip", "-selection", "clipboard"]),
    (["xsel", "--clipboard", "--output"], ["xsel", "--clipboard", "--input"]),
)

_TIMEOUT_SECONDS = 5


class PasteResult(str, Enum):
    """Outcome of pasting from the clipboard."""

    OK = "ok"
    """At least one goal was imported."""

    EMPTY = "empty"
    """The clipboard held nothing recognisable."""

    FAIL = "fail"
    """The clipboard could not be read, or storage rejected the import."""


def read_clipboard() -> str:
    """Read clipboard contents.

    Raises:
        ClipboardError: if no clipboard tool is available or all of them fail.
    """
    for read_cmd, _ in _CLIPBOARD_TOOLS:
        try:
            result = subprocess.run(
                read_cmd, capture_output=True, text=True, timeout=_TIMEOUT_SECONDS
            )
        except (FileNotFoundError, subprocess.TimeoutExpired, OSError):
            continue
        if result.returncode == 0:
            return result.stdout
    raise ClipboardError(ErrorCode.CLIPBOARD_UNAVAILABLE, {"detail": "no readable clipboard"})


def write_clipboard(text: str) -> None:
    """Replace clipboard contents with ``text``.

    Raises:
        ClipboardError: if no clipboard tool is available or all of them fail.
    """
    for _, write_cmd in _CLIPBOARD_TOOLS:
        try:
            result = subprocess.run(
                write_cmd, input=text, text=True, capture_output=True, timeout=_TIMEOUT_SECONDS
            )
        except (FileNotFoundError, subprocess.TimeoutExpired, OSError):
            continue
        if result.returncode == 0:
            return
    raise ClipboardError(ErrorCode.CLIPBOARD_UNAVAILABLE, {"detail": "no writable clipboard"})


def paste_from_clipboard(
    service: GoalService,
    week_key: str,
    reader: Callable[[], str] = read_clipboard,
) -> PasteResult:
    """Import goals from the clipboard into ``week_key``."""
    try:
        text = reader()
    except TransientIOError as e:
        logger.warning("Paste failed: %s", e)
        return PasteResult.FAIL

    try:
        created = service.import_markdown(week_key, text)
    except WeekGoalsError as e:
        logger.warning("Paste could not be stored: %s", e)
        return PasteResult.FAIL

    return PasteResult.OK if created else PasteResult.EMPTY


def copy_to_clipboard(
    service: GoalService,
    week_key: str,
    writer: Callable[[str], None] = write_clipboard,
) -> bool:
    """Export ``week_key`` to the clipboard. Returns False if it could not be written."""
    text = service.export_markdown(week_key)
    try:
        writer(text)
    except TransientIOError as e:
        logger.warning("Copy failed: %s", e)
        return False
    return True
