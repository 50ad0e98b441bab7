"""CLI Error Handler.

Prints WeekGoalsError (or any unexpected exception) either as a rich panel
for humans or as JSON on stderr for scripts, then exits with status 1.
"""

import json
import sys
from typing import NoReturn

from rich.console import Console
from rich.text import Text

from weekgoals.foundation.errors import ErrorCode, WeekGoalsError

_ICONS = {
    "auth": "🔒",
    "not_found": "🔍",
    "conflict": "⚠",
    "validation": "✎",
    "config": "⚙",
    "io": "💾",
}


def handle_error(error: WeekGoalsError | Exception, json_output: bool = False) -> NoReturn:
    """Report an error and exit.

    Raises:
        SystemExit: Always exits with code 1
    """
    if not isinstance(error, WeekGoalsError):
        error = WeekGoalsError(
            code=ErrorCode.STORAGE_UNAVAILABLE,
            context={"detail": str(error)},
            cause=error,
        )

    if json_output:
        error_dict = error.to_dict()
        if error.cause:
            error_dict["cause"] = str(error.cause)
        print(json.dumps(error_dict, ensure_ascii=False), file=sys.stderr)
        sys.exit(1)

    console = Console(stderr=True)
    header = Text()
    header.append(f"{_ICONS.get(error.category, '✗')} ", style="bold")
    header.append(f"[{error.error_id}] ", style="dim")
    header.append(error.message, style="bold red")
    console.print(header)
    if error.cause:
        console.print(f"  [dim]cause: {error.cause}[/dim]")
    sys.exit(1)
