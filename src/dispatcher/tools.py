from __future__ import annotations

import shlex
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Sequence

from .logging import get_logger


log = get_logger("dispatcher.tools")

# Exit status the shell reports for a command it cannot find
COMMAND_NOT_FOUND = 127

TOOL_HINTS = {
    "pre-commit": "Install pre-commit (e.g., pip install pre-commit) or run `pubtask install`.",
    "twine": "Install twine (e.g., pip install twine) or run `pubtask install`.",
}


@dataclass
class ToolFailure(Exception):
    """A delegated tool exited non-zero; `exit_code` is propagated unchanged."""

    task: str
    cmd: str
    exit_code: int
    hint: str | None = None

    def __str__(self) -> str:
        msg = f"[{self.task}] command failed (exit={self.exit_code}): {self.cmd}"
        if self.hint:
            msg += f"\nHint: {self.hint}"
        return msg


def format_cmd(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(str(a)) for a in argv)


def run_tool(
    task: str,
    argv: Sequence[str],
    *,
    cwd: str | Path,
    env: Mapping[str, str],
) -> None:
    """Run one external command, streaming its output, and raise on failure."""
    cmd = format_cmd(argv)
    log.info("[%s] $ %s", task, cmd)
    try:
        proc = subprocess.run(
            [str(a) for a in argv],
            cwd=str(cwd),
            env=dict(env),
        )
    except FileNotFoundError:
        tool = str(argv[0])
        raise ToolFailure(
            task=task,
            cmd=cmd,
            exit_code=COMMAND_NOT_FOUND,
            hint=TOOL_HINTS.get(tool, f"Install {tool} or fix PATH."),
        ) from None

    if proc.returncode != 0:
        raise ToolFailure(task=task, cmd=cmd, exit_code=proc.returncode)
