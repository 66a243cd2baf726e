# src/dotnet_release/runner.py
# =============================================================================
# Running external tools (nuget, msbuild, test runners) and capturing output.
#
# No shell=True; argv lists only. Output is captured, logged line by line at
# DEBUG and returned in a CommandResult. --dry-run prints the command and
# returns a zero result without spawning anything.
# =============================================================================

from __future__ import annotations

import logging
import os
import shlex
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Union

from .errors import ExternalCommandError

log = logging.getLogger(__name__)

Argv = Union[str, Iterable[Union[str, Path]]]


@dataclass
class CommandResult:
    command: List[str]
    cwd: Optional[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""
    duration_sec: float = 0.0
    dry_run: bool = False

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        """stdout and stderr together (tools disagree on where they print)."""
        return "\n".join(part for part in (self.stdout, self.stderr) if part)

    def tail(self, n: int = 20) -> List[str]:
        lines = self.output.splitlines()
        return lines[-max(0, n):]


def _ensure_list(argv: Argv) -> List[str]:
    if isinstance(argv, str):
        return shlex.split(argv)
    return [str(a) for a in argv]


def _mask(argv: List[str], secrets: Iterable[str]) -> List[str]:
    hidden = {s for s in secrets if s}
    return ["********" if a in hidden else a for a in argv]


def format_command(argv: Iterable[str]) -> str:
    return " ".join(shlex.quote(a) for a in argv)


def run_command(
    argv: Argv,
    *,
    cwd: Optional[Union[str, Path]] = None,
    env: Optional[Mapping[str, str]] = None,
    check: bool = True,
    dry_run: bool = False,
    secrets: Iterable[str] = (),
) -> CommandResult:
    """
    Run ``argv`` to completion and capture its output.

    Raises ExternalCommandError when the executable does not exist (returncode
    127) or, with ``check``, when it exits non-zero. Values in ``secrets`` are
    masked wherever the command line is logged.
    """
    cmd = _ensure_list(argv)
    if not cmd:
        raise ValueError("empty command")
    cwd_s = str(cwd) if cwd is not None else None
    log.info("$ %s", format_command(_mask(cmd, secrets)))
    if dry_run:
        return CommandResult(cmd, cwd_s, 0, dry_run=True)

    full_env: Optional[Dict[str, str]] = None
    if env is not None:
        full_env = dict(os.environ)
        full_env.update(env)

    start = time.monotonic()
    try:
        proc = subprocess.run(
            cmd,
            cwd=cwd_s,
            env=full_env,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            errors="replace",
        )
    except FileNotFoundError:
        result = CommandResult(cmd, cwd_s, 127, stderr=f"{cmd[0]}: command not found")
        raise ExternalCommandError(f"command not found: {cmd[0]}", result) from None

    result = CommandResult(
        command=cmd,
        cwd=cwd_s,
        returncode=proc.returncode,
        stdout=proc.stdout or "",
        stderr=proc.stderr or "",
        duration_sec=round(time.monotonic() - start, 3),
    )
    for line in result.output.splitlines():
        log.debug("  %s", line)
    log.debug("exit code %d after %.3fs", result.returncode, result.duration_sec)

    if check and not result.ok:
        tail = "\n".join(result.tail())
        raise ExternalCommandError(
            f"{cmd[0]} exited with code {result.returncode}" + (f":\n{tail}" if tail else ""),
            result,
        )
    return result
