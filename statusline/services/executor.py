"""
CommandExecutor — Bounded, non-hanging shell execution

Every environment probe (git, project tooling) goes through here.
The status line must never hang the host shell, so every call is
time-boxed and fails soft: all failure modes resolve to a CommandResult
carrying a descriptive sentinel string, never an exception.

Selection rule for CommandResult.text:
    stdout if non-empty
    else "Error: " + stderr if non-empty
    else a success/failure sentinel derived from the exit code
"""

import logging
import os
import re
import shlex
import shutil
import signal
import subprocess
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, List, Dict, Union


logger = logging.getLogger(__name__)

IS_WINDOWS = sys.platform.startswith("win")

DEFAULT_TIMEOUT_MS = 5000
FIRST_LINE_TIMEOUT_MS = 3000
AVAILABILITY_TIMEOUT_MS = 2000
KILL_GRACE_S = 0.5  # time allowed to reap a killed process

# Sentinel strings
TIMEOUT_MESSAGE = "Command timed out after {timeout}ms"
KILL_FAILED_MESSAGE = "Command timed out and failed to terminate"
SUCCESS_MESSAGE = "Command completed successfully"
FAILURE_MESSAGE = "Command failed with exit code {code}"
EXCEPTION_MESSAGE = "Exception: {message}"
ERROR_PREFIX = "Error: "
NO_OUTPUT = "No output"

# Tool names passed to which/where; anything else is never looked up
TOOL_NAME_PATTERN = re.compile(r"[A-Za-z0-9._+-]+")

SENTINEL_MARKERS = (
    "Command timed out",
    SUCCESS_MESSAGE,
    "Command failed with exit code",
    "Exception: ",
    ERROR_PREFIX,
    NO_OUTPUT,
    "not found",
)


def is_sentinel(text: str) -> bool:
    """True if text carries one of the executor's placeholder results."""
    return any(marker in text for marker in SENTINEL_MARKERS)


@dataclass(frozen=True)
class CommandResult:
    """
    Outcome of one shell command.

    Ephemeral: produced and consumed within a single probe.
    """
    command: str
    text: str                         # selected output or sentinel
    stdout: str = ""
    stderr: str = ""
    exit_code: Optional[int] = None   # None when the process never finished
    timed_out: bool = False
    duration_ms: float = 0.0
    error: Optional[str] = None       # spawn/kill failure description

    @property
    def ok(self) -> bool:
        """Process finished in time with exit code 0."""
        return self.exit_code == 0 and not self.timed_out and self.error is None

    @property
    def failed(self) -> bool:
        return not self.ok

    @property
    def lines(self) -> List[str]:
        """Non-empty stdout lines."""
        return [line for line in self.stdout.splitlines() if line.strip()]


def _join_lines(text: Optional[str]) -> str:
    """
    Normalize captured output: one entry per line, blank edge lines dropped,
    trailing whitespace trimmed.

    Leading spaces of the first line are kept; porcelain formats are
    column-sensitive.
    """
    if not text:
        return ""
    lines = text.splitlines()
    while lines and not lines[0].strip():
        lines.pop(0)
    while lines and not lines[-1].strip():
        lines.pop()
    return "\n".join(lines).rstrip()


def select_text(stdout: str, stderr: str, exit_code: int) -> str:
    if stdout:
        return stdout
    if stderr:
        return f"{ERROR_PREFIX}{stderr}"
    if exit_code == 0:
        return SUCCESS_MESSAGE
    return FAILURE_MESSAGE.format(code=exit_code)


def default_shell() -> List[str]:
    """Shell interpreter argv prefix for this platform."""
    if IS_WINDOWS:
        return ["cmd.exe", "/c"]
    return [shutil.which("bash") or "/bin/sh", "-c"]


class CommandExecutor:
    """
    Runs shell command lines with a deadline.

    The command line is handed to the shell as a single argument.
    Standard input is closed; stdout and stderr are captured separately.
    """

    def __init__(
        self,
        default_timeout_ms: int = DEFAULT_TIMEOUT_MS,
        shell: Optional[List[str]] = None,
        cwd: Optional[Union[str, Path]] = None,
    ):
        """
        Initialize executor.

        Args:
            default_timeout_ms: Deadline used when run() gets none
            shell: Interpreter argv prefix (default: bash -c / cmd.exe /c)
            cwd: Default working directory (default: process cwd)
        """
        self.default_timeout_ms = default_timeout_ms
        self.shell = shell or default_shell()
        self.cwd = Path(cwd) if cwd else None
        self._available: Dict[str, bool] = {}

    def run(
        self,
        command: str,
        cwd: Optional[Union[str, Path]] = None,
        timeout_ms: Optional[int] = None,
    ) -> CommandResult:
        """
        Execute a command line and wait for it, at most timeout_ms.

        Never raises. On timeout the process (and its process group on
        POSIX) is killed and the sentinel "Command timed out after {t}ms"
        is returned.
        """
        if timeout_ms is None:
            timeout_ms = self.default_timeout_ms
        workdir = cwd if cwd is not None else self.cwd
        start = time.monotonic()

        try:
            process = subprocess.Popen(
                self.shell + [command],
                cwd=str(workdir) if workdir else None,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
                start_new_session=not IS_WINDOWS,
                creationflags=getattr(subprocess, "CREATE_NO_WINDOW", 0) if IS_WINDOWS else 0,
            )
        except Exception as e:
            logger.debug("Could not start %r: %s", command, e)
            return CommandResult(
                command=command,
                text=EXCEPTION_MESSAGE.format(message=e),
                duration_ms=_elapsed_ms(start),
                error=str(e),
            )

        try:
            stdout, stderr = process.communicate(timeout=timeout_ms / 1000)
        except subprocess.TimeoutExpired:
            return self._terminate(process, command, timeout_ms, start)
        except Exception as e:
            self._kill_quietly(process)
            return CommandResult(
                command=command,
                text=EXCEPTION_MESSAGE.format(message=e),
                duration_ms=_elapsed_ms(start),
                error=str(e),
            )

        stdout = _join_lines(stdout)
        stderr = _join_lines(stderr)
        duration_ms = _elapsed_ms(start)
        logger.debug("%r exited %s in %.1fms", command, process.returncode, duration_ms)

        return CommandResult(
            command=command,
            text=select_text(stdout, stderr, process.returncode),
            stdout=stdout,
            stderr=stderr,
            exit_code=process.returncode,
            duration_ms=duration_ms,
        )

    def first_line(
        self,
        command: str,
        cwd: Optional[Union[str, Path]] = None,
        timeout_ms: int = FIRST_LINE_TIMEOUT_MS,
    ) -> str:
        """First non-empty line of the selected text, or "No output"."""
        result = self.run(command, cwd=cwd, timeout_ms=timeout_ms)
        for line in result.text.splitlines():
            if line.strip():
                return line.strip()
        return NO_OUTPUT

    def is_available(self, tool: str) -> bool:
        """
        Check whether a tool is on PATH via `command -v` (POSIX) or `where`.

        Conservative: any failure or sentinel-bearing answer means
        "not available". Answers are remembered for this executor only.
        """
        if tool in self._available:
            return self._available[tool]

        if not TOOL_NAME_PATTERN.fullmatch(tool):
            logger.debug("Refusing to look up tool name %r", tool)
            return False

        if IS_WINDOWS:
            lookup = f"where {tool}"
        else:
            lookup = f"command -v {shlex.quote(tool)}"

        result = self.run(lookup, timeout_ms=AVAILABILITY_TIMEOUT_MS)
        available = result.ok and bool(result.stdout) and not is_sentinel(result.text)
        if not available:
            logger.debug("Tool %r not available: %s", tool, result.text)
        self._available[tool] = available
        return available

    # -------------------------------------------------------------------------
    # Termination
    # -------------------------------------------------------------------------

    def _terminate(
        self,
        process: subprocess.Popen,
        command: str,
        timeout_ms: int,
        start: float,
    ) -> CommandResult:
        """Kill a process that overran its deadline."""
        text = TIMEOUT_MESSAGE.format(timeout=timeout_ms)
        error = None
        try:
            self._kill(process)
        except OSError as e:
            text = KILL_FAILED_MESSAGE
            error = str(e) or type(e).__name__
            _close_pipes(process)
        else:
            try:
                process.communicate(timeout=KILL_GRACE_S)
            except (OSError, subprocess.SubprocessError) as e:
                # Killed, but a process outside the group still holds the pipes
                logger.debug("Output pipes not released for %r: %s", command, e)
                _close_pipes(process)

        logger.warning("%r: %s", command, text)
        return CommandResult(
            command=command,
            text=text,
            exit_code=process.returncode,
            timed_out=True,
            duration_ms=_elapsed_ms(start),
            error=error,
        )

    def _kill(self, process: subprocess.Popen) -> None:
        if IS_WINDOWS:
            process.kill()
            return
        try:
            # start_new_session makes the child a group leader: pgid == pid
            os.killpg(process.pid, signal.SIGKILL)
        except ProcessLookupError:
            pass

    def _kill_quietly(self, process: subprocess.Popen) -> None:
        try:
            self._kill(process)
        except OSError as e:
            logger.debug("Kill failed for pid %s: %s", process.pid, e)
        _close_pipes(process)


def _close_pipes(process: subprocess.Popen) -> None:
    for pipe in (process.stdout, process.stderr):
        if pipe is not None:
            try:
                pipe.close()
            except OSError:
                pass


def _elapsed_ms(start: float) -> float:
    return (time.monotonic() - start) * 1000
