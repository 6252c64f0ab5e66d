"""Script execution.

This module runs a single script as a child process and returns its captured
standard output, standard error and an error describing any failure. The
interpreter is chosen from the file extension (see runbook.interpreters), the
child inherits the caller's environment plus any overrides, and both output
pipes are drained concurrently so a chatty script cannot deadlock on a full
pipe buffer.

Output is decoded without newline translation: a script that writes CRLF
produces CRLF in the captured text.
"""

import asyncio
import logging
import os
import signal
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Mapping, Optional, Sequence

from runbook.config import ExecutorSettings
from runbook.environment import EnvOverrides, build_environment
from runbook.errors import (
    ExecutionError,
    ExitStatusError,
    LaunchError,
    StreamCaptureError,
)
from runbook.interpreters import build_command, is_unix, resolve_interpreter

logger = logging.getLogger(__name__)

# Shell conventions for a command that could not be started
EXIT_NOT_FOUND = 127
EXIT_NOT_EXECUTABLE = 126
EXIT_FAILURE = 1


@dataclass(frozen=True)
class Invocation:
    """A request to run one script.

    Attributes:
        script_path: Path to an existing script file.
        arguments: Arguments passed to the script after its path.
        environment: Variables set on top of the inherited environment.
    """
    script_path: str
    arguments: tuple[str, ...] = ()
    environment: Mapping[str, str] = field(default_factory=dict)

    def command(self) -> list[str]:
        """Return the argv list this invocation launches on the current host."""
        return build_command(self.script_path, self.arguments)


@dataclass(frozen=True)
class ExecutionResult:
    """Result of script execution.

    Attributes:
        stdout: Standard output from the script.
        stderr: Standard error from the script.
        error: None on exit status 0, otherwise the failure.
    """
    stdout: str
    stderr: str
    error: Optional[ExecutionError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def exit_code(self) -> int:
        return 0 if self.error is None else self.error.exit_code

    def check(self) -> "ExecutionResult":
        """Raise the carried error, if any; otherwise return self."""
        if self.error is not None:
            raise self.error
        return self

    def __iter__(self) -> Iterator:
        # Allows: stdout, stderr, error = await run_script(...)
        return iter((self.stdout, self.stderr, self.error))


def _launch_exit_code(exc: OSError) -> int:
    if not is_unix():
        return EXIT_FAILURE
    if isinstance(exc, FileNotFoundError):
        return EXIT_NOT_FOUND
    return EXIT_NOT_EXECUTABLE


def _status_exit_code(returncode) -> int:
    """Exit code reported for a run that failed after the child started."""
    if not returncode:
        return EXIT_FAILURE
    if returncode < 0 and is_unix():
        return 128 - returncode
    return returncode


def _exit_status_error(returncode: int, command: Sequence[str]) -> ExitStatusError:
    if returncode < 0 and is_unix():
        signum = -returncode
        try:
            signal_name = signal.Signals(signum).name
        except ValueError:
            signal_name = f"SIG{signum}"
        return ExitStatusError(128 + signum, command, signal_name=signal_name)
    return ExitStatusError(returncode, command)


async def _kill_process_group(process: asyncio.subprocess.Process) -> None:
    """Kill a subprocess and its entire process group, then wait for it."""
    if is_unix():
        try:
            os.killpg(process.pid, signal.SIGKILL)
        except (ProcessLookupError, PermissionError):
            pass
    else:
        try:
            process.kill()
        except ProcessLookupError:
            pass
    await process.wait()


async def run_script(
    script_path: str,
    arguments: Optional[Sequence[str]] = None,
    env: Optional[EnvOverrides] = None,
    *,
    settings: Optional[ExecutorSettings] = None,
) -> ExecutionResult:
    """Execute a script and capture its output.

    The interpreter is selected from the extension (.sh -> sh, .bat/.cmd ->
    cmd, .ps1 -> powershell); other files are executed directly. The script
    runs in the caller's current working directory.

    Args:
        script_path: Path to the script file (absolute or relative).
        arguments: Arguments passed to the script.
        env: Extra environment variables, as a mapping or "NAME=value"
            strings. These are added to (not replacing) the current
            environment.
        settings: Decoding settings. Defaults to ExecutorSettings().

    Returns:
        ExecutionResult with stdout, stderr and error. error is None when the
        script exits 0, even if it wrote to stderr; ExitStatusError for a
        non-zero exit; LaunchError if nothing could be started;
        StreamCaptureError if output could not be read or decoded.

    Raises:
        TypeError, ValueError: If env contains malformed entries.
    """
    if settings is None:
        settings = ExecutorSettings()

    script_path = str(script_path)
    arguments = [str(arg) for arg in arguments or ()]
    cmd = build_command(script_path, arguments)
    process_env = build_environment(env)

    if not Path(script_path).exists():
        logger.warning(f"Script not found: {script_path}", extra={"script_path": script_path})
        error = LaunchError(
            f"Script not found: {script_path}",
            EXIT_NOT_FOUND if is_unix() else EXIT_FAILURE,
            cmd,
        )
        return ExecutionResult(stdout="", stderr="", error=error)

    logger.debug(
        f"Launching script: {script_path}",
        extra={
            "script_path": script_path,
            "interpreter": resolve_interpreter(script_path),
            "command": cmd,
        }
    )

    # On Unix, start_new_session=True creates a new process group so the
    # whole group can be killed if the caller cancels
    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env=process_env,
            start_new_session=is_unix(),
        )
    except OSError as e:
        logger.warning(
            f"Failed to start {cmd[0]}: {e}",
            extra={"script_path": script_path, "command": cmd}
        )
        error = LaunchError(
            f"Failed to start {cmd[0]}: {e.strerror or e}",
            _launch_exit_code(e),
            cmd,
        )
        return ExecutionResult(stdout="", stderr="", error=error)

    try:
        # communicate() reads stdout and stderr concurrently until EOF
        stdout_bytes, stderr_bytes = await process.communicate()
    except OSError as e:
        await _kill_process_group(process)
        logger.warning(
            f"Failed to read output of {script_path}: {e}",
            extra={"script_path": script_path, "command": cmd}
        )
        error = StreamCaptureError(
            f"Failed to read output of {script_path}: {e}",
            _status_exit_code(process.returncode),
            cmd,
        )
        return ExecutionResult(stdout="", stderr="", error=error)
    except BaseException:
        # CancelledError, KeyboardInterrupt: don't leak the child
        await _kill_process_group(process)
        raise

    try:
        stdout = stdout_bytes.decode(settings.encoding, errors=settings.decode_errors)
        stderr = stderr_bytes.decode(settings.encoding, errors=settings.decode_errors)
    except UnicodeDecodeError as e:
        logger.warning(
            f"Failed to decode output of {script_path}: {e}",
            extra={"script_path": script_path, "encoding": settings.encoding}
        )
        error = StreamCaptureError(
            f"Failed to decode output of {script_path} as {settings.encoding}: {e}",
            _status_exit_code(process.returncode),
            cmd,
        )
        return ExecutionResult(stdout="", stderr="", error=error)

    returncode = process.returncode
    error = _exit_status_error(returncode, cmd) if returncode != 0 else None

    logger.info(
        f"Script {script_path} finished: "
        f"{'exit status 0' if error is None else error}",
        extra={
            "script_path": script_path,
            "exit_code": returncode,
            "stdout_bytes": len(stdout_bytes),
            "stderr_bytes": len(stderr_bytes),
        }
    )

    return ExecutionResult(stdout=stdout, stderr=stderr, error=error)


async def run_invocation(
    invocation: Invocation,
    *,
    settings: Optional[ExecutorSettings] = None,
) -> ExecutionResult:
    """Execute an Invocation. See run_script()."""
    return await run_script(
        invocation.script_path,
        invocation.arguments,
        invocation.environment,
        settings=settings,
    )


def run_script_sync(
    script_path: str,
    arguments: Optional[Sequence[str]] = None,
    env: Optional[EnvOverrides] = None,
    *,
    settings: Optional[ExecutorSettings] = None,
) -> ExecutionResult:
    """Blocking wrapper around run_script().

    Raises:
        RuntimeError: If called while an event loop is running in this thread.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(
            run_script(script_path, arguments, env, settings=settings)
        )
    raise RuntimeError(
        "run_script_sync() cannot be called from a running event loop; "
        "await run_script() instead"
    )
