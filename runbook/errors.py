"""Exception classes for script execution.

RunbookError is the base for everything this package raises. ExecutionError
and its subclasses describe why a script run did not succeed; the runner
returns them inside ExecutionResult.error rather than raising them, so callers
always get stdout, stderr and error back together. ExecutionResult.check()
raises the carried error for callers that prefer exceptions.
"""

from typing import Optional, Sequence


class RunbookError(Exception):
    """Base exception for runbook errors."""
    pass


class ConfigError(RunbookError):
    """Raised when configuration file operations fail."""
    pass


class ExecutionError(RunbookError):
    """Base class for failures carried in an ExecutionResult.

    Attributes:
        exit_code: Exit status reported for the failed run.
        command: The command line that was (or would have been) launched.
    """

    def __init__(self, message: str, exit_code: int, command: Optional[Sequence[str]] = None):
        self.exit_code = exit_code
        self.command = list(command) if command is not None else []
        super().__init__(message)


class LaunchError(ExecutionError):
    """Raised when the interpreter or executable cannot be started.

    No child process ran, so the captured streams are empty.
    """
    pass


class ExitStatusError(ExecutionError):
    """Raised when the script ran to completion with a non-zero status.

    The message is exactly "exit status <N>", or "signal: <NAME>" when a POSIX
    child was killed by a signal.
    """

    def __init__(self, exit_code: int, command: Optional[Sequence[str]] = None,
                 signal_name: Optional[str] = None):
        self.signal_name = signal_name
        if signal_name is not None:
            message = f"signal: {signal_name}"
        else:
            message = f"exit status {exit_code}"
        super().__init__(message, exit_code, command)


class StreamCaptureError(ExecutionError):
    """Raised when reading or decoding a child's output fails.

    Fatal for the run; nothing partial is returned.
    """
    pass


__all__ = [
    'RunbookError',
    'ConfigError',
    'ExecutionError',
    'LaunchError',
    'ExitStatusError',
    'StreamCaptureError',
]
