"""Interpreter selection and platform-specific command construction.

Scripts are dispatched on their file extension: .sh runs under sh, .bat and
.cmd under cmd, .ps1 under powershell. Anything else is executed directly and
must be runnable on its own (an executable file with a shebang on Unix, a
recognized executable type on Windows).
"""

import os
import sys
from pathlib import PurePath
from types import MappingProxyType
from typing import Mapping, Optional, Sequence


# Extension (lowercase, leading dot) -> interpreter command. Read-only.
INTERPRETERS: Mapping[str, str] = MappingProxyType({
    ".bat": "cmd",
    ".cmd": "cmd",
    ".ps1": "powershell",
    ".sh": "sh",
})


def is_windows() -> bool:
    """Check if running on Windows."""
    return sys.platform.startswith('win')


def is_unix() -> bool:
    """Check if running on Unix (Linux, macOS, etc.)."""
    return not is_windows()


def resolve_interpreter(script_path: str) -> str:
    """Return the interpreter command for a script, or "" for direct execution.

    Only the extension of the final path component is consulted, compared
    case-insensitively, so "deploy.SH" and "deploy.sh" resolve the same way.

    Args:
        script_path: Path to the script file. The file is not accessed.

    Returns:
        Interpreter command name, or an empty string if the extension is
        unknown or missing.
    """
    extension = PurePath(script_path).suffix.lower()
    return INTERPRETERS.get(extension, "")


def build_command(
    script_path: str,
    arguments: Sequence[str] = (),
    *,
    interpreter: Optional[str] = None,
    windows: Optional[bool] = None,
) -> list[str]:
    """Build the argv list used to launch a script.

    Args:
        script_path: Path to the script file.
        arguments: Arguments passed to the script after its path.
        interpreter: Interpreter command. Defaults to resolve_interpreter().
        windows: Build for Windows conventions. Defaults to the current host.

    Returns:
        The full command line as a list of strings.
    """
    if interpreter is None:
        interpreter = resolve_interpreter(script_path)
    if windows is None:
        windows = is_windows()

    script_path = str(script_path)
    arguments = [str(arg) for arg in arguments]

    if not interpreter:
        if not os.path.dirname(script_path):
            # exec would search PATH for a bare name; run the local file
            script_path = os.path.join(os.curdir, script_path)
        return [script_path, *arguments]

    if interpreter == "cmd":
        # Without /c, cmd treats its argument as an interactive session
        return ["cmd", "/c", script_path, *arguments]

    if interpreter == "powershell":
        cmd = ["powershell", "-NoProfile", "-NonInteractive"]
        if windows:
            # Script execution is blocked by the default policy on Windows
            cmd += ["-ExecutionPolicy", "Bypass"]
        return [*cmd, "-File", script_path, *arguments]

    return [interpreter, script_path, *arguments]
