"""Run scripts as child processes and capture their output.

    from runbook import run_script

    stdout, stderr, error = await run_script("deploy.sh", ["staging"], {"DRY_RUN": "1"})
"""

from runbook.config import ExecutorSettings, load_config, load_settings
from runbook.environment import build_environment
from runbook.errors import (
    ConfigError,
    ExecutionError,
    ExitStatusError,
    LaunchError,
    RunbookError,
    StreamCaptureError,
)
from runbook.executor import (
    ExecutionResult,
    Invocation,
    run_invocation,
    run_script,
    run_script_sync,
)
from runbook.interpreters import (
    INTERPRETERS,
    build_command,
    is_unix,
    is_windows,
    resolve_interpreter,
)
from runbook.log import setup_logging

__all__ = [
    'INTERPRETERS',
    'ConfigError',
    'ExecutionError',
    'ExecutionResult',
    'ExecutorSettings',
    'ExitStatusError',
    'Invocation',
    'LaunchError',
    'RunbookError',
    'StreamCaptureError',
    'build_command',
    'build_environment',
    'is_unix',
    'is_windows',
    'load_config',
    'load_settings',
    'resolve_interpreter',
    'run_invocation',
    'run_script',
    'run_script_sync',
    'setup_logging',
]
