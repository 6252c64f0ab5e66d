"""Environment construction for script processes."""

import os
from typing import Iterable, Mapping, Optional, Union

from runbook.interpreters import is_windows

EnvOverrides = Union[Mapping[str, str], Iterable[str]]


def parse_env_assignment(entry: str) -> tuple[str, str]:
    """Split a "NAME=value" string into its name and value.

    The value is everything after the first "=", so it may be empty or
    contain further "=" characters.

    Raises:
        TypeError: If entry is not a string.
        ValueError: If entry has no "=", the name is empty, or either part
            contains a NUL character.
    """
    if not isinstance(entry, str):
        raise TypeError(
            f"Environment entry must be a string, got {type(entry).__name__}"
        )
    name, sep, value = entry.partition("=")
    if not sep:
        raise ValueError(f"Environment entry must be NAME=value, got {entry!r}")
    if not name:
        raise ValueError(f"Environment entry has an empty name: {entry!r}")
    return _checked(name, value)


def _checked(name: str, value: str) -> tuple[str, str]:
    if not name:
        raise ValueError("Environment variable name must not be empty")
    if "=" in name:
        raise ValueError(f"Environment variable name must not contain '=': {name!r}")
    if "\0" in name or "\0" in value:
        raise ValueError(f"Environment variable {name!r} contains a NUL character")
    return name, value


def _iter_overrides(overrides: EnvOverrides):
    if isinstance(overrides, Mapping):
        for name, value in overrides.items():
            if not isinstance(name, str) or not isinstance(value, str):
                raise TypeError(
                    f"Environment names and values must be strings, got "
                    f"{type(name).__name__}={type(value).__name__}"
                )
            yield _checked(name, value)
    elif isinstance(overrides, str):
        # A bare string would otherwise be iterated character by character
        yield parse_env_assignment(overrides)
    else:
        for entry in overrides:
            yield parse_env_assignment(entry)


def build_environment(
    overrides: Optional[EnvOverrides] = None,
    base: Optional[Mapping[str, str]] = None,
) -> dict[str, str]:
    """Build the environment for a child process.

    Starts from a copy of the parent environment and sets each override on
    top of it; overrides win on conflict and every other variable is
    inherited unchanged.

    Args:
        overrides: Extra variables, either a mapping or an iterable of
            "NAME=value" strings. None or empty inherits the parent verbatim.
        base: Environment to start from. Defaults to os.environ.

    Returns:
        A new dictionary; neither base nor os.environ is modified.

    Example:
        env = build_environment({"DEPLOY_TARGET": "staging"})
        env = build_environment(["DEPLOY_TARGET=staging", "DRY_RUN=1"])
    """
    process_env = dict(os.environ if base is None else base)
    if not overrides:
        return process_env

    if is_windows():
        # Windows variable names are case-insensitive; replace rather than duplicate
        existing = {name.upper(): name for name in process_env}
        for name, value in _iter_overrides(overrides):
            previous = existing.get(name.upper())
            if previous is not None and previous != name:
                del process_env[previous]
            process_env[name] = value
            existing[name.upper()] = name
    else:
        for name, value in _iter_overrides(overrides):
            process_env[name] = value

    return process_env
