"""Configuration file management for runbook.

Decoding settings can be kept per project in `.runbook/config.toml`. The file
is discovered by searching upward from the current working directory; the
search stops at the directory holding `.git` (the project boundary).

    [runbook]
    encoding = "utf-8"
    decode_errors = "replace"
"""

import codecs
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

# Check Python version for tomllib support (Python 3.11+)
if sys.version_info < (3, 11):
    raise RuntimeError(
        "runbook requires Python 3.11 or greater for tomllib support. "
        f"Current version: {sys.version_info.major}.{sys.version_info.minor}"
    )

import tomllib  # Python 3.11+ standard library

from runbook.errors import ConfigError

CONFIG_DIR = ".runbook"
CONFIG_FILE = "config.toml"

DECODE_ERROR_HANDLERS = (
    "strict", "replace", "backslashreplace", "surrogateescape", "ignore"
)


@dataclass(frozen=True)
class ExecutorSettings:
    """Settings applied when decoding captured output.

    Attributes:
        encoding: Codec used to decode captured stdout and stderr.
        decode_errors: Error handler passed to bytes.decode().
    """
    encoding: str = "utf-8"
    decode_errors: str = "replace"


def find_config_file(cwd: Path) -> Optional[Path]:
    """Find .runbook/config.toml by searching upward from cwd.

    Args:
        cwd: Directory to start the search from

    Returns:
        Path to the config file, or None if no project directory up to and
        including the .git boundary has one
    """
    start = Path(cwd).resolve()
    for directory in (start, *start.parents):
        config_file = directory / CONFIG_DIR / CONFIG_FILE
        if config_file.is_file():
            return config_file
        if (directory / ".git").exists():
            break
    return None


def validate_config(config: Dict[str, Any], config_file: Path) -> Dict[str, Any]:
    """Validate configuration values and filter out unknown keys.

    Args:
        config: Dictionary of configuration values
        config_file: Path to config file (for error messages)

    Returns:
        Validated config dictionary with only known keys

    Raises:
        ConfigError: If any validation fails
    """
    # Unknown keys are ignored for forward compatibility
    validated_config = {
        k: v for k, v in config.items() if k in ("encoding", "decode_errors")
    }

    for key, value in validated_config.items():
        if not isinstance(value, str):
            raise ConfigError(
                f"Invalid value for '{key}' in {config_file}: "
                f"expected string, got {type(value).__name__}"
            )

    if "encoding" in validated_config:
        try:
            codecs.lookup(validated_config["encoding"])
        except LookupError as e:
            raise ConfigError(
                f"Invalid value for 'encoding' in {config_file}: "
                f"unknown codec '{validated_config['encoding']}'"
            ) from e

    if validated_config.get("decode_errors", "replace") not in DECODE_ERROR_HANDLERS:
        raise ConfigError(
            f"Invalid value for 'decode_errors' in {config_file}: "
            f"must be one of {', '.join(DECODE_ERROR_HANDLERS)}, "
            f"got '{validated_config['decode_errors']}'"
        )

    return validated_config


def load_config(cwd: Optional[Path] = None) -> Dict[str, Any]:
    """Load the [runbook] table from .runbook/config.toml.

    A missing file is not an error, but a file that exists must be valid.

    Args:
        cwd: Directory to start the search from. If None, uses Path.cwd()

    Returns:
        Dictionary with configuration values, or empty dict if there is no config file

    Raises:
        ConfigError: If the config file contains invalid TOML or values, or cannot be read
    """
    if cwd is None:
        cwd = Path.cwd()

    config_file = find_config_file(cwd)
    if config_file is None:
        return {}

    try:
        with open(config_file, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(
            f"Failed to parse {config_file}: Invalid TOML syntax - {e}"
        ) from e
    except OSError as e:
        raise ConfigError(
            f"Failed to read {config_file}: {e}"
        ) from e

    config = data.get("runbook", {})
    if not isinstance(config, dict):
        raise ConfigError(
            f"Invalid [runbook] section in {config_file}: expected a table"
        )
    return validate_config(config, config_file)


def load_settings(cwd: Optional[Path] = None) -> ExecutorSettings:
    """Build ExecutorSettings from the project config file, or defaults.

    Pass the result to run_script(settings=...).
    """
    return ExecutorSettings(**load_config(cwd))
