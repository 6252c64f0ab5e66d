# Tests require the package to be installed: `pip install -e .[test]`
#
# Script tests spawn real shells. Unix tests run .sh files under sh and
# Windows tests run .bat files under cmd; each is skipped on the other platform.

import pytest

from runbook.interpreters import is_windows


def pytest_configure(config):
    """Register markers for platform-specific tests."""
    config.addinivalue_line("markers", "unix: run only on Unix (needs sh)")
    config.addinivalue_line("markers", "windows: run only on Windows (needs cmd)")


def pytest_collection_modifyitems(config, items):
    """Skip platform-specific tests on the other platform."""
    on_windows = is_windows()
    skip_unix = pytest.mark.skip(reason="Unix-only test")
    skip_windows = pytest.mark.skip(reason="Windows-only test")

    for item in items:
        if "unix" in item.keywords and on_windows:
            item.add_marker(skip_unix)
        if "windows" in item.keywords and not on_windows:
            item.add_marker(skip_windows)
