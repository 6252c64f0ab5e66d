"""Tests for logging setup and executor log records."""

import logging

import pytest

from runbook.executor import run_script
from runbook.log import setup_logging


@pytest.fixture
def restore_root_logger():
    root_logger = logging.getLogger()
    handlers = list(root_logger.handlers)
    level = root_logger.level
    yield root_logger
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)


class TestSetupLogging:
    """Tests for setup_logging()."""

    def test_default_adds_no_console_handler(self, restore_root_logger):
        restore_root_logger.addHandler(logging.NullHandler())

        setup_logging()

        assert restore_root_logger.handlers == []
        assert restore_root_logger.level == logging.DEBUG

    def test_verbose_logs_to_stderr(self, restore_root_logger, capsys):
        setup_logging(verbose=True)

        logging.getLogger("runbook.test").debug("hello from debug")

        assert len(restore_root_logger.handlers) == 1
        assert "[DEBUG] runbook.test: hello from debug" in capsys.readouterr().err


class TestExecutorLogging:
    """Tests for log records emitted by run_script()."""

    @pytest.mark.unix
    async def test_logs_launch_and_completion(self, tmp_path, caplog):
        script_file = tmp_path / "log.sh"
        script_file.write_text("echo hi\nexit 1\n")
        caplog.set_level(logging.DEBUG, logger="runbook.executor")

        await run_script(str(script_file))

        records = [r for r in caplog.records if r.name == "runbook.executor"]
        launch = [r for r in records if r.levelno == logging.DEBUG]
        finish = [r for r in records if r.levelno == logging.INFO]
        assert launch[0].command == ["sh", str(script_file)]
        assert finish[0].exit_code == 1
        assert finish[0].stdout_bytes == 3
        assert "exit status 1" in finish[0].getMessage()

    async def test_logs_missing_script_as_warning(self, tmp_path, caplog):
        caplog.set_level(logging.DEBUG, logger="runbook.executor")

        await run_script(str(tmp_path / "missing.sh"))

        assert any(
            r.levelno == logging.WARNING and "Script not found" in r.getMessage()
            for r in caplog.records
        )
