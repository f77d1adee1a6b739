"""Tests for SectionConfig, exceptions and logging helpers."""

from __future__ import annotations

import json
import logging
import tempfile
from pathlib import Path

import pytest

from critical_section.core.config import SectionConfig
from critical_section.core.constants import LOGGER_NAME
from critical_section.core.exceptions import (
    CriticalSectionError,
    SlotFileError,
    SlotOutOfRangeError,
    WaitTimeoutError,
)
from critical_section.core.logging import ContextLoggerAdapter, JSONFormatter, setup_logging, with_log_context


class TestSectionConfig:
    def test_defaults(self) -> None:
        config = SectionConfig()

        assert config.lock_dir == Path(tempfile.gettempdir())
        assert config.poll_interval == 0.1
        assert config.backend == "auto"
        assert config.max_process == 1

    def test_from_env_reads_overrides(self, tmp_path: Path) -> None:
        config = SectionConfig.from_env(
            {
                "CRITICAL_SECTION_LOCK_DIR": str(tmp_path),
                "CRITICAL_SECTION_POLL_INTERVAL": "0.25",
                "CRITICAL_SECTION_LOCK_BACKEND": " FCNTL ",
            }
        )

        assert config.lock_dir == tmp_path
        assert config.poll_interval == 0.25
        assert config.backend == "fcntl"

    @pytest.mark.parametrize("value", ["fast", "0", "-1", "nan", "inf"])
    def test_from_env_ignores_invalid_poll_interval(self, value: str, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING):
            config = SectionConfig.from_env({"CRITICAL_SECTION_POLL_INTERVAL": value})

        assert config.poll_interval == 0.1
        assert "Ignoring invalid CRITICAL_SECTION_POLL_INTERVAL" in caplog.text

    def test_from_env_blank_values_keep_defaults(self) -> None:
        config = SectionConfig.from_env({"CRITICAL_SECTION_LOCK_DIR": "  ", "CRITICAL_SECTION_LOCK_BACKEND": ""})

        assert config == SectionConfig()

    def test_to_dict(self, tmp_path: Path) -> None:
        config = SectionConfig(lock_dir=tmp_path, poll_interval=0.5, backend="fcntl", max_process=3)

        assert config.to_dict() == {
            "lock_dir": str(tmp_path),
            "poll_interval": 0.5,
            "backend": "fcntl",
            "max_process": 3,
        }


class TestExceptions:
    def test_base_error_formats_details(self) -> None:
        assert str(CriticalSectionError("Something failed")) == "Something failed"
        assert str(CriticalSectionError("Something failed", "because")) == "Something failed: because"

    def test_slot_file_error_keeps_context(self) -> None:
        cause = PermissionError(13, "Permission denied")
        error = SlotFileError("Semaphore cannot be created", slot_path="/tmp/x-0", original_error=cause)

        assert error.slot_path == "/tmp/x-0"
        assert error.original_error is cause
        assert isinstance(error, CriticalSectionError)

    def test_out_of_range_is_index_error(self) -> None:
        error = SlotOutOfRangeError(3, 2)

        assert isinstance(error, IndexError)
        assert str(error) == "Slot number out of range: slot 3 not in 0..1"

    def test_wait_timeout_is_timeout_error(self) -> None:
        error = WaitTimeoutError(1.5, attempts=16, section="abc")

        assert isinstance(error, TimeoutError)
        assert str(error) == "Exceeded the maximum waiting time: timeout 1.5s, 16 attempts, section abc"


class TestLogging:
    def test_setup_logging_configures_package_logger(self) -> None:
        logger = setup_logging("debug")

        assert logger.name == LOGGER_NAME
        assert logger.level == logging.DEBUG
        stream_handlers = [h for h in logger.handlers if not isinstance(h, logging.NullHandler)]
        assert len(stream_handlers) == 1

        setup_logging("WARNING")
        stream_handlers = [h for h in logger.handlers if not isinstance(h, logging.NullHandler)]
        assert len(stream_handlers) == 1
        assert logger.level == logging.WARNING

    def test_setup_logging_reads_env_and_rejects_invalid_level(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        assert setup_logging().level == logging.ERROR

        logger = setup_logging("LOUD")
        assert logger.level == logging.INFO
        assert "Invalid log level 'LOUD'" in capsys.readouterr().err

    def test_setup_logging_json_format(self) -> None:
        logger = setup_logging("INFO", log_format="json")
        handler = next(h for h in logger.handlers if not isinstance(h, logging.NullHandler))

        assert isinstance(handler.formatter, JSONFormatter)

    def test_json_formatter_includes_context_fields(self) -> None:
        record = logging.LogRecord(
            name="critical_section.core.locks.section",
            level=logging.DEBUG,
            pathname=__file__,
            lineno=10,
            msg="Slot %d acquired",
            args=(0,),
            exc_info=None,
        )
        record.section = "abc123"

        payload = json.loads(JSONFormatter().format(record))

        assert payload["message"] == "Slot 0 acquired"
        assert payload["level"] == "DEBUG"
        assert payload["section"] == "abc123"
        assert isinstance(payload["process"], int)

    def test_json_formatter_survives_bad_placeholders(self) -> None:
        record = logging.makeLogRecord({"msg": "Slot %d %s", "args": ("x",)})

        payload = json.loads(JSONFormatter().format(record))

        assert payload["message"].endswith("[log-message-format-error]")

    def test_with_log_context_merges_fields(self, caplog: pytest.LogCaptureFixture) -> None:
        base = logging.getLogger("critical_section.tests")
        adapter = with_log_context(with_log_context(base, section="abc"), slot=1, ignored=None)

        assert isinstance(adapter, ContextLoggerAdapter)
        assert adapter.extra == {"section": "abc", "slot": 1}

        with caplog.at_level(logging.INFO, logger="critical_section.tests"):
            adapter.info("hello", extra={"slot": 2})

        assert caplog.records[-1].section == "abc"
        assert caplog.records[-1].slot == 2
