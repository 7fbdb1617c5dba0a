import json
import logging
from pathlib import Path

import pytest

from solanize.core.logs import JsonFormatter, LogBuffer, configure_logging


def test_log_buffer_redacts_base58() -> None:
    buffer = LogBuffer()
    entry = buffer.record("wallet", "Secret address VkgXGe7czUXXcWzeWgt6H9VxLJhqioU5AnqRC1Ry2GK")
    assert "VkgX…y2GK" in entry.message
    assert "VkgXGe7czUXXcWzeWgt6H9VxLJhqioU5AnqRC1Ry2GK" not in entry.message


def test_log_buffer_keeps_text_when_redaction_disabled() -> None:
    buffer = LogBuffer(redaction_enabled=False)
    entry = buffer.record("wallet", "VkgXGe7czUXXcWzeWgt6H9VxLJhqioU5AnqRC1Ry2GK")
    assert entry.message == "VkgXGe7czUXXcWzeWgt6H9VxLJhqioU5AnqRC1Ry2GK"


def test_log_buffer_recent_filters_and_limits() -> None:
    buffer = LogBuffer(max_entries=5)
    buffer.record("wallet", "w1")
    buffer.record("swap", "s1")
    buffer.record("wallet", "w2")
    buffer.record("token", "t1")
    recent_wallet = buffer.recent(category="wallet", limit=5)
    assert [entry.message for entry in recent_wallet] == ["w1", "w2"]
    assert [entry.message for entry in buffer.recent(limit=2)] == ["w2", "t1"]
    latest = buffer.latest()
    assert latest is not None and latest.message == "t1"


def test_log_buffer_drops_oldest_entries() -> None:
    buffer = LogBuffer(max_entries=2)
    for index in range(3):
        buffer.record("transfer", f"m{index}")
    assert [entry.message for entry in buffer.recent()] == ["m1", "m2"]


def test_log_buffer_normalizes_invalid_inputs() -> None:
    buffer = LogBuffer()
    entry = buffer.record("custom", "message", severity="verbose")
    assert entry.category == "system"
    assert entry.severity == "info"


def test_json_formatter_emits_one_object_per_record() -> None:
    record = logging.LogRecord("solanize.test", logging.WARNING, __file__, 1, "hello %s", ("world",), None)
    payload = json.loads(JsonFormatter().format(record))
    assert payload["level"] == "warning"
    assert payload["logger"] == "solanize.test"
    assert payload["message"] == "hello world"


@pytest.fixture
def clean_root_logger():
    root = logging.getLogger()
    httpx_logger = logging.getLogger("httpx")
    saved_level, saved_httpx_level = root.level, httpx_logger.level
    yield root
    for handler in list(root.handlers):
        if isinstance(handler, logging.FileHandler) or type(handler) is logging.StreamHandler:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(saved_level)
    httpx_logger.setLevel(saved_httpx_level)


def test_configure_logging_verbose_forces_debug(clean_root_logger: logging.Logger) -> None:
    configure_logging("warning", "compact", verbose=True)
    assert clean_root_logger.level == logging.DEBUG
    assert logging.getLogger("httpx").level == logging.WARNING


def test_configure_logging_writes_file(clean_root_logger: logging.Logger, tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "solanize.log"
    configure_logging("info", "json", log_file=log_file)

    logging.getLogger("solanize.test").info("written to file")
    for handler in clean_root_logger.handlers:
        handler.flush()

    lines = log_file.read_text().splitlines()
    assert json.loads(lines[-1])["message"] == "written to file"
