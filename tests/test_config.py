# --------------------------------------------------
# test_config.py
# --------------------------------------------------
# Purpose:
#   Validate level parsing and the logging lifecycle:
#       • unknown level names abort setup
#       • per-source overrides applied
#       • logging_scope flushes + closes sinks on exit
# --------------------------------------------------

import json
import logging

import pytest

from apilog.config import SimpleSettings, parse_overrides
from apilog.log_settings import TRACE, level_name, to_log_level
from apilog.logging_utils import logging_scope, setup_logging


def make_settings(tmp_path, **overrides):
    class TestSettings(SimpleSettings):
        LOG_LEVEL = "Information"
        LOG_LEVEL_OVERRIDES = "uvicorn=Warning"
        LOG_FILE_PATH = str(tmp_path)
        LOG_FILE_NAME = "api.log"

    for key, value in overrides.items():
        setattr(TestSettings, key, value)
    return TestSettings()


def test_level_names():
    assert to_log_level("Verbose") == TRACE
    assert to_log_level("Information") == logging.INFO
    assert to_log_level("Fatal") == logging.CRITICAL
    assert level_name(logging.INFO) == "Information"
    assert level_name(logging.INFO + 5) == "Information"
    assert level_name(1) == "Verbose"


def test_unknown_level_is_an_error():
    with pytest.raises(ValueError, match="Not exist level: Loud"):
        to_log_level("Loud")


def test_parse_overrides():
    assert parse_overrides("uvicorn=Warning, fastapi=Error") == {
        "uvicorn": logging.WARNING,
        "fastapi": logging.ERROR,
    }
    assert parse_overrides("") == {}
    with pytest.raises(ValueError):
        parse_overrides("uvicorn")
    with pytest.raises(ValueError):
        parse_overrides("uvicorn=Chatty")


def test_setup_rejects_bad_level(tmp_path, restore_root):
    with pytest.raises(ValueError):
        setup_logging(make_settings(tmp_path, LOG_LEVEL="info"))


def test_setup_applies_levels(tmp_path, restore_root):
    handlers = setup_logging(make_settings(tmp_path))
    try:
        assert logging.getLogger().level == logging.INFO
        assert logging.getLogger("uvicorn").level == logging.WARNING
        assert len(handlers) == 2
    finally:
        for handler in handlers:
            handler.close()


def test_scope_writes_file_and_closes(tmp_path, restore_root):
    with logging_scope(make_settings(tmp_path)) as logger:
        installed = logging.getLogger().handlers[:]
        logger.info("hello %s", "file")

    assert not any(h in logging.getLogger().handlers for h in installed)

    content = (tmp_path / "api.log").read_text(encoding="utf-8")
    assert content.endswith("}\n")
    data = json.loads(content)
    assert data["Level"] == "Information"
    assert data["SourceContext"] == "apilog"
    assert data["Message"] == 'From "apilog": [[MessageTemplate,"hello %s"],[0,"file"],[SourceContext,"apilog"]]'


def test_scope_logger_keeps_exceptions(tmp_path, restore_root):
    with logging_scope(make_settings(tmp_path)) as logger:
        try:
            raise RuntimeError("kaboom")
        except RuntimeError:
            logger.exception("import failed for %s", "orders.csv")

    data = json.loads((tmp_path / "api.log").read_text(encoding="utf-8"))
    assert data["Level"] == "Error"
    assert "import failed for %s" in data["Message"]
    assert "orders.csv" in data["Message"]
    assert "[Exception,\"Traceback" in data["Message"]
    assert "RuntimeError: kaboom" in data["Message"]


def test_scope_closes_on_error(tmp_path, restore_root):
    with pytest.raises(RuntimeError):
        with logging_scope(make_settings(tmp_path, LOG_FILE_PATH="")):
            installed = logging.getLogger().handlers[:]
            raise RuntimeError("startup failed")

    assert not any(h in logging.getLogger().handlers for h in installed)
