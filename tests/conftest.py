# --------------------------------------------------
# conftest.py (Test bootstrap)
# --------------------------------------------------
# Responsibilities:
#   - Disable the file sink before apilog.config is imported
#   - Provide a `captured` fixture collecting the records
#     written through the application logger
#   - Provide helpers to mint bearer tokens and requests
# --------------------------------------------------

import logging
import os

import jwt
import pytest
from starlette.requests import Request

# --------------------------------------------------
# Test Environment Defaults
# --------------------------------------------------
os.environ.setdefault("LOG_FILE_PATH", "")
os.environ.setdefault("LOG_LEVEL", "Verbose")

from apilog.log_format import LogFormat  # noqa: E402
from apilog.log_settings import APP_LOGGER_NAME, TRACE  # noqa: E402


class ListHandler(logging.Handler):
    """Keeps records in memory; `lines` renders them with LogFormat."""

    def __init__(self):
        super().__init__(level=TRACE)
        self.records = []
        self.setFormatter(LogFormat())

    def emit(self, record):
        self.records.append(record)

    @property
    def lines(self):
        return [self.format(r) for r in self.records]


@pytest.fixture
def captured():
    logger = logging.getLogger(APP_LOGGER_NAME)
    handler = ListHandler()
    previous = logger.level
    logger.addHandler(handler)
    logger.setLevel(TRACE)
    try:
        yield handler
    finally:
        logger.removeHandler(handler)
        logger.setLevel(previous)


def make_token(**claims) -> str:
    return jwt.encode(claims, "test-secret", algorithm="HS256")


def make_request(path="/items", query=b"", method="GET", authorization=None) -> Request:
    headers = []
    if authorization is not None:
        headers.append((b"authorization", authorization.encode()))
    return Request({
        "type": "http",
        "method": method,
        "path": path,
        "query_string": query,
        "headers": headers,
    })


@pytest.fixture
def restore_root():
    """Put back the root handlers/level replaced by setup_logging()."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers = handlers
    root.setLevel(level)
