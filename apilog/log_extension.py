# --------------------------------------------------
# log_extension.py
# --------------------------------------------------
# Logging call-sites for application code.
#
# Every helper writes one event whose properties are
# keyed by LOG_PROPERTY_NAMES, so all application logs
# share the same shape:
#
#   api_trace / api_debug / api_information /
#   api_warning / api_error / api_critical / api_none
#       → request-scoped logs (trace id, url, method,
#         status code, user from the bearer token)
#   system_write
#       → logs with no request attached
#   api_write
#       → raw pass-through at any level (incl. Fatal)
#
# The caller's file and line are captured automatically.
# When no request is passed, the request published by
# the middleware for the current context is used.
# --------------------------------------------------

import logging
import sys
from contextvars import ContextVar, Token
from typing import Dict, Optional, Tuple

from opentelemetry import trace
from starlette.requests import Request

from .claims import get_sub_in_token
from .log_settings import LOG_PROPERTY_NAMES, NONE, SOURCE_CONTEXT, TRACE


# One quoted line per field, so plain formatters still
# print something shaped like the JSON record.
MESSAGE_TEMPLATE = "".join(f'\t"{name}": "%({name})s",\n' for name in LOG_PROPERTY_NAMES)


# --------------------------------------------------
# Current request (set by the request middleware)
# --------------------------------------------------

current_request: ContextVar[Optional[Request]] = ContextVar("current_request", default=None)


def set_current_request(request: Optional[Request]) -> Token:
    return current_request.set(request)


def reset_current_request(token: Token) -> None:
    current_request.reset(token)


# --------------------------------------------------
# Ambient context helpers
# --------------------------------------------------

def _caller_location(depth: int) -> Tuple[str, int]:
    frame = sys._getframe(depth)
    return frame.f_code.co_filename, frame.f_lineno


def active_trace_id() -> str:
    """W3C traceparent of the active OpenTelemetry span, or "" without one."""
    span_context = trace.get_current_span().get_span_context()
    if not span_context.is_valid:
        return ""
    return "00-{:032x}-{:016x}-{:02x}".format(
        span_context.trace_id,
        span_context.span_id,
        int(span_context.trace_flags),
    )


def resolve_trace_id(request: Optional[Request]) -> str:
    trace_id = active_trace_id()
    if trace_id:
        return trace_id
    if request is None:
        return ""
    return getattr(request.state, "trace_identifier", "") or ""


def request_url(request: Request) -> str:
    """Path plus query string, e.g. /items?page=2"""
    query = request.url.query
    return request.url.path + (f"?{query}" if query else "")


# --------------------------------------------------
# Writers
# --------------------------------------------------

def _write_log(
    logger: logging.Logger,
    level: int,
    trace_id: str,
    message: str,
    url: str,
    http_method: str,
    status_code: Optional[int],
    request_body: str,
    source_path: str,
    source_line: int,
    user: str,
    stacklevel: int = 4,
) -> None:
    properties: Dict[str, str] = {
        "TraceId": trace_id or "",
        "SourcePath": source_path or "",
        "SourceLine": str(source_line),
        "HttpUrl": url or "",
        "HttpMethod": http_method or "",
        "StatusCode": "" if status_code is None else str(status_code),
        "User": user or "",
        "Message": message or "",
        "RequestBody": request_body or "",
        "SourceContext": SOURCE_CONTEXT,
    }
    # stacklevel points the record's own pathname/lineno at the caller
    logger.log(level, MESSAGE_TEMPLATE, properties, stacklevel=stacklevel)


def _api_log(
    level: int,
    logger: logging.Logger,
    message: str,
    request: Optional[Request],
    status_code: Optional[int],
    request_body: str,
) -> None:
    if level >= NONE:
        return

    source_path, source_line = _caller_location(3)

    if request is None:
        request = current_request.get()

    if request is None:
        _write_log(logger, level, resolve_trace_id(None), message, "", "",
                   status_code, request_body, source_path, source_line, "")
        return

    _write_log(
        logger,
        level,
        resolve_trace_id(request),
        message,
        request_url(request),
        request.method,
        status_code,
        request_body,
        source_path,
        source_line,
        get_sub_in_token(request),
    )


def api_trace(logger, message, request=None, status_code=None, request_body=""):
    _api_log(TRACE, logger, message, request, status_code, request_body)


def api_debug(logger, message, request=None, status_code=None, request_body=""):
    _api_log(logging.DEBUG, logger, message, request, status_code, request_body)


def api_information(logger, message, request=None, status_code=None, request_body=""):
    _api_log(logging.INFO, logger, message, request, status_code, request_body)


def api_warning(logger, message, request=None, status_code=None, request_body=""):
    _api_log(logging.WARNING, logger, message, request, status_code, request_body)


def api_error(logger, message, request=None, status_code=None, request_body=""):
    _api_log(logging.ERROR, logger, message, request, status_code, request_body)


def api_critical(logger, message, request=None, status_code=None, request_body=""):
    _api_log(logging.CRITICAL, logger, message, request, status_code, request_body)


def api_none(logger, message, request=None, status_code=None, request_body=""):
    """Disabled level: accepted for symmetry, never written."""
    _api_log(NONE, logger, message, request, status_code, request_body)


def system_write(
    logger: logging.Logger,
    level: int,
    message: str,
    status_code: Optional[int] = None,
    request_body: str = "",
) -> None:
    """Log outside of any request (startup, background work)."""
    if level >= NONE:
        return
    source_path, source_line = _caller_location(2)
    _write_log(logger, level, "", message, "", "", status_code, request_body,
               source_path, source_line, "", stacklevel=3)


def api_write(
    logger: logging.Logger,
    level: int,
    message: str,
    request: Optional[Request] = None,
) -> None:
    """
    Raw pass-through at any level.

    Only the url and method of `request` are recorded; trace id
    and user are left empty.
    """
    source_path, source_line = _caller_location(2)
    url = request_url(request) if request is not None else ""
    method = request.method if request is not None else ""
    _write_log(logger, level, "", message, url, method, None, "",
               source_path, source_line, "", stacklevel=3)
