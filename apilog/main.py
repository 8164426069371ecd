# --------------------------------------------------
# main.py
# --------------------------------------------------
# Demo FastAPI service wired with the logging extensions:
#
# ✔ Every request logged as one schema-shaped JSON record
# ✔ Per-request trace identifier + current request context
# ✔ /whoami: identity from the bearer token (best effort)
# ✔ /echo: request body captured in the RequestBody field
# ✔ Liveness probe
#
# Notes:
#   - Logging is configured by run() inside logging_scope(),
#     which flushes and closes the sinks on every exit path
#   - uvicorn runs with log_config=None so its own records
#     reach the same sinks (folded into "Message")
# --------------------------------------------------

import logging
from uuid import uuid4

import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError
from starlette.middleware.base import BaseHTTPMiddleware

from .claims import get_company_in_token, get_sub_in_token
from .config import settings
from .log_extension import (
    api_error,
    api_information,
    api_warning,
    api_write,
    reset_current_request,
    set_current_request,
    system_write,
)
from .log_settings import APP_LOGGER_NAME
from .logging_utils import logging_scope
from .schemas import EchoMessage, Identity


# --------------------------------------------------
# FastAPI Initialization
# --------------------------------------------------

app = FastAPI()
app.state.logger = logging.getLogger(APP_LOGGER_NAME)


@app.on_event("startup")
async def startup():
    system_write(app.state.logger, logging.INFO, "startup complete")


# --------------------------------------------------
# Request Logging Middleware
# --------------------------------------------------

class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Wraps every HTTP request to:
      - Assign a trace identifier (request.state.trace_identifier)
      - Publish the request to the logging helpers
      - Log method, url and status code once the response is ready
    """

    async def dispatch(self, request: Request, call_next):
        request.state.trace_identifier = request.headers.get("X-Request-ID") or str(uuid4())
        token = set_current_request(request)
        logger = request.app.state.logger

        status = 500
        try:
            response = await call_next(request)
            status = response.status_code
            return response

        finally:
            if status >= 500:
                api_error(logger, "request failed", request, status_code=status)
            else:
                api_information(logger, "request completed", request, status_code=status)
            reset_current_request(token)


app.add_middleware(RequestLoggingMiddleware)


# --------------------------------------------------
# GET /whoami
# --------------------------------------------------

@app.get("/whoami", response_model=Identity)
async def whoami(request: Request):
    """Identity taken from the bearer token; never fails on a bad token."""
    return Identity(sub=get_sub_in_token(request), company=get_company_in_token(request))


# --------------------------------------------------
# POST /echo
# --------------------------------------------------

@app.post("/echo")
async def echo(request: Request):
    raw = await request.body()
    body = raw.decode("utf-8", errors="replace")
    logger = request.app.state.logger

    try:
        msg = EchoMessage.model_validate_json(raw)
    except ValidationError as e:
        api_warning(logger, "invalid echo payload", request, status_code=422, request_body=body)
        raise HTTPException(status_code=422, detail=str(e))

    api_information(logger, "echo received", request, status_code=200, request_body=body)
    return {"message": msg.message}


# --------------------------------------------------
# Health Checks
# --------------------------------------------------

@app.get("/health/live")
async def live():
    """Always OK once service is running."""
    return PlainTextResponse("OK", status_code=200)


@app.get("/")
def home():
    return PlainTextResponse("API is Running", status_code=200)


# --------------------------------------------------
# Entry point
# --------------------------------------------------

def run():
    with logging_scope(settings) as logger:
        app.state.logger = logger
        try:
            uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_config=None)
        except Exception as ex:
            api_write(logger, logging.CRITICAL, f"Host terminated unexpectedly,ex:\n{ex}")
            raise


if __name__ == "__main__":
    run()
