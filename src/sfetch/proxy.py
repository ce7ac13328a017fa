import enum
import functools
import logging
import time
import traceback
import typing
import uuid

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.responses import Response

from sfetch import headers as header_utils
from sfetch.composer import compose, descriptor_reply, error_response
from sfetch.config import ConfigManager
from sfetch.constants import (
    CONTROL_HEADER_PREFIX,
    INVALID_URL_MESSAGE,
    UNKNOWN_ERROR_MESSAGE,
)
from sfetch.cookies import parse_cookies
from sfetch.datastructures import DebugMetadata, HeaderList
from sfetch.dispatcher import (
    ForwardDispatcher,
    TransportPolicy,
    build_descriptor_request,
    build_header_request,
)
from sfetch.exceptions import InvalidTarget, SFetchException
from sfetch.logging import setup_logging
from sfetch.resolver import resolve_descriptor, resolve_target
from sfetch.version import VERSION

# Owned by the runtime on the inbound leg; httpx recomputes them outbound
STRIP_REQUEST_HEADERS = {
    "host",
    "connection",
    "content-length",
    "transfer-encoding",
}

PROXY_METHODS = ["GET", "POST", "PUT", "DELETE", "HEAD", "OPTIONS", "PATCH"]

RECOGNIZED_ERRORS = (SFetchException, httpx.HTTPError)


setup_logging()

logger = logging.getLogger("sfetch")


class InvocationMode(enum.Enum):
    HEADER = "header"
    DESCRIPTOR = "descriptor"


def select_mode(headers: HeaderList, body: bytes) -> InvocationMode:
    """Any control header means header mode; otherwise a body is a descriptor."""
    prefix = header_utils.normalize_name(CONTROL_HEADER_PREFIX)
    if any(header_utils.normalize_name(name).startswith(prefix) for name, _ in headers):
        return InvocationMode.HEADER
    if body:
        return InvocationMode.DESCRIPTOR
    return InvocationMode.HEADER


def format_trace(exc: BaseException) -> str:
    return "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))


def sfetch_route():
    def wrapper(func):
        @functools.wraps(func)
        async def wrapped(*args, **kwargs):
            request: Request = kwargs.get("request") or args[-1]
            correlation_id = str(uuid.uuid4())
            request.state.correlation_id = correlation_id
            logger.info(
                "Incoming sfetch request",
                extra={
                    "correlation_id": correlation_id,
                    "method": request.method,
                    "url": str(request.url),
                    "client_host": request.client.host if request.client else "unknown",
                }
            )
            start_time = time.time()

            try:
                response = await func(*args, **kwargs)
                elapsed_time = time.time() - start_time
                logger.info(
                    "sfetch request processed",
                    extra={
                        "correlation_id": correlation_id,
                        "status_code": response.status_code,
                        "content_type": response.headers.get("content-type", "unknown"),
                        "elapsed_time": f"{elapsed_time:.3f}s",
                    }
                )
                return response
            except RECOGNIZED_ERRORS as exc:
                elapsed_time = time.time() - start_time
                logger.error(
                    "Recognized error while proxying",
                    exc_info=True,
                    extra={
                        "correlation_id": correlation_id,
                        "exception": str(exc),
                        "elapsed_time": f"{elapsed_time:.3f}s",
                    }
                )
                return error_response(400, format_trace(exc))
            except Exception as exc:
                elapsed_time = time.time() - start_time
                logger.error(
                    "Unexpected error occurred",
                    exc_info=True,
                    extra={
                        "correlation_id": correlation_id,
                        "exception": str(exc),
                        "elapsed_time": f"{elapsed_time:.3f}s",
                    }
                )
                return error_response(500, UNKNOWN_ERROR_MESSAGE)
        return wrapped
    return wrapper


class SFetch:
    def __init__(
        self,
        config: typing.Optional[ConfigManager] = None,
        *,
        transport: typing.Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config or ConfigManager()
        self.policy = TransportPolicy.from_config(self.config)
        self.dispatcher = ForwardDispatcher(self.policy, transport=transport)

        logger.info(
            "sfetch initialised",
            extra={
                "version": VERSION,
                "follow_redirects": self.policy.follow_redirects,
                "timeout": self.policy.timeout,
                "debug_metadata": self.config.SFETCH_DEBUG_METADATA,
            },
        )

    @sfetch_route()
    async def _meta_route(self, request: Request):
        return JSONResponse(
            content={
                "version": VERSION,
                "modes": [mode.value for mode in InvocationMode],
                "debug_metadata": self.config.SFETCH_DEBUG_METADATA,
            },
            status_code=200,
        )

    @sfetch_route()
    async def handle(self, request: Request) -> Response:
        inbound_headers = header_utils.from_raw(request.headers.raw)
        body = await request.body()
        mode = select_mode(inbound_headers, body)
        logger.debug(
            "Invocation mode selected",
            extra={"correlation_id": request.state.correlation_id, "mode": mode.value},
        )
        if mode is InvocationMode.HEADER:
            return await self._handle_header_mode(request, inbound_headers, body)
        return await self._handle_descriptor_mode(request, body)

    async def _handle_header_mode(self, request: Request, inbound_headers: HeaderList, body: bytes) -> Response:
        correlation_id = request.state.correlation_id
        try:
            target = resolve_target(inbound_headers)
        except InvalidTarget as e:
            logger.info(
                "Rejected request with invalid target",
                extra={"correlation_id": correlation_id, "reason": str(e)},
            )
            return error_response(400, INVALID_URL_MESSAGE)

        target.headers = header_utils.drop(target.headers, STRIP_REQUEST_HEADERS)
        # HTTP/2 clients may split the cookie across several fields
        cookies = parse_cookies("; ".join(header_utils.get_all(inbound_headers, "cookie")))

        response = await self.dispatcher.dispatch(
            build_header_request(request.method, target, body),
            correlation_id=correlation_id,
        )
        logger.info(
            "Origin response received",
            extra={
                "correlation_id": correlation_id,
                "target_url": target.url,
                "status_code": response.status,
                "status_text": response.status_text,
            },
        )

        extras = None
        if self.config.SFETCH_DEBUG_METADATA:
            extras = DebugMetadata(url=target.url, cookies=cookies)
        return compose(response, extras)

    async def _handle_descriptor_mode(self, request: Request, body: bytes) -> Response:
        correlation_id = request.state.correlation_id
        descriptor = resolve_descriptor(body)
        response = await self.dispatcher.dispatch(
            build_descriptor_request(descriptor),
            correlation_id=correlation_id,
        )
        logger.info(
            "Origin response received",
            extra={
                "correlation_id": correlation_id,
                "target_url": descriptor.url,
                "status_code": response.status,
                "status_text": response.status_text,
            },
        )
        return descriptor_reply(response)

    def to_fastapi(self, app: FastAPI):
        app.api_route("/_sfetch/meta", methods=["GET"])(self._meta_route)
        app.api_route("/{path:path}", methods=PROXY_METHODS)(self.handle)
