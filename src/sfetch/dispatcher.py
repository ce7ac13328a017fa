import logging
import typing
from dataclasses import dataclass

import httpx

from sfetch import headers as header_utils
from sfetch.config import ConfigManager
from sfetch.datastructures import OutboundRequest, RequestDescriptor, ResponseDescriptor
from sfetch.exceptions import TransportFailure
from sfetch.resolver import ResolvedTarget

logger = logging.getLogger("sfetch")


@dataclass(frozen=True)
class TransportPolicy:
    """How the outbound client treats origin responses.

    Redirects are returned as-is and no status code is an error. ``timeout``
    of ``None`` leaves the deadline to httpx's own default; this layer never
    enforces one of its own and never retries.
    """
    follow_redirects: bool = False
    raise_for_status: bool = False
    timeout: typing.Optional[float] = None

    @classmethod
    def from_config(cls, config: ConfigManager) -> "TransportPolicy":
        return cls(timeout=config.SFETCH_CLIENT_TIMEOUT_SECS)


def build_header_request(method: str, target: ResolvedTarget, body: typing.Optional[bytes]) -> OutboundRequest:
    return OutboundRequest(
        method=method,
        url=target.url,
        headers=list(target.headers),
        body=body or None,
    )


def build_descriptor_request(descriptor: RequestDescriptor) -> OutboundRequest:
    return OutboundRequest(
        method=descriptor.method,
        url=descriptor.url,
        headers=header_utils.to_list_form(descriptor.headers),
        body=descriptor.body.encode("utf-8") if descriptor.body is not None else None,
    )


class ForwardDispatcher:
    def __init__(
        self,
        policy: TransportPolicy,
        *,
        transport: typing.Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.policy = policy
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        kwargs: typing.Dict[str, typing.Any] = {
            "follow_redirects": self.policy.follow_redirects,
        }
        if self.policy.timeout is not None:
            kwargs["timeout"] = self.policy.timeout
        if self.transport is not None:
            kwargs["transport"] = self.transport
        return httpx.AsyncClient(**kwargs)

    async def dispatch(self, request: OutboundRequest, correlation_id: typing.Optional[str] = None) -> ResponseDescriptor:
        logger.debug(
            "Dispatching outbound request",
            extra={
                "correlation_id": correlation_id,
                "method": request.method,
                "target_url": request.url,
            },
        )
        try:
            async with self._client() as client:
                outbound = client.build_request(
                    request.method,
                    request.url,
                    headers=header_utils.to_raw(request.headers),
                    content=request.body,
                )
                response = await client.send(outbound, stream=True)
                try:
                    # Raw bytes: content-encoding is passed through, not decoded
                    body = b"".join([chunk async for chunk in response.aiter_raw()])
                finally:
                    await response.aclose()
                if self.policy.raise_for_status:
                    response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise TransportFailure(f"Outbound request to {request.url} failed: {e!s}") from e

        logger.debug(
            "Origin responded",
            extra={
                "correlation_id": correlation_id,
                "status_code": response.status_code,
                "target_url": request.url,
            },
        )
        return ResponseDescriptor(
            status=response.status_code,
            status_text=response.reason_phrase,
            headers=header_utils.from_raw(response.headers.raw),
            body=body,
        )
