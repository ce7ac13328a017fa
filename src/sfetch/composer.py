import json
import typing
from urllib.parse import quote, unquote

from starlette.responses import PlainTextResponse, Response

from sfetch import headers as header_utils
from sfetch.constants import EXTRAS_HEADER, ORIGIN_CONTENT_TYPE_HEADER
from sfetch.datastructures import DebugMetadata, HeaderList, ResponseDescriptor

# Same unreserved set as JavaScript's encodeURIComponent
URI_COMPONENT_SAFE = "-_.!~*'()"

# Framing headers that describe the origin connection, not the buffered body
HOP_BY_HOP_RESPONSE_HEADERS = {
    "connection",
    "keep-alive",
    "transfer-encoding",
}


def encode_metadata(extras: DebugMetadata) -> str:
    payload = json.dumps(extras.to_dict(), separators=(",", ":"), ensure_ascii=False)
    return quote(payload, safe=URI_COMPONENT_SAFE)


def decode_metadata(value: str) -> typing.Dict[str, typing.Any]:
    return json.loads(unquote(value))


def _allows_body(status: int) -> bool:
    return not (status < 200 or status in (204, 304))


def _to_asgi(status: int, pairs: HeaderList, body: bytes) -> Response:
    response = Response(content=body, status_code=status)
    raw_headers = [
        (name.lower().encode("latin-1"), value.encode("latin-1"))
        for name, value in header_utils.drop(pairs, HOP_BY_HOP_RESPONSE_HEADERS)
    ]
    if header_utils.get_first(pairs, "content-length") is None and _allows_body(status):
        raw_headers.append((b"content-length", str(len(body)).encode("latin-1")))
    # Assigned directly so repeated names such as set-cookie survive
    response.raw_headers = raw_headers
    return response


def compose(response: ResponseDescriptor, extras: typing.Optional[DebugMetadata] = None) -> Response:
    """Build the reply from an origin response.

    Status and every header are copied verbatim. With ``extras`` one more
    header carries the percent-encoded JSON metadata.
    """
    pairs = list(response.headers)
    if extras is not None:
        pairs.append((EXTRAS_HEADER, encode_metadata(extras)))
    return _to_asgi(response.status, pairs, response.body)


def descriptor_reply(response: ResponseDescriptor) -> Response:
    flat = header_utils.to_flat_form(response.headers)
    pairs = header_utils.to_list_form(flat)
    content_type = header_utils.get_first(response.headers, "content-type") or ""
    pairs.append((ORIGIN_CONTENT_TYPE_HEADER, content_type))
    return compose(
        ResponseDescriptor(
            status=response.status,
            status_text=response.status_text,
            headers=pairs,
            body=response.body,
        )
    )


def error_response(status: int, text: str) -> Response:
    return PlainTextResponse(text, status_code=status)
