import json
import typing
from dataclasses import dataclass

from pydantic import ValidationError

from sfetch import headers as header_utils
from sfetch.constants import CONTROL_HEADER_PREFIX, TARGET_URL_HEADER
from sfetch.datastructures import HeaderList, RequestDescriptor
from sfetch.exceptions import InvalidDescriptor, InvalidTarget

ALLOWED_SCHEMES = ("http://", "https://")


@dataclass
class ResolvedTarget:
    url: str
    headers: HeaderList


def resolve_target(headers: HeaderList) -> ResolvedTarget:
    """Read the target URL from the control header.

    Every header carrying the control prefix is proxy-internal and is removed
    from the returned header list.
    """
    url = header_utils.get_first(headers, TARGET_URL_HEADER)
    if url is None:
        raise InvalidTarget(f"{TARGET_URL_HEADER} header is missing.")
    url = url.strip()
    if not url.lower().startswith(ALLOWED_SCHEMES):
        raise InvalidTarget(f"Unsupported target URL: {url!r}")

    return ResolvedTarget(
        url=url,
        headers=header_utils.drop_prefixed(headers, CONTROL_HEADER_PREFIX),
    )


def resolve_descriptor(raw: typing.Union[bytes, str]) -> RequestDescriptor:
    try:
        data = json.loads(raw)
    except (ValueError, UnicodeDecodeError) as e:
        raise InvalidDescriptor(f"Request body is not valid JSON: {e!s}") from e

    if not isinstance(data, dict):
        raise InvalidDescriptor("Request descriptor must be a JSON object.")

    try:
        return RequestDescriptor.model_validate(data)
    except ValidationError as e:
        raise InvalidDescriptor(f"Invalid request descriptor: {e!s}") from e
