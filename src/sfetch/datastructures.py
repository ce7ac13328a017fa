import typing
from dataclasses import dataclass, field

import httpx
from pydantic import BaseModel, field_validator

HeaderList = typing.List[typing.Tuple[str, str]]
FlatHeaders = typing.Dict[str, typing.Union[str, typing.List[str]]]


def is_absolute_http_url(value: str) -> bool:
    try:
        url = httpx.URL(value)
    except (httpx.InvalidURL, TypeError):
        return False
    return url.scheme in ("http", "https") and bool(url.host)


class RequestDescriptor(BaseModel):
    method: str = "GET"
    url: str
    # Value shapes are checked by the header translator, not here
    headers: typing.Dict[str, typing.Any] = {}
    body: typing.Optional[str] = None

    @field_validator("method")
    @classmethod
    def normalize_method(cls, value: str):
        value = value.strip().upper()
        if not value:
            raise ValueError("method must not be empty")
        return value

    @field_validator("url")
    @classmethod
    def validate_url(cls, value: str):
        if not is_absolute_http_url(value):
            raise ValueError(f"url must be an absolute http(s) URL: {value!r}")
        return value


@dataclass
class OutboundRequest:
    method: str
    url: str
    headers: HeaderList
    body: typing.Optional[bytes] = None


@dataclass
class ResponseDescriptor:
    status: int
    status_text: str
    headers: HeaderList
    body: bytes = b""


class CookiePair(typing.NamedTuple):
    name: str
    value: str


@dataclass
class DebugMetadata:
    url: str
    cookies: typing.List[CookiePair] = field(default_factory=list)

    def to_dict(self) -> typing.Dict[str, typing.Any]:
        return {
            "cookies": {pair.name: pair.value for pair in self.cookies},
            "url": self.url,
        }
