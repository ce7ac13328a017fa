"""Conversion between the two header models used by the proxy.

*List form* is an ordered sequence of ``(name, value)`` pairs where a name
may repeat. It is what httpx and the ASGI response speak.

*Flat form* is a mapping with one key per (lower-cased) name whose value is
either a string or, when the header occurred more than once, a list of
strings. It is what JSON request descriptors carry.

These functions are the only code that knows about the flat encoding.
"""
import re
import typing

from sfetch.constants import SET_COOKIE_HEADER
from sfetch.datastructures import FlatHeaders, HeaderList

JOIN_SEPARATOR = ", "

_JOINED_COOKIE_BOUNDARY = re.compile(r", (?=[^;,=\s]+=)")


def normalize_name(name: str) -> str:
    return name.strip().lower()


def to_list_form(flat: typing.Mapping[str, typing.Any] | None) -> HeaderList:
    """Expand a flat mapping into ordered pairs.

    A string value yields one pair, a list or tuple yields one pair per
    string element in order. Any other value shape is skipped.
    """
    pairs: HeaderList = []
    if not flat:
        return pairs
    for name, value in flat.items():
        if not isinstance(name, str):
            continue
        if isinstance(value, str):
            pairs.append((name, value))
        elif isinstance(value, (list, tuple)):
            pairs.extend((name, v) for v in value if isinstance(v, str))
    return pairs


def to_flat_form(pairs: typing.Iterable[typing.Tuple[str, str]], multi_value: bool = True) -> FlatHeaders:
    """Collapse pairs into one entry per case-insensitive name.

    A name seen once maps to its string value. A repeated name maps to the
    list of its values when ``multi_value`` is set; otherwise the values are
    joined with ``", "`` and ``set-cookie`` must be read back through
    :func:`get_set_cookie`.
    """
    collected: typing.Dict[str, typing.List[str]] = {}
    for name, value in pairs:
        collected.setdefault(normalize_name(name), []).append(value)

    flat: FlatHeaders = {}
    for name, values in collected.items():
        if len(values) == 1:
            flat[name] = values[0]
        elif multi_value:
            flat[name] = list(values)
        else:
            flat[name] = JOIN_SEPARATOR.join(values)
    return flat


def get_set_cookie(flat: typing.Mapping[str, typing.Any]) -> typing.List[str]:
    """Every ``set-cookie`` value held by a flat mapping.

    A joined string is split only where the next segment opens a new
    ``name=`` pair, so commas inside ``Expires`` dates stay put.
    """
    for name, value in flat.items():
        if normalize_name(name) != SET_COOKIE_HEADER:
            continue
        if isinstance(value, str):
            return _JOINED_COOKIE_BOUNDARY.split(value)
        if isinstance(value, (list, tuple)):
            return [v for v in value if isinstance(v, str)]
    return []


def get_first(pairs: HeaderList, name: str) -> str | None:
    name = normalize_name(name)
    for key, value in pairs:
        if normalize_name(key) == name:
            return value
    return None


def get_all(pairs: HeaderList, name: str) -> typing.List[str]:
    name = normalize_name(name)
    return [value for key, value in pairs if normalize_name(key) == name]


def from_raw(raw: typing.Iterable[typing.Tuple[bytes, bytes]]) -> HeaderList:
    """Lift raw header bytes (starlette ``Headers.raw``, httpx ``Headers.raw``) into pairs."""
    return [(k.decode("latin-1"), v.decode("latin-1")) for k, v in raw]


def encode_header(text: str) -> bytes:
    # latin-1 restores the exact bytes lifted by from_raw; wider text goes out as UTF-8
    try:
        return text.encode("latin-1")
    except UnicodeEncodeError:
        return text.encode("utf-8")


def to_raw(pairs: HeaderList) -> typing.List[typing.Tuple[bytes, bytes]]:
    return [(encode_header(k), encode_header(v)) for k, v in pairs]


def drop(pairs: HeaderList, names: typing.Iterable[str]) -> HeaderList:
    names = {normalize_name(n) for n in names}
    return [(k, v) for k, v in pairs if normalize_name(k) not in names]


def drop_prefixed(pairs: HeaderList, prefix: str) -> HeaderList:
    prefix = normalize_name(prefix)
    return [(k, v) for k, v in pairs if not normalize_name(k).startswith(prefix)]
