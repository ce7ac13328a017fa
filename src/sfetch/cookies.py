import typing
from urllib.parse import unquote

from sfetch.datastructures import CookiePair


def parse_cookies(value: str | None) -> typing.List[CookiePair]:
    """Split a ``Cookie`` request header into name/value pairs.

    Only used for diagnostics, so malformed items are skipped rather than
    reported. The first occurrence of a name wins.
    """
    if not value:
        return []

    pairs: typing.List[CookiePair] = []
    seen = set()
    for item in value.split(";"):
        name, sep, raw_value = item.partition("=")
        if not sep:
            continue
        name = unquote(name.strip())
        if not name or name in seen:
            continue
        raw_value = raw_value.strip()
        if len(raw_value) >= 2 and raw_value[0] == raw_value[-1] == '"':
            raw_value = raw_value[1:-1]
        seen.add(name)
        pairs.append(CookiePair(name, unquote(raw_value)))
    return pairs
