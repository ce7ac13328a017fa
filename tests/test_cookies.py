from sfetch.cookies import parse_cookies
from sfetch.datastructures import CookiePair


def test_parse_simple_pairs():
    assert parse_cookies("a=1; b=2") == [CookiePair("a", "1"), CookiePair("b", "2")]


def test_absent_or_empty_header():
    assert parse_cookies(None) == []
    assert parse_cookies("") == []


def test_percent_decoding_and_quotes():
    pairs = parse_cookies('session=abc%20def;  theme="dark%3Bmode" ; empty=')
    assert pairs == [
        CookiePair("session", "abc def"),
        CookiePair("theme", "dark;mode"),
        CookiePair("empty", ""),
    ]


def test_value_may_contain_equals():
    assert parse_cookies("token=a=b==") == [CookiePair("token", "a=b==")]


def test_malformed_items_are_skipped_and_first_wins():
    pairs = parse_cookies("novalue; =orphan; a=1; a=2;;")
    assert pairs == [CookiePair("a", "1")]
