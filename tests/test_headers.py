from sfetch.headers import (
    drop,
    drop_prefixed,
    from_raw,
    get_all,
    get_first,
    get_set_cookie,
    to_flat_form,
    to_list_form,
    to_raw,
)


def test_to_list_form_expands_arrays_in_order():
    pairs = to_list_form({
        "Content-Type": "text/plain",
        "set-cookie": ["a=1", "b=2", "c=3"],
    })
    assert pairs == [
        ("Content-Type", "text/plain"),
        ("set-cookie", "a=1"),
        ("set-cookie", "b=2"),
        ("set-cookie", "c=3"),
    ]


def test_to_list_form_drops_unsupported_shapes():
    pairs = to_list_form({
        "x-nested": {"a": "b"},
        "x-number": 42,
        "x-none": None,
        "x-mixed": ["one", 2, {"three": 3}],
        "accept": "*/*",
    })
    assert pairs == [("x-mixed", "one"), ("accept", "*/*")]


def test_to_list_form_empty():
    assert to_list_form({}) == []
    assert to_list_form(None) == []


def test_to_flat_form_collects_case_insensitively():
    flat = to_flat_form([
        ("Accept", "text/html"),
        ("X-Trace", "1"),
        ("x-trace", "2"),
    ])
    assert flat == {"accept": "text/html", "x-trace": ["1", "2"]}


def test_to_flat_form_joins_when_multi_value_unsupported():
    flat = to_flat_form(
        [("Set-Cookie", "a=1; Path=/"), ("set-cookie", "b=2"), ("vary", "Origin")],
        multi_value=False,
    )
    assert flat == {"set-cookie": "a=1; Path=/, b=2", "vary": "Origin"}


def test_round_trip_preserves_pairs():
    pairs = [
        ("content-type", "application/json"),
        ("x-dup", "first"),
        ("cache-control", "no-store"),
        ("x-dup", "second"),
    ]
    rebuilt = to_list_form(to_flat_form(pairs))
    assert sorted(rebuilt) == sorted(pairs)
    # distinct names keep first-seen order, duplicates keep their relative order
    assert [name for name, _ in rebuilt] == ["content-type", "x-dup", "x-dup", "cache-control"]
    assert [v for k, v in rebuilt if k == "x-dup"] == ["first", "second"]


def test_set_cookie_values_stay_distinct():
    for count in (0, 1, 3):
        cookies = [f"c{i}=v{i}; Path=/; Expires=Wed, 21 Oct 2026 07:28:00 GMT" for i in range(count)]
        flat = to_flat_form([("set-cookie", c) for c in cookies] + [("server", "origin")])
        assert get_set_cookie(flat) == cookies


def test_get_first_and_drops():
    pairs = [("Host", "proxy"), ("X-Sfetch-Url", "https://a.test"), ("x-sfetch-debug", "1"), ("Accept", "*/*")]
    assert get_first(pairs, "x-sfetch-url") == "https://a.test"
    assert get_first(pairs, "missing") is None
    assert drop(pairs, ["host"]) == pairs[1:]
    assert drop_prefixed(pairs, "X-SFETCH-") == [("Host", "proxy"), ("Accept", "*/*")]


def test_from_raw_keeps_duplicates():
    raw = [(b"set-cookie", b"a=1"), (b"set-cookie", b"b=2"), (b"content-type", b"text/plain")]
    assert from_raw(raw) == [("set-cookie", "a=1"), ("set-cookie", "b=2"), ("content-type", "text/plain")]


def test_joined_set_cookie_splits_back_into_values():
    cookies = [
        "a=1; Path=/; Expires=Wed, 21 Oct 2026 07:28:00 GMT",
        "b=2; HttpOnly",
        "c=3",
    ]
    flat = to_flat_form([("set-cookie", c) for c in cookies], multi_value=False)
    assert isinstance(flat["set-cookie"], str)
    assert get_set_cookie(flat) == cookies


def test_single_set_cookie_with_expires_is_not_split():
    flat = {"Set-Cookie": "a=1; Expires=Wed, 21 Oct 2026 07:28:00 GMT"}
    assert get_set_cookie(flat) == ["a=1; Expires=Wed, 21 Oct 2026 07:28:00 GMT"]


def test_get_all_collects_every_value():
    pairs = [("cookie", "a=1"), ("Accept", "*/*"), ("Cookie", "b=2")]
    assert get_all(pairs, "COOKIE") == ["a=1", "b=2"]
    assert get_all(pairs, "missing") == []


def test_to_raw_restores_lifted_bytes_and_encodes_wider_text():
    raw = [(b"x-name", "café".encode("utf-8")), (b"x-latin", b"caf\xe9")]
    assert to_raw(from_raw(raw)) == raw
    assert to_raw([("x-sym", "€ 5")]) == [(b"x-sym", "€ 5".encode("utf-8"))]
