"""Tests for Headers and cookie helpers."""

from halite.core.headers import (
    Headers,
    cookie_header,
    cookies_from_headers,
    normalize_header_name,
    parse_cookie_header,
    parse_set_cookie,
)


class TestHeaderNames:
    def test_underscores_and_case(self):
        assert normalize_header_name("private_token") == "Private-Token"
        assert normalize_header_name("CONTENT-TYPE") == "Content-Type"
        assert normalize_header_name("x-api-key") == "X-Api-Key"

    def test_lookup_is_case_insensitive(self):
        headers = Headers({"content_type": "application/json"})
        assert headers["Content-Type"] == "application/json"
        assert headers["content-type"] == "application/json"
        assert "CONTENT_TYPE" in headers


class TestHeaders:
    def test_multiple_values(self):
        headers = Headers()
        headers.add("Set-Cookie", "a=1")
        headers.add("set-cookie", "b=2")
        assert headers.get_list("Set-Cookie") == ["a=1", "b=2"]
        assert headers["Set-Cookie"] == "a=1, b=2"
        assert headers.multi_items() == [("Set-Cookie", "a=1"), ("Set-Cookie", "b=2")]

    def test_escape_converts_values(self):
        headers = Headers.escape({"x_flag": True, "x_count": 3, "accept": ["a/b", "c/d"]})
        assert headers["X-Flag"] == "true"
        assert headers["X-Count"] == "3"
        assert headers.get_list("Accept") == ["a/b", "c/d"]

    def test_escape_skips_invalid_content_length(self):
        assert "Content-Length" not in Headers.escape({"Content-Length": "abc"})
        assert Headers.escape({"Content-Length": 12})["Content-Length"] == "12"

    def test_set_replaces_values(self):
        headers = Headers({"Accept": "a"})
        headers.set("Accept", ["b", "c"])
        assert headers.get_list("Accept") == ["b", "c"]

    def test_copy_is_independent(self):
        headers = Headers({"X": "1"})
        copy = headers.copy()
        copy["X"] = "2"
        assert headers["X"] == "1"

    def test_equality_with_mapping(self):
        assert Headers({"x-one": "1"}) == {"X-One": "1"}
        assert Headers({"X": "1"}) != Headers({"X": "2"})

    def test_to_dict_and_request_dict(self):
        headers = Headers({"Accept": "*/*"})
        headers.set("Cookie", ["a=1", "b=2"])
        headers.set("X-Multi", ["1", "2"])
        assert headers.to_dict() == {"Accept": "*/*", "Cookie": ["a=1", "b=2"], "X-Multi": ["1", "2"]}
        request_dict = headers.to_request_dict()
        assert request_dict["Cookie"] == "a=1; b=2"
        assert request_dict["X-Multi"] == "1, 2"


class TestCookies:
    def test_parse_cookie_header(self):
        assert parse_cookie_header("a=1; b=2") == {"a": "1", "b": "2"}
        assert parse_cookie_header("") == {}

    def test_parse_set_cookie_ignores_attributes(self):
        assert parse_set_cookie("session=abc; Path=/; HttpOnly") == ("session", "abc")

    def test_parse_set_cookie_fallback(self):
        assert parse_set_cookie("weird=va,lue; Path=/") == ("weird", "va,lue")
        assert parse_set_cookie("novalue") is None

    def test_cookies_from_headers(self):
        headers = Headers()
        headers.add("Cookie", "a=1")
        headers.add("Set-Cookie", "b=2; Path=/")
        assert cookies_from_headers(headers) == {"a": "1", "b": "2"}

    def test_cookie_header(self):
        assert cookie_header({"session": "abc", "theme": "dark"}) == "session=abc; theme=dark"
