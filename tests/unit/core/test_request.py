"""Tests for request validation, query augmentation and body negotiation."""

import io
import json

import pytest

from halite.core.exceptions import RequestError, UnsupportedMethodError, UnsupportedSchemeError
from halite.core.options import Options
from halite.core.request import Request, build_request, build_uri, encode_body


class TestValidation:
    @pytest.mark.parametrize("verb", ["get", "post", "put", "patch", "delete", "head", "options"])
    def test_allowed_verbs_uppercased(self, verb):
        assert Request(verb, "http://example.com").verb == verb.upper()

    def test_unknown_verb(self):
        with pytest.raises(UnsupportedMethodError) as exc_info:
            Request("trace", "http://httpbin.org/get")
        assert "TRACE" in str(exc_info.value)
        assert str(exc_info.value) == "Unknown method: TRACE"

    def test_missing_scheme(self):
        with pytest.raises(UnsupportedSchemeError) as exc_info:
            Request("GET", "example.com")
        assert "example.com" in str(exc_info.value)
        assert str(exc_info.value).startswith("Missing scheme")

    def test_unknown_scheme(self):
        with pytest.raises(UnsupportedSchemeError) as exc_info:
            Request("GET", "ws://example.com")
        assert "ws" in str(exc_info.value)
        assert exc_info.value.scheme == "ws"

    def test_verb_checked_before_scheme(self):
        with pytest.raises(UnsupportedMethodError):
            Request("trace", "ws://example.com")


class TestRequestProperties:
    def test_domain_and_full_path(self):
        request = Request("get", "http://example.com/foo/bar?q=halite#result")
        assert request.verb == "GET"
        assert request.domain == "http://example.com"
        assert request.full_path == "/foo/bar?q=halite#result"

    def test_domain_keeps_userinfo_and_port(self):
        request = Request("GET", "https://user:pw@example.com:8443/a?b=1")
        assert request.domain == "https://user:pw@example.com:8443"
        assert request.host == "example.com"
        assert request.scheme == "https"

    def test_empty_path_becomes_slash(self):
        assert Request("GET", "http://example.com").full_path == "/"
        assert Request("GET", "http://example.com?q=1").full_path == "/?q=1"

    def test_immutable(self):
        request = Request("GET", "http://example.com")
        with pytest.raises(AttributeError):
            request._verb = "POST"

    def test_headers_are_a_copy(self):
        request = Request("GET", "http://example.com", {"X": "1"})
        request.headers["X"] = "2"
        assert request.headers["X"] == "1"

    def test_str_body_encoded(self):
        assert Request("POST", "http://example.com", body="тест").body == "тест".encode("utf-8")

    def test_redirect_dropping_body_removes_body_headers(self):
        request = Request(
            "POST", "http://example.com/a",
            {"Content-Type": "application/json", "Content-Length": "2", "X": "1"},
            b"{}",
        )
        follow_up = request.redirect("http://example.com/b", verb="GET", body=b"")
        assert follow_up.verb == "GET"
        assert follow_up.body == b""
        assert "Content-Type" not in follow_up.headers
        assert "Content-Length" not in follow_up.headers
        assert follow_up.headers["X"] == "1"

    def test_redirect_keeps_body_by_default(self):
        request = Request("PUT", "http://example.com/a", {"Content-Type": "text/plain"}, b"data")
        follow_up = request.redirect("http://example.com/b")
        assert (follow_up.verb, follow_up.body) == ("PUT", b"data")
        assert follow_up.content_type == "text/plain"


class TestBuildUri:
    def test_appends_to_existing_query(self):
        assert build_uri("http://example.com?a=1", {"b": 2}) == "http://example.com/?a=1&b=2"

    def test_lists_nested_maps_and_scalars(self):
        uri = build_uri("http://example.com/s", {"tag": ["a", "b"], "user": {"id": 1}, "on": True, "none": None})
        assert uri == "http://example.com/s?tag=a&tag=b&user%5Bid%5D=1&on=true&none="

    def test_percent_encoding(self):
        assert build_uri("http://example.com/", {"q": "a b&c"}) == "http://example.com/?q=a+b%26c"

    def test_fragment_kept(self):
        assert build_uri("http://example.com/p#frag", {"a": 1}) == "http://example.com/p?a=1#frag"

    def test_no_params(self):
        assert build_uri("http://example.com", {}) == "http://example.com/"


class TestBodyNegotiation:
    def test_form_wins_over_json(self):
        request = build_request("POST", "http://example.com", Options.create(form={"a": 1}, json={"b": 2}))
        assert request.content_type == "application/x-www-form-urlencoded"
        assert request.body == b"a=1"

    def test_json(self):
        request = build_request("POST", "http://example.com", Options.create(json={"name": "halite", "tags": ["x"]}))
        assert request.content_type == "application/json"
        assert json.loads(request.body) == {"name": "halite", "tags": ["x"]}

    def test_json_wins_over_raw(self):
        request = build_request("POST", "http://example.com", Options.create(json={"a": 1}, raw="text"))
        assert request.content_type == "application/json"

    def test_raw(self):
        request = build_request("POST", "http://example.com", Options.create(raw="plain text"))
        assert request.content_type == "text/plain"
        assert request.body == b"plain text"

    def test_no_body(self):
        request = build_request("GET", "http://example.com", Options())
        assert request.body == b""
        assert request.content_type is None

    def test_explicit_content_type_wins(self):
        options = Options.create(headers={"content_type": "application/vnd.api+json"}, json={"a": 1})
        request = build_request("POST", "http://example.com", options)
        assert request.content_type == "application/vnd.api+json"
        assert json.loads(request.body) == {"a": 1}

    def test_multipart_when_file_present(self):
        options = Options.create(form={"name": "report", "doc": io.BytesIO(b"hello file")})
        request = build_request("POST", "http://example.com/upload", options)
        assert request.content_type.startswith("multipart/form-data; boundary=")
        assert b"hello file" in request.body
        assert b'name="name"' in request.body
        assert b"report" in request.body

    def test_unserializable_json_is_request_error(self):
        options = Options.create(json={"doc": io.BytesIO(b"x")})
        with pytest.raises(RequestError):
            encode_body(options)

    def test_validation_happens_before_reading_files(self):
        handle = io.BytesIO(b"content")
        with pytest.raises(UnsupportedMethodError):
            build_request("TRACE", "http://example.com", Options.create(form={"doc": handle}))
        assert handle.tell() == 0

    def test_cookie_header_from_cookie_map(self):
        request = build_request("GET", "http://example.com", Options.create(cookies={"a": "1", "b": "2"}))
        assert request.headers["Cookie"] == "a=1; b=2"

    def test_params_applied(self):
        request = build_request("GET", "http://example.com/items?sort=asc", Options.create(params={"page": 2}))
        assert request.uri == "http://example.com/items?sort=asc&page=2"
        assert request.full_path == "/items?sort=asc&page=2"
