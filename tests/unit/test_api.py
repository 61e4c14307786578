"""Tests for the module-level one-shot helpers."""

import pytest
import responses

import halite


@pytest.mark.parametrize("name,verb", [
    ("get", responses.GET),
    ("head", responses.HEAD),
    ("post", responses.POST),
    ("put", responses.PUT),
    ("patch", responses.PATCH),
    ("delete", responses.DELETE),
    ("options", responses.OPTIONS),
])
def test_verb_helpers(mock_responses, name, verb):
    mock_responses.add(verb, "http://example.com/resource", status=204)
    response = getattr(halite, name)("http://example.com/resource")
    assert response.status == 204
    assert mock_responses.calls[0].request.method == verb


def test_request_with_options(mock_responses):
    mock_responses.add(responses.GET, "http://example.com/search?q=halite", json={"hits": 1})
    response = halite.request("get", "http://example.com/search", {"params": {"q": "halite"}})
    assert response.json() == {"hits": 1}


def test_follow_keyword(mock_responses):
    mock_responses.add(responses.GET, "http://example.com/a", status=302, headers={"Location": "/b"})
    mock_responses.add(responses.GET, "http://example.com/b", body="done")
    response = halite.get("http://example.com/a", follow=1)
    assert response.text == "done"
    assert response.history[0].status == 302


def test_unsupported_scheme():
    with pytest.raises(halite.UnsupportedSchemeError):
        halite.get("ftp://example.com/")
