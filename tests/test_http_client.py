import httpx
import pytest

from sheetrates.services.http_client import HttpError, HttpParseError, get_json


def _client(handler):
    return httpx.Client(base_url="https://api.test", transport=httpx.MockTransport(handler))


def test_returns_decoded_json_and_passes_params():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url)
        return httpx.Response(200, json={"ok": True})

    with _client(handler) as client:
        assert get_json(client, "latest", params={"from": "EUR"}) == {"ok": True}
    assert seen[0].path == "/latest"
    assert seen[0].params["from"] == "EUR"


def test_retries_server_error_once_with_fixed_backoff():
    responses = [httpx.Response(503), httpx.Response(200, json={"n": 1})]
    sleeps = []

    with _client(lambda request: responses.pop(0)) as client:
        data = get_json(client, "latest", retries=1, backoff=0.25, sleep=sleeps.append)
    assert data == {"n": 1}
    assert sleeps == [0.25]


def test_gives_up_after_bounded_retries():
    calls = []

    def handler(request):
        calls.append(1)
        return httpx.Response(500)

    with _client(handler) as client:
        with pytest.raises(HttpError) as exc:
            get_json(client, "latest", retries=1, backoff=0.0, sleep=lambda s: None)
    assert len(calls) == 2
    assert exc.value.status_code == 500


def test_client_error_is_not_retried():
    calls = []

    def handler(request):
        calls.append(1)
        return httpx.Response(404, json={"message": "not found"})

    with _client(handler) as client:
        with pytest.raises(HttpError) as exc:
            get_json(client, "latest", retries=3, sleep=lambda s: None)
    assert len(calls) == 1
    assert exc.value.status_code == 404
    assert not isinstance(exc.value, HttpParseError)


def test_transport_error_is_retried_then_raised():
    calls = []

    def handler(request):
        calls.append(1)
        raise httpx.ConnectError("connection refused", request=request)

    with _client(handler) as client:
        with pytest.raises(HttpError) as exc:
            get_json(client, "latest", retries=1, sleep=lambda s: None)
    assert len(calls) == 2
    assert exc.value.status_code is None


def test_invalid_json_raises_parse_error_without_retry():
    calls = []

    def handler(request):
        calls.append(1)
        return httpx.Response(200, text="<html>oops</html>")

    with _client(handler) as client:
        with pytest.raises(HttpParseError):
            get_json(client, "latest", retries=2, sleep=lambda s: None)
    assert len(calls) == 1


def test_redirect_is_an_http_error_not_a_parse_error():
    calls = []

    def handler(request):
        calls.append(1)
        return httpx.Response(301, headers={"Location": "https://elsewhere.test/latest"})

    with _client(handler) as client:
        with pytest.raises(HttpError) as exc:
            get_json(client, "latest", retries=2, sleep=lambda s: None)
    assert not isinstance(exc.value, HttpParseError)
    assert exc.value.status_code == 301
    assert len(calls) == 1
