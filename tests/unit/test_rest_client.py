"""Unit tests for RestClient orchestration and per-verb wrappers."""

import asyncio
from unittest.mock import MagicMock

import httpx
import pytest

from restclient import (
    BadResponseTypeError,
    BadURLError,
    CachePolicy,
    DecodingError,
    EncodingError,
    HTTPXTransport,
    JSONEncoder,
    ResponseMetadata,
    RestClient,
    ServerError,
    StubTransport,
    TransportError,
)


@pytest.mark.asyncio
async def test_get(client, model, model_type):
    assert await client.get(response_type=model_type) == model


@pytest.mark.asyncio
async def test_get_into_dict(client):
    assert await client.get(response_type=dict) == {"name": "name"}


@pytest.mark.asyncio
async def test_post_with_body(client, stub_transport, model, model_type):
    assert await client.post(body=model, response_type=model_type) == model
    sent = stub_transport.requests[0]
    assert sent.method == "POST"
    assert sent.body == JSONEncoder().encode(model)


@pytest.mark.asyncio
async def test_put_with_body(client, model, model_type):
    assert await client.put(body=model, response_type=model_type) == model


@pytest.mark.asyncio
async def test_request(client, model, model_type):
    assert await client.request("GET", response_type=model_type) == model


@pytest.mark.asyncio
async def test_request_with_body(client, model, model_type):
    assert await client.request("POST", body=model, response_type=model_type) == model


@pytest.mark.asyncio
async def test_request_without_response_returns_none(client, model):
    assert await client.request("POST", body=model) is None
    assert await client.request("DELETE", "/items/1") is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "verb, method",
    [
        ("get", "GET"),
        ("post", "POST"),
        ("put", "PUT"),
        ("patch", "PATCH"),
        ("delete", "DELETE"),
        ("options", "OPTIONS"),
        ("trace", "TRACE"),
        ("connect", "CONNECT"),
        ("head", "HEAD"),
    ],
)
async def test_verb_wrappers_set_method(client, stub_transport, verb, method):
    await getattr(client, verb)("/things", query=[("a", "1")])
    sent = stub_transport.requests[-1]
    assert sent.method == method
    assert sent.url == "https://www.example.com/things?a=1"


@pytest.mark.asyncio
async def test_head_never_decodes(base_url):
    decoder = MagicMock()
    transport = StubTransport(body=b"not json at all")
    client = RestClient(base_url, transport=transport, decoder=decoder)
    assert await client.head("/resource") is None
    decoder.decode.assert_not_called()


@pytest.mark.asyncio
async def test_nonstandard_verb(client, stub_transport):
    await client.request("PROPFIND", "/dav")
    assert stub_transport.requests[0].method == "PROPFIND"


@pytest.mark.asyncio
async def test_status_300_raises_server_error(base_url, encoded_model, model_type):
    client = RestClient(
        base_url, transport=StubTransport(body=encoded_model, status_code=300)
    )
    with pytest.raises(ServerError) as exc:
        await client.get(response_type=model_type)
    assert exc.value == ServerError(300, encoded_model)


@pytest.mark.asyncio
async def test_status_error_without_response_type(base_url):
    client = RestClient(base_url, transport=StubTransport(body=b"gone", status_code=410))
    with pytest.raises(ServerError) as exc:
        await client.delete("/items/1")
    assert exc.value.response == b"gone"


@pytest.mark.asyncio
async def test_non_http_response_skips_decoding(base_url):
    decoder = MagicMock()
    client = RestClient(
        base_url,
        transport=StubTransport(body=b"{}", metadata="ftp response"),
        decoder=decoder,
    )
    with pytest.raises(BadResponseTypeError):
        await client.get(response_type=dict)
    decoder.decode.assert_not_called()


@pytest.mark.asyncio
async def test_transport_error_skips_validation(base_url, monkeypatch):
    validate = MagicMock()
    monkeypatch.setattr("restclient.client._validate", validate)
    cause = httpx.ConnectTimeout("timed out")
    client = RestClient(base_url, transport=StubTransport(error=cause))
    with pytest.raises(TransportError) as exc:
        await client.get(response_type=dict)
    assert exc.value.cause is cause
    validate.assert_not_called()


@pytest.mark.asyncio
async def test_decode_error(base_url, model_type):
    client = RestClient(base_url, transport=StubTransport(body=b'{"id": 1}'))
    with pytest.raises(DecodingError):
        await client.get(response_type=model_type)


@pytest.mark.asyncio
async def test_encoding_error_happens_before_sending(client, stub_transport):
    with pytest.raises(EncodingError):
        await client.post(body={"when": object()})
    assert stub_transport.requests == []


@pytest.mark.asyncio
async def test_bad_url_happens_before_sending(client, stub_transport):
    with pytest.raises(BadURLError):
        await client.get("/\udcff")
    assert stub_transport.requests == []


@pytest.mark.asyncio
async def test_per_call_options_reach_request(client, stub_transport):
    await client.get(
        "/search",
        query=[("q", "a"), ("q", "b")],
        headers={"Accept": "application/json"},
        cache_policy=CachePolicy.RETURN_CACHE_DATA_DONT_LOAD,
        timeout=1.5,
    )
    sent = stub_transport.requests[0]
    assert sent.url == "https://www.example.com/search?q=a&q=b"
    assert sent.headers == {"Accept": "application/json"}
    assert sent.cache_policy == CachePolicy.RETURN_CACHE_DATA_DONT_LOAD
    assert sent.timeout == 1.5


@pytest.mark.asyncio
async def test_client_defaults_apply(base_url):
    transport = StubTransport()
    client = RestClient(
        base_url,
        transport=transport,
        default_headers={"X-Client": "restclient", "Accept": "*/*"},
        timeout=9.0,
        cache_policy=CachePolicy.RELOAD_REVALIDATING_CACHE_DATA,
    )
    await client.get(headers={"Accept": "application/json"})
    sent = transport.requests[0]
    assert sent.headers == {"X-Client": "restclient", "Accept": "application/json"}
    assert sent.timeout == 9.0
    assert sent.cache_policy == CachePolicy.RELOAD_REVALIDATING_CACHE_DATA


@pytest.mark.asyncio
async def test_per_call_encoder_and_decoder(client, stub_transport):
    encoder = MagicMock()
    encoder.encode.return_value = b"custom"
    decoder = MagicMock()
    decoder.decode.return_value = "decoded"

    result = await client.post(
        body={"x": 1}, response_type=str, encoder=encoder, decoder=decoder
    )
    assert result == "decoded"
    assert stub_transport.requests[0].body == b"custom"
    encoder.encode.assert_called_once_with({"x": 1})


def test_base_url_is_validated_once():
    with pytest.raises(BadURLError):
        RestClient("not-a-url", transport=StubTransport())


def test_invalid_default_timeout():
    with pytest.raises(ValueError):
        RestClient("https://www.example.com", transport=StubTransport(), timeout=0)


def test_configuration_is_read_only(client):
    with pytest.raises(AttributeError):
        client.base_url = httpx.URL("https://other.example.com")
    with pytest.raises(TypeError):
        client.default_headers["X-New"] = "1"


def test_stage_helpers(client, base_url):
    url = client.url("path", [("foo", "bar")])
    assert url.path == "/path"
    request = client.build_request(url, headers={"foo": "bar"}, timeout=0.3)
    assert request.headers == {"foo": "bar"}
    assert request.timeout == 0.3
    client.validate(204)
    with pytest.raises(ServerError):
        client.validate(404, b"missing")
    assert client.decode(b'{"name": "x"}', dict) == {"name": "x"}


@pytest.mark.asyncio
async def test_response_helper(client, base_url, encoded_model):
    raw = await client.response(client.build_request(base_url))
    assert raw.body == encoded_model
    assert raw.status_code == 200


@pytest.mark.asyncio
async def test_concurrent_calls_do_not_interfere(base_url):
    transport = StubTransport()

    async def echo(request):
        await asyncio.sleep(0)
        transport.requests.append(request)
        return request.url.encode(), ResponseMetadata(status_code=200)

    transport.send = echo
    client = RestClient(base_url, transport=transport)

    paths = [f"/items/{i}" for i in range(20)]
    results = await asyncio.gather(
        *(client.get(p, response_type=bytes, decoder=_RawDecoder()) for p in paths)
    )
    assert results == [f"https://www.example.com{p}".encode() for p in paths]
    assert len(transport.requests) == 20


class _RawDecoder:
    def decode(self, data, response_type):
        return response_type(data)


@pytest.mark.asyncio
async def test_context_manager_closes_owned_transport(base_url):
    async with RestClient(base_url) as client:
        assert isinstance(client.transport, HTTPXTransport)
    assert client.transport.client.is_closed
