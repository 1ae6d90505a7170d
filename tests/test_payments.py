"""Tests for payment verification."""

import logging

import httpx
import pytest

from src.core.settings import Settings
from src.services.payments import verify_payment

GATEWAY = "https://gateway.test/v3"


def _settings(environment="test", secret="FLWSECK_TEST-123"):
    return Settings(
        environment=environment,
        flutterwave_secret_key=secret,
        payment_gateway_url=GATEWAY,
    )


def _client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def _gateway_reply(status_code=200, body=None, calls=None):
    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        return httpx.Response(status_code, json=body if body is not None else {})
    return handler


SUCCESS = {"status": "success", "data": {"status": "successful", "amount": 7000}}


@pytest.mark.asyncio
@pytest.mark.parametrize("reference", ["mock-anything", "mock-", "TRIAL"])
async def test_bypass_references_outside_production(reference):
    calls = []
    async with _client(_gateway_reply(body=SUCCESS, calls=calls)) as client:
        assert await verify_payment(reference, settings=_settings(), client=client) is True
    assert calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize("reference", ["mock-anything", "TRIAL"])
async def test_bypass_references_go_to_gateway_in_production(reference):
    calls = []
    failed = {"status": "error", "message": "No transaction was found"}
    async with _client(_gateway_reply(404, failed, calls)) as client:
        result = await verify_payment(reference, settings=_settings("production"), client=client)

    assert result is False
    assert len(calls) == 1
    assert calls[0].url.path == f"/v3/transactions/{reference}/verify"


@pytest.mark.asyncio
async def test_successful_verification_sends_bearer_token():
    calls = []
    async with _client(_gateway_reply(body=SUCCESS, calls=calls)) as client:
        result = await verify_payment("1234567", settings=_settings("production"), client=client)

    assert result is True
    request = calls[0]
    assert request.method == "GET"
    assert str(request.url) == f"{GATEWAY}/transactions/1234567/verify"
    assert request.headers["Authorization"] == "Bearer FLWSECK_TEST-123"


@pytest.mark.asyncio
async def test_missing_secret_key_fails_without_network(caplog):
    calls = []
    async with _client(_gateway_reply(body=SUCCESS, calls=calls)) as client:
        with caplog.at_level(logging.ERROR, logger="src.services.payments"):
            result = await verify_payment("1234567", settings=_settings(secret=None), client=client)

    assert result is False
    assert calls == []
    assert "Missing FLUTTERWAVE_SECRET_KEY" in caplog.text


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [
    {"status": "success", "data": {"status": "failed"}},
    {"status": "error", "data": {"status": "successful"}},
    {"status": "success"},
    {"status": "success", "data": None},
])
async def test_unsuccessful_payloads(body):
    async with _client(_gateway_reply(body=body)) as client:
        assert await verify_payment("1234567", settings=_settings(), client=client) is False


@pytest.mark.asyncio
async def test_non_2xx_response():
    async with _client(_gateway_reply(500, SUCCESS)) as client:
        assert await verify_payment("1234567", settings=_settings(), client=client) is False


@pytest.mark.asyncio
async def test_malformed_body():
    def handler(request):
        return httpx.Response(200, content=b"<html>gateway error</html>")

    async with _client(handler) as client:
        assert await verify_payment("1234567", settings=_settings(), client=client) is False


@pytest.mark.asyncio
async def test_network_errors_return_false():
    def handler(request):
        raise httpx.ConnectTimeout("timed out", request=request)

    async with _client(handler) as client:
        assert await verify_payment("1234567", settings=_settings(), client=client) is False
