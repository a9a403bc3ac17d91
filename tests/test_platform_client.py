"""Tests for the partner platform client."""

from unittest.mock import AsyncMock, MagicMock, patch
from urllib.parse import parse_qs, unquote, urlparse

import httpx
import pytest

from src.config import Settings
from src.partner.client import (
    ACCESS_TOKEN_PATH,
    PlatformClient,
    RefreshResult,
    build_proxied_url,
    parse_refresh_response,
)


PINNED_SIGNATURE = "5ceba426e6a6a2f9fb72761d84a83353aa501661a52c5da17bc74500544fe7be"


def mock_http(response=None, side_effect=None):
    """Patch httpx.AsyncClient with an async context manager mock."""
    patcher = patch("httpx.AsyncClient")
    mock_client = patcher.start()
    mock_instance = AsyncMock()
    if side_effect is not None:
        mock_instance.post.side_effect = side_effect
    else:
        mock_instance.post.return_value = response
    mock_instance.__aenter__.return_value = mock_instance
    mock_instance.__aexit__.return_value = None
    mock_client.return_value = mock_instance
    return patcher, mock_client, mock_instance


def json_response(body):
    # MagicMock for sync json()
    response = MagicMock()
    response.json.return_value = body
    return response


class TestBuildUrls:
    """Tests for URL construction."""

    def test_refresh_url_is_signed(self):
        client = PlatformClient(base_url="https://partner.example.com")

        url = client.build_refresh_url(1000, "test-partner-secret", 1700000000)

        parsed = urlparse(url)
        assert f"{parsed.scheme}://{parsed.netloc}" == "https://partner.example.com"
        assert parsed.path == ACCESS_TOKEN_PATH
        params = parse_qs(parsed.query)
        assert params["partner_id"] == ["1000"]
        assert params["timestamp"] == ["1700000000"]
        assert params["sign"] == [PINNED_SIGNATURE]

    def test_trailing_slash_stripped(self):
        client = PlatformClient(base_url="https://partner.example.com/")
        assert client.build_refresh_url(1, "s", 1).startswith("https://partner.example.com/api/")

    def test_proxy_wraps_encoded_url(self):
        target = "https://partner.example.com/api/v2/auth/access_token/get?partner_id=1&sign=ab"

        proxied = build_proxied_url(target, "https://proxy.example.com/forward")

        assert proxied.startswith("https://proxy.example.com/forward?url=")
        encoded = proxied.split("?url=", 1)[1]
        assert "?" not in encoded
        assert "&" not in encoded
        assert unquote(encoded) == target

    def test_no_proxy_returns_target(self):
        assert build_proxied_url("https://a.example.com/x", None) == "https://a.example.com/x"
        assert build_proxied_url("https://a.example.com/x", "") == "https://a.example.com/x"

    def test_from_settings(self):
        settings = Settings(
            platform_base_url="https://partner.test-stable.example.com",
            platform_proxy_url="https://proxy.example.com",
            platform_timeout_seconds=5.0,
        )

        client = PlatformClient.from_settings(settings)

        assert client.base_url == "https://partner.test-stable.example.com"
        assert client.proxy_url == "https://proxy.example.com"
        assert client.timeout == 5.0


class TestRefresh:
    """Tests for PlatformClient.refresh with mocked HTTP."""

    @pytest.mark.asyncio
    async def test_successful_refresh(self):
        """Sends the refresh payload to the signed URL and parses tokens."""
        client = PlatformClient(base_url="https://partner.example.com")
        patcher, mock_client, mock_instance = mock_http(json_response({
            "error": "",
            "message": "",
            "access_token": "new-access",
            "refresh_token": "new-refresh",
            "expire_in": 14400,
        }))
        try:
            with patch("src.partner.client.time.time", return_value=1700000000):
                result = await client.refresh(1000, "test-partner-secret", "old-refresh", 555)
        finally:
            patcher.stop()

        assert result.success is True
        assert result.access_token == "new-access"
        assert result.refresh_token == "new-refresh"
        assert result.expire_in == 14400

        url = mock_instance.post.call_args.args[0]
        assert url == (
            "https://partner.example.com/api/v2/auth/access_token/get"
            f"?partner_id=1000&timestamp=1700000000&sign={PINNED_SIGNATURE}"
        )
        assert mock_instance.post.call_args.kwargs["json"] == {
            "refresh_token": "old-refresh",
            "partner_id": 1000,
            "shop_id": 555,
        }
        assert mock_client.call_args.kwargs["timeout"] == 30.0

    @pytest.mark.asyncio
    async def test_refresh_through_proxy(self):
        client = PlatformClient(
            base_url="https://partner.example.com",
            proxy_url="https://proxy.example.com/forward",
        )
        patcher, _, mock_instance = mock_http(json_response({
            "access_token": "a",
            "refresh_token": "r",
            "expire_in": 100,
        }))
        try:
            await client.refresh(1000, "secret", "old-refresh", 555)
        finally:
            patcher.stop()

        url = mock_instance.post.call_args.args[0]
        assert url.startswith("https://proxy.example.com/forward?url=https%3A%2F%2Fpartner.example.com")

    @pytest.mark.asyncio
    async def test_platform_error_uses_message(self):
        client = PlatformClient()
        patcher, _, _ = mock_http(json_response({
            "error": "error_auth",
            "message": "Invalid refresh_token",
        }))
        try:
            result = await client.refresh(1000, "secret", "bad", 555)
        finally:
            patcher.stop()

        assert result.success is False
        assert result.error_kind == "platform"
        assert result.error == "Invalid refresh_token"

    @pytest.mark.asyncio
    async def test_timeout_is_transport_error(self):
        client = PlatformClient()
        patcher, _, _ = mock_http(side_effect=httpx.ReadTimeout("timed out"))
        try:
            result = await client.refresh(1000, "secret", "tok", 555)
        finally:
            patcher.stop()

        assert result.success is False
        assert result.error_kind == "transport"
        assert "timed out" in result.error

    @pytest.mark.asyncio
    async def test_connection_error_is_transport_error(self):
        client = PlatformClient()
        patcher, _, _ = mock_http(side_effect=httpx.ConnectError("connection refused"))
        try:
            result = await client.refresh(1000, "secret", "tok", 555)
        finally:
            patcher.stop()

        assert result.success is False
        assert result.error_kind == "transport"
        assert "connection refused" in result.error

    @pytest.mark.asyncio
    async def test_non_json_body_is_transport_error(self):
        client = PlatformClient()
        response = MagicMock()
        response.json.side_effect = ValueError("Expecting value")
        patcher, _, _ = mock_http(response)
        try:
            result = await client.refresh(1000, "secret", "tok", 555)
        finally:
            patcher.stop()

        assert result.success is False
        assert result.error_kind == "transport"
        assert result.error == "Malformed response from platform"


class TestParseRefreshResponse:
    """Tests for response body interpretation."""

    @pytest.mark.parametrize("sentinel", ["", "-", None])
    def test_no_error_sentinels(self, sentinel):
        body = {"access_token": "a", "refresh_token": "r", "expire_in": 3600}
        if sentinel is not None:
            body["error"] = sentinel

        result = parse_refresh_response(body)

        assert result == RefreshResult(success=True, access_token="a", refresh_token="r", expire_in=3600)

    def test_error_without_message_uses_error_code(self):
        result = parse_refresh_response({"error": "error_param", "message": ""})
        assert result.error == "error_param"
        assert result.error_kind == "platform"

    def test_missing_tokens(self):
        result = parse_refresh_response({"error": "", "access_token": "a", "expire_in": 3600})
        assert result.success is False
        assert result.error == "Platform response missing tokens"

    def test_missing_expire_in(self):
        result = parse_refresh_response({"access_token": "a", "refresh_token": "r"})
        assert result.success is False
        assert result.error == "Platform response missing expire_in"

    @pytest.mark.parametrize("expire_in", [0, -5])
    def test_non_positive_expire_in(self, expire_in):
        result = parse_refresh_response({"access_token": "a", "refresh_token": "r", "expire_in": expire_in})
        assert result.success is False
        assert result.error == f"Invalid expire_in: {expire_in}"

    def test_string_expire_in_accepted(self):
        result = parse_refresh_response({"access_token": "a", "refresh_token": "r", "expire_in": "14400"})
        assert result.expire_in == 14400

    def test_non_object_body(self):
        result = parse_refresh_response(["unexpected"])
        assert result.success is False
        assert result.error_kind == "transport"
