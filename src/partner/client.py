"""Partner platform client for access token renewal."""

import logging
import time
from dataclasses import dataclass
from urllib.parse import quote

import httpx

from src.config import DEFAULT_PLATFORM_BASE_URL
from src.partner.signing import sign

logger = logging.getLogger(__name__)


# Access token exchange endpoint (refresh_token -> new token pair)
ACCESS_TOKEN_PATH = "/api/v2/auth/access_token/get"

# The platform reports "no error" as an empty string or a dash
NO_ERROR_SENTINELS = ("", "-")


@dataclass
class RefreshResult:
    """Outcome of a token exchange call."""

    success: bool
    access_token: str | None = None
    refresh_token: str | None = None
    expire_in: int | None = None  # seconds
    error: str | None = None
    error_kind: str | None = None  # "platform" or "transport"

    @classmethod
    def platform_error(cls, message: str) -> "RefreshResult":
        return cls(success=False, error=message, error_kind="platform")

    @classmethod
    def transport_error(cls, message: str) -> "RefreshResult":
        return cls(success=False, error=message, error_kind="transport")


def build_proxied_url(url: str, proxy_url: str | None) -> str:
    """Wrap a target URL in the forwarding proxy, if one is configured."""
    if not proxy_url:
        return url
    return f"{proxy_url}?url={quote(url, safe='')}"


class PlatformClient:
    """Signed HTTP client for the partner platform auth API."""

    def __init__(
        self,
        base_url: str = DEFAULT_PLATFORM_BASE_URL,
        proxy_url: str | None = None,
        timeout: float = 30.0,
    ):
        """Initialize the client.

        Args:
            base_url: Platform API host, without trailing slash
            proxy_url: Optional forwarding endpoint that receives ?url=<target>
            timeout: Request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.proxy_url = proxy_url
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings) -> "PlatformClient":
        return cls(
            base_url=settings.platform_base_url,
            proxy_url=settings.platform_proxy_url,
            timeout=settings.platform_timeout_seconds,
        )

    def build_refresh_url(self, partner_id: int, secret: str, timestamp: int) -> str:
        """Build the signed token exchange URL (before proxy wrapping)."""
        signature = sign(secret, partner_id, ACCESS_TOKEN_PATH, timestamp)
        return (
            f"{self.base_url}{ACCESS_TOKEN_PATH}"
            f"?partner_id={partner_id}&timestamp={timestamp}&sign={signature}"
        )

    async def refresh(
        self,
        partner_id: int,
        secret: str,
        refresh_token: str,
        shop_id: int,
    ) -> RefreshResult:
        """Exchange a refresh token for a new access/refresh token pair.

        Platform-reported errors and transport failures are returned as
        unsuccessful results rather than raised.

        Args:
            partner_id: Partner id used for signing
            secret: Partner secret used for signing
            refresh_token: Current refresh token for the shop
            shop_id: Platform shop id

        Returns:
            RefreshResult with the new tokens or an error message
        """
        timestamp = int(time.time())
        url = build_proxied_url(
            self.build_refresh_url(partner_id, secret, timestamp),
            self.proxy_url,
        )
        payload = {
            "refresh_token": refresh_token,
            "partner_id": partner_id,
            "shop_id": shop_id,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(url, json=payload)
                data = response.json()
        except httpx.TimeoutException:
            logger.warning("Token exchange timed out for shop %s", shop_id)
            return RefreshResult.transport_error("Request to platform timed out")
        except httpx.HTTPError as e:
            logger.warning("Token exchange transport error for shop %s: %s", shop_id, e)
            return RefreshResult.transport_error(f"Platform unreachable: {e}")
        except ValueError:
            # json() raises ValueError (JSONDecodeError) on a non-JSON body
            logger.warning("Token exchange returned non-JSON body for shop %s", shop_id)
            return RefreshResult.transport_error("Malformed response from platform")

        return parse_refresh_response(data)


def parse_refresh_response(data) -> RefreshResult:
    """Turn a token exchange JSON body into a RefreshResult."""
    if not isinstance(data, dict):
        return RefreshResult.transport_error("Malformed response from platform")

    error = data.get("error")
    if error is not None and str(error) not in NO_ERROR_SENTINELS:
        return RefreshResult.platform_error(data.get("message") or str(error))

    access_token = data.get("access_token")
    refresh_token = data.get("refresh_token")
    if not access_token or not refresh_token:
        return RefreshResult.platform_error("Platform response missing tokens")

    try:
        expire_in = int(data.get("expire_in"))
    except (TypeError, ValueError):
        return RefreshResult.platform_error("Platform response missing expire_in")

    if expire_in <= 0:
        return RefreshResult.platform_error(f"Invalid expire_in: {expire_in}")

    return RefreshResult(
        success=True,
        access_token=access_token,
        refresh_token=refresh_token,
        expire_in=expire_in,
    )
