"""Partner platform API access."""

from .signing import sign, verify_signature
from .client import (
    ACCESS_TOKEN_PATH,
    PlatformClient,
    RefreshResult,
    build_proxied_url,
    parse_refresh_response,
)

__all__ = [
    "sign",
    "verify_signature",
    "ACCESS_TOKEN_PATH",
    "PlatformClient",
    "RefreshResult",
    "build_proxied_url",
    "parse_refresh_response",
]
