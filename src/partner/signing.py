"""Request signing for the partner platform API."""

import hmac
import hashlib


def sign(secret: str, partner_id: int, path: str, timestamp: int) -> str:
    """Compute the platform signature for a partner-level request.

    The platform signs the concatenation of partner id, request path and
    unix timestamp (seconds) with HMAC-SHA256 keyed by the partner secret.

    Args:
        secret: Partner secret (signing key)
        partner_id: Numeric partner id
        path: API path, e.g. /api/v2/auth/access_token/get
        timestamp: Unix time in seconds

    Returns:
        Lowercase hex digest
    """
    message = f"{partner_id}{path}{timestamp}"
    return hmac.new(
        secret.encode(),
        message.encode(),
        hashlib.sha256,
    ).hexdigest()


def verify_signature(
    signature: str,
    secret: str,
    partner_id: int,
    path: str,
    timestamp: int,
) -> bool:
    """Check a signature against the expected value.

    Returns:
        True if the signature matches, False otherwise
    """
    if not signature:
        return False

    expected = sign(secret, partner_id, path, timestamp)

    # Timing-safe comparison
    return hmac.compare_digest(expected, signature.lower())
