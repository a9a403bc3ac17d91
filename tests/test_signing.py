"""Tests for platform request signing."""

import hashlib
import hmac

from src.partner.signing import sign, verify_signature


ACCESS_TOKEN_PATH = "/api/v2/auth/access_token/get"

# HMAC-SHA256("test-partner-secret", "1000/api/v2/auth/access_token/get1700000000")
PINNED_SIGNATURE = "5ceba426e6a6a2f9fb72761d84a83353aa501661a52c5da17bc74500544fe7be"


class TestSign:
    """Tests for sign()."""

    def test_pinned_vector(self):
        """Signature must match the fixed wire-compatible vector."""
        assert sign("test-partner-secret", 1000, ACCESS_TOKEN_PATH, 1700000000) == PINNED_SIGNATURE

    def test_deterministic(self):
        first = sign("test-partner-secret", 1000, ACCESS_TOKEN_PATH, 1700000000)
        second = sign("test-partner-secret", 1000, ACCESS_TOKEN_PATH, 1700000000)
        assert first == second

    def test_lowercase_hex(self):
        signature = sign("test-partner-secret", 1000, ACCESS_TOKEN_PATH, 1700000000)
        assert len(signature) == 64
        assert signature == signature.lower()
        int(signature, 16)

    def test_matches_stdlib_hmac(self):
        """Message is partner_id + path + timestamp, keyed by the secret."""
        expected = hmac.new(
            b"another-secret",
            b"2002/api/v2/shop/get_shop_info1712345678",
            hashlib.sha256,
        ).hexdigest()
        assert sign("another-secret", 2002, "/api/v2/shop/get_shop_info", 1712345678) == expected

    def test_timestamp_changes_signature(self):
        assert sign("test-partner-secret", 1000, ACCESS_TOKEN_PATH, 1700000001) == (
            "52bb4d3ac8999603c9e6082c9d0cead21dc96fa8187a610669079f47c18b8a77"
        )

    def test_secret_changes_signature(self):
        assert sign("other", 1000, ACCESS_TOKEN_PATH, 1700000000) != PINNED_SIGNATURE


class TestVerifySignature:
    """Tests for verify_signature()."""

    def test_valid_signature(self):
        assert verify_signature(
            PINNED_SIGNATURE, "test-partner-secret", 1000, ACCESS_TOKEN_PATH, 1700000000
        ) is True

    def test_uppercase_signature_accepted(self):
        assert verify_signature(
            PINNED_SIGNATURE.upper(), "test-partner-secret", 1000, ACCESS_TOKEN_PATH, 1700000000
        ) is True

    def test_invalid_signature(self):
        assert verify_signature("deadbeef", "test-partner-secret", 1000, ACCESS_TOKEN_PATH, 1700000000) is False

    def test_empty_signature(self):
        assert verify_signature("", "test-partner-secret", 1000, ACCESS_TOKEN_PATH, 1700000000) is False
