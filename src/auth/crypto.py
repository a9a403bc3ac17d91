"""Encryption of shop secrets at rest."""

import os
import base64
import hashlib
from cryptography.fernet import Fernet, InvalidToken


def _get_encryption_key() -> bytes:
    """Get or derive encryption key from environment.

    Uses TOKEN_ENCRYPTION_KEY if set (must be valid Fernet key),
    otherwise derives a key from SECRET_KEY.
    """
    encryption_key = os.getenv("TOKEN_ENCRYPTION_KEY")
    if encryption_key:
        return encryption_key.encode()

    secret_key = os.getenv("SECRET_KEY", "dev-secret-key-change-in-production")
    # Fernet requires 32 url-safe base64-encoded bytes
    derived = hashlib.sha256(secret_key.encode()).digest()
    return base64.urlsafe_b64encode(derived)


def encrypt_secret(plaintext: str | None) -> str:
    """Encrypt a token or partner secret for storage.

    Args:
        plaintext: The secret to encrypt (access token, refresh token, partner secret)

    Returns:
        Fernet token as a string, or "" for empty input
    """
    if not plaintext:
        return ""

    f = Fernet(_get_encryption_key())
    return f.encrypt(plaintext.encode()).decode()


def decrypt_secret(ciphertext: str | None) -> str | None:
    """Decrypt a stored secret.

    Returns:
        Decrypted plaintext, or None if empty or undecryptable
    """
    if not ciphertext:
        return None

    try:
        f = Fernet(_get_encryption_key())
        return f.decrypt(ciphertext.encode()).decode()
    except InvalidToken:
        return None


def generate_encryption_key() -> str:
    """Generate a new Fernet key for TOKEN_ENCRYPTION_KEY."""
    return Fernet.generate_key().decode()
