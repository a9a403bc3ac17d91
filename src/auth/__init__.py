"""Secret handling for stored shop credentials."""

from .crypto import encrypt_secret, decrypt_secret, generate_encryption_key

__all__ = [
    "encrypt_secret",
    "decrypt_secret",
    "generate_encryption_key",
]
