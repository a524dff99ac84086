"""Symmetric field encryption for sensitive record text."""

import base64
from typing import Union

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from speechpro.config import Settings
from speechpro.services.exceptions import EncryptionError


def derive_key(secret: str, salt: str, iterations: int = 390_000) -> bytes:
    """Derive a Fernet key from a secret with PBKDF2-HMAC-SHA256."""
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=salt.encode("utf-8"),
        iterations=iterations,
    )
    return base64.urlsafe_b64encode(kdf.derive(secret.encode("utf-8")))


class FieldCipher:
    """
    Encrypts and decrypts single text fields.

    Tokens are Fernet tokens (AES-128-CBC with an HMAC-SHA256 tag), so each
    ciphertext is self-contained and a token from another key fails to
    decrypt instead of producing garbage.
    """

    def __init__(self, key: Union[str, bytes]):
        try:
            self._fernet = Fernet(key)
        except (ValueError, TypeError) as e:
            raise EncryptionError(f"Invalid encryption key: {e}") from e

    @classmethod
    def from_settings(cls, settings: Settings) -> "FieldCipher":
        """Build a cipher from the configured key, deriving one if needed."""
        if settings.encryption_key:
            return cls(settings.encryption_key)
        return cls(
            derive_key(
                settings.secret_key,
                settings.encryption_salt,
                settings.encryption_kdf_iterations,
            )
        )

    def encrypt(self, plaintext: str) -> str:
        """Encrypt a string into a urlsafe base64 token."""
        try:
            return self._fernet.encrypt(plaintext.encode("utf-8")).decode("ascii")
        except (AttributeError, UnicodeError, TypeError) as e:
            raise EncryptionError(f"Encryption failed: {e}") from e

    def decrypt(self, token: str) -> str:
        """Decrypt a token produced by encrypt()."""
        try:
            return self._fernet.decrypt(token.encode("ascii")).decode("utf-8")
        except (InvalidToken, AttributeError, UnicodeError, TypeError) as e:
            raise EncryptionError("Decryption failed: invalid key or corrupted data") from e
