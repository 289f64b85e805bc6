"""Encryption at rest for user-supplied Gemini API keys.

FERNET_KEY holds one or more comma-separated Fernet keys, newest first.
New values are always encrypted with the first key; decryption accepts any
of them, so a key can be rotated by prepending a new one and keeping the
old one until every stored value has been re-saved.

Generate a key with ``Fernet.generate_key()``.

Security Notes:
    - NEVER log plaintext keys or ciphertext
    - Ciphertext is stored as bytes (``user_settings.gemini_key_encrypted``)
"""

import os
from typing import ClassVar

from cryptography.fernet import Fernet, InvalidToken, MultiFernet


class EncryptionKeyMissing(Exception):
    """FERNET_KEY is unset or not a valid Fernet key list."""


class DecryptionError(Exception):
    """Stored ciphertext could not be decrypted with any configured key.

    Attributes:
        user_id: Owner of the stored value, for log context.
    """

    def __init__(self, message: str, user_id: str | None = None) -> None:
        self.user_id = user_id
        super().__init__(message)

    def __str__(self) -> str:
        message = super().__str__()
        return f"{message} (user_id={self.user_id})" if self.user_id else message


def load_fernet_keys(raw: str | None) -> list[Fernet]:
    """Parse the FERNET_KEY value into Fernet instances, newest first.

    Raises:
        EncryptionKeyMissing: No key given, or a key is malformed.
    """
    keys = [part.strip() for part in (raw or "").split(",") if part.strip()]
    if not keys:
        raise EncryptionKeyMissing(
            "FERNET_KEY environment variable is required. "
            "Generate a key using: Fernet.generate_key()"
        )
    try:
        return [Fernet(key.encode()) for key in keys]
    except ValueError as e:
        raise EncryptionKeyMissing(
            "Invalid FERNET_KEY format: each key must be 32 url-safe base64-encoded bytes."
        ) from e


class EncryptionService:
    """Encrypts and decrypts API keys with the configured Fernet keys.

    One process-wide instance, built on first use; ``reset_instance`` lets
    tests swap FERNET_KEY.

    Raises:
        EncryptionKeyMissing: FERNET_KEY is unset or malformed.
    """

    _instance: ClassVar["EncryptionService | None"] = None

    def __init__(self, keys: list[Fernet]) -> None:
        self._cipher = MultiFernet(keys)

    @classmethod
    def instance(cls) -> "EncryptionService":
        if cls._instance is None:
            cls._instance = cls(load_fernet_keys(os.environ.get("FERNET_KEY")))
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        cls._instance = None

    def encrypt(self, plaintext: str) -> bytes:
        """Encrypt with the newest key."""
        return self._cipher.encrypt(plaintext.encode())

    def decrypt(self, ciphertext: bytes, user_id: str | None = None) -> str:
        """Decrypt with whichever configured key produced ``ciphertext``.

        Raises:
            DecryptionError: No key matches, or the data is corrupted.
        """
        try:
            return self._cipher.decrypt(ciphertext).decode()
        except InvalidToken as e:
            raise DecryptionError(
                "Decryption failed: invalid encryption key or corrupted data",
                user_id=user_id,
            ) from e
        except (TypeError, UnicodeDecodeError) as e:
            raise DecryptionError(
                f"Decryption failed: {type(e).__name__}",
                user_id=user_id,
            ) from e


def get_encryption_service() -> EncryptionService:
    """Return the process-wide EncryptionService.

    Raises:
        EncryptionKeyMissing: FERNET_KEY is unset or malformed.
    """
    return EncryptionService.instance()
