"""Tests for the Fernet encryption service.

Tests cover:
- Encrypt/decrypt with the configured key
- Missing and malformed FERNET_KEY
- Wrong key and corrupted ciphertext
- Singleton behavior
- Key rotation with a comma-separated key list
"""

import pytest
from cryptography.fernet import Fernet

from planner.utils.encryption import (
    DecryptionError,
    EncryptionKeyMissing,
    EncryptionService,
    get_encryption_service,
    load_fernet_keys,
)


@pytest.fixture(autouse=True)
def reset_encryption_singleton():
    """Reset the EncryptionService singleton before and after each test."""
    EncryptionService.reset_instance()
    yield
    EncryptionService.reset_instance()


class TestEncryptionService:
    def test_encrypted_value_is_opaque_bytes(self, valid_fernet_key, monkeypatch):
        monkeypatch.setenv("FERNET_KEY", valid_fernet_key)
        service = get_encryption_service()

        encrypted = service.encrypt("AIzaSyExample")

        assert isinstance(encrypted, bytes)
        assert b"AIzaSyExample" not in encrypted
        assert service.decrypt(encrypted) == "AIzaSyExample"

    def test_missing_key_raises(self, monkeypatch):
        monkeypatch.delenv("FERNET_KEY", raising=False)

        with pytest.raises(EncryptionKeyMissing, match="FERNET_KEY"):
            get_encryption_service()

    def test_malformed_key_raises(self, monkeypatch):
        monkeypatch.setenv("FERNET_KEY", "not-a-fernet-key")

        with pytest.raises(EncryptionKeyMissing, match="Invalid FERNET_KEY"):
            get_encryption_service()

    def test_wrong_key_raises_decryption_error_with_owner(self, valid_fernet_key, monkeypatch):
        other = Fernet(Fernet.generate_key()).encrypt(b"secret")
        monkeypatch.setenv("FERNET_KEY", valid_fernet_key)

        with pytest.raises(DecryptionError) as exc_info:
            get_encryption_service().decrypt(other, user_id="user-1")

        assert exc_info.value.user_id == "user-1"
        assert "user_id=user-1" in str(exc_info.value)

    def test_corrupted_ciphertext_raises(self, valid_fernet_key, monkeypatch):
        monkeypatch.setenv("FERNET_KEY", valid_fernet_key)

        with pytest.raises(DecryptionError):
            get_encryption_service().decrypt(b"garbage")

    def test_service_is_a_singleton(self, valid_fernet_key, monkeypatch):
        monkeypatch.setenv("FERNET_KEY", valid_fernet_key)

        assert get_encryption_service() is get_encryption_service()


class TestKeyRotation:
    def test_old_ciphertext_readable_after_new_key_is_prepended(self, monkeypatch):
        old_key = Fernet.generate_key().decode()
        new_key = Fernet.generate_key().decode()
        monkeypatch.setenv("FERNET_KEY", old_key)
        stored = get_encryption_service().encrypt("AIza-old")

        EncryptionService.reset_instance()
        monkeypatch.setenv("FERNET_KEY", f"{new_key}, {old_key}")
        service = get_encryption_service()

        assert service.decrypt(stored) == "AIza-old"
        assert Fernet(new_key.encode()).decrypt(service.encrypt("AIza-new")) == b"AIza-new"

    def test_blank_entries_are_ignored(self, valid_fernet_key):
        assert len(load_fernet_keys(f" ,{valid_fernet_key},")) == 1

    def test_one_bad_key_in_list_is_rejected(self, valid_fernet_key):
        with pytest.raises(EncryptionKeyMissing):
            load_fernet_keys(f"{valid_fernet_key},short")
