"""Cross-cutting utilities for the planner service.

Utilities should be pure functions or singletons without business logic.

Modules:
    encryption: Fernet symmetric encryption for stored API keys.
    logging: structlog configuration.
"""

from planner.utils.encryption import (
    DecryptionError,
    EncryptionKeyMissing,
    EncryptionService,
    get_encryption_service,
    load_fernet_keys,
)

__all__ = [
    "DecryptionError",
    "EncryptionKeyMissing",
    "EncryptionService",
    "get_encryption_service",
    "load_fernet_keys",
]
