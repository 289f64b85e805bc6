"""Per-user settings with an encrypted Gemini API key.

This service owns every read and write of ``UserSettings.gemini_key_encrypted``.
The plaintext key is only ever returned to the generation service; API
responses carry API_KEY_MASK or null.

Key resolution for generation:
    1. The caller's stored key
    2. The shared DEFAULT_GEMINI_API_KEY, at most SHARED_GEMINI_DAILY_LIMIT
       times per user per UTC day
    3. Otherwise ConfigurationError

Security Notes:
    - NEVER log plaintext or encrypted keys, only their presence
    - A client echoing API_KEY_MASK back does not overwrite the stored key
"""

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from planner.config import get_default_gemini_api_key, get_shared_gemini_daily_limit
from planner.exceptions import ConfigurationError
from planner.models import UserSettings, utcnow
from planner.schemas import API_KEY_MASK, SettingsResponse
from planner.utils.encryption import (
    DecryptionError,
    EncryptionKeyMissing,
    get_encryption_service,
)

log = structlog.get_logger(__name__)

MISSING_KEY_MESSAGE = "Gemini API key not configured. Please add your API key in Settings."
SHARED_LIMIT_MESSAGE = (
    "Daily limit for the shared Gemini API key reached. "
    "Please add your API key in Settings."
)


class SettingsService:
    """Reads and writes user settings, masking the stored Gemini key.

    Example:
        >>> service = SettingsService()
        >>> await service.update_settings(session, "user-1", "AIza...")
        >>> key = await service.resolve_generation_key(session, "user-1")
    """

    async def _get_row(self, session: AsyncSession, user_id: str) -> UserSettings | None:
        result = await session.execute(
            select(UserSettings).where(UserSettings.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def _get_or_create_row(self, session: AsyncSession, user_id: str) -> UserSettings:
        row = await self._get_row(session, user_id)
        if row is None:
            row = UserSettings(user_id=user_id, shared_key_uses=0)
            session.add(row)
        return row

    @staticmethod
    def _to_response(row: UserSettings | None, user_id: str) -> SettingsResponse:
        if row is None:
            return SettingsResponse(user_id=user_id, gemini_api_key=None)
        return SettingsResponse(
            id=row.id,
            user_id=row.user_id,
            gemini_api_key=API_KEY_MASK if row.gemini_key_encrypted else None,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    async def get_settings(self, session: AsyncSession, user_id: str) -> SettingsResponse:
        """Return the caller's settings, or an empty record if none exist yet."""
        row = await self._get_row(session, user_id)
        return self._to_response(row, user_id)

    async def update_settings(
        self,
        session: AsyncSession,
        user_id: str,
        gemini_api_key: str | None,
        *,
        key_provided: bool = True,
    ) -> SettingsResponse:
        """Create or update the caller's settings.

        Args:
            gemini_api_key: New key; null or blank clears the stored key.
            key_provided: False when the request body omitted the field, in
                which case the stored key is left untouched.

        Raises:
            ConfigurationError: FERNET_KEY missing or malformed.
        """
        row = await self._get_or_create_row(session, user_id)

        if key_provided:
            key = (gemini_api_key or "").strip()
            if key == API_KEY_MASK:
                log.info("settings_key_unchanged", user_id=user_id)
            elif key:
                try:
                    row.gemini_key_encrypted = get_encryption_service().encrypt(key)
                except EncryptionKeyMissing as e:
                    log.error("settings_encryption_unavailable", user_id=user_id)
                    raise ConfigurationError("Encryption key not configured") from e
            else:
                row.gemini_key_encrypted = None

        row.updated_at = utcnow()
        await session.flush()
        await session.refresh(row)

        log.info(
            "settings_updated",
            user_id=user_id,
            has_gemini_key=row.gemini_key_encrypted is not None,
        )
        return self._to_response(row, user_id)

    async def get_gemini_api_key(self, session: AsyncSession, user_id: str) -> str | None:
        """Return the caller's decrypted Gemini key, or None if none is stored.

        Raises:
            ConfigurationError: The stored key cannot be decrypted.
        """
        row = await self._get_row(session, user_id)
        if row is None or row.gemini_key_encrypted is None:
            return None
        try:
            return get_encryption_service().decrypt(row.gemini_key_encrypted, user_id=user_id)
        except (DecryptionError, EncryptionKeyMissing) as e:
            log.error("settings_key_decrypt_failed", user_id=user_id)
            raise ConfigurationError(
                "Stored Gemini API key could not be read. Please re-enter it in Settings."
            ) from e

    async def resolve_generation_key(self, session: AsyncSession, user_id: str) -> str:
        """Pick the Gemini key for a generation request.

        Consumes one shared-key use when falling back to the shared key. The
        caller commits the session before calling Gemini.

        Raises:
            ConfigurationError: No usable key for this caller.
        """
        own_key = await self.get_gemini_api_key(session, user_id)
        if own_key:
            return own_key

        shared_key = get_default_gemini_api_key()
        daily_limit = get_shared_gemini_daily_limit()
        if not shared_key or daily_limit == 0:
            log.warning("gemini_key_missing", user_id=user_id)
            raise ConfigurationError(MISSING_KEY_MESSAGE)

        row = await self._get_or_create_row(session, user_id)
        today = utcnow().date()
        if row.shared_key_uses_on != today:
            row.shared_key_uses_on = today
            row.shared_key_uses = 0
        if row.shared_key_uses >= daily_limit:
            log.warning(
                "shared_gemini_limit_reached",
                user_id=user_id,
                daily_limit=daily_limit,
            )
            raise ConfigurationError(SHARED_LIMIT_MESSAGE)

        row.shared_key_uses += 1
        await session.flush()
        log.info(
            "shared_gemini_key_used",
            user_id=user_id,
            uses_today=row.shared_key_uses,
            daily_limit=daily_limit,
        )
        return shared_key
