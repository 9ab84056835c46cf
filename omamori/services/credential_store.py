"""Credential store: backend URL, API key, rotating tokens and scope user ids."""

import logging

from pydantic import BaseModel

from omamori.core.config import Constants, Settings
from omamori.core.kv_store import KeyValueStore
from omamori.domain.scope import SCOPE_KEYS, Scope


logger = logging.getLogger(__name__)


class Credentials(BaseModel):
    """Snapshot of the current auth material."""

    url: str | None = None
    anon_key: str | None = None
    access_token: str | None = None
    refresh_token: str | None = None

    def missing_fields(self) -> list[str]:
        """Names of the values required for an authenticated request that are unset."""
        required = {"url": self.url, "anon_key": self.anon_key, "access_token": self.access_token}
        return [name for name, value in required.items() if not value]

    @property
    def is_configured(self) -> bool:
        return not self.missing_fields()

    @property
    def base_url(self) -> str:
        return (self.url or "").rstrip("/")


class CredentialStore:
    """Single source of auth truth, backed by the shared key-value store.

    Values written by the host app win over the seed values from settings.
    """

    def __init__(self, store: KeyValueStore, settings: Settings | None = None) -> None:
        self._store = store
        self._settings = settings

    async def load(self) -> Credentials:
        url = await self._store.get(Constants.BACKEND_URL_KEY)
        anon_key = await self._store.get(Constants.ANON_KEY_KEY)
        if self._settings is not None:
            url = url or self._settings.supabase_url
            anon_key = anon_key or self._settings.supabase_anon_key
        return Credentials(
            url=url,
            anon_key=anon_key,
            access_token=await self._store.get(Constants.ACCESS_TOKEN_KEY),
            refresh_token=await self._store.get(Constants.REFRESH_TOKEN_KEY),
        )

    async def save_tokens(self, *, access_token: str, refresh_token: str) -> bool:
        """Overwrite both tokens, or neither.

        If the refresh token cannot be written the previous access token is put
        back, so the stored pair always belongs together.
        """
        previous_access = await self._store.get(Constants.ACCESS_TOKEN_KEY)
        if not await self._store.set(Constants.ACCESS_TOKEN_KEY, access_token):
            logger.error("credential_token_write_failed", extra={"key": Constants.ACCESS_TOKEN_KEY})
            return False

        if not await self._store.set(Constants.REFRESH_TOKEN_KEY, refresh_token):
            if previous_access is None:
                restored = await self._store.delete(Constants.ACCESS_TOKEN_KEY)
            else:
                restored = await self._store.set(Constants.ACCESS_TOKEN_KEY, previous_access)
            logger.error(
                "credential_token_write_failed",
                extra={"key": Constants.REFRESH_TOKEN_KEY, "access_token_restored": restored},
            )
            return False

        logger.info("credential_tokens_rotated")
        return True

    async def save_backend(self, *, url: str, anon_key: str) -> bool:
        url_saved = await self._store.set(Constants.BACKEND_URL_KEY, url)
        key_saved = await self._store.set(Constants.ANON_KEY_KEY, anon_key)
        return url_saved and key_saved

    async def get_user_id(self, scope: Scope) -> str | None:
        """Remote user id configured for a scope, if any."""
        user_id = await self._store.get(SCOPE_KEYS[scope].user_id_key)
        return user_id or None

    async def save_user_id(self, scope: Scope, user_id: str) -> bool:
        return await self._store.set(SCOPE_KEYS[scope].user_id_key, user_id)
