"""Resolve a viewing scope to its cache key, remote user id and display name."""

from pydantic import BaseModel, Field

from omamori.core.kv_store import KeyValueStore
from omamori.domain.scope import SCOPE_KEYS, Scope
from omamori.services.credential_store import CredentialStore


class ResolvedScope(BaseModel):
    """Everything the engine needs to know about one scope."""

    scope: Scope
    cache_key: str
    user_id: str | None = Field(default=None, description="Remote user id, None if not configured")
    display_name: str | None = Field(default=None, description="Partner display name from the host app")

    @property
    def is_owner(self) -> bool:
        return self.scope.is_owner

    @property
    def header(self) -> str:
        if self.scope.is_owner:
            return SCOPE_KEYS[self.scope].default_label
        if self.display_name:
            return self.display_name.upper()
        return SCOPE_KEYS[self.scope].default_label


async def resolve_scope(*, scope: Scope, store: KeyValueStore, credentials: CredentialStore) -> ResolvedScope:
    keys = SCOPE_KEYS[scope]
    display_name = await store.get(keys.name_key) if keys.name_key else None
    return ResolvedScope(
        scope=scope,
        cache_key=keys.cache_key,
        user_id=await credentials.get_user_id(scope),
        display_name=display_name or None,
    )
