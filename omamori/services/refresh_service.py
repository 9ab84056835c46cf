"""Refresh flow: re-fetch a scope's list and replace the cache only on success."""

import logging
from enum import StrEnum

from omamori.core.logging import span
from omamori.domain.scope import SCOPE_ORDER, Scope
from omamori.services import diagnostics, task_cache
from omamori.services.runtime import WidgetRuntime
from omamori.services.scope_resolver import resolve_scope


logger = logging.getLogger(__name__)


class RefreshOutcome(StrEnum):
    """What a scope refresh did to the cache."""

    SKIPPED = "skipped"  # No remote user id configured
    REFRESHED = "refreshed"
    RESTORED = "restored"  # Fetch failed, previous cache entry kept


async def refresh_scope(*, runtime: WidgetRuntime, scope: Scope, signal: bool = True) -> RefreshOutcome:
    """Pull a scope's tasks from the backend.

    The response body is stored as received. On failure the pre-fetch entry is
    written back, so good cached data is never replaced by an empty result.
    """
    with span("refresh_service.refresh_scope"):
        resolved = await resolve_scope(scope=scope, store=runtime.store, credentials=runtime.credentials)
        if not resolved.user_id:
            # Nothing was attempted, so there is nothing to signal
            logger.info("scope_refresh_skipped", extra={"scope": str(scope), "reason": "no user id"})
            return RefreshOutcome.SKIPPED

        backup = await task_cache.read_raw(runtime.store, scope)
        result = await runtime.sync_client.fetch_tasks(resolved.user_id)

        if result.success and result.raw_body is not None:
            await task_cache.write_raw(runtime.store, scope, result.raw_body)
            outcome = RefreshOutcome.REFRESHED
            logger.info("scope_refreshed", extra={"scope": str(scope), "count": len(result.tasks or [])})
        else:
            if backup is not None:
                await task_cache.write_raw(runtime.store, scope, backup)
            outcome = RefreshOutcome.RESTORED
            await diagnostics.record_error(
                runtime.store,
                operation=f"refresh {scope}",
                error=result.error or "empty response",
                clock=runtime.clock,
            )

        if signal:
            runtime.timeline.reload_all_timelines(reason=f"scope_refreshed:{scope}")
        return outcome


async def refresh_all(*, runtime: WidgetRuntime) -> dict[Scope, RefreshOutcome]:
    """Refresh every scope in order and signal one timeline reload."""
    with span("refresh_service.refresh_all"):
        outcomes = {scope: await refresh_scope(runtime=runtime, scope=scope, signal=False) for scope in SCOPE_ORDER}
        runtime.timeline.reload_all_timelines(reason="all_scopes_refreshed")
        return outcomes
