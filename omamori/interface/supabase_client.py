"""REST client for the remote task table with one-shot re-authentication."""

import logging
from dataclasses import dataclass
from typing import Any

import httpx
from pydantic import BaseModel, Field, ValidationError

from omamori.core.config import constants
from omamori.core.errors import SyncError, SyncErrorKind, classify_transport_error, misconfigured
from omamori.core.logging import span
from omamori.domain.task import TaskRecord, decode_task_list
from omamori.services.credential_store import CredentialStore
from omamori.services.token_refresher import TokenRefresher


logger = logging.getLogger(__name__)


class SyncResult(BaseModel):
    """Result of a remote task operation."""

    success: bool = Field(..., description="Whether the backend accepted the request")
    attempts: int = Field(default=0, description="HTTP attempts made against the task endpoint")
    tasks: list[TaskRecord] | None = Field(default=None, description="Fetched tasks, ordered by created_at")
    raw_body: str | None = Field(default=None, description="Fetched response body as received")
    error: SyncError | None = Field(default=None, description="Failure details")


@dataclass
class _Exchange:
    response: httpx.Response | None
    attempts: int
    error: SyncError | None = None


class SupabaseTaskClient:
    """Authenticated PATCH / GET against {base_url}/rest/v1/tasks.

    A 401 on the first attempt triggers one token refresh and exactly one retry.
    """

    def __init__(
        self,
        credentials: CredentialStore,
        refresher: TokenRefresher,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = constants.API_TIMEOUT_SECONDS,
    ) -> None:
        self._credentials = credentials
        self._refresher = refresher
        self._transport = transport
        self._timeout = timeout

    async def patch_task(self, task_id: str, fields: dict[str, Any]) -> SyncResult:
        """Send a partial update (wire-keyed fields) for one task."""
        with span("supabase_client.patch_task"):
            exchange = await self._send(
                "PATCH",
                params={"id": f"eq.{task_id}"},
                json_body=fields,
                extra_headers={"Prefer": "return=minimal"},
            )
            if exchange.error is not None:
                return self._fail("patch_task", exchange.error, exchange.attempts, task_id=task_id)

            logger.info("task_patch_accepted", extra={"task_id": task_id, "attempts": exchange.attempts})
            return SyncResult(success=True, attempts=exchange.attempts)

    async def fetch_tasks(self, user_id: str) -> SyncResult:
        """Fetch every task of one remote user ordered by created_at ascending."""
        with span("supabase_client.fetch_tasks"):
            exchange = await self._send(
                "GET",
                params={"user_id": f"eq.{user_id}", "order": "created_at"},
            )
            response = exchange.response
            if exchange.error is not None or response is None:
                error = exchange.error or SyncError(kind=SyncErrorKind.SERVER_REJECTED, message="No response")
                return self._fail("fetch_tasks", error, exchange.attempts, user_id=user_id)

            try:
                tasks = decode_task_list(response.content)
            except ValidationError as e:
                error = SyncError(
                    kind=SyncErrorKind.SERVER_REJECTED,
                    message=f"Malformed task list: {e.error_count()} validation error(s)",
                    status_code=response.status_code,
                )
                return self._fail("fetch_tasks", error, exchange.attempts, user_id=user_id)

            logger.info("task_fetch_succeeded", extra={"user_id": user_id, "count": len(tasks)})
            return SyncResult(
                success=True,
                attempts=exchange.attempts,
                tasks=tasks,
                raw_body=response.text,
            )

    async def _send(
        self,
        method: str,
        *,
        params: dict[str, str],
        json_body: dict[str, Any] | None = None,
        extra_headers: dict[str, str] | None = None,
    ) -> _Exchange:
        creds = await self._credentials.load()
        missing = creds.missing_fields()
        if missing:
            return _Exchange(response=None, attempts=0, error=misconfigured(f"Missing credentials: {', '.join(missing)}"))

        url = f"{creds.base_url}{constants.REST_TASKS_PATH}"
        token = creds.access_token or ""
        attempts = 0

        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            while True:
                attempts += 1
                headers = {
                    "apikey": creds.anon_key or "",
                    "Authorization": f"Bearer {token}",
                    "Content-Type": "application/json",
                    **(extra_headers or {}),
                }
                try:
                    response = await client.request(method, url, params=params, json=json_body, headers=headers)
                except httpx.HTTPError as e:
                    return _Exchange(response=None, attempts=attempts, error=classify_transport_error(e))

                if response.status_code == constants.HTTP_UNAUTHORIZED:
                    if attempts >= constants.MAX_SYNC_ATTEMPTS:
                        error = SyncError(
                            kind=SyncErrorKind.UNAUTHENTICATED,
                            message="Rejected again after token refresh",
                            status_code=response.status_code,
                        )
                        return _Exchange(response=response, attempts=attempts, error=error)

                    logger.info("access_token_rejected", extra={"method": method})
                    refreshed = await self._refresher.refresh()
                    if not refreshed.success or not refreshed.access_token:
                        detail = refreshed.error.describe() if refreshed.error else "unknown error"
                        error = SyncError(
                            kind=SyncErrorKind.UNAUTHENTICATED,
                            message=f"Token refresh failed: {detail}",
                            status_code=response.status_code,
                        )
                        return _Exchange(response=response, attempts=attempts, error=error)
                    token = refreshed.access_token
                    continue

                if not response.is_success:
                    error = SyncError(
                        kind=SyncErrorKind.SERVER_REJECTED,
                        message=response.text[:200] or response.reason_phrase,
                        status_code=response.status_code,
                    )
                    return _Exchange(response=response, attempts=attempts, error=error)

                return _Exchange(response=response, attempts=attempts)

    @staticmethod
    def _fail(operation: str, error: SyncError, attempts: int, **context: str) -> SyncResult:
        logger.warning(
            "remote_sync_failed",
            extra={"operation": operation, "kind": str(error.kind), "error": error.message, **context},
        )
        return SyncResult(success=False, attempts=attempts, error=error)
