"""Exchange the stored refresh token for a new access/refresh token pair."""

import logging

import httpx
from pydantic import BaseModel, Field

from omamori.core.config import constants
from omamori.core.errors import SyncError, SyncErrorKind, classify_transport_error, misconfigured
from omamori.core.logging import span
from omamori.services.credential_store import CredentialStore


logger = logging.getLogger(__name__)


class RefreshResult(BaseModel):
    """Result of a token refresh."""

    success: bool = Field(..., description="Whether new tokens were obtained and stored")
    access_token: str | None = Field(None, description="New access token if successful")
    error: SyncError | None = Field(None, description="Failure details")


class TokenRefresher:
    """Calls the backend token endpoint with grant_type=refresh_token.

    Stored credentials are only written after a complete token pair has been
    received, so a failed refresh leaves the previous refresh token usable.
    """

    def __init__(
        self,
        credentials: CredentialStore,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = constants.API_TIMEOUT_SECONDS,
    ) -> None:
        self._credentials = credentials
        self._transport = transport
        self._timeout = timeout

    async def refresh(self) -> RefreshResult:
        with span("token_refresher.refresh"):
            creds = await self._credentials.load()
            if not creds.url or not creds.anon_key:
                return self._fail(misconfigured("Backend URL or API key not configured"))
            if not creds.refresh_token:
                return self._fail(SyncError(kind=SyncErrorKind.UNAUTHENTICATED, message="No refresh token stored"))

            url = f"{creds.base_url}{constants.AUTH_TOKEN_PATH}"
            headers = {"apikey": creds.anon_key, "Content-Type": "application/json"}
            try:
                async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                    response = await client.post(
                        url,
                        params={"grant_type": "refresh_token"},
                        json={"refresh_token": creds.refresh_token},
                        headers=headers,
                    )
            except httpx.HTTPError as e:
                return self._fail(classify_transport_error(e))

            if not response.is_success:
                return self._fail(
                    SyncError(
                        kind=SyncErrorKind.UNAUTHENTICATED,
                        message=f"Token endpoint rejected refresh: {response.text[:200]}",
                        status_code=response.status_code,
                    )
                )

            try:
                payload = response.json()
            except ValueError:
                return self._fail(SyncError(kind=SyncErrorKind.UNAUTHENTICATED, message="Token response is not JSON"))

            access_token = payload.get("access_token") if isinstance(payload, dict) else None
            refresh_token = payload.get("refresh_token") if isinstance(payload, dict) else None
            if not isinstance(access_token, str) or not isinstance(refresh_token, str):
                return self._fail(
                    SyncError(kind=SyncErrorKind.UNAUTHENTICATED, message="Token response missing token pair")
                )

            if not await self._credentials.save_tokens(access_token=access_token, refresh_token=refresh_token):
                return self._fail(SyncError(kind=SyncErrorKind.UNAUTHENTICATED, message="Could not store refreshed tokens"))

            logger.info("token_refresh_succeeded")
            return RefreshResult(success=True, access_token=access_token)

    @staticmethod
    def _fail(error: SyncError) -> RefreshResult:
        logger.warning("token_refresh_failed", extra={"kind": str(error.kind), "error": error.message})
        return RefreshResult(success=False, error=error)
