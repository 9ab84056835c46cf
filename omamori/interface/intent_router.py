"""Inbound intent adapter: toggle and refresh signals from the widget host."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel, Field

from omamori.domain.scope import Scope, parse_scope
from omamori.services import refresh_service, snapshot_service, toggle_service
from omamori.services.refresh_service import RefreshOutcome
from omamori.services.runtime import WidgetRuntime
from omamori.services.snapshot_service import WidgetSnapshot
from omamori.services.toggle_service import ActivationResult


logger = logging.getLogger(__name__)

router = APIRouter(tags=["intents"])


class ToggleIntent(BaseModel):
    """Payload of a tap on a task."""

    task_id: str = Field(..., min_length=1)
    scope: str | None = Field(default=None, description="Scope the widget was showing")


class RefreshIntent(BaseModel):
    """Payload of a manual refresh."""

    scope: str


class RefreshResponse(BaseModel):
    scope: Scope
    outcome: RefreshOutcome


def get_runtime(request: Request) -> WidgetRuntime:
    """Runtime built during application startup."""
    return request.app.state.runtime


def _require_scope(value: str) -> Scope:
    scope = parse_scope(value)
    if scope is None:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=f"Unknown scope: {value}")
    return scope


@router.post("/intents/toggle", status_code=status.HTTP_202_ACCEPTED)
async def toggle_task(intent: ToggleIntent, runtime: WidgetRuntime = Depends(get_runtime)) -> ActivationResult:
    if intent.scope is not None:
        _require_scope(intent.scope)
    return await toggle_service.activate(runtime=runtime, task_id=intent.task_id, scope_hint=intent.scope)


@router.post("/intents/refresh", status_code=status.HTTP_202_ACCEPTED)
async def refresh_scope(intent: RefreshIntent, runtime: WidgetRuntime = Depends(get_runtime)) -> RefreshResponse:
    scope = _require_scope(intent.scope)
    outcome = await refresh_service.refresh_scope(runtime=runtime, scope=scope)
    return RefreshResponse(scope=scope, outcome=outcome)


@router.post("/intents/refresh-all", status_code=status.HTTP_202_ACCEPTED)
async def refresh_all(runtime: WidgetRuntime = Depends(get_runtime)) -> dict[str, RefreshOutcome]:
    outcomes = await refresh_service.refresh_all(runtime=runtime)
    return {str(scope): outcome for scope, outcome in outcomes.items()}


@router.get("/widgets/{scope}/snapshot")
async def get_snapshot(scope: str, runtime: WidgetRuntime = Depends(get_runtime)) -> WidgetSnapshot:
    return await snapshot_service.load_snapshot(runtime=runtime, scope=_require_scope(scope))
