"""Task toggle engine: optimistic local write, then remote reconciliation."""

import logging
from typing import Any

from pydantic import BaseModel, Field

from omamori.core.errors import ActivationStatus, SyncError
from omamori.core.logging import span
from omamori.domain.scope import SCOPE_ORDER, Scope, parse_scope
from omamori.domain.task import TaskRecord, to_wire_fields
from omamori.services import diagnostics, task_cache
from omamori.services.runtime import WidgetRuntime
from omamori.services.task_state_machine import apply_activation


logger = logging.getLogger(__name__)


class ActivationResult(BaseModel):
    """What an activation did. Failures are reported here, never raised."""

    status: ActivationStatus
    task_id: str
    scope: Scope | None = None
    updates: dict[str, Any] = Field(default_factory=dict, description="Wire-keyed fields sent to the backend")
    error: SyncError | None = None


async def locate_task(runtime: WidgetRuntime, task_id: str) -> tuple[Scope, list[TaskRecord], int] | None:
    """Find the first scope, in scan order, whose cached list holds the task."""
    for scope in SCOPE_ORDER:
        tasks = await task_cache.read_tasks(runtime.store, scope)
        if not tasks:
            continue
        for index, task in enumerate(tasks):
            if task.id == task_id:
                return scope, tasks, index
    return None


async def activate(*, runtime: WidgetRuntime, task_id: str, scope_hint: str | Scope | None = None) -> ActivationResult:
    """Advance a tapped task to its next state.

    The cache is written before any network attempt and is never rolled back
    when the remote update fails.
    """
    with span("toggle_service.activate"):
        located = await locate_task(runtime, task_id)
        if located is None:
            logger.info("task_toggle_not_found", extra={"task_id": task_id, "scope_hint": str(scope_hint)})
            return ActivationResult(status=ActivationStatus.NOT_FOUND, task_id=task_id)

        scope, tasks, index = located
        hint = parse_scope(scope_hint)
        if hint is not None and hint != scope:
            # The scanned scope decides ownership, even if the id also lives in the hinted scope
            logger.warning(
                "task_scope_hint_mismatch",
                extra={"task_id": task_id, "scope_hint": str(hint), "scope": str(scope)},
            )

        transition = apply_activation(tasks[index], viewer_is_owner=scope.is_owner, now=runtime.clock())
        if transition.is_no_op:
            logger.info("task_toggle_no_op", extra={"task_id": task_id, "scope": str(scope)})
            return ActivationResult(status=ActivationStatus.NO_OP, task_id=task_id, scope=scope)

        updated = list(tasks)
        updated[index] = transition.task
        await task_cache.write_tasks(runtime.store, scope, updated)
        logger.info(
            "task_toggle_applied_locally",
            extra={
                "task_id": task_id,
                "scope": str(scope),
                "from_state": str(transition.previous_state),
                "to_state": str(transition.next_state),
            },
        )

        wire_updates = to_wire_fields(transition.updates)
        result = await runtime.sync_client.patch_task(task_id, wire_updates)

        if result.success:
            status = ActivationStatus.SYNCED
        else:
            status = ActivationStatus.LOCAL_ONLY
            await diagnostics.record_error(
                runtime.store,
                operation=f"toggle {task_id}",
                error=result.error or "unknown sync failure",
                clock=runtime.clock,
            )

        runtime.timeline.reload_all_timelines(reason="task_toggled")
        return ActivationResult(
            status=status,
            task_id=task_id,
            scope=scope,
            updates=wire_updates,
            error=result.error,
        )
