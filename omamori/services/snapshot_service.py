"""Display-ready snapshot of one scope for the widget timeline."""

import logging
from datetime import datetime

from pydantic import BaseModel, Field

from omamori.domain.scope import Scope
from omamori.domain.task import TaskRecord, TaskState
from omamori.services import task_cache
from omamori.services.runtime import WidgetRuntime
from omamori.services.scope_resolver import resolve_scope


logger = logging.getLogger(__name__)


class TaskView(BaseModel):
    """A task as the widget renders it."""

    id: str
    title: str
    is_done: bool = Field(..., description="Effective done-ness, scheduled resets applied")
    is_confirmed: bool
    state: TaskState


class WidgetSnapshot(BaseModel):
    """Timeline entry consumed by the presentation layer."""

    date: datetime
    scope: Scope
    header: str
    partner_name: str | None = None
    tasks: list[TaskView] = Field(default_factory=list)


def to_view(task: TaskRecord, now: datetime) -> TaskView:
    effectively_done = task.is_effectively_done(now)
    return TaskView(
        id=task.id,
        title=task.title,
        is_done=effectively_done,
        is_confirmed=bool(task.is_confirmed) and effectively_done,
        state=task.state if effectively_done else TaskState.UNDONE,
    )


async def load_snapshot(*, runtime: WidgetRuntime, scope: Scope) -> WidgetSnapshot:
    """Build the snapshot from the local cache only."""
    now = runtime.clock()
    resolved = await resolve_scope(scope=scope, store=runtime.store, credentials=runtime.credentials)
    tasks = await task_cache.read_tasks(runtime.store, scope) or []
    return WidgetSnapshot(
        date=now,
        scope=scope,
        header=resolved.header,
        partner_name=resolved.display_name,
        tasks=[to_view(task, now) for task in tasks],
    )
