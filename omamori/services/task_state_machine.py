"""Pure state transition functions for the activate action on a task.

The owner cycles Undone -> Done -> Undone (a confirmed task also goes back to
Undone). A partner can only confirm a done task or withdraw a confirmation.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from omamori.core.timestamps import format_timestamp
from omamori.domain.task import TaskRecord, TaskState


logger = logging.getLogger(__name__)


OWNER_TRANSITIONS: dict[TaskState, TaskState] = {
    TaskState.UNDONE: TaskState.DONE,
    TaskState.DONE: TaskState.UNDONE,
    TaskState.CONFIRMED: TaskState.UNDONE,
}

PARTNER_TRANSITIONS: dict[TaskState, TaskState] = {
    TaskState.UNDONE: TaskState.UNDONE,  # A partner cannot complete someone else's task
    TaskState.DONE: TaskState.CONFIRMED,
    TaskState.CONFIRMED: TaskState.DONE,
}


@dataclass(frozen=True)
class TaskTransition:
    """Result of applying the activate action to one task."""

    task: TaskRecord
    previous_state: TaskState
    next_state: TaskState
    updates: dict[str, Any] = field(default_factory=dict)

    @property
    def is_no_op(self) -> bool:
        return not self.updates


def get_transitions(*, viewer_is_owner: bool) -> dict[TaskState, TaskState]:
    """Get the transition table for the viewer's role."""
    return OWNER_TRANSITIONS if viewer_is_owner else PARTNER_TRANSITIONS


def _field_updates(previous: TaskState, target: TaskState, *, stamp: str) -> dict[str, Any]:
    if previous == target:
        return {}
    if target == TaskState.DONE and previous == TaskState.UNDONE:
        return {"is_done": True, "done_at": stamp}
    if target == TaskState.UNDONE and previous == TaskState.DONE:
        return {"is_done": False, "done_at": None}
    if target == TaskState.UNDONE and previous == TaskState.CONFIRMED:
        return {"is_done": False, "is_confirmed": False, "done_at": None}
    if target == TaskState.CONFIRMED:
        return {"is_confirmed": True, "confirmed_at": stamp}
    if target == TaskState.DONE and previous == TaskState.CONFIRMED:
        return {"is_confirmed": False}
    msg = f"Cannot transition task from {previous} to {target}"
    raise ValueError(msg)


def apply_activation(task: TaskRecord, *, viewer_is_owner: bool, now: datetime) -> TaskTransition:
    """Compute the next task state for an activate action.

    The input record is never mutated; the returned transition carries a deep
    copy with the updates applied, and the changed fields keyed by attribute name.
    """
    previous = task.state
    target = get_transitions(viewer_is_owner=viewer_is_owner)[previous]
    updates = _field_updates(previous, target, stamp=format_timestamp(now))
    if previous == TaskState.UNDONE and target == TaskState.DONE and task.is_confirmed:
        # Stale flag on an undone record; a fresh completion starts unconfirmed
        updates["is_confirmed"] = False

    updated = task.model_copy(deep=True)
    for name, value in updates.items():
        setattr(updated, name, value)

    if updates:
        logger.debug("Task %s transition %s -> %s", task.id, previous, target)
    return TaskTransition(task=updated, previous_state=previous, next_state=target, updates=updates)
