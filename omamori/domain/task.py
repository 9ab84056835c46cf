"""Task record model and its cache / wire encodings."""

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import AliasChoices, AliasGenerator, BaseModel, ConfigDict, Field, TypeAdapter

from omamori.core.timestamps import parse_timestamp


# attribute name -> (cache key, wire key)
# The host app writes camelCase keys into the shared cache; the backend speaks snake_case.
FIELD_ENCODINGS: dict[str, tuple[str, str]] = {
    "id": ("id", "id"),
    "title": ("title", "title"),
    "is_done": ("isDone", "is_done"),
    "done_at": ("doneAt", "done_at"),
    "created_at": ("createdAt", "created_at"),
    "reset_type": ("resetType", "reset_type"),
    "reset_value": ("resetValue", "reset_value"),
    "scheduled_reset_at": ("scheduledResetAt", "scheduled_reset_at"),
    "is_confirmed": ("isConfirmed", "is_confirmed"),
    "confirmed_at": ("confirmedAt", "confirmed_at"),
}


def cache_key_for(field_name: str) -> str:
    return FIELD_ENCODINGS[field_name][0]


def wire_key_for(field_name: str) -> str:
    return FIELD_ENCODINGS[field_name][1]


def _validation_alias(field_name: str) -> AliasChoices:
    return AliasChoices(*dict.fromkeys(FIELD_ENCODINGS[field_name]))


class TaskState(StrEnum):
    """Task state as observed by one viewer."""

    UNDONE = "undone"
    DONE = "done"
    CONFIRMED = "confirmed"


class TaskRecord(BaseModel):
    """A shared task as stored in the scope cache.

    Timestamps are kept as the ISO-8601 strings they arrived as.
    """

    model_config = ConfigDict(
        alias_generator=AliasGenerator(
            validation_alias=_validation_alias,
            serialization_alias=cache_key_for,
        ),
        populate_by_name=True,
        extra="ignore",
    )

    id: str = Field(..., description="Stable task identifier")
    title: str = Field(..., description="Display title")
    is_done: bool = Field(default=False, description="Owner marked the task complete")
    done_at: str | None = Field(default=None, description="When is_done last became true (ISO format)")
    created_at: str = Field(default="", description="Creation timestamp (ISO format)")
    reset_type: int | None = Field(default=None, description="Recurrence policy type")
    reset_value: int | None = Field(default=None, description="Recurrence policy value")
    scheduled_reset_at: str | None = Field(default=None, description="Display-time reset deadline (ISO format)")
    is_confirmed: bool | None = Field(default=False, description="A partner acknowledged the completion")
    confirmed_at: str | None = Field(default=None, description="When is_confirmed last became true (ISO format)")

    @property
    def state(self) -> TaskState:
        """Stored state, ignoring any scheduled reset."""
        if not self.is_done:
            return TaskState.UNDONE
        if self.is_confirmed:
            return TaskState.CONFIRMED
        return TaskState.DONE

    def is_effectively_done(self, now: datetime) -> bool:
        """Done-ness for display: an expired scheduled reset forces False."""
        if not self.is_done:
            return False
        reset_at = parse_timestamp(self.scheduled_reset_at)
        if reset_at is None:
            return True
        return now <= reset_at

    def to_wire(self) -> dict[str, Any]:
        """Encode with the backend (snake_case) keys."""
        return to_wire_fields(self.model_dump())


def to_wire_fields(updates: dict[str, Any]) -> dict[str, Any]:
    """Translate attribute-keyed updates into a backend partial-update document."""
    return {wire_key_for(name): value for name, value in updates.items()}


_task_list_adapter = TypeAdapter(list[TaskRecord])


def decode_task_list(raw: str | bytes) -> list[TaskRecord]:
    """Parse a cached or fetched JSON array of tasks.

    Raises:
        pydantic.ValidationError: If the payload is not a valid task array
    """
    return _task_list_adapter.validate_json(raw)


def encode_task_list(tasks: list[TaskRecord]) -> str:
    """Serialize tasks with the cache encoding."""
    return _task_list_adapter.dump_json(tasks, by_alias=True).decode("utf-8")
