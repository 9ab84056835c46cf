"""Tests for the task record model and its encodings."""

import json
from datetime import UTC, datetime, timedelta

import pytest
from pydantic import ValidationError

from omamori.domain.task import (
    FIELD_ENCODINGS,
    TaskRecord,
    TaskState,
    decode_task_list,
    encode_task_list,
    to_wire_fields,
)
from tests.unit.helpers import FIXED_NOW, make_task


CACHE_JSON = json.dumps(
    [
        {
            "id": "t1",
            "title": "Buy milk",
            "isDone": True,
            "doneAt": "2025-01-14T10:00:00.000Z",
            "createdAt": "2025-01-01T08:00:00.000Z",
            "resetType": 1,
            "resetValue": 7,
            "scheduledResetAt": None,
            "isConfirmed": False,
            "confirmedAt": None,
        }
    ]
)

WIRE_JSON = json.dumps(
    [
        {
            "id": "t2",
            "user_id": "user-me",
            "title": "Call mom",
            "is_done": False,
            "done_at": None,
            "created_at": "2025-01-02T08:00:00+00:00",
            "reset_type": None,
            "reset_value": None,
            "scheduled_reset_at": None,
            "is_confirmed": None,
            "confirmed_at": None,
        }
    ]
)


@pytest.mark.unit
class TestDecoding:
    def test_decodes_cache_encoding(self):
        [task] = decode_task_list(CACHE_JSON)

        assert task.id == "t1"
        assert task.is_done is True
        assert task.done_at == "2025-01-14T10:00:00.000Z"
        assert task.reset_type == 1
        assert task.reset_value == 7

    def test_decodes_wire_encoding_and_ignores_unknown_columns(self):
        [task] = decode_task_list(WIRE_JSON)

        assert task.id == "t2"
        assert task.title == "Call mom"
        assert task.created_at == "2025-01-02T08:00:00+00:00"
        assert task.is_confirmed is None
        assert not hasattr(task, "user_id")

    def test_missing_optional_fields_use_defaults(self):
        [task] = decode_task_list('[{"id": "t3", "title": "Minimal", "isDone": false, "createdAt": ""}]')

        assert task.is_confirmed is False
        assert task.scheduled_reset_at is None

    def test_rejects_non_array_payload(self):
        with pytest.raises(ValidationError):
            decode_task_list('{"id": "t1"}')


@pytest.mark.unit
class TestEncoding:
    def test_round_trip_preserves_every_field(self):
        task = make_task(
            is_done=True,
            done_at="2025-01-14T10:00:00.000Z",
            reset_type=2,
            reset_value=3,
            scheduled_reset_at="2025-01-20T00:00:00Z",
            is_confirmed=True,
            confirmed_at="2025-01-14T11:00:00.000Z",
        )

        assert decode_task_list(encode_task_list([task])) == [task]

    def test_cache_encoding_uses_camel_case_keys(self):
        encoded = json.loads(encode_task_list([make_task()]))[0]

        assert set(encoded) == {cache for cache, _ in FIELD_ENCODINGS.values()}
        assert "isDone" in encoded

    def test_wire_encoding_uses_snake_case_keys(self):
        assert set(make_task().to_wire()) == {wire for _, wire in FIELD_ENCODINGS.values()}

    def test_to_wire_fields_maps_attribute_names(self):
        assert to_wire_fields({"is_done": True, "done_at": "x"}) == {"is_done": True, "done_at": "x"}
        assert to_wire_fields({"is_confirmed": True, "confirmed_at": None}) == {
            "is_confirmed": True,
            "confirmed_at": None,
        }


@pytest.mark.unit
class TestState:
    @pytest.mark.parametrize(
        ("is_done", "is_confirmed", "expected"),
        [
            (False, False, TaskState.UNDONE),
            (False, None, TaskState.UNDONE),
            (True, False, TaskState.DONE),
            (True, None, TaskState.DONE),
            (True, True, TaskState.CONFIRMED),
        ],
    )
    def test_state_from_stored_flags(self, is_done, is_confirmed, expected):
        assert make_task(is_done=is_done, is_confirmed=is_confirmed).state == expected


@pytest.mark.unit
class TestEffectivelyDone:
    def test_not_done_is_never_effectively_done(self):
        assert make_task(is_done=False).is_effectively_done(FIXED_NOW) is False

    def test_done_without_reset_is_effectively_done(self):
        assert make_task(is_done=True).is_effectively_done(FIXED_NOW) is True

    def test_expired_reset_forces_undone(self):
        past = (FIXED_NOW - timedelta(seconds=1)).isoformat()
        task = make_task(is_done=True, scheduled_reset_at=past)

        assert task.is_effectively_done(FIXED_NOW) is False

    def test_future_reset_keeps_done(self):
        task = make_task(is_done=True, scheduled_reset_at="2025-01-16T00:00:00.000Z")

        assert task.is_effectively_done(FIXED_NOW) is True

    def test_reset_exactly_now_keeps_done(self):
        task = make_task(is_done=True, scheduled_reset_at="2025-01-15T09:30:00Z")

        assert task.is_effectively_done(FIXED_NOW) is True

    def test_unparsable_reset_counts_as_absent(self):
        task = make_task(is_done=True, scheduled_reset_at="tomorrow-ish")

        assert task.is_effectively_done(datetime(2100, 1, 1, tzinfo=UTC)) is True

    def test_expiry_does_not_mutate_stored_flag(self):
        task = make_task(is_done=True, scheduled_reset_at="2020-01-01T00:00:00Z")

        task.is_effectively_done(FIXED_NOW)

        assert task.is_done is True
        assert isinstance(task, TaskRecord)
