"""Domain models."""

from omamori.domain.scope import SCOPE_KEYS, SCOPE_ORDER, Scope, ScopeKeys, parse_scope
from omamori.domain.task import (
    FIELD_ENCODINGS,
    TaskRecord,
    TaskState,
    decode_task_list,
    encode_task_list,
    to_wire_fields,
)


__all__ = [
    "FIELD_ENCODINGS",
    "SCOPE_KEYS",
    "SCOPE_ORDER",
    "Scope",
    "ScopeKeys",
    "TaskRecord",
    "TaskState",
    "decode_task_list",
    "encode_task_list",
    "parse_scope",
    "to_wire_fields",
]
