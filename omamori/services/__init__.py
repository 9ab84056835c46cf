from omamori.services import (
    diagnostics,
    refresh_service,
    snapshot_service,
    task_cache,
    toggle_service,
)


__all__ = [
    "diagnostics",
    "refresh_service",
    "snapshot_service",
    "task_cache",
    "toggle_service",
]
