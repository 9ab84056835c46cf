"""Outbound "reload all display timelines" signal."""

import logging
from collections.abc import Callable


logger = logging.getLogger(__name__)

TimelineListener = Callable[[str], None]


class TimelineCenter:
    """Notifies the presentation layer that widget timelines should be rebuilt."""

    def __init__(self) -> None:
        self._listeners: list[TimelineListener] = []
        self.reload_count = 0
        self.last_reason: str | None = None

    def subscribe(self, listener: TimelineListener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: TimelineListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def reload_all_timelines(self, reason: str) -> None:
        """Emit the reload signal to every listener."""
        self.reload_count += 1
        self.last_reason = reason
        logger.info("timeline_reload_requested", extra={"reason": reason, "listeners": len(self._listeners)})

        for listener in list(self._listeners):
            try:
                listener(reason)
            except Exception:
                logger.exception("timeline_listener_failed", extra={"reason": reason})


# Global timeline center instance
timeline_center = TimelineCenter()
