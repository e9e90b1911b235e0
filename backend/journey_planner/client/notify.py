"""
Journey Planner Client - Toast Notifications

Transient user-facing messages. The toaster keeps the most recent ones so a
view layer (or a test) can show them, and logs each one.
"""

from collections import deque
from dataclasses import dataclass

from journey_planner.config import log

MAX_TOASTS = 5


@dataclass(frozen=True)
class Toast:
    level: str  # "success" | "error"
    message: str


class Toaster:
    def __init__(self, max_toasts: int = MAX_TOASTS):
        self._toasts: deque[Toast] = deque(maxlen=max_toasts)

    @property
    def toasts(self) -> list[Toast]:
        return list(self._toasts)

    def success(self, message: str) -> None:
        self._toasts.append(Toast("success", message))
        log("INFO", "toast shown", kind="success", text=message)

    def error(self, message: str) -> None:
        self._toasts.append(Toast("error", message))
        log("WARN", "toast shown", kind="error", text=message)

    def clear(self) -> None:
        self._toasts.clear()
