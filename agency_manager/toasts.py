"""Transient user-facing notifications."""

import time
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

import structlog

logger = structlog.get_logger()


class ToastLevel(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


@dataclass(frozen=True)
class Toast:
    id: str
    message: str
    level: ToastLevel
    created_at: float


class ToastCenter:
    """Holds toasts until they expire or are dismissed and fans them out to listeners."""

    def __init__(self, ttl: float = 5.0, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl = ttl
        self._clock = clock
        self._toasts: list[Toast] = []
        self._listeners: list[Callable[[Toast], None]] = []

    def show(self, message: str, level: ToastLevel = ToastLevel.INFO) -> Toast:
        toast = Toast(id=f"toast-{uuid.uuid4().hex[:12]}", message=message, level=level, created_at=self._clock())
        self._toasts.append(toast)
        logger.debug("Toast shown", message=message, level=level.value)
        for listener in list(self._listeners):
            listener(toast)
        return toast

    def dismiss(self, toast_id: str) -> None:
        self._toasts = [t for t in self._toasts if t.id != toast_id]

    @property
    def active(self) -> list[Toast]:
        """Toasts younger than the TTL, oldest first."""
        now = self._clock()
        self._toasts = [t for t in self._toasts if now - t.created_at < self.ttl]
        return list(self._toasts)

    def subscribe(self, listener: Callable[[Toast], None]) -> Callable[[], None]:
        """Register a listener; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
