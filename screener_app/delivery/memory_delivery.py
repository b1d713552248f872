"""In-process publisher collecting messages in a list."""

import threading
from typing import Any, Optional

from .base import BasePublisher, DeliveryResult, DeliveryStatus


class MemoryPublisher(BasePublisher):
    """Keeps published messages for later inspection, newest last."""

    def __init__(self, name: str = "memory", max_messages: Optional[int] = None):
        super().__init__(name)
        self.max_messages = max_messages
        self._messages: list[dict[str, Any]] = []
        self._lock = threading.Lock()

    @property
    def messages(self) -> list[dict[str, Any]]:
        with self._lock:
            return list(self._messages)

    def publish(self, messages: list[dict[str, Any]]) -> list[DeliveryResult]:
        results = []
        with self._lock:
            for message in messages:
                self._messages.append(message)
                if self.max_messages is not None and len(self._messages) > self.max_messages:
                    del self._messages[0]
                results.append(self._record(DeliveryResult(status=DeliveryStatus.SUCCESS)))
        return results

    def clear(self) -> None:
        with self._lock:
            self._messages.clear()

    def health_check(self) -> bool:
        return True
