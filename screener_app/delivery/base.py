"""Base classes for screening result publishers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from ..logging.config import get_logger


class DeliveryStatus(Enum):
    """Message delivery status."""
    SUCCESS = "success"
    FAILED = "failed"


@dataclass
class DeliveryResult:
    """Result of publishing one message."""
    status: DeliveryStatus
    message: Optional[str] = None
    error: Optional[Exception] = None


class BasePublisher(ABC):
    """
    Fan-out target for screening messages.

    Messages are JSON-serialisable dictionaries of the form
    ``{"type": ..., "data": ..., "timestamp": ...}``.
    """

    def __init__(self, name: str):
        self.name = name
        self.logger = get_logger(f"screener.delivery.{name}")
        self._delivery_count = 0
        self._error_count = 0

    @abstractmethod
    def publish(self, messages: list[dict[str, Any]]) -> list[DeliveryResult]:
        """
        Publish messages to the destination.

        Args:
            messages: Message dictionaries

        Returns:
            One delivery result per message
        """
        pass

    @abstractmethod
    def health_check(self) -> bool:
        """Check if the destination is usable."""
        pass

    def _record(self, result: DeliveryResult) -> DeliveryResult:
        if result.status == DeliveryStatus.SUCCESS:
            self._delivery_count += 1
        else:
            self._error_count += 1
        return result

    def get_stats(self) -> dict[str, Any]:
        """Get delivery statistics."""
        attempts = self._delivery_count + self._error_count
        return {
            "name": self.name,
            "delivery_count": self._delivery_count,
            "error_count": self._error_count,
            "success_rate": self._delivery_count / attempts if attempts > 0 else 0.0,
        }

    def reset_stats(self):
        """Reset delivery statistics."""
        self._delivery_count = 0
        self._error_count = 0
