"""Publishers receiving screening results."""

from .base import BasePublisher, DeliveryResult, DeliveryStatus
from .memory_delivery import MemoryPublisher
from .stdout_delivery import StdoutPublisher

__all__ = [
    "BasePublisher",
    "DeliveryResult",
    "DeliveryStatus",
    "MemoryPublisher",
    "StdoutPublisher",
]
