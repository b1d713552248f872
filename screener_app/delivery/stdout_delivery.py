"""Standard output publisher."""

import sys
from typing import Any, TextIO

import orjson

from .base import BasePublisher, DeliveryResult, DeliveryStatus


class StdoutPublisher(BasePublisher):
    """Writes each message as one line of JSON, or a short summary in pretty mode."""

    def __init__(self, name: str = "stdout", format: str = "json", stream: TextIO = None):
        super().__init__(name)
        if format not in ("json", "pretty"):
            raise ValueError(f"Unsupported stdout format: {format}")
        self.format = format
        self.stream = stream

    @property
    def _stream(self) -> TextIO:
        return self.stream or sys.stdout

    def publish(self, messages: list[dict[str, Any]]) -> list[DeliveryResult]:
        results = []

        for message in messages:
            try:
                print(self._format_message(message), file=self._stream, flush=True)
                self.logger.debug("Message printed", message_type=message.get("type"))
                results.append(self._record(DeliveryResult(
                    status=DeliveryStatus.SUCCESS,
                    message="Printed to stdout"
                )))

            except (TypeError, ValueError, OSError) as e:
                self.logger.error(
                    "Failed to print message",
                    message_type=message.get("type"),
                    error=str(e)
                )
                results.append(self._record(DeliveryResult(
                    status=DeliveryStatus.FAILED,
                    message=f"Stdout error: {str(e)}",
                    error=e
                )))

        return results

    def _format_message(self, message: dict[str, Any]) -> str:
        if self.format == "pretty":
            data = message.get("data") or {}
            output = f"[{message.get('timestamp', '')}] {message.get('type', 'MESSAGE')}"
            if isinstance(data, dict) and "valid" in data:
                output += (
                    f": {len(data.get('valid', []))} valid, "
                    f"{len(data.get('filtered', []))} filtered, "
                    f"{data.get('skipped', 0)} skipped"
                )
            return output
        return orjson.dumps(message, default=str).decode("utf-8")

    def health_check(self) -> bool:
        try:
            return self._stream.writable()
        except (OSError, ValueError):
            return False
