"""
Request log events.
One event is emitted per request; the formatter turns it into the console line.
"""

import logging
from dataclasses import dataclass
from typing import Any

access_logger = logging.getLogger("hoxy.access")


@dataclass(frozen=True)
class RequestLogEvent:
    method: str
    path: str
    status: int
    size: int
    elapsed_ms: int
    extension: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "method": self.method,
            "path": self.path,
            "status": self.status,
            "size": self.size,
            "elapsed_ms": self.elapsed_ms,
            "extension": self.extension,
        }


def format_request_line(event: RequestLogEvent) -> str:
    return (
        f"{event.method:<4} {event.path:<30} {event.status} "
        f"{event.size:>6}b {event.elapsed_ms}ms"
    )


def log_request(event: RequestLogEvent) -> None:
    """Emit the access line; 5xx goes out at ERROR so it stands out."""
    level = logging.ERROR if event.status >= 500 else logging.INFO
    access_logger.log(level, format_request_line(event), extra={"request": event.to_dict()})
