"""JSON logging for the portal.

`configure_logging` installs a single stdout handler that renders every record
as one JSON line. `set_request_id` attaches a correlation id to the records
emitted while a request is being handled.
"""

import json
import logging
import sys
import time
from contextvars import ContextVar
from typing import Optional, Union

_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def set_request_id(rid: Optional[str]) -> None:
    _request_id.set(rid)


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        base = {
            "level": record.levelname,
            "ts": round(time.time(), 3),
            "logger": record.name,
            "msg": record.getMessage(),
        }
        rid = _request_id.get()
        if rid:
            base["request_id"] = rid
        if record.exc_info:
            base["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(base, ensure_ascii=False)


def configure_logging(level: Union[int, str] = "INFO") -> logging.Logger:
    """Route root logging to stdout through `JSONFormatter`."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    logging.basicConfig(level=level, handlers=[handler], force=True)
    return logging.getLogger("llnd_portal")
