import json
import sys
import logging
from datetime import datetime, timezone


_event_logger = logging.getLogger("timber_store.events")


def log_event(level: str, event: str, **fields) -> None:
    """Emit one JSON line describing a domain event."""
    payload = {
        "ts": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "level": level.lower(),
        "event": event,
    }
    payload.update(fields or {})
    lvl = logging.getLevelName(level.upper())
    if not isinstance(lvl, int):
        lvl = logging.INFO
    _event_logger.log(lvl, json.dumps(payload, ensure_ascii=False, default=str))


def configure_logging(level: str = "INFO") -> None:
    """Route event lines to stdout as bare JSON."""
    root = logging.getLogger("timber_store")
    root.setLevel(level.upper())
    if not any(getattr(h, "_timber_store", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter("%(message)s"))
        handler._timber_store = True
        root.addHandler(handler)
