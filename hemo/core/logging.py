"""Logging setup and structured account events."""

from __future__ import annotations

import logging

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

event_logger = logging.getLogger("hemo.events")


def configure_logging(level: str = "INFO") -> None:
    """Install a single stream handler on the ``hemo`` logger."""
    root = logging.getLogger("hemo")
    root.setLevel(level)
    if not any(getattr(h, "_hemo_handler", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT))
        handler._hemo_handler = True  # type: ignore[attr-defined]
        root.addHandler(handler)


def log_account_event(action: str, user_id: str | None = None, status: str = "success", extra: dict | None = None) -> None:
    """Emit a structured account event with action, user id and status."""
    payload = {"action": action, "status": status}
    if user_id is not None:
        payload["user_id"] = user_id
    if extra:
        payload.update(extra)
    level = logging.INFO if status == "success" else logging.WARNING
    event_logger.log(level, payload)
