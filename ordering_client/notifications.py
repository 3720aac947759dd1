from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field

from ordering_client.observability.logging_loki import loki


class Notification(BaseModel):
    level: str
    message: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class Notifier:
    """Transient, dismissable user messages (what the UI shows as toasts)."""

    def __init__(self, session_id: Optional[str] = None) -> None:
        self.session_id = session_id
        self.notifications: List[Notification] = []

    def success(self, message: str) -> Notification:
        return self._push("success", message)

    def error(self, message: str) -> Notification:
        return self._push("error", message)

    def drain(self) -> List[Notification]:
        pending, self.notifications = self.notifications, []
        return pending

    def _push(self, level: str, message: str) -> Notification:
        notification = Notification(level=level, message=message)
        self.notifications.append(notification)
        loki.log(
            "error" if level == "error" else "info",
            {
                "event_type": "notification",
                "outcome": level,
                "message": message,
                "session_id": self.session_id,
            },
            service_type="notifier",
            sync_mode="sync",
            io="out",
        )
        return notification
