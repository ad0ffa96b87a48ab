from __future__ import annotations

import logging

from app.application.ports.notifier import NotifierPort
from app.domain.entities.notification import NotificationEvent


class LoggingNotifier(NotifierPort):
    def __init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def notify(self, event: NotificationEvent) -> None:
        self._logger.info(
            "Mock booking notification",
            extra={
                "booking_id": event.booking_id,
                "kind": event.kind.value,
                "recipient_role": event.recipient_role.value,
                "recipient_id": event.recipient_id,
                "subject": event.subject,
            },
        )
