from __future__ import annotations

import logging

import httpx

from app.application.ports.notifier import NotifierPort
from app.domain.entities.notification import NotificationEvent


class WebhookNotifier(NotifierPort):
    """Hands booking notifications to the mail/notification service over HTTP."""

    def __init__(self, endpoint: str, timeout: float = 10.0, client: httpx.Client | None = None) -> None:
        if not endpoint:
            raise ValueError("NOTIFIER_WEBHOOK_URL is required for the webhook notifier")
        self._endpoint = endpoint
        self._client = client or httpx.Client(timeout=timeout)
        self._logger = logging.getLogger(__name__)

    def notify(self, event: NotificationEvent) -> None:
        """
        POST the event and wait for the response.

        Delivery runs inside the request that changed the booking, so a slow
        endpoint delays that response by up to NOTIFIER_TIMEOUT_SECONDS.
        Errors are raised here and dropped by NotifyPartiesUseCase; the
        booking change is already stored by then.
        """
        payload = {
            "bookingId": event.booking_id,
            "kind": event.kind.value,
            "recipientRole": event.recipient_role.value,
            "recipientId": event.recipient_id,
            "title": event.subject,
            "message": event.body,
            "actionUrl": f"/bookings/{event.booking_id}",
        }
        resp = self._client.post(self._endpoint, json=payload)
        if resp.status_code >= 400:
            self._logger.error(
                "Notification delivery failed",
                extra={
                    "status": resp.status_code,
                    "booking_id": event.booking_id,
                    "kind": event.kind.value,
                    "error": resp.text[:200],
                },
            )
            resp.raise_for_status()
        self._logger.info(
            "Notification delivered",
            extra={"booking_id": event.booking_id, "kind": event.kind.value},
        )
