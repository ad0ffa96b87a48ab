from functools import lru_cache
import logging

from app.core.config import settings
from app.application.ports.booking_store import BookingStorePort
from app.application.ports.notifier import NotifierPort
from app.application.use_cases.notify_parties import NotifyPartiesUseCase
from app.application.use_cases.reservations import ReservationService
from app.infrastructure.notifications.mock_notifier import LoggingNotifier
from app.infrastructure.notifications.webhook_notifier import WebhookNotifier
from app.infrastructure.store.json_store import JsonBookingStore
from app.infrastructure.store.memory_store import MemoryBookingStore


_booking_store: BookingStorePort | None = None


def get_booking_store() -> BookingStorePort:
    global _booking_store
    if _booking_store is None:
        if settings.STORE_PROVIDER.lower() == "json":
            _booking_store = JsonBookingStore(
                data_dir=settings.BOOKING_DATA_DIR,
                lock_timeout=settings.STORE_LOCK_TIMEOUT_SECONDS,
            )
        else:
            _booking_store = MemoryBookingStore(lock_timeout=settings.STORE_LOCK_TIMEOUT_SECONDS)
    return _booking_store


@lru_cache
def get_notifier() -> NotifierPort:
    logger = logging.getLogger(__name__)
    if not settings.NOTIFIER_WEBHOOK_URL:
        logger.info("Using LoggingNotifier (NOTIFIER_WEBHOOK_URL not set, ENV=%s)", settings.ENV)
        return LoggingNotifier()
    return WebhookNotifier(
        endpoint=settings.NOTIFIER_WEBHOOK_URL,
        timeout=settings.NOTIFIER_TIMEOUT_SECONDS,
    )


def get_reservation_service() -> ReservationService:
    return ReservationService(
        store=get_booking_store(),
        notify=NotifyPartiesUseCase(notifier=get_notifier()),
        max_list_limit=settings.BOOKING_LIST_MAX_LIMIT,
    )
