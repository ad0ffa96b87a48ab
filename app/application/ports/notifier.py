from abc import ABC, abstractmethod

from app.domain.entities.notification import NotificationEvent


class NotifierPort(ABC):
    @abstractmethod
    def notify(self, event: NotificationEvent) -> None:
        raise NotImplementedError
