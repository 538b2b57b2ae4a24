from abc import ABC, abstractmethod

from spa_booking.domain.entities.settings import BookingSettings, NotificationSettings, PointSettings


class SettingsStorePort(ABC):
    @abstractmethod
    def get_booking_settings(self) -> BookingSettings:
        raise NotImplementedError

    @abstractmethod
    def get_notification_settings(self) -> NotificationSettings:
        raise NotImplementedError

    @abstractmethod
    def get_point_settings(self) -> PointSettings:
        raise NotImplementedError
