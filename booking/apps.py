from django.apps import AppConfig


class BookingConfig(AppConfig):
    name = 'booking'
    verbose_name = 'Hospital bed booking'

    def ready(self):
        # Connect the setting_changed receivers that rebuild the storage and directory.
        from . import storage  # noqa: F401
        from .services import directory  # noqa: F401
