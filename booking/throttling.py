from rest_framework.throttling import AnonRateThrottle, UserRateThrottle


class LoginRateThrottle(AnonRateThrottle):
    """Per-IP limit on credential checks, applied to both login endpoints."""
    scope = 'login'


class BookingWriteRateThrottle(UserRateThrottle):
    scope = 'booking_write'
