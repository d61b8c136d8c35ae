"""
In-process storage for users, hospitals, bed inventory and bookings.

``BaseStorage`` is the contract the services and views talk to;
``MemStorage`` keeps everything in dictionaries guarded by a single
re-entrant lock, so every public method is one atomic step.  Records are
copied on the way in and out: callers never hold a reference to the
stored object and must go through the storage to change anything.

The process-wide instance is built lazily by :func:`get_storage` from
``settings.BOOKING_STORAGE_BACKEND`` and can be dropped with
:func:`reset_storage` (tests do this between cases).
"""
from __future__ import annotations

import abc
import itertools
import logging
import threading
from dataclasses import replace
from typing import Callable, Optional

from django.conf import settings
from django.contrib.auth.hashers import make_password
from django.core.signals import setting_changed
from django.dispatch import receiver
from django.utils.module_loading import import_string

from .records import (
    BOOKING_STATUSES,
    ROLE_ADMIN,
    ROLE_USER,
    STATUS_CANCELED,
    STATUS_PENDING,
    Bed,
    BedType,
    Booking,
    Hospital,
    User,
)

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Base class for storage level failures."""


class DuplicateRecord(StorageError):
    """A unique field (username, email, bed type name, ...) is already taken."""


class DuplicateBed(DuplicateRecord):
    """A bed record already exists for the (hospital, bed type) pair."""


class BedNotFound(StorageError):
    """No bed record exists for the requested (hospital, bed type) pair."""


class NoBedsAvailable(StorageError):
    """The bed record exists but has no available beds left."""


class BaseStorage(abc.ABC):
    """Operations the booking app needs from a storage backend."""

    # users
    @abc.abstractmethod
    def get_user(self, user_id: int) -> Optional[User]: ...

    @abc.abstractmethod
    def get_user_by_username(self, username: str) -> Optional[User]: ...

    @abc.abstractmethod
    def get_user_by_email(self, email: str) -> Optional[User]: ...

    @abc.abstractmethod
    def create_user(self, **fields) -> User: ...

    # hospitals
    @abc.abstractmethod
    def get_hospital(self, hospital_id: int) -> Optional[Hospital]: ...

    @abc.abstractmethod
    def get_hospital_by_username(self, username: str) -> Optional[Hospital]: ...

    @abc.abstractmethod
    def create_hospital(self, **fields) -> Hospital: ...

    @abc.abstractmethod
    def update_hospital_approval(self, hospital_id: int, approved: bool) -> Optional[Hospital]: ...

    @abc.abstractmethod
    def get_all_hospitals(self) -> list[Hospital]: ...

    def get_approved_hospitals(self) -> list[Hospital]:
        return [h for h in self.get_all_hospitals() if h.approved]

    def get_pending_hospitals(self) -> list[Hospital]:
        return [h for h in self.get_all_hospitals() if not h.approved]

    # bed types
    @abc.abstractmethod
    def get_bed_type(self, bed_type_id: int) -> Optional[BedType]: ...

    @abc.abstractmethod
    def get_bed_type_by_name(self, name: str) -> Optional[BedType]: ...

    @abc.abstractmethod
    def create_bed_type(self, name: str, description: Optional[str] = None, icon: Optional[str] = None) -> BedType: ...

    @abc.abstractmethod
    def get_or_create_bed_type(self, name: str) -> tuple[BedType, bool]: ...

    @abc.abstractmethod
    def update_bed_type(self, bed_type_id: int, **fields) -> Optional[BedType]: ...

    @abc.abstractmethod
    def get_all_bed_types(self) -> list[BedType]: ...

    # beds
    @abc.abstractmethod
    def get_bed(self, bed_id: int) -> Optional[Bed]: ...

    @abc.abstractmethod
    def get_beds_by_hospital(self, hospital_id: int) -> list[Bed]: ...

    @abc.abstractmethod
    def get_bed_by_hospital_and_type(self, hospital_id: int, bed_type_id: int) -> Optional[Bed]: ...

    @abc.abstractmethod
    def create_bed(self, hospital_id: int, bed_type_id: int, total_beds: int, available_beds: int,
                   price_per_night: Optional[int] = None) -> Bed: ...

    @abc.abstractmethod
    def update_bed(self, bed_id: int, **fields) -> Optional[Bed]: ...

    @abc.abstractmethod
    def update_or_create_bed(self, hospital_id: int, bed_type_id: int, defaults: dict,
                             update: Optional[Callable[[Bed], dict]] = None) -> tuple[Bed, bool]: ...

    @abc.abstractmethod
    def adjust_available_beds(self, bed_id: int, delta: int) -> Optional[Bed]: ...

    # bookings
    @abc.abstractmethod
    def get_booking(self, booking_id: int) -> Optional[Booking]: ...

    @abc.abstractmethod
    def create_booking(self, user_id: int, hospital_id: int, bed_type_id: int, patient_name: str,
                       patient_phone: Optional[str] = None, notes: Optional[str] = None) -> Booking: ...

    @abc.abstractmethod
    def update_booking_status(self, booking_id: int, status: str) -> Optional[Booking]: ...

    @abc.abstractmethod
    def get_all_bookings(self) -> list[Booking]: ...

    def get_bookings_by_hospital(self, hospital_id: int) -> list[Booking]:
        return [b for b in self.get_all_bookings() if b.hospital_id == hospital_id]

    def get_bookings_by_user(self, user_id: int) -> list[Booking]:
        return [b for b in self.get_all_bookings() if b.user_id == user_id]


def _same(a: Optional[str], b: Optional[str]) -> bool:
    return (a or '').lower() == (b or '').lower()


class MemStorage(BaseStorage):
    """Dictionary backed storage.  All state is lost when the process exits."""

    def __init__(self, *, seed: bool = True) -> None:
        self._lock = threading.RLock()
        self._users: dict[int, User] = {}
        self._hospitals: dict[int, Hospital] = {}
        self._bed_types: dict[int, BedType] = {}
        self._beds: dict[int, Bed] = {}
        self._bookings: dict[int, Booking] = {}
        self._ids = {name: itertools.count(1) for name in ('user', 'hospital', 'bed_type', 'bed', 'booking')}
        if seed:
            self._seed()

    def _seed(self) -> None:
        for name in settings.BOOKING_DEFAULT_BED_TYPES:
            self.create_bed_type(name)
        self.create_user(
            username=settings.BOOKING_ADMIN_USERNAME,
            password=make_password(settings.BOOKING_ADMIN_PASSWORD),
            email=settings.BOOKING_ADMIN_EMAIL,
            name='System Administrator',
            role=ROLE_ADMIN,
        )

    def _next_id(self, kind: str) -> int:
        return next(self._ids[kind])

    # ------------------------------------------------------------------
    # users
    # ------------------------------------------------------------------
    def get_user(self, user_id):
        with self._lock:
            user = self._users.get(user_id)
            return replace(user) if user else None

    def get_user_by_username(self, username):
        with self._lock:
            for user in self._users.values():
                if _same(user.username, username):
                    return replace(user)
        return None

    def get_user_by_email(self, email):
        with self._lock:
            for user in self._users.values():
                if _same(user.email, email):
                    return replace(user)
        return None

    def create_user(self, **fields):
        with self._lock:
            if self.get_user_by_username(fields['username']):
                raise DuplicateRecord('Username already exists')
            if self.get_user_by_email(fields['email']):
                raise DuplicateRecord('Email already exists')
            fields.setdefault('role', ROLE_USER)
            fields['phone'] = fields.get('phone') or None
            user = User(id=self._next_id('user'), **fields)
            self._users[user.id] = user
            return replace(user)

    # ------------------------------------------------------------------
    # hospitals
    # ------------------------------------------------------------------
    def get_hospital(self, hospital_id):
        with self._lock:
            hospital = self._hospitals.get(hospital_id)
            return replace(hospital) if hospital else None

    def get_hospital_by_username(self, username):
        with self._lock:
            for hospital in self._hospitals.values():
                if _same(hospital.username, username):
                    return replace(hospital)
        return None

    def create_hospital(self, **fields):
        with self._lock:
            if self.get_hospital_by_username(fields['username']):
                raise DuplicateRecord('Username already exists')
            # Registration never approves; that is an admin decision.
            fields['approved'] = False
            hospital = Hospital(id=self._next_id('hospital'), **fields)
            self._hospitals[hospital.id] = hospital
            return replace(hospital)

    def update_hospital_approval(self, hospital_id, approved):
        with self._lock:
            hospital = self._hospitals.get(hospital_id)
            if not hospital:
                return None
            hospital = replace(hospital, approved=bool(approved))
            self._hospitals[hospital_id] = hospital
            return replace(hospital)

    def get_all_hospitals(self):
        with self._lock:
            return [replace(h) for h in self._hospitals.values()]

    # ------------------------------------------------------------------
    # bed types
    # ------------------------------------------------------------------
    def get_bed_type(self, bed_type_id):
        with self._lock:
            bed_type = self._bed_types.get(bed_type_id)
            return replace(bed_type) if bed_type else None

    def get_bed_type_by_name(self, name):
        with self._lock:
            for bed_type in self._bed_types.values():
                if _same(bed_type.name, name):
                    return replace(bed_type)
        return None

    def create_bed_type(self, name, description=None, icon=None):
        with self._lock:
            if self.get_bed_type_by_name(name):
                raise DuplicateRecord(f'Bed type {name!r} already exists')
            bed_type = BedType(id=self._next_id('bed_type'), name=name, description=description, icon=icon)
            self._bed_types[bed_type.id] = bed_type
            return replace(bed_type)

    def get_or_create_bed_type(self, name):
        with self._lock:
            existing = self.get_bed_type_by_name(name)
            if existing:
                return existing, False
            return self.create_bed_type(name), True

    def update_bed_type(self, bed_type_id, **fields):
        unknown = set(fields) - {'description', 'icon'}
        if unknown:
            raise ValueError(f'bed type fields are read-only: {sorted(unknown)}')
        with self._lock:
            bed_type = self._bed_types.get(bed_type_id)
            if not bed_type:
                return None
            bed_type = replace(bed_type, **fields)
            self._bed_types[bed_type_id] = bed_type
            return replace(bed_type)

    def get_all_bed_types(self):
        with self._lock:
            return [replace(t) for t in self._bed_types.values()]

    # ------------------------------------------------------------------
    # beds
    # ------------------------------------------------------------------
    def get_bed(self, bed_id):
        with self._lock:
            bed = self._beds.get(bed_id)
            return replace(bed) if bed else None

    def get_beds_by_hospital(self, hospital_id):
        with self._lock:
            return [replace(b) for b in self._beds.values() if b.hospital_id == hospital_id]

    def _find_bed(self, hospital_id: int, bed_type_id: int) -> Optional[Bed]:
        for bed in self._beds.values():
            if bed.hospital_id == hospital_id and bed.bed_type_id == bed_type_id:
                return bed
        return None

    def get_bed_by_hospital_and_type(self, hospital_id, bed_type_id):
        with self._lock:
            bed = self._find_bed(hospital_id, bed_type_id)
            return replace(bed) if bed else None

    def create_bed(self, hospital_id, bed_type_id, total_beds, available_beds, price_per_night=None):
        with self._lock:
            if self._find_bed(hospital_id, bed_type_id):
                raise DuplicateBed(f'hospital {hospital_id} already has beds of type {bed_type_id}')
            bed = Bed(
                id=self._next_id('bed'),
                hospital_id=hospital_id,
                bed_type_id=bed_type_id,
                total_beds=total_beds,
                available_beds=available_beds,
                price_per_night=price_per_night,
            )
            self._beds[bed.id] = bed
            return replace(bed)

    def update_bed(self, bed_id, **fields):
        fields.pop('id', None)
        with self._lock:
            bed = self._beds.get(bed_id)
            if not bed:
                return None
            bed = replace(bed, **fields)
            self._beds[bed_id] = bed
            return replace(bed)

    def update_or_create_bed(self, hospital_id, bed_type_id, defaults, update=None):
        """Create the pair's bed from ``defaults`` or update the existing one.

        When ``update`` is given it is called with the current record and
        must return the fields to write; it runs while the lock is held so
        the read and the write cannot be separated by another caller.
        """
        with self._lock:
            bed = self._find_bed(hospital_id, bed_type_id)
            if bed is None:
                fields = dict(defaults)
                fields.setdefault('available_beds', fields.get('total_beds', 0))
                return self.create_bed(hospital_id, bed_type_id, **fields), True
            fields = update(replace(bed)) if update else dict(defaults)
            return self.update_bed(bed.id, **fields), False

    def adjust_available_beds(self, bed_id, delta):
        """Shift ``available_beds`` by ``delta`` unless that leaves ``[0, total_beds]``."""
        with self._lock:
            bed = self._beds.get(bed_id)
            if not bed:
                return None
            value = bed.available_beds + delta
            if value < 0 or value > bed.total_beds:
                return None
            return self.update_bed(bed_id, available_beds=value)

    # ------------------------------------------------------------------
    # bookings
    # ------------------------------------------------------------------
    def get_booking(self, booking_id):
        with self._lock:
            booking = self._bookings.get(booking_id)
            return replace(booking) if booking else None

    def create_booking(self, user_id, hospital_id, bed_type_id, patient_name, patient_phone=None, notes=None):
        """Reserve one bed and record a pending booking in a single step.

        Raises :class:`BedNotFound` or :class:`NoBedsAvailable` without
        touching anything when the reservation cannot be made.
        """
        with self._lock:
            bed = self._find_bed(hospital_id, bed_type_id)
            if bed is None:
                raise BedNotFound('Bed type not available at this hospital')
            if bed.available_beds <= 0:
                raise NoBedsAvailable('No beds available of this type')
            self._beds[bed.id] = replace(bed, available_beds=bed.available_beds - 1)
            booking = Booking(
                id=self._next_id('booking'),
                user_id=user_id,
                hospital_id=hospital_id,
                bed_type_id=bed_type_id,
                patient_name=patient_name,
                patient_phone=patient_phone or None,
                notes=notes or None,
                status=STATUS_PENDING,
            )
            self._bookings[booking.id] = booking
            return replace(booking)

    def update_booking_status(self, booking_id, status):
        """Set a booking's status; cancelling a pending booking frees its bed.

        No other transition touches inventory.  In particular a rejected
        booking keeps its bed reserved.
        """
        if status not in BOOKING_STATUSES:
            raise ValueError(f'unknown booking status {status!r}')
        with self._lock:
            booking = self._bookings.get(booking_id)
            if not booking:
                return None
            if booking.status == STATUS_PENDING and status == STATUS_CANCELED:
                bed = self._find_bed(booking.hospital_id, booking.bed_type_id)
                if bed is not None:
                    if bed.available_beds < bed.total_beds:
                        self._beds[bed.id] = replace(bed, available_beds=bed.available_beds + 1)
                    else:
                        logger.warning(
                            'bed %s already at capacity (%s), not restoring seat for booking %s',
                            bed.id, bed.total_beds, booking_id,
                        )
            booking = replace(booking, status=status)
            self._bookings[booking_id] = booking
            return replace(booking)

    def get_all_bookings(self):
        with self._lock:
            return [replace(b) for b in self._bookings.values()]


_storage: Optional[BaseStorage] = None
_storage_lock = threading.Lock()


def get_storage() -> BaseStorage:
    """Return the process-wide storage, building it on first use."""
    global _storage
    with _storage_lock:
        if _storage is None:
            backend = import_string(settings.BOOKING_STORAGE_BACKEND)
            _storage = backend()
            logger.info('storage backend %s initialised', settings.BOOKING_STORAGE_BACKEND)
        return _storage


def reset_storage() -> None:
    """Drop the process-wide storage; the next :func:`get_storage` builds a fresh one."""
    global _storage
    with _storage_lock:
        _storage = None


@receiver(setting_changed)
def _storage_setting_changed(sender, setting, **kwargs):
    if setting in {'BOOKING_STORAGE_BACKEND', 'BOOKING_DEFAULT_BED_TYPES', 'BOOKING_ADMIN_USERNAME',
                   'BOOKING_ADMIN_PASSWORD', 'BOOKING_ADMIN_EMAIL'}:
        reset_storage()
