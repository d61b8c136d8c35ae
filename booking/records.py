"""
Record types held by the booking storage.

These mirror the fields exposed to the front-end.  They are plain
dataclasses rather than ORM models because the storage backend keeps
them in process memory; see :mod:`booking.storage`.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from django.utils import timezone

ROLE_USER = 'user'
ROLE_ADMIN = 'admin'

STATUS_PENDING = 'pending'
STATUS_APPROVED = 'approved'
STATUS_REJECTED = 'rejected'
STATUS_CANCELED = 'canceled'
BOOKING_STATUSES = [STATUS_PENDING, STATUS_APPROVED, STATUS_REJECTED, STATUS_CANCELED]


@dataclass
class User:
    id: int
    username: str
    password: str
    email: str
    name: str
    phone: Optional[str] = None
    role: str = ROLE_USER


@dataclass
class Hospital:
    """A hospital account.  Hidden from the public until ``approved``."""
    id: int
    username: str
    password: str
    name: str
    email: str
    address: str
    city: str
    state: str
    zip_code: str
    phone: str
    website: Optional[str] = None
    latitude: Optional[str] = None
    longitude: Optional[str] = None
    approved: bool = False


@dataclass
class BedType:
    id: int
    name: str
    description: Optional[str] = None
    icon: Optional[str] = None


@dataclass
class Bed:
    """Inventory for one bed type at one hospital."""
    id: int
    hospital_id: int
    bed_type_id: int
    total_beds: int
    available_beds: int
    price_per_night: Optional[int] = None


@dataclass
class Booking:
    id: int
    user_id: int
    hospital_id: int
    bed_type_id: int
    patient_name: str
    patient_phone: Optional[str] = None
    notes: Optional[str] = None
    status: str = STATUS_PENDING
    created_at: datetime = field(default_factory=timezone.now)
