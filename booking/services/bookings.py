"""
Booking lifecycle on top of the storage.

A booking starts ``pending`` and holds one bed from the moment it is
created.  Only cancelling a pending booking gives the bed back;
approving or rejecting leaves inventory untouched.
"""
import logging

import bleach
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from .. import storage as store
from ..exceptions import Conflict, NoBedsAvailable
from ..records import STATUS_CANCELED, STATUS_PENDING, Booking
from ..storage import BaseStorage
from .audit import log_action
from .formats import format_booking
from .inventory import bed_type_names

logger = logging.getLogger(__name__)

HOSPITAL_SETTABLE_STATUSES = ('approved', 'rejected', 'canceled')


def clean_text(value):
    """Strip all markup from free text; blank results become ``None``."""
    if value is None:
        return None
    return bleach.clean(value.strip(), tags=set(), strip=True).strip() or None


def create_booking(storage: BaseStorage, principal, *, hospital_id: int, bed_type_id: int, patient_name: str,
                   patient_phone=None, notes=None) -> Booking:
    hospital = storage.get_hospital(hospital_id)
    if not hospital or not hospital.approved:
        raise NotFound('Hospital not found')
    name = clean_text(patient_name)
    if not name:
        raise ValidationError({'patientName': ['Patient name is required']})
    try:
        booking = storage.create_booking(
            user_id=principal.id,
            hospital_id=hospital_id,
            bed_type_id=bed_type_id,
            patient_name=name,
            patient_phone=clean_text(patient_phone),
            notes=clean_text(notes),
        )
    except store.BedNotFound as e:
        raise NotFound(str(e))
    except store.NoBedsAvailable as e:
        logger.info('booking refused: hospital %s bed type %s exhausted', hospital_id, bed_type_id)
        raise NoBedsAvailable(str(e))
    log_action(principal=principal, action='booking_create', object_type='booking', object_id=booking.id,
               detail={'hospitalId': hospital_id, 'bedTypeId': bed_type_id})
    return booking


def _get_or_404(storage: BaseStorage, booking_id: int) -> Booking:
    booking = storage.get_booking(booking_id)
    if not booking:
        raise NotFound('Booking not found')
    return booking


def cancel_user_booking(storage: BaseStorage, principal, booking_id: int) -> Booking:
    booking = _get_or_404(storage, booking_id)
    if booking.user_id != principal.id:
        raise PermissionDenied('Forbidden')
    if booking.status != STATUS_PENDING:
        raise Conflict('Can only cancel pending bookings')
    updated = storage.update_booking_status(booking_id, STATUS_CANCELED)
    log_action(principal=principal, action='booking_cancel', object_type='booking', object_id=booking_id)
    return updated


def set_booking_status(storage: BaseStorage, principal, booking_id: int, status: str) -> Booking:
    """Hospital side status change.  Any of approved/rejected/canceled, from any state."""
    booking = _get_or_404(storage, booking_id)
    if booking.hospital_id != principal.id:
        raise PermissionDenied('Forbidden')
    previous = booking.status
    updated = storage.update_booking_status(booking_id, status)
    log_action(principal=principal, action='booking_status', object_type='booking', object_id=booking_id,
               detail={'from': previous, 'to': status})
    return updated


def describe_bookings(storage: BaseStorage, bookings: list[Booking]) -> list[dict]:
    hospitals = {h.id: h.name for h in storage.get_all_hospitals()}
    names = bed_type_names(storage)
    return [
        format_booking(
            b,
            hospital_name=hospitals.get(b.hospital_id, 'Unknown Hospital'),
            bed_type_name=names.get(b.bed_type_id, 'Unknown Bed Type'),
        )
        for b in sorted(bookings, key=lambda b: b.id)
    ]
