"""
Bed inventory management: bed types and each hospital's bed counts.
"""
import logging
from typing import Optional

from rest_framework.exceptions import NotFound, ValidationError

from ..exceptions import Conflict
from ..records import Bed, BedType
from ..storage import BaseStorage, DuplicateRecord
from .audit import log_action
from .formats import format_bed

logger = logging.getLogger(__name__)


def bed_type_names(storage: BaseStorage) -> dict[int, str]:
    return {t.id: t.name for t in storage.get_all_bed_types()}


def describe_beds(storage: BaseStorage, beds: list[Bed]) -> list[dict]:
    names = bed_type_names(storage)
    return [format_bed(b, names.get(b.bed_type_id, 'Unknown')) for b in beds]


def save_hospital_bed(storage: BaseStorage, principal, *, bed_type_id: int, total_beds: int,
                      available_beds: Optional[int]=None, price_per_night: Optional[int]=None) -> tuple[Bed, bool]:
    """Create or update the calling hospital's counts for one bed type.

    When ``available_beds`` is omitted a new record starts fully available
    and an existing one keeps its current availability, capped at the new total.
    """
    if storage.get_bed_type(bed_type_id) is None:
        raise NotFound('Bed type not found')
    if available_beds is not None and available_beds > total_beds:
        raise ValidationError({'availableBeds': ['Available beds cannot exceed total beds.']})

    fields = {'total_beds': total_beds}
    if price_per_night is not None:
        fields['price_per_night'] = price_per_night

    def update(current: Bed) -> dict:
        # Without explicit counts, beds held by bookings stay held.
        kept = available_beds if available_beds is not None else min(current.available_beds, total_beds)
        return dict(fields, available_beds=kept)

    defaults = dict(fields, available_beds=total_beds if available_beds is None else available_beds)
    bed, created = storage.update_or_create_bed(principal.id, bed_type_id, defaults=defaults, update=update)
    log_action(principal=principal, action='bed_create' if created else 'bed_update', object_type='bed',
               object_id=bed.id, detail={'bedTypeId': bed_type_id, 'totalBeds': total_beds,
                                         'availableBeds': bed.available_beds})
    return bed, created


def create_bed_type(storage: BaseStorage, principal, *, name: str, description=None, icon=None) -> BedType:
    try:
        bed_type = storage.create_bed_type(name.strip(), description=description, icon=icon)
    except DuplicateRecord as e:
        raise Conflict(str(e))
    log_action(principal=principal, action='bed_type_create', object_type='bed_type', object_id=bed_type.id,
               detail={'name': bed_type.name})
    return bed_type


def update_bed_type(storage: BaseStorage, principal, bed_type_id: int, **fields) -> BedType:
    bed_type = storage.update_bed_type(bed_type_id, **fields)
    if bed_type is None:
        raise NotFound('Bed type not found')
    log_action(principal=principal, action='bed_type_update', object_type='bed_type', object_id=bed_type_id,
               detail=fields)
    return bed_type
