from rest_framework.exceptions import NotFound

from ..records import Hospital
from ..storage import BaseStorage
from .audit import log_action


def get_visible_hospital(storage: BaseStorage, hospital_id: int) -> Hospital:
    """Return the hospital if the public may see it, else 404 (unapproved looks like missing)."""
    hospital = storage.get_hospital(hospital_id)
    if not hospital or not hospital.approved:
        raise NotFound('Hospital not found')
    return hospital


def set_approval(storage: BaseStorage, principal, hospital_id: int, approved: bool) -> Hospital:
    """Approve or revoke a hospital.  Beds and bookings are left as they are."""
    hospital = storage.update_hospital_approval(hospital_id, approved)
    if hospital is None:
        raise NotFound('Hospital not found')
    log_action(principal=principal, action='hospital_approve' if approved else 'hospital_reject',
               object_type='hospital', object_id=hospital_id)
    return hospital
