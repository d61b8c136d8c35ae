"""JSON shapes for storage records (camelCase, passwords never included)."""
from typing import Optional

from ..records import Bed, BedType, Booking, Hospital


def format_hospital(hospital: Hospital) -> dict:
    return {
        'id': hospital.id,
        'username': hospital.username,
        'name': hospital.name,
        'email': hospital.email,
        'address': hospital.address,
        'city': hospital.city,
        'state': hospital.state,
        'zipCode': hospital.zip_code,
        'phone': hospital.phone,
        'website': hospital.website,
        'latitude': hospital.latitude,
        'longitude': hospital.longitude,
        'approved': hospital.approved,
    }


def format_bed_type(bed_type: BedType) -> dict:
    return {
        'id': bed_type.id,
        'name': bed_type.name,
        'description': bed_type.description,
        'icon': bed_type.icon,
    }


def format_bed(bed: Bed, bed_type_name: Optional[str]=None) -> dict:
    data = {
        'id': bed.id,
        'hospitalId': bed.hospital_id,
        'bedTypeId': bed.bed_type_id,
        'totalBeds': bed.total_beds,
        'availableBeds': bed.available_beds,
        'pricePerNight': bed.price_per_night,
    }
    if bed_type_name is not None:
        data['bedTypeName'] = bed_type_name
    return data


def format_booking(booking: Booking, *, hospital_name: Optional[str]=None, bed_type_name: Optional[str]=None) -> dict:
    data = {
        'id': booking.id,
        'userId': booking.user_id,
        'hospitalId': booking.hospital_id,
        'bedTypeId': booking.bed_type_id,
        'patientName': booking.patient_name,
        'patientPhone': booking.patient_phone,
        'notes': booking.notes,
        'status': booking.status,
        'createdAt': booking.created_at.isoformat(),
    }
    if hospital_name is not None:
        data['hospitalName'] = hospital_name
    if bed_type_name is not None:
        data['bedTypeName'] = bed_type_name
    return data
