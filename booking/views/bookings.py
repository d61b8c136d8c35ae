"""
Patient booking endpoints: create a booking, list own bookings and
cancel a pending one.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..permissions import IsPatientUser
from ..serializers.bookings import BookingCreateSerializer
from ..services import bookings as booking_service
from ..services.formats import format_booking
from ..storage import get_storage
from ..throttling import BookingWriteRateThrottle


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsPatientUser])
@throttle_classes([BookingWriteRateThrottle])
def booking_create(request):
    s = BookingCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    booking = booking_service.create_booking(
        get_storage(), request.user,
        hospital_id=vd['hospitalId'],
        bed_type_id=vd['bedTypeId'],
        patient_name=vd['patientName'],
        patient_phone=vd.get('patientPhone'),
        notes=vd.get('notes'),
    )
    return Response(format_booking(booking), status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPatientUser])
def user_bookings(request):
    storage = get_storage()
    return Response(booking_service.describe_bookings(storage, storage.get_bookings_by_user(request.user.id)))


@api_view(['PATCH'])
@permission_classes([IsAuthenticated, IsPatientUser])
def user_booking_cancel(request, booking_id: int):
    booking = booking_service.cancel_user_booking(get_storage(), request.user, booking_id)
    return Response(format_booking(booking))
