"""
Endpoints for a logged-in hospital: its bed inventory and the bookings
made against it.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..permissions import IsHospital
from ..serializers.beds import BedSaveSerializer
from ..serializers.bookings import BookingStatusSerializer
from ..services import bookings as booking_service
from ..services.formats import format_bed, format_booking
from ..services.inventory import describe_beds, save_hospital_bed
from ..storage import get_storage


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsHospital])
def hospital_beds(request):
    """List the hospital's beds, or create/replace the counts for one bed type.

    ``POST`` answers 201 when a new bed record is created and 200 when
    an existing one is overwritten.
    """
    storage = get_storage()
    if request.method == 'GET':
        return Response(describe_beds(storage, storage.get_beds_by_hospital(request.user.id)))

    s = BedSaveSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    bed, created = save_hospital_bed(
        storage, request.user,
        bed_type_id=vd['bedTypeId'],
        total_beds=vd['totalBeds'],
        available_beds=vd.get('availableBeds'),
        price_per_night=vd.get('pricePerNight'),
    )
    return Response(format_bed(bed), status=status.HTTP_201_CREATED if created else status.HTTP_200_OK)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsHospital])
def hospital_bookings(request):
    storage = get_storage()
    return Response(booking_service.describe_bookings(storage, storage.get_bookings_by_hospital(request.user.id)))


@api_view(['PATCH'])
@permission_classes([IsAuthenticated, IsHospital])
def hospital_booking_status(request, booking_id: int):
    s = BookingStatusSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    booking = booking_service.set_booking_status(get_storage(), request.user, booking_id, s.validated_data['status'])
    return Response(format_booking(booking))
