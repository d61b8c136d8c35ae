"""
Administrator endpoints: the hospital approval queue, a view over every
booking, and bed type maintenance.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..permissions import IsAdminRole
from ..serializers.beds import BedTypeCreateSerializer, BedTypeUpdateSerializer
from ..services import bookings as booking_service
from ..services.approval import set_approval
from ..services.formats import format_bed_type, format_hospital
from ..services.inventory import create_bed_type, update_bed_type
from ..storage import get_storage


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def pending_hospitals(request):
    return Response([format_hospital(h) for h in get_storage().get_pending_hospitals()])


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def all_hospitals(request):
    return Response([format_hospital(h) for h in get_storage().get_all_hospitals()])


@api_view(['PATCH'])
@permission_classes([IsAuthenticated, IsAdminRole])
def approve_hospital(request, hospital_id: int):
    return Response(format_hospital(set_approval(get_storage(), request.user, hospital_id, True)))


@api_view(['PATCH'])
@permission_classes([IsAuthenticated, IsAdminRole])
def reject_hospital(request, hospital_id: int):
    """Revoke (or withhold) approval.  Existing beds and bookings are untouched."""
    return Response(format_hospital(set_approval(get_storage(), request.user, hospital_id, False)))


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def all_bookings(request):
    storage = get_storage()
    return Response(booking_service.describe_bookings(storage, storage.get_all_bookings()))


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def bed_type_create(request):
    s = BedTypeCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    bed_type = create_bed_type(get_storage(), request.user, **s.validated_data)
    return Response(format_bed_type(bed_type), status=status.HTTP_201_CREATED)


@api_view(['PATCH'])
@permission_classes([IsAuthenticated, IsAdminRole])
def bed_type_update(request, bed_type_id: int):
    s = BedTypeUpdateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    bed_type = update_bed_type(get_storage(), request.user, bed_type_id, **s.validated_data)
    return Response(format_bed_type(bed_type))
