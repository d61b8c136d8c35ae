"""
Public hospital directory endpoints.

Only approved hospitals are ever listed or described; an unapproved
hospital answers 404 exactly as a missing one does.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from ..serializers.hospitals import HospitalSearchQuerySerializer
from ..services.approval import get_visible_hospital
from ..services.directory import get_directory
from ..services.formats import format_bed_type, format_hospital
from ..services.inventory import describe_beds
from ..storage import get_storage


@api_view(['GET'])
@permission_classes([AllowAny])
def bed_types(request):
    return Response([format_bed_type(t) for t in get_storage().get_all_bed_types()])


@api_view(['GET'])
@permission_classes([AllowAny])
def hospital_search(request):
    """Search approved hospitals, optionally by city, state or zip code."""
    q = HospitalSearchQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    hospitals = get_directory().search_hospitals(q.validated_data.get('location') or None)
    return Response([format_hospital(h) for h in hospitals])


@api_view(['GET'])
@permission_classes([AllowAny])
def hospital_detail(request, hospital_id: int):
    get_visible_hospital(get_storage(), hospital_id)
    directory = get_directory()
    hospital = directory.get_hospital(hospital_id)
    storage = directory.storage
    data = format_hospital(hospital)
    data['beds'] = describe_beds(storage, storage.get_beds_by_hospital(hospital_id))
    return Response(data)


@api_view(['GET'])
@permission_classes([AllowAny])
def hospital_beds(request, hospital_id: int):
    """Bed inventory of an approved hospital, refreshed from the external directory when possible."""
    get_visible_hospital(get_storage(), hospital_id)
    directory = get_directory()
    beds = directory.get_hospital_beds(hospital_id)
    return Response(describe_beds(directory.storage, beds))
