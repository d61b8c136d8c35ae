"""
Login, logout, session and registration endpoints.

Users (patients and administrators) and hospitals log in through
separate endpoints and are looked up in separate credential spaces.
A hospital may only log in once an administrator has approved it.
"""
from __future__ import annotations

from django.views.decorators.csrf import ensure_csrf_cookie
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.exceptions import APIException
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from .. import authentication
from ..serializers.auth import HospitalRegisterSerializer, LoginSerializer, UserRegisterSerializer
from ..services import accounts
from ..services.audit import log_action
from ..storage import get_storage
from ..throttling import LoginRateThrottle


def _ip(request):
    return request.META.get('REMOTE_ADDR')


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([LoginRateThrottle])
def user_login(request):
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    try:
        user = accounts.authenticate_user(get_storage(), vd['username'], vd['password'])
    except APIException:
        log_action(action='login', object_type='user',
                   detail={'result': 'fail', 'username': vd['username'], 'ip': _ip(request)})
        raise
    principal = authentication.UserPrincipal(user)
    authentication.login(request, principal)
    log_action(principal=principal, action='login', object_type='user', object_id=user.id,
               detail={'result': 'ok', 'ip': _ip(request)})
    return Response({'id': user.id, 'username': user.username, 'role': user.role})


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([LoginRateThrottle])
def hospital_login(request):
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    try:
        hospital = accounts.authenticate_hospital(get_storage(), vd['username'], vd['password'])
    except APIException:
        log_action(action='login', object_type='hospital',
                   detail={'result': 'fail', 'username': vd['username'], 'ip': _ip(request)})
        raise
    principal = authentication.HospitalPrincipal(hospital)
    authentication.login(request, principal)
    log_action(principal=principal, action='login', object_type='hospital', object_id=hospital.id,
               detail={'result': 'ok', 'ip': _ip(request)})
    return Response({'id': hospital.id, 'username': hospital.username, 'name': hospital.name, 'isHospital': True})


@api_view(['POST'])
@permission_classes([AllowAny])
def logout_view(request):
    authentication.logout(request)
    return Response({'success': True})


@ensure_csrf_cookie
@api_view(['GET'])
@permission_classes([AllowAny])
def session_view(request):
    """Describe the logged-in principal, or ``null`` for anonymous callers."""
    principal = request.user
    if principal is None:
        return Response(None)
    if principal.is_hospital:
        hospital = principal.record
        return Response({'id': hospital.id, 'username': hospital.username, 'name': hospital.name, 'isHospital': True})
    user = principal.record
    return Response({'id': user.id, 'username': user.username, 'role': user.role})


@api_view(['POST'])
@permission_classes([AllowAny])
def register_user(request):
    s = UserRegisterSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    user = accounts.register_user(
        get_storage(),
        username=vd['username'],
        password=vd['password'],
        email=vd['email'],
        name=vd['name'],
        phone=vd.get('phone'),
    )
    log_action(action='user_register', object_type='user', object_id=user.id)
    return Response({'id': user.id, 'username': user.username, 'email': user.email, 'name': user.name},
                    status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([AllowAny])
def register_hospital(request):
    s = HospitalRegisterSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    hospital = accounts.register_hospital(get_storage(), password=s.validated_data['password'],
                                          **s.to_storage_fields())
    log_action(action='hospital_register', object_type='hospital', object_id=hospital.id)
    return Response({
        'id': hospital.id,
        'name': hospital.name,
        'message': 'Hospital registration submitted for approval',
    }, status=status.HTTP_201_CREATED)
