"""
Session based authentication against the booking storage.

Users and hospitals are separate credential spaces.  A successful login
stores ``{'kind': 'user'|'hospital', 'id': ...}`` in the Django session
(signed cookie) and this module turns that back into a principal for
each request.  Hospital sessions stop authenticating as soon as the
hospital's approval is revoked.
"""
from __future__ import annotations

from dataclasses import dataclass

from rest_framework import authentication

from .records import ROLE_ADMIN, Hospital, User
from .storage import get_storage

SESSION_KEY = '_medbeds_principal'


@dataclass
class UserPrincipal:
    record: User
    is_authenticated = True
    is_hospital = False

    @property
    def pk(self) -> str:
        return f'user:{self.record.id}'

    @property
    def id(self) -> int:
        return self.record.id

    @property
    def role(self) -> str:
        return self.record.role

    @property
    def is_admin(self) -> bool:
        return self.record.role == ROLE_ADMIN


@dataclass
class HospitalPrincipal:
    record: Hospital
    is_authenticated = True
    is_hospital = True
    is_admin = False
    role = 'hospital'

    @property
    def pk(self) -> str:
        return f'hospital:{self.record.id}'

    @property
    def id(self) -> int:
        return self.record.id


def login(request, principal) -> None:
    """Bind ``principal`` to the request's session."""
    session = request.session
    session.cycle_key()
    session[SESSION_KEY] = {'kind': 'hospital' if principal.is_hospital else 'user', 'id': principal.id}


def logout(request) -> None:
    request.session.flush()


def principal_from_session(session):
    data = session.get(SESSION_KEY) or {}
    kind, pk = data.get('kind'), data.get('id')
    if pk is None:
        return None
    storage = get_storage()
    if kind == 'hospital':
        hospital = storage.get_hospital(pk)
        if hospital is None or not hospital.approved:
            return None
        return HospitalPrincipal(hospital)
    if kind == 'user':
        user = storage.get_user(pk)
        return UserPrincipal(user) if user else None
    return None


class StoreSessionAuthentication(authentication.SessionAuthentication):
    """Resolve the session principal from storage instead of ``django.contrib.auth``."""

    def authenticate(self, request):
        principal = principal_from_session(request._request.session)
        if principal is None:
            return None
        self.enforce_csrf(request)
        return (principal, None)

    def authenticate_header(self, request):
        # A value here makes DRF answer 401 rather than 403 for anonymous callers.
        return 'Session'
