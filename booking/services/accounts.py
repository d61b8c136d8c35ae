from typing import Optional

from django.contrib.auth.hashers import check_password, make_password
from rest_framework.exceptions import AuthenticationFailed, PermissionDenied

from ..exceptions import Conflict
from ..records import ROLE_USER, Hospital, User
from ..storage import BaseStorage, DuplicateRecord

BAD_CREDENTIALS = 'Incorrect username or password'


def register_user(storage: BaseStorage, *, username, password, email, name, phone=None) -> User:
    # Pre-checks give the precise message; the storage enforces uniqueness again atomically.
    if storage.get_user_by_username(username):
        raise Conflict('Username already exists')
    if storage.get_user_by_email(email):
        raise Conflict('Email already exists')
    try:
        return storage.create_user(
            username=username,
            password=make_password(password),
            email=email,
            name=name,
            phone=phone,
            role=ROLE_USER,
        )
    except DuplicateRecord as e:
        raise Conflict(str(e))


def register_hospital(storage: BaseStorage, *, password, **fields) -> Hospital:
    if storage.get_hospital_by_username(fields['username']):
        raise Conflict('Username already exists')
    try:
        return storage.create_hospital(password=make_password(password), **fields)
    except DuplicateRecord as e:
        raise Conflict(str(e))


def _verify(record, password: str) -> bool:
    if record is None:
        # Hash anyway so unknown usernames cost the same as bad passwords.
        make_password(password)
        return False
    return check_password(password, record.password)


def authenticate_user(storage: BaseStorage, username: str, password: str) -> User:
    user = storage.get_user_by_username(username)
    if not _verify(user, password):
        raise AuthenticationFailed(BAD_CREDENTIALS)
    return user


def authenticate_hospital(storage: BaseStorage, username: str, password: str) -> Hospital:
    hospital: Optional[Hospital] = storage.get_hospital_by_username(username)
    if not _verify(hospital, password):
        raise AuthenticationFailed(BAD_CREDENTIALS)
    if not hospital.approved:
        raise PermissionDenied('Hospital not approved yet')
    return hospital
