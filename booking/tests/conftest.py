import pytest
import requests
from django.contrib.auth.hashers import make_password
from django.core.cache import cache

from booking.services.directory import reset_directory
from booking.storage import get_storage, reset_storage

FAST_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']


@pytest.fixture(autouse=True)
def fresh_state(settings):
    """Every test starts with an empty store, no API key and no throttle history."""
    settings.PASSWORD_HASHERS = FAST_HASHERS
    settings.HOSPITAL_API_KEY = ''
    settings.HOSPITAL_SYNC_POLICY = 'overwrite'
    reset_storage()
    reset_directory()
    cache.clear()
    yield
    reset_storage()
    reset_directory()


@pytest.fixture
def storage():
    return get_storage()


def make_hospital(storage, username='cityhospital', password='hosp-pass', approved=True, **extra):
    fields = {
        'username': username,
        'password': make_password(password),
        'name': extra.pop('name', 'City Hospital'),
        'email': extra.pop('email', f'{username}@example.com'),
        'address': '1 Main St',
        'city': extra.pop('city', 'Springfield'),
        'state': extra.pop('state', 'IL'),
        'zip_code': extra.pop('zip_code', '62701'),
        'phone': '555-0100',
    }
    fields.update(extra)
    hospital = storage.create_hospital(**fields)
    if approved:
        hospital = storage.update_hospital_approval(hospital.id, True)
    return hospital


def make_user(storage, username='patient1', password='user-pass', role='user'):
    return storage.create_user(
        username=username,
        password=make_password(password),
        email=f'{username}@example.com',
        name=username.title(),
        role=role,
    )


class FakeResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload

    def json(self):
        if self._payload is None:
            raise ValueError('no JSON body')
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f'{self.status_code} error', response=self)


class FakeSession:
    """Stand-in for ``requests.Session`` answering by URL suffix.

    A route value may be a :class:`FakeResponse` or an exception instance
    to raise.  Longer suffixes win, so ``/hospitals/7`` is distinct from
    ``/hospitals``.
    """

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.calls = []

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append({'url': url, 'params': params, 'headers': headers, 'timeout': timeout})
        for suffix in sorted(self.routes, key=len, reverse=True):
            if url.endswith(suffix):
                answer = self.routes[suffix]
                if isinstance(answer, Exception):
                    raise answer
                return answer
        return FakeResponse(404)

    def paths(self):
        return [c['url'] for c in self.calls]


def remote_hospital(remote_id='42', beds=None, **overrides):
    data = {
        'id': remote_id,
        'name': f'Remote Hospital {remote_id}',
        'address': {'street': '9 Remote Rd', 'city': 'Shelbyville', 'state': 'IL', 'zipCode': '62565'},
        'phone': '555-0199',
        'email': f'remote{remote_id}@example.com',
        'website': 'https://remote.example.com',
        'beds': beds if beds is not None else [{'type': 'ICU', 'total': 10, 'available': 4}],
        'location': {'lat': 39.4, 'lng': -88.8},
    }
    data.update(overrides)
    return data
