"""
Hospital directory backed by an optional external data provider.

When an API key is configured and the provider's ``/health`` probe
answers, hospital listings and bed lookups are refreshed from the
provider and cached in the storage; otherwise everything is served from
the storage alone.  Provider failures are logged and never reach the
caller: the local data is returned instead.

Remote hospitals are keyed locally by the username ``hospital_<remoteId>``.
New ones are created already approved.  Bed counts from the provider
replace the local counts (``overwrite``) or, with the ``merge`` policy,
move local availability by the change in remote capacity.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional

import requests
from django.conf import settings
from django.contrib.auth.hashers import make_password
from django.core.signals import setting_changed
from django.dispatch import receiver

from ..records import Bed, Hospital
from ..serializers.directory import RemoteBedSerializer, RemoteHospitalSerializer
from ..storage import BaseStorage, DuplicateRecord, get_storage

logger = logging.getLogger(__name__)

REMOTE_USERNAME_PREFIX = 'hospital_'
POLICY_OVERWRITE = 'overwrite'
POLICY_MERGE = 'merge'


@dataclass
class ApiConfig:
    api_key: str
    api_url: str


def remote_username(remote_id) -> str:
    return f'{REMOTE_USERNAME_PREFIX}{remote_id}'


def remote_id_for(hospital: Hospital) -> Optional[str]:
    if not hospital.username.startswith(REMOTE_USERNAME_PREFIX):
        return None
    return hospital.username[len(REMOTE_USERNAME_PREFIX):]


def merge_counts(total: int, available: int) -> Callable[[Bed], dict]:
    """Build an update that follows remote capacity without discarding local bookings."""
    def update(bed: Bed) -> dict:
        if bed.total_beds == total:
            return {}
        shifted = bed.available_beds + (total - bed.total_beds)
        return {'total_beds': total, 'available_beds': min(max(shifted, 0), total)}
    return update


class HospitalDirectory:
    def __init__(self, storage: Optional[BaseStorage]=None, config: Optional[ApiConfig]=None, *,
                 session: Optional[requests.Session]=None, timeout: Optional[int]=None,
                 policy: Optional[str]=None) -> None:
        self._storage = storage
        self.config = config or ApiConfig(api_key=settings.HOSPITAL_API_KEY, api_url=settings.HOSPITAL_API_URL)
        self.session = session or requests.Session()
        self.timeout = timeout or settings.HOSPITAL_API_TIMEOUT
        self.policy = policy or settings.HOSPITAL_SYNC_POLICY
        self._config_lock = threading.Lock()

    @property
    def storage(self) -> BaseStorage:
        return self._storage if self._storage is not None else get_storage()

    # ------------------------------------------------------------------
    # configuration
    # ------------------------------------------------------------------
    def update_config(self, api_key: str, api_url: Optional[str]=None) -> None:
        with self._config_lock:
            self.config = ApiConfig(api_key=api_key, api_url=api_url or self.config.api_url)
        logger.info('hospital API configuration updated (url=%s)', self.config.api_url)

    def describe_config(self) -> dict:
        """Current configuration without the key itself."""
        config = self.config
        return {'apiUrl': config.api_url, 'hasApiKey': bool(config.api_key)}

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------
    def _get(self, path: str, params: Optional[dict]=None) -> requests.Response:
        config = self.config
        url = config.api_url.rstrip('/') + path
        return self.session.get(url, params=params, headers={'X-API-KEY': config.api_key}, timeout=self.timeout)

    def _fetch_json(self, path: str, params: Optional[dict]=None):
        r = self._get(path, params)
        r.raise_for_status()
        return r.json()

    def is_available(self) -> bool:
        if not self.config.api_key:
            return False
        try:
            return self._get('/health').status_code == 200
        except Exception as e:
            logger.warning('hospital API not available: %s', e)
            return False

    # ------------------------------------------------------------------
    # public lookups
    # ------------------------------------------------------------------
    def search_hospitals(self, location: Optional[str]=None) -> list[Hospital]:
        """Approved hospitals, refreshed from the provider when it is reachable."""
        storage = self.storage
        try:
            if not self.is_available():
                return self._local_hospitals()
            payload = self._fetch_json('/hospitals', {'location': location} if location else None)
            if not isinstance(payload, list):
                raise ValueError('expected a list of hospitals')
            hospitals = []
            for item in payload:
                hospital = self._ingest_hospital(item)
                if hospital is not None and hospital.approved:
                    hospitals.append(hospital)
            return hospitals
        except Exception:
            logger.exception('error fetching hospitals from API, using local data')
            return self._local_hospitals(storage)

    def get_hospital(self, hospital_id: int) -> Optional[Hospital]:
        """Local hospital record, with its beds refreshed from the provider when possible."""
        storage = self.storage
        hospital = storage.get_hospital(hospital_id)
        if hospital is None:
            return None
        self._refresh_beds(hospital)
        return storage.get_hospital(hospital_id)

    def get_hospital_beds(self, hospital_id: int) -> list[Bed]:
        storage = self.storage
        hospital = storage.get_hospital(hospital_id)
        if hospital is None:
            return []
        self._refresh_beds(hospital)
        return storage.get_beds_by_hospital(hospital_id)

    # ------------------------------------------------------------------
    # ingestion
    # ------------------------------------------------------------------
    def _local_hospitals(self, storage: Optional[BaseStorage]=None) -> list[Hospital]:
        # The location term only applies to the remote query.
        return (storage or self.storage).get_approved_hospitals()

    def _refresh_beds(self, hospital: Hospital) -> None:
        remote_id = remote_id_for(hospital)
        if remote_id is None:
            return
        try:
            if not self.is_available():
                return
            payload = self._fetch_json(f'/hospitals/{remote_id}')
            if payload:
                self._ingest_beds(hospital.id, payload.get('beds') or [])
        except Exception:
            logger.exception('error fetching hospital %s from API, using local data', hospital.id)

    def _ingest_hospital(self, item) -> Optional[Hospital]:
        s = RemoteHospitalSerializer(data=item)
        if not s.is_valid():
            logger.warning('skipping malformed hospital from API: %s', s.errors)
            return None
        data = s.validated_data
        storage = self.storage
        username = remote_username(data['id'])
        hospital = storage.get_hospital_by_username(username)
        if hospital is not None:
            return hospital

        location = data.get('location') or {}
        try:
            hospital = storage.create_hospital(
                username=username,
                # Synced accounts cannot log in until a password is set for them.
                password=make_password(None),
                name=data['name'],
                email=data.get('email') or '',
                address=data['address']['street'],
                city=data['address']['city'],
                state=data['address']['state'],
                zip_code=data['address']['zipCode'],
                phone=data.get('phone') or '',
                website=data.get('website') or '',
                latitude=str(location['lat']) if 'lat' in location else None,
                longitude=str(location['lng']) if 'lng' in location else None,
            )
        except DuplicateRecord:
            # Another request synced it first.
            return storage.get_hospital_by_username(username)
        hospital = storage.update_hospital_approval(hospital.id, True) or hospital
        logger.info('imported hospital %s as %s', data['id'], hospital.id)
        self._ingest_beds(hospital.id, item.get('beds') or [])
        return hospital

    def _ingest_beds(self, hospital_id: int, remote_beds) -> None:
        storage = self.storage
        for raw in remote_beds:
            s = RemoteBedSerializer(data=raw)
            if not s.is_valid():
                logger.warning('skipping malformed bed entry for hospital %s: %s', hospital_id, s.errors)
                continue
            entry = s.validated_data
            bed_type, created = storage.get_or_create_bed_type(entry['type'].strip())
            if created:
                logger.info('created bed type %r from API data', bed_type.name)
            defaults = {'total_beds': entry['total'], 'available_beds': entry['available']}
            update = merge_counts(entry['total'], entry['available']) if self.policy == POLICY_MERGE else None
            storage.update_or_create_bed(hospital_id, bed_type.id, defaults=defaults, update=update)


_directory: Optional[HospitalDirectory] = None
_directory_lock = threading.Lock()


def get_directory() -> HospitalDirectory:
    global _directory
    with _directory_lock:
        if _directory is None:
            _directory = HospitalDirectory()
        return _directory


def reset_directory() -> None:
    global _directory
    with _directory_lock:
        _directory = None


@receiver(setting_changed)
def _directory_setting_changed(sender, setting, **kwargs):
    if setting.startswith('HOSPITAL_'):
        reset_directory()
