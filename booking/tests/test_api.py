"""
Integration tests for the bed booking API.

These tests walk the main flows end to end over HTTP: registration and
approval of hospitals, patient bookings against a hospital's inventory,
hospital side booking management and the external directory settings.
Each test starts from a freshly seeded in-memory store.

To run the tests:

```
pytest -q booking/tests
```
"""
from django.core.cache import cache
from django.test import override_settings
from rest_framework import status
from rest_framework.test import APIClient, APISimpleTestCase

from booking.services.directory import reset_directory
from booking.storage import get_storage, reset_storage

HOSPITAL = {
    'username': 'cityhospital',
    'password': 'hosp-pass',
    'name': 'City Hospital',
    'email': 'info@city.example.com',
    'address': '1 Main St',
    'city': 'Springfield',
    'state': 'IL',
    'zipCode': '62701',
    'phone': '555-0100',
}

PATIENT = {
    'username': 'patient1',
    'password': 'user-pass',
    'email': 'patient1@example.com',
    'name': 'Pat Ient',
}


@override_settings(PASSWORD_HASHERS=['django.contrib.auth.hashers.MD5PasswordHasher'], HOSPITAL_API_KEY='')
class BookingAPITests(APISimpleTestCase):
    def setUp(self) -> None:
        """Register one hospital (approved by the admin) and one patient."""
        reset_storage()
        reset_directory()
        cache.clear()
        self.storage = get_storage()
        self.icu = self.storage.get_bed_type_by_name('ICU')

        self.admin = self.login('user', 'admin', 'admin123')
        r = APIClient().post('/api/hospitals/register', HOSPITAL, format='json')
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        self.hospital_id = r.data['id']
        r = self.admin.patch(f'/api/admin/hospitals/{self.hospital_id}/approve')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.hospital = self.login('hospital', HOSPITAL['username'], HOSPITAL['password'])

        r = APIClient().post('/api/users/register', PATIENT, format='json')
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        self.patient = self.login('user', PATIENT['username'], PATIENT['password'])

    def login(self, kind: str, username: str, password: str) -> APIClient:
        """Return a client holding a session for the given account."""
        client = APIClient()
        r = client.post(f'/api/auth/{kind}/login', {'username': username, 'password': password}, format='json')
        self.assertEqual(r.status_code, status.HTTP_200_OK, r.data)
        return client

    def set_beds(self, total, available=None, bed_type_id=None):
        payload = {'bedTypeId': bed_type_id or self.icu.id, 'totalBeds': total}
        if available is not None:
            payload['availableBeds'] = available
        return self.hospital.post('/api/hospital/beds', payload, format='json')

    def book(self, client=None, **extra):
        payload = {'hospitalId': self.hospital_id, 'bedTypeId': self.icu.id, 'patientName': 'Jane Doe'}
        payload.update(extra)
        return (client or self.patient).post('/api/bookings', payload, format='json')

    def icu_available(self):
        r = APIClient().get(f'/api/hospitals/{self.hospital_id}/beds')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        return next(b['availableBeds'] for b in r.data if b['bedTypeId'] == self.icu.id)

    def test_registration_response_and_pending_state(self):
        payload = dict(HOSPITAL, username='northside', email='north@example.com', name='Northside')
        r = APIClient().post('/api/hospitals/register', payload, format='json')
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        self.assertEqual(r.data['message'], 'Hospital registration submitted for approval')
        pending = self.admin.get('/api/admin/hospitals/pending').data
        self.assertEqual([h['name'] for h in pending], ['Northside'])
        # Not listed publicly until approved.
        names = [h['name'] for h in APIClient().get('/api/hospitals').data]
        self.assertNotIn('Northside', names)
        r = APIClient().get(f"/api/hospitals/{pending[0]['id']}")
        self.assertEqual(r.status_code, status.HTTP_404_NOT_FOUND)

    def test_duplicate_registration_is_rejected(self):
        r = APIClient().post('/api/users/register', PATIENT, format='json')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(r.data['error']['message'], 'Username already exists')
        r = APIClient().post('/api/users/register', dict(PATIENT, username='other'), format='json')
        self.assertEqual(r.data['error']['message'], 'Email already exists')

    def test_registration_field_errors(self):
        r = APIClient().post('/api/users/register', {'username': 'x'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(r.data['ok'])
        for field in ('password', 'email', 'name'):
            self.assertIn(field, r.data['error']['message'])

    def test_session_reports_principal(self):
        self.assertIsNone(APIClient().get('/api/auth/session').data)
        self.assertEqual(self.patient.get('/api/auth/session').data['role'], 'user')
        data = self.hospital.get('/api/auth/session').data
        self.assertTrue(data['isHospital'])
        self.assertEqual(data['id'], self.hospital_id)

    def test_logout_ends_session(self):
        r = self.patient.post('/api/auth/logout')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertIsNone(self.patient.get('/api/auth/session').data)
        self.assertEqual(self.patient.get('/api/user/bookings').status_code, status.HTTP_401_UNAUTHORIZED)

    def test_bed_types_are_public(self):
        r = APIClient().get('/api/bedtypes')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(len(r.data), 5)

    def test_bed_upsert_creates_then_updates(self):
        r = self.set_beds(5)
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        self.assertEqual(r.data['availableBeds'], 5)
        r = self.set_beds(8, available=6)
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual((r.data['totalBeds'], r.data['availableBeds']), (8, 6))
        beds = self.hospital.get('/api/hospital/beds').data
        self.assertEqual(len(beds), 1)
        self.assertEqual(beds[0]['bedTypeName'], 'ICU')

    def test_bed_upsert_validation(self):
        r = self.set_beds(2, available=3)
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('availableBeds', r.data['error']['message'])
        r = self.set_beds(2, bed_type_id=999)
        self.assertEqual(r.status_code, status.HTTP_404_NOT_FOUND)

    def test_icu_booking_scenario(self):
        self.set_beds(5)
        for i in range(5):
            r = self.book(patientName=f'Patient {i}')
            self.assertEqual(r.status_code, status.HTTP_201_CREATED)
            self.assertEqual(r.data['status'], 'pending')
        self.assertEqual(self.icu_available(), 0)

        r = self.book()
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(r.data['error']['message'], 'No beds available of this type')
        self.assertEqual(len(self.admin.get('/api/admin/bookings').data), 5)

        third = self.patient.get('/api/user/bookings').data[2]
        r = self.patient.patch(f"/api/user/bookings/{third['id']}/cancel")
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.data['status'], 'canceled')
        self.assertEqual(self.icu_available(), 1)

        r = self.patient.patch(f"/api/user/bookings/{third['id']}/cancel")
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(self.icu_available(), 1)

    def test_booking_unknown_hospital_or_missing_bed(self):
        r = self.book(hospitalId=999)
        self.assertEqual(r.status_code, status.HTTP_404_NOT_FOUND)
        r = self.book()
        self.assertEqual(r.status_code, status.HTTP_404_NOT_FOUND)

    def test_booking_lists_include_names(self):
        self.set_beds(3)
        self.book()
        [booking] = self.patient.get('/api/user/bookings').data
        self.assertEqual(booking['hospitalName'], 'City Hospital')
        self.assertEqual(booking['bedTypeName'], 'ICU')
        [seen] = self.hospital.get('/api/hospital/bookings').data
        self.assertEqual(seen['id'], booking['id'])

    def test_hospital_status_changes(self):
        self.set_beds(3)
        first = self.book().data
        second = self.book().data
        r = self.hospital.patch(f"/api/hospital/bookings/{first['id']}", {'status': 'approved'}, format='json')
        self.assertEqual(r.data['status'], 'approved')
        r = self.hospital.patch(f"/api/hospital/bookings/{second['id']}", {'status': 'rejected'}, format='json')
        self.assertEqual(r.data['status'], 'rejected')
        # Neither approval nor rejection frees a bed.
        self.assertEqual(self.icu_available(), 1)

        r = self.hospital.patch(f"/api/hospital/bookings/{first['id']}", {'status': 'bogus'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('Invalid status', str(r.data['error']['message']))
        r = self.patient.patch(f"/api/user/bookings/{first['id']}/cancel")
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)

    def test_hospital_detail_includes_beds(self):
        self.set_beds(4)
        r = APIClient().get(f'/api/hospitals/{self.hospital_id}')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.data['zipCode'], '62701')
        self.assertEqual(r.data['beds'][0]['totalBeds'], 4)

    def test_search_without_directory_lists_all_approved(self):
        for location in ('springfield', 'Nowhere', ''):
            r = APIClient().get('/api/hospitals', {'location': location})
            self.assertEqual([h['id'] for h in r.data], [self.hospital_id])

    def test_markup_only_patient_name_is_rejected(self):
        self.set_beds(2)
        r = self.book(patientName='<img src=x onerror=alert(1)>')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('patientName', r.data['error']['message'])
        self.assertEqual(self.icu_available(), 2)
        r = self.book(patientName='<em>Jane</em> Doe')
        self.assertEqual(r.data['patientName'], 'Jane Doe')

    def test_reposting_total_keeps_held_beds(self):
        self.set_beds(3)
        for _ in range(3):
            self.book()
        r = self.set_beds(3)
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(self.icu_available(), 0)
        self.assertEqual(self.book().status_code, status.HTTP_400_BAD_REQUEST)

    def test_directory_usernames_are_reserved(self):
        payload = dict(HOSPITAL, username='hospital_42', email='h42@example.com')
        r = APIClient().post('/api/hospitals/register', payload, format='json')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('username', r.data['error']['message'])
        payload = dict(HOSPITAL, username='Northside', email='n@example.com', name='<b></b>')
        r = APIClient().post('/api/hospitals/register', payload, format='json')
        self.assertIn('name', r.data['error']['message'])

    def test_revoking_hospital_hides_it(self):
        r = self.admin.patch(f'/api/admin/hospitals/{self.hospital_id}/reject')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertFalse(r.data['approved'])
        self.assertEqual(APIClient().get('/api/hospitals').data, [])
        self.assertEqual(self.book().status_code, status.HTTP_404_NOT_FOUND)
        r = self.admin.patch('/api/admin/hospitals/999/approve')
        self.assertEqual(r.status_code, status.HTTP_404_NOT_FOUND)

    def test_admin_bed_type_maintenance(self):
        r = self.admin.post('/api/admin/bedtypes', {'name': 'Burn Unit', 'icon': 'flame'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        bed_type_id = r.data['id']
        r = self.admin.post('/api/admin/bedtypes', {'name': 'burn unit'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        r = self.admin.patch(f'/api/admin/bedtypes/{bed_type_id}', {'description': 'Burns'}, format='json')
        self.assertEqual(r.data['description'], 'Burns')
        r = self.admin.patch(f'/api/admin/bedtypes/{bed_type_id}', {'name': 'Renamed'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)

    def test_api_key_configuration(self):
        r = APIClient().get('/api/config/api-status')
        self.assertEqual(r.data, {'available': False, 'hasApiKey': False,
                                  'apiUrl': 'https://api.healthcare.gov/api/v1'})
        r = self.admin.post('/api/config/api-key', {}, format='json')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('API key is required', str(r.data['error']['message']))

    def test_healthz(self):
        r = APIClient().get('/healthz')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.json()['hospitals'], 1)
