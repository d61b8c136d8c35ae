"""
URL mappings for the booking API.

Paths follow the front-end's endpoint table.  Trailing slashes are
deliberately omitted.
"""
from django.urls import path, include

from .views import admin, auth, bookings, config, health, hospital_portal, hospitals

urlpatterns = [
    path('', include('django_prometheus.urls')),
    path('healthz', health.healthz, name='healthz'),

    # auth & registration
    path('api/auth/user/login', auth.user_login, name='user_login'),
    path('api/auth/hospital/login', auth.hospital_login, name='hospital_login'),
    path('api/auth/logout', auth.logout_view, name='logout'),
    path('api/auth/session', auth.session_view, name='session'),
    path('api/users/register', auth.register_user, name='user_register'),
    path('api/hospitals/register', auth.register_hospital, name='hospital_register'),

    # public directory
    path('api/bedtypes', hospitals.bed_types, name='bed_types'),
    path('api/hospitals', hospitals.hospital_search, name='hospital_search'),
    path('api/hospitals/<int:hospital_id>', hospitals.hospital_detail, name='hospital_detail'),
    path('api/hospitals/<int:hospital_id>/beds', hospitals.hospital_beds, name='hospital_public_beds'),

    # hospital portal
    path('api/hospital/beds', hospital_portal.hospital_beds, name='hospital_beds'),
    path('api/hospital/bookings', hospital_portal.hospital_bookings, name='hospital_bookings'),
    path('api/hospital/bookings/<int:booking_id>', hospital_portal.hospital_booking_status,
         name='hospital_booking_status'),

    # patient bookings
    path('api/bookings', bookings.booking_create, name='booking_create'),
    path('api/user/bookings', bookings.user_bookings, name='user_bookings'),
    path('api/user/bookings/<int:booking_id>/cancel', bookings.user_booking_cancel, name='user_booking_cancel'),

    # administration
    path('api/admin/hospitals', admin.all_hospitals, name='admin_hospitals'),
    path('api/admin/hospitals/pending', admin.pending_hospitals, name='admin_pending_hospitals'),
    path('api/admin/hospitals/<int:hospital_id>/approve', admin.approve_hospital, name='admin_approve_hospital'),
    path('api/admin/hospitals/<int:hospital_id>/reject', admin.reject_hospital, name='admin_reject_hospital'),
    path('api/admin/bookings', admin.all_bookings, name='admin_bookings'),
    path('api/admin/bedtypes', admin.bed_type_create, name='admin_bed_type_create'),
    path('api/admin/bedtypes/<int:bed_type_id>', admin.bed_type_update, name='admin_bed_type_update'),

    # external directory configuration
    path('api/config/api-key', config.api_key_update, name='api_key_update'),
    path('api/config/api-status', config.api_status, name='api_status'),
]
