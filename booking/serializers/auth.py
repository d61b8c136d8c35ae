import bleach
from rest_framework import serializers

from ..services.directory import REMOTE_USERNAME_PREFIX


class LoginSerializer(serializers.Serializer):
    username = serializers.CharField(trim_whitespace=True)
    password = serializers.CharField(trim_whitespace=False)

    def validate_username(self, v):
        v = (v or '').strip()
        if not v:
            raise serializers.ValidationError('Username is required')
        return v

    def validate_password(self, v):
        if not v:
            raise serializers.ValidationError('Password is required')
        return v


class UserRegisterSerializer(serializers.Serializer):
    username = serializers.RegexField(r'^[\w.@+-]+$', max_length=64)
    password = serializers.CharField(min_length=6, max_length=128, write_only=True, trim_whitespace=False)
    email = serializers.EmailField()
    name = serializers.CharField(max_length=128)
    phone = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=32)

    def validate_name(self, v):
        v = bleach.clean((v or '').strip(), tags=set(), strip=True).strip()
        if not v:
            raise serializers.ValidationError('Name is required')
        return v


class HospitalRegisterSerializer(serializers.Serializer):
    username = serializers.RegexField(r'^[\w.@+-]+$', max_length=64)
    password = serializers.CharField(min_length=6, max_length=128, write_only=True, trim_whitespace=False)
    name = serializers.CharField(max_length=200)
    email = serializers.EmailField()
    address = serializers.CharField(max_length=255)
    city = serializers.CharField(max_length=100)
    state = serializers.CharField(max_length=100)
    zipCode = serializers.CharField(max_length=20)
    phone = serializers.CharField(max_length=32)
    website = serializers.URLField(required=False, allow_blank=True, allow_null=True)
    latitude = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=32)
    longitude = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=32)

    def validate_username(self, v):
        # Reserved for hospitals imported from the external directory.
        if v.lower().startswith(REMOTE_USERNAME_PREFIX):
            raise serializers.ValidationError(f'Usernames starting with "{REMOTE_USERNAME_PREFIX}" are reserved')
        return v

    def validate_name(self, v):
        v = bleach.clean(v.strip(), tags=set(), strip=True).strip()
        if not v:
            raise serializers.ValidationError('Name is required')
        return v

    def to_storage_fields(self) -> dict:
        vd = self.validated_data
        return {
            'username': vd['username'],
            'name': vd['name'],
            'email': vd['email'],
            'address': vd['address'],
            'city': vd['city'],
            'state': vd['state'],
            'zip_code': vd['zipCode'],
            'phone': vd['phone'],
            'website': vd.get('website') or None,
            'latitude': vd.get('latitude') or None,
            'longitude': vd.get('longitude') or None,
        }
