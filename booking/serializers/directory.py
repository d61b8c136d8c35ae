"""Validation of payloads returned by the external hospital directory."""
from rest_framework import serializers


class RemoteAddressSerializer(serializers.Serializer):
    street = serializers.CharField(allow_blank=True)
    city = serializers.CharField(allow_blank=True)
    state = serializers.CharField(allow_blank=True)
    zipCode = serializers.CharField(allow_blank=True)


class RemoteBedSerializer(serializers.Serializer):
    type = serializers.CharField(max_length=64)
    total = serializers.IntegerField(min_value=0)
    available = serializers.IntegerField(min_value=0)

    def validate(self, attrs):
        if attrs['available'] > attrs['total']:
            raise serializers.ValidationError('available exceeds total')
        return attrs


class RemoteLocationSerializer(serializers.Serializer):
    lat = serializers.FloatField()
    lng = serializers.FloatField()


class RemoteHospitalSerializer(serializers.Serializer):
    id = serializers.CharField()
    name = serializers.CharField()
    address = RemoteAddressSerializer()
    phone = serializers.CharField(allow_blank=True, required=False, default='')
    email = serializers.CharField(allow_blank=True, required=False, default='')
    website = serializers.CharField(allow_blank=True, allow_null=True, required=False, default='')
    # Entries are checked one by one with RemoteBedSerializer so a bad bed does not drop the hospital.
    beds = serializers.ListField(child=serializers.DictField(), required=False, default=list)
    location = RemoteLocationSerializer(required=False, allow_null=True, default=None)
