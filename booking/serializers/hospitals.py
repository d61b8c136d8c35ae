from rest_framework import serializers


class HospitalSearchQuerySerializer(serializers.Serializer):
    location = serializers.CharField(required=False, allow_blank=True, max_length=128)
