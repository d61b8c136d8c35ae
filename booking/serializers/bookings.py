from rest_framework import serializers

from ..services.bookings import HOSPITAL_SETTABLE_STATUSES, clean_text


class BookingCreateSerializer(serializers.Serializer):
    hospitalId = serializers.IntegerField(min_value=1)
    bedTypeId = serializers.IntegerField(min_value=1)
    patientName = serializers.CharField(max_length=128)
    patientPhone = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=32)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=2000)

    def validate_patientName(self, v):
        v = clean_text(v)
        if not v:
            raise serializers.ValidationError('Patient name is required')
        return v


class BookingStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=HOSPITAL_SETTABLE_STATUSES,
                                     error_messages={'invalid_choice': 'Invalid status'})
