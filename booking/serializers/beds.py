from rest_framework import serializers


class BedSaveSerializer(serializers.Serializer):
    bedTypeId = serializers.IntegerField(min_value=1)
    totalBeds = serializers.IntegerField(min_value=0)
    availableBeds = serializers.IntegerField(min_value=0, required=False)
    pricePerNight = serializers.IntegerField(min_value=0, required=False, allow_null=True)

    def validate(self, attrs):
        available = attrs.get('availableBeds')
        if available is not None and available > attrs['totalBeds']:
            raise serializers.ValidationError({'availableBeds': 'Available beds cannot exceed total beds.'})
        return attrs


class BedTypeCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=64)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=255)
    icon = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=64)


class BedTypeUpdateSerializer(serializers.Serializer):
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=255)
    icon = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=64)

    def validate(self, attrs):
        if 'name' in self.initial_data:
            raise serializers.ValidationError({'name': 'Bed type names cannot be changed.'})
        if not attrs:
            raise serializers.ValidationError('Nothing to update.')
        return attrs
