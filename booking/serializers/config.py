from rest_framework import serializers


class ApiKeySerializer(serializers.Serializer):
    apiKey = serializers.CharField(max_length=512, error_messages={
        'required': 'API key is required',
        'blank': 'API key is required',
    })
    apiUrl = serializers.URLField(required=False, allow_blank=True)
