from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from ..permissions import IsAdminRole
from ..serializers.config import ApiKeySerializer
from ..services.audit import log_action
from ..services.directory import get_directory


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def api_key_update(request):
    """Replace the external directory credentials and report whether it now answers."""
    s = ApiKeySerializer(data=request.data)
    s.is_valid(raise_exception=True)
    directory = get_directory()
    directory.update_config(s.validated_data['apiKey'], s.validated_data.get('apiUrl') or None)
    log_action(principal=request.user, action='api_config_update', object_type='config',
               detail={'apiUrl': directory.config.api_url})
    return Response({
        'success': True,
        'apiConfig': directory.describe_config(),
        'apiAvailable': directory.is_available(),
    })


@api_view(['GET'])
@permission_classes([AllowAny])
def api_status(request):
    directory = get_directory()
    config = directory.describe_config()
    return Response({
        'available': directory.is_available(),
        'hasApiKey': config['hasApiKey'],
        'apiUrl': config['apiUrl'],
    })
