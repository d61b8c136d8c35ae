import logging

from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


class Conflict(APIException):
    """A request that is well formed but clashes with current state."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Request conflicts with current state.'
    default_code = 'conflict'


class NoBedsAvailable(Conflict):
    default_detail = 'No beds available of this type'
    default_code = 'no_beds_available'


def api_exception_handler(exc, context):
    resp = drf_exception_handler(exc, context)
    if resp is None:
        view = context.get('view')
        logger.exception('unhandled error in %s', type(view).__name__ if view else 'view', exc_info=exc)
        return Response({'ok': False, 'error': {'code': 'server_error', 'message': 'Internal server error'}}, status=500)
    # normalize response
    code = getattr(exc, 'default_code', None) or 'api_error'
    detail = None
    if isinstance(resp.data, dict):
        detail = resp.data.get('detail') or resp.data
    else:
        detail = resp.data
    return Response({'ok': False, 'error': {'code': code, 'message': detail}}, status=resp.status_code, headers=_retained_headers(resp))


def _retained_headers(resp):
    return {k: v for k, v in resp.items() if k in ('WWW-Authenticate', 'Retry-After')}
