from django.http import JsonResponse

from ..storage import get_storage


def healthz(request):
    try:
        storage = get_storage()
        return JsonResponse({
            'ok': True,
            'storage': type(storage).__name__,
            'hospitals': len(storage.get_all_hospitals()),
        })
    except Exception as e:
        return JsonResponse({'ok': False, 'error': str(e)}, status=500)
