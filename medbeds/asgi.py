"""
ASGI config for the medbeds project.

HTTP only; there are no WebSocket routes.
"""
import os

from django.core.asgi import get_asgi_application  # type: ignore

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "medbeds.settings")

application = get_asgi_application()
