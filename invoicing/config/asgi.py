"""
ASGI config for the invoicing project.
"""
import os

from django.core.asgi import get_asgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'invoicing.config.settings')

application = get_asgi_application()
