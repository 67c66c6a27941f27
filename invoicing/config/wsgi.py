"""
WSGI config for the invoicing project.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'invoicing.config.settings')

application = get_wsgi_application()
