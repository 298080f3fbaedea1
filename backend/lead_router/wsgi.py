"""WSGI config for the Lead Router."""
import os
from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'lead_router.settings')
application = get_wsgi_application()
