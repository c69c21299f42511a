"""
WSGI config for the KwentaMo API.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'kwentamo.config.settings')

application = get_wsgi_application()
