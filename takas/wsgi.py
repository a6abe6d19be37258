"""WSGI config for the takas project."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "takas.settings")

application = get_wsgi_application()
