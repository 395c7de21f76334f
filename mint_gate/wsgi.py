"""WSGI entrypoint for the mint gate."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "mint_gate.settings")

application = get_wsgi_application()
