"""
WSGI config for dnu_contact.

The database is prepared and seeded before the application is handed to the
server, so ``runserver`` and production WSGI servers start from the same state.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "dnu_contact.settings")

application = get_wsgi_application()

from apps.common.bootstrap import bootstrap_on_startup  # noqa: E402

bootstrap_on_startup()
