import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "dnu_contact.settings")

application = get_asgi_application()

from apps.common.bootstrap import bootstrap_on_startup  # noqa: E402

bootstrap_on_startup()
