from django.apps import AppConfig


class CommonConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.common"

    def ready(self):
        # Seed chạy từ wsgi/asgi hoặc lệnh seed_db, không chạy trong ready()
        from . import registry  # noqa: F401
