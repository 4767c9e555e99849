from functools import lru_cache

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.core.signals import setting_changed
from django.dispatch import receiver
from django.utils.module_loading import import_string

DEFAULT_SERVICES = {
    "email": "apps.common.services.EmailService",
    "activity_log": "apps.activity_logs.services.ActivityLogService",
}


def registered_services() -> dict:
    services = dict(DEFAULT_SERVICES)
    services.update(getattr(settings, "DNU_SERVICES", {}) or {})
    return services


@lru_cache(maxsize=None)
def get_service(name: str):
    """Trả về instance của service đã đăng ký với tên ``name``."""
    try:
        dotted_path = registered_services()[name]
    except KeyError:
        raise ImproperlyConfigured(f"Service '{name}' chưa được đăng ký trong DNU_SERVICES.")
    try:
        service_class = import_string(dotted_path)
    except ImportError as exc:
        raise ImproperlyConfigured(f"Không thể nạp service '{name}' ({dotted_path}): {exc}") from exc
    return service_class()


@receiver(setting_changed)
def _reset_services_on_setting_change(*, setting, **kwargs):
    if setting in {"DNU_SERVICES", "DEFAULT_FROM_EMAIL"}:
        get_service.cache_clear()
