import logging

from apps.common.utils.http import client_ip

from .models import ActivityLog

logger = logging.getLogger(__name__)


class ActivityLogService:
    """Ghi và truy vấn nhật ký hoạt động của người dùng."""

    def log(self, user, action, description="", request=None) -> ActivityLog:
        if user is not None and not getattr(user, "is_authenticated", False):
            user = None
        entry = ActivityLog.objects.create(
            user=user,
            action=action,
            description=description,
            ip_address=client_ip(request) if request is not None else None,
        )
        logger.info("Activity %s by user %s", action, getattr(user, "pk", None))
        return entry

    def recent(self, user=None, limit=20):
        qs = ActivityLog.objects.select_related("user")
        if user is not None:
            qs = qs.filter(user=user)
        return list(qs[:limit])
