import logging
from datetime import timedelta

from django.conf import settings
from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from apps.common.registry import get_service

logger = logging.getLogger(__name__)
User = get_user_model()


def find_user_by_email(email):
    if not email:
        return None
    return User.objects.filter(email__iexact=email.strip()).first()


def find_user_by_login(login_id):
    """Tìm user theo email hoặc tên đăng nhập."""
    login_id = (login_id or "").strip()
    if not login_id:
        return None
    return User.objects.filter(Q(email__iexact=login_id) | Q(username=login_id)).first()


def create_account(email, password, **fields):
    """
    Tạo tài khoản mới sau khi kiểm tra mật khẩu và thông tin người dùng.

    Tên đăng nhập mặc định là email. Raise ``ValidationError`` khi mật khẩu
    không đạt chính sách hoặc dữ liệu không hợp lệ (trùng email, ký tự lạ...).
    """
    fields.setdefault("username", email)
    user = User(email=email, **fields)
    validate_password(password, user)
    user.set_password(password)
    user.full_clean()
    with transaction.atomic():
        user.save()
    return user


# ===== Khóa tài khoản =====
def _lockout_duration() -> timedelta:
    return timedelta(minutes=getattr(settings, "IDENTITY_LOCKOUT_MINUTES", 5))


def _max_failed_attempts() -> int:
    return getattr(settings, "IDENTITY_MAX_FAILED_ATTEMPTS", 5)


def is_locked_out(user) -> bool:
    return user.is_locked_out


def register_failed_attempt(user) -> bool:
    """Tăng số lần đăng nhập sai; trả về True nếu lần sai này làm tài khoản bị khóa."""
    if not user.lockout_enabled:
        return False
    user.access_failed_count += 1
    if user.access_failed_count < _max_failed_attempts():
        user.save(update_fields=["access_failed_count"])
        return False

    user.lockout_end = timezone.now() + _lockout_duration()
    user.access_failed_count = 0
    user.save(update_fields=["access_failed_count", "lockout_end"])
    logger.warning("Account %s locked out until %s", user.pk, user.lockout_end)
    send_lockout_notice(user)
    return True


def reset_failed_attempts(user):
    if user.access_failed_count or user.lockout_end:
        user.access_failed_count = 0
        user.lockout_end = None
        user.save(update_fields=["access_failed_count", "lockout_end"])


def send_lockout_notice(user) -> bool:
    recipient = user.preferred_email()
    if not recipient:
        return False
    context = {
        "user": user,
        "lockout_end": user.lockout_end,
        "lockout_minutes": getattr(settings, "IDENTITY_LOCKOUT_MINUTES", 5),
        "site_name": getattr(settings, "SITE_NAME", "DNU Contact"),
        "support_email": getattr(settings, "SUPPORT_EMAIL", settings.DEFAULT_FROM_EMAIL),
    }
    return get_service("email").send_template(
        recipient,
        subject_template="emails/lockout_subject.txt",
        body_template="emails/lockout_body.html",
        context=context,
    )
