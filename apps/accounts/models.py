from django.conf import settings
from django.contrib.auth.models import AbstractUser
from django.db import models
from django.utils import timezone

from .validators import AllowedCharactersUsernameValidator

DEFAULT_PHOTO_URL = "/images/default-avatar.png"


def lockout_allowed_for_new_users() -> bool:
    return getattr(settings, "IDENTITY_LOCKOUT_ALLOWED_FOR_NEW_USERS", True)


class User(AbstractUser):
    username_validator = AllowedCharactersUsernameValidator()

    username = models.CharField(
        "username",
        max_length=150,
        unique=True,
        help_text="Tối đa 150 ký tự. Chỉ gồm chữ cái, chữ số và -._@+",
        validators=[username_validator],
        error_messages={"unique": "Tên đăng nhập đã tồn tại."},
    )
    # Email là khóa tự nhiên khi tra cứu tài khoản
    email = models.EmailField("email address", unique=True)
    full_name = models.CharField(max_length=255, blank=True)
    email_confirmed = models.BooleanField(default=False)
    is_email_verified = models.BooleanField(default=False)
    created_at = models.DateTimeField(default=timezone.now)
    photo_url = models.CharField(max_length=500, blank=True, default=DEFAULT_PHOTO_URL)

    # Trạng thái khóa tài khoản khi đăng nhập sai nhiều lần
    access_failed_count = models.PositiveIntegerField(default=0)
    lockout_end = models.DateTimeField(null=True, blank=True)
    lockout_enabled = models.BooleanField(default=lockout_allowed_for_new_users)

    class Meta:
        db_table = "accounts_user"

    def __str__(self):
        return self.email or self.username

    def preferred_full_name(self) -> str:
        """Return the best available human friendly name for the user."""
        if self.full_name and self.full_name.strip():
            return self.full_name.strip()
        full_name = super().get_full_name()
        if full_name:
            return full_name
        if self.username:
            return self.username
        return "Chưa cập nhật"

    def preferred_email(self) -> str:
        """Return the user's email or an empty string when missing."""
        return (self.email or "").strip()

    @property
    def is_locked_out(self) -> bool:
        return bool(
            self.lockout_enabled
            and self.lockout_end
            and self.lockout_end > timezone.now()
        )
