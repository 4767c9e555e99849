from django.conf import settings
from django.db import models

from apps.common.models import DirectoryEntry


class Staff(DirectoryEntry):
    """Hồ sơ cán bộ giảng viên, gắn 1-1 với tài khoản."""

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="staff_profile",
    )
    staff_code = models.CharField(max_length=20, unique=True)
    full_name = models.CharField(max_length=255)
    position = models.CharField(max_length=100, blank=True)
    phone = models.CharField(max_length=20, blank=True)
    email = models.EmailField(max_length=254, blank=True)
    academic_degree = models.CharField(max_length=100, blank=True)
    unit = models.ForeignKey(
        "units.Unit",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="staff",
    )

    class Meta:
        verbose_name_plural = "staff"
        ordering = ["staff_code"]

    def __str__(self):
        return f"{self.staff_code} - {self.full_name}"
