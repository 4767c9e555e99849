from django.conf import settings
from django.db import models

from apps.common.models import DirectoryEntry


class Student(DirectoryEntry):
    """Hồ sơ sinh viên, gắn 1-1 với tài khoản."""

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="student_profile",
    )
    student_code = models.CharField(max_length=20, unique=True)
    full_name = models.CharField(max_length=255)
    phone = models.CharField(max_length=20, blank=True)
    email = models.EmailField(max_length=254, blank=True)
    address = models.CharField(max_length=255, blank=True)
    class_name = models.CharField(max_length=50, blank=True)
    enrollment_year = models.PositiveSmallIntegerField(null=True, blank=True)

    class Meta:
        ordering = ["student_code"]

    def __str__(self):
        return f"{self.student_code} - {self.full_name}"
