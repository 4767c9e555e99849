from django.db import models
from apps.common.models import CodedDirectoryEntry


class Unit(CodedDirectoryEntry):
    """Đơn vị tổ chức (trường, khoa, phòng ban), có thể có đơn vị cha."""

    address = models.CharField(max_length=255, blank=True)
    phone = models.CharField(max_length=20, blank=True)
    email = models.EmailField(max_length=254, blank=True)
    unit_type = models.CharField(max_length=50, blank=True)
    parent = models.ForeignKey(
        "self",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="children",
    )

    class Meta:
        ordering = ["code"]
