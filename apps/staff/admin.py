from django.contrib import admin
from .models import Staff


@admin.register(Staff)
class StaffAdmin(admin.ModelAdmin):
    list_display = ("staff_code", "full_name", "position", "academic_degree", "unit", "email", "is_active")
    list_filter = ("unit", "is_active")
    search_fields = ("staff_code", "full_name", "email", "phone", "user__email")
    raw_id_fields = ("user",)
    ordering = ("staff_code",)
