from django.contrib import admin
from .models import Student


@admin.register(Student)
class StudentAdmin(admin.ModelAdmin):
    list_display = ("student_code", "full_name", "class_name", "enrollment_year", "email", "is_active")
    list_filter = ("enrollment_year", "class_name", "is_active")
    search_fields = ("student_code", "full_name", "email", "phone", "user__email")
    raw_id_fields = ("user",)
    ordering = ("student_code",)
