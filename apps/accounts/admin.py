# apps/accounts/admin.py
from django.contrib import admin
from django.contrib.auth import get_user_model
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.translation import gettext_lazy as _

from .forms import AdminUserChangeForm, AdminUserCreationForm

User = get_user_model()


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    form = AdminUserChangeForm
    add_form = AdminUserCreationForm
    list_display = ("id", "email", "full_name", "is_active", "email_confirmed", "is_staff")
    list_filter = ("is_staff", "is_superuser", "is_active", "email_confirmed", "groups")
    search_fields = ("username", "email", "full_name")
    ordering = ("email",)

    # mở rộng fieldsets để chứa các field tùy chỉnh của User
    fieldsets = BaseUserAdmin.fieldsets + (
        (
            _("Profile"),
            {
                "fields": (
                    "full_name",
                    "photo_url",
                    "email_confirmed",
                    "is_email_verified",
                    "created_at",
                )
            },
        ),
        (
            _("Lockout"),
            {"fields": ("lockout_enabled", "access_failed_count", "lockout_end")},
        ),
    )

    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        (None, {"fields": ("email", "full_name")}),
    )
