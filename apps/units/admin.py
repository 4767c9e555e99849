from django.contrib import admin
from .models import Unit


class ChildUnitInline(admin.TabularInline):
    model = Unit
    fk_name = "parent"
    extra = 0
    fields = ("code", "name", "unit_type", "is_active")


@admin.register(Unit)
class UnitAdmin(admin.ModelAdmin):
    list_display = ("name", "code", "unit_type", "parent", "phone", "email", "is_active")
    list_filter = ("unit_type", "is_active")
    search_fields = ("name", "code", "address", "phone", "email")
    inlines = [ChildUnitInline]
