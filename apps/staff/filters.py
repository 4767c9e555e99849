from django import forms
import django_filters
from django.db.models import Q

from apps.units.models import Unit

from .models import Staff


class StaffFilter(django_filters.FilterSet):
    q = django_filters.CharFilter(
        method="filter_search",
        label="Tìm kiếm",
        widget=forms.TextInput(
            attrs={
                "class": "form-control",
                "placeholder": "Tên, mã, chức vụ, email hoặc số điện thoại",
            }
        ),
    )
    unit = django_filters.ModelChoiceFilter(
        queryset=Unit.objects.active().order_by("name"),
        label="Đơn vị",
        empty_label="Tất cả đơn vị",
        widget=forms.Select(attrs={"class": "form-select"}),
    )

    class Meta:
        model = Staff
        fields = []

    def filter_search(self, queryset, name, value):
        if not value:
            return queryset
        tokens = [token.strip() for token in value.split() if token.strip()]
        for token in tokens:
            queryset = queryset.filter(
                Q(full_name__icontains=token)
                | Q(staff_code__icontains=token)
                | Q(position__icontains=token)
                | Q(phone__icontains=token)
                | Q(email__icontains=token)
            )
        return queryset
