from django.contrib.auth.decorators import login_required
from django.core.paginator import EmptyPage, Paginator
from django.http import JsonResponse
from django.shortcuts import redirect, render
from django.views.decorators.http import require_GET

from apps.staff.filters import StaffFilter
from apps.staff.models import Staff

from .bootstrap import last_seed_result


# "/" luôn chuyển hướng tới trang đăng nhập, kể cả khi seed thất bại
def root_redirect(request):
    return redirect("accounts:login")


# Trang chủ: danh bạ cán bộ giảng viên
@login_required
def home_index(request):
    staff_filter = StaffFilter(
        request.GET,
        queryset=Staff.objects.active().select_related("unit", "user"),
    )
    qs = staff_filter.qs.order_by("full_name")

    try:
        page = int(request.GET.get("page", 1))
    except (TypeError, ValueError):
        page = 1
    paginator = Paginator(qs, 20)
    try:
        page_obj = paginator.page(page)
    except EmptyPage:
        page_obj = paginator.page(1)

    context = {
        "filter": staff_filter,
        "page_obj": page_obj,
        "staff_list": page_obj.object_list,
    }
    return render(request, "home/index.html", context)


def error_page(request):
    return render(request, "home/error.html")


def server_error(request):
    return render(request, "home/error.html", status=500)


@require_GET
def health_view(request):
    result = last_seed_result()
    if result is None:
        return JsonResponse({"status": "unknown", "seed": None})
    payload = {"status": result.status, "seed": result.as_dict()}
    return JsonResponse(payload, status=200 if result.ok else 503)
