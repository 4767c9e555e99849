import json
from datetime import timedelta

from django.conf import settings
from django.contrib.auth import REDIRECT_FIELD_NAME, authenticate, login, logout
from django.http import HttpResponse
from django.shortcuts import redirect, render, resolve_url
from django.utils.http import url_has_allowed_host_and_scheme
from django.views.decorators.csrf import ensure_csrf_cookie
from django.views.decorators.http import require_POST

from apps.common.registry import get_service
from apps.common.utils.forms import form_errors_as_text
from apps.common.utils.http import is_htmx_request

from .forms import LoginForm
from .services import (
    find_user_by_login,
    is_locked_out,
    register_failed_attempt,
    reset_failed_attempts,
)


# Phản hồi khi đăng nhập thất bại: HTMX nhận HX-Trigger, request thường hiển thị lại form
def _login_error(request, form, title, status=400):
    if is_htmx_request(request):
        resp = HttpResponse("", status=status)
        resp["HX-Trigger"] = json.dumps(
            {"show-sweet-alert": {"icon": "error", "title": title}}
        )
        return resp
    return render(
        request,
        "accounts/login.html",
        {"form": form, "error": title, "next": _redirect_target(request)},
        status=status,
    )


def _redirect_target(request):
    return request.POST.get(REDIRECT_FIELD_NAME) or request.GET.get(REDIRECT_FIELD_NAME) or ""


def _safe_redirect_url(request):
    redirect_to = _redirect_target(request)
    if redirect_to and url_has_allowed_host_and_scheme(
        redirect_to,
        allowed_hosts={request.get_host()},
        require_https=request.is_secure(),
    ):
        return redirect_to
    return resolve_url(settings.LOGIN_REDIRECT_URL)


# Quy trình đăng nhập
@ensure_csrf_cookie
def login_view(request):
    if request.user.is_authenticated:
        return redirect(settings.LOGIN_REDIRECT_URL)

    if request.method != "POST":
        return render(
            request,
            "accounts/login.html",
            {"form": LoginForm(), "next": _redirect_target(request)},
        )

    form = LoginForm(request.POST)
    if not form.is_valid():
        return _login_error(request, form, form_errors_as_text(form, "Vui lòng nhập thông tin đăng nhập"))

    user = find_user_by_login(form.cleaned_data["login"])
    if not user:
        return _login_error(request, form, "Không tìm thấy tài khoản với thông tin này")
    if not user.is_active:
        return _login_error(request, form, "Tài khoản đã bị vô hiệu hóa", status=403)
    if is_locked_out(user):
        return _login_error(
            request,
            form,
            "Tài khoản tạm thời bị khóa do đăng nhập sai nhiều lần. Vui lòng thử lại sau.",
            status=403,
        )
    if getattr(settings, "IDENTITY_REQUIRE_CONFIRMED_EMAIL", False) and not user.email_confirmed:
        return _login_error(request, form, "Vui lòng xác nhận email trước khi đăng nhập", status=403)

    # Kiểm tra mật khẩu
    auth_user = authenticate(request, username=user.username, password=form.cleaned_data["password"])
    if not auth_user:
        if register_failed_attempt(user):
            return _login_error(
                request,
                form,
                "Tài khoản tạm thời bị khóa do đăng nhập sai nhiều lần. Vui lòng thử lại sau.",
                status=403,
            )
        return _login_error(request, form, "Mật khẩu không đúng")

    reset_failed_attempts(auth_user)
    login(request, auth_user)
    # Ghi nhớ đăng nhập
    if form.cleaned_data.get("remember"):
        request.session.set_expiry(timedelta(days=14))  # giữ 14 ngày
    else:
        request.session.set_expiry(0)  # hết khi đóng browser
    get_service("activity_log").log(auth_user, "login", "Đăng nhập thành công", request=request)

    final_redirect = _safe_redirect_url(request)
    # Nếu request HTMX: trả modal + redirect
    if is_htmx_request(request):
        resp = HttpResponse("")
        resp["HX-Trigger"] = json.dumps({
            "show-sweet-alert": {
                "icon": "success",
                "title": "Đăng nhập thành công!",
                "redirect": final_redirect,
            }
        })
        return resp
    return redirect(final_redirect)


@require_POST
def logout_view(request):
    if request.user.is_authenticated:
        get_service("activity_log").log(request.user, "logout", "Đăng xuất", request=request)
    logout(request)
    if is_htmx_request(request):
        resp = HttpResponse("")
        resp["HX-Trigger"] = json.dumps({
            "show-sweet-alert": {
                "icon": "success",
                "title": "Đăng xuất thành công!",
                "redirect": resolve_url(settings.LOGOUT_REDIRECT_URL),
            }
        })
        return resp
    return redirect(settings.LOGOUT_REDIRECT_URL)
