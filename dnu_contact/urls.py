from django.contrib import admin
from django.urls import include, path

from apps.common import views as common_views


urlpatterns = [
    # "/" luôn chuyển về trang đăng nhập
    path("", common_views.root_redirect, name="root"),
    path("admin/", admin.site.urls),
    path("health/", common_views.health_view, name="health"),
    path("Account/", include("apps.accounts.urls")),
    path("Home/", include("apps.common.urls")),
]

handler500 = "apps.common.views.server_error"
