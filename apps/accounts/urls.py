from django.urls import path
from . import views

app_name = "accounts"
urlpatterns = [
    # Account/{action=Login}
    path("", views.login_view, name="index"),
    path("Login/", views.login_view, name="login"),
    path("Logout/", views.logout_view, name="logout"),
]
