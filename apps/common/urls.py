from django.urls import path
from . import views

app_name = "home"
urlpatterns = [
    # {controller=Home}/{action=Index}
    path("", views.home_index, name="home"),
    path("Index/", views.home_index, name="index"),
    path("Error/", views.error_page, name="error"),
]
