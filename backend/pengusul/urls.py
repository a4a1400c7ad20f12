from django.urls import path

from . import views

app_name = "pengusul"

urlpatterns = [
    path("pengusul/request", views.upgrade_request_create, name="request"),
    path("pengusul/me", views.my_upgrade_request, name="me"),
]
