from django.urls import path

from . import views

app_name = "programs"

urlpatterns = [
    path("programs/new", views.program_create, name="create"),
    path("programs/<int:program_id>/edit", views.program_update, name="update"),
    path("programs/<int:program_id>/close", views.program_close, name="close"),
    path("programs/<int:program_id>/history", views.program_history, name="history"),
]
