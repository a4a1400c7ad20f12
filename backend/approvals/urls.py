from django.urls import path

from . import views

app_name = "approvals"

urlpatterns = [
    path("approvals/", views.approval_list, name="list"),
    path("approvals/submit", views.approval_submit, name="submit"),
    path("approvals/<int:approval_id>", views.approval_detail, name="detail"),
    path("approvals/<int:approval_id>/approve", views.approval_approve, name="approve"),
    path("approvals/<int:approval_id>/reject", views.approval_reject, name="reject"),
]
