from django.urls import path

from . import views

app_name = "articles"

urlpatterns = [
    path("articles/new", views.article_create, name="create"),
    path("articles/<int:article_id>/edit", views.article_update, name="update"),
    path("articles/<int:article_id>/history", views.article_history, name="history"),
]
