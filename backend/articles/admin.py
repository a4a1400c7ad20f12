from django.contrib import admin

from .models import Article


@admin.register(Article)
class ArticleAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "author", "program", "status", "published_at")
    list_filter = ("status",)
    search_fields = ("title", "author__email")
    readonly_fields = ("status", "published_at")
