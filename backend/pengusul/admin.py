from django.contrib import admin

from .models import RoleUpgradeRequest


@admin.register(RoleUpgradeRequest)
class RoleUpgradeRequestAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "status", "institution_name", "created_at", "reviewed_by", "reviewed_at")
    list_filter = ("status",)
    search_fields = ("user__email", "institution_name", "ktp_number")
    readonly_fields = ("status", "reviewed_by", "reviewed_at")
