from django.contrib import admin

from .models import Program


@admin.register(Program)
class ProgramAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "creator", "status", "target_amount", "collected_amount", "published_at")
    list_filter = ("status",)
    search_fields = ("title", "creator__email")
    # status moves only through approvals; the fund total is a ledger cache
    readonly_fields = ("status", "collected_amount", "published_at", "closed_at")
