from django.contrib import admin

from .models import Approval, ApprovalAction


class ApprovalActionInline(admin.TabularInline):
    model = ApprovalAction
    extra = 0
    can_delete = False
    readonly_fields = ("approver", "approver_role", "action", "comment", "created_at")

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Approval)
class ApprovalAdmin(admin.ModelAdmin):
    list_display = ("id", "action_type", "entity_id", "requester", "status", "required_approver_count", "created_at")
    list_filter = ("action_type", "status")
    search_fields = ("requester__email",)
    readonly_fields = ("action_type", "entity_id", "requester", "status", "required_approver_count",
                       "resolved_at", "created_at")
    inlines = [ApprovalActionInline]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
