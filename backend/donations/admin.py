from django.contrib import admin

from .models import Donation


@admin.register(Donation)
class DonationAdmin(admin.ModelAdmin):
    list_display = ("external_order_id", "program", "donor_name", "amount", "status", "is_anonymous", "paid_at")
    list_filter = ("status", "is_anonymous")
    search_fields = ("external_order_id", "donor_name", "donor_email", "user__email")
    date_hierarchy = "created_at"

    # rows are owned by the payment integration
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
