from django.apps import AppConfig


class PengusulConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "pengusul"

    def ready(self):
        from approvals.handlers import register
        from approvals.models import ActionType
        from . import workflow
        from .models import RoleUpgradeRequest
        register(ActionType.ROLE_UPGRADE, RoleUpgradeRequest,
                 on_submit=workflow.on_submit, on_approve=workflow.on_approve, on_reject=workflow.on_reject,
                 key="upgrade_request", summarize=workflow.summarize)
