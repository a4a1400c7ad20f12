from django.apps import AppConfig


class ProgramsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "programs"

    def ready(self):
        from approvals.handlers import register
        from approvals.models import ActionType
        from . import workflow
        from .models import Program
        register(ActionType.PROGRAM_PUBLISH, Program,
                 on_submit=workflow.on_submit, on_approve=workflow.on_approve, on_reject=workflow.on_reject,
                 key="program", summarize=workflow.summarize)
