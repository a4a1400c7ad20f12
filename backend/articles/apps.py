from django.apps import AppConfig


class ArticlesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "articles"

    def ready(self):
        from approvals.handlers import register
        from approvals.models import ActionType
        from . import workflow
        from .models import Article
        register(ActionType.ARTICLE_PUBLISH, Article,
                 on_submit=workflow.on_submit, on_approve=workflow.on_approve, on_reject=workflow.on_reject,
                 key="article", summarize=workflow.summarize)
