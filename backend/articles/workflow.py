"""ARTICLE_PUBLISH transition callbacks."""
from django.utils import timezone

from approvals.exceptions import InvalidEntityState

from .models import Article
from .services import ensure_author


def on_submit(article: Article, requester) -> None:
    ensure_author(article, requester)
    if not article.is_editable:
        raise InvalidEntityState(f"Article is {article.status}; submit a DRAFT or REJECTED article.")
    article.status = Article.Status.PENDING_APPROVAL
    article.save(update_fields=["status", "updated_at"])


def on_approve(article: Article, approver) -> None:
    article.status = Article.Status.PUBLISHED
    article.published_at = timezone.now()
    article.save(update_fields=["status", "published_at", "updated_at"])


def on_reject(article: Article, approver) -> None:
    article.status = Article.Status.REJECTED
    article.published_at = None
    article.save(update_fields=["status", "published_at", "updated_at"])


def summarize(article: Article) -> dict:
    return {"id": article.pk, "title": article.title, "program_id": article.program_id}
