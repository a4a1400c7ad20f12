from django.db import transaction

from accounts.models import Role
from approvals import gate
from approvals.exceptions import AuthorizationError, InvalidEntityState
from approvals.models import ActionType
from audit.utils import audit_log

from .models import Article

EDITABLE_FIELDS = ("title", "content", "program")


def ensure_author(article: Article, user) -> None:
    if article.author_id != user.pk and user.role != Role.SUPER_ADMIN:
        raise AuthorizationError("You can only change your own articles.")


@transaction.atomic
def create_article(author, title: str, content: str = "", program=None) -> Article:
    if not gate.can_submit(ActionType.ARTICLE_PUBLISH, author.role) or not author.is_active:
        raise AuthorizationError("Your role cannot write articles.")
    article = Article.objects.create(author=author, title=title, content=content, program=program)
    audit_log(author, "ARTICLE_CREATED", target=article,
              payload={"title": title, "program_id": getattr(program, "pk", None)})
    return article


@transaction.atomic
def update_article(article: Article, actor, **changes) -> Article:
    ensure_author(article, actor)
    article = Article.objects.select_for_update().get(pk=article.pk)
    if not article.is_editable:
        raise InvalidEntityState(f"Article is {article.status}; only DRAFT or REJECTED articles can be edited.")
    fields = []
    for name, value in changes.items():
        if name not in EDITABLE_FIELDS:
            raise ValueError(f"{name} is not editable")
        setattr(article, name, value)
        fields.append(name)
    if fields:
        article.save(update_fields=fields + ["updated_at"])
        audit_log(actor, "ARTICLE_UPDATED", target=article, payload={"fields": fields})
    return article
