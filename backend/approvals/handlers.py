"""
Entity transition callbacks, keyed by approval action type.

Each app that owns an approvable entity registers its callbacks from its
AppConfig.ready(); the registry itself knows nothing about Programs,
Articles or upgrade requests.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional

from .exceptions import EntityNotFound, UnknownActionType


@dataclass(frozen=True)
class TransitionHandler:
    action_type: str
    model: type
    on_submit: Callable[[Any, Any], None]
    on_approve: Callable[[Any, Any], None]
    on_reject: Callable[[Any, Any], None]
    # key + summary used when serializing an approval, e.g. "program" -> {id, title}
    key: str = "entity"
    summarize: Optional[Callable[[Any], dict]] = None

    def load(self, entity_id, for_update: bool = False):
        qs = self.model.objects.all()
        if for_update:
            qs = qs.select_for_update()
        try:
            return qs.get(pk=entity_id)
        except (self.model.DoesNotExist, ValueError, TypeError):
            raise EntityNotFound(f"{self.model.__name__} {entity_id} not found.") from None


_registry: dict[str, TransitionHandler] = {}


def register(action_type: str, model: type, *, on_submit, on_approve, on_reject,
             key: str = "entity", summarize=None) -> TransitionHandler:
    handler = TransitionHandler(
        action_type=str(action_type), model=model,
        on_submit=on_submit, on_approve=on_approve, on_reject=on_reject,
        key=key, summarize=summarize,
    )
    _registry[handler.action_type] = handler
    return handler


def get_handler(action_type: str) -> TransitionHandler:
    try:
        return _registry[str(action_type)]
    except KeyError:
        raise UnknownActionType(f"No handler registered for {action_type}.") from None


def registered_action_types() -> list[str]:
    return sorted(_registry)
