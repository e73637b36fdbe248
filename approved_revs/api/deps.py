from typing import Callable, Generator

from fastapi import Depends, Request

from approved_revs.core.approval import ApprovalContext, ApprovedRevs
from approved_revs.core.exceptions import ItemNotFoundError
from approved_revs.core.interfaces import ItemDirectory
from approved_revs.core.types import Actor, Item

ActorResolver = Callable[[Request], Actor]


def get_engine(request: Request) -> ApprovedRevs:
    """Process-level approval engine."""
    return request.app.state.engine


def get_items(request: Request) -> ItemDirectory:
    return request.app.state.items


def get_actor(request: Request) -> Actor:
    """Acting user, as resolved by the host application."""
    resolver: ActorResolver = request.app.state.actor_resolver
    return resolver(request) or Actor.anonymous()


def get_context(
    engine: ApprovedRevs = Depends(get_engine),
    actor: Actor = Depends(get_actor),
) -> Generator[ApprovalContext, None, None]:
    """Fresh approval context per request; its caches die with the request."""
    context = engine.new_context(actor)
    try:
        yield context
    finally:
        context.cache.clear()


def get_item(item_id: int, items: ItemDirectory = Depends(get_items)) -> Item:
    item = items.get(item_id)
    if item is None:
        raise ItemNotFoundError(item_id)
    return item
