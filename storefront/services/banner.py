from __future__ import annotations

from typing import Callable, Iterable, Optional

import structlog

from storefront.models.category import Category

log = structlog.get_logger(__name__)

FetchById = Callable[[str], Optional[Category]]


def effective_banner(category: Category, fetch_by_id: FetchById) -> str | None:
    """Nearest non-empty banner on the ancestor chain, the category included.

    One fetch per hop, never more than ``category.depth`` hops. A missing
    ancestor ends the walk with ``None``.
    """
    if category.banner_image:
        return category.banner_image

    node = category
    for _ in range(max(category.depth or 0, 0)):
        if not node.parent_id:
            break
        parent_id = node.parent_id
        node = fetch_by_id(parent_id)
        if node is None:
            log.warning("banner_ancestor_missing", category_id=category.id, missing_id=parent_id)
            return None
        if node.banner_image:
            return node.banner_image
    return None


def memoized_fetch(fetch_by_id: FetchById, known: Iterable[Category] = ()) -> FetchById:
    """Wrap ``fetch_by_id`` so each id is fetched at most once.

    Records already in hand (``known``) are served without a fetch.
    """
    memo: dict[str, Optional[Category]] = {c.id: c for c in known}

    def fetch(category_id: str) -> Optional[Category]:
        if category_id not in memo:
            memo[category_id] = fetch_by_id(category_id)
        return memo[category_id]

    return fetch


def banner_map(categories: Iterable[Category], fetch_by_id: FetchById) -> dict[str, str | None]:
    categories = list(categories)
    fetch = memoized_fetch(fetch_by_id, categories)
    return {c.id: effective_banner(c, fetch) for c in categories}
