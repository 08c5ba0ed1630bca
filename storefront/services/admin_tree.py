"""View state of the admin category hierarchy.

The controller owns pagination, search, fetch-all mode and the expanded set,
and turns the currently known records into display rows. Fetching is
delegated to a callable with the ``list_for_admin`` signature, so the same
state machine drives the JSON endpoint and can be exercised without Flask.

Fetches are fenced by request id: :meth:`AdminTreeController.receive` only
accepts the response to the most recently issued request.
"""
from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable

import structlog

from storefront.repositories.category import AdminPage
from storefront.services.category_tree import ROOT, TreeRow, build_tree, walk_tree

log = structlog.get_logger(__name__)

Fetcher = Callable[..., AdminPage]


class RenderMode(str, Enum):
    FLAT = "flat"
    HIERARCHICAL = "hierarchical"


@dataclass
class AdminTreeState:
    page: int = 1
    page_size: int = 10
    query: str = ""
    fetch_all: bool = False
    expanded: set[str] = field(default_factory=set)


@dataclass(frozen=True)
class FetchRequest:
    request_id: int
    query: str
    page: int
    limit: int
    fetch_all: bool

    def as_kwargs(self) -> dict:
        return {"query": self.query, "page": self.page, "limit": self.limit, "fetch_all": self.fetch_all}


class AdminTreeController:
    def __init__(self, fetch: Fetcher, state: AdminTreeState | None = None) -> None:
        self._fetch = fetch
        self.state = state or AdminTreeState()
        self._ids = itertools.count(1)
        self._latest: int | None = None
        self.result = AdminPage()
        self.mode = RenderMode.FLAT

    # Transitions
    def set_query(self, query: str) -> FetchRequest:
        self.state.query = (query or "").strip()
        self.state.page = 1
        return self._issue()

    def set_fetch_all(self, fetch_all: bool) -> FetchRequest:
        self.state.fetch_all = bool(fetch_all)
        self.state.page = 1
        return self._issue()

    def set_page(self, page: int) -> FetchRequest:
        self.state.page = max(1, int(page))
        return self._issue()

    def refresh(self) -> FetchRequest:
        return self._issue()

    def toggle_expand(self, category_id: str) -> bool:
        """Flip ``category_id`` in the expanded set; returns the new membership."""
        if category_id in self.state.expanded:
            self.state.expanded.discard(category_id)
            return False
        self.state.expanded.add(category_id)
        return True

    def _issue(self) -> FetchRequest:
        request = FetchRequest(
            request_id=next(self._ids),
            query=self.state.query,
            page=self.state.page,
            limit=self.state.page_size,
            fetch_all=self.state.fetch_all,
        )
        self._latest = request.request_id
        return request

    # Responses
    @property
    def latest_request_id(self) -> int | None:
        return self._latest

    def receive(self, request: FetchRequest, result: AdminPage) -> bool:
        """Apply ``result`` unless a newer request has been issued since."""
        if request.request_id != self._latest:
            log.info("stale_fetch_dropped", request_id=request.request_id, latest=self._latest)
            return False

        self.result = result
        if request.query:
            # Search must reveal matches under collapsed ancestors
            self.state.expanded.update(c.id for c in result.records)
        if request.fetch_all and not request.query:
            self.mode = RenderMode.HIERARCHICAL
        else:
            self.mode = RenderMode.FLAT
        return True

    def load(self, request: FetchRequest | None = None) -> bool:
        """Run ``request`` (default: a refresh) through the fetcher synchronously."""
        request = request or self.refresh()
        return self.receive(request, self._fetch(**request.as_kwargs()))

    # Rendering
    def rows(self) -> list[TreeRow]:
        records = self.result.records
        tree = build_tree(records)
        if self.mode is RenderMode.HIERARCHICAL:
            starts = [(c, 0) for c in tree.get(ROOT, [])]
        else:
            starts = [(c, c.depth) for c in records]
        return list(walk_tree(tree, starts, self.state.expanded))

    def expand_all(self, ids: Iterable[str] | None = None) -> None:
        self.state.expanded.update(ids if ids is not None else (c.id for c in self.result.records))

    def collapse_all(self) -> None:
        self.state.expanded.clear()
