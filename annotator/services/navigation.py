"""Queue position selectors and the page location they are derived from.

The current position in a queue is never stored.  It is always computed
from the loaded item list and the ``itemId`` carried by the page location,
so back/forward navigation and shared links always agree with what is on
screen.
"""

from __future__ import annotations

from enum import Enum
from urllib.parse import urlencode

from annotator.models.queue import QueueItem


class ViewState(str, Enum):
    """Lifecycle of the annotation page."""

    LOADING = "loading"
    READY = "ready"
    ITEM_LOADING = "item-loading"
    ITEM_READY = "item-ready"


def resolve_current_index(items: list[QueueItem], item_id: str | None) -> int:
    """Return the position of *item_id* in *items*.

    First match wins; falls back to 0 when the id is absent, unknown, or
    the list is empty.
    """
    if not item_id or not items:
        return 0
    for index, item in enumerate(items):
        if item.id == item_id:
            return index
    return 0


def neighbor_item_id(
    items: list[QueueItem], item_id: str | None, offset: int
) -> str | None:
    """Return the id *offset* steps away from the current item.

    ``None`` when the target falls outside ``[0, len(items) - 1]``.
    """
    if not items:
        return None
    target = resolve_current_index(items, item_id) + offset
    if target < 0 or target > len(items) - 1:
        return None
    return items[target].id


def queue_url(queue_id: str, item_id: str | None = None) -> str:
    """Build the page URL for *queue_id*, optionally pinned to *item_id*."""
    path = f"/queue/{queue_id}"
    if item_id is None:
        return path
    return f"{path}?{urlencode({'itemId': item_id})}"


class ItemLocation:
    """Page location for one queue, with browser-style history.

    ``push`` adds a history entry, ``replace`` rewrites the current one
    in place (used for the initial redirect to the first item).
    """

    def __init__(self, queue_id: str, item_id: str | None = None) -> None:
        self.queue_id = queue_id
        self._entries: list[str | None] = [item_id]
        self._cursor = 0
        self.replace_count = 0

    @property
    def item_id(self) -> str | None:
        return self._entries[self._cursor]

    @property
    def url(self) -> str:
        return queue_url(self.queue_id, self.item_id)

    @property
    def history(self) -> list[str | None]:
        return list(self._entries)

    def push(self, item_id: str) -> None:
        del self._entries[self._cursor + 1 :]
        self._entries.append(item_id)
        self._cursor += 1

    def replace(self, item_id: str) -> None:
        self._entries[self._cursor] = item_id
        self.replace_count += 1

    def back(self) -> bool:
        if self._cursor == 0:
            return False
        self._cursor -= 1
        return True

    def forward(self) -> bool:
        if self._cursor >= len(self._entries) - 1:
            return False
        self._cursor += 1
        return True
