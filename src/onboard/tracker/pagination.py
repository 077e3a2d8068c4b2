"""Cursor-following helper shared by every list operation."""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeVar

from onboard.tracker.models import Page

T = TypeVar("T")


def fetch_all(list_page: Callable[[int], Page[T]]) -> list[T]:
    """Fetch every page of a list operation.

    Starts at cursor 0 and follows ``next_page`` until the server reports no
    further page. Errors raised by ``list_page`` propagate unchanged, so a
    failure part-way through never yields a truncated list.

    Args:
        list_page: Callable returning the page at the given cursor.

    Returns:
        All items, in server order.
    """
    items: list[T] = []
    cursor = 0
    while True:
        page = list_page(cursor)
        items.extend(page.items)
        if page.next_page == 0:
            return items
        cursor = page.next_page
