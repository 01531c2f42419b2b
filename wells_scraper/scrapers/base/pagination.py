"""Result-page traversal.

Two pager styles are supported:

- numbered pagers, where every page number has its own link;
- windowed pagers, which only show ``window_size`` page links at a time and
  a ``...`` link that reveals the next window.

Both traversals visit pages ``1..total_pages`` exactly once, in order, and
delegate the DOM work to callbacks.
"""

from __future__ import annotations

from typing import Awaitable, Callable

PageCallback = Callable[[int], Awaitable[None]]


def next_window(current_page: int, total_pages: int, window_size: int = 10) -> range:
    """Return the window of page numbers following ``current_page``.

    Windows are aligned on multiples of ``window_size`` and clipped at
    ``total_pages``.

    Parameters
    ----------
    current_page : int
        Last page processed (``0`` before the first page).
    total_pages : int
        Number of result pages.
    window_size : int, default=10
        Number of page links shown at once.

    Returns
    -------
    range
        Page numbers of the next window; empty when ``current_page`` is the last page.

    Examples
    --------
    >>> list(next_window(0, 23))
    [1, 2, 3, 4, 5, 6, 7, 8, 9, 10]
    >>> list(next_window(20, 23))
    [21, 22, 23]
    >>> list(next_window(23, 23))
    []
    """
    if window_size <= 0:
        raise ValueError("window_size must be greater than 0")
    if current_page >= total_pages:
        return range(0)
    start = (current_page // window_size) * window_size + 1
    return range(start, min(start + window_size - 1, total_pages) + 1)


async def visit_numbered_pages(
    total_pages: int,
    activate: PageCallback,
    on_page: PageCallback,
) -> int:
    """Visit pages ``1..total_pages`` of a numbered pager.

    Parameters
    ----------
    total_pages : int
        Number of result pages.
    activate : Callable[[int], Awaitable[None]]
        Makes the given page the active one (and waits until it is).
    on_page : Callable[[int], Awaitable[None]]
        Processes the rows of the active page.

    Returns
    -------
    int
        Number of pages visited.
    """
    visited = 0
    for page_number in range(1, total_pages + 1):
        await activate(page_number)
        await on_page(page_number)
        visited += 1
    return visited


async def visit_windowed_pages(
    total_pages: int,
    activate: PageCallback,
    advance_window: PageCallback,
    on_page: PageCallback,
    window_size: int = 10,
) -> int:
    """Visit pages ``1..total_pages`` of a windowed pager.

    ``advance_window`` receives the first page of the next window. It is
    called once after the last page of every window except the final one,
    so ``total_pages=23`` with ``window_size=10`` advances exactly twice
    (after pages 10 and 20).

    Returns
    -------
    int
        Number of pages visited.
    """
    visited = 0
    window = next_window(0, total_pages, window_size)
    while window:
        for page_number in window:
            await activate(page_number)
            await on_page(page_number)
            visited += 1
            if page_number == total_pages:
                return visited
        await advance_window(window[-1] + 1)
        window = next_window(window[-1], total_pages, window_size)
    return visited
