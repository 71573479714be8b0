"""Chunked iteration with a progressbar2 display."""

import sys
from collections.abc import Iterator

import progressbar


def progress_chunks(
    total: int,
    chunk_size: int,
    desc: str = "",
    show: bool = True,
) -> Iterator[tuple[int, int]]:
    """Yield ``(start, end)`` bounds covering ``range(total)`` in chunks.

    A bar is only drawn when ``show`` is set and there is more than one
    chunk. It is finalized in a try/finally block so that early breaks or
    exceptions from the caller don't leave terminal output corrupted.

    Args:
        total: Number of items to cover.
        chunk_size: Items per chunk (the last chunk may be shorter).
        desc: Optional description prefix.
        show: Whether to draw the bar.

    Yields:
        Half-open chunk bounds.
    """
    bounds = [
        (start, min(start + chunk_size, total))
        for start in range(0, total, chunk_size)
    ]
    if not show or len(bounds) <= 1:
        yield from bounds
        return

    widgets = [
        f"{desc}: " if desc else "",
        progressbar.Counter(),
        f"/{total} ",
        progressbar.Percentage(),
        " ",
        progressbar.Bar(),
        " ",
        progressbar.ETA(),
    ]
    bar = progressbar.ProgressBar(max_value=total, widgets=widgets, fd=sys.stdout)
    bar.start()
    try:
        for start, end in bounds:
            yield start, end
            bar.update(end)
    finally:
        bar.finish()
