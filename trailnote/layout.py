from __future__ import annotations

from typing import Iterable, List, Sequence


def wrap_line(line: str, width: int = 80) -> List[str]:
    """
    Greedy word wrap on single spaces, measured in raw characters.

    A token wider than `width` is kept whole on its own line; words are
    never split. An empty line still yields one (empty) output line.
    """
    if not line:
        return [""]

    parts: List[str] = []
    cur = ""
    for word in line.split(" "):
        if not word:
            continue
        if not cur:
            cur = word
        elif len(cur) + 1 + len(word) > width:
            parts.append(cur)
            cur = word
        else:
            cur = f"{cur} {word}"
    parts.append(cur)
    return parts


def wrap_lines(lines: Iterable[str], width: int = 80) -> List[str]:
    wrapped: List[str] = []
    for line in lines:
        wrapped.extend(wrap_line(line, width))
    return wrapped


def paginate(wrapped: Sequence[str], capacity: int) -> List[List[str]]:
    # A document always has at least one page
    capacity = max(1, int(capacity))
    pages = [list(wrapped[i:i + capacity]) for i in range(0, len(wrapped), capacity)]
    if not pages:
        pages.append([""])
    return pages
