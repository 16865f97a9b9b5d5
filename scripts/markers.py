"""
markers.py – rewrite generator-owned regions of static HTML pages.

A region is the text between a literal start comment and a literal end
comment (e.g. ``<!-- DAILY_NEWS_START -->`` / ``<!-- DAILY_NEWS_END -->``).
Everything between the two markers belongs to the generator and is rebuilt
from scratch; the markers themselves are never touched.

Regions whose items are recomputed every run keep their canonical item list
in a small JSON sidecar (see ``load_region_items``) so the HTML is only ever
written, never read back for data.
"""

import json
import os
import re
from datetime import datetime
from typing import Callable

from common import iso_utc

DEFAULT_INDENT = 20


class MarkerError(ValueError):
    """Raised when a marker pair is missing or out of order."""


def locate_region(html: str, start: str, end: str) -> tuple[int, int]:
    """Return ``(inner_start, inner_end)`` offsets of the region."""
    start_idx = html.find(start)
    end_idx = html.find(end)
    if start_idx == -1 or end_idx == -1 or end_idx < start_idx:
        raise MarkerError(f"Markers not found or invalid: {start} ... {end}")
    return start_idx + len(start), end_idx


def extract_between_markers(html: str, start: str, end: str) -> str:
    try:
        inner_start, inner_end = locate_region(html, start, end)
    except MarkerError:
        return ""
    return html[inner_start:inner_end]


def _indent_fragment(fragment: str, width: int) -> str:
    pad = " " * width
    return "\n".join(pad + line if line.strip() else "" for line in fragment.strip().splitlines())


def _outdent_fragment(fragment: str, width: int) -> str:
    """Undo ``_indent_fragment`` for an item matched out of a region.

    The match starts at the opening tag, so only continuation lines carry the
    region indentation.
    """
    lines = fragment.strip().splitlines()
    prefix = " " * width
    out = lines[:1]
    for line in lines[1:]:
        if line.startswith(prefix):
            line = line[width:]
        out.append(line)
    return "\n".join(out)


def render_region(fragments: list[str], indent: int = DEFAULT_INDENT) -> str:
    body = "\n".join(_indent_fragment(f, indent) for f in fragments if f and f.strip())
    if body:
        return "\n" + body + "\n" + " " * indent
    return "\n" + " " * indent


def replace_between_markers(
    html: str,
    start: str,
    end: str,
    fragments: list[str] | str,
    indent: int = DEFAULT_INDENT,
) -> str:
    if isinstance(fragments, str):
        fragments = [fragments]
    inner_start, inner_end = locate_region(html, start, end)
    return html[:inner_start] + render_region(fragments, indent) + html[inner_end:]


def _key_marker(key_attr: str, key: str) -> str:
    return f'{key_attr}="{key}"'


def upsert_keyed_item(
    html: str,
    start: str,
    end: str,
    *,
    item_html: str,
    item_pattern: re.Pattern | str,
    key_attr: str,
    key: str,
    max_items: int,
    replace_existing: bool = False,
    indent: int = DEFAULT_INDENT,
) -> str:
    """Add the item for ``key`` to a region of keyed items.

    With ``replace_existing=False`` an item already carrying the key leaves the
    document untouched (one item per period).  With ``replace_existing=True``
    that item is swapped for ``item_html`` in place.  New keys are prepended.
    The list is capped at ``max_items``, dropping the oldest items.
    """
    inner_start, inner_end = locate_region(html, start, end)
    middle = html[inner_start:inner_end]

    existing = [_outdent_fragment(m, indent) for m in re.findall(item_pattern, middle)]
    marker = _key_marker(key_attr, key)
    has_current = any(marker in item for item in existing)

    if has_current and not replace_existing:
        return html
    if has_current:
        items = [item_html if marker in item else item for item in existing]
    else:
        items = [item_html] + existing

    return html[:inner_start] + render_region(items[:max_items], indent) + html[inner_end:]


def keys_in_region(html: str, start: str, end: str, key_attr: str) -> list[str]:
    middle = extract_between_markers(html, start, end)
    keys: list[str] = []
    for key in re.findall(rf'{re.escape(key_attr)}="([^"]+)"', middle):
        if key not in keys:
            keys.append(key)
    return keys


def rebuild_keyed_region(
    html: str,
    start: str,
    end: str,
    keys: list[str],
    render: Callable[[str], str],
    max_items: int,
    indent: int = DEFAULT_INDENT,
) -> str:
    """Regenerate the whole region from an ordered list of period keys."""
    return replace_between_markers(html, start, end, [render(key) for key in keys[:max_items]], indent)


# ---------------------------------------------------------------------------
# Region sidecars
# ---------------------------------------------------------------------------

def load_region_items(path: str) -> list[dict] | None:
    """Return the stored items of a region, or ``None`` when no sidecar exists yet."""
    if not os.path.exists(path):
        return None
    with open(path, "r", encoding="utf-8") as fh:
        data = json.load(fh)
    items = data.get("items", []) if isinstance(data, dict) else []
    return [
        {"title": i["title"], "link": i["link"], "published_at": i["published_at"]}
        for i in items
        if isinstance(i, dict) and i.get("title") and i.get("link") and i.get("published_at")
    ]


def save_region_items(path: str, items: list[dict], now: datetime) -> None:
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    payload = {
        "updatedAt": iso_utc(now),
        "items": [
            {"title": i["title"], "link": i["link"], "published_at": i["published_at"]}
            for i in items
        ],
    }
    with open(path, "w", encoding="utf-8") as fh:
        json.dump(payload, fh, ensure_ascii=False, indent=2)
        fh.write("\n")
