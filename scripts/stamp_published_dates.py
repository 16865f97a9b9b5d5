"""Stamp publish datetimes onto ``<time data-stamp-on-publish="true">`` elements.

New posts are written with a placeholder::

    <time class="news-date" data-relative-time="true" data-stamp-on-publish="true">Just now</time>

and this job turns them into::

    <time class="news-date" data-relative-time="true" datetime="2026-02-10T09:00:00Z">2026-02-10</time>

removing the marker so the element is never stamped again.
"""

import logging
import re

from common import CONFIG_PATH, ROOT_DIR, iso_utc, load_config, read_text, setup_logging, utc_now, write_if_changed

logger = logging.getLogger(__name__)

_STAMP_RE = re.compile(r'<time\b([^>]*?)\bdata-stamp-on-publish\s*=\s*"true"([^>]*)>([\s\S]*?)</time>')
PLACEHOLDERS = ("Just now", "Publishing…")


def stamp_times(html: str, now_iso: str) -> tuple[str, bool]:
    """Return ``(html, changed)`` with every pending ``<time>`` stamped at ``now_iso``."""
    abs_date = now_iso.split("T")[0]
    changed = False

    def _stamp(match: re.Match) -> str:
        nonlocal changed
        changed = True
        attrs = (match.group(1).rstrip() + match.group(2)).rstrip()
        inner = match.group(3)
        if re.search(r"\bdatetime\s*=", attrs):
            return f"<time{attrs}>{inner}</time>"
        show_absolute = re.search(r'data-show-absolute\s*=\s*"true"', attrs) is not None
        if show_absolute or inner.strip() in PLACEHOLDERS:
            inner = abs_date
        return f'<time{attrs} datetime="{now_iso}">{inner}</time>'

    return _STAMP_RE.sub(_stamp, html), changed


def run(config_path: str = CONFIG_PATH, root_dir: str = ROOT_DIR, now=None) -> list[str]:
    cfg = load_config(config_path)
    now_iso = iso_utc(now or utc_now())
    updated: list[str] = []

    for rel_path in cfg.get("stamp", {}).get("targets", []):
        html = read_text(root_dir, rel_path)
        next_html, changed = stamp_times(html, now_iso)
        if changed:
            write_if_changed(root_dir, rel_path, html, next_html, updated)

    if updated:
        print(f"Stamped publish datetimes ({now_iso}) in: {', '.join(updated)}")
    else:
        print("No publish datetimes to stamp.")
    return updated


if __name__ == "__main__":
    setup_logging()
    run()
