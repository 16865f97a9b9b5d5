"""
update_rss_news.py – refresh the LATAM headline archive on each site.

Pipeline (per configured region):
  1. Fetch the region's RSS/Atom feeds
  2. Keep fresh headlines, LATAM first
  3. Merge with the region's stored items (sidecar JSON)
  4. Re-render the RSS_NEWS region on every page of the region
"""

import logging
import os

from common import (
    CONFIG_PATH,
    ROOT_DIR,
    exists,
    load_config,
    read_text,
    setup_logging,
    site_cfg,
    site_path,
    utc_now,
    write_if_changed,
)
from feeds import fetch_feed_items
from markers import extract_between_markers, load_region_items, replace_between_markers, save_region_items
from relevance import DEFAULT_MAX_AGE_DAYS, merge_keep_recent, select_latam_focused
from skins import get_skin, recover_rss_items

logger = logging.getLogger(__name__)

RSS_START = "<!-- RSS_NEWS_START -->"
RSS_END = "<!-- RSS_NEWS_END -->"


def _existing_items(region: dict, page_paths: list[str], root_dir: str, start: str, end: str) -> list[dict]:
    sidecar = os.path.join(root_dir, region["sidecar"])
    stored = load_region_items(sidecar)
    if stored is not None:
        return stored

    # No sidecar yet: pick up whatever a previous run rendered into the pages.
    for rel_path in page_paths:
        if not exists(root_dir, rel_path):
            continue
        recovered = recover_rss_items(extract_between_markers(read_text(root_dir, rel_path), start, end))
        if recovered:
            logger.info("Recovered %d existing headlines from %s", len(recovered), rel_path)
            return recovered
    return []


def update_region(region: dict, cfg: dict, root_dir: str, now, updated: list[str]) -> None:
    rss_cfg = cfg.get("rss_news", {})
    start = rss_cfg.get("marker_start", RSS_START)
    end = rss_cfg.get("marker_end", RSS_END)
    indent = int(rss_cfg.get("indent", 20))
    site = region["site"]
    skin = get_skin(site_cfg(cfg, site)["skin"], site_cfg(cfg, site).get("canonical_base"))

    logger.info("Fetching %d feeds for %s…", len(region.get("feeds", [])), site)
    fetched = fetch_feed_items(region.get("feeds", []), cfg)
    fresh = select_latam_focused(
        fetched,
        limit=int(region.get("fetch_limit", 30)),
        max_age_days=int(cfg.get("max_age_days", DEFAULT_MAX_AGE_DAYS)),
        now=now,
    )
    logger.info("Selected %d fresh headlines for %s", len(fresh), site)
    if not fresh:
        return

    pages = region.get("pages", [])
    page_paths = [site_path(cfg, site, page["path"]) for page in pages]
    existing = _existing_items(region, page_paths, root_dir, start, end)
    merged = merge_keep_recent(existing, fresh, int(region.get("max_items", 60)))

    # Render every page before writing anything so a broken page leaves the region untouched.
    rendered: list[tuple[str, str, str]] = []
    for page, rel_path in zip(pages, page_paths):
        if not exists(root_dir, rel_path):
            if page.get("optional", False):
                logger.info("Skipping missing optional page %s", rel_path)
                continue
            raise FileNotFoundError(rel_path)
        html = read_text(root_dir, rel_path)
        shown = merged[: int(page.get("max_items", len(merged)))]
        next_html = replace_between_markers(html, start, end, [skin.rss_card(item) for item in shown], indent)
        rendered.append((rel_path, html, next_html))

    save_region_items(os.path.join(root_dir, region["sidecar"]), merged, now)
    for rel_path, html, next_html in rendered:
        write_if_changed(root_dir, rel_path, html, next_html, updated)


def run(config_path: str = CONFIG_PATH, root_dir: str = ROOT_DIR, now=None) -> list[str]:
    cfg = load_config(config_path)
    now = now or utc_now()
    updated: list[str] = []

    for region in cfg.get("rss_news", {}).get("regions", []):
        update_region(region, cfg, root_dir, now, updated)

    if updated:
        print(f"RSS news updated: {', '.join(updated)}")
    else:
        print("RSS news: no updates applied (feeds empty or content unchanged).")
    return updated


if __name__ == "__main__":
    setup_logging()
    run()
