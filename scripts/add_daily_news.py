"""
add_daily_news.py – publish the daily LATAM broker + crypto/FX brief.

Once per UTC day this writes a brief page for each site and adds a card
linking to it at the top of the site's daily-news list.  Running again on the
same day leaves everything as it is.
"""

import logging
import posixpath

from common import (
    CONFIG_PATH,
    ROOT_DIR,
    daily_key,
    exists,
    iso_utc,
    load_config,
    read_text,
    setup_logging,
    site_cfg,
    site_path,
    utc_now,
    write_if_changed,
    write_text,
)
from feeds import enrich, fetch_feed_items
from markers import upsert_keyed_item
from relevance import DEFAULT_MAX_AGE_DAYS, rank_fresh, select_topic
from skins import TOPIC_ORDER, get_skin

logger = logging.getLogger(__name__)

DAILY_START = "<!-- DAILY_NEWS_START -->"
DAILY_END = "<!-- DAILY_NEWS_END -->"
DEFAULT_PAGE_PATH = "news/daily/{key}/index.html"


def collect_sections(cfg: dict, job_cfg: dict, now, max_age_days: int) -> dict[str, list[dict]]:
    """Fetch each topic's feeds and return the enriched headlines per topic."""
    fetch_limit = int(job_cfg.get("fetch_limit", 24))
    section_limit = int(job_cfg.get("section_limit", 8))
    snapshot_limit = int(job_cfg.get("snapshot_limit", 4))

    sections: dict[str, list[dict]] = {}
    for topic in TOPIC_ORDER:
        urls = cfg.get("topics", {}).get(topic, [])
        logger.info("Fetching %d %s feeds…", len(urls), topic)
        ranked = rank_fresh(fetch_feed_items(urls, cfg), fetch_limit, max_age_days, now)
        selected = select_topic(ranked, topic, section_limit)
        sections[topic] = enrich(selected, cfg, limit=snapshot_limit)
        logger.info("  %s: %d headlines selected", topic, len(sections[topic]))
    return sections


def relative_href(target_page: str, from_page: str) -> str:
    """Site-relative link from one page to the directory of another."""
    target_dir = posixpath.dirname(target_page)
    from_dir = posixpath.dirname(from_page) or "."
    return posixpath.relpath(target_dir, from_dir) + "/"


def run(config_path: str = CONFIG_PATH, root_dir: str = ROOT_DIR, now=None) -> list[str]:
    cfg = load_config(config_path)
    now = now or utc_now()
    job = cfg.get("daily", {})
    key = daily_key(now)
    stamp = iso_utc(now)
    updated: list[str] = []

    sections = collect_sections(cfg, job, now, int(cfg.get("max_age_days", DEFAULT_MAX_AGE_DAYS)))
    if not any(sections.values()):
        print(f"Daily news: no headlines available, nothing published (key={key})")
        return updated

    start = job.get("marker_start", DAILY_START)
    end = job.get("marker_end", DAILY_END)
    page_rel = job.get("page_path", DEFAULT_PAGE_PATH).format(key=key)

    # Splice the cards in memory first: a page with broken markers aborts the run before any write.
    card_updates: list[tuple[str, str, str]] = []
    for card in job.get("cards", []):
        site = card["site"]
        skin = get_skin(site_cfg(cfg, site)["skin"], site_cfg(cfg, site).get("canonical_base"))
        rel_path = site_path(cfg, site, card["path"])
        html = read_text(root_dir, rel_path)
        next_html = upsert_keyed_item(
            html,
            start,
            end,
            item_html=skin.daily_card(key, relative_href(page_rel, card["path"]), stamp),
            item_pattern=skin.daily_card_pattern,
            key_attr="data-daily-key",
            key=key,
            max_items=int(job.get("max_cards", 31)),
            indent=int(job.get("indent", 20)),
        )
        card_updates.append((rel_path, html, next_html))

    for site in job.get("sites", []):
        rel_path = site_path(cfg, site, page_rel)
        if exists(root_dir, rel_path):
            continue
        skin = get_skin(site_cfg(cfg, site)["skin"], site_cfg(cfg, site).get("canonical_base"))
        write_text(root_dir, rel_path, skin.daily_page(key, stamp, sections))
        updated.append(rel_path)
        logger.info("Wrote %s", rel_path)

    for rel_path, html, next_html in card_updates:
        write_if_changed(root_dir, rel_path, html, next_html, updated)

    if updated:
        print(f"Daily news updated: {', '.join(updated)} (key={key} datetime={stamp})")
    else:
        print(f"Daily news already present (key={key})")
    return updated


if __name__ == "__main__":
    setup_logging()
    run()
