"""
add_weekly_news.py – publish the weekly brief (ISO week, UTC).

  1. Collect the week's broker / forex / crypto headlines
  2. Write the weekly page for each site (once per week key)
  3. Replace or prepend the week's card on every configured page
  4. Rebuild each site's weekly index from the week keys it already lists
"""

import logging

from add_daily_news import collect_sections, relative_href
from common import (
    CONFIG_PATH,
    ROOT_DIR,
    exists,
    iso_utc,
    iso_week,
    load_config,
    read_text,
    setup_logging,
    site_cfg,
    site_path,
    utc_now,
    week_key,
    write_if_changed,
    write_text,
)
from feeds import truncate
from markers import keys_in_region, rebuild_keyed_region, upsert_keyed_item
from skins import TOPIC_ORDER, get_skin

logger = logging.getLogger(__name__)

WEEKLY_START = "<!-- WEEKLY_NEWS_START -->"
WEEKLY_END = "<!-- WEEKLY_NEWS_END -->"
INDEX_START = "<!-- WEEKLY_INDEX_START -->"
INDEX_END = "<!-- WEEKLY_INDEX_END -->"
DEFAULT_PAGE_PATH = "news/weekly/{key}/index.html"
DEFAULT_INDEX_PATH = "news/weekly/index.html"


def _skin_for(cfg: dict, site: str):
    return get_skin(site_cfg(cfg, site)["skin"], site_cfg(cfg, site).get("canonical_base"))


def _lead_headline(sections: dict[str, list[dict]]) -> tuple[int, str]:
    items = [item for topic in TOPIC_ORDER for item in sections.get(topic, [])]
    newest = max(items, key=lambda i: i["published_at"])
    return len(items), truncate(newest["title"], 80)


def rebuild_index(html: str, key: str, skin, job: dict) -> str:
    start = job.get("index_marker_start", INDEX_START)
    end = job.get("index_marker_end", INDEX_END)
    keys = set(keys_in_region(html, start, end, "data-weekly-key"))
    keys.add(key)
    return rebuild_keyed_region(
        html,
        start,
        end,
        sorted(keys, reverse=True),
        skin.weekly_index_entry,
        max_items=int(job.get("index_max", 52)),
        indent=int(job.get("indent", 20)),
    )


def run(config_path: str = CONFIG_PATH, root_dir: str = ROOT_DIR, now=None) -> list[str]:
    cfg = load_config(config_path)
    now = now or utc_now()
    job = cfg.get("weekly", {})
    key = week_key(now)
    year, week = iso_week(now)
    stamp = iso_utc(now)
    updated: list[str] = []

    sections = collect_sections(cfg, job, now, int(job.get("max_age_days", 7)))
    if not any(sections.values()):
        print(f"Weekly news: no headlines available, nothing published (key={key})")
        return updated
    headline_count, top_title = _lead_headline(sections)

    start = job.get("marker_start", WEEKLY_START)
    end = job.get("marker_end", WEEKLY_END)
    page_rel = job.get("page_path", DEFAULT_PAGE_PATH).format(key=key)
    index_rel = job.get("index_path", DEFAULT_INDEX_PATH)

    pending: list[tuple[str, str, str]] = []
    for card in job.get("cards", []):
        site = card["site"]
        skin = _skin_for(cfg, site)
        rel_path = site_path(cfg, site, card["path"])
        html = read_text(root_dir, rel_path)
        next_html = upsert_keyed_item(
            html,
            start,
            end,
            item_html=skin.weekly_card(
                key, year, week, relative_href(page_rel, card["path"]), headline_count, top_title
            ),
            item_pattern=skin.weekly_card_pattern,
            key_attr="data-weekly-key",
            key=key,
            max_items=int(job.get("max_cards", 12)),
            replace_existing=True,
            indent=int(job.get("indent", 20)),
        )
        pending.append((rel_path, html, next_html))

    for site in job.get("sites", []):
        rel_path = site_path(cfg, site, index_rel)
        if not exists(root_dir, rel_path):
            logger.info("No weekly index page at %s", rel_path)
            continue
        html = read_text(root_dir, rel_path)
        pending.append((rel_path, html, rebuild_index(html, key, _skin_for(cfg, site), job)))

    for site in job.get("sites", []):
        rel_path = site_path(cfg, site, page_rel)
        if exists(root_dir, rel_path):
            continue
        write_text(root_dir, rel_path, _skin_for(cfg, site).weekly_page(key, year, week, stamp, sections))
        updated.append(rel_path)
        logger.info("Wrote %s", rel_path)

    for rel_path, html, next_html in pending:
        write_if_changed(root_dir, rel_path, html, next_html, updated)

    if updated:
        print(f"Weekly news updated: {', '.join(updated)} (key={key} datetime={stamp})")
    else:
        print(f"Weekly news already up to date (key={key})")
    return updated


if __name__ == "__main__":
    setup_logging()
    run()
