"""
rebuild_reviews.py – render normalized licensed reviews into the site1 pages.

Reads the file written by ``normalize_reviews.py`` and rewrites:

  * the licensed-review summary block on every broker page
    (``<site root>/brokers/<slug>.html``)
  * the "Detailed Broker Reviews" block on the site homepage

A page missing its markers is reported and skipped; the remaining pages are
still written and the run then fails with the list of broken pages.
"""

import json
import logging
import os

from common import CONFIG_PATH, ROOT_DIR, load_config, read_text, setup_logging, site_path, write_if_changed
from markers import MarkerError, replace_between_markers
from normalize_reviews import BEST_RATING, DEFAULT_OUTPUT, clamp_rating
from skins import bilingual, esc

logger = logging.getLogger(__name__)

SUMMARY_START = "<!-- LICENSED_USER_REVIEWS_SUMMARY_START -->"
SUMMARY_END = "<!-- LICENSED_USER_REVIEWS_SUMMARY_END -->"
BLOCK_START = "<!-- LICENSED_REVIEWS_BLOCK_START -->"
BLOCK_END = "<!-- LICENSED_REVIEWS_BLOCK_END -->"
DEFAULT_BROKER_PAGE = "brokers/{slug}.html"
DEFAULT_HOMEPAGE = "index.html"

SUMMARY_SNIPPETS = 3
PANEL_CARDS = 5
VISIBLE_CARDS = 2

EMPTY_BROKER = {"aggregate": {"ratingValue": 0, "reviewCount": 0, "bestRating": BEST_RATING}, "reviews": []}
NO_REVIEWS_EN = "No licensed reviews imported yet."
NO_REVIEWS_ES = "Aún no hay reseñas importadas con licencia."


def stars(rating) -> str:
    n = clamp_rating(rating) or 1
    return "★" * n + "☆" * (BEST_RATING - n)


def _rating_summary(data: dict) -> tuple[str, str, str, str]:
    """Return ``(stars, score, count_en, count_es)`` for a broker's aggregate."""
    agg = data.get("aggregate") or EMPTY_BROKER["aggregate"]
    count = int(agg.get("reviewCount") or 0)
    value = agg.get("ratingValue") if count else 0
    star_text = stars(value) if value else "☆" * BEST_RATING
    score = f"{value:g}/{BEST_RATING}" if value else "—"
    count_en = f"({count} {'review' if count == 1 else 'reviews'})"
    count_es = f"({count} {'reseña' if count == 1 else 'reseñas'})"
    return star_text, score, count_en, count_es


def build_review_card(review: dict, hidden: bool = False) -> str:
    name = esc(review.get("sourceName", ""))
    if review.get("sourceUrl"):
        source = (
            f'<a class="link-cta" href="{esc(review["sourceUrl"])}" target="_blank" '
            f'rel="noopener noreferrer">{name}</a>'
        )
    else:
        source = name
    text = review.get("text", "")
    css = "review-card is-hidden" if hidden else "review-card"
    lines = [
        f'<div class="{css}">',
        '    <div class="review-header">',
        f'        <span class="review-name">{esc(review.get("authorDisplay") or "User")}</span>',
        f'        <span class="rating-stars-gold">{esc(stars(review.get("rating")))}</span>',
        "    </div>",
        f'    <p class="review-text" {bilingual(text, text)}>',
        f"        {esc(text)}",
        "    </p>",
        f'    <time class="review-date" datetime="{esc(review.get("date", ""))}">{esc(review.get("date", ""))}</time>',
        f'    <span class="review-date" data-en="Source: {name} (licensed)" data-es="Fuente: {name} (licencia)">'
        f"Source: {source} (licensed)</span>",
        "</div>",
    ]
    return "\n".join(lines)


def _indented(block: str, spaces: int) -> list[str]:
    pad = " " * spaces
    return [pad + line if line.strip() else "" for line in block.splitlines()]


def build_summary_block(broker: dict, data: dict) -> str:
    star_text, score, count_en, count_es = _rating_summary(data)
    snippets = [build_review_card(r) for r in (data.get("reviews") or [])[:SUMMARY_SNIPPETS]]
    intro_en = (
        "This summary is calculated from reviews you’re licensed to republish (and/or reader submissions). "
        "It’s separate from our editorial score."
    )
    intro_es = (
        "Este resumen se calcula con reseñas con licencia (y/o envíos de lectores). "
        "Es independiente del puntaje editorial."
    )

    lines = [
        f'<div class="card-panel" data-licensed-reviews-summary="{esc(broker["slug"])}">',
        f'    <h2 class="subheading-card" '
        f'{bilingual("User rating (licensed exports)", "Calificación de usuarios (licencia)")}>'
        "User rating (licensed exports)</h2>",
        f'    <p class="guide-text" {bilingual(intro_en, intro_es)}>',
        f"        {esc(intro_en)}",
        "    </p>",
        '    <div class="rating-row">',
        f'        <span class="rating-stars-gold">{esc(star_text)}</span>',
        f'        <span class="rating-score">{esc(score)}</span>',
        f'        <span class="rating-small" {bilingual(count_en, count_es)}>{esc(count_en)}</span>',
        "    </div>",
        '    <div class="mt-2">',
        f'        <h3 class="criteria-label" '
        f'{bilingual("Recent licensed snippets", "Fragmentos recientes (licencia)")}>Recent licensed snippets</h3>',
    ]
    if snippets:
        for snippet in snippets:
            lines.extend(_indented(snippet, 8))
    else:
        lines.append(f'        <p class="rating-small" {bilingual(NO_REVIEWS_EN, NO_REVIEWS_ES)}>{NO_REVIEWS_EN}</p>')
    lines += [
        "    </div>",
        '    <div class="link-row">',
        f'        <a class="link-cta" href="../methodology/" '
        f'{bilingual("Methodology & sources →", "Metodología y fuentes →")}>Methodology &amp; sources →</a>',
        f'        <a class="link-cta" href="../reviews/submit/" '
        f'{bilingual("Submit a review →", "Enviar una reseña →")}>Submit a review →</a>',
        "    </div>",
        "</div>",
    ]
    return "\n".join(lines)


def build_broker_panel(broker: dict, data: dict) -> str:
    star_text, score, count_en, count_es = _rating_summary(data)
    reviews = data.get("reviews") or []
    cards = [build_review_card(r, hidden=idx >= VISIBLE_CARDS) for idx, r in enumerate(reviews[:PANEL_CARDS])]

    lines = [
        f'<div class="card-panel" data-licensed-reviews-broker="{esc(broker["slug"])}">',
        '    <div class="card-header-flex">',
        '        <div class="badge-logo">',
        f'            <img class="broker-logo-img" src="{esc(broker.get("logo_url", ""))}" '
        f'alt="{esc(broker["name"])} logo" width="48" height="48" loading="lazy" decoding="async">',
        "        </div>",
        "        <div>",
        f'            <h4 class="card-heading-sm">{esc(broker["name"])}</h4>',
        '            <div class="rating-row">',
        f'                <span class="rating-stars-gold">{esc(star_text)}</span>',
        f'                <span class="rating-score">{esc(score)}</span>',
        f'                <span class="rating-small review-count" {bilingual(count_en, count_es)}>{esc(count_en)}</span>',
        "            </div>",
        "        </div>",
        "    </div>",
        '    <div class="mt-2">',
        f'        <h5 class="block-title" {bilingual("User Reviews (licensed)", "Reseñas (licencia)")}>'
        "User Reviews (licensed)</h5>",
    ]
    if cards:
        for card in cards:
            lines.extend(_indented(card, 8))
    else:
        lines.append(f'        <p class="rating-small" {bilingual(NO_REVIEWS_EN, NO_REVIEWS_ES)}>{NO_REVIEWS_EN}</p>')
    if len(reviews) > VISIBLE_CARDS:
        lines += [
            '        <div class="reviews-actions">',
            f'            <button class="btn-more" type="button" data-review-toggle '
            f'{bilingual("View more reviews", "Ver más reseñas")}>View more reviews</button>',
            "        </div>",
        ]
    lines += ["    </div>", "</div>"]
    return "\n".join(lines)


def build_homepage_block(brokers: list[dict], brokers_data: dict) -> list[str]:
    note_en = (
        "These review snippets are imported from licensed exports and/or reader submissions. "
        "Always verify the broker entity on official registers."
    )
    note_es = (
        "Estos fragmentos se importan de exports con licencia y/o envíos de lectores. "
        "Verifica la entidad en registros oficiales."
    )
    header = "\n".join([
        f'<h3 class="section-subheading" {bilingual("Detailed Broker Reviews", "Reseñas Detalladas de Brokers")}>'
        "Detailed Broker Reviews</h3>",
        f'<p class="rating-small" {bilingual(note_en, note_es)}>{esc(note_en)}</p>',
    ])
    panels = [build_broker_panel(b, brokers_data.get(b["slug"], EMPTY_BROKER)) for b in brokers]
    return [header] + panels


def load_normalized(path: str) -> dict:
    with open(path, "r", encoding="utf-8") as fh:
        data = json.load(fh)
    return data.get("brokers", {}) if isinstance(data, dict) else {}


def run(config_path: str = CONFIG_PATH, root_dir: str = ROOT_DIR) -> list[str]:
    cfg = load_config(config_path)
    reviews_cfg = cfg.get("reviews", {})
    site = reviews_cfg.get("site", "site1")
    brokers = reviews_cfg.get("brokers", [])
    brokers_data = load_normalized(os.path.join(root_dir, reviews_cfg.get("output", DEFAULT_OUTPUT)))
    updated: list[str] = []
    failed: list[str] = []

    targets = []
    for broker in brokers:
        rel_path = site_path(cfg, site, reviews_cfg.get("broker_page", DEFAULT_BROKER_PAGE).format(slug=broker["slug"]))
        block = build_summary_block(broker, brokers_data.get(broker["slug"], EMPTY_BROKER))
        targets.append((rel_path, SUMMARY_START, SUMMARY_END, [block], int(reviews_cfg.get("summary_indent", 16))))
    targets.append((
        site_path(cfg, site, reviews_cfg.get("homepage", DEFAULT_HOMEPAGE)),
        BLOCK_START,
        BLOCK_END,
        build_homepage_block(brokers, brokers_data),
        int(reviews_cfg.get("block_indent", 20)),
    ))

    for rel_path, start, end, fragments, indent in targets:
        html = read_text(root_dir, rel_path)
        try:
            next_html = replace_between_markers(html, start, end, fragments, indent)
        except MarkerError as exc:
            logger.error("%s: %s", rel_path, exc)
            failed.append(rel_path)
            continue
        write_if_changed(root_dir, rel_path, html, next_html, updated)

    if updated:
        print(f"Licensed reviews rebuilt: {', '.join(updated)}")
    else:
        print("Licensed reviews already up to date.")
    if failed:
        raise MarkerError(f"Missing licensed review markers in: {', '.join(failed)}")
    return updated


if __name__ == "__main__":
    setup_logging()
    run()
