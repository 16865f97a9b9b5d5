"""
normalize_reviews.py – turn licensed review exports into one normalized JSON file.

  1. Read every *.json / *.csv export in the exports directory
  2. Map each record's field synonyms onto one schema and drop invalid rows
  3. Anonymize authors, dedupe, sort newest first
  4. Write per-broker aggregates + reviews to the normalized output
"""

import csv
import json
import logging
import os
import re
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from dateutil import parser as date_parser

from common import CONFIG_PATH, ROOT_DIR, iso_utc, load_config, setup_logging, utc_now

logger = logging.getLogger(__name__)

DEFAULT_EXPORTS_DIR = "data/reviews/exports"
DEFAULT_OUTPUT = "data/reviews/normalized.json"
FALLBACK_SOURCE = "Licensed export"
BEST_RATING = 5

BROKER_FIELDS = ("brokerSlug", "broker", "broker_id", "slug")
RATING_FIELDS = ("rating", "stars", "score", "ratingValue")
TEXT_FIELDS = ("text", "body", "comment")
DATE_FIELDS = ("date", "createdAt", "publishedAt")
AUTHOR_FIELDS = ("author", "reviewer", "user")
SOURCE_NAME_FIELDS = ("sourceName", "source")
SOURCE_URL_FIELDS = ("sourceUrl", "url")

_DATE_ONLY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_ISO_PREFIX_RE = re.compile(r"^(\d{4}-\d{2}-\d{2})T")


# ---------------------------------------------------------------------------
# Reading exports
# ---------------------------------------------------------------------------

def list_export_files(exports_dir: str) -> list[str]:
    if not os.path.isdir(exports_dir):
        return []
    return [
        os.path.join(exports_dir, name)
        for name in sorted(os.listdir(exports_dir))
        if name.lower().endswith((".json", ".csv"))
    ]


def read_export_records(path: str) -> list[dict]:
    """Return the records of one export file as plain dicts."""
    lower = path.lower()
    with open(path, "r", encoding="utf-8", newline="") as fh:
        if lower.endswith(".json"):
            data = json.load(fh)
            return [r for r in data if isinstance(r, dict)] if isinstance(data, list) else []
        if lower.endswith(".csv"):
            reader = csv.DictReader(fh)
            return [
                {k.strip(): v for k, v in row.items() if k and k.strip()}
                for row in reader
            ]
    return []


# ---------------------------------------------------------------------------
# Field normalization
# ---------------------------------------------------------------------------

def _first(record: dict, fields: tuple[str, ...], skip_empty: bool = False):
    for field in fields:
        value = record.get(field)
        if value is None or (skip_empty and value == ""):
            continue
        return value
    return None


def to_yyyy_mm_dd(value) -> str | None:
    """Normalize a review date to ``YYYY-MM-DD`` (UTC), or ``None`` if unusable."""
    if value is None or value == "" or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc).strftime("%Y-%m-%d")
        except (OverflowError, OSError, ValueError):
            return None

    text = str(value).strip()
    if _DATE_ONLY_RE.match(text):
        return text
    m = _ISO_PREFIX_RE.match(text)
    if m:
        return m.group(1)
    try:
        dt = date_parser.parse(text)
    except (ValueError, OverflowError):
        return None
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%d")


def clamp_rating(value) -> int | None:
    """Round half-up to a whole star and clamp to 1..5; ``None`` if not numeric."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = Decimal(str(value).strip())
    except InvalidOperation:
        return None
    if not number.is_finite():
        return None
    number = max(Decimal(1), min(Decimal(BEST_RATING), number))
    return int(number.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def anonymize_author(author) -> str:
    """ "Maria Lopez" -> "Maria L." """
    if not isinstance(author, str) or not author.strip():
        return "User"
    parts = author.split()
    if len(parts) == 1:
        return parts[0][:1].upper() + parts[0][1:20]
    return f"{parts[0]} {parts[-1][:1].upper()}."


def normalize_record(record: dict, fallback_source: str, known_slugs) -> dict | None:
    """Map one export record onto the review schema; ``None`` when it must be dropped."""
    slug = _first(record, BROKER_FIELDS, skip_empty=True)
    if not isinstance(slug, str) or slug not in known_slugs:
        return None

    rating = clamp_rating(_first(record, RATING_FIELDS))
    text = str(_first(record, TEXT_FIELDS) or "").strip()
    date = to_yyyy_mm_dd(_first(record, DATE_FIELDS))
    if rating is None or not text or not date:
        return None

    source_name = _first(record, SOURCE_NAME_FIELDS)
    if source_name is None:
        source_name = fallback_source or FALLBACK_SOURCE
    source_url = _first(record, SOURCE_URL_FIELDS)

    return {
        "brokerSlug": slug,
        "rating": rating,
        "text": text,
        "date": date,
        "authorDisplay": anonymize_author(_first(record, AUTHOR_FIELDS)),
        "sourceName": str(source_name).strip() or FALLBACK_SOURCE,
        "sourceUrl": str(source_url).strip() if source_url else "",
        "locale": str(record["locale"]) if record.get("locale") else "en",
        "country": str(record["country"]) if record.get("country") else "",
    }


def dedupe_and_sort(reviews: list[dict]) -> list[dict]:
    seen: set[tuple[str, str, str]] = set()
    unique = []
    for review in reviews:
        key = (review["authorDisplay"], review["date"], review["text"])
        if key in seen:
            continue
        seen.add(key)
        unique.append(review)
    return sorted(unique, key=lambda r: r["date"], reverse=True)


def aggregate_for_broker(reviews: list[dict]) -> dict:
    count = len(reviews)
    if not count:
        return {"ratingValue": 0, "reviewCount": 0, "bestRating": BEST_RATING}
    mean = Decimal(sum(r["rating"] for r in reviews)) / Decimal(count)
    rating_value = float(mean.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))
    return {"ratingValue": rating_value, "reviewCount": count, "bestRating": BEST_RATING}


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def normalize_exports(exports_dir: str, brokers: list[dict], now) -> dict:
    by_broker: dict[str, list[dict]] = {b["slug"]: [] for b in brokers}
    dropped = 0

    for path in list_export_files(exports_dir):
        stem = os.path.splitext(os.path.basename(path))[0]
        records = read_export_records(path)
        logger.info("Read %d records from %s", len(records), os.path.basename(path))
        for record in records:
            review = normalize_record(record, stem, by_broker)
            if review is None:
                dropped += 1
                continue
            by_broker[review["brokerSlug"]].append(review)

    if dropped:
        logger.info("Dropped %d invalid or unknown-broker records", dropped)

    result: dict[str, dict] = {}
    for broker in brokers:
        reviews = dedupe_and_sort(by_broker[broker["slug"]])
        result[broker["slug"]] = {
            "name": broker["name"],
            "aggregate": aggregate_for_broker(reviews),
            "reviews": reviews,
        }
    return {"generatedAt": iso_utc(now), "brokers": result}


def run(config_path: str = CONFIG_PATH, root_dir: str = ROOT_DIR, now=None) -> dict:
    cfg = load_config(config_path)
    reviews_cfg = cfg.get("reviews", {})
    exports_dir = os.path.join(root_dir, reviews_cfg.get("exports_dir", DEFAULT_EXPORTS_DIR))
    out_rel = reviews_cfg.get("output", DEFAULT_OUTPUT)
    out_path = os.path.join(root_dir, out_rel)

    normalized = normalize_exports(exports_dir, reviews_cfg.get("brokers", []), now or utc_now())

    os.makedirs(os.path.dirname(out_path), exist_ok=True)
    with open(out_path, "w", encoding="utf-8") as fh:
        json.dump(normalized, fh, ensure_ascii=False, indent=2)
        fh.write("\n")

    total = sum(b["aggregate"]["reviewCount"] for b in normalized["brokers"].values())
    print(f"Wrote {out_rel} ({total} reviews across {len(normalized['brokers'])} brokers)")
    return normalized


if __name__ == "__main__":
    setup_logging()
    run()
