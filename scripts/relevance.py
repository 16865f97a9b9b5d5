"""
relevance.py – topic / LATAM filters, freshness, and merge + rank of feed items.

Items are dicts with ``title``, ``link`` and ``published_at``
(``YYYY-MM-DDTHH:MM:SSZ``).  Every function here returns new lists and never
mutates the items it is given.
"""

import re
from datetime import datetime, timedelta, timezone
from urllib.parse import urlparse

from dateutil import parser as dateutil_parser

DEFAULT_MAX_AGE_DAYS = 45

# ---------------------------------------------------------------------------
# Topic filters
# ---------------------------------------------------------------------------

BROKER_TERMS = [
    "broker", "brokers", "forex", "fx", "cfd", "trading", "platform",
    "metatrader", "mt4", "mt5", "copy trading", "prop", "regulated",
    "regulation", "license", "licence", "withdraw", "deposit",
]

FOREX_MACRO_TERMS = [
    "forex", "fx", "usd", "eur", "mxn", "brl", "cop", "clp", "ars", "pen",
    "central bank", "rates", "inflation", "minutes", "fomc", "ecb",
    "banxico", "copom",
]

CRYPTO_TERMS = [
    "crypto", "bitcoin", "btc", "ethereum", "eth", "stablecoin", "blockchain",
    "token", "exchange", "defi", "web3",
]


def matches_any(title: str, needles: list[str]) -> bool:
    text = (title or "").lower()
    return any(needle in text for needle in needles)


def is_broker_industry(title: str) -> bool:
    return matches_any(title, BROKER_TERMS)


def is_forex_macro(title: str) -> bool:
    return matches_any(title, FOREX_MACRO_TERMS)


def is_crypto(title: str) -> bool:
    return matches_any(title, CRYPTO_TERMS)


TOPIC_FILTERS = {
    "brokers": is_broker_industry,
    "forex": is_forex_macro,
    "crypto": is_crypto,
}


# ---------------------------------------------------------------------------
# LATAM region filter
# ---------------------------------------------------------------------------

LATAM_TERMS = [
    "latam", "latin america", "américa latina", "america latina",
    "mexico", "méxico", "mexican", "mexicano", "brazil", "brasil", "brazilian",
    "argentina", "argentine", "argentino", "chile", "chilean", "chileno",
    "colombia", "colombian", "colombiano", "peru", "perú", "peruvian", "peruano",
    "uruguay", "uruguayan", "paraguay", "ecuador", "bolivia", "venezuela",
    "venezuelan", "costa rica", "panama", "panamá", "guatemala", "honduras",
    "nicaragua", "el salvador", "dominican", "república dominicana",
    "caribbean", "caribe",
    # regional central banks
    "banxico", "copom", "banrep", "bcra", "bcrp",
    # currency codes commonly used in FX headlines
    "mxn", "brl", "ars", "clp", "cop", "pen", "uyu", "crc", "dop", "ves",
    "bob", "pyg", "gtq", "hnl", "nio", "pab",
]

TRUSTED_LATAM_DOMAINS = {"banxico.org.mx", "bcb.gov.br", "banrep.gov.co"}

_LATAM_RE = re.compile(
    r"\b(" + "|".join(re.escape(term) for term in LATAM_TERMS) + r")\b",
    re.IGNORECASE,
)


def _host(link: str) -> str:
    try:
        host = urlparse(link or "").hostname or ""
    except ValueError:
        return ""
    return re.sub(r"^www\.", "", host.lower())


def is_latam(item: dict) -> bool:
    if _LATAM_RE.search(item.get("title", "") or ""):
        return True
    return _host(item.get("link", "")) in TRUSTED_LATAM_DOMAINS


# ---------------------------------------------------------------------------
# Freshness
# ---------------------------------------------------------------------------

def _parse_iso(value: str) -> datetime | None:
    if not value:
        return None
    try:
        dt = dateutil_parser.isoparse(value)
    except (ValueError, OverflowError):
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def is_fresh(published_at: str, max_age_days: int, now: datetime) -> bool:
    published = _parse_iso(published_at)
    if published is None:
        return False
    return published >= now - timedelta(days=max_age_days)


# ---------------------------------------------------------------------------
# Merge / rank
# ---------------------------------------------------------------------------

def dedupe_by_link(*lists: list[dict]) -> list[dict]:
    """Keep the first item seen per link, across all lists in order."""
    seen: set[str] = set()
    unique: list[dict] = []
    for items in lists:
        for item in items:
            link = item.get("link", "")
            if not link or link in seen:
                continue
            seen.add(link)
            unique.append(item)
    return unique


def _published_sort_key(item: dict) -> datetime:
    return _parse_iso(item.get("published_at", "")) or datetime.min.replace(tzinfo=timezone.utc)


def sort_newest_first(items: list[dict]) -> list[dict]:
    return sorted(items, key=_published_sort_key, reverse=True)


def merge_keep_recent(existing: list[dict], incoming: list[dict], max_items: int) -> list[dict]:
    """Merge previously published items with fresh ones; fresh ones win on link clashes."""
    candidates = [
        item for item in dedupe_by_link(incoming, existing)
        if _parse_iso(item.get("published_at", "")) is not None
    ]
    return sort_newest_first(candidates)[:max_items]


def rank_fresh(items: list[dict], limit: int, max_age_days: int, now: datetime) -> list[dict]:
    fresh = [i for i in dedupe_by_link(items) if is_fresh(i.get("published_at", ""), max_age_days, now)]
    return sort_newest_first(fresh)[:limit]


def pick_latam_first(items: list[dict], limit: int) -> list[dict]:
    latam = [i for i in items if is_latam(i)]
    rest = [i for i in items if not is_latam(i)]
    return (latam + rest)[:limit]


def select_latam_focused(items: list[dict], limit: int, max_age_days: int, now: datetime) -> list[dict]:
    """Prefer LATAM headlines; top up with other fresh ones when LATAM coverage is thin."""
    ranked = sort_newest_first(dedupe_by_link(items))
    fresh = [i for i in ranked if is_fresh(i.get("published_at", ""), max_age_days, now)]
    latam = [i for i in fresh if is_latam(i)]

    if len(latam) >= max(4, min(7, limit)):
        return latam[:limit]
    fill = [i for i in fresh if not is_latam(i)][: max(0, limit - len(latam))]
    return (latam + fill)[:limit]


def select_topic(items: list[dict], topic: str, section_limit: int) -> list[dict]:
    predicate = TOPIC_FILTERS[topic]
    matched = [i for i in items if predicate(i.get("title", ""))]
    return pick_latam_first(matched, section_limit)
