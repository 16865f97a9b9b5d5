"""
feeds.py – feed fetching, tolerant RSS/RDF/Atom parsing and source snapshots.

Feeds are parsed with plain pattern matching instead of an XML parser so that
malformed real-world feeds still yield whatever items they contain.
"""

import logging
import re
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from html import unescape
from urllib.parse import urljoin, urlparse

import requests
from dateutil import parser as dateutil_parser

logger = logging.getLogger(__name__)

DEFAULT_UA = "BrokerNewsBot/1.0 (+https://example.invalid)"
DEFAULT_TIMEOUT = 12
ACCEPT = "application/rss+xml, application/xml;q=0.9, text/xml;q=0.8, text/html;q=0.7, */*;q=0.5"

DATE_TAGS = ("pubDate", "dc:date", "dcterms:issued", "dcterms:created", "published", "updated")

_ITEM_RE = re.compile(r"<item\b[\s\S]*?</item>", re.IGNORECASE)
_ENTRY_RE = re.compile(r"<entry\b[\s\S]*?</entry>", re.IGNORECASE)
_CDATA_RE = re.compile(r"^<!\[CDATA\[([\s\S]*?)\]\]>$")


# ---------------------------------------------------------------------------
# Fetching
# ---------------------------------------------------------------------------

def fetch_text(url: str, timeout: float = DEFAULT_TIMEOUT, user_agent: str = DEFAULT_UA) -> str:
    """GET ``url`` and return the body; raises ``requests.RequestException`` on failure."""
    response = requests.get(
        url,
        timeout=timeout,
        headers={"User-Agent": user_agent, "Accept": ACCEPT},
        allow_redirects=True,
    )
    response.raise_for_status()
    if not response.encoding or response.encoding.lower() == "iso-8859-1":
        response.encoding = response.apparent_encoding or response.encoding
    return response.text


def fetch_feed_items(urls: list[str], cfg: dict) -> list[dict]:
    """Fetch and parse each feed in turn; failing sources are skipped."""
    timeout = cfg.get("fetch_timeout_seconds", DEFAULT_TIMEOUT)
    user_agent = cfg.get("user_agent", DEFAULT_UA)
    items: list[dict] = []
    for url in urls:
        try:
            xml = fetch_text(url, timeout=timeout, user_agent=user_agent)
        except requests.RequestException as exc:
            logger.warning("Failed to fetch %s: %s", url, exc)
            continue
        parsed = parse_feed_items(xml, base_url=url)
        logger.info("  %s → %d items", url, len(parsed))
        items.extend(parsed)
    return items


# ---------------------------------------------------------------------------
# Parsing helpers
# ---------------------------------------------------------------------------

def strip_cdata(value: str) -> str:
    s = (value or "").strip()
    match = _CDATA_RE.match(s)
    return match.group(1) if match else s


def decode_entities(value: str) -> str:
    return unescape(value or "")


def clean_text(value: str) -> str:
    return re.sub(r"\s+", " ", decode_entities(strip_cdata(value))).strip()


def text_from_tag(xml: str, tag: str) -> str:
    pattern = rf"<{re.escape(tag)}\b[^>]*>([\s\S]*?)</{re.escape(tag)}>"
    match = re.search(pattern, xml or "", flags=re.IGNORECASE)
    if not match:
        return ""
    return clean_text(match.group(1))


def attr_from_tag(xml: str, tag: str, attr: str) -> str:
    pattern = rf"<{re.escape(tag)}\b[^>]*\b{re.escape(attr)}=[\"']([^\"']+)[\"'][^>]*/?>"
    match = re.search(pattern, xml or "", flags=re.IGNORECASE)
    return decode_entities(match.group(1)).strip() if match else ""


def safe_url(url: str, base_url: str = "") -> str:
    """Return ``url`` as an absolute http(s) URL, or ``""`` when it is not one."""
    candidate = (url or "").strip()
    if not candidate:
        return ""
    try:
        if base_url and not urlparse(candidate).scheme:
            candidate = urljoin(base_url, candidate)
        parsed = urlparse(candidate)
    except ValueError:
        return ""
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return ""
    if any(ch.isspace() for ch in candidate):
        return ""
    return candidate


def _parse_feed_date(raw: str) -> datetime | None:
    # RFC 822 first: it knows the US zone names (EST, PDT, ...) that dateutil leaves naive.
    try:
        return parsedate_to_datetime(raw)
    except (TypeError, ValueError, IndexError):
        pass
    try:
        return dateutil_parser.parse(raw)
    except (ValueError, OverflowError):
        return None


def to_iso_utc(raw: str) -> str:
    """Parse a feed date into ``YYYY-MM-DDTHH:MM:SSZ``; ``""`` if unparseable."""
    raw = (raw or "").strip()
    if not raw:
        return ""
    dt = _parse_feed_date(raw)
    if dt is None:
        return ""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    try:
        return dt.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
    except (ValueError, OverflowError):
        return ""


def domain_label(link: str) -> str:
    try:
        host = urlparse(link).hostname or ""
    except ValueError:
        host = ""
    return re.sub(r"^www\.", "", host) or "source"


def truncate(text: str, max_chars: int) -> str:
    clean = (text or "").strip()
    if len(clean) <= max_chars:
        return clean
    return clean[: max(0, max_chars - 1)].rstrip() + "…"


def _first_date(block: str) -> str:
    for tag in DATE_TAGS:
        raw = text_from_tag(block, tag)
        if raw:
            return to_iso_utc(raw)
    return ""


def _make_item(title: str, link: str, published_at: str) -> dict | None:
    if not title or not link or not published_at:
        return None
    return {"title": title, "link": link, "published_at": published_at}


def parse_feed_items(xml: str, base_url: str = "") -> list[dict]:
    """Extract ``{title, link, published_at}`` items from RSS 2.0, RDF or Atom text."""
    text = xml or ""
    items: list[dict] = []

    for block in _ITEM_RE.findall(text):
        link = (
            safe_url(text_from_tag(block, "link"), base_url)
            or safe_url(text_from_tag(block, "guid"), base_url)
            or safe_url(attr_from_tag(block, "item", "rdf:about"), base_url)
        )
        item = _make_item(text_from_tag(block, "title"), link, _first_date(block))
        if item:
            items.append(item)

    for block in _ENTRY_RE.findall(text):
        link = (
            safe_url(attr_from_tag(block, "link", "href"), base_url)
            or safe_url(text_from_tag(block, "link"), base_url)
            or safe_url(text_from_tag(block, "id"), base_url)
        )
        item = _make_item(text_from_tag(block, "title"), link, _first_date(block))
        if item:
            items.append(item)

    return items


# ---------------------------------------------------------------------------
# Source snapshots
# ---------------------------------------------------------------------------

_META_NAMES = ("og:description", "twitter:description", "description")


def meta_description(html: str) -> str:
    if not html:
        return ""
    for name in _META_NAMES:
        for attr in ("property", "name"):
            pattern = (
                rf"<meta[^>]+{attr}=[\"']{re.escape(name)}[\"'][^>]+content=[\"']([^\"']+)[\"'][^>]*>"
            )
            match = re.search(pattern, html, flags=re.IGNORECASE)
            if match:
                return clean_text(match.group(1))
    return ""


def fetch_source_snapshot(url: str, cfg: dict) -> str:
    max_chars = int(cfg.get("snapshot_chars", 180))
    try:
        html = fetch_text(
            url,
            timeout=cfg.get("fetch_timeout_seconds", DEFAULT_TIMEOUT),
            user_agent=cfg.get("user_agent", DEFAULT_UA),
        )
    except requests.RequestException:
        return ""
    return truncate(meta_description(html), max_chars)


def enrich(items: list[dict], cfg: dict, limit: int = 4) -> list[dict]:
    """Attach a ``snapshot`` to the first ``limit`` items (others are dropped)."""
    return [{**item, "snapshot": fetch_source_snapshot(item["link"], cfg)} for item in items[:limit]]
