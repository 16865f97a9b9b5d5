"""Shared paths, config loading, period keys and file helpers for the site jobs."""

import logging
import os
from datetime import datetime, timezone

import yaml

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
CONFIG_PATH = os.path.join(ROOT_DIR, "config.yml")

LOG_FORMAT = "%(levelname)s: %(message)s"


def setup_logging(level: int = logging.INFO) -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

def load_config(path: str = CONFIG_PATH) -> dict:
    with open(path, "r", encoding="utf-8") as fh:
        cfg = yaml.safe_load(fh)
    return cfg or {}


def site_cfg(cfg: dict, site: str) -> dict:
    sites = cfg.get("sites", {})
    if site not in sites:
        raise KeyError(f"Unknown site in config: {site}")
    return sites[site]


def site_path(cfg: dict, site: str, rel_path: str) -> str:
    """Return a root-relative path for ``rel_path`` inside the site's directory."""
    return os.path.join(site_cfg(cfg, site).get("root", site), rel_path)


# ---------------------------------------------------------------------------
# Time & period keys
# ---------------------------------------------------------------------------

def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def iso_utc(dt: datetime) -> str:
    """Format as ``YYYY-MM-DDTHH:MM:SSZ`` (UTC, no fractional seconds)."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def daily_key(now: datetime) -> str:
    return now.astimezone(timezone.utc).strftime("%Y-%m-%d")


def iso_week(now: datetime) -> tuple[int, int]:
    """Return ``(iso_year, iso_week)`` for the UTC date of ``now``."""
    iso = now.astimezone(timezone.utc).date().isocalendar()
    return iso[0], iso[1]


def week_key(now: datetime) -> str:
    year, week = iso_week(now)
    return f"{year}-W{week:02d}"


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------

def read_text(root_dir: str, rel_path: str) -> str:
    with open(os.path.join(root_dir, rel_path), "r", encoding="utf-8") as fh:
        return fh.read()


def write_text(root_dir: str, rel_path: str, content: str) -> None:
    abs_path = os.path.join(root_dir, rel_path)
    os.makedirs(os.path.dirname(abs_path), exist_ok=True)
    with open(abs_path, "w", encoding="utf-8") as fh:
        fh.write(content)


def exists(root_dir: str, rel_path: str) -> bool:
    return os.path.exists(os.path.join(root_dir, rel_path))


def write_if_changed(root_dir: str, rel_path: str, before: str, after: str, updated: list[str]) -> None:
    """Write ``after`` only when it differs from ``before``; record the path in ``updated``."""
    if after == before:
        logger.info("No changes to %s", rel_path)
        return
    write_text(root_dir, rel_path, after)
    updated.append(rel_path)
    logger.info("Wrote %s", rel_path)
