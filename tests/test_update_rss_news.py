"""
Tests for scripts/update_rss_news.py
"""

import json
import os
import sys
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest
import yaml

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "scripts"))
import markers
import update_rss_news as urn

NOW = datetime(2026, 2, 20, 12, 0, 0, tzinfo=timezone.utc)
START, END = urn.RSS_START, urn.RSS_END


def iso(days_ago=0, hours_ago=0) -> str:
    return (NOW - timedelta(days=days_ago, hours=hours_ago)).strftime("%Y-%m-%dT%H:%M:%SZ")


def feed_items(n=5, prefix="Mexico peso", days_ago=0):
    return [
        {"title": f"{prefix} {i}", "link": f"https://news.example.com/{prefix.replace(' ', '-')}/{i}",
         "published_at": iso(days_ago, hours_ago=i)}
        for i in range(n)
    ]


def page_html(inner="\n                    ") -> str:
    return f"<html><body>\n  <section>\n                    {START}{inner}{END}\n  </section>\n</body></html>\n"


def write_config(tmp_path, pages=None) -> str:
    cfg = {
        "sites": {"site1": {"skin": "dark_gradient", "root": "site1"}},
        "rss_news": {
            "regions": [{
                "site": "site1",
                "feeds": ["https://feed.example.com/rss"],
                "max_items": 10,
                "sidecar": "data/regions/site1.json",
                "pages": pages or [
                    {"path": "news/index.html", "optional": True},
                    {"path": "index.html", "max_items": 2},
                ],
            }],
        },
    }
    path = tmp_path / "config.yml"
    path.write_text(yaml.safe_dump(cfg), encoding="utf-8")
    return str(path)


def write_page(tmp_path, rel, html=None):
    path = tmp_path / "site1" / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(html if html is not None else page_html(), encoding="utf-8")
    return path


class TestUpdateRssNews:
    def test_renders_pages_and_sidecar(self, tmp_path):
        cfg_path = write_config(tmp_path)
        home = write_page(tmp_path, "index.html")
        archive = write_page(tmp_path, "news/index.html")

        with patch.object(urn, "fetch_feed_items", return_value=feed_items(5)):
            updated = urn.run(cfg_path, str(tmp_path), NOW)

        assert sorted(updated) == ["site1/index.html", "site1/news/index.html"]
        assert home.read_text(encoding="utf-8").count("rss-news-card") == 2
        assert archive.read_text(encoding="utf-8").count("rss-news-card") == 5
        sidecar = json.loads((tmp_path / "data/regions/site1.json").read_text(encoding="utf-8"))
        assert sidecar["updatedAt"] == "2026-02-20T12:00:00Z"
        assert len(sidecar["items"]) == 5

    def test_merges_with_sidecar(self, tmp_path):
        cfg_path = write_config(tmp_path)
        write_page(tmp_path, "index.html")
        old = feed_items(3, prefix="Brazil real", days_ago=2)
        markers.save_region_items(str(tmp_path / "data/regions/site1.json"), old, NOW)

        with patch.object(urn, "fetch_feed_items", return_value=feed_items(2)):
            urn.run(cfg_path, str(tmp_path), NOW)

        stored = markers.load_region_items(str(tmp_path / "data/regions/site1.json"))
        assert len(stored) == 5
        assert stored[0]["title"] == "Mexico peso 0"
        assert stored[-1]["title"].startswith("Brazil real")

    def test_recovers_legacy_cards_without_sidecar(self, tmp_path):
        cfg_path = write_config(tmp_path)
        legacy = (
            '\n<article class="news-card rss-news-card"><a href="https://old.example.com/1">Chile rates</a>'
            f'<time datetime="{iso(days_ago=3)}">x</time></article>\n'
        )
        write_page(tmp_path, "index.html")
        write_page(tmp_path, "news/index.html", page_html(legacy))

        with patch.object(urn, "fetch_feed_items", return_value=feed_items(1)):
            urn.run(cfg_path, str(tmp_path), NOW)

        stored = markers.load_region_items(str(tmp_path / "data/regions/site1.json"))
        assert [s["link"] for s in stored] == ["https://news.example.com/Mexico-peso/0", "https://old.example.com/1"]

    def test_empty_fetch_writes_nothing(self, tmp_path):
        cfg_path = write_config(tmp_path)
        home = write_page(tmp_path, "index.html")
        before = home.read_text(encoding="utf-8")

        with patch.object(urn, "fetch_feed_items", return_value=[]):
            assert urn.run(cfg_path, str(tmp_path), NOW) == []

        assert home.read_text(encoding="utf-8") == before
        assert not (tmp_path / "data/regions/site1.json").exists()

    def test_stale_items_ignored(self, tmp_path):
        cfg_path = write_config(tmp_path)
        write_page(tmp_path, "index.html")
        with patch.object(urn, "fetch_feed_items", return_value=feed_items(3, days_ago=60)):
            assert urn.run(cfg_path, str(tmp_path), NOW) == []

    def test_rerun_is_idempotent(self, tmp_path):
        cfg_path = write_config(tmp_path)
        home = write_page(tmp_path, "index.html")
        with patch.object(urn, "fetch_feed_items", return_value=feed_items(4)):
            urn.run(cfg_path, str(tmp_path), NOW)
            first = home.read_text(encoding="utf-8")
            assert urn.run(cfg_path, str(tmp_path), NOW) == []
        assert home.read_text(encoding="utf-8") == first

    def test_missing_marker_aborts_without_writes(self, tmp_path):
        cfg_path = write_config(tmp_path)
        broken = write_page(tmp_path, "index.html", f"<html>{START} no end marker</html>")
        archive = write_page(tmp_path, "news/index.html")
        archive_before = archive.read_text(encoding="utf-8")

        with patch.object(urn, "fetch_feed_items", return_value=feed_items(3)):
            with pytest.raises(markers.MarkerError):
                urn.run(cfg_path, str(tmp_path), NOW)

        assert archive.read_text(encoding="utf-8") == archive_before
        assert broken.read_text(encoding="utf-8") == f"<html>{START} no end marker</html>"
        assert not (tmp_path / "data/regions/site1.json").exists()

    def test_missing_required_page_raises(self, tmp_path):
        cfg_path = write_config(tmp_path)
        with patch.object(urn, "fetch_feed_items", return_value=feed_items(3)):
            with pytest.raises(FileNotFoundError):
                urn.run(cfg_path, str(tmp_path), NOW)
