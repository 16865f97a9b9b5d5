"""
Tests for scripts/markers.py
"""

import json
import os
import re
import sys
from datetime import datetime, timezone

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "scripts"))
import markers

START = "<!-- LIST_START -->"
END = "<!-- LIST_END -->"
ITEM_RE = re.compile(r'<li data-key="[^"]+">[\s\S]*?</li>')


def page(inner: str = "\n                    ") -> str:
    return f"<html>\n  <ul>\n                    {START}{inner}{END}\n  </ul>\n</html>\n"


def item(key: str, label: str = "") -> str:
    return f'<li data-key="{key}">\n  {label or key}\n</li>'


def upsert(html, key, label="", replace=False, max_items=10):
    return markers.upsert_keyed_item(
        html,
        START,
        END,
        item_html=item(key, label),
        item_pattern=ITEM_RE,
        key_attr="data-key",
        key=key,
        max_items=max_items,
        replace_existing=replace,
    )


class TestLocateRegion:
    def test_missing_end_raises(self):
        with pytest.raises(markers.MarkerError):
            markers.locate_region(f"<p>{START}</p>", START, END)

    def test_reversed_markers_raise(self):
        with pytest.raises(markers.MarkerError):
            markers.locate_region(f"{END} {START}", START, END)

    def test_extract_is_lenient(self):
        assert markers.extract_between_markers("<p>none</p>", START, END) == ""
        assert markers.extract_between_markers(f"{START}abc{END}", START, END) == "abc"


class TestReplaceBetweenMarkers:
    def test_only_region_changes(self):
        html = page("\n old stuff \n")
        out = markers.replace_between_markers(html, START, END, ["<li>new</li>"])
        assert out.startswith("<html>\n  <ul>\n")
        assert out.endswith(f"{END}\n  </ul>\n</html>\n")
        assert "old stuff" not in out
        assert f"{START}\n" + " " * 20 + "<li>new</li>\n" + " " * 20 + END in out

    def test_empty_fragments(self):
        out = markers.replace_between_markers(page("junk"), START, END, [])
        assert f"{START}\n{' ' * 20}{END}" in out

    def test_stable_on_rerun(self):
        once = markers.replace_between_markers(page(), START, END, [item("a")])
        twice = markers.replace_between_markers(once, START, END, [item("a")])
        assert once == twice


class TestUpsertKeyedItem:
    def test_insert_new_key_at_top(self):
        html = upsert(upsert(page(), "2026-02-09"), "2026-02-10")
        assert markers.keys_in_region(html, START, END, "data-key") == ["2026-02-10", "2026-02-09"]

    def test_insert_if_absent_is_idempotent(self):
        once = upsert(page(), "2026-02-10")
        assert upsert(once, "2026-02-10", label="different") == once

    def test_replace_keeps_position_and_length(self):
        html = page()
        for key in ("2026-W05", "2026-W06", "2026-W07"):
            html = upsert(html, key)
        out = upsert(html, "2026-W06", label="refreshed", replace=True)
        keys = markers.keys_in_region(out, START, END, "data-key")
        assert keys == ["2026-W07", "2026-W06", "2026-W05"]
        assert "refreshed" in out
        assert out.count("<li ") == 3

    def test_replace_is_stable_on_rerun(self):
        html = upsert(upsert(page(), "k1"), "k2")
        once = upsert(html, "k1", label="x", replace=True)
        assert upsert(once, "k1", label="x", replace=True) == once

    def test_cap_drops_oldest(self):
        html = page()
        for key in ("k1", "k2", "k3"):
            html = upsert(html, key, max_items=2)
        assert markers.keys_in_region(html, START, END, "data-key") == ["k3", "k2"]

    def test_missing_markers_raise(self):
        with pytest.raises(markers.MarkerError):
            upsert("<html></html>", "k1")


class TestRebuildKeyedRegion:
    def test_rebuild_from_keys(self):
        out = markers.rebuild_keyed_region(page("junk"), START, END, ["b", "a", "c"], item, max_items=2)
        assert markers.keys_in_region(out, START, END, "data-key") == ["b", "a"]
        assert "junk" not in out


class TestRegionSidecar:
    def test_missing_sidecar_is_none(self, tmp_path):
        assert markers.load_region_items(str(tmp_path / "nope.json")) is None

    def test_save_then_load(self, tmp_path):
        path = tmp_path / "regions" / "site1.json"
        items = [{"title": "T", "link": "https://a.example.com/", "published_at": "2026-02-10T09:00:00Z", "extra": 1}]
        markers.save_region_items(str(path), items, datetime(2026, 2, 10, 10, tzinfo=timezone.utc))
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["updatedAt"] == "2026-02-10T10:00:00Z"
        assert markers.load_region_items(str(path)) == [
            {"title": "T", "link": "https://a.example.com/", "published_at": "2026-02-10T09:00:00Z"}
        ]

    def test_incomplete_items_ignored(self, tmp_path):
        path = tmp_path / "r.json"
        path.write_text(json.dumps({"items": [{"title": "T"}, "junk"]}), encoding="utf-8")
        assert markers.load_region_items(str(path)) == []
