"""
Tests for scripts/feeds.py
"""

import os
import sys
from unittest.mock import MagicMock, patch

import requests

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "scripts"))
import feeds

# ---------------------------------------------------------------------------
# Fixtures & helpers
# ---------------------------------------------------------------------------

RSS = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0"><channel>
  <title>FX wire</title>
  <item>
    <title><![CDATA[Peso &amp; real rally as Banxico holds]]></title>
    <link>https://news.example.com/a</link>
    <pubDate>Tue, 10 Feb 2026 09:00:00 GMT</pubDate>
  </item>
  <item>
    <title>Guid only</title>
    <guid>https://news.example.com/b</guid>
    <pubDate>Tue, 10 Feb 2026 10:30:00 +0100</pubDate>
  </item>
  <item>
    <title>No date here</title>
    <link>https://news.example.com/c</link>
  </item>
  <item>
    <title>Relative link</title>
    <link>/markets/d</link>
    <pubDate>2026-02-09T08:00:00Z</pubDate>
  </item>
</channel></rss>
"""

RDF = """<rdf:RDF xmlns:rdf="http://www.w3.org/1999/02/22-rdf-syntax-ns#">
  <item rdf:about="https://www.banxico.org.mx/fix/2026-02-10">
    <title>Tipo de cambio FIX</title>
    <dc:date>2026-02-10T12:00:00-06:00</dc:date>
  </item>
</rdf:RDF>
"""

ATOM = """<feed xmlns="http://www.w3.org/2005/Atom">
  <entry>
    <title type="html">Atom headline</title>
    <link rel="alternate" href="https://atom.example.org/1"/>
    <updated>2026-02-08T07:15:00Z</updated>
  </entry>
  <entry>
    <title>Atom id fallback</title>
    <id>https://atom.example.org/2</id>
    <published>2026-02-07T07:15:00Z</published>
  </entry>
  <entry>
    <title>Not a web link</title>
    <id>urn:uuid:1234</id>
    <published>2026-02-07T07:15:00Z</published>
  </entry>
</feed>
"""


def fake_response(text="", status=200, encoding="utf-8"):
    resp = MagicMock()
    resp.text = text
    resp.encoding = encoding
    resp.apparent_encoding = "utf-8"
    if status >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status} error")
    else:
        resp.raise_for_status.return_value = None
    return resp


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

class TestParseFeedItems:
    def test_rss_items(self):
        items = feeds.parse_feed_items(RSS, base_url="https://news.example.com/rss")
        titles = [i["title"] for i in items]
        assert titles == ["Peso & real rally as Banxico holds", "Guid only", "Relative link"]

    def test_cdata_and_entities_decoded(self):
        items = feeds.parse_feed_items(RSS)
        assert items[0]["title"] == "Peso & real rally as Banxico holds"

    def test_guid_used_when_link_missing(self):
        items = feeds.parse_feed_items(RSS)
        assert items[1]["link"] == "https://news.example.com/b"

    def test_dates_normalized_to_utc(self):
        items = feeds.parse_feed_items(RSS)
        assert items[0]["published_at"] == "2026-02-10T09:00:00Z"
        assert items[1]["published_at"] == "2026-02-10T09:30:00Z"

    def test_item_without_date_skipped(self):
        items = feeds.parse_feed_items(RSS)
        assert all(i["title"] != "No date here" for i in items)

    def test_relative_link_resolved_against_feed(self):
        items = feeds.parse_feed_items(RSS, base_url="https://news.example.com/rss")
        assert items[-1]["link"] == "https://news.example.com/markets/d"

    def test_relative_link_without_base_skipped(self):
        items = feeds.parse_feed_items(RSS)
        assert all(i["title"] != "Relative link" for i in items)

    def test_rdf_about_fallback(self):
        items = feeds.parse_feed_items(RDF)
        assert items == [{
            "title": "Tipo de cambio FIX",
            "link": "https://www.banxico.org.mx/fix/2026-02-10",
            "published_at": "2026-02-10T18:00:00Z",
        }]

    def test_atom_entries(self):
        items = feeds.parse_feed_items(ATOM)
        assert [i["link"] for i in items] == ["https://atom.example.org/1", "https://atom.example.org/2"]
        assert items[0]["published_at"] == "2026-02-08T07:15:00Z"

    def test_outputs_are_absolute_http_links(self):
        for xml in (RSS, RDF, ATOM):
            for item in feeds.parse_feed_items(xml, base_url="https://news.example.com/rss"):
                assert item["link"].startswith(("http://", "https://"))
                assert item["published_at"].endswith("Z")

    def test_garbage_yields_nothing(self):
        assert feeds.parse_feed_items("<html><body>not a feed</body></html>") == []
        assert feeds.parse_feed_items("") == []

    def test_unclosed_item_tolerated(self):
        xml = RSS.replace("</channel></rss>", "<item><title>broken")
        assert len(feeds.parse_feed_items(xml, base_url="https://news.example.com/")) == 3


class TestHelpers:
    def test_safe_url_rejects_other_schemes(self):
        assert feeds.safe_url("javascript:alert(1)") == ""
        assert feeds.safe_url("ftp://example.com/x") == ""

    def test_safe_url_rejects_whitespace(self):
        assert feeds.safe_url("https://example.com/a b") == ""

    def test_to_iso_utc_bad_input(self):
        assert feeds.to_iso_utc("not a date") == ""
        assert feeds.to_iso_utc("") == ""

    def test_to_iso_utc_naive_treated_as_utc(self):
        assert feeds.to_iso_utc("2026-02-10 09:00") == "2026-02-10T09:00:00Z"

    def test_to_iso_utc_rfc822_zone_names(self):
        assert feeds.to_iso_utc("Tue, 10 Feb 2026 09:00:00 EST") == "2026-02-10T14:00:00Z"
        assert feeds.to_iso_utc("Tue, 10 Feb 2026 09:00:00 PDT") == "2026-02-10T16:00:00Z"
        assert feeds.to_iso_utc("Tue, 10 Feb 2026 09:00:00 GMT") == "2026-02-10T09:00:00Z"

    def test_to_iso_utc_iso_offsets(self):
        assert feeds.to_iso_utc("2026-02-10T12:00:00-06:00") == "2026-02-10T18:00:00Z"

    def test_domain_label(self):
        assert feeds.domain_label("https://www.fxstreet.es/news/1") == "fxstreet.es"
        assert feeds.domain_label("") == "source"

    def test_truncate(self):
        assert feeds.truncate("short", 10) == "short"
        out = feeds.truncate("a" * 20, 10)
        assert len(out) == 10
        assert out.endswith("…")


# ---------------------------------------------------------------------------
# Fetching
# ---------------------------------------------------------------------------

class TestFetch:
    def test_fetch_text_sends_headers(self):
        with patch.object(feeds.requests, "get", return_value=fake_response("<rss/>")) as get:
            body = feeds.fetch_text("https://feed.example.com/rss", timeout=5, user_agent="UA/1")
        assert body == "<rss/>"
        _, kwargs = get.call_args
        assert kwargs["timeout"] == 5
        assert kwargs["headers"]["User-Agent"] == "UA/1"
        assert "xml" in kwargs["headers"]["Accept"]

    def test_fetch_text_raises_on_http_error(self):
        with patch.object(feeds.requests, "get", return_value=fake_response(status=503)):
            try:
                feeds.fetch_text("https://feed.example.com/rss")
            except requests.HTTPError:
                pass
            else:
                raise AssertionError("expected HTTPError")

    def test_failing_source_skipped(self):
        def fake_fetch(url, timeout, user_agent):
            if "bad" in url:
                raise requests.ConnectionError("boom")
            return RSS

        with patch.object(feeds, "fetch_text", side_effect=fake_fetch):
            items = feeds.fetch_feed_items(
                ["https://bad.example.com/rss", "https://news.example.com/rss"], {}
            )
        assert len(items) == 3

    def test_timeout_skipped(self):
        with patch.object(feeds, "fetch_text", side_effect=requests.Timeout("slow")):
            assert feeds.fetch_feed_items(["https://slow.example.com/rss"], {}) == []


# ---------------------------------------------------------------------------
# Snapshots
# ---------------------------------------------------------------------------

class TestSnapshots:
    def test_meta_description_prefers_og(self):
        html = (
            '<meta name="description" content="Plain description">'
            '<meta property="og:description" content="Open Graph &amp; more">'
        )
        assert feeds.meta_description(html) == "Open Graph & more"

    def test_meta_description_fallback(self):
        assert feeds.meta_description('<meta name="description" content="Plain">') == "Plain"
        assert feeds.meta_description("<p>nothing</p>") == ""

    def test_snapshot_truncated(self):
        html = f'<meta property="og:description" content="{"x" * 300}">'
        with patch.object(feeds, "fetch_text", return_value=html):
            snap = feeds.fetch_source_snapshot("https://a.example.com/", {"snapshot_chars": 50})
        assert len(snap) == 50

    def test_snapshot_failure_is_empty(self):
        with patch.object(feeds, "fetch_text", side_effect=requests.ConnectionError("down")):
            assert feeds.fetch_source_snapshot("https://a.example.com/", {}) == ""

    def test_enrich_limits_and_copies(self):
        items = [{"title": f"t{i}", "link": f"https://a.example.com/{i}", "published_at": "x"} for i in range(6)]
        with patch.object(feeds, "fetch_source_snapshot", return_value="snap"):
            out = feeds.enrich(items, {}, limit=4)
        assert len(out) == 4
        assert all(i["snapshot"] == "snap" for i in out)
        assert "snapshot" not in items[0]
