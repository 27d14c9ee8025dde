"""Tests for the JSON feed."""

import datetime as dt
import json

from blogsite.documents import DocState
from blogsite.feed import FEED_LIMIT, build_feed, render_feed, select_entries
from blogsite.utils import hash_text

from tests.conftest import make_entry


def test_feed_is_capped_and_ordered(site_config):
    start = dt.date(2022, 1, 1)
    entries = [make_entry(start + dt.timedelta(days=i), f"post-{i}") for i in range(20)]

    feed = build_feed(entries, site_config)
    published = [item["date_published"] for item in feed["items"]]

    assert FEED_LIMIT == 15
    assert len(feed["items"]) == 15
    assert published == sorted(published, reverse=True)
    assert len(set(published)) == len(published)
    assert feed["items"][0]["title"] == "Post 19"


def test_limit_cannot_exceed_cap(site_config):
    start = dt.date(2022, 1, 1)
    entries = [make_entry(start + dt.timedelta(days=i), f"post-{i}") for i in range(20)]
    assert len(select_entries(entries, limit=50)) == 15


def test_ties_broken_by_slug():
    day = dt.date(2022, 5, 27)
    entries = [make_entry(day, "alpha"), make_entry(day, "beta")]
    selected = select_entries(entries)
    assert [e.document.slug for e in selected] == ["2022-05-27-beta", "2022-05-27-alpha"]


def test_drafts_and_flagged_posts_excluded(site_config):
    day = dt.date(2022, 5, 27)
    entries = [
        make_entry(day, "visible"),
        make_entry(day, "flagged", meta={"draft": "true"}),
        make_entry(day, "a-draft", state=DocState.DRAFT),
        make_entry(day, "a-page", state=DocState.PAGE),
    ]
    feed = build_feed(entries, site_config)
    assert [item["title"] for item in feed["items"]] == ["Visible"]


def test_item_fields(site_config):
    entry = make_entry(
        dt.date(2022, 5, 27),
        "what-is-a-test",
        meta={"categories": ["testing"], "updated": dt.date(2022, 6, 1), "author": "Ada"},
        html="<p>Tests &amp; <em>properties</em></p>",
    )
    item = build_feed([entry], site_config)["items"][0]
    url = "https://blog.example.com/posts/2022-05-27-what-is-a-test.html"

    assert item["id"] == hash_text(url)
    assert item["url"] == url
    assert item["content_html"] == "<p>Tests &amp; <em>properties</em></p>"
    assert item["content_text"] == "Tests & properties"
    assert item["date_published"] == "2022-05-27T00:00:00Z"
    assert item["date_modified"] == "2022-06-01T00:00:00Z"
    assert item["authors"] == [{"name": "Ada"}]
    assert item["tags"] == ["testing"]


def test_feed_document(site_config):
    page = render_feed([make_entry(dt.date(2022, 5, 27), "one")], site_config)
    feed = json.loads(page.html)

    assert page.output_path == "feed.json"
    assert feed["version"] == "https://jsonfeed.org/version/1.1"
    assert feed["title"] == "Test Blog"
    assert feed["home_page_url"] == "https://blog.example.com"
    assert feed["feed_url"] == "https://blog.example.com/feed.json"
    assert feed["description"] == "A blog for tests."
