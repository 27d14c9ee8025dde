"""Tests for document classification."""

import datetime as dt
import logging
from pathlib import PurePosixPath

import pytest

from blogsite.config import SiteConfig
from blogsite.content import Metadata, parse_front_matter
from blogsite.documents import DocState, classify, discover, is_content, load_document
from blogsite.errors import ClassificationError


@pytest.fixture
def config() -> SiteConfig:
    return SiteConfig()


def test_dated_post_is_published(config):
    doc = classify(
        PurePosixPath("_posts/2022-05-27-what-is-an-automated-test-again.md"), Metadata(), "Body", config
    )

    assert doc.state is DocState.PUBLISHED
    assert doc.slug == "2022-05-27-what-is-an-automated-test-again"
    assert doc.date == dt.date(2022, 5, 27)
    assert doc.url == "posts/2022-05-27-what-is-an-automated-test-again.html"
    assert doc.listed


def test_metadata_date_overrides_filename_date(config):
    meta, body = parse_front_matter("---\ndate: 2022-05-28\n---\nBody")
    doc = classify(PurePosixPath("_posts/2022-05-27-post.md"), meta, body, config)

    assert doc.date == dt.date(2022, 5, 28)
    assert doc.slug == "2022-05-27-post"


def test_invalid_metadata_date_falls_back_to_filename(config, caplog):
    meta, body = parse_front_matter("---\ndate: tomorrow\n---\nBody")
    with caplog.at_level(logging.WARNING, logger="blogsite"):
        doc = classify(PurePosixPath("_posts/2022-05-27-post.md"), meta, body, config)

    assert doc.date == dt.date(2022, 5, 27)
    assert "tomorrow" in caplog.text


@pytest.mark.parametrize("name", ["_posts/no-date-here.md", "_posts/2022-13-45-bad-date.md", "_posts/2022-05-27.md"])
def test_post_without_parseable_date_is_rejected(config, name):
    with pytest.raises(ClassificationError) as excinfo:
        classify(PurePosixPath(name), Metadata(), "Body", config)
    assert excinfo.value.path == name


def test_draft_needs_no_date(config):
    doc = classify(PurePosixPath("_drafts/Work In Progress.md"), Metadata(), "Body", config)

    assert doc.state is DocState.DRAFT
    assert doc.slug == "work-in-progress"
    assert doc.date is None
    assert doc.url == "drafts/work-in-progress.html"
    assert not doc.listed


def test_flagged_post_is_not_listed(config):
    doc = classify(PurePosixPath("_posts/2022-05-27-post.md"), Metadata({"draft": "true"}), "Body", config)

    assert doc.state is DocState.PUBLISHED
    assert not doc.listed


def test_pages(config):
    about = classify(PurePosixPath("about.md"), Metadata({"title": "About"}), "Body", config)
    wiki = classify(PurePosixPath("wiki/Hosting Notes.md"), Metadata(), "# Hosting\n\nText", config)

    assert about.state is DocState.PAGE
    assert about.url == "about.html"
    assert wiki.state is DocState.PAGE
    assert wiki.url == "wiki/hosting-notes.html"
    assert wiki.title == "Hosting"
    assert wiki.body == "Text"


def test_slug_override(config):
    doc = classify(PurePosixPath("_posts/2022-05-27-long-name.md"), Metadata({"slug": "Short"}), "", config)
    assert doc.slug == "2022-05-27-short"


def test_page_cannot_replace_generated_index(config):
    with pytest.raises(ClassificationError):
        classify(PurePosixPath("index.md"), Metadata(), "Body", config)


@pytest.mark.parametrize("rel_path", ["posts/2022-01-01-hello.md", "drafts/index.md", "categories/python.md", "page-2.md"])
def test_page_cannot_enter_generated_directories(config, rel_path):
    with pytest.raises(ClassificationError):
        classify(PurePosixPath(rel_path), Metadata(), "Body", config)


def test_draft_cannot_replace_drafts_index(config):
    with pytest.raises(ClassificationError):
        classify(PurePosixPath("_drafts/index.md"), Metadata(), "Body", config)


def test_custom_collection_names():
    config = SiteConfig(posts_dir="posts", drafts_dir="drafts")
    doc = classify(PurePosixPath("posts/2021-01-01-new-year.md"), Metadata(), "", config)
    assert doc.state is DocState.PUBLISHED


def test_is_content(config):
    assert is_content(PurePosixPath("_posts/2022-01-01-a.md"), config)
    assert is_content(PurePosixPath("about.markdown"), config)
    assert not is_content(PurePosixPath("_layouts/post.md"), config)
    assert not is_content(PurePosixPath(".hidden/page.md"), config)
    assert not is_content(PurePosixPath("notes.txt"), config)


def test_discover_and_load(site_config, write_content):
    write_content("_posts/2022-01-01-b.md", "---\ntitle: B\n---\nText")
    write_content("about.md", "About")
    write_content("static.txt", "not content")

    paths = discover(site_config)
    assert paths == [PurePosixPath("_posts/2022-01-01-b.md"), PurePosixPath("about.md")]

    doc = load_document(paths[0], site_config)
    assert doc.title == "B"
    assert doc.body == "Text"
