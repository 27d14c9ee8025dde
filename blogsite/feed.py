from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from .config import FEED_LIMIT, SiteConfig
from .documents import Entry
from .output import RenderedPage
from .render import html_to_text, summarize
from .utils import hash_text, join_url, rfc3339_date

logger = logging.getLogger(__name__)

JSON_FEED_VERSION = "https://jsonfeed.org/version/1.1"


@dataclass(frozen=True)
class FeedItem:
    id: str
    url: str
    title: str
    content_text: str
    content_html: str
    summary: str
    date_published: str
    date_modified: Optional[str] = None
    author: str = ""
    tags: tuple[str, ...] = ()

    def as_json(self) -> dict:
        item = {
            "id": self.id,
            "url": self.url,
            "title": self.title,
            "content_text": self.content_text,
            "content_html": self.content_html,
            "summary": self.summary,
            "date_published": self.date_published,
        }
        if self.date_modified:
            item["date_modified"] = self.date_modified
        if self.author:
            item["authors"] = [{"name": self.author}]
        if self.tags:
            item["tags"] = list(self.tags)
        return item


def absolute_url(config: SiteConfig, path: str) -> str:
    if path.startswith(("http://", "https://")):
        return path
    if not config.base_url:
        return f"/{path.lstrip('/')}"
    return join_url(config.base_url, path)


def select_entries(entries: Iterable[Entry], limit: int = FEED_LIMIT) -> list[Entry]:
    limit = max(0, min(limit, FEED_LIMIT))
    listed = [entry for entry in entries if entry.document.listed]
    listed.sort(key=lambda entry: entry.document.sort_key, reverse=True)
    return listed[:limit]


def feed_item(entry: Entry, config: SiteConfig) -> FeedItem:
    document = entry.document
    meta = document.metadata
    url = absolute_url(config, document.url)
    rendered = entry.rendered
    summary = meta.description or summarize(rendered.excerpt_html)
    return FeedItem(
        id=hash_text(url),
        url=url,
        title=document.title,
        content_text=html_to_text(rendered.html),
        content_html=rendered.html,
        summary=summary,
        date_published=rfc3339_date(document.date),
        date_modified=rfc3339_date(meta.updated) if meta.updated else None,
        author=meta.author or config.author,
        tags=tuple(document.categories),
    )


def build_feed(entries: Iterable[Entry], config: SiteConfig) -> dict:
    items = [feed_item(entry, config) for entry in select_entries(entries, config.feed_limit)]
    feed = {
        "version": JSON_FEED_VERSION,
        "title": config.title,
        "home_page_url": absolute_url(config, ""),
        "feed_url": absolute_url(config, config.feed_path),
        "description": config.description,
        "language": config.language,
        "items": [item.as_json() for item in items],
    }
    if config.icon:
        feed["icon"] = absolute_url(config, config.icon)
    if config.favicon:
        feed["favicon"] = absolute_url(config, config.favicon)
    if config.author:
        feed["authors"] = [{"name": config.author}]
    return feed


def render_feed(entries: Iterable[Entry], config: SiteConfig) -> RenderedPage:
    if not config.base_url:
        logger.warning("base_url is not set; feed URLs will be site-relative")
    feed = build_feed(entries, config)
    text = json.dumps(feed, indent=2, ensure_ascii=False, sort_keys=True) + "\n"
    return RenderedPage(output_path=config.feed_path, html=text)
