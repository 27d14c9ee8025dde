from __future__ import annotations

import datetime as dt
import logging
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import Optional

from .config import SiteConfig
from .content import Metadata, extract_title, parse_front_matter, slugify
from .errors import ClassificationError
from .markup import RenderedBody

logger = logging.getLogger(__name__)

POST_NAME_RE = re.compile(r"^(?P<date>\d{4}-\d{2}-\d{2})-(?P<name>.+)$")
PAGE_RE = re.compile(r"^page-\d+\.html$")
GENERATED_DIRS = ("categories/", "posts/", "drafts/")
MARKDOWN_SUFFIXES = {".md", ".markdown"}


class DocState(Enum):
    PUBLISHED = "published"
    DRAFT = "draft"
    PAGE = "page"


@dataclass(frozen=True)
class Document:
    path: PurePosixPath
    metadata: Metadata
    body: str
    title: str
    slug: str
    state: DocState
    date: Optional[dt.date] = None

    @property
    def categories(self) -> list[str]:
        return self.metadata.categories

    @property
    def url(self) -> str:
        if self.state is DocState.PUBLISHED:
            return f"posts/{self.slug}.html"
        if self.state is DocState.DRAFT:
            return f"drafts/{self.slug}.html"
        parent = self.path.parent
        if str(parent) == ".":
            return f"{self.slug}.html"
        return f"{parent.as_posix()}/{self.slug}.html"

    @property
    def listed(self) -> bool:
        """True for posts that belong in listings and the feed."""
        return self.state is DocState.PUBLISHED and not self.metadata.draft

    @property
    def sort_key(self) -> tuple[dt.date, str]:
        return self.date or dt.date.min, self.slug


@dataclass(frozen=True)
class Entry:
    document: Document
    rendered: RenderedBody


def reserved_urls(config: SiteConfig) -> set[str]:
    return {"index.html", "archive.html", "sitemap.xml", "drafts/index.html", config.feed_path}


def post_date(rel_path: PurePosixPath) -> tuple[dt.date, str]:
    match = POST_NAME_RE.match(rel_path.stem)
    if not match:
        raise ClassificationError(str(rel_path), "post filename has no YYYY-MM-DD- date prefix")
    try:
        date = dt.date.fromisoformat(match.group("date"))
    except ValueError as exc:
        raise ClassificationError(str(rel_path), f"invalid date in filename ({exc})") from exc
    return date, match.group("name")


def collection_of(rel_path: PurePosixPath, config: SiteConfig) -> DocState:
    top = rel_path.parts[0] if len(rel_path.parts) > 1 else ""
    if top == config.posts_dir:
        return DocState.PUBLISHED
    if top == config.drafts_dir:
        return DocState.DRAFT
    return DocState.PAGE


def classify(rel_path: PurePosixPath, metadata: Metadata, body: str, config: SiteConfig) -> Document:
    state = collection_of(rel_path, config)
    title, body = extract_title(metadata, body)
    date = metadata.date
    if state is DocState.PUBLISHED:
        file_date, name = post_date(rel_path)
        if date is None:
            if "date" in metadata:
                logger.warning("%s: unparseable date %r, using %s", rel_path, metadata["date"], file_date)
            date = file_date
        slug = f"{file_date.isoformat()}-{slugify(metadata.slug or name)}"
    else:
        slug = slugify(metadata.slug or rel_path.stem)
    document = Document(
        path=rel_path,
        metadata=metadata,
        body=body,
        title=title,
        slug=slug,
        state=state,
        date=date,
    )
    url = document.url
    if state is not DocState.PUBLISHED and url in reserved_urls(config):
        raise ClassificationError(str(rel_path), f"would overwrite generated {url}")
    if state is DocState.PAGE:
        if url.startswith(GENERATED_DIRS) or PAGE_RE.match(url):
            raise ClassificationError(str(rel_path), f"page would overwrite generated {url}")
    return document


def is_content(rel_path: PurePosixPath, config: SiteConfig) -> bool:
    if rel_path.suffix.lower() not in MARKDOWN_SUFFIXES:
        return False
    if any(part.startswith(".") for part in rel_path.parts):
        return False
    collections = {config.posts_dir, config.drafts_dir}
    for part in rel_path.parts:
        if part in collections:
            break
        if part.startswith("_"):
            return False
    return True


def discover(config: SiteConfig) -> list[PurePosixPath]:
    content_dir = config.content_dir
    output_dir = config.output_dir.resolve()
    found = []
    for path in content_dir.rglob("*"):
        if not path.is_file():
            continue
        if path.resolve().is_relative_to(output_dir):
            continue
        rel_path = PurePosixPath(path.relative_to(content_dir).as_posix())
        if is_content(rel_path, config):
            found.append(rel_path)
    return sorted(found, key=lambda p: p.as_posix())


def load_document(rel_path: PurePosixPath, config: SiteConfig) -> Document:
    path: Path = config.content_dir / rel_path
    try:
        raw_text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ClassificationError(str(rel_path), f"cannot read file ({exc})") from exc
    metadata, body = parse_front_matter(raw_text)
    return classify(rel_path, metadata, body, config)
