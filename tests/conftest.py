from __future__ import annotations

import datetime as dt
import logging
from pathlib import Path, PurePosixPath

import pytest

from blogsite.config import SiteConfig
from blogsite.content import Metadata
from blogsite.documents import Document, DocState, Entry
from blogsite.markup import RenderedBody


@pytest.fixture(autouse=True)
def _reset_blogsite_logger():
    yield
    logger = logging.getLogger("blogsite")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def site_config(tmp_path: Path) -> SiteConfig:
    return SiteConfig(
        title="Test Blog",
        description="A blog for tests.",
        base_url="https://blog.example.com",
        author="Tester",
        content_dir=tmp_path / "content",
        output_dir=tmp_path / "out",
        static_dir=tmp_path / "static",
        build_workers=1,
        project_root=tmp_path,
    )


@pytest.fixture
def write_content(site_config: SiteConfig):
    def write(rel_path: str, text: str) -> Path:
        path = site_config.content_dir / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    return write


def make_entry(
    day: dt.date,
    name: str,
    *,
    state: DocState = DocState.PUBLISHED,
    meta: dict | None = None,
    html: str = "<p>Body</p>",
) -> Entry:
    slug = f"{day.isoformat()}-{name}" if state is DocState.PUBLISHED else name
    document = Document(
        path=PurePosixPath(f"_posts/{slug}.md"),
        metadata=Metadata(meta or {}),
        body="Body",
        title=name.replace("-", " ").title(),
        slug=slug,
        state=state,
        date=day,
    )
    return Entry(document=document, rendered=RenderedBody(html=html, excerpt_html=html, has_more=False))
