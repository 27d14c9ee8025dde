from __future__ import annotations

import html
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from .config import SiteConfig
from .content import count_words, slugify
from .documents import Document, DocState
from .render import render_template, strip_tags

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LayoutContext:
    config: SiteConfig
    title: str
    root: str = "."
    sidebar: str = ""
    extra_head: str = ""
    document: Optional[Document] = None
    category_slugs: Optional[dict] = None


Layout = Callable[[str, LayoutContext], str]


def base_layout(template: str) -> Layout:
    def layout(content: str, ctx: LayoutContext) -> str:
        config = ctx.config
        feed_link = (
            f'<link rel="alternate" type="application/feed+json" '
            f'title="{html.escape(config.title)}" href="{ctx.root}/{config.feed_path}">'
        )
        favicon = (
            f'<link rel="icon" href="{ctx.root}/{html.escape(config.favicon.lstrip("/"))}">'
            if config.favicon
            else ""
        )
        description = config.description
        if ctx.document is not None and ctx.document.metadata.description:
            description = ctx.document.metadata.description
        return render_template(
            template,
            title=html.escape(ctx.title),
            root=ctx.root,
            lang=html.escape(config.language),
            site_name=html.escape(config.title),
            site_description=html.escape(config.description),
            description=html.escape(description),
            head_links=feed_link + favicon,
            extra_head=ctx.extra_head,
            copyright=html.escape(config.copyright),
            content=content,
            sidebar=ctx.sidebar,
        )

    return layout


def wrap(inner: Callable[[str, LayoutContext], str], outer: Layout) -> Layout:
    def layout(content: str, ctx: LayoutContext) -> str:
        return outer(inner(content, ctx), ctx)

    return layout


def category_links(document: Document, ctx: LayoutContext) -> str:
    slugs = ctx.category_slugs or {}
    return " ".join(
        f'<a class="chip" href="{ctx.root}/categories/{slugs.get(cat, slugify(cat))}.html">{html.escape(cat)}</a>'
        for cat in document.categories
    )


def post_article(body: str, ctx: LayoutContext) -> str:
    document = ctx.document
    if document is None:
        return body
    meta = document.metadata
    date_html = f'<time class="post-date">{document.date.isoformat()}</time>' if document.date else ""
    updated_html = (
        f'<span class="post-updated">Updated {meta.updated.isoformat()}</span>' if meta.updated else ""
    )
    author = meta.author or ctx.config.author
    author_html = f'<span class="post-author">{html.escape(author)}</span>' if author else ""
    draft_html = (
        '<div class="draft-notice">Draft preview. Not published.</div>'
        if document.state is DocState.DRAFT or meta.draft
        else ""
    )
    word_count = count_words(strip_tags(body))
    return (
        '<article class="post">'
        '<div class="post-meta"><div class="post-meta-left">'
        f"{date_html}{updated_html}{author_html}"
        f'<span class="post-words">{word_count} words</span>'
        "</div>"
        f'<div class="post-tags">{category_links(document, ctx)}</div></div>'
        f'<h1 class="post-title">{html.escape(document.title)}</h1>'
        f"{draft_html}"
        f'<div class="post-body">{body}</div>'
        f'<div class="post-footer"><a href="{ctx.root}/index.html">Back to home</a></div>'
        "</article>"
    )


def page_article(body: str, ctx: LayoutContext) -> str:
    title = ctx.document.title if ctx.document is not None else ctx.title
    return (
        '<article class="post page">'
        f'<h1 class="post-title">{html.escape(title)}</h1>'
        f'<div class="post-body">{body}</div>'
        "</article>"
    )


def build_layouts(template: str) -> dict[str, Layout]:
    base = base_layout(template)
    return {
        "base": base,
        "default": base,
        "post": wrap(post_article, base),
        "page": wrap(page_article, base),
    }


def resolve_layout(layouts: dict[str, Layout], document: Document) -> Layout:
    fallback = "page" if document.state is DocState.PAGE else "post"
    name = document.metadata.layout or fallback
    layout = layouts.get(name)
    if layout is None:
        logger.warning("%s: unknown layout %r, using %r", document.path, name, fallback)
        layout = layouts[fallback]
    return layout
