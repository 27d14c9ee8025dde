from __future__ import annotations

import html
import math
from pathlib import PurePosixPath
from typing import Optional

from .config import SiteConfig
from .content import slugify
from .documents import DocState, Entry
from .layouts import Layout, LayoutContext, resolve_layout
from .output import RenderedPage
from .render import fix_relative_img_src, summarize
from .utils import join_url


def root_for(output_path: str) -> str:
    depth = len(PurePosixPath(output_path).parts) - 1
    if depth <= 0:
        return "."
    return "/".join([".."] * depth)


def build_category_map(entries: list[Entry]) -> dict[str, list[Entry]]:
    category_map: dict[str, list[Entry]] = {}
    for entry in entries:
        for category in entry.document.categories:
            category_map.setdefault(category, []).append(entry)
    return category_map


def build_category_slugs(category_map: dict[str, list[Entry]]) -> dict[str, str]:
    slugs: dict[str, str] = {}
    used: set[str] = set()
    for name in sorted(category_map, key=lambda x: (x.lower(), x)):
        base = slugify(name)
        slug = base
        counter = 2
        while slug in used:
            slug = f"{base}-{counter}"
            counter += 1
        used.add(slug)
        slugs[name] = slug
    return slugs


def build_category_list(category_map: dict, slugs: dict[str, str], root: str) -> str:
    items = []
    for name, entries in sorted(category_map.items(), key=lambda x: (-len(x[1]), x[0].lower(), x[0])):
        items.append(
            f'<li><a href="{root}/categories/{slugs[name]}.html">{html.escape(name)}</a>'
            f'<span class="count">{len(entries)}</span></li>'
        )
    return "\n".join(items) if items else "<li>No categories yet.</li>"


def build_sidebar(
    config: SiteConfig, category_map: dict, slugs: dict[str, str], root: str, toc_html: str = ""
) -> str:
    panels = []
    if config.description:
        panels.append(
            '<div class="panel">'
            "<h3>About</h3>"
            f"<p>{html.escape(config.description)}</p>"
            "</div>"
        )
    if toc_html and "<li" in toc_html:
        panels.append(
            '<div class="panel">'
            "<h3>Contents</h3>"
            f"{toc_html}"
            "</div>"
        )
    panels.append(
        '<div class="panel">'
        "<h3>Categories</h3>"
        f'<ul class="category-list">{build_category_list(category_map, slugs, root)}</ul>'
        "</div>"
    )
    return "".join(panels)


def build_post_cards(entries: list[Entry], slugs: dict[str, str], root: str) -> str:
    cards = []
    for entry in entries:
        document = entry.document
        url = f"{root}/{document.url}"
        if entry.rendered.has_more:
            summary_html = fix_relative_img_src(entry.rendered.excerpt_html, root)
        else:
            summary_html = f"<p>{html.escape(document.metadata.description or summarize(entry.rendered.html))}</p>"
        category_links = " ".join(
            f'<a class="chip" href="{root}/categories/{slugs.get(cat, slugify(cat))}.html">{html.escape(cat)}</a>'
            for cat in document.categories
        )
        date_html = f'<time class="post-date">{document.date.isoformat()}</time>' if document.date else ""
        cards.append(
            '<article class="post-card">'
            f'<div class="post-meta"><div class="post-meta-left">{date_html}</div>'
            f'<div class="post-tags">{category_links}</div></div>'
            f'<h2 class="post-title"><a href="{url}">{html.escape(document.title)}</a></h2>'
            f'<div class="post-summary">{summary_html}</div>'
            f'<a class="post-more" href="{url}">Read more</a>'
            "</article>"
        )
    return "\n".join(cards)


def render_entry(
    entry: Entry,
    layouts: dict[str, Layout],
    config: SiteConfig,
    category_map: dict,
    slugs: dict[str, str],
) -> RenderedPage:
    document = entry.document
    output_path = document.url
    root = root_for(output_path)
    layout = resolve_layout(layouts, document)
    ctx = LayoutContext(
        config=config,
        title=f"{document.title} | {config.title}",
        root=root,
        sidebar=build_sidebar(config, category_map, slugs, root, entry.rendered.toc),
        document=document,
        category_slugs=slugs,
    )
    body = fix_relative_img_src(entry.rendered.html, root)
    return RenderedPage(output_path=output_path, html=layout(body, ctx))


def page_url(page: int) -> str:
    if page == 1:
        return "index.html"
    return f"page-{page}.html"


def build_pagination(page: int, total_pages: int) -> str:
    if total_pages <= 1:
        return ""
    items = []
    if page > 1:
        items.append(f'<a class="page-link" href="./{page_url(page - 1)}">Previous</a>')
    else:
        items.append('<span class="page-link is-disabled">Previous</span>')
    numbers = []
    for num in range(1, total_pages + 1):
        if num == page:
            numbers.append(f'<span class="page-number is-active">{num}</span>')
        else:
            numbers.append(f'<a class="page-number" href="./{page_url(num)}">{num}</a>')
    items.append(f'<div class="page-numbers">{"".join(numbers)}</div>')
    if page < total_pages:
        items.append(f'<a class="page-link" href="./{page_url(page + 1)}">Next</a>')
    else:
        items.append('<span class="page-link is-disabled">Next</span>')
    return f'<nav class="pagination">{"".join(items)}</nav>'


def build_index(
    posts: list[Entry], layouts: dict[str, Layout], config: SiteConfig, category_map: dict, slugs: dict[str, str]
) -> list[RenderedPage]:
    root = "."
    sidebar = build_sidebar(config, category_map, slugs, root)
    per_page = config.posts_per_page
    total_pages = max(1, math.ceil(len(posts) / per_page))
    pages = []
    for page in range(1, total_pages + 1):
        start = (page - 1) * per_page
        page_posts = posts[start : start + per_page]
        cards = build_post_cards(page_posts, slugs, root) or '<p class="empty">No posts yet.</p>'
        content = (
            '<div class="section-head">'
            "<h2>Latest posts</h2>"
            "</div>"
            f'<div class="post-grid">{cards}</div>'
            f"{build_pagination(page, total_pages)}"
        )
        title = config.title if page == 1 else f"{config.title} | Page {page}"
        ctx = LayoutContext(config=config, title=title, root=root, sidebar=sidebar)
        pages.append(RenderedPage(output_path=page_url(page), html=layouts["base"](content, ctx)))
    return pages


def build_categories(
    layouts: dict[str, Layout], config: SiteConfig, category_map: dict, slugs: dict[str, str]
) -> list[RenderedPage]:
    root = ".."
    sidebar = build_sidebar(config, category_map, slugs, root)
    pages = []
    for category, entries in sorted(category_map.items(), key=lambda x: (x[0].lower(), x[0])):
        content = (
            '<div class="section-head">'
            f"<h2>{html.escape(category)}</h2>"
            "<p>Posts grouped in this category.</p>"
            "</div>"
            f'<div class="post-grid">{build_post_cards(entries, slugs, root)}</div>'
        )
        ctx = LayoutContext(config=config, title=f"{category} | {config.title}", root=root, sidebar=sidebar)
        pages.append(
            RenderedPage(output_path=f"categories/{slugs[category]}.html", html=layouts["base"](content, ctx))
        )
    return pages


def render_group(title: str, entries: list[Entry], root: str) -> str:
    rows = []
    for entry in entries:
        document = entry.document
        date = document.date.isoformat() if document.date else ""
        rows.append(
            f'<li><span class="archive-date">{date}</span>'
            f'<a href="{root}/{document.url}">{html.escape(document.title)}</a></li>'
        )
    return (
        f'<section class="archive-group"><h3>{html.escape(title)}</h3>'
        f'<ul class="archive-list">{"".join(rows)}</ul></section>'
    )


def build_archive(
    posts: list[Entry], layouts: dict[str, Layout], config: SiteConfig, category_map: dict, slugs: dict[str, str]
) -> RenderedPage:
    root = "."
    date_groups: dict[str, list[Entry]] = {}
    for entry in posts:
        date_groups.setdefault(entry.document.date.strftime("%Y-%m"), []).append(entry)
    sections = [render_group(key, items, root) for key, items in sorted(date_groups.items(), reverse=True)]
    if not sections:
        sections.append('<p class="archive-empty">No posts yet.</p>')
    content = (
        '<div class="section-head">'
        "<h2>Archive</h2>"
        f"<p>Total {len(posts)} posts.</p>"
        "</div>"
        f'{"".join(sections)}'
    )
    ctx = LayoutContext(
        config=config,
        title=f"Archive | {config.title}",
        root=root,
        sidebar=build_sidebar(config, category_map, slugs, root),
    )
    return RenderedPage(output_path="archive.html", html=layouts["base"](content, ctx))


def build_drafts_index(drafts: list[Entry], layouts: dict[str, Layout], config: SiteConfig) -> RenderedPage:
    root = ".."
    content = (
        '<div class="section-head">'
        "<h2>Drafts</h2>"
        "<p>Unpublished drafts, included for local preview.</p>"
        "</div>"
        f"{render_group('Drafts', drafts, root)}"
    )
    ctx = LayoutContext(config=config, title=f"Drafts | {config.title}", root=root)
    return RenderedPage(output_path="drafts/index.html", html=layouts["base"](content, ctx))


def build_sitemap(
    posts: list[Entry], pages: list[Entry], config: SiteConfig, slugs: dict[str, str], total_pages: int
) -> Optional[RenderedPage]:
    if not config.base_url:
        return None
    site_url = config.base_url
    urls = [(site_url + "/", None), (join_url(site_url, "archive.html"), None)]
    for page in range(2, total_pages + 1):
        urls.append((join_url(site_url, page_url(page)), None))
    for entry in posts:
        document = entry.document
        urls.append((join_url(site_url, document.url), document.metadata.updated or document.date))
    for entry in pages:
        urls.append((join_url(site_url, entry.document.url), entry.document.metadata.updated))
    for slug in sorted(slugs.values()):
        urls.append((join_url(site_url, f"categories/{slug}.html"), None))
    items = []
    for url, lastmod in urls:
        lastmod_xml = f"<lastmod>{lastmod.isoformat()}</lastmod>" if lastmod else ""
        items.append(f"<url><loc>{html.escape(url)}</loc>{lastmod_xml}</url>")
    sitemap = "\n".join(
        [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">',
            "\n".join(items),
            "</urlset>",
        ]
    )
    return RenderedPage(output_path="sitemap.xml", html=sitemap + "\n")


def assemble_site(entries: list[Entry], layouts: dict[str, Layout], config: SiteConfig) -> list[RenderedPage]:
    """Turn rendered entries into every page of the site except the feed.

    ``entries`` must already be filtered: drafts are present only in draft
    preview builds.
    """
    posts = [entry for entry in entries if entry.document.listed]
    posts.sort(key=lambda entry: entry.document.sort_key, reverse=True)
    drafts = [entry for entry in entries if entry.document.state is DocState.DRAFT]
    standalone = [entry for entry in entries if entry.document.state is DocState.PAGE]
    category_map = build_category_map(posts)
    slugs = build_category_slugs(category_map)

    pages = [render_entry(entry, layouts, config, category_map, slugs) for entry in entries]
    index_pages = build_index(posts, layouts, config, category_map, slugs)
    pages.extend(index_pages)
    pages.extend(build_categories(layouts, config, category_map, slugs))
    pages.append(build_archive(posts, layouts, config, category_map, slugs))
    if drafts:
        pages.append(build_drafts_index(drafts, layouts, config))
    sitemap = build_sitemap(posts, standalone, config, slugs, len(index_pages))
    if sitemap is not None:
        pages.append(sitemap)
    return pages
