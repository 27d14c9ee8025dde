from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

from .config import SiteConfig
from .documents import Document, DocState, Entry, discover, load_document
from .errors import ClassificationError, ConfigError
from .feed import render_feed
from .layouts import build_layouts
from .markup import render_body
from .output import copy_static, prepare_output_dir, write_pages
from .pages import assemble_site
from .render import read_template
from .utils import clean_output_dir

logger = logging.getLogger(__name__)


@dataclass
class BuildSummary:
    rendered: int = 0
    drafts_skipped: int = 0
    skipped: list[str] = field(default_factory=list)
    written: int = 0
    failed: list[str] = field(default_factory=list)

    def describe(self) -> str:
        text = f"Rendered {self.rendered} documents, skipped {len(self.skipped)}, wrote {self.written} files"
        if self.failed:
            text += f", {len(self.failed)} failed to write"
        if self.drafts_skipped:
            text += f" ({self.drafts_skipped} drafts not included)"
        return text + "."


def worker_count(config: SiteConfig, jobs: int) -> int:
    workers = config.build_workers or os.cpu_count() or 1
    return max(1, min(workers, 32, jobs))


def load_documents(config: SiteConfig, summary: BuildSummary) -> list[Document]:
    documents = []
    claimed: dict[str, str] = {}
    for rel_path in discover(config):
        try:
            document = load_document(rel_path, config)
            if document.url in claimed:
                raise ClassificationError(
                    str(rel_path), f"{document.url} is already generated from {claimed[document.url]}"
                )
        except ClassificationError as exc:
            logger.warning("Skipping %s: %s", config.content_dir / exc.path, exc.reason)
            summary.skipped.append(exc.path)
            continue
        if document.state is DocState.DRAFT and not config.include_drafts:
            logger.debug("Draft %s not included", rel_path)
            summary.drafts_skipped += 1
            continue
        claimed[document.url] = str(rel_path)
        documents.append(document)
    return documents


def render_documents(documents: list[Document], config: SiteConfig) -> list[Entry]:
    def render(document: Document) -> Entry:
        return Entry(document=document, rendered=render_body(document.body, config.toc_depth))

    workers = worker_count(config, len(documents))
    if workers <= 1:
        return [render(document) for document in documents]
    with ThreadPoolExecutor(max_workers=workers) as executor:
        return list(executor.map(render, documents))


def build_site(config: SiteConfig) -> BuildSummary:
    if not config.content_dir.is_dir():
        raise ConfigError(f"Content directory not found: {config.content_dir}")
    summary = BuildSummary()
    if config.clean:
        clean_output_dir(config.output_dir, config.project_root, config.content_dir)

    layouts = build_layouts(read_template("base.html", config.templates_dir))
    documents = load_documents(config, summary)
    entries = render_documents(documents, config)
    summary.rendered = len(entries)

    pages = assemble_site(entries, layouts, config)
    pages.append(render_feed(entries, config))
    prepare_output_dir(config.output_dir)
    copy_static(config.static_dir, config.output_dir, [page.output_path for page in pages])
    report = write_pages(pages, config.output_dir)
    summary.written = len(report.written)
    summary.failed = report.failed
    return summary
