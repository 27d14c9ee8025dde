from __future__ import annotations

import html
import re
from dataclasses import dataclass
from typing import Optional

import markdown
from markdown.extensions import Extension
from markdown.preprocessors import Preprocessor

from .content import normalize_list_spacing

OPEN_FENCE_RE = re.compile(r"^(?P<fence>`{3,}|~{3,})[ \t]*(?P<info>[^\n]*?)[ \t]*$")
LANG_RE = re.compile(r"[^\w#.+-]")
MORE_RE = re.compile(r"^[ \t]*<!--\s*more\s*-->[ \t]*$", re.IGNORECASE)
RUNNABLE = "runnable"


@dataclass(frozen=True)
class RenderedBody:
    html: str
    excerpt_html: str
    has_more: bool
    toc: str = ""


def open_fence(line: str) -> Optional[tuple[str, str]]:
    match = OPEN_FENCE_RE.match(line)
    if not match:
        return None
    fence, info = match.group("fence"), match.group("info")
    # a backtick fence cannot carry backticks in its info string
    if fence[0] == "`" and "`" in info:
        return None
    return fence, info


def closes_fence(line: str, fence: str) -> bool:
    return line.rstrip() == fence


class FencePreprocessor(Preprocessor):
    """Prepares fenced blocks for the ``fenced_code`` extension.

    Blocks tagged ``runnable`` are stashed as raw HTML so their content
    reaches the page untouched. An unterminated fence is closed at the end
    of the document.
    """

    def run(self, lines: list[str]) -> list[str]:
        out: list[str] = []
        fence = ""
        runnable_lang: Optional[str] = None
        code: list[str] = []
        for line in lines:
            if not fence:
                opened = open_fence(line)
                if opened is None:
                    out.append(line)
                    continue
                fence, info = opened
                words = info.split()
                if RUNNABLE in words:
                    runnable_lang = LANG_RE.sub("", next((word for word in words if word != RUNNABLE), ""))
                    code = []
                else:
                    lang = words[0] if words else ""
                    if not lang.startswith("{"):
                        lang = LANG_RE.sub("", lang)
                    out.append(f"{fence}{lang}" if not lang.startswith("{") else f"{fence} {info}")
                continue
            if closes_fence(line, fence):
                if runnable_lang is not None:
                    out.extend(self._stash_runnable(runnable_lang, code))
                else:
                    out.append(fence)
                fence = ""
                runnable_lang = None
                continue
            if runnable_lang is not None:
                code.append(line)
            else:
                out.append(line)
        if fence:
            # unterminated: the block ends with the document
            pending = code if runnable_lang is not None else out
            while pending and not pending[-1].strip():
                pending.pop()
            if runnable_lang is not None:
                out.extend(self._stash_runnable(runnable_lang, code))
            else:
                out.append(fence)
            out.extend(["", ""])
        return out

    def _stash_runnable(self, lang: str, code: list[str]) -> list[str]:
        classes = f"language-{lang} {RUNNABLE}" if lang else RUNNABLE
        body = html.escape("\n".join(code) + "\n" if code else "")
        placeholder = self.md.htmlStash.store(f'<pre><code class="{classes}">{body}</code></pre>')
        return ["", placeholder, ""]


class FenceExtension(Extension):
    def extendMarkdown(self, md):
        # fenced_code_block runs at 25
        md.preprocessors.register(FencePreprocessor(md), "blogsite_fences", 27)


def split_more(text: str) -> tuple[str, Optional[str]]:
    lines = text.splitlines()
    fence = ""
    for index, line in enumerate(lines):
        if fence:
            if closes_fence(line, fence):
                fence = ""
            continue
        opened = open_fence(line)
        if opened is not None:
            fence = opened[0]
            continue
        if MORE_RE.match(line):
            before = "\n".join(lines[:index])
            after = "\n".join(lines[index + 1 :])
            return before, after
    return text, None


def new_markdown(toc_depth: str = "2-4") -> markdown.Markdown:
    return markdown.Markdown(
        extensions=[FenceExtension(), "fenced_code", "tables", "footnotes", "toc", "codehilite"],
        extension_configs={
            "toc": {"toc_depth": toc_depth},
            "codehilite": {"guess_lang": False, "css_class": "codehilite"},
        },
    )


def convert(text: str, toc_depth: str = "2-4") -> tuple[str, str]:
    md = new_markdown(toc_depth)
    html_content = md.convert(normalize_list_spacing(text))
    toc_html = getattr(md, "toc", "")
    return html_content, toc_html


def render_body(text: str, toc_depth: str = "2-4") -> RenderedBody:
    before, after = split_more(text)
    if after is None:
        html_content, toc_html = convert(text, toc_depth)
        return RenderedBody(html=html_content, excerpt_html=html_content, has_more=False, toc=toc_html)
    html_content, toc_html = convert(f"{before}\n\n{after}", toc_depth)
    excerpt_html, _ = convert(before, toc_depth)
    return RenderedBody(html=html_content, excerpt_html=excerpt_html, has_more=True, toc=toc_html)
