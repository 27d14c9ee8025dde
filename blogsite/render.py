from __future__ import annotations

import html
import re
from pathlib import Path
from typing import Optional

from .errors import ConfigError

IMG_SRC_RE = re.compile(r'<img([^>]*?)src="([^"]+)"', re.IGNORECASE)
TAG_RE = re.compile(r"<[^>]+>")
SPACE_RE = re.compile(r"\s+")
PACKAGE_TEMPLATES = Path(__file__).parent / "templates"


def fix_relative_img_src(html_text: str, root: str) -> str:
    def repl(match: re.Match) -> str:
        attrs = match.group(1)
        src = match.group(2)
        if src.startswith(("http://", "https://", "data:", "#", "/", "./", "../")):
            return match.group(0)
        return f'<img{attrs}src="{root}/{src}"'

    if root == ".":
        return html_text
    return IMG_SRC_RE.sub(repl, html_text)


def strip_tags(html_text: str) -> str:
    return TAG_RE.sub("", html_text)


def html_to_text(html_text: str) -> str:
    return SPACE_RE.sub(" ", html.unescape(strip_tags(html_text))).strip()


def summarize(html_text: str, limit: int = 200) -> str:
    text = html_to_text(html_text)
    return text[:limit] + ("..." if len(text) > limit else "")


def render_template(template: str, **context: str) -> str:
    output = template
    late_keys = {"content", "sidebar"}
    for key, value in context.items():
        if key in late_keys:
            continue
        output = output.replace(f"{{{{{key}}}}}", value)
    for key in late_keys:
        if key in context:
            output = output.replace(f"{{{{{key}}}}}", context[key])
    return output


def read_template(name: str, templates_dir: Optional[Path] = None) -> str:
    candidates = []
    if templates_dir is not None:
        candidates.append(templates_dir / name)
    candidates.append(PACKAGE_TEMPLATES / name)
    for path in candidates:
        if path.exists():
            try:
                return path.read_text(encoding="utf-8")
            except OSError as exc:
                raise ConfigError(f"Cannot read template {path}: {exc}") from exc
    raise ConfigError(f"Template not found: {name}")
