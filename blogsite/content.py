from __future__ import annotations

import datetime as dt
import html as html_lib
import re
from collections.abc import Mapping
from typing import Iterator, Optional, Union

from .utils import parse_bool

DELIMITER = "---"
LIST_KEYS = {"categories", "tags"}
DATE_KEYS = {"date", "updated"}
QUOTED_KEYS = {"title", "author", "layout", "description", "summary", "slug", "draft", "category"} | DATE_KEYS
QUOTES = {"'", '"'}

LIST_MARKER_RE = re.compile(r"^(?P<indent>[ \t]*)(?:[-+*]|\d+[.)])\s+")
FENCE_RE = re.compile(r"^(?P<indent>[ \t]*)(`{3,}|~{3,})")
DOUBLE_QUOTE_RE = re.compile(r"^(?P<indent>[ \t]*)>>(?!>)(?P<rest>.*)$")
ISO_DATE_RE = re.compile(r"^(\d{4}-\d{2}-\d{2})(?:[T ].*)?$")
CJK_RE = re.compile(r"[\u3040-\u30ff\u3400-\u4dbf\u4e00-\u9fff\uac00-\ud7af]")
WORD_RE = re.compile(r"[A-Za-z0-9]+(?:'[A-Za-z0-9]+)?")

MetaValue = Union[str, dt.date, list]


class Metadata(Mapping):
    """Front matter values keyed by lower-case name.

    Values are one of ``str``, ``datetime.date`` or ``list[str]``. Keys the
    generator does not know about stay reachable through the mapping.
    """

    def __init__(self, values: Optional[Mapping[str, MetaValue]] = None) -> None:
        self._values: dict[str, MetaValue] = {}
        for key, value in (values or {}).items():
            self._values[key] = list(value) if isinstance(value, (list, tuple)) else value

    def __getitem__(self, key: str) -> MetaValue:
        value = self._values[key]
        return list(value) if isinstance(value, list) else value

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"Metadata({self._values!r})"

    def text(self, key: str, default: str = "") -> str:
        value = self._values.get(key)
        if value is None:
            return default
        if isinstance(value, list):
            return ", ".join(value)
        if isinstance(value, dt.date):
            return value.isoformat()
        return value

    @property
    def title(self) -> str:
        return self.text("title")

    @property
    def author(self) -> str:
        return self.text("author")

    @property
    def layout(self) -> str:
        return self.text("layout")

    @property
    def description(self) -> str:
        return self.text("description") or self.text("summary")

    @property
    def slug(self) -> str:
        return self.text("slug")

    @property
    def draft(self) -> bool:
        return parse_bool(self._values.get("draft"))

    @property
    def categories(self) -> list[str]:
        value = self._values.get("categories")
        if value is None:
            value = self._values.get("category")
        if value is None:
            return []
        if isinstance(value, list):
            return list(value)
        return parse_list(str(value))

    @property
    def date(self) -> Optional[dt.date]:
        return self._date("date")

    @property
    def updated(self) -> Optional[dt.date]:
        return self._date("updated")

    def _date(self, key: str) -> Optional[dt.date]:
        value = self._values.get(key)
        return value if isinstance(value, dt.date) else None


def slugify(text: str) -> str:
    text = text.lower()
    text = re.sub(r"[^\w]+", "-", text, flags=re.UNICODE)
    text = text.strip("-_").replace("_", "-")
    return text or "post"


def parse_list(value: str) -> list[str]:
    value = value.strip()
    if value.startswith("[") and value.endswith("]"):
        inner = value[1:-1]
        items = [item.strip().strip("'\"") for item in inner.split(",")]
    else:
        items = [item.strip() for item in value.split(",")]
    return [item for item in items if item]


def parse_date_value(value: str) -> Optional[dt.date]:
    match = ISO_DATE_RE.match(value.strip())
    if not match:
        return None
    try:
        return dt.date.fromisoformat(match.group(1))
    except ValueError:
        return None


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in QUOTES:
        return value[1:-1]
    return value


def parse_value(key: str, value: str) -> MetaValue:
    if key in LIST_KEYS:
        return parse_list(value)
    if key not in QUOTED_KEYS:
        return value
    value = _unquote(value)
    if key in DATE_KEYS:
        return parse_date_value(value) or value
    return value


def parse_front_matter(text: str) -> tuple[Metadata, str]:
    clean_text = text.lstrip("\ufeff")
    lines = clean_text.splitlines(keepends=True)
    if not lines or lines[0].strip() != DELIMITER:
        return Metadata(), text

    end = None
    for i in range(1, len(lines)):
        if lines[i].strip() == DELIMITER:
            end = i
            break
    if end is None:
        return Metadata(), text

    meta: dict[str, MetaValue] = {}
    for line in lines[1:end]:
        line = line.strip()
        if not line or line.startswith("#") or ":" not in line:
            continue
        key, value = line.split(":", 1)
        key = key.strip().lower()
        if not key:
            continue
        meta[key] = parse_value(key, value.strip())
    body = "".join(lines[end + 1 :])
    return Metadata(meta), body


def format_value(value: MetaValue, key: str = "") -> str:
    if isinstance(value, list):
        return ", ".join(value)
    if isinstance(value, dt.date):
        return value.isoformat()
    text = str(value)
    if key in QUOTED_KEYS and text and (text[0] in QUOTES or text[-1] in QUOTES or text != text.strip()):
        return f'"{text}"'
    return text


def dump_front_matter(meta: Mapping[str, MetaValue]) -> str:
    lines = [DELIMITER]
    lines.extend(f"{key}: {format_value(value, key)}" for key, value in meta.items())
    lines.append(DELIMITER)
    return "\n".join(lines) + "\n"


def extract_title(meta: Metadata, body: str) -> tuple[str, str]:
    if meta.title:
        return meta.title, body
    lines = body.splitlines()
    for i, line in enumerate(lines):
        stripped = line.strip()
        if stripped.startswith("# "):
            title = stripped[2:].strip() or "Untitled"
            new_body = "\n".join(lines[i + 1 :]).lstrip()
            return title, new_body
        if stripped:
            break
    return "Untitled", body


def normalize_list_spacing(text: str) -> str:
    lines = text.splitlines()
    out: list[str] = []
    in_fence = False
    fence_marker = ""
    for line in lines:
        fence_match = FENCE_RE.match(line)
        if fence_match:
            marker = fence_match.group(2)
            if not in_fence:
                in_fence = True
                fence_marker = marker
            elif marker == fence_marker:
                in_fence = False
                fence_marker = ""
            out.append(line)
            continue
        if in_fence:
            out.append(line)
            continue
        quote_match = DOUBLE_QUOTE_RE.match(line)
        if quote_match:
            rest = quote_match.group("rest").lstrip()
            if rest:
                line = f'{quote_match.group("indent")}> {rest}'
            else:
                line = f'{quote_match.group("indent")}>'
        list_match = LIST_MARKER_RE.match(line)
        if list_match:
            if not list_match.group("indent"):
                if out and out[-1].strip() and not LIST_MARKER_RE.match(out[-1]):
                    out.append("")
        out.append(line)
    return "\n".join(out)


def count_words(text: str) -> int:
    text = html_lib.unescape(text)
    cjk_count = len(CJK_RE.findall(text))
    text = CJK_RE.sub(" ", text)
    word_count = len(WORD_RE.findall(text))
    return cjk_count + word_count
