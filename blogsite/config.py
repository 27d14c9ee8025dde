from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional

from .errors import ConfigError
from .utils import parse_bool, parse_int

try:
    import tomllib as toml
except ImportError:
    try:
        import tomli as toml
    except ImportError:  # pragma: no cover - optional dependency
        toml = None

try:
    import yaml
except ImportError:  # pragma: no cover - optional dependency
    yaml = None

logger = logging.getLogger(__name__)

FEED_LIMIT = 15
DEFAULT_CONFIG = "site.toml"

KNOWN_KEYS = {
    "title",
    "description",
    "base_url",
    "author",
    "language",
    "icon",
    "favicon",
    "copyright",
    "content_dir",
    "output_dir",
    "posts_dir",
    "drafts_dir",
    "static_dir",
    "templates_dir",
    "feed_path",
    "feed_limit",
    "posts_per_page",
    "toc_depth",
    "build_workers",
    "include_drafts",
    "clean",
}


@dataclass(frozen=True)
class SiteConfig:
    title: str = "Blog"
    description: str = ""
    base_url: str = ""
    author: str = ""
    language: str = "en"
    icon: str = ""
    favicon: str = ""
    copyright: str = ""
    content_dir: Path = Path("content")
    output_dir: Path = Path("_site")
    posts_dir: str = "_posts"
    drafts_dir: str = "_drafts"
    static_dir: Path = Path("static")
    templates_dir: Optional[Path] = None
    feed_path: str = "feed.json"
    feed_limit: int = FEED_LIMIT
    posts_per_page: int = 10
    toc_depth: str = "2-4"
    build_workers: int = 0
    include_drafts: bool = False
    clean: bool = False
    project_root: Path = Path(".")
    extra: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], root: Path) -> "SiteConfig":
        def text(key: str, default: str) -> str:
            value = data.get(key)
            return default if value is None else str(value).strip()

        def directory(key: str, default: str) -> Path:
            path = Path(text(key, default))
            return path if path.is_absolute() else root / path

        templates = text("templates_dir", "")
        feed_limit = parse_int(data.get("feed_limit"), FEED_LIMIT)
        if feed_limit > FEED_LIMIT or feed_limit < 1:
            logger.warning("feed_limit must be between 1 and %d, using %d", FEED_LIMIT, FEED_LIMIT)
            feed_limit = FEED_LIMIT
        extra = {key: value for key, value in data.items() if key not in KNOWN_KEYS}
        return cls(
            title=text("title", cls.title),
            description=text("description", ""),
            base_url=text("base_url", "").rstrip("/"),
            author=text("author", ""),
            language=text("language", "en"),
            icon=text("icon", ""),
            favicon=text("favicon", ""),
            copyright=text("copyright", ""),
            content_dir=directory("content_dir", "content"),
            output_dir=directory("output_dir", "_site"),
            posts_dir=text("posts_dir", "_posts").strip("/"),
            drafts_dir=text("drafts_dir", "_drafts").strip("/"),
            static_dir=directory("static_dir", "static"),
            templates_dir=directory("templates_dir", templates) if templates else None,
            feed_path=text("feed_path", "feed.json").lstrip("/"),
            feed_limit=feed_limit,
            posts_per_page=max(1, parse_int(data.get("posts_per_page"), 10)),
            toc_depth=text("toc_depth", "2-4"),
            build_workers=max(0, parse_int(data.get("build_workers"), 0)),
            include_drafts=parse_bool(data.get("include_drafts")),
            clean=parse_bool(data.get("clean")),
            project_root=root,
            extra=MappingProxyType(extra),
        )

    def with_overrides(self, **changes: Any) -> "SiteConfig":
        changes = {key: value for key, value in changes.items() if value is not None}
        return replace(self, **changes)


def read_config_file(path: Path) -> dict:
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")
    suffix = path.suffix.lower()
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
    if suffix == ".toml":
        if toml is None:
            raise ConfigError("TOML config requires tomllib (Python 3.11+) or tomli.")
        try:
            data = toml.loads(text)
        except toml.TOMLDecodeError as exc:
            raise ConfigError(f"Invalid TOML in config file {path}: {exc}") from exc
    elif suffix in {".yml", ".yaml"}:
        if yaml is None:
            raise ConfigError("YAML config requires PyYAML.")
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in config file {path}: {exc}") from exc
        if data is None:
            data = {}
    else:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Invalid JSON in config file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config must be a mapping: {path}")
    return data


def load_config(path: Path) -> SiteConfig:
    path = path.resolve()
    data = read_config_file(path)
    config = SiteConfig.from_mapping(data, path.parent)
    logger.debug("Loaded config from %s", path)
    return config
