from __future__ import annotations

import datetime as dt
import hashlib
import shutil
from pathlib import Path

from .errors import OutputError


def parse_bool(value: object) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "y", "on"}
    return False


def parse_int(value: object, default: int) -> int:
    if value is None:
        return default
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        return default


def join_url(base: str, path: str) -> str:
    base = base.rstrip("/")
    path = path.lstrip("/")
    if not path:
        return base
    return f"{base}/{path}"


def rfc3339_date(value: dt.date) -> str:
    if isinstance(value, dt.datetime):
        value = value.date()
    return f"{value.isoformat()}T00:00:00Z"


def hash_text(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def clean_output_dir(output_dir: Path, project_root: Path, content_dir: Path) -> None:
    if not output_dir.exists():
        return
    output_resolved = output_dir.resolve()
    root_resolved = project_root.resolve()
    content_resolved = content_dir.resolve()
    if output_resolved == root_resolved:
        raise OutputError(f"Refusing to clean {output_dir}: it is the project root.")
    if not output_resolved.is_relative_to(root_resolved):
        raise OutputError(f"Refusing to clean {output_dir}: it is outside the project root {project_root}.")
    if output_resolved == content_resolved or content_resolved.is_relative_to(output_resolved):
        raise OutputError(f"Refusing to clean {output_dir}: it contains the content directory.")
    try:
        shutil.rmtree(output_dir)
    except OSError as exc:
        raise OutputError(f"Cannot clean output directory {output_dir}: {exc}") from exc
