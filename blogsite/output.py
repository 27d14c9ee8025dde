from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from .errors import OutputError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderedPage:
    output_path: str
    html: str

    def data(self) -> bytes:
        return self.html.encode("utf-8")


@dataclass
class WriteReport:
    written: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


def write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(text.encode("utf-8"))


def prepare_output_dir(output_dir: Path) -> None:
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
        probe = output_dir / ".blogsite-write-test"
        probe.write_bytes(b"")
        probe.unlink()
    except OSError as exc:
        raise OutputError(f"Output directory is not writable: {output_dir} ({exc})") from exc


def write_pages(pages: Iterable[RenderedPage], output_dir: Path) -> WriteReport:
    prepare_output_dir(output_dir)
    report = WriteReport()
    for page in pages:
        path = output_dir / page.output_path
        try:
            write_text(path, page.html)
        except OSError as exc:
            logger.warning("Failed to write %s: %s", path, exc)
            report.failed.append(page.output_path)
            continue
        logger.debug("Wrote %s", path)
        report.written.append(page.output_path)
    return report


def copy_static(static_dir: Path, output_dir: Path, generated: Iterable[str] = ()) -> None:
    """Copy static assets into the output directory.

    Runs before pages are written, so a generated page with the same path
    as a static file replaces it. Such collisions are reported.
    """
    if not static_dir.is_dir():
        return
    generated = set(generated)
    for path in sorted(static_dir.rglob("*")):
        if path.is_file() and path.relative_to(static_dir).as_posix() in generated:
            logger.warning("Static file %s is replaced by a generated page", path)
    for item in sorted(static_dir.iterdir()):
        dest = output_dir / item.name
        try:
            if item.is_dir():
                if dest.exists():
                    shutil.rmtree(dest)
                shutil.copytree(item, dest)
            else:
                shutil.copy2(item, dest)
        except OSError as exc:
            logger.warning("Failed to copy static asset %s: %s", item, exc)
