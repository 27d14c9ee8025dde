from __future__ import annotations


class BlogsiteError(Exception):
    pass


class ConfigError(BlogsiteError):
    """Site configuration is missing or unusable. Aborts the build."""


class OutputError(BlogsiteError):
    """Destination tree cannot be prepared. Aborts the build."""


class ClassificationError(BlogsiteError):
    """A single document cannot be placed in the site and is skipped."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason
