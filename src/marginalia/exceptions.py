"""Centralized exceptions for the Marginalia application."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from marginalia.core.contract import Issue


class MarginaliaError(Exception):
    """Base exception for all Marginalia errors."""


class SlugifyError(MarginaliaError):
    """Base exception for slugify-related errors."""


class InvalidInputError(SlugifyError):
    """Raised when the input to a function is invalid."""


class DateTimeParsingError(MarginaliaError):
    """Raised when a front-matter date cannot be parsed."""

    def __init__(self, value: str, original: Exception | None = None) -> None:
        self.value = value
        self.original = original
        super().__init__(f"Could not parse date {value!r}: {original}")


class InvalidDateTimeInputError(MarginaliaError):
    """Raised when a date value is missing or empty."""

    def __init__(self, value: str, reason: str) -> None:
        self.value = value
        super().__init__(reason)


class ConfigError(MarginaliaError):
    """Raised when .marginalia.toml cannot be read or validated."""


class FrontmatterError(MarginaliaError):
    """Raised when a post has no usable front matter block."""

    def __init__(self, reason: str, source: Path | str | None = None) -> None:
        self.reason = reason
        self.source = source
        prefix = f"{source}: " if source else ""
        super().__init__(f"{prefix}{reason}")


class ContentDirectoryError(MarginaliaError):
    """Raised when the posts directory does not exist."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"Content directory not found: {path}")


class PostLoadError(MarginaliaError):
    """Raised when a post violates the front-matter contract."""

    def __init__(self, path: Path, issues: Sequence[Issue]) -> None:
        self.path = path
        self.issues = list(issues)
        summary = "; ".join(issue.message for issue in self.issues)
        super().__init__(f"{path}: {summary}")


class DuplicateSlugError(MarginaliaError):
    """Raised when two posts claim the same slug."""

    def __init__(self, slug: str, paths: Sequence[Path | None]) -> None:
        self.slug = slug
        self.paths = list(paths)
        where = ", ".join(str(p) for p in self.paths if p is not None)
        super().__init__(f"Duplicate slug {slug!r}" + (f" ({where})" if where else ""))


class PostNotFoundError(MarginaliaError, KeyError):
    """Raised when a slug does not name a post in the collection."""

    def __init__(self, slug: str) -> None:
        self.slug = slug
        super().__init__(f"No post with slug {slug!r}")

    def __str__(self) -> str:
        return f"No post with slug {self.slug!r}"


class PostExistsError(MarginaliaError):
    """Raised when scaffolding would overwrite an existing post."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"Post already exists: {path}")
