"""The front-matter contract between posts and the static-site generator.

The generator only understands a handful of keys (``layout``, ``title``,
``slug``, ``date``, ``lastmod``, ``tags``, ``description``, ``draft``) and
silently drops or misrenders anything else. These checks catch that before a
build does.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

from marginalia.config import ContractSettings
from marginalia.exceptions import DateTimeParsingError, InvalidDateTimeInputError
from marginalia.utils.datetime_utils import parse_datetime_flexible
from marginalia.utils.slugify import is_url_safe

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping
    from pathlib import Path


class Severity(str, Enum):
    """Issue severity levels."""

    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True, slots=True)
class Issue:
    """A single contract violation.

    Attributes:
        path: File the issue was found in (None for in-memory metadata)
        key: Front-matter key involved, or None for file-level problems
        severity: ERROR blocks publishing, WARNING does not
        message: Human-readable description

    """

    path: Path | None
    key: str | None
    severity: Severity
    message: str

    @property
    def is_error(self) -> bool:
        return self.severity == Severity.ERROR


def has_errors(issues: Iterable[Issue]) -> bool:
    return any(issue.is_error for issue in issues)


def _parse_date(value: Any) -> datetime | None:
    if isinstance(value, bool):
        return None
    try:
        return parse_datetime_flexible(value)
    except (DateTimeParsingError, InvalidDateTimeInputError):
        return None


class _Checker:
    def __init__(self, metadata: Mapping[str, Any], path: Path | None, settings: ContractSettings) -> None:
        self.metadata = metadata
        self.path = path
        self.settings = settings
        self.issues: list[Issue] = []

    def error(self, key: str | None, message: str) -> None:
        self.issues.append(Issue(self.path, key, Severity.ERROR, message))

    def warning(self, key: str | None, message: str) -> None:
        self.issues.append(Issue(self.path, key, Severity.WARNING, message))

    def run(self) -> list[Issue]:
        for key in self.settings.required:
            if self.metadata.get(key) is None:
                self.error(key, f"missing required key '{key}'")

        self._check_title()
        parsed_date = self._check_date("date")
        parsed_lastmod = self._check_date("lastmod")
        if parsed_date and parsed_lastmod and parsed_lastmod < parsed_date:
            self.error("lastmod", "lastmod is earlier than date")
        self._check_tags()
        self._check_slug()
        self._check_draft()
        self._check_strings()
        self._check_unknown_keys()
        return self.issues

    def _check_title(self) -> None:
        title = self.metadata.get("title")
        if title is None:
            return
        if not isinstance(title, str) or not title.strip():
            self.error("title", "title must be a non-empty string")

    def _check_date(self, key: str) -> datetime | None:
        value = self.metadata.get(key)
        if value is None:
            return None
        if not isinstance(value, str | date):
            self.error(key, f"{key} must be a date, got {type(value).__name__}")
            return None
        parsed = _parse_date(value)
        if parsed is None:
            self.error(key, f"{key} is not a valid date: {value!r}")
        return parsed

    def _check_tags(self) -> None:
        tags = self.metadata.get("tags")
        if tags is None:
            return
        if isinstance(tags, str):
            self.warning("tags", "tags should be a list, not a single string")
            return
        if not isinstance(tags, list) or not all(isinstance(tag, str) for tag in tags):
            self.error("tags", "tags must be a list of strings")
            return

        seen: set[str] = set()
        for tag in tags:
            folded = tag.strip().casefold()
            if not folded:
                self.warning("tags", "empty tag")
            elif folded in seen:
                self.warning("tags", f"duplicate tag '{tag}'")
            seen.add(folded)

    def _check_slug(self) -> None:
        slug = self.metadata.get("slug")
        if slug is None:
            return
        if not isinstance(slug, str) or not slug.strip():
            self.error("slug", "slug must be a non-empty string")
        elif not is_url_safe(slug):
            self.warning("slug", f"slug '{slug}' is not URL-safe")

    def _check_draft(self) -> None:
        draft = self.metadata.get("draft")
        if draft is not None and not isinstance(draft, bool):
            self.error("draft", f"draft must be true or false, got {draft!r}")

    def _check_strings(self) -> None:
        for key in ("description", "layout"):
            value = self.metadata.get(key)
            if value is not None and not isinstance(value, str):
                self.error(key, f"{key} must be a string")

        if self.settings.require_description and not str(self.metadata.get("description") or "").strip():
            self.warning("description", "description is empty")

    def _check_unknown_keys(self) -> None:
        recognized = self.settings.recognized
        for key in self.metadata:
            if key in recognized:
                continue
            message = f"unrecognized key '{key}'"
            if self.settings.strict:
                self.error(key, message)
            else:
                self.warning(key, message)


def validate_frontmatter(
    metadata: Mapping[str, Any],
    *,
    path: Path | None = None,
    settings: ContractSettings | None = None,
) -> list[Issue]:
    """Check ``metadata`` against the front-matter contract.

    Returns all issues found, errors and warnings, in check order. An empty
    list means the post is fully compliant.
    """
    return _Checker(metadata, path, settings or ContractSettings()).run()


__all__ = ["Issue", "Severity", "has_errors", "validate_frontmatter"]
