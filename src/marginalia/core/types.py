"""Core data types for Marginalia."""

from __future__ import annotations

import math
import re
from datetime import date, datetime, time, timedelta
from functools import cached_property
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from marginalia.config import RECOGNIZED_KEYS
from marginalia.exceptions import DateTimeParsingError, InvalidDateTimeInputError
from marginalia.markdown.code import CodeSample, extract_code_samples, strip_code
from marginalia.markdown.frontmatter import render_frontmatter
from marginalia.markdown.links import Link, extract_links
from marginalia.utils.datetime_utils import parse_datetime_flexible
from marginalia.utils.slugify import slugify

WORDS_PER_MINUTE = 200
_WORD = re.compile(r"[\w'’-]+")
_MARKUP_LINK = re.compile(r"!?\[([^\]]*)\]\([^)]*\)")


def _coerce_tags(value: Any) -> frozenset[str]:
    if value is None:
        return frozenset()
    if isinstance(value, str):
        value = [value]
    return frozenset(str(tag).strip() for tag in value if tag is not None and str(tag).strip())


def _frontmatter_date(value: datetime) -> date | datetime:
    """Midnight UTC round-trips as a plain YAML date."""
    if value.utcoffset() == timedelta(0) and value.time() == time(0):
        return value.date()
    return value


class Post(BaseModel):
    """A blog post: front-matter metadata plus the markdown body."""

    model_config = ConfigDict(frozen=True)

    title: str
    slug: str
    date: datetime
    lastmod: datetime | None = None
    tags: frozenset[str] = Field(default_factory=frozenset)
    description: str = ""
    draft: bool = False
    layout: str = "post"
    body: str = ""
    source_path: Path | None = None
    extra: dict[str, Any] = Field(default_factory=dict)

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, v: str) -> str:
        if not v.strip():
            msg = "title must not be blank"
            raise ValueError(msg)
        return v.strip()

    @field_validator("date", "lastmod", mode="before")
    @classmethod
    def _parse_dates(cls, v: Any) -> Any:
        if v is None:
            return None
        try:
            return parse_datetime_flexible(v)
        except (DateTimeParsingError, InvalidDateTimeInputError) as exc:
            raise ValueError(str(exc)) from exc

    @field_validator("tags", mode="before")
    @classmethod
    def _normalize_tags(cls, v: Any) -> frozenset[str]:
        return _coerce_tags(v)

    @field_validator("description", mode="before")
    @classmethod
    def _description_default(cls, v: Any) -> Any:
        return "" if v is None else v

    @model_validator(mode="before")
    @classmethod
    def _derive_slug(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("slug"):
            source_path = data.get("source_path")
            stem = Path(source_path).stem if source_path else ""
            if stem in ("index", "_index") and source_path:
                stem = Path(source_path).parent.name
            basis = stem or str(data.get("title") or "")
            if basis.strip():
                data = {**data, "slug": slugify(basis)}
        return data

    @classmethod
    def from_frontmatter(
        cls,
        metadata: dict[str, Any],
        body: str,
        *,
        source_path: Path | None = None,
        default_layout: str = "post",
    ) -> Post:
        """Build a post from a parsed front-matter mapping.

        Unrecognized keys are preserved in ``extra``.
        """
        known = {key: metadata[key] for key in RECOGNIZED_KEYS if key in metadata and metadata[key] is not None}
        extra = {key: value for key, value in metadata.items() if key not in RECOGNIZED_KEYS}
        known.setdefault("layout", default_layout)
        return cls(**known, body=body, source_path=source_path, extra=extra)

    # --- Derived views ---

    @property
    def updated(self) -> datetime:
        return self.lastmod or self.date

    @property
    def sorted_tags(self) -> list[str]:
        return sorted(self.tags, key=lambda tag: (tag.casefold(), tag))

    @cached_property
    def code_samples(self) -> list[CodeSample]:
        return extract_code_samples(self.body)

    @cached_property
    def links(self) -> list[Link]:
        return extract_links(self.body)

    @cached_property
    def word_count(self) -> int:
        """Words of prose; code blocks and link targets are not counted."""
        prose = _MARKUP_LINK.sub(r"\1", strip_code(self.body))
        return len(_WORD.findall(prose))

    @property
    def reading_minutes(self) -> int:
        return max(1, math.ceil(self.word_count / WORDS_PER_MINUTE))

    # --- Serialization ---

    def to_frontmatter(self) -> dict[str, Any]:
        """Front matter in the generator's key order, followed by extra keys."""
        result: dict[str, Any] = {
            "layout": self.layout,
            "title": self.title,
            "slug": self.slug,
            "date": _frontmatter_date(self.date),
        }
        if self.lastmod is not None:
            result["lastmod"] = _frontmatter_date(self.lastmod)
        result["tags"] = self.sorted_tags
        result["description"] = self.description
        result["draft"] = self.draft
        result.update(self.extra)
        return result

    def to_markdown(self) -> str:
        return render_frontmatter(self.to_frontmatter(), self.body)

    def __hash__(self) -> int:
        return hash((self.slug, self.source_path))


__all__ = ["Post"]
