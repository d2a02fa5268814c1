"""Create new posts with a complete front matter."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from marginalia.config import MarginaliaConfig
from marginalia.core.types import Post
from marginalia.exceptions import InvalidInputError, PostExistsError
from marginalia.publish.template_loader import TemplateLoader
from marginalia.utils.slugify import is_url_safe, slugify

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

logger = logging.getLogger(__name__)


def new_post(
    content_dir: Path,
    title: str,
    *,
    tags: Sequence[str] = (),
    description: str = "",
    date: datetime | None = None,
    slug: str | None = None,
    config: MarginaliaConfig | None = None,
    loader: TemplateLoader | None = None,
) -> Path:
    """Write ``<slug>.md`` as a draft and return its path.

    Tags are de-duplicated case-insensitively, keeping the first spelling.

    Raises:
        InvalidInputError: If ``title`` is blank or ``slug`` is not URL-safe.
        PostExistsError: If a file with that slug already exists.

    """
    if not title.strip():
        msg = "title must not be blank"
        raise InvalidInputError(msg)
    if slug is not None and not is_url_safe(slug):
        msg = f"slug '{slug}' is not URL-safe (try '{slugify(slug)}')"
        raise InvalidInputError(msg)

    config = config or MarginaliaConfig()
    loader = loader or TemplateLoader()
    title = title.strip()
    slug = slug or slugify(title)
    path = content_dir / f"{slug}.md"
    if path.exists():
        raise PostExistsError(path)

    seen: dict[str, str] = {}
    for tag in tags:
        if tag.strip():
            seen.setdefault(tag.strip().casefold(), tag.strip())
    clean_tags = list(seen.values())
    body = loader.render("new_post.md.jinja", title=title, tags=clean_tags, description=description)
    post = Post(
        title=title,
        slug=slug,
        date=(date or datetime.now(UTC)).replace(microsecond=0),
        tags=clean_tags,
        description=description,
        draft=True,
        layout=config.site.default_layout,
        body=body,
    )

    content_dir.mkdir(parents=True, exist_ok=True)
    path.write_text(post.to_markdown(), encoding="utf-8")
    logger.info("Created %s", path)
    return path


__all__ = ["new_post"]
