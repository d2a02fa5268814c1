"""Load posts from the content directory."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from pydantic import ValidationError

from marginalia.config import MarginaliaConfig
from marginalia.core.contract import Issue, Severity, has_errors, validate_frontmatter
from marginalia.core.types import Post
from marginalia.exceptions import ContentDirectoryError, FrontmatterError, PostLoadError
from marginalia.markdown.frontmatter import parse_frontmatter_strict

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_PATTERN = "**/*.md"
# Section pages belong to the generator, not to the post stream.
SECTION_PAGES = frozenset({"_index.md"})


@dataclass(slots=True)
class LoadResult:
    """Posts that loaded, plus every issue found along the way."""

    posts: list[Post] = field(default_factory=list)
    issues: list[Issue] = field(default_factory=list)
    failed: list[Path] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not has_errors(self.issues)


def discover_posts(content_dir: Path, pattern: str = DEFAULT_PATTERN) -> list[Path]:
    """Return post files under ``content_dir`` in sorted order.

    Raises:
        ContentDirectoryError: If ``content_dir`` is not a directory.

    """
    if not content_dir.is_dir():
        raise ContentDirectoryError(content_dir)
    return sorted(
        path
        for path in content_dir.glob(pattern)
        if path.is_file() and path.name not in SECTION_PAGES and not _is_hidden(path, content_dir)
    )


def _is_hidden(path: Path, root: Path) -> bool:
    return any(part.startswith(".") for part in path.relative_to(root).parts)


def _load(path: Path, config: MarginaliaConfig) -> tuple[Post, list[Issue]]:
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        issue = Issue(path, None, Severity.ERROR, f"cannot read file: {exc}")
        raise PostLoadError(path, [issue]) from exc

    try:
        metadata, body = parse_frontmatter_strict(content, source=path)
    except FrontmatterError as exc:
        raise PostLoadError(path, [Issue(path, None, Severity.ERROR, exc.reason)]) from exc

    issues = validate_frontmatter(metadata, path=path, settings=config.contract)
    if has_errors(issues):
        raise PostLoadError(path, issues)

    try:
        post = Post.from_frontmatter(
            metadata,
            body,
            source_path=path,
            default_layout=config.site.default_layout,
        )
    except ValidationError as exc:
        errors = [
            Issue(path, ".".join(str(loc) for loc in error["loc"]) or None, Severity.ERROR, error["msg"])
            for error in exc.errors()
        ]
        raise PostLoadError(path, errors) from exc

    return post, issues


def load_post(path: Path, *, config: MarginaliaConfig | None = None) -> Post:
    """Load a single post.

    Raises:
        PostLoadError: If the file cannot be read, has no valid front matter, or
            violates the contract. The error carries the issues found.

    """
    post, _ = _load(path, config or MarginaliaConfig())
    return post


def load_posts(content_dir: Path, *, config: MarginaliaConfig | None = None) -> LoadResult:
    """Load every post under ``content_dir``.

    A broken file never aborts the load: its issues are collected and the
    remaining files are still read.
    """
    config = config or MarginaliaConfig()
    result = LoadResult()
    for path in discover_posts(content_dir):
        try:
            post, issues = _load(path, config)
        except PostLoadError as exc:
            logger.warning("Skipping %s: %s", path, "; ".join(issue.message for issue in exc.issues))
            result.failed.append(path)
            result.issues.extend(exc.issues)
            continue
        result.posts.append(post)
        result.issues.extend(issues)

    logger.debug("Loaded %d posts from %s (%d failed)", len(result.posts), content_dir, len(result.failed))
    return result


__all__ = ["LoadResult", "discover_posts", "load_post", "load_posts"]
