"""The blog as a collection: ordering, tags and cross-references."""

from __future__ import annotations

import logging
import os
from collections import Counter, defaultdict
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from marginalia.core.contract import Issue, Severity
from marginalia.exceptions import DuplicateSlugError, PostNotFoundError
from marginalia.markdown.links import MARKDOWN_SUFFIX, Link, PostReference, internal_reference

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from marginalia.core.types import Post

logger = logging.getLogger(__name__)

DEFAULT_RELATED_LIMIT = 5


def _newest_first(post: Post) -> tuple[float, str]:
    return (-post.date.timestamp(), post.slug)


def _tag_key(tag: str) -> tuple[str, str]:
    return (tag.casefold(), tag)


def _file_key(path: Path) -> Path:
    return Path(os.path.normpath(path))


def _file_stem(path: Path) -> str:
    if path.name in ("index.md", "_index.md"):
        return path.parent.name
    return path.stem


@dataclass(frozen=True, slots=True)
class BrokenLink:
    """An internal link whose target slug names no post."""

    source: Post
    link: Link
    target: str


@dataclass(frozen=True, slots=True)
class DraftLink:
    """A published post linking to a draft."""

    source: Post
    link: Link
    target: Post


class PostCollection:
    """An immutable, slug-indexed set of posts.

    Iteration yields posts newest first (date descending, slug ascending).
    """

    def __init__(self, posts: Iterable[Post], *, posts_prefix: str = "/posts/") -> None:
        self.posts_prefix = posts_prefix
        by_slug: dict[str, Post] = {}
        for post in posts:
            existing = by_slug.get(post.slug)
            if existing is not None:
                raise DuplicateSlugError(post.slug, [existing.source_path, post.source_path])
            by_slug[post.slug] = post
        self._by_slug = by_slug
        self._ordered = sorted(by_slug.values(), key=_newest_first)

        # File links name a source file, not a slug; map both back to slugs.
        self._by_file: dict[Path, str] = {}
        self._by_stem: dict[str, str] = {}
        for post in sorted(by_slug.values(), key=lambda p: str(p.source_path or "")):
            if post.source_path is None:
                continue
            self._by_file[_file_key(post.source_path)] = post.slug
            self._by_stem.setdefault(_file_stem(post.source_path), post.slug)

    @classmethod
    def build(cls, posts: Iterable[Post], *, posts_prefix: str = "/posts/") -> tuple[PostCollection, list[Issue]]:
        """Build a collection, keeping the first post (by path) for each slug.

        Posts that lose a slug collision are reported as errors instead of
        raising.
        """
        ordered = sorted(posts, key=lambda post: (str(post.source_path or ""), post.slug))
        kept: dict[str, Post] = {}
        issues: list[Issue] = []
        for post in ordered:
            first = kept.get(post.slug)
            if first is None:
                kept[post.slug] = post
                continue
            message = f"slug '{post.slug}' already used by {first.source_path or first.title}"
            logger.warning("%s: %s", post.source_path, message)
            issues.append(Issue(post.source_path, "slug", Severity.ERROR, message))
        return cls(kept.values(), posts_prefix=posts_prefix), issues

    # --- Lookup ---

    def __iter__(self) -> Iterator[Post]:
        return iter(self._ordered)

    def __len__(self) -> int:
        return len(self._ordered)

    def __contains__(self, slug: object) -> bool:
        return slug in self._by_slug

    def get(self, slug: str) -> Post:
        try:
            return self._by_slug[slug]
        except KeyError:
            raise PostNotFoundError(slug) from None

    def published(self) -> list[Post]:
        return [post for post in self._ordered if not post.draft]

    def drafts(self) -> list[Post]:
        return [post for post in self._ordered if post.draft]

    # --- Tags ---

    def tag_index(self, *, include_drafts: bool = False) -> dict[str, list[Post]]:
        """Map each tag to its posts, tags in case-insensitive order."""
        index: defaultdict[str, list[Post]] = defaultdict(list)
        for post in self._ordered:
            if post.draft and not include_drafts:
                continue
            for tag in post.tags:
                index[tag].append(post)
        return {tag: index[tag] for tag in sorted(index, key=_tag_key)}

    def tag_counts(self, *, include_drafts: bool = False) -> Counter[str]:
        return Counter({tag: len(posts) for tag, posts in self.tag_index(include_drafts=include_drafts).items()})

    def with_tag(self, tag: str, *, include_drafts: bool = False) -> list[Post]:
        folded = tag.casefold()
        return [
            post
            for post in self._ordered
            if (include_drafts or not post.draft) and any(t.casefold() == folded for t in post.tags)
        ]

    # --- Navigation ---

    def neighbours(self, slug: str) -> tuple[Post | None, Post | None]:
        """Return the (older, newer) published posts around ``slug``."""
        post = self.get(slug)
        published = self.published()
        if post not in published:
            return None, None
        index = published.index(post)
        newer = published[index - 1] if index > 0 else None
        older = published[index + 1] if index + 1 < len(published) else None
        return older, newer

    def related(self, slug: str, limit: int = DEFAULT_RELATED_LIMIT) -> list[Post]:
        """Published posts sharing tags with ``slug``, most shared tags first."""
        post = self.get(slug)
        folded = {tag.casefold() for tag in post.tags}
        scored = []
        for other in self.published():
            if other.slug == post.slug:
                continue
            shared = len(folded & {tag.casefold() for tag in other.tags})
            if shared:
                scored.append((-shared, _newest_first(other), other))
        scored.sort(key=lambda item: (item[0], item[1]))
        return [other for _, _, other in scored[:limit]]

    # --- Cross-references ---

    def resolve(self, source: Post, reference: PostReference) -> str | None:
        """Return the slug ``reference`` (found in ``source``) points at, or None.

        File references are matched against source paths (relative to the
        linking post), then file stems, then slugs. Permalinks match slugs only.
        """
        if not reference.by_file:
            return reference.name if reference.name in self._by_slug else None

        if source.source_path is not None and not reference.path.startswith("/"):
            relative = source.source_path.parent / reference.path
            for candidate in (relative, relative.with_name(relative.name + MARKDOWN_SUFFIX)):
                slug = self._by_file.get(_file_key(candidate))
                if slug is not None:
                    return slug

        stem_slug = self._by_stem.get(reference.name)
        if stem_slug is not None:
            return stem_slug
        return reference.name if reference.name in self._by_slug else None

    def _internal_links(self, post: Post) -> Iterator[tuple[Link, str, str | None]]:
        """Yield ``(link, name, slug)``; ``slug`` is None when nothing matches."""
        for link in post.links:
            reference = internal_reference(link, self.posts_prefix)
            if reference is not None:
                yield link, reference.name, self.resolve(post, reference)

    def outgoing(self, slug: str) -> list[str]:
        """Slugs ``slug`` links to, in first-mention order, self-links excluded.

        Unresolved links are listed by the name they use.
        """
        post = self.get(slug)
        seen: dict[str, None] = {}
        for _, name, target in self._internal_links(post):
            target = target or name
            if target != slug:
                seen.setdefault(target, None)
        return list(seen)

    def backlinks(self, slug: str) -> list[Post]:
        """Posts linking to ``slug``, newest first."""
        self.get(slug)
        return [
            post
            for post in self._ordered
            if post.slug != slug and any(target == slug for _, _, target in self._internal_links(post))
        ]

    def broken_links(self) -> list[BrokenLink]:
        return [
            BrokenLink(source=post, link=link, target=name)
            for post in self._ordered
            for link, name, target in self._internal_links(post)
            if target is None
        ]

    def draft_links(self) -> list[DraftLink]:
        """Links from published posts to drafts; they break once the site is built."""
        return [
            DraftLink(source=post, link=link, target=self._by_slug[target])
            for post in self.published()
            for link, _, target in self._internal_links(post)
            if target is not None and self._by_slug[target].draft
        ]


__all__ = ["BrokenLink", "DraftLink", "PostCollection"]
