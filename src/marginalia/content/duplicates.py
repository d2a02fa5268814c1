"""Detect posts that were published twice, possibly with diverging text."""

from __future__ import annotations

import re
import unicodedata
from collections import defaultdict
from dataclasses import dataclass
from difflib import SequenceMatcher
from itertools import combinations
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from marginalia.core.types import Post

DEFAULT_SIMILARITY_THRESHOLD = 0.98

_NON_WORD = re.compile(r"[\W_]+")


def normalize_title(title: str) -> str:
    """Casefold, drop accents and collapse punctuation/whitespace."""
    decomposed = unicodedata.normalize("NFKD", title)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _NON_WORD.sub(" ", stripped.casefold()).strip()


def body_similarity(a: str, b: str) -> float:
    """Similarity ratio of two bodies, compared line by line."""
    if a == b:
        return 1.0
    return SequenceMatcher(None, a.splitlines(), b.splitlines(), autojunk=False).ratio()


@dataclass(frozen=True, slots=True)
class DuplicateGroup:
    """Posts sharing a slug or a normalized title.

    Attributes:
        kind: "slug" or "title"
        key: The shared slug or normalized title
        posts: Members, oldest first
        similarity: Lowest pairwise body similarity within the group
        diverging: True when similarity falls below the threshold

    """

    kind: str
    key: str
    posts: tuple[Post, ...]
    similarity: float
    diverging: bool


def _group(kind: str, key: str, posts: list[Post], threshold: float) -> DuplicateGroup:
    members = tuple(sorted(posts, key=lambda post: (post.date, str(post.source_path or ""))))
    similarity = min(body_similarity(a.body, b.body) for a, b in combinations(members, 2))
    return DuplicateGroup(
        kind=kind,
        key=key,
        posts=members,
        similarity=similarity,
        diverging=similarity < threshold,
    )


def find_duplicates(
    posts: Iterable[Post],
    *,
    threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
) -> list[DuplicateGroup]:
    """Group posts with the same slug or the same normalized title.

    A pair of posts sharing both slug and title is reported once, as a slug
    group.
    """
    by_slug: defaultdict[str, list[Post]] = defaultdict(list)
    by_title: defaultdict[str, list[Post]] = defaultdict(list)
    for post in posts:
        by_slug[post.slug].append(post)
        by_title[normalize_title(post.title)].append(post)

    groups = [_group("slug", slug, members, threshold) for slug, members in by_slug.items() if len(members) > 1]
    covered = {frozenset(id(post) for post in group.posts) for group in groups}
    for title, members in by_title.items():
        if len(members) < 2 or not title:
            continue
        if frozenset(id(post) for post in members) in covered:
            continue
        groups.append(_group("title", title, members, threshold))

    return sorted(groups, key=lambda group: (group.kind, group.key))


__all__ = ["DEFAULT_SIMILARITY_THRESHOLD", "DuplicateGroup", "body_similarity", "find_duplicates", "normalize_title"]
