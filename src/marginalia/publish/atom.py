"""Atom feed for the published posts."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING
from xml.etree.ElementTree import Element, SubElement, tostring

from pydantic import BaseModel, Field

from marginalia.utils.datetime_utils import format_iso_utc

if TYPE_CHECKING:
    from pathlib import Path

    from marginalia.config import MarginaliaConfig
    from marginalia.content.collection import PostCollection
    from marginalia.core.types import Post

logger = logging.getLogger(__name__)

ATOM_NS = "http://www.w3.org/2005/Atom"


class FeedEntry(BaseModel):
    id: str
    title: str
    link: str
    updated: datetime
    published: datetime
    categories: list[str] = Field(default_factory=list)
    summary: str | None = None
    content: str | None = None


class Feed(BaseModel):
    id: str
    title: str
    link: str
    updated: datetime
    author: str | None = None
    entries: list[FeedEntry] = Field(default_factory=list)


def post_url(post: Post, config: MarginaliaConfig) -> str:
    return f"{config.site.site_url}{config.site.posts_prefix}{post.slug}/"


def build_feed(collection: PostCollection, config: MarginaliaConfig) -> Feed:
    """Build a feed of the most recently updated published posts."""
    posts = sorted(collection.published(), key=lambda post: (post.updated, post.slug), reverse=True)
    posts = posts[: config.feed.max_entries]

    entries = [
        FeedEntry(
            id=post_url(post, config),
            title=post.title,
            link=post_url(post, config),
            updated=post.updated,
            published=post.date,
            categories=post.sorted_tags,
            summary=post.description or None,
            content=post.body if config.feed.include_content else None,
        )
        for post in posts
    ]
    updated = entries[0].updated if entries else datetime.now(UTC)
    site_link = f"{config.site.site_url}/"
    return Feed(
        id=site_link,
        title=config.site.title,
        link=site_link,
        updated=updated,
        author=config.site.author or None,
        entries=entries,
    )


def render_atom(feed: Feed) -> str:
    """Serialize a Feed to an Atom XML string."""
    root = Element("feed", attrib={"xmlns": ATOM_NS})
    SubElement(root, "id").text = feed.id
    SubElement(root, "title").text = feed.title
    SubElement(root, "updated").text = format_iso_utc(feed.updated)
    SubElement(root, "link", attrib={"href": feed.link})
    if feed.author:
        SubElement(SubElement(root, "author"), "name").text = feed.author

    for entry in feed.entries:
        entry_el = SubElement(root, "entry")
        SubElement(entry_el, "id").text = entry.id
        SubElement(entry_el, "title").text = entry.title
        SubElement(entry_el, "link", attrib={"rel": "alternate", "href": entry.link})
        SubElement(entry_el, "updated").text = format_iso_utc(entry.updated)
        SubElement(entry_el, "published").text = format_iso_utc(entry.published)
        for term in entry.categories:
            SubElement(entry_el, "category", attrib={"term": term})
        if entry.summary:
            SubElement(entry_el, "summary").text = entry.summary
        if entry.content:
            SubElement(entry_el, "content", attrib={"type": "text"}).text = entry.content

    return "<?xml version='1.0' encoding='UTF-8'?>\n" + tostring(root, encoding="unicode")


def write_feed(path: Path, collection: PostCollection, config: MarginaliaConfig) -> Path:
    feed = build_feed(collection, config)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_atom(feed), encoding="utf-8")
    logger.info("Wrote %d entries to %s", len(feed.entries), path)
    return path


__all__ = ["Feed", "FeedEntry", "build_feed", "post_url", "render_atom", "write_feed"]
