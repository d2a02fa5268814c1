"""Helpers for parsing and rendering YAML front matter in Markdown posts."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import frontmatter
import yaml
from frontmatter.default_handlers import YAMLHandler

from marginalia.exceptions import FrontmatterError

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

logger = logging.getLogger(__name__)

FRONT_MATTER_DELIMITER = "---"
_BOM = "﻿"


def _has_frontmatter_block(content: str) -> bool:
    return content.lstrip(_BOM).startswith(FRONT_MATTER_DELIMITER)


def parse_frontmatter(content: str) -> tuple[dict[str, Any], str]:
    """Parse YAML front matter using python-frontmatter.

    Args:
        content: Markdown content that may include front matter.

    Returns:
        Tuple of (metadata dict, body string). If parsing fails or metadata is not a
        mapping, metadata will be an empty dict and the original content is returned.

    """
    try:
        parsed = frontmatter.loads(content)
    except (yaml.YAMLError, ValueError) as exc:
        logger.warning("Failed to parse front matter content: %s", exc)
        return {}, content

    raw_metadata = parsed.metadata or {}
    if not isinstance(raw_metadata, dict):
        logger.warning("Front matter metadata is not a mapping: %s", type(raw_metadata).__name__)
        return {}, content

    body = parsed.content if isinstance(parsed.content, str) else str(parsed.content)
    return dict(raw_metadata), body


def parse_frontmatter_strict(content: str, *, source: Path | str | None = None) -> tuple[dict[str, Any], str]:
    """Parse front matter, raising instead of falling back.

    Raises:
        FrontmatterError: If there is no front matter block, the block is not
            terminated, the YAML is malformed, or the block is not a mapping.

    """
    # The block must open on the first line; only a byte-order mark may precede it.
    text = content.removeprefix(_BOM)
    if not _has_frontmatter_block(text):
        raise FrontmatterError("missing front matter block", source)

    handler = YAMLHandler()
    try:
        raw_metadata, body = handler.split(text)
    except ValueError as exc:
        raise FrontmatterError("unterminated front matter block", source) from exc

    try:
        metadata = handler.load(raw_metadata)
    except yaml.YAMLError as exc:
        raise FrontmatterError(f"malformed front matter: {exc}", source) from exc

    if metadata is None:
        metadata = {}
    if not isinstance(metadata, dict):
        raise FrontmatterError(f"front matter is not a mapping ({type(metadata).__name__})", source)

    return dict(metadata), body.lstrip("\r\n").rstrip()


def parse_frontmatter_file(path: Path, *, encoding: str = "utf-8") -> tuple[dict[str, Any], str]:
    """Read a Markdown file and parse its front matter.

    Raises:
        OSError: If the file cannot be read.

    """
    content = path.read_text(encoding=encoding)
    return parse_frontmatter(content)


def read_frontmatter_only(path: Path, *, encoding: str = "utf-8") -> dict[str, Any]:
    """Read only the front matter from a Markdown file, stopping at the delimiter.

    Returns an empty dict if no front matter is found or parsing fails.
    """
    try:
        with path.open("r", encoding=encoding) as f:
            first_line = f.readline().lstrip(_BOM)
            if first_line.rstrip() != FRONT_MATTER_DELIMITER:
                return {}

            lines = []
            for line in f:
                if line.rstrip() == FRONT_MATTER_DELIMITER:
                    break
                lines.append(line)
            else:
                # No closing delimiter: not front matter.
                return {}

            data = yaml.safe_load("".join(lines))
            if isinstance(data, dict):
                return data
            return {}

    except (OSError, yaml.YAMLError) as exc:
        logger.debug("Failed to read front matter from %s: %s", path, exc)
        return {}


def render_frontmatter(metadata: Mapping[str, Any], body: str) -> str:
    """Render metadata and body back into a Markdown document.

    Keys keep their insertion order and non-ASCII text is written as-is.
    """
    post = frontmatter.Post(body.strip("\n"), **dict(metadata))
    rendered = frontmatter.dumps(post, sort_keys=False, allow_unicode=True)
    return rendered.rstrip("\n") + "\n"


__all__ = [
    "parse_frontmatter",
    "parse_frontmatter_file",
    "parse_frontmatter_strict",
    "read_frontmatter_only",
    "render_frontmatter",
]
