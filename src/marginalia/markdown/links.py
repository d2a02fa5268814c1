"""Link extraction for cross-references between posts."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import PurePosixPath
from urllib.parse import unquote, urlsplit

from marginalia.markdown.code import strip_code

# [text](target) or [text](target "title"); images are filtered by the
# preceding "!".
_INLINE_LINK = re.compile(
    r"(?P<bang>!?)\[(?P<text>[^\]]*)\]\(\s*<?(?P<target>[^)\s>]*)>?(?:\s+[\"'(][^)]*[\"')])?\s*\)"
)
_REFERENCE_DEF = re.compile(r"^ {0,3}\[(?P<text>[^\]^][^\]]*)\]:\s*<?(?P<target>\S+?)>?(?:\s+[\"'(].*[\"')])?\s*$")
_REF_SHORTCODE = re.compile(r"\{\{[<%]\s*(?P<kind>rel)?ref\s+\"(?P<target>[^\"]+)\"\s*[>%]\}\}")
_SCHEME = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.\-]*:")

MARKDOWN_SUFFIX = ".md"


@dataclass(frozen=True, slots=True)
class Link:
    """A link found in a post body."""

    text: str
    target: str
    line: int
    shortcode: bool = False

    @property
    def is_external(self) -> bool:
        return bool(_SCHEME.match(self.target)) or self.target.startswith("//")

    @property
    def is_anchor(self) -> bool:
        return self.target.startswith("#")


def extract_links(body: str) -> list[Link]:
    """Return links in ``body`` outside of code, in document order."""
    links: list[Link] = []
    for number, line in enumerate(strip_code(body).splitlines(), start=1):
        found: list[tuple[int, Link]] = []
        for match in _INLINE_LINK.finditer(line):
            if match["bang"] or not match["target"]:
                continue
            found.append((match.start(), Link(match["text"], match["target"], number)))
        for match in _REF_SHORTCODE.finditer(line):
            found.append((match.start(), Link("", match["target"], number, shortcode=True)))
        reference = _REFERENCE_DEF.match(line)
        if reference is not None:
            found.append((reference.start(), Link(reference["text"], reference["target"], number)))
        links.extend(link for _, link in sorted(found, key=lambda item: item[0]))
    return links


@dataclass(frozen=True, slots=True)
class PostReference:
    """Where an internal link points.

    ``by_file`` references (``.md`` paths and ``ref``/``relref`` shortcodes)
    name a source file; the others are permalinks whose ``name`` is the slug.
    """

    name: str
    path: str
    by_file: bool


def internal_reference(link: Link | str, posts_prefix: str = "/posts/") -> PostReference | None:
    """Classify ``link`` as a reference to a post, or return None.

    Post links are ``ref``/``relref`` shortcodes, paths ending in ``.md``, and
    absolute paths under ``posts_prefix``.
    """
    target = link.target if isinstance(link, Link) else link
    is_shortcode = isinstance(link, Link) and link.shortcode

    if not is_shortcode and (_SCHEME.match(target) or target.startswith(("//", "#"))):
        return None

    path = unquote(urlsplit(target).path)
    if not path:
        return None

    prefix = "/" + posts_prefix.strip("/") + "/" if posts_prefix.strip("/") else "/"
    under_prefix = prefix != "/" and (path + "/").startswith(prefix) and path.rstrip("/") != prefix.rstrip("/")
    by_file = is_shortcode or path.endswith(MARKDOWN_SUFFIX)
    if not (by_file or under_prefix):
        return None

    parts = [part for part in PurePosixPath(path).parts if part not in ("/", ".", "..")]
    if not parts:
        return None
    name = parts[-1]
    if name in ("index.md", "_index.md") and len(parts) > 1:
        name = parts[-2]
    if name.endswith(MARKDOWN_SUFFIX):
        name = name[: -len(MARKDOWN_SUFFIX)]
    if not name:
        return None
    return PostReference(name=name, path=path, by_file=by_file)


def internal_slug(link: Link | str, posts_prefix: str = "/posts/") -> str | None:
    """Return the post name ``link`` points at, or None.

    For permalinks this is the slug; for file links it is the file stem, which
    PostCollection maps to the post's actual slug.
    """
    reference = internal_reference(link, posts_prefix)
    return reference.name if reference is not None else None


__all__ = ["Link", "PostReference", "extract_links", "internal_reference", "internal_slug"]
