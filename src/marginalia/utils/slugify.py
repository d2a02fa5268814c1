"""Canonical slugify implementation for Marginalia."""

from unicodedata import normalize

from pymdownx.slugs import slugify as _md_slugify

from marginalia.exceptions import InvalidInputError

# Pre-configured slugifiers, reused across calls.
slugify_lower = _md_slugify(case="lower", separator="-")
slugify_case = _md_slugify(separator="-")

DEFAULT_MAX_LEN = 60


def slugify(text: str, max_len: int = DEFAULT_MAX_LEN, *, lowercase: bool = True) -> str:
    """Convert text to a URL-friendly slug using Python Markdown semantics.

    Uses pymdownx.slugs so that slugs match the heading IDs the site generator
    produces. Output is ASCII-only with Unicode transliteration.

    Args:
        text: Input text to slugify
        max_len: Maximum length of output slug (default 60)
        lowercase: Whether to lowercase the slug (default True)

    Returns:
        Safe slug string suitable for filenames and URLs

    Raises:
        InvalidInputError: If ``text`` is not a string.

    Examples:
        >>> slugify("Hello World!")
        'hello-world'
        >>> slugify("Café à Paris")
        'cafe-a-paris'
        >>> slugify("../../etc/passwd")
        'etcpasswd'
        >>> slugify("A" * 100, max_len=20)
        'aaaaaaaaaaaaaaaaaaaa'

    """
    if not isinstance(text, str):
        msg = f"slugify expects a string, got {type(text).__name__}"
        raise InvalidInputError(msg)

    normalized = normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")

    slugifier = slugify_lower if lowercase else slugify_case
    slug = slugifier(normalized, sep="-")

    slug = slug or "post"
    if len(slug) > max_len:
        slug = slug[:max_len].rstrip("-")

    return slug


def is_url_safe(slug: str) -> bool:
    """Return True when ``slug`` is already in canonical slug form."""
    return bool(slug) and slugify(slug, max_len=max(len(slug), DEFAULT_MAX_LEN)) == slug


__all__ = ["is_url_safe", "slugify"]
