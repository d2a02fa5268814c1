"""Jinja2 template loading for generated markdown."""

from __future__ import annotations

from importlib.resources import files
from pathlib import Path
from typing import TYPE_CHECKING, Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from marginalia.publish import filters
from marginalia.utils.slugify import slugify

if TYPE_CHECKING:
    from marginalia.content.collection import PostCollection


class TemplateLoader:
    """Loads and renders the markdown templates shipped with the package.

    Supports custom filters (``slugify``, ``isoformat``, ``format_date``) and an
    alternative template directory for sites that override the defaults.
    """

    def __init__(self, template_dir: Path | None = None) -> None:
        if template_dir is None:
            template_dir = Path(str(files("marginalia.publish").joinpath("templates")))

        self.template_dir = template_dir
        self.env = Environment(
            loader=FileSystemLoader(self.template_dir),
            autoescape=False,  # Markdown, not HTML
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )
        self.env.filters["format_date"] = filters.format_date
        self.env.filters["isoformat"] = filters.isoformat
        self.env.filters["slugify"] = slugify

    def render(self, template_name: str, **context: Any) -> str:
        return self.env.get_template(template_name).render(**context)


def render_tag_page(collection: PostCollection, *, loader: TemplateLoader | None = None) -> str:
    """Render a markdown page listing published posts per tag."""
    loader = loader or TemplateLoader()
    return loader.render("tags.md.jinja", index=collection.tag_index(), posts_prefix=collection.posts_prefix)


__all__ = ["TemplateLoader", "render_tag_page"]
