"""Configuration for Marginalia.

Settings live in ``.marginalia.toml`` at the site root. Every value can be
overridden from the environment with ``MARGINALIA_SECTION__KEY`` (for example
``MARGINALIA_PATHS__CONTENT_DIR=content/posts``).

Priority (highest to lowest):
1. Environment variables
2. ``.marginalia.toml``
3. Defaults
"""

from __future__ import annotations

import logging
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import tomli_w
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from marginalia.exceptions import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".marginalia.toml"

# Keys the site generator understands; everything else is carried in Post.extra.
RECOGNIZED_KEYS: tuple[str, ...] = (
    "layout",
    "title",
    "slug",
    "date",
    "lastmod",
    "tags",
    "description",
    "draft",
)
DEFAULT_REQUIRED_KEYS: tuple[str, ...] = ("title", "date")


def _deep_merge(destination: dict[str, Any], source: Mapping[str, Any]) -> dict[str, Any]:
    """Merge source into destination, with source values overwriting."""
    for key, value in source.items():
        if isinstance(value, Mapping) and isinstance(destination.get(key), Mapping):
            destination[key] = _deep_merge(dict(destination[key]), value)
        else:
            destination[key] = value
    return destination


class PathsSettings(BaseModel):
    """Path configuration.

    Relative paths resolve against ``site_root``.
    """

    site_root: Path = Field(default_factory=Path.cwd, description="Root directory of the blog")
    content_dir: Path = Field(default=Path("posts"), description="Directory holding the posts")
    feed_path: Path = Field(default=Path("public/index.xml"), description="Where `feed` writes the Atom file")

    @property
    def abs_content_dir(self) -> Path:
        return self._resolve(self.content_dir)

    @property
    def abs_feed_path(self) -> Path:
        return self._resolve(self.feed_path)

    def _resolve(self, path: Path) -> Path:
        if path.is_absolute():
            return path
        return self.site_root / path


class SiteSettings(BaseModel):
    """Site identity, used for feed ids and permalinks."""

    title: str = "Marginalia"
    site_url: str = Field(default="https://example.org", description="Absolute base URL, no trailing slash")
    author: str = ""
    posts_prefix: str = Field(default="/posts/", description="URL path under which posts are served")
    default_layout: str = "post"

    @field_validator("site_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("posts_prefix")
    @classmethod
    def normalize_prefix(cls, v: str) -> str:
        stripped = v.strip("/")
        return f"/{stripped}/" if stripped else "/"


class ContractSettings(BaseModel):
    """Front-matter contract enforced by `marginalia check`."""

    required: list[str] = Field(default_factory=lambda: list(DEFAULT_REQUIRED_KEYS))
    extra_keys: list[str] = Field(
        default_factory=list,
        description="Additional keys the site generator accepts (e.g. 'aliases')",
    )
    strict: bool = Field(default=False, description="Treat unknown keys as errors")
    require_description: bool = False

    @property
    def recognized(self) -> frozenset[str]:
        return frozenset(RECOGNIZED_KEYS) | frozenset(self.extra_keys)


class FeedSettings(BaseModel):
    max_entries: int = Field(default=20, ge=1)
    include_content: bool = False


class AuditSettings(BaseModel):
    similarity_threshold: float = Field(
        default=0.98,
        ge=0.0,
        le=1.0,
        description="Bodies less similar than this are reported as diverging duplicates",
    )
    fail_on_diverging: bool = False


class MarginaliaConfig(BaseSettings):
    """Root configuration."""

    paths: PathsSettings = Field(default_factory=PathsSettings)
    site: SiteSettings = Field(default_factory=SiteSettings)
    contract: ContractSettings = Field(default_factory=ContractSettings)
    feed: FeedSettings = Field(default_factory=FeedSettings)
    audit: AuditSettings = Field(default_factory=AuditSettings)

    model_config = SettingsConfigDict(
        extra="ignore",
        env_prefix="MARGINALIA_",
        env_nested_delimiter="__",
    )

    @classmethod
    def load(cls, site_root: Path | None = None) -> MarginaliaConfig:
        """Load configuration from ``.marginalia.toml`` and the environment.

        Raises:
            ConfigError: If the file is not valid TOML or holds invalid values.

        """
        root_path = site_root if site_root is not None else Path.cwd()
        config_file = root_path / CONFIG_FILENAME

        file_settings: dict[str, Any] = {}
        if config_file.is_file():
            try:
                with config_file.open("rb") as f:
                    file_settings = tomllib.load(f)
            except tomllib.TOMLDecodeError as exc:
                msg = f"Invalid TOML in {config_file}: {exc}"
                raise ConfigError(msg) from exc
            logger.debug("Loaded config from %s", config_file)

        try:
            env_settings = cls().model_dump(exclude_unset=True)
            merged = _deep_merge(file_settings, env_settings)
            merged.setdefault("paths", {})["site_root"] = root_path
            return cls.model_validate(merged)
        except ValidationError as exc:
            msg = f"Invalid configuration in {config_file}: {exc}"
            raise ConfigError(msg) from exc


def save_config(config: MarginaliaConfig, site_root: Path) -> Path:
    """Write ``config`` to ``.marginalia.toml`` in ``site_root``.

    ``site_root`` itself is not persisted; it is always the directory the file
    lives in.
    """
    site_root.mkdir(parents=True, exist_ok=True)
    config_path = site_root / CONFIG_FILENAME

    data = config.model_dump(mode="json")
    data["paths"].pop("site_root", None)

    # tomli_w does not accept None values.
    def _clean_nones(d: dict[str, Any]) -> dict[str, Any]:
        cleaned = {}
        for k, v in d.items():
            if v is None:
                continue
            if isinstance(v, dict):
                v = _clean_nones(v)
            cleaned[k] = v
        return cleaned

    config_path.write_text(tomli_w.dumps(_clean_nones(data)), encoding="utf-8")
    logger.debug("Saved config to %s", config_path)
    return config_path


__all__ = [
    "CONFIG_FILENAME",
    "RECOGNIZED_KEYS",
    "AuditSettings",
    "ContractSettings",
    "FeedSettings",
    "MarginaliaConfig",
    "PathsSettings",
    "SiteSettings",
    "save_config",
]
