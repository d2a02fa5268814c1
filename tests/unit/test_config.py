import os
from pathlib import Path

import pytest

from marginalia.config import CONFIG_FILENAME, MarginaliaConfig, save_config
from marginalia.exceptions import ConfigError


@pytest.fixture(autouse=True)
def chdir_to_tmp_path(tmp_path: Path):
    """Ensure tests run in a clean directory."""
    original_dir = Path.cwd()
    os.chdir(tmp_path)
    yield
    os.chdir(original_dir)


def test_load_defaults(tmp_path: Path):
    config = MarginaliaConfig.load(tmp_path)

    assert config.paths.site_root == tmp_path
    assert config.paths.content_dir == Path("posts")
    assert config.paths.abs_content_dir == tmp_path / "posts"
    assert config.paths.abs_feed_path == tmp_path / "public" / "index.xml"
    assert config.site.posts_prefix == "/posts/"
    assert config.contract.required == ["title", "date"]
    assert "lastmod" in config.contract.recognized
    assert config.feed.max_entries == 20
    assert config.audit.similarity_threshold == 0.98


def test_load_uses_cwd_without_site_root(tmp_path: Path):
    assert MarginaliaConfig.load().paths.site_root == tmp_path


def test_load_from_toml_file(tmp_path: Path):
    (tmp_path / CONFIG_FILENAME).write_text(
        """
[paths]
content_dir = "content/posts"

[site]
site_url = "https://blog.example/"
posts_prefix = "articles"

[contract]
extra_keys = ["aliases"]
strict = true
""",
        encoding="utf-8",
    )

    config = MarginaliaConfig.load(tmp_path)

    assert config.paths.abs_content_dir == tmp_path / "content" / "posts"
    assert config.site.site_url == "https://blog.example"
    assert config.site.posts_prefix == "/articles/"
    assert config.site.title == "Marginalia"  # Default is kept
    assert config.contract.strict is True
    assert "aliases" in config.contract.recognized


def test_env_vars_override_file(tmp_path: Path, monkeypatch):
    (tmp_path / CONFIG_FILENAME).write_text(
        '[site]\ntitle = "From file"\nauthor = "File Author"\n',
        encoding="utf-8",
    )
    monkeypatch.setenv("MARGINALIA_SITE__TITLE", "From env")
    monkeypatch.setenv("MARGINALIA_FEED__MAX_ENTRIES", "5")

    config = MarginaliaConfig.load(tmp_path)

    assert config.site.title == "From env"  # Env var wins
    assert config.site.author == "File Author"  # From file
    assert config.feed.max_entries == 5


def test_invalid_toml_raises_config_error(tmp_path: Path):
    (tmp_path / CONFIG_FILENAME).write_text("[site\ntitle = ", encoding="utf-8")
    with pytest.raises(ConfigError, match="Invalid TOML"):
        MarginaliaConfig.load(tmp_path)


def test_invalid_values_raise_config_error(tmp_path: Path):
    (tmp_path / CONFIG_FILENAME).write_text("[feed]\nmax_entries = 0\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="Invalid configuration"):
        MarginaliaConfig.load(tmp_path)


def test_save_then_load(tmp_path: Path):
    config = MarginaliaConfig(
        paths={"content_dir": "blog"},
        site={"site_url": "https://blog.example", "author": "A. Writer"},
        audit={"fail_on_diverging": True},
    )

    path = save_config(config, tmp_path / "site")

    assert path == tmp_path / "site" / CONFIG_FILENAME
    assert "site_root" not in path.read_text(encoding="utf-8")
    loaded = MarginaliaConfig.load(tmp_path / "site")
    assert loaded.paths.content_dir == Path("blog")
    assert loaded.site.author == "A. Writer"
    assert loaded.audit.fail_on_diverging is True
    assert loaded.paths.site_root == tmp_path / "site"
