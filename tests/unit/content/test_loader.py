from pathlib import Path

import pytest

from marginalia.config import MarginaliaConfig
from marginalia.content.loader import discover_posts, load_post, load_posts
from marginalia.core.contract import Severity
from marginalia.exceptions import ContentDirectoryError, PostLoadError
from tests.conftest import write_post


def test_discover_posts_skips_section_pages_and_hidden_files(site_root: Path):
    posts = site_root / "posts"
    write_post(posts, "b.md", title="B", date="2023-01-01")
    write_post(posts, "a.md", title="A", date="2023-01-01")
    write_post(posts, "series/index.md", title="Series", date="2023-01-01")
    write_post(posts, "_index.md", title="Posts")
    write_post(posts, ".drafts/hidden.md", title="Hidden", date="2023-01-01")
    (posts / "notes.txt").write_text("not markdown")

    found = [path.relative_to(posts).as_posix() for path in discover_posts(posts)]
    assert found == ["a.md", "b.md", "series/index.md"]


def test_discover_posts_missing_directory(tmp_path: Path):
    with pytest.raises(ContentDirectoryError):
        discover_posts(tmp_path / "nope")


def test_load_post(site_root: Path):
    path = write_post(site_root / "posts", "seq.md", "Body", title="Seq", date="2023-01-10", tags=["perl"])
    post = load_post(path)
    assert post.slug == "seq"
    assert post.source_path == path
    assert post.body == "Body"


def test_load_post_uses_configured_layout(site_root: Path):
    path = write_post(site_root / "posts", "seq.md", title="Seq", date="2023-01-10")
    config = MarginaliaConfig(site={"default_layout": "essay"})
    assert load_post(path, config=config).layout == "essay"


def test_load_post_without_frontmatter(site_root: Path):
    path = site_root / "posts" / "bare.md"
    path.write_text("Just text\n", encoding="utf-8")
    with pytest.raises(PostLoadError) as excinfo:
        load_post(path)
    (issue,) = excinfo.value.issues
    assert issue.severity == Severity.ERROR
    assert issue.message == "missing front matter block"


def test_load_post_contract_violation(site_root: Path):
    path = write_post(site_root / "posts", "bad.md", title="Bad", date="sometime", draft="yes")
    with pytest.raises(PostLoadError) as excinfo:
        load_post(path)
    assert {issue.key for issue in excinfo.value.issues} == {"date", "draft"}
    assert excinfo.value.path == path


def test_load_posts_collects_failures_and_warnings(site_root: Path):
    posts = site_root / "posts"
    write_post(posts, "good.md", title="Good", date="2023-01-01", series="x")
    write_post(posts, "bad.md", title="Bad")
    result = load_posts(posts)

    assert [post.slug for post in result.posts] == ["good"]
    assert result.failed == [posts / "bad.md"]
    assert not result.ok
    severities = {(issue.path.name, issue.key): issue.severity for issue in result.issues}
    assert severities == {
        ("good.md", "series"): Severity.WARNING,
        ("bad.md", "date"): Severity.ERROR,
    }


def test_load_posts_empty_directory(site_root: Path):
    result = load_posts(site_root / "posts")
    assert result.posts == []
    assert result.ok
