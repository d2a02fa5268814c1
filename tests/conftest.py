from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Any

import pytest
import yaml

from marginalia.config import MarginaliaConfig


def write_post(directory: Path, name: str, body: str = "", **metadata: Any) -> Path:
    """Write a markdown post with YAML front matter into ``directory``."""
    path = directory / name
    path.parent.mkdir(parents=True, exist_ok=True)
    front = yaml.safe_dump(metadata, sort_keys=False, allow_unicode=True)
    path.write_text(f"---\n{front}---\n\n{textwrap.dedent(body).strip()}\n", encoding="utf-8")
    return path


@pytest.fixture
def site_root(tmp_path: Path) -> Path:
    (tmp_path / "posts").mkdir()
    return tmp_path


@pytest.fixture
def config(site_root: Path) -> MarginaliaConfig:
    return MarginaliaConfig(paths={"site_root": site_root}, site={"site_url": "https://blog.example"})


@pytest.fixture
def clean_blog(site_root: Path) -> Path:
    """Three valid, cross-linked posts and a draft."""
    posts = site_root / "posts"
    write_post(
        posts,
        "seq-basics.md",
        """
        A lazy sequence is recomputed on every traversal.

        ```perl
        my $seq = Seq->range(1, 10)->map(sub { $_ * 2 });
        ```

        See also [Seq and I/O](seq-and-io.md).
        """,
        title="Seq Basics",
        date="2023-01-10",
        tags=["perl", "functional"],
        description="What a lazy sequence is.",
    )
    write_post(
        posts,
        "seq-and-io.md",
        """
        Reading a file lazily, one line at a time.

        Back to [the basics](/posts/seq-basics/).
        """,
        title="Seq in Combination with I/O",
        date="2023-02-01",
        tags=["perl", "io"],
        description="Lazy file reading.",
    )
    write_post(
        posts,
        "exceptions.md",
        """
        Why I prefer returning an Option over throwing.

        ```fsharp
        let parse s = match Int32.TryParse s with | true, v -> Some v | _ -> None
        ```
        """,
        title="On Exceptions",
        date="2022-12-01",
        tags=["opinion", "functional"],
        description="Exceptions versus Option.",
    )
    write_post(
        posts,
        "validation.md",
        "Combinators for validating nested data.",
        title="Validation Combinators",
        date="2023-03-01",
        tags=["functional"],
        description="Work in progress.",
        draft=True,
    )
    return site_root


@pytest.fixture
def messy_blog(clean_blog: Path) -> Path:
    """The clean blog plus a broken link, a draft link, a diverging duplicate and an invalid post."""
    posts = clean_blog / "posts"
    write_post(
        posts,
        "seq-and-io-2.md",
        """
        Reading a file lazily, one line at a time.

        The second half of this post was rewritten and ends differently.
        It now closes the handle explicitly.
        """,
        title="Seq in combination with I/O",
        date="2023-02-03",
        tags=["perl"],
    )
    write_post(
        posts,
        "links.md",
        "A [missing post](no-such-post.md) and a [draft](validation.md).",
        title="Link Roundup",
        date="2023-04-01",
    )
    (posts / "broken.md").write_text("no front matter here\n", encoding="utf-8")
    return clean_blog
