from pathlib import Path

from typer.testing import CliRunner

from marginalia.cli.main import app
from marginalia.config import CONFIG_FILENAME, MarginaliaConfig
from marginalia.markdown.frontmatter import parse_frontmatter_strict

runner = CliRunner()


def invoke(root: Path, *args: str):
    return runner.invoke(app, ["--site-root", str(root), *args])


def test_check_passes_on_clean_blog(clean_blog: Path):
    result = invoke(clean_blog, "check")
    assert result.exit_code == 0, result.output
    assert "Summary: 4 posts, 0 errors, 0 warnings" in result.output
    assert "All posts pass." in result.output


def test_check_fails_on_messy_blog(messy_blog: Path):
    result = invoke(messy_blog, "check")
    assert result.exit_code == 1
    assert "Summary: 6 posts, 2 errors, 2 warnings" in result.output
    assert "All posts pass." not in result.output


def test_check_strict_fails_on_warnings(clean_blog: Path):
    (clean_blog / "posts" / "seq-basics.md").write_text(
        "---\ntitle: Seq Basics\ndate: 2023-01-10\nmood: sleepy\n---\n\nBody.\n", encoding="utf-8"
    )
    assert invoke(clean_blog, "check").exit_code == 0
    assert invoke(clean_blog, "check", "--strict").exit_code == 1


def test_check_reports_missing_content_dir(tmp_path: Path):
    result = invoke(tmp_path, "check")
    assert result.exit_code == 1
    assert "Error:" in result.output


def test_check_reports_bad_config(clean_blog: Path):
    (clean_blog / CONFIG_FILENAME).write_text("[site\n", encoding="utf-8")
    result = invoke(clean_blog, "check")
    assert result.exit_code == 1
    assert "Configuration error" in result.output


def test_list_hides_drafts_by_default(clean_blog: Path):
    result = invoke(clean_blog, "list")
    assert result.exit_code == 0
    assert "seq-basics" in result.output
    assert "validation" not in result.output

    with_drafts = invoke(clean_blog, "list", "--drafts")
    assert "validation" in with_drafts.output


def test_list_by_tag(clean_blog: Path):
    result = invoke(clean_blog, "list", "--tag", "opinion")
    assert result.exit_code == 0
    assert "exceptions" in result.output
    assert "seq-basics" not in result.output

    assert "No posts found" in invoke(clean_blog, "list", "--tag", "nothing").output


def test_tags(clean_blog: Path):
    result = invoke(clean_blog, "tags")
    assert result.exit_code == 0
    assert "functional" in result.output
    assert "opinion" in result.output

    page = invoke(clean_blog, "tags", "--page")
    assert page.output.startswith("---\ntitle: Tags\n")


def test_show(clean_blog: Path):
    result = invoke(clean_blog, "show", "seq-basics")
    assert result.exit_code == 0
    assert "Seq Basics" in result.output
    assert "links to:    seq-and-io" in result.output
    assert "linked from: seq-and-io" in result.output
    assert "perl x1" in result.output


def test_show_unknown_slug(clean_blog: Path):
    result = invoke(clean_blog, "show", "nope")
    assert result.exit_code == 1
    assert "nope" in result.output


def test_links(messy_blog: Path):
    result = invoke(messy_blog, "links")
    assert result.exit_code == 1
    assert "no-such-post.md" in result.output
    assert "1 broken, 1 to drafts" in result.output


def test_links_clean(clean_blog: Path):
    result = invoke(clean_blog, "links")
    assert result.exit_code == 0
    assert "0 broken, 0 to drafts" in result.output


def test_duplicates(messy_blog: Path):
    result = invoke(messy_blog, "duplicates")
    assert result.exit_code == 0
    assert "diverging" in result.output


def test_no_duplicates(clean_blog: Path):
    assert "No duplicate posts" in invoke(clean_blog, "duplicates").output


def test_code(clean_blog: Path):
    result = invoke(clean_blog, "code")
    assert result.exit_code == 0
    assert "perl" in result.output
    assert "fsharp" in result.output

    only_perl = invoke(clean_blog, "code", "--language", "Perl")
    assert "seq-basics" in only_perl.output
    assert "exceptions" not in only_perl.output


def test_new_creates_draft(clean_blog: Path):
    result = invoke(clean_blog, "new", "Monads Without Tears", "--tag", "perl", "-t", "functional")
    assert result.exit_code == 0, result.output
    path = clean_blog / "posts" / "monads-without-tears.md"
    metadata, _ = parse_frontmatter_strict(path.read_text(encoding="utf-8"))
    assert metadata["draft"] is True
    assert metadata["tags"] == ["functional", "perl"]

    assert invoke(clean_blog, "check").exit_code == 0
    assert invoke(clean_blog, "new", "Monads Without Tears").exit_code == 1


def test_feed(clean_blog: Path):
    result = invoke(clean_blog, "feed")
    assert result.exit_code == 0, result.output
    feed = (clean_blog / "public" / "index.xml").read_text(encoding="utf-8")
    assert feed.count("<entry>") == 3


def test_feed_output_option(clean_blog: Path, tmp_path: Path):
    target = tmp_path / "out" / "atom.xml"
    assert invoke(clean_blog, "feed", "--output", str(target)).exit_code == 0
    assert target.is_file()


def test_init(tmp_path: Path):
    result = invoke(tmp_path, "init", "--content-dir", "content", "--site-url", "https://blog.example/")
    assert result.exit_code == 0, result.output
    assert (tmp_path / "content").is_dir()

    config = MarginaliaConfig.load(tmp_path)
    assert config.paths.content_dir == Path("content")
    assert config.site.site_url == "https://blog.example"

    assert invoke(tmp_path, "init").exit_code == 1
    assert invoke(tmp_path, "init", "--force").exit_code == 0
    assert MarginaliaConfig.load(tmp_path).paths.content_dir == Path("posts")


def test_new_rejects_blank_title(clean_blog: Path):
    result = invoke(clean_blog, "new", "   ")
    assert result.exit_code == 1
    assert "title must not be blank" in result.output
    assert isinstance(result.exception, SystemExit)


def test_new_rejects_unsafe_slug(clean_blog: Path):
    result = invoke(clean_blog, "new", "Escape", "--slug", "../escape")
    assert result.exit_code == 1
    assert "not URL-safe" in result.output
    assert not (clean_blog / "escape.md").exists()


def test_tag_page_stdout_is_not_mixed_with_log_output(messy_blog: Path):
    result = invoke(messy_blog, "tags", "--page")
    assert result.exit_code == 0
    assert result.stdout.startswith("---\ntitle: Tags\n")
    assert "broken.md" not in result.stdout
