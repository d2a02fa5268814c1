import pytest

from marginalia.markdown.links import Link, PostReference, extract_links, internal_reference, internal_slug


def test_extract_inline_links():
    links = extract_links('See [basics](seq-basics.md) and [docs](https://example.com "Docs").')
    assert links == [
        Link(text="basics", target="seq-basics.md", line=1),
        Link(text="docs", target="https://example.com", line=1),
    ]


def test_images_are_not_links():
    assert extract_links("![diagram](diagram.png)") == []


def test_reference_definitions_and_footnotes():
    body = "Text [io][1].\n\n[1]: /posts/seq-and-io/ \"Seq and IO\"\n[^note]: a footnote\n"
    links = extract_links(body)
    assert links == [Link(text="1", target="/posts/seq-and-io/", line=3)]


def test_ref_shortcodes():
    (link,) = extract_links('Read {{< ref "seq-basics.md" >}} first.')
    assert link.shortcode
    assert link.target == "seq-basics.md"


def test_relref_shortcodes():
    links = extract_links('Compare {{< relref "seq-and-io.md" >}} and {{% relref "notes/io" %}}.')
    assert [(link.target, link.shortcode) for link in links] == [("seq-and-io.md", True), ("notes/io", True)]


def test_links_in_code_are_ignored():
    body = "```md\n[not a link](a.md)\n```\nInline `[nope](b.md)` and [yes](c.md)."
    assert [link.target for link in extract_links(body)] == ["c.md"]


def test_link_line_numbers():
    links = extract_links("first\n\n[a](a.md)\n\n\n[b](b.md)")
    assert [(link.target, link.line) for link in links] == [("a.md", 3), ("b.md", 6)]


def test_link_kinds():
    assert Link("x", "https://example.com", 1).is_external
    assert Link("x", "//cdn.example.com/a.js", 1).is_external
    assert Link("x", "mailto:me@example.com", 1).is_external
    assert Link("x", "#section", 1).is_anchor
    assert not Link("x", "other.md", 1).is_external


@pytest.mark.parametrize(
    ("target", "expected"),
    [
        ("seq-basics.md", "seq-basics"),
        ("../seq-basics.md#laziness", "seq-basics"),
        ("./drafts/option.md", "option"),
        ("../seq-and-io/index.md", "seq-and-io"),
        ("/posts/seq-basics/", "seq-basics"),
        ("/posts/seq-basics", "seq-basics"),
        ("/posts/", None),
        ("/images/diagram.png", None),
        ("https://example.com/post.md", None),
        ("#heading", None),
        ("", None),
    ],
)
def test_internal_slug(target, expected):
    assert internal_slug(target, "/posts/") == expected


def test_internal_slug_respects_prefix():
    assert internal_slug("/blog/seq-basics/", "/blog/") == "seq-basics"
    assert internal_slug("/posts/seq-basics/", "/blog/") is None


def test_internal_slug_for_shortcode_without_extension():
    link = Link("", "seq-basics", 1, shortcode=True)
    assert internal_slug(link) == "seq-basics"


def test_internal_reference_distinguishes_files_from_permalinks():
    assert internal_reference("../2019/Seq_Basics.md") == PostReference(
        name="Seq_Basics", path="../2019/Seq_Basics.md", by_file=True
    )
    assert internal_reference("/posts/seq-basics/") == PostReference(
        name="seq-basics", path="/posts/seq-basics/", by_file=False
    )
    assert internal_reference(Link("", "notes/io", 1, shortcode=True)).by_file
    assert internal_reference("https://example.com/a.md") is None
