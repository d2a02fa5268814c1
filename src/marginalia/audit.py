"""Whole-blog checks behind `marginalia check`.

Combines the per-file front-matter contract with checks that need every post
at once: slug collisions, duplicated posts, and internal links.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from marginalia.config import MarginaliaConfig
from marginalia.content.collection import PostCollection
from marginalia.content.duplicates import DuplicateGroup, find_duplicates
from marginalia.content.loader import load_posts
from marginalia.core.contract import Issue, Severity

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AuditReport:
    collection: PostCollection
    issues: list[Issue] = field(default_factory=list)
    duplicates: list[DuplicateGroup] = field(default_factory=list)
    failed: list[Path] = field(default_factory=list)

    @property
    def errors(self) -> list[Issue]:
        return [issue for issue in self.issues if issue.severity == Severity.ERROR]

    @property
    def warnings(self) -> list[Issue]:
        return [issue for issue in self.issues if issue.severity == Severity.WARNING]

    @property
    def ok(self) -> bool:
        return not self.errors


def _duplicate_issues(groups: list[DuplicateGroup], config: MarginaliaConfig) -> list[Issue]:
    issues = []
    for group in groups:
        if group.kind == "slug":
            # Slug collisions are already reported by PostCollection.build.
            continue
        first, *rest = group.posts
        for post in rest:
            if group.diverging:
                message = (
                    f"duplicate of {first.source_path or first.slug} with diverging text "
                    f"(similarity {group.similarity:.2f})"
                )
                severity = Severity.ERROR if config.audit.fail_on_diverging else Severity.WARNING
            else:
                message = f"duplicate of {first.source_path or first.slug}"
                severity = Severity.WARNING
            issues.append(Issue(post.source_path, "title", severity, message))
    return issues


def _link_issues(collection: PostCollection) -> list[Issue]:
    issues = [
        Issue(
            broken.source.source_path,
            None,
            Severity.ERROR,
            f"line {broken.link.line}: link to unknown post '{broken.target}'",
        )
        for broken in collection.broken_links()
    ]
    issues.extend(
        Issue(
            draft.source.source_path,
            None,
            Severity.WARNING,
            f"line {draft.link.line}: link to draft '{draft.target.slug}'",
        )
        for draft in collection.draft_links()
    )
    return issues


def run_audit(config: MarginaliaConfig, content_dir: Path | None = None) -> AuditReport:
    """Load every post and run all checks.

    Raises:
        ContentDirectoryError: If the content directory does not exist.

    """
    directory = content_dir or config.paths.abs_content_dir
    loaded = load_posts(directory, config=config)
    duplicates = find_duplicates(loaded.posts, threshold=config.audit.similarity_threshold)
    collection, slug_issues = PostCollection.build(loaded.posts, posts_prefix=config.site.posts_prefix)

    issues = [*loaded.issues, *slug_issues, *_duplicate_issues(duplicates, config), *_link_issues(collection)]
    report = AuditReport(collection=collection, issues=issues, duplicates=duplicates, failed=loaded.failed)
    logger.info(
        "Checked %d posts: %d errors, %d warnings",
        len(loaded.posts) + len(loaded.failed),
        len(report.errors),
        len(report.warnings),
    )
    return report


__all__ = ["AuditReport", "run_audit"]
