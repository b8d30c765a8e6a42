import logging
import threading
from pathlib import Path
from typing import Dict, List, Optional, Pattern, Union

from contentcheck.schemas.report import FileReport, Report, ValidationError
from contentcheck.services.cross_links import resolve_cross_links
from contentcheck.services.post_loader import list_content_files, load_all
from contentcheck.services.post_validator import validate
from contentcheck.settings import settings

logger = logging.getLogger(__name__)


def check_corpus(
    root_dir: Union[str, Path],
    *,
    separator: Union[str, Pattern, None] = None,
    max_workers: Optional[int] = None,
    cancel_event: Optional[threading.Event] = None,
    file_glob: Optional[str] = None,
) -> Report:
    """Load, validate and cross-link the whole corpus into one report."""
    root = Path(root_dir)
    posts, load_errors = load_all(
        root,
        separator=separator,
        max_workers=max_workers,
        cancel_event=cancel_event,
        file_glob=file_glob,
    )

    issues: List[ValidationError] = list(load_errors)
    for post in posts:
        issues.extend(validate(post))

    links, link_warnings = resolve_cross_links(posts)
    issues.extend(link_warnings)

    files: Dict[str, FileReport] = {
        p.relative_to(root).as_posix(): FileReport(source=p.relative_to(root).as_posix())
        for p in list_content_files(root, file_glob or settings.FILE_GLOB)
    }
    for post in posts:
        files.setdefault(post.source, FileReport(source=post.source)).post_count += 1
    for issue in issues:
        file_report = files.setdefault(issue.source, FileReport(source=issue.source))
        if issue.is_hard:
            file_report.errors.append(issue)
        else:
            file_report.warnings.append(issue)

    for file_report in files.values():
        file_report.errors.sort(key=_issue_order)
        file_report.warnings.sort(key=_issue_order)

    report = Report(root=str(root), files=list(files.values()), links=links)
    logger.info(
        f"Checked {report.post_count} posts: "
        f"{report.error_count} errors, {report.warning_count} warnings"
    )
    return report


def _issue_order(issue: ValidationError):
    return (issue.segment if issue.segment is not None else -1, issue.kind.value)


def render_text(report: Report, *, verbose: bool = False) -> str:
    """Human-readable report, one block per file with problems."""
    lines = [f"Content root: {report.root}"]
    for file_report in report.files:
        if not (file_report.errors or file_report.warnings or verbose):
            continue
        lines.append("")
        lines.append(f"{file_report.source} ({_plural(file_report.post_count, 'post')})")
        for issue in file_report.errors + file_report.warnings:
            lines.append(
                f"  {issue.severity.value.upper():7} {issue.kind.value}: "
                f"{issue.location()}: {issue.message}"
            )

    lines.append("")
    lines.append(
        f"{_plural(len(report.files), 'file')}, {_plural(report.post_count, 'post')}, "
        f"{_plural(report.error_count, 'error')}, "
        f"{_plural(report.warning_count, 'warning')}"
    )
    return "\n".join(lines)


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}" if count == 1 else f"{count} {noun}s"
