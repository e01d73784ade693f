from __future__ import annotations

from collections.abc import Iterable

from .models import Annotation, AnnotationLevel, RuleFailure


def severity_to_level(severity: str) -> AnnotationLevel:
    """Map an engine severity to a check-run annotation level.

    Unknown and engine-specific severities become "notice" so no finding is dropped.
    """
    if severity == "warning":
        return "warning"
    if severity == "error":
        return "failure"
    return "notice"


def to_annotation(failure: RuleFailure) -> Annotation:
    return Annotation(
        path=failure.file_name,
        start_line=failure.start.line,
        end_line=failure.end.line,
        annotation_level=severity_to_level(failure.rule_severity),
        message=f"[{failure.rule_name}] {failure.failure}",
    )


def to_annotations(failures: Iterable[RuleFailure]) -> list[Annotation]:
    return [to_annotation(f) for f in failures]
