from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

AnnotationLevel = Literal["notice", "warning", "failure"]
Conclusion = Literal["success", "failure"]


@dataclass(frozen=True)
class ActionInputs:
    pattern: str
    token: str
    config_file: str | None = None
    keep_running_on_error: bool = False


@dataclass(frozen=True)
class RepositoryContext:
    owner: str
    repo: str
    sha: str
    api_url: str = "https://api.github.com"


@dataclass(frozen=True)
class Position:
    """Zero-based line and character of a point in a source file."""
    line: int
    character: int


@dataclass(frozen=True)
class RuleFailure:
    file_name: str
    start: Position
    end: Position
    rule_name: str
    rule_severity: str
    failure: str


@dataclass(frozen=True)
class LintResult:
    """Accumulated engine output: failures in production order plus counters."""
    failures: tuple[RuleFailure, ...] = ()
    error_count: int = 0
    warning_count: int = 0


@dataclass(frozen=True)
class Annotation:
    path: str
    start_line: int
    end_line: int
    annotation_level: AnnotationLevel
    message: str

    def to_payload(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "start_line": self.start_line,
            "end_line": self.end_line,
            "annotation_level": self.annotation_level,
            "message": self.message,
        }


@dataclass(frozen=True)
class Verdict:
    error_count: int
    warning_count: int
    conclusion: Conclusion

    @property
    def summary(self) -> str:
        return f"{self.error_count} error(s), {self.warning_count} warning(s) found"


@dataclass(frozen=True)
class CheckRunHandle:
    id: int


@dataclass
class PipelineResult:
    verdict: Verdict
    annotations: list[Annotation] = field(default_factory=list)
    files_scanned: int = 0
