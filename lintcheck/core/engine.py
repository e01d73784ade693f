from __future__ import annotations

import re
from bisect import bisect_right

from ..errors import EngineError
from .configuration import LintConfiguration
from .models import LintResult, Position, RuleFailure


class Linter:
    """Pattern-based lint engine.

    Each enabled rule is a regular expression matched against the whole file
    with ``re.MULTILINE``; every match becomes one RuleFailure.
    """

    def __init__(self) -> None:
        self._compiled: dict[str, re.Pattern[str]] = {}

    def lint(
        self,
        file_name: str,
        source: str,
        configuration: LintConfiguration,
        result: LintResult,
    ) -> LintResult:
        """Lint one file and return the accumulator extended with its failures."""
        if configuration.is_excluded(file_name):
            return result

        line_starts = _line_starts(source)
        # The empty line after a trailing newline is not part of the file.
        eof = len(source) if source.endswith("\n") else -1
        found: list[tuple[int, str, RuleFailure]] = []

        for name, rule in configuration.enabled_rules().items():
            regex = self._compile(name, rule.pattern)
            message = rule.message or f"Pattern {rule.pattern!r} matched"
            for match in regex.finditer(source):
                if match.start() == match.end() == eof:
                    continue
                found.append((match.start(), name, RuleFailure(
                    file_name=file_name,
                    start=_position(line_starts, match.start()),
                    end=_position(line_starts, match.end()),
                    rule_name=name,
                    rule_severity=rule.severity,
                    failure=message,
                )))

        found.sort(key=lambda item: (item[0], item[1]))
        failures = [failure for _, _, failure in found]

        return LintResult(
            failures=(*result.failures, *failures),
            error_count=result.error_count + sum(1 for f in failures if f.rule_severity == "error"),
            warning_count=result.warning_count + sum(1 for f in failures if f.rule_severity == "warning"),
        )

    def _compile(self, name: str, pattern: str) -> re.Pattern[str]:
        compiled = self._compiled.get(pattern)
        if compiled is None:
            try:
                compiled = re.compile(pattern, re.MULTILINE)
            except re.error as e:
                raise EngineError(f"rule '{name}': invalid pattern {pattern!r}: {e}") from e
            self._compiled[pattern] = compiled
        return compiled


def _line_starts(source: str) -> list[int]:
    """Offsets at which each line of ``source`` begins."""
    starts = [0]
    for i, ch in enumerate(source):
        if ch == "\n":
            starts.append(i + 1)
    return starts


def _position(line_starts: list[int], offset: int) -> Position:
    line = bisect_right(line_starts, offset) - 1
    return Position(line=line, character=offset - line_starts[line])
