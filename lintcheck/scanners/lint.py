from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from ..core.configuration import ConfigurationResolver, LintConfiguration
from ..core.engine import Linter
from ..core.models import LintResult
from ..errors import FileAccessError


class LintEngine(Protocol):
    def lint(
        self,
        file_name: str,
        source: str,
        configuration: LintConfiguration,
        result: LintResult,
    ) -> LintResult: ...


class ConfigResolver(Protocol):
    def resolve(self, config_file: str | None, file_path: Path) -> LintConfiguration: ...


class LintRunner:
    """Lints each discovered file in order, folding results into one accumulator."""

    name = "lint_runner"

    def __init__(
        self,
        engine: LintEngine | None = None,
        resolver: ConfigResolver | None = None,
    ) -> None:
        self._engine = engine or Linter()
        self._resolver = resolver or ConfigurationResolver()

    def run(self, files: Sequence[str], config_file: str | None = None) -> LintResult:
        result = LintResult()
        for file_name in files:
            source = _read_source(file_name)
            configuration = self._resolver.resolve(config_file, Path(file_name))
            result = self._engine.lint(file_name, source, configuration, result)
        return result


def _read_source(file_name: str) -> str:
    # Read failures abort the run; no file is skipped.
    try:
        return Path(file_name).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise FileAccessError(f"cannot read {file_name}: {e}") from e
