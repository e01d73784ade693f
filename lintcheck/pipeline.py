from __future__ import annotations

import sys

from .core.configuration import read_configuration_file
from .core.models import ActionInputs, PipelineResult, RepositoryContext
from .core.normalize import to_annotations
from .core.verdict import verdict_for
from .errors import ConfigurationError
from .reporters.checks import CheckRunReporter, render_report_text
from .scanners.files import FileDiscovery
from .scanners.lint import LintRunner


def validate_inputs(inputs: ActionInputs) -> None:
    if not inputs.pattern:
        raise ConfigurationError("lintcheck: Please set pattern input")
    if not inputs.token:
        raise ConfigurationError("lintcheck: Please set token input")


class Pipeline:
    """Open a check run, lint the matched files, and complete the run with the verdict."""

    def __init__(
        self,
        reporter: CheckRunReporter,
        discovery: FileDiscovery | None = None,
        runner: LintRunner | None = None,
    ) -> None:
        self._reporter = reporter
        self._discovery = discovery or FileDiscovery()
        self._runner = runner or LintRunner()

    def run(self, inputs: ActionInputs, context: RepositoryContext) -> PipelineResult:
        validate_inputs(inputs)

        handle = self._reporter.open(context)
        try:
            files = self._discovery.scan(inputs.pattern)
            result = self._runner.run(files, inputs.config_file)

            annotations = to_annotations(result.failures)
            verdict = verdict_for(result)
            base_config = read_configuration_file(inputs.config_file) if inputs.config_file else None

            self._reporter.close(handle, verdict, annotations, render_report_text(base_config))
        except Exception as e:
            if not inputs.keep_running_on_error and not self._reporter.completed:
                try:
                    self._reporter.abort(handle, str(e))
                except Exception as abort_error:
                    print(
                        f"warning: could not mark check run {handle.id} as failed: {abort_error}",
                        file=sys.stderr,
                    )
            raise

        return PipelineResult(verdict=verdict, annotations=annotations, files_scanned=len(files))
