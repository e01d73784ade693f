"""Entry point: python -m lintcheck [--pattern GLOB] [--config FILE] [--token TOKEN]

Inside GitHub Actions every option defaults to the matching action input.
"""
from __future__ import annotations

import argparse
import sys
from collections.abc import Mapping, Sequence

from . import __version__
from .core.models import ActionInputs
from .pipeline import Pipeline, validate_inputs
from .reporters.checks import CheckRunReporter, GitHubChecksClient
from .runtimes.github.context import GitHubActionsAdapter, set_failed


def build_parser(adapter: GitHubActionsAdapter) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lintcheck",
        description="Lint files and report the findings as a GitHub check run",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--pattern",
        default=adapter.get_input("pattern"),
        help="Glob pattern selecting the files to lint (input: pattern)",
    )
    parser.add_argument(
        "--config",
        default=adapter.get_input("config-file") or None,
        help="Base rule configuration file (input: config-file)",
    )
    parser.add_argument(
        "--token",
        default=adapter.get_input("token"),
        help="Token for the GitHub check-runs API (input: token)",
    )
    parser.add_argument(
        "--keep-running-on-error",
        action="store_true",
        default=adapter.get_boolean_input("keep-running-on-error"),
        help="Leave the check run in progress instead of failing it when linting aborts",
    )
    return parser


def main(argv: Sequence[str] | None = None, environ: Mapping[str, str] | None = None) -> int:
    adapter = GitHubActionsAdapter(environ)
    args = build_parser(adapter).parse_args(argv)

    inputs = ActionInputs(
        pattern=args.pattern.strip(),
        token=args.token.strip(),
        config_file=args.config or None,
        keep_running_on_error=args.keep_running_on_error,
    )

    try:
        validate_inputs(inputs)
        context = adapter.repository_context()
        with GitHubChecksClient(inputs.token, context.api_url) as client:
            result = Pipeline(CheckRunReporter(client)).run(inputs, context)
    except Exception as e:
        set_failed(str(e) or type(e).__name__)
        return 1

    verdict = result.verdict
    print(
        f"[summary] files={result.files_scanned} errors={verdict.error_count} "
        f"warnings={verdict.warning_count} conclusion={verdict.conclusion}",
        file=sys.stderr,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
