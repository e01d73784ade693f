"""End-to-end pipeline behaviour with a scripted engine and an in-memory checks client."""
import pytest

from conftest import FakeChecksClient
from lintcheck.core.models import ActionInputs, LintResult, Position, RuleFailure
from lintcheck.errors import ConfigurationError, EngineError, FileAccessError, TransportError
from lintcheck.pipeline import Pipeline
from lintcheck.reporters.checks import CheckRunReporter
from lintcheck.scanners.lint import LintRunner


class ScriptedEngine:
    """Returns pre-scripted failures per file and counts them like the real engine."""

    def __init__(self, script):
        self.script = script

    def lint(self, file_name, source, configuration, result):
        failures = []
        for rule, severity, message, line in self.script.get(file_name, []):
            failures.append(RuleFailure(
                file_name=file_name,
                start=Position(line, 0),
                end=Position(line, 3),
                rule_name=rule,
                rule_severity=severity,
                failure=message,
            ))
        return LintResult(
            failures=(*result.failures, *failures),
            error_count=result.error_count + sum(f.rule_severity == "error" for f in failures),
            warning_count=result.warning_count + sum(f.rule_severity == "warning" for f in failures),
        )


class ExplodingEngine:
    def lint(self, file_name, source, configuration, result):
        raise EngineError(f"internal failure on {file_name}")


class NullResolver:
    def resolve(self, config_file, file_path):
        return None


def _pipeline(client, engine, tmp_path, monkeypatch, files=("A.ts", "B.ts")):
    for name in files:
        (tmp_path / name).write_text("source\n")
    monkeypatch.chdir(tmp_path)
    return Pipeline(CheckRunReporter(client), runner=LintRunner(engine, NullResolver()))


INPUTS = ActionInputs(pattern="*.ts", token="t0ken")


# --- scenarios ---

def test_error_and_warning_across_two_files(checks_client, repo_context, tmp_path, monkeypatch):
    engine = ScriptedEngine({
        "A.ts": [("no-any", "error", "Unexpected any", 4)],
        "B.ts": [("no-unused", "warning", "x unused", 10)],
    })
    result = _pipeline(checks_client, engine, tmp_path, monkeypatch).run(INPUTS, repo_context)

    assert result.verdict.error_count == 1
    assert result.verdict.warning_count == 1
    assert result.verdict.conclusion == "failure"
    assert len(checks_client.created) == 1
    assert len(checks_client.updated) == 1

    body = checks_client.updated[0][3]
    assert body["conclusion"] == "failure"
    assert body["output"]["summary"] == "1 error(s), 1 warning(s) found"
    assert body["output"]["annotations"] == [
        {"path": "A.ts", "start_line": 4, "end_line": 4, "annotation_level": "failure",
         "message": "[no-any] Unexpected any"},
        {"path": "B.ts", "start_line": 10, "end_line": 10, "annotation_level": "warning",
         "message": "[no-unused] x unused"},
    ]


def test_no_matching_files_is_success(checks_client, repo_context, tmp_path, monkeypatch):
    pipeline = _pipeline(checks_client, ScriptedEngine({}), tmp_path, monkeypatch, files=())
    result = pipeline.run(ActionInputs(pattern="src/**/*.ts", token="t0ken"), repo_context)

    assert result.files_scanned == 0
    body = checks_client.updated[0][3]
    assert body["conclusion"] == "success"
    assert body["output"]["summary"] == "0 error(s), 0 warning(s) found"
    assert body["output"]["annotations"] == []


def test_custom_severity_becomes_uncounted_notice(checks_client, repo_context, tmp_path, monkeypatch):
    engine = ScriptedEngine({"A.ts": [("no-todo", "info", "TODO left", 2)]})
    result = _pipeline(checks_client, engine, tmp_path, monkeypatch).run(INPUTS, repo_context)

    assert result.verdict.conclusion == "success"
    assert result.verdict.summary == "0 error(s), 0 warning(s) found"
    assert [a.annotation_level for a in result.annotations] == ["notice"]


def test_annotation_count_matches_findings(checks_client, repo_context, tmp_path, monkeypatch):
    engine = ScriptedEngine({
        "A.ts": [("r1", "error", "m", 1), ("r2", "warning", "m", 2), ("r3", "hint", "m", 3)],
        "B.ts": [("r4", "warning", "m", 0)],
    })
    result = _pipeline(checks_client, engine, tmp_path, monkeypatch).run(INPUTS, repo_context)

    messages = [a["message"] for a in checks_client.updated[0][3]["output"]["annotations"]]
    assert messages == ["[r1] m", "[r2] m", "[r3] m", "[r4] m"]
    assert len(result.annotations) == 4


def test_report_text_includes_base_config(checks_client, repo_context, tmp_path, monkeypatch):
    pipeline = _pipeline(checks_client, ScriptedEngine({}), tmp_path, monkeypatch)
    (tmp_path / "rules.yaml").write_text("rules:\n  no-any: false\n")
    pipeline.run(ActionInputs(pattern="*.ts", token="t0ken", config_file="rules.yaml"), repo_context)

    text = checks_client.updated[0][3]["output"]["text"]
    assert '"no-any": false' in text


# --- input validation ---

@pytest.mark.parametrize("inputs,missing", [
    (ActionInputs(pattern="", token="t0ken"), "pattern"),
    (ActionInputs(pattern="*.ts", token=""), "token"),
])
def test_missing_input_makes_no_api_calls(checks_client, repo_context, inputs, missing):
    with pytest.raises(ConfigurationError, match=missing):
        Pipeline(CheckRunReporter(checks_client)).run(inputs, repo_context)
    assert checks_client.created == []
    assert checks_client.updated == []


# --- failure paths ---

def test_open_failure_halts_before_linting(repo_context, tmp_path, monkeypatch):
    client = FakeChecksClient(fail_create=True)
    with pytest.raises(TransportError):
        _pipeline(client, ExplodingEngine(), tmp_path, monkeypatch).run(INPUTS, repo_context)
    assert client.updated == []


def test_engine_error_fails_the_check_run(checks_client, repo_context, tmp_path, monkeypatch):
    with pytest.raises(EngineError, match="internal failure"):
        _pipeline(checks_client, ExplodingEngine(), tmp_path, monkeypatch).run(INPUTS, repo_context)

    (body,) = [update[3] for update in checks_client.updated]
    assert body["status"] == "completed"
    assert body["conclusion"] == "failure"
    assert body["output"]["annotations"] == []


def test_keep_running_on_error_leaves_run_open(checks_client, repo_context, tmp_path, monkeypatch):
    inputs = ActionInputs(pattern="*.ts", token="t0ken", keep_running_on_error=True)
    with pytest.raises(EngineError):
        _pipeline(checks_client, ExplodingEngine(), tmp_path, monkeypatch).run(inputs, repo_context)
    assert len(checks_client.created) == 1
    assert checks_client.updated == []


def test_unreadable_file_reports_no_partial_verdict(checks_client, repo_context, tmp_path, monkeypatch):
    class VanishingDiscovery:
        def scan(self, pattern):
            return ["A.ts", "missing.ts"]

    (tmp_path / "A.ts").write_text("source\n")
    monkeypatch.chdir(tmp_path)
    engine = ScriptedEngine({"A.ts": [("no-any", "error", "Unexpected any", 4)]})
    pipeline = Pipeline(
        CheckRunReporter(checks_client),
        discovery=VanishingDiscovery(),
        runner=LintRunner(engine, NullResolver()),
    )

    with pytest.raises(FileAccessError, match="missing.ts"):
        pipeline.run(INPUTS, repo_context)

    (body,) = [update[3] for update in checks_client.updated]
    assert body["conclusion"] == "failure"
    assert body["output"]["annotations"] == []


def test_close_failure_surfaces_without_second_update(repo_context, tmp_path, monkeypatch):
    client = FakeChecksClient(fail_update=True)
    with pytest.raises(TransportError):
        _pipeline(client, ScriptedEngine({}), tmp_path, monkeypatch).run(INPUTS, repo_context)
    assert len(client.updated) == 1


def test_abort_failure_does_not_mask_original_error(repo_context, tmp_path, monkeypatch, capsys):
    client = FakeChecksClient(fail_update=True)
    with pytest.raises(EngineError):
        _pipeline(client, ExplodingEngine(), tmp_path, monkeypatch).run(INPUTS, repo_context)
    assert "could not mark check run 42 as failed" in capsys.readouterr().err
