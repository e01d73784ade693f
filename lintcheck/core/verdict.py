from __future__ import annotations

from .models import LintResult, Verdict


def compute_verdict(error_count: int, warning_count: int) -> Verdict:
    """Build the verdict from the engine's own counters.

    The counters are authoritative: they are not recomputed from annotations,
    and the verdict's summary line is rendered from the same values.
    """
    if error_count < 0 or warning_count < 0:
        raise ValueError(f"counts must be >= 0, got errors={error_count} warnings={warning_count}")
    return Verdict(
        error_count=error_count,
        warning_count=warning_count,
        conclusion="failure" if error_count > 0 else "success",
    )


def verdict_for(result: LintResult) -> Verdict:
    return compute_verdict(result.error_count, result.warning_count)
