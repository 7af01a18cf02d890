"""Disposition of consistency findings."""

from typing import Sequence

from ..exceptions import ConsistencyViolationError
from ..logging_config import logger
from .models import Finding, OnFailure


def format_findings(findings: Sequence[Finding]) -> str:
    return "\n\n".join(str(finding) for finding in findings)


def enforce_policy(findings: Sequence[Finding], on_failure: OnFailure | str) -> list[Finding]:
    """Apply the failure policy to all findings of a run at once.

    Args:
        findings: Findings of every check
        on_failure: ``FAIL`` raises with all findings in one message,
            ``WARN`` logs each finding, ``IGNORE`` does nothing

    Returns:
        The findings, when the policy lets the run continue.

    Raises:
        ConsistencyViolationError: Under ``FAIL`` when there are findings
    """
    policy = OnFailure.of(on_failure)
    findings = list(findings)
    if not findings:
        return findings

    if policy is OnFailure.FAIL:
        raise ConsistencyViolationError(
            f"{len(findings)} consistency check(s) failed:\n\n{format_findings(findings)}",
            findings=findings,
        )
    if policy is OnFailure.WARN:
        for finding in findings:
            logger.warning(str(finding))
    return findings
