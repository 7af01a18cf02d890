"""Check registry for managing consistency checks."""

from typing import Optional

from ..logging_config import logger
from .models import CheckContext, Finding
from .protocol import ConsistencyCheck


class CheckRegistry:
    """
    Registry for managing consistency checks.

    Checks run in registration order and their findings are concatenated.

    Example:
        registry = CheckRegistry()
        registry.register(StaleModuleCheck())
        registry.register(BannedDependencyCheck())

        findings = registry.run_all(context)
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._checks: dict[str, ConsistencyCheck] = {}

    def register(self, check: ConsistencyCheck) -> None:
        """
        Register a check, replacing any check of the same name.

        Args:
            check: Check implementation to register
        """
        self._checks[check.name] = check
        logger.debug(f"Registered check: {check.name}")

    def get(self, name: str) -> Optional[ConsistencyCheck]:
        return self._checks.get(name)

    def run(self, context: CheckContext, check_name: str) -> list[Finding]:
        """
        Run a single check.

        Raises:
            ValueError: If no check of that name is registered
        """
        check = self._checks.get(check_name)
        if check is None:
            available = list(self._checks.keys())
            raise ValueError(f"Check '{check_name}' not found. Available checks: {available}")
        return self._execute(check, context)

    def run_all(self, context: CheckContext) -> list[Finding]:
        """Run every registered check and collect all findings."""
        findings: list[Finding] = []
        for check in self._checks.values():
            findings.extend(self._execute(check, context))
        return findings

    def _execute(self, check: ConsistencyCheck, context: CheckContext) -> list[Finding]:
        logger.debug(f"Running check: {check.name}")
        findings = check.check(context)
        if findings:
            logger.debug(f"Check {check.name} reported {len(findings)} finding(s)")
        return findings

    def list_checks(self) -> list[str]:
        return list(self._checks.keys())

    def clear(self) -> None:
        """Remove all registered checks."""
        self._checks.clear()
