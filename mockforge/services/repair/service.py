"""
Code Repair Service.

Applies the ordered fix rules to generated files. Repair is pure and
idempotent: repairing already repaired content changes nothing.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence

from ...core.logging import get_logger
from .rules import FixRule, default_rules

logger = get_logger(__name__)


class CodeRepairEngine:
    """Service for repairing known defects in generated code."""

    def __init__(
        self,
        rules: Sequence[FixRule] | None = None,
        project_packages: Iterable[str] | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            rules: Rule sequence, applied in order. Defaults to the standard rules.
            project_packages: Package names treated as project-internal imports.
        """
        if rules is None:
            rules = default_rules(project_packages) if project_packages is not None else default_rules()
        self.rules = list(rules)

    def repair(self, content: str, path: str) -> str:
        """Repair one file.

        Args:
            content: File content.
            path: Project-relative path; selects which rules apply.

        Returns:
            The repaired content.
        """
        if not content:
            return content

        applied = []
        for rule in self.rules:
            if not rule.applies_to(path):
                continue
            try:
                updated = rule.apply(content, path)
            except Exception as e:
                logger.warning("Repair rule failed, skipping", rule=rule.name, path=path, error=str(e))
                continue
            if updated != content:
                applied.append(rule.name)
                content = updated

        if applied:
            logger.debug("File repaired", path=path, rules=applied)
        return content

    def repair_files(self, files: Mapping[str, str]) -> dict[str, str]:
        """Repair every file of a file map, preserving its order."""
        return {path: self.repair(content, path) for path, content in files.items()}
