"""
Code Extraction Service.

Recovers a path -> content file map from a generative service's free-form
reply. Strategies run in order and the first one yielding files wins; an
empty map is a valid, degraded outcome that callers answer with a fallback.
"""

from __future__ import annotations

from collections.abc import Sequence

from ...core.logging import get_logger
from ...models.generation import ExtractionReport
from ..repair import CodeRepairEngine
from .strategies import ExtractionStrategy, default_strategies

logger = get_logger(__name__)

PROJECT_MARKERS: tuple[str, ...] = ("[FILE:", "pubspec.yaml", "lib/main.dart", "flutter:", "features/")


def looks_like_project(text: str | None, min_chars: int = 100) -> bool:
    """Minimal sanity check on a reply before extraction is attempted.

    Args:
        text: The raw reply.
        min_chars: Replies at or below this length are rejected.

    Returns:
        True if the reply is long enough and mentions a project marker.
    """
    if not text or len(text) <= min_chars:
        return False
    return any(marker in text for marker in PROJECT_MARKERS)


class CodeExtractor:
    """Service for recovering files from generative replies."""

    def __init__(
        self,
        strategies: Sequence[ExtractionStrategy] | None = None,
        repairer: CodeRepairEngine | None = None,
    ) -> None:
        """Initialize the extractor.

        Args:
            strategies: Cascade of strategies, strictest first.
            repairer: Repair engine every recovered file is passed through.
        """
        self.strategies = list(strategies) if strategies is not None else default_strategies()
        self.repairer = repairer or CodeRepairEngine()

    def extract_files(self, text: str | None) -> dict[str, str]:
        """Recover the repaired file map from a reply. Never raises."""
        return self.extract_with_report(text).files

    def extract_with_report(self, text: str | None) -> ExtractionReport:
        """Recover files and report how they were found.

        Args:
            text: The raw reply.

        Returns:
            ExtractionReport with the winning strategy, the repaired files and
            any paths that were recovered more than once.
        """
        if not isinstance(text, str) or not text.strip():
            return ExtractionReport()

        for strategy in self.strategies:
            try:
                recovered = strategy.extract(text)
            except Exception as e:
                logger.warning("Extraction strategy failed", strategy=strategy.name, error=str(e))
                continue
            if not recovered:
                logger.debug("Extraction strategy found nothing", strategy=strategy.name)
                continue

            files: dict[str, str] = {}
            duplicates: list[str] = []
            for item in recovered:
                if item.path in files:
                    # Last write wins
                    logger.warning("Duplicate file path in reply", path=item.path, strategy=strategy.name)
                    if item.path not in duplicates:
                        duplicates.append(item.path)
                files[item.path] = self.repairer.repair(item.content, item.path)

            logger.info("Files extracted", strategy=strategy.name, files=len(files), duplicates=len(duplicates))
            return ExtractionReport(strategy=strategy.name, files=files, duplicates=duplicates)

        logger.warning("No files recovered from reply", reply_chars=len(text))
        return ExtractionReport()
