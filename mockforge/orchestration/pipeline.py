"""
Generation pipeline orchestration.

markup/prompt -> screen detection -> prompt composition -> single-shot
completion -> extraction and repair -> file map. Whatever happens to the
remote call, the pipeline returns a valid project unless the caller disabled
the local template fallback.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable

from ..agents.base import CompletionAgent, CompletionResponse
from ..core.config import Config, get_config
from ..core.exceptions import CompletionErrorKind, GenerationError
from ..core.logging import bind_context, clear_context, get_logger
from ..models.generation import (
    ExtractionReport,
    GenerationCapabilities,
    GenerationRequest,
    GenerationResult,
    GenerationSource,
)
from ..models.screens import ScreenDetectionResult
from ..services.detection import ScreenDetector
from ..services.extraction import CodeExtractor, looks_like_project
from ..services.prompting import PromptComposer
from ..services.repair import CodeRepairEngine
from ..services.scaffold import FlutterTemplateGenerator
from ..storage import StorageBackend

logger = get_logger(__name__)

# Platform files the generated output must never overwrite
PROTECTED_PATHS: frozenset[str] = frozenset({
    "android/app/src/main/AndroidManifest.xml",
    "android/gradle.properties",
    "android/settings.gradle",
    "android/build.gradle",
    "android/app/build.gradle",
    "ios/Runner/Info.plist",
    "ios/Runner/AppDelegate.swift",
    ".metadata",
    ".gitignore",
})
MANDATORY_FILES: tuple[str, ...] = ("pubspec.yaml", "lib/main.dart")


def drop_protected(files: dict[str, str], protected: Iterable[str] = PROTECTED_PATHS) -> tuple[dict[str, str], list[str]]:
    """Split protected paths off a file map.

    Returns:
        The remaining files and the dropped paths.
    """
    protected = frozenset(protected)
    kept = {path: content for path, content in files.items() if path not in protected}
    return kept, [path for path in files if path in protected]


class GenerationPipeline:
    """Orchestrates one generation run."""

    def __init__(
        self,
        config: Config | None = None,
        agent: CompletionAgent | None = None,
        detector: ScreenDetector | None = None,
        composer: PromptComposer | None = None,
        scaffold: FlutterTemplateGenerator | None = None,
        extractor: CodeExtractor | None = None,
    ) -> None:
        """Initialize the pipeline; every collaborator can be injected."""
        self.config = config or get_config()
        self.detector = detector or ScreenDetector()
        self.composer = composer or PromptComposer()
        self.scaffold = scaffold or FlutterTemplateGenerator()
        self._agent = agent
        self._extractor = extractor

    @property
    def agent(self) -> CompletionAgent:
        if self._agent is None:
            self._agent = CompletionAgent(self.config.agent, api_key=self.config.api_key_for())
        return self._agent

    def extractor_for(self, app_name: str) -> CodeExtractor:
        """Extractor whose repair engine treats the app's own package as project-internal."""
        if self._extractor is not None:
            return self._extractor
        packages = [*self.config.generation.project_packages, app_name]
        return CodeExtractor(repairer=CodeRepairEngine(project_packages=packages))

    async def run(
        self,
        request: GenerationRequest,
        capabilities: GenerationCapabilities | None = None,
    ) -> GenerationResult:
        """Run the pipeline.

        Args:
            request: What to generate.
            capabilities: Whether remote generation and the local fallback may be
                used. Derived from configuration when omitted.

        Returns:
            GenerationResult with the final file map.

        Raises:
            GenerationError: If remote generation produced nothing and the
                fallback is disabled.
        """
        capabilities = capabilities or self.config.capabilities()
        run_id = uuid.uuid4().hex[:12]
        bind_context(run_id=run_id, app_name=request.app_name)
        try:
            return await self._run(request, capabilities)
        finally:
            clear_context()

    async def _run(self, request: GenerationRequest, capabilities: GenerationCapabilities) -> GenerationResult:
        detection = self.detector.detect_screens(request.markup) if request.markup else None
        warnings: list[str] = []
        error_kind: CompletionErrorKind | None = None
        report = ExtractionReport()

        if capabilities.remote_generation:
            prompt = self.composer.compose(request, detection)
            response = await self.agent.complete(prompt.system, prompt.user)
            report, error_kind, warning = self._recover(response, request.app_name)
            if warning:
                warnings.append(warning)
        else:
            warnings.append("Remote generation disabled")
            logger.info("Remote generation disabled, using local templates")

        if report.files:
            files, source = report.files, GenerationSource.REMOTE
            warnings.extend(f"Duplicate path in reply: {path}" for path in report.duplicates)
        elif capabilities.fallback_enabled:
            files, source = self._fallback(request, detection), GenerationSource.FALLBACK
        else:
            reason = warnings[-1] if warnings else "no files recovered"
            raise GenerationError(
                message=f"Remote generation produced no project and the template fallback is disabled: {reason}",
                context={"app_name": request.app_name},
                stage="generate",
                error_kind=error_kind,
            )

        files, dropped = drop_protected(files)
        if dropped:
            logger.warning("Protected platform files dropped", paths=dropped)
            warnings.extend(f"Protected file ignored: {path}" for path in dropped)

        if source is GenerationSource.REMOTE:
            missing = [path for path in MANDATORY_FILES if path not in files]
            if missing:
                template = self._fallback(request, detection)
                for path in missing:
                    files[path] = template[path]
                warnings.append(f"Added missing files from templates: {', '.join(missing)}")

        logger.info("Generation finished", source=source.value, files=len(files), warnings=len(warnings))
        return GenerationResult(
            files=files,
            source=source,
            detection=detection,
            strategy=report.strategy,
            warnings=warnings,
            error_kind=error_kind.value if error_kind else None,
        )

    def _recover(
        self,
        response: CompletionResponse,
        app_name: str,
    ) -> tuple[ExtractionReport, CompletionErrorKind | None, str | None]:
        if not response.success:
            kind = response.error_kind or CompletionErrorKind.OTHER
            return ExtractionReport(), kind, f"Generative service failed ({kind.value}): {response.error}"

        if not looks_like_project(response.text, self.config.generation.min_reply_chars):
            logger.warning("Reply failed the sanity check", reply_chars=len(response.text))
            return ExtractionReport(), None, "Reply did not look like a project"

        report = self.extractor_for(app_name).extract_with_report(response.text)
        if report.empty:
            return report, None, "No files could be extracted from the reply"
        return report, None, None

    def _fallback(self, request: GenerationRequest, detection: ScreenDetectionResult | None) -> dict[str, str]:
        palette = self.detector.extract_colors(request.markup) if request.markup else None
        return self.scaffold.generate(request.app_name, detection=detection, prompt=request.prompt, palette=palette)

    async def write(self, result: GenerationResult, storage: StorageBackend, prefix: str = "") -> list[str]:
        """Persist a result's files.

        Args:
            result: Pipeline result.
            storage: Destination backend.
            prefix: Key prefix (e.g. the app name).

        Returns:
            Storage keys written, in file order.
        """
        keys = await storage.store_files(result.files, prefix)
        logger.info("Project written", files=len(keys), prefix=prefix or None)
        return keys


async def generate_project(
    markup: str | None = None,
    prompt: str | None = None,
    app_name: str = "flutter_app",
    instructions: str = "",
    capabilities: GenerationCapabilities | None = None,
    config: Config | None = None,
) -> GenerationResult:
    """Convenience entry point building the request and running the pipeline."""
    request = GenerationRequest(markup=markup, prompt=prompt, app_name=app_name, instructions=instructions)
    return await GenerationPipeline(config=config).run(request, capabilities)
