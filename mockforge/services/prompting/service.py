"""
Prompt Composer.

Turns a screen detection result or a free-text description into the system
and user prompts sent to the generative service.
"""

from __future__ import annotations

from dataclasses import dataclass

from ...agents.base import PromptTemplate
from ...core.logging import get_logger
from ...models.generation import GenerationRequest
from ...models.screens import ScreenDetectionResult, ScreenSection
from .enrichment import enrich_prompt

logger = get_logger(__name__)

REQUIRED_FILES: tuple[str, ...] = (
    "pubspec.yaml",
    "lib/main.dart",
    "lib/app.dart",
    "lib/core/router/app_router.dart",
    "lib/core/themes/app_theme.dart",
    "lib/shared/widgets/app_drawer.dart",
)

SYSTEM_PROMPT = """You are a senior Flutter engineer. You write complete, compiling Flutter 3 projects \
using Material 3 and go_router, with clean feature-first structure.

MANDATORY RULES:
- Navigation uses GoRouter through a singleton: `AppRouter().router`. Never write `AppRouter.router`.
- The root widget is `MaterialApp.router(routerConfig: AppRouter().router, ...)`.
- Imports between project files are relative (`import '../widgets/app_drawer.dart';`), never `package:<app>/...`.
- Colors in widgets come from `Theme.of(context).colorScheme` (primary, secondary, surface, onSurface).
- `AppTheme` declares plain `static const Color` seeds and builds its ColorScheme from them; \
no static field may reference itself.
- Only depend on flutter and go_router unless the request names another package.
- Use current widget names: ElevatedButton, TextButton, OutlinedButton."""

OUTPUT_FORMAT = """OUTPUT FORMAT (strict):
Emit every file as a marker line followed by one fenced code block:

[FILE: lib/main.dart]
```dart
// file content
```

Required files: """ + ", ".join(REQUIRED_FILES) + """, plus one file per screen at \
lib/features/<feature>/screens/<feature>_screen.dart. Do not emit android/ or ios/ platform files."""

MARKUP_TEMPLATE = PromptTemplate(
    template_id="flutter_from_mockup",
    version="1.2.0",
    system_prompt=SYSTEM_PROMPT,
    user_prompt_template="""Generate the Flutter app "{app_name}" from this mockup analysis.

DETECTED SCREENS ({screen_count}):
{screens}

NAVIGATION:
{navigation}
{instructions}""",
    output_format_instructions=OUTPUT_FORMAT,
)

DESCRIPTION_TEMPLATE = PromptTemplate(
    template_id="flutter_from_description",
    version="1.1.0",
    system_prompt=SYSTEM_PROMPT,
    user_prompt_template="""Generate the Flutter app "{app_name}" from this description.

DESCRIPTION:
{description}
{instructions}""",
    output_format_instructions=OUTPUT_FORMAT,
)


@dataclass(frozen=True)
class ComposedPrompt:
    """System and user prompts ready to send."""

    system: str
    user: str
    template_id: str
    template_hash: str


def describe_section(index: int, section: ScreenSection) -> str:
    """Format one detected screen for the user prompt."""
    lines = [f"{index}. {section.title}: {section.description}"]
    if section.texts:
        lines.append(f"   Texts: {', '.join(section.texts[:5])}")
    if section.fields:
        lines.append(f"   Input fields: {', '.join(section.fields)}")
    if section.buttons:
        lines.append(f"   Buttons: {', '.join(section.buttons)}")
    for group in section.radio_groups:
        options = ", ".join(f"{o.text} (selected)" if o.is_selected else o.text for o in group.options)
        lines.append(f"   Radio group '{group.title}': {options}")
    if section.colors:
        lines.append(f"   Colors: {', '.join(section.colors[:3])}")
    return "\n".join(lines)


def drawer_routes(sections: list[ScreenSection]) -> list[tuple[str, str]]:
    """(route, screen title) pairs: '/' for the first screen, '/<name>' for the rest."""
    return [("/" if i == 0 else f"/{s.route}", s.title) for i, s in enumerate(sections)]


class PromptComposer:
    """Builds generative service prompts."""

    def system_prompt(self) -> str:
        return SYSTEM_PROMPT

    def compose_from_markup(
        self,
        detection: ScreenDetectionResult,
        app_name: str,
        instructions: str = "",
    ) -> ComposedPrompt:
        """Compose prompts from a screen detection result.

        Args:
            detection: Result of screen detection on the mockup.
            app_name: Dart package name of the app.
            instructions: Extra user instructions appended verbatim.

        Returns:
            ComposedPrompt for the mockup template.
        """
        sections = detection.screen_sections
        screens = "\n".join(describe_section(i, s) for i, s in enumerate(sections, start=1))
        if not screens:
            screens = "No screens recognized; build a single HomeScreen from the mockup texts: " + ", ".join(
                detection.all_texts[:10]
            )

        if detection.should_create_drawer and sections:
            routes = "\n".join(f"- {route} -> {title}" for route, title in drawer_routes(sections))
            navigation = f"Use a Drawer (lib/shared/widgets/app_drawer.dart) on every screen with routes:\n{routes}"
        else:
            navigation = "Single screen at route '/'; the drawer file may stay minimal."

        return self._render(
            MARKUP_TEMPLATE,
            app_name=app_name,
            screen_count=len(sections),
            screens=screens,
            navigation=navigation,
            instructions=self._instructions(instructions),
        )

    def compose_from_prompt(self, prompt: str, app_name: str, instructions: str = "") -> ComposedPrompt:
        """Compose prompts from a natural-language description, enriching it first."""
        return self._render(
            DESCRIPTION_TEMPLATE,
            app_name=app_name,
            description=enrich_prompt(prompt),
            instructions=self._instructions(instructions),
        )

    def compose(self, request: GenerationRequest, detection: ScreenDetectionResult | None) -> ComposedPrompt:
        """Compose prompts for a request; markup wins, a prompt then becomes extra instructions."""
        if detection is not None and request.markup:
            extra = "\n".join(part for part in (request.prompt or "", request.instructions) if part)
            return self.compose_from_markup(detection, request.app_name, extra)
        return self.compose_from_prompt(request.prompt or "", request.app_name, request.instructions)

    @staticmethod
    def _instructions(instructions: str) -> str:
        instructions = (instructions or "").strip()
        return f"\nADDITIONAL INSTRUCTIONS:\n{instructions}\n" if instructions else ""

    @staticmethod
    def _render(template: PromptTemplate, **variables: object) -> ComposedPrompt:
        user = template.render_user(**variables)
        logger.debug("Prompt composed", template=template.template_id, user_prompt_chars=len(user))
        return ComposedPrompt(
            system=template.render_system(),
            user=user,
            template_id=template.template_id,
            template_hash=template.get_hash(),
        )
