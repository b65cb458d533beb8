"""
Screen Detection Service.

Recovers a structured model of screens from diagram-tool mockup markup. The
markup has no enforced schema, so detection is purely substring and regex
driven: malformed input can only cause missed matches, never a failure.
"""

from __future__ import annotations

import html
import re
from collections.abc import Iterable, Sequence

from ...core.logging import get_logger
from ...models.screens import (
    RadioGroup,
    RadioOption,
    ScreenDetectionResult,
    ScreenSection,
    ThemePalette,
)
from .vocabulary import (
    BUTTON_INDICATORS,
    DEVICE_FRAME_PATTERN,
    ELLIPSE_PATTERN,
    FIELD_INDICATORS,
    IMPORTANT_TEXTS,
    NOISE_FRAGMENTS,
    PLACEHOLDER_TEXTS,
    PROJECT_CONTENT,
    REGISTER_CONTENT,
    SCREEN_FAMILIES,
    ContentFamily,
    RadioVocabulary,
    ScreenFamily,
)

logger = get_logger(__name__)

_DEVICE_FRAME_RE = re.compile(DEVICE_FRAME_PATTERN)
_ELLIPSE_RE = re.compile(ELLIPSE_PATTERN)
_HEX_COLOR_RE = re.compile(r"#[0-9A-Fa-f]{6}\b")
_TEXT_PATTERNS = (
    re.compile(r'value="([^"]*)"[^>]*>'),
    re.compile(r"value='([^']*)'[^>]*>"),
    re.compile(r">\s*([^<>\n]{2,50}?)\s*<"),
)
_BORDERED_VALUE_RE = re.compile(r'strokeColor="[^"]*"[^>]*value="([^"]*)"')
_TAG_RE = re.compile(r"<[^>]*>")
_NUMERIC_RE = re.compile(r"^[\d\s\-+()]+$")
_HEX_LITERAL_RE = re.compile(r"^#?[0-9A-Fa-f]{6,8}$")
_MASK_RE = re.compile(r"^[*]+$")
_SELECTED_SIGNATURE_RE = re.compile(
    r"fillColor=[\"']?#ffffff\b[^<>]{0,400}?strokeColor=[\"']?#0057D8\b"
    r"|strokeColor=[\"']?#0057D8\b[^<>]{0,400}?fillColor=[\"']?#ffffff\b",
    re.IGNORECASE,
)
_SELECTION_LOOKBEHIND = 800


def _dedupe(items: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    result: list[str] = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result


def normalize_title(raw: str) -> str:
    """Turn a free-form label into a screen title.

    Args:
        raw: Label such as "create a project" or "Main".

    Returns:
        PascalCase title with a single trailing "Screen", e.g. "CreateAProjectScreen".
    """
    words = re.findall(r"[A-Za-z0-9]+", raw)
    pascal = "".join(w[0].upper() + w[1:] for w in words)
    if pascal.endswith("Screen"):
        pascal = pascal[: -len("Screen")]
    return f"{pascal or 'Main'}Screen"


def _describe(base: str, fields: Sequence[str], buttons: Sequence[str], groups: Sequence[RadioGroup]) -> str:
    counts = []
    for count, noun in ((len(fields), "field"), (len(buttons), "button"), (len(groups), "option group")):
        if count:
            counts.append(f"{count} {noun}{'s' if count != 1 else ''}")
    if not counts:
        return base
    return f"{base} with {', '.join(counts)}"


class ScreenDetector:
    """Service for detecting screens in mockup markup.

    Families of screens are recognized from a declarative vocabulary table;
    anything else falls back to generic label recovery.
    """

    def __init__(
        self,
        families: Sequence[ScreenFamily] = SCREEN_FAMILIES,
        register_content: ContentFamily = REGISTER_CONTENT,
        project_content: ContentFamily = PROJECT_CONTENT,
    ) -> None:
        """Initialize the detector.

        Args:
            families: Ordered screen family table.
            register_content: Keywords marking registration content.
            project_content: Keywords marking project content.
        """
        self.families = tuple(families)
        self.register_content = register_content
        self.project_content = project_content

    @property
    def radio_vocabulary(self) -> list[RadioVocabulary]:
        """Every radio vocabulary declared by the families, deduplicated by title."""
        seen: dict[str, RadioVocabulary] = {}
        for family in self.families:
            for vocabulary in family.radio_vocabulary:
                seen.setdefault(vocabulary.title, vocabulary)
        return list(seen.values())

    def detect_screens(self, markup: str | None) -> ScreenDetectionResult:
        """Detect screens in mockup markup.

        Never raises: empty or unusable input yields the zero-value result.

        Args:
            markup: Raw diagram markup.

        Returns:
            ScreenDetectionResult describing the detected screens.
        """
        if not isinstance(markup, str) or not markup.strip():
            return ScreenDetectionResult.empty()

        try:
            return self._detect(markup)
        except Exception as e:
            logger.error("Screen detection failed", error=str(e), markup_chars=len(markup), exc_info=True)
            return ScreenDetectionResult.empty()

    def _detect(self, markup: str) -> ScreenDetectionResult:
        phone_count = self.count_device_frames(markup)
        texts = self.extract_texts(markup)
        colors = self.extract_hex_colors(markup)

        sections: list[ScreenSection] = []
        for family in self.families:
            if family.matches(markup):
                sections.append(self._family_section(family, markup, colors, sections))

        if not sections and phone_count > 0:
            sections.append(self._generic_section("Main", markup, texts, colors, sections))

        if len(sections) == 1 and phone_count > 1:
            sections.append(self._secondary_section(texts, colors, sections))

        has_register = self.register_content.present_in(markup)
        has_project = self.project_content.present_in(markup)
        should_create_drawer = phone_count > 1 or (has_register and has_project) or len(sections) > 1

        result = ScreenDetectionResult(
            phone_count=phone_count,
            has_multiple_screens=phone_count > 1,
            should_create_drawer=should_create_drawer,
            detected_screens=[s.title for s in sections],
            detected_fields=_dedupe(f for s in sections for f in s.fields),
            detected_buttons=_dedupe(b for s in sections for b in s.buttons),
            detected_radio_groups=self.extract_radio_groups(markup),
            all_texts=_dedupe([t for s in sections for t in s.texts] + texts),
            screen_sections=sections,
            has_register_content=has_register,
            has_project_content=has_project,
        )

        logger.info(
            "Screens detected",
            phone_count=phone_count,
            screens=result.detected_screens,
            fields=len(result.detected_fields),
            buttons=len(result.detected_buttons),
            radio_groups=len(result.detected_radio_groups),
            drawer=should_create_drawer,
        )
        return result

    def count_device_frames(self, markup: str) -> int:
        """Count device-frame shapes, a proxy for the number of screens."""
        return len(_DEVICE_FRAME_RE.findall(markup or ""))

    def extract_texts(self, markup: str) -> list[str]:
        """Recover label-like texts from the markup.

        Attribute values and element bodies are collected in source order,
        noise (style fragments, numbers, hex literals, placeholders) is
        dropped, and known important texts present in the markup are appended.

        Args:
            markup: Raw diagram markup.

        Returns:
            Deduplicated texts in discovery order.
        """
        if not markup:
            return []

        found: list[str] = []
        for pattern in _TEXT_PATTERNS:
            for match in pattern.finditer(markup):
                text = self._clean_text(match.group(1))
                if text and self._is_label(text):
                    found.append(text)

        found.extend(t for t in IMPORTANT_TEXTS if t in markup)
        return _dedupe(found)

    @staticmethod
    def _clean_text(raw: str) -> str:
        text = html.unescape(raw)
        text = _TAG_RE.sub(" ", text)
        return " ".join(text.split())

    @staticmethod
    def _is_label(text: str) -> bool:
        if not 0 < len(text) < 100:
            return False
        if text in PLACEHOLDER_TEXTS:
            return False
        if _MASK_RE.match(text) or _NUMERIC_RE.match(text) or _HEX_LITERAL_RE.match(text):
            return False
        lowered = text.lower()
        return not any(fragment in lowered for fragment in NOISE_FRAGMENTS)

    def extract_hex_colors(self, markup: str) -> list[str]:
        """Unique '#RRGGBB' colors in source order."""
        return _dedupe(_HEX_COLOR_RE.findall(markup or ""))

    def extract_colors(self, markup: str) -> ThemePalette:
        """Build a Flutter palette from the first distinct markup colors.

        Args:
            markup: Raw diagram markup.

        Returns:
            ThemePalette with 0xFF-prefixed literals; defaults fill the gaps.
        """
        palette = ThemePalette()
        literals = [f"0xFF{c[1:].upper()}" for c in self.extract_hex_colors(markup)]
        defaults = [palette.primary, palette.secondary, palette.accent]
        chosen = literals[:3] + defaults[len(literals[:3]):]
        return ThemePalette(primary=chosen[0], secondary=chosen[1], accent=chosen[2])

    def extract_radio_groups(self, markup: str) -> list[RadioGroup]:
        """Detect radio groups anywhere in the markup.

        A group exists when the ellipse shape occurs at least twice and at
        least one option of a known radio vocabulary is present.
        """
        if not markup or len(_ELLIPSE_RE.findall(markup)) < 2:
            return []
        groups = (self._radio_group(markup, v) for v in self.radio_vocabulary)
        return [group for group in groups if group is not None]

    def _radio_group(self, markup: str, vocabulary: RadioVocabulary) -> RadioGroup | None:
        if len(_ELLIPSE_RE.findall(markup)) < 2:
            return None

        offsets = {}
        for option in vocabulary.options:
            offset = self._label_offset(markup, option)
            if offset >= 0:
                offsets[option] = offset
        if not offsets:
            return None

        ordered = sorted(offsets.items(), key=lambda item: item[1])
        signatures = [(m.start(), m.end()) for m in _SELECTED_SIGNATURE_RE.finditer(markup)]

        options: list[RadioOption] = []
        selected_taken = False
        previous_end = 0
        for text, offset in ordered:
            start, end = self._element_bounds(markup, offset)
            window_start = max(previous_end, start - _SELECTION_LOOKBEHIND)
            selected = not selected_taken and any(
                (s >= start and e <= end) or (s >= window_start and e <= start)
                for s, e in signatures
            )
            selected_taken = selected_taken or selected
            options.append(RadioOption(text=text, is_selected=selected))
            previous_end = end

        return RadioGroup(title=vocabulary.title, options=tuple(options))

    @staticmethod
    def _label_offset(markup: str, text: str) -> int:
        """Offset of `text` as a whole element label, or -1."""
        labelled = re.search(
            r"(?:value=[\"']|>|&gt;)\s*(" + re.escape(text) + r")\s*(?:[\"'<]|&lt;)",
            markup,
        )
        return labelled.start(1) if labelled else -1

    @staticmethod
    def _element_bounds(markup: str, offset: int) -> tuple[int, int]:
        start = markup.rfind("<", 0, offset)
        end = markup.find(">", offset)
        return (max(start, 0), len(markup) if end == -1 else end + 1)

    def _unique_title(self, raw: str, existing: Sequence[ScreenSection]) -> str:
        title = normalize_title(raw)
        taken = {s.title for s in existing}
        if title not in taken:
            return title
        stem = title[: -len("Screen")]
        index = 2
        while f"{stem}{index}Screen" in taken:
            index += 1
        return f"{stem}{index}Screen"

    def _family_section(
        self,
        family: ScreenFamily,
        markup: str,
        colors: list[str],
        existing: Sequence[ScreenSection],
    ) -> ScreenSection:
        fields = [f for f in family.field_vocabulary if f in markup]
        buttons = [b for b in family.button_vocabulary if b in markup]
        claimed = set(fields) | set(buttons)
        texts = _dedupe(
            [a for a in family.anchor_texts if a in markup and a not in claimed]
            + [t for t in family.text_vocabulary if t in markup]
        )
        groups = [
            group
            for group in (self._radio_group(markup, v) for v in family.radio_vocabulary)
            if group is not None
        ]

        return ScreenSection(
            title=self._unique_title(family.name, existing),
            description=_describe(family.description or family.name, fields, buttons, groups),
            texts=tuple(texts),
            fields=tuple(fields),
            buttons=tuple(buttons),
            radio_groups=tuple(groups),
            colors=tuple(colors),
        )

    def _generic_section(
        self,
        name: str,
        markup: str,
        texts: list[str],
        colors: list[str],
        existing: Sequence[ScreenSection],
    ) -> ScreenSection:
        bordered = [self._clean_text(v) for v in _BORDERED_VALUE_RE.findall(markup)]
        fields = _dedupe(
            [v for v in bordered if v and self._is_label(v) and self._has_indicator(v, FIELD_INDICATORS)]
            + [t for t in texts if self._has_indicator(t, FIELD_INDICATORS)]
        )
        buttons = [t for t in texts if t not in fields and self._has_indicator(t, BUTTON_INDICATORS)]
        groups = self.extract_radio_groups(markup)
        return ScreenSection(
            title=self._unique_title(name, existing),
            description=_describe(f"{name} screen", fields, buttons, groups),
            texts=tuple(texts),
            fields=tuple(fields),
            buttons=tuple(buttons),
            radio_groups=tuple(groups),
            colors=tuple(colors),
        )

    def _secondary_section(
        self,
        texts: list[str],
        colors: list[str],
        existing: Sequence[ScreenSection],
    ) -> ScreenSection:
        claimed = {item for s in existing for item in (*s.texts, *s.fields, *s.buttons)}
        for group in (g for s in existing for g in s.radio_groups):
            claimed.update(o.text for o in group.options)
            claimed.add(group.title)
        leftover = [t for t in texts if t not in claimed and len(t) > 2][:5]
        return ScreenSection(
            title=self._unique_title("Secondary", existing),
            description="Secondary screen",
            texts=tuple(leftover),
            colors=tuple(colors),
        )

    @staticmethod
    def _has_indicator(text: str, indicators: Sequence[str]) -> bool:
        lowered = text.lower()
        return any(indicator in lowered for indicator in indicators)
