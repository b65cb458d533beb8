"""
Extraction strategies.

Each strategy recovers (path, content) pairs from a generative reply in its
own way. The engine tries them in order, from strictest to most lenient, and
stops at the first one that yields anything.
"""

from __future__ import annotations

import posixpath
import re
from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from ...core.logging import get_logger
from ...models.generation import ExtractedFile

logger = get_logger(__name__)

FENCE = "```"

# Opening fence with optional language tag, then the body up to the closing fence
_FENCED_BODY = r"```[\w+\-.]*[ \t]*\n?(?P<content>.*?)```"

_LANGUAGE_TAG_RE = re.compile(r"^[\w+\-.]*$")


def normalize_path(raw: str) -> str:
    """Clean a path taken from a reply.

    Args:
        raw: Path text as it appeared, e.g. " `./lib/main.dart` ".

    Returns:
        Normalized relative POSIX path, or "" if nothing usable remains.
    """
    path = raw.strip().strip("`'\"*:").strip()
    path = path.replace("\\", "/")
    while path.startswith("./"):
        path = path[2:]
    path = path.lstrip("/")
    return posixpath.normpath(path) if path else ""


def strip_language_tag(block: str) -> str:
    """Drop a leading language-tag line (e.g. 'dart') from a fenced block body."""
    first, newline, rest = block.partition("\n")
    if newline and _LANGUAGE_TAG_RE.match(first.strip()):
        return rest
    return block


def fenced_blocks(text: str) -> list[str]:
    """Bodies of the fenced blocks in a text, including an unclosed trailing block."""
    parts = text.split(FENCE)
    return [strip_language_tag(parts[i]) for i in range(1, len(parts), 2)]


class ExtractionStrategy(ABC):
    """Base class for file recovery strategies."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique strategy name."""
        ...

    @abstractmethod
    def extract(self, text: str) -> list[ExtractedFile]:
        """Recover files from a reply.

        Args:
            text: The raw reply.

        Returns:
            Recovered files in discovery order; may contain duplicate paths.
        """
        ...


@dataclass(frozen=True)
class MarkerVariant:
    """One spelling of an explicit file-declaration marker."""

    name: str
    pattern: re.Pattern[str]


def _variant(name: str, marker: str, flags: int = 0) -> MarkerVariant:
    return MarkerVariant(name=name, pattern=re.compile(marker + r"\s*" + _FENCED_BODY, re.DOTALL | flags))


DEFAULT_MARKER_VARIANTS: tuple[MarkerVariant, ...] = (
    _variant("bracketed", r"\[FILE:\s*(?P<path>[^\]\n]+?)\s*\]"),
    _variant("line", r"^[ \t#*>-]*FILE:[ \t]*(?P<path>[^\n]+?)[ \t]*\n", re.MULTILINE),
    _variant(
        "banner",
        r"[=═]{10,}\s*(?P<path>[^\n=═]+?\.(?:dart|yaml))\s*[=═]{10,}",
    ),
    _variant(
        "inline",
        r"(?P<path>[A-Za-z0-9_\-/.]+\.(?:dart|yaml))[`*:]*",
    ),
)


class MarkerDelimitedStrategy(ExtractionStrategy):
    """Explicit file marker immediately followed by a fenced block.

    Variants are tried in order; the first variant recovering at least one
    file wins.
    """

    def __init__(self, variants: Sequence[MarkerVariant] = DEFAULT_MARKER_VARIANTS) -> None:
        self.variants = tuple(variants)

    @property
    def name(self) -> str:
        return "marker"

    def extract(self, text: str) -> list[ExtractedFile]:
        for variant in self.variants:
            files = []
            for match in variant.pattern.finditer(text):
                path = normalize_path(match.group("path"))
                if path:
                    files.append(ExtractedFile(path=path, content=match.group("content").strip()))
            if files:
                logger.debug("Marker variant matched", variant=variant.name, files=len(files))
                return files
        return []


class LooseBlockStrategy(ExtractionStrategy):
    """Split on fences and name each code chunk from the prose before it."""

    _MARKER_RE = re.compile(r"\[?\s*\bfile\s*:\s*([^\]\n\r]+)\]?", re.IGNORECASE)

    @property
    def name(self) -> str:
        return "loose"

    def extract(self, text: str) -> list[ExtractedFile]:
        parts = text.split(FENCE)
        files = []
        for i in range(0, len(parts) - 1, 2):
            markers = self._MARKER_RE.findall(parts[i])
            if not markers:
                continue
            path = normalize_path(markers[-1])
            content = strip_language_tag(parts[i + 1]).strip()
            if path and content and not any(c.isspace() for c in path):
                files.append(ExtractedFile(path=path, content=content))
        return files


@dataclass(frozen=True)
class ContentSignature:
    """A content regex identifying a mandatory scaffold file."""

    path: str
    pattern: re.Pattern[str]


DEFAULT_SIGNATURES: tuple[ContentSignature, ...] = (
    ContentSignature(
        "pubspec.yaml",
        re.compile(r"^name:\s*[\w-]+.*?^flutter:\s*\n\s+uses-material-design:\s*true", re.DOTALL | re.MULTILINE),
    ),
    ContentSignature("lib/main.dart", re.compile(r"void\s+main\s*\(\s*\)[^{]*\{.*?runApp\(", re.DOTALL)),
    ContentSignature(
        "lib/app.dart",
        re.compile(r"class\s+MyApp\s+extends\s+StatelessWidget.*?MaterialApp", re.DOTALL),
    ),
    ContentSignature(
        "lib/core/router/app_router.dart",
        re.compile(r"GoRouter.*?initialLocation.*?routes:", re.DOTALL),
    ),
)


class SignatureStrategy(ExtractionStrategy):
    """Recognize mandatory scaffold files by their content.

    Only fenced blocks are searched, and only signature paths whose extension
    is on the allow-list are ever produced.
    """

    def __init__(
        self,
        signatures: Sequence[ContentSignature] = DEFAULT_SIGNATURES,
        allowed_extensions: Iterable[str] = (".dart", ".yaml"),
    ) -> None:
        self.allowed_extensions = frozenset(allowed_extensions)
        self.signatures = tuple(s for s in signatures if self._allowed(s.path))
        rejected = [s.path for s in signatures if not self._allowed(s.path)]
        if rejected:
            logger.warning("Signatures outside the extension allow-list ignored", paths=rejected)

    def _allowed(self, path: str) -> bool:
        return posixpath.splitext(path)[1] in self.allowed_extensions

    @property
    def name(self) -> str:
        return "signature"

    def extract(self, text: str) -> list[ExtractedFile]:
        blocks = fenced_blocks(text)
        files = []
        for signature in self.signatures:
            block = next((b for b in blocks if signature.pattern.search(b)), None)
            if block is not None and block.strip():
                files.append(ExtractedFile(path=signature.path, content=block.strip()))
        return files


def default_strategies() -> list[ExtractionStrategy]:
    """The standard cascade, strictest first."""
    return [MarkerDelimitedStrategy(), LooseBlockStrategy(), SignatureStrategy()]
