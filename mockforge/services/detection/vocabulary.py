"""
Declarative vocabulary for mockup screen detection.

Each screen family is data: adding a family means adding a table entry,
never a new code path in the detector.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class RadioVocabulary:
    """Caption and candidate option labels of a radio group."""

    title: str
    options: tuple[str, ...]


@dataclass(frozen=True)
class ScreenFamily:
    """A named cluster of vocabulary representing one conceptual screen."""

    name: str
    anchor_texts: tuple[str, ...]
    text_vocabulary: tuple[str, ...] = ()
    field_vocabulary: tuple[str, ...] = ()
    button_vocabulary: tuple[str, ...] = ()
    radio_vocabulary: tuple[RadioVocabulary, ...] = ()
    description: str = ""

    def matches(self, markup: str) -> bool:
        return any(anchor in markup for anchor in self.anchor_texts)


@dataclass(frozen=True)
class ContentFamily:
    """Keywords whose presence marks a kind of content (case-insensitive)."""

    name: str
    keywords: tuple[str, ...] = field(default=())

    def present_in(self, markup: str) -> bool:
        lowered = markup.lower()
        return any(keyword.lower() in lowered for keyword in self.keywords)


PERMISSION_OPTIONS = RadioVocabulary(
    title="User access",
    options=("Read and write", "Read only", "None"),
)

SCREEN_FAMILIES: tuple[ScreenFamily, ...] = (
    ScreenFamily(
        name="Dashboard",
        anchor_texts=("Dashboard", "Dasboard"),
        button_vocabulary=("Primary",),
        description="Main dashboard screen",
    ),
    ScreenFamily(
        name="CreateProject",
        anchor_texts=("Create a project", "Project permissions", "Waremelon", "Key", "Description"),
        text_vocabulary=(
            "Create a project",
            "Project permissions",
            "User access",
            "Projects are where your repositories live",
            "What is important for people to know?",
        ),
        field_vocabulary=("Waremelon", "Stash", "Key", "Description", "Proyect"),
        button_vocabulary=("Publish", "Cancel"),
        radio_vocabulary=(PERMISSION_OPTIONS,),
        description="Project creation form",
    ),
    ScreenFamily(
        name="Register",
        anchor_texts=("Register", "Your name"),
        text_vocabulary=("Register",),
        field_vocabulary=("Your name", "Email", "Password"),
        button_vocabulary=("Guardar", "Save"),
        description="User registration form",
    ),
)

REGISTER_CONTENT = ContentFamily(
    name="register",
    keywords=("Register", "Your name", "Password", "Guardar"),
)
PROJECT_CONTENT = ContentFamily(
    name="project",
    keywords=("Create a project", "Project permissions", "Publish", "User access", "Key", "Description"),
)

# Texts always worth keeping when present, even if the generic scan dropped them
IMPORTANT_TEXTS: tuple[str, ...] = (
    "Dashboard",
    "Dasboard",
    "Create a project",
    "Waremelon",
    "Key",
    "Description",
    "Project permissions",
    "User access",
    "Publish",
    "Cancel",
    "Primary",
    "Read and write",
    "Read only",
    "None",
    "BETA",
)

FIELD_INDICATORS: tuple[str, ...] = (
    "name",
    "password",
    "email",
    "key",
    "description",
    "user",
    "input",
    "field",
)
BUTTON_INDICATORS: tuple[str, ...] = (
    "save",
    "submit",
    "publish",
    "cancel",
    "guardar",
    "primary",
    "button",
)

PLACEHOLDER_TEXTS: frozenset[str] = frozenset({"Text", "Button", "Label"})
NOISE_FRAGMENTS: tuple[str, ...] = ("mxgraph", "http", "font", "style=")

DEVICE_FRAME_PATTERN = r"(?:shape=[\"']?)?mxgraph\.android\.phone2\b"
ELLIPSE_PATTERN = r"shape=[\"']?ellipse\b"
