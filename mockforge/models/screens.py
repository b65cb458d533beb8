"""
Screen detection data models.

These models describe what the Screen Detector recovers from mockup markup:
the screens laid out in the diagram and the fields, buttons, option groups
and colors found on each of them.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

_FROZEN = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class RadioOption(BaseModel):
    """A single option of a radio group."""

    model_config = _FROZEN

    text: str = Field(description="Option label")
    is_selected: bool = Field(default=False, description="Inferred from the option's styling")


class RadioGroup(BaseModel):
    """A group of mutually exclusive options."""

    model_config = _FROZEN

    title: str = Field(description="Group caption")
    options: tuple[RadioOption, ...] = Field(default=())

    @model_validator(mode="after")
    def _single_selection(self) -> RadioGroup:
        selected = [o.text for o in self.options if o.is_selected]
        if len(selected) > 1:
            raise ValueError(f"radio group '{self.title}' has several selected options: {selected}")
        return self

    @property
    def selected(self) -> RadioOption | None:
        """The selected option, if any."""
        return next((o for o in self.options if o.is_selected), None)


class ScreenSection(BaseModel):
    """One screen recovered from the mockup."""

    model_config = _FROZEN

    title: str = Field(description="PascalCase title ending in 'Screen'")
    description: str = Field(default="")
    texts: tuple[str, ...] = Field(default=())
    fields: tuple[str, ...] = Field(default=(), description="Input field labels")
    buttons: tuple[str, ...] = Field(default=(), description="Button labels")
    radio_groups: tuple[RadioGroup, ...] = Field(default=())
    colors: tuple[str, ...] = Field(default=(), description="Hex colors, '#RRGGBB'")

    @property
    def route(self) -> str:
        """Route segment derived from the title ('DashboardScreen' -> 'dashboard')."""
        name = self.title
        if name.endswith("Screen"):
            name = name[: -len("Screen")]
        return name.lower()


class ThemePalette(BaseModel):
    """Flutter color literals seeded from the mockup."""

    model_config = _FROZEN

    primary: str = Field(default="0xFF0057D8")
    secondary: str = Field(default="0xFF4C9AFF")
    accent: str = Field(default="0xFF2196F3")


class ScreenDetectionResult(BaseModel):
    """Aggregate result of a detection pass."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    phone_count: int = Field(default=0, ge=0, description="Device-frame markers found")
    has_multiple_screens: bool = Field(default=False)
    should_create_drawer: bool = Field(default=False)
    detected_screens: list[str] = Field(default_factory=list)
    detected_fields: list[str] = Field(default_factory=list)
    detected_buttons: list[str] = Field(default_factory=list)
    detected_radio_groups: list[RadioGroup] = Field(default_factory=list)
    all_texts: list[str] = Field(default_factory=list)
    screen_sections: list[ScreenSection] = Field(default_factory=list)
    has_register_content: bool = Field(default=False)
    has_project_content: bool = Field(default=False)

    @classmethod
    def empty(cls) -> ScreenDetectionResult:
        """Zero-value result for empty or unusable markup."""
        return cls()
