"""README schemas for documentation generation."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from readme_generator.schemas.base import CamelModel


class ReadmeStyle(str, Enum):
    """Overall writing style for a generated README."""
    MINIMAL = "minimal"
    DETAILED = "detailed"
    BADGES = "badges"


class ReadmeSection(str, Enum):
    """Optional README sections the caller can toggle."""
    FEATURES = "features"
    INSTALLATION = "installation"
    USAGE = "usage"
    TECH_STACK = "techStack"
    PROJECT_STRUCTURE = "projectStructure"
    CONTRIBUTING = "contributing"
    LICENSE = "license"
    BADGES = "badges"


class SectionToggles(CamelModel):
    """Inclusion flag per optional section."""
    features: bool = True
    installation: bool = True
    usage: bool = True
    tech_stack: bool = True
    project_structure: bool = True
    contributing: bool = True
    license: bool = True
    badges: bool = True

    def is_enabled(self, section: ReadmeSection) -> bool:
        return bool(self.to_wire()[section.value])

    def enabled(self) -> list[ReadmeSection]:
        return [section for section in ReadmeSection if self.is_enabled(section)]

    @classmethod
    def select_all(cls) -> SectionToggles:
        return cls.model_validate({section.value: True for section in ReadmeSection})

    @classmethod
    def select_none(cls) -> SectionToggles:
        return cls.model_validate({section.value: False for section in ReadmeSection})


class GenerationOptions(CamelModel):
    """Style and section selection supplied with a generation request."""
    style: ReadmeStyle = ReadmeStyle.DETAILED
    sections: SectionToggles = Field(default_factory=SectionToggles)

    @field_validator("style", mode="before")
    @classmethod
    def _unknown_style(cls, value: Any) -> Any:
        # Unknown styles fall back to the detailed instructions
        if isinstance(value, str) and value not in {s.value for s in ReadmeStyle}:
            return ReadmeStyle.DETAILED
        return value

    @classmethod
    def from_preset(cls, name: str) -> GenerationOptions:
        """Return the options bundled under a template preset name."""
        key = name.strip().lower()
        for preset_name, options in PRESETS.items():
            if preset_name.lower() == key:
                return options.model_copy(deep=True)
        msg = f"Unknown preset: {name}. Available: {', '.join(PRESETS)}"
        raise ValueError(msg)


def _preset(style: ReadmeStyle, *disabled: ReadmeSection) -> GenerationOptions:
    toggles = SectionToggles.select_all().to_wire()
    for section in disabled:
        toggles[section.value] = False
    return GenerationOptions(style=style, sections=SectionToggles.model_validate(toggles))


PRESETS: dict[str, GenerationOptions] = {
    "React": _preset(ReadmeStyle.DETAILED),
    "Python": _preset(ReadmeStyle.BADGES, ReadmeSection.PROJECT_STRUCTURE),
    "CLI Tool": _preset(
        ReadmeStyle.MINIMAL,
        ReadmeSection.TECH_STACK,
        ReadmeSection.PROJECT_STRUCTURE,
        ReadmeSection.CONTRIBUTING,
        ReadmeSection.BADGES,
    ),
    "Library": _preset(ReadmeStyle.BADGES),
    "Docs": _preset(ReadmeStyle.DETAILED, ReadmeSection.TECH_STACK, ReadmeSection.BADGES),
}


class Section(BaseModel):
    """Heading-delimited span of a markdown document.

    Line indices are 0-based and inclusive, and only valid for the exact
    markdown snapshot the section was computed from.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    content: str
    start_line: int
    end_line: int
    level: int = 0  # 0 for the synthetic introduction


class ScoreCategory(BaseModel):
    category: str
    score: float = 0
    max: float = 0
    notes: str = ""


class ScoreResult(BaseModel):
    """README quality score as returned by the model."""
    score: float
    suggestions: list[str] = Field(default_factory=list)
    breakdown: list[ScoreCategory] = Field(default_factory=list)

    @field_validator("score", mode="before")
    @classmethod
    def _clamp(cls, value: Any) -> Any:
        if isinstance(value, (int, float)):
            return min(max(value, 0), 100)
        return value
