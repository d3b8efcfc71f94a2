from __future__ import annotations

import pytest

from readme_generator.core.composer import (
    compose_improve_prompt,
    compose_readme_prompt,
    compose_score_prompt,
    compose_section_prompt,
    section_instructions,
)
from readme_generator.llm.prompts import PromptTemplates
from readme_generator.schemas import (
    FileEntry,
    GenerationOptions,
    ReadmeStyle,
    RepoInfo,
    RepositoryContext,
    SectionToggles,
)


@pytest.fixture
def context() -> RepositoryContext:
    return RepositoryContext(
        owner="octocat",
        name="Hello-World",
        description="My first repository on GitHub!",
        language="JavaScript",
        languages=("JavaScript", "CSS"),
        license="MIT License",
        stars=42,
        forks=7,
        url="https://github.com/octocat/Hello-World",
        file_tree=(FileEntry(name="src", type="dir"), FileEntry(name="package.json")),
        dependencies=("express", "jest"),
        manifests=("package.json",),
    )


def test_readme_prompt_carries_repository_facts(context: RepositoryContext) -> None:
    prompt = compose_readme_prompt(context)

    assert "**Repository:** Hello-World" in prompt.user
    assert "**Owner:** octocat" in prompt.user
    assert "**All Languages:** JavaScript, CSS" in prompt.user
    assert "📁 src" in prompt.user
    assert "📄 package.json" in prompt.user
    assert "express, jest" in prompt.user
    assert "npm/yarn (Node.js)" in prompt.user


def test_defaults_request_every_section(context: RepositoryContext) -> None:
    prompt = compose_readme_prompt(context)

    assert PromptTemplates.STYLE_DETAILED in prompt.system
    assert "1. A catchy project title with an emoji" in prompt.system
    assert "Contributing guidelines" in prompt.system
    assert "10. " in prompt.system


def test_disabled_sections_are_absent(context: RepositoryContext) -> None:
    options = GenerationOptions(style=ReadmeStyle.MINIMAL, sections=SectionToggles(contributing=False, badges=False))

    prompt = compose_readme_prompt(context, options)

    assert PromptTemplates.STYLE_MINIMAL in prompt.system
    assert "Contributing guidelines" not in prompt.system
    assert "Badges (" not in prompt.system
    assert "License" in prompt.system


def test_no_sections_keeps_title_and_description() -> None:
    text = section_instructions(GenerationOptions(sections=SectionToggles.select_none()))
    assert text.splitlines() == [
        "1. A catchy project title with an emoji",
        "2. A compelling description of what the project does",
    ]


def test_unknown_style_falls_back_to_detailed() -> None:
    options = GenerationOptions.model_validate({"style": "fancy"})
    assert options.style == ReadmeStyle.DETAILED


def test_empty_context_uses_placeholders() -> None:
    prompt = compose_readme_prompt(RepositoryContext(owner="o", name="n"))

    assert "**File Structure:**\nNot available" in prompt.user
    assert "**Dependencies/Packages:** Not available" in prompt.user
    assert "None detected" in prompt.user


def test_section_prompt_includes_instruction() -> None:
    info = RepoInfo(name="Hello-World", owner="octocat", description="demo", language="JavaScript")

    prompt = compose_section_prompt("Usage", "## Usage\nold", info, "Add a curl example")

    assert prompt.system is None
    assert 'Regenerate ONLY the "Usage" section' in prompt.user
    assert "## Usage\nold" in prompt.user
    assert "**User instruction:** Add a curl example" in prompt.user


def test_section_prompt_without_content() -> None:
    prompt = compose_section_prompt("Usage", "", RepoInfo(name="x"))
    assert "No existing content" in prompt.user
    assert "User instruction" not in prompt.user


def test_score_and_improve_prompts() -> None:
    score = compose_score_prompt("# Title", "Hello-World")
    assert score.system == PromptTemplates.SCORE_SYSTEM
    assert 'Score this README for "Hello-World"' in score.user

    improve = compose_improve_prompt("# Title")
    assert improve.user.endswith("# Title")


def test_presets_are_case_insensitive() -> None:
    options = GenerationOptions.from_preset("cli tool")
    assert options.style == ReadmeStyle.MINIMAL
    assert not options.sections.contributing

    with pytest.raises(ValueError):
        GenerationOptions.from_preset("Haskell")
