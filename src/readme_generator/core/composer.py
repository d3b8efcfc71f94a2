"""Prompt composition for every generation endpoint.

All functions here are pure: they turn already-fetched data into a
``ChatPrompt`` and never perform I/O.
"""

from __future__ import annotations

from readme_generator.llm.prompts import PromptTemplates
from readme_generator.schemas import (
    ChatPrompt,
    GenerationOptions,
    ReadmeSection,
    ReadmeStyle,
    RepoInfo,
    RepositoryContext,
)

# Always requested, whatever the section selection
MANDATORY_INSTRUCTIONS = (
    "A catchy project title with an emoji",
    "A compelling description of what the project does",
)

SECTION_INSTRUCTIONS: dict[ReadmeSection, str] = {
    ReadmeSection.BADGES: "Badges (build status placeholder, license, language, stars)",
    ReadmeSection.FEATURES: "Key features (bulleted list with emojis)",
    ReadmeSection.TECH_STACK: "Tech stack with icons/badges",
    ReadmeSection.INSTALLATION: "Prerequisites and step-by-step installation instructions",
    ReadmeSection.USAGE: "Usage examples with code blocks",
    ReadmeSection.PROJECT_STRUCTURE: "Project structure (simplified tree)",
    ReadmeSection.CONTRIBUTING: "Contributing guidelines",
    ReadmeSection.LICENSE: "License",
}

PACKAGE_MANAGERS: dict[str, str] = {
    "package.json": "npm/yarn (Node.js)",
    "requirements.txt": "pip (Python)",
    "Cargo.toml": "Cargo (Rust)",
    "go.mod": "Go modules",
    "pom.xml": "Maven (Java)",
    "build.gradle": "Gradle (JVM)",
    "Gemfile": "Bundler (Ruby)",
    "composer.json": "Composer (PHP)",
}


def style_instructions(style: ReadmeStyle) -> str:
    if style == ReadmeStyle.MINIMAL:
        return PromptTemplates.STYLE_MINIMAL
    if style == ReadmeStyle.BADGES:
        return PromptTemplates.STYLE_BADGES
    return PromptTemplates.STYLE_DETAILED


def section_instructions(options: GenerationOptions) -> str:
    """Numbered instruction list; disabled sections are left out entirely."""
    lines = list(MANDATORY_INSTRUCTIONS)
    for section, instruction in SECTION_INSTRUCTIONS.items():
        if options.sections.is_enabled(section):
            lines.append(instruction)
    return "\n".join(f"{i}. {line}" for i, line in enumerate(lines, start=1))


def render_file_tree(context: RepositoryContext) -> str:
    if not context.file_tree:
        return "Not available"
    return "\n".join(
        f"{'📁' if entry.is_dir else '📄'} {entry.name}" for entry in context.file_tree
    )


def render_package_managers(context: RepositoryContext) -> str:
    detected = [f"- {PACKAGE_MANAGERS[name]}" for name in context.manifests if name in PACKAGE_MANAGERS]
    return "\n".join(detected) or "None detected"


def compose_readme_prompt(context: RepositoryContext, options: GenerationOptions | None = None) -> ChatPrompt:
    """Build the system/user message pair for a full README."""
    options = options or GenerationOptions()
    system = PromptTemplates.README_SYSTEM.format(
        style_instructions=style_instructions(options.style),
        section_instructions=section_instructions(options),
    )
    user = PromptTemplates.README_USER.format(
        name=context.name,
        owner=context.owner,
        description=context.description,
        language=context.language,
        languages=", ".join(context.languages) or "Unknown",
        topics=", ".join(context.topics) or "None",
        license=context.license,
        stars=context.stars,
        forks=context.forks,
        url=context.url,
        default_branch=context.default_branch,
        file_tree=render_file_tree(context),
        dependencies=", ".join(context.dependencies) or "Not available",
        package_managers=render_package_managers(context),
    )
    return ChatPrompt(system=system, user=user)


def compose_section_prompt(
    section: str,
    section_content: str,
    repo_info: RepoInfo,
    instruction: str | None = None,
) -> ChatPrompt:
    user = PromptTemplates.REGENERATE_SECTION.format(
        section=section,
        name=repo_info.name,
        owner=repo_info.owner,
        description=repo_info.description,
        language=repo_info.language,
        section_content=section_content or "No existing content",
        instruction=f"**User instruction:** {instruction}" if instruction else "",
    )
    return ChatPrompt(user=user)


def compose_score_prompt(readme: str, repo_name: str | None = None) -> ChatPrompt:
    return ChatPrompt(
        system=PromptTemplates.SCORE_SYSTEM,
        user=PromptTemplates.SCORE_USER.format(repo_name=repo_name or "a project", readme=readme),
    )


def compose_improve_prompt(readme: str) -> ChatPrompt:
    return ChatPrompt(
        system=PromptTemplates.IMPROVE_SYSTEM,
        user=PromptTemplates.IMPROVE_USER.format(readme=readme),
    )
