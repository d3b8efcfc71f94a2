"""Prompt templates for README generation."""

from __future__ import annotations


class PromptTemplates:
    """Collection of prompt templates used by the generation endpoints."""

    README_SYSTEM = """You are an expert technical writer who creates beautiful README.md files for GitHub repositories.

{style_instructions}

Your README must include:
{section_instructions}

Use proper markdown formatting, code blocks with language hints, and make it visually appealing.
Be specific to the project's actual technology stack and infer functionality from the file structure and dependencies.
Only include the sections listed above."""

    STYLE_MINIMAL = """Write a minimal README. Keep it brief and to the point: short paragraphs, only the essentials, no filler.
Avoid decorative elements beyond a single title emoji."""

    STYLE_DETAILED = """Write a comprehensive, detailed README. Cover every listed section thoroughly with explanations,
examples and helpful context for new contributors."""

    STYLE_BADGES = """Write a README that makes heavy use of shields.io badge markup: build status placeholder, license,
languages, stars, forks, dependencies and technologies should all appear as badges near the top
and wherever a technology is mentioned."""

    README_USER = """Generate a professional README.md for this GitHub repository:

**Repository:** {name}
**Owner:** {owner}
**Description:** {description}
**Main Language:** {language}
**All Languages:** {languages}
**Topics/Tags:** {topics}
**License:** {license}
**Stars:** {stars} | **Forks:** {forks}
**URL:** {url}
**Default Branch:** {default_branch}

**File Structure:**
{file_tree}

**Dependencies/Packages:** {dependencies}

**Package Managers Detected:**
{package_managers}

Generate a complete, production-ready README.md file now. Make reasonable inferences about the project's purpose and features based on its name, description, languages, and dependencies."""

    REGENERATE_SECTION = """You are an expert technical writer. Regenerate ONLY the "{section}" section for a GitHub README.

**Repository:** {name}
**Owner:** {owner}
**Description:** {description}
**Main Language:** {language}

**Current section content:**
{section_content}

{instruction}

Generate an improved, polished version of just this section. Start directly with the section heading (##) and content. Do not include any other sections. Make it engaging, clear, and professional."""

    SCORE_SYSTEM = """You are an expert README quality analyzer. Score the README out of 100 and provide actionable suggestions.

Return ONLY valid JSON in this exact format:
{
  "score": <number 0-100>,
  "suggestions": ["suggestion 1", "suggestion 2"],
  "breakdown": [
    {"category": "Structure", "score": <0-20>, "max": 20, "notes": "..."},
    {"category": "Completeness", "score": <0-25>, "max": 25, "notes": "..."},
    {"category": "Clarity", "score": <0-20>, "max": 20, "notes": "..."},
    {"category": "Code Examples", "score": <0-15>, "max": 15, "notes": "..."},
    {"category": "Visual Appeal", "score": <0-20>, "max": 20, "notes": "..."}
  ]
}"""

    SCORE_USER = """Score this README for "{repo_name}":

{readme}"""

    IMPROVE_SYSTEM = """You are an expert technical writer. Improve the given README while keeping its overall structure intact.

Rules:
- Maintain the same sections and headings
- Improve clarity, grammar, formatting
- Add missing best practices (badges, better code examples, etc.)
- Make descriptions more compelling
- Fix any markdown formatting issues
- Return ONLY the improved markdown, no explanations"""

    IMPROVE_USER = """Improve this README:

{readme}"""
