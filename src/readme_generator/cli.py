"""Command-line entry points for the README generator."""

from __future__ import annotations

import argparse
import asyncio
import os
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import httpx
from dotenv import load_dotenv
from loguru import logger

from readme_generator.client import ReadmeApiClient, StreamConsumer, generate_many
from readme_generator.config import Settings
from readme_generator.errors import ReadmeGeneratorError
from readme_generator.schemas import PRESETS, GenerationOptions, ReadmeSection, ReadmeStyle, RepoInfo, SectionToggles

# Load environment variables
load_dotenv()

SECTION_NAMES = {section.value.lower(): section for section in ReadmeSection}


def configure_logging(level: str) -> None:
    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format="<level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
    )


def _add_server_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--server",
        default=None,
        help="Base URL of a running service. Without it the app runs in-process.",
    )


def _add_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--preset",
        choices=list(PRESETS),
        type=lambda value: next((p for p in PRESETS if p.lower() == value.lower()), value),
        help="Template preset supplying style and sections.",
    )
    parser.add_argument(
        "--style",
        choices=["minimal", "detailed", "badges"],
        help="README style (overrides the preset style).",
    )
    parser.add_argument(
        "--sections",
        default=None,
        help="Comma-separated sections to include, or 'all' / 'none'.",
    )
    parser.add_argument(
        "--exclude",
        action="append",
        default=[],
        metavar="SECTION",
        help="Leave a section out (repeatable).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="readme-generator",
        description="Generate README files for GitHub repositories.",
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("LOG_LEVEL", "INFO"),
        help="Log level for stderr output.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP service.")
    serve_parser.add_argument("--host", default="0.0.0.0")
    serve_parser.add_argument("--port", type=int, default=8000)

    generate_parser = subparsers.add_parser("generate", help="Stream a README for one repository.")
    generate_parser.add_argument("repo", help="GitHub URL or owner/repo.")
    generate_parser.add_argument("-o", "--output", type=Path, help="Write the README to this file.")
    _add_options(generate_parser)
    _add_server_option(generate_parser)

    bulk_parser = subparsers.add_parser("bulk", help="Generate READMEs for several repositories.")
    bulk_parser.add_argument("repos", nargs="*", help="GitHub URLs or owner/repo.")
    bulk_parser.add_argument("--file", type=Path, help="File with one repository per line.")
    bulk_parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("readmes"),
        help="Directory that receives <owner>-<repo>.md files.",
    )
    _add_options(bulk_parser)
    _add_server_option(bulk_parser)

    score_parser = subparsers.add_parser("score", help="Score an existing README.")
    score_parser.add_argument("readme", type=Path)
    score_parser.add_argument("--repo-name", default=None)
    _add_server_option(score_parser)

    improve_parser = subparsers.add_parser("improve", help="Rewrite an existing README.")
    improve_parser.add_argument("readme", type=Path)
    improve_parser.add_argument("-o", "--output", type=Path)
    _add_server_option(improve_parser)

    return parser


def build_options(
    preset: str | None,
    style: str | None,
    sections: str | None,
    exclude: list[str] | None = None,
) -> GenerationOptions:
    """Combine preset, style and section flags into generation options."""
    options = GenerationOptions.from_preset(preset) if preset else GenerationOptions()
    if style:
        options.style = ReadmeStyle(style)
    if sections:
        value = sections.strip().lower()
        if value == "all":
            options.sections = SectionToggles.select_all()
        elif value == "none":
            options.sections = SectionToggles.select_none()
        else:
            wanted = {s.strip().lower() for s in sections.split(",") if s.strip()}
            unknown = wanted - set(SECTION_NAMES)
            if unknown:
                msg = f"Unknown sections: {', '.join(sorted(unknown))}"
                raise ValueError(msg)
            toggles = {section.value: key in wanted for key, section in SECTION_NAMES.items()}
            options.sections = SectionToggles.model_validate(toggles)
    if exclude:
        toggles = options.sections.to_wire()
        for name in exclude:
            section = SECTION_NAMES.get(name.strip().lower())
            if section is None:
                msg = f"Unknown section: {name}"
                raise ValueError(msg)
            toggles[section.value] = False
        options.sections = SectionToggles.model_validate(toggles)
    return options


@asynccontextmanager
async def _api_client(server: str | None) -> AsyncIterator[ReadmeApiClient]:
    """Connect to a running service, or host the app in-process."""
    if server:
        async with ReadmeApiClient(server) as api:
            yield api
        return

    from readme_generator.server import create_app

    app = create_app()
    async with app.router.lifespan_context(app):
        transport = httpx.ASGITransport(app=app)
        async with ReadmeApiClient("http://readme-generator", transport=transport) as api:
            yield api


def _output_name(url: str) -> str:
    parts = [p for p in url.rstrip("/").removesuffix(".git").split("/") if p]
    return "-".join(parts[-2:]) + ".md"


async def _generate(args: argparse.Namespace, options: GenerationOptions) -> None:
    printed = 0

    def echo(text: str) -> None:
        nonlocal printed
        if args.output is None:
            sys.stdout.write(text[printed:])
            sys.stdout.flush()
        printed = len(text)

    def header(info: RepoInfo) -> None:
        print(f"{info.owner}/{info.name} ({info.language}, {info.stars} stars)", file=sys.stderr)

    consumer = StreamConsumer(on_info=header, on_update=echo)
    async with _api_client(args.server) as api:
        await api.stream_generate(args.repo, options, consumer=consumer)

    if args.output is not None:
        args.output.write_text(consumer.text, encoding="utf-8")
        print(f"README written to {args.output}")
    else:
        sys.stdout.write("\n")


async def _bulk(args: argparse.Namespace, options: GenerationOptions) -> int:
    urls = list(args.repos)
    if args.file is not None:
        urls.extend(args.file.read_text(encoding="utf-8").splitlines())
    if not urls:
        print("No repositories given", file=sys.stderr)
        return 1

    async with _api_client(args.server) as api:
        items = await generate_many(api, urls, options)

    args.output_dir.mkdir(parents=True, exist_ok=True)
    failures = 0
    for item in items:
        if item.status == "done":
            path = args.output_dir / _output_name(item.url)
            path.write_text(item.readme, encoding="utf-8")
            print(f"done   {item.url} -> {path}")
        else:
            failures += 1
            print(f"error  {item.url}: {item.error}")
    return 1 if failures else 0


async def _score(args: argparse.Namespace) -> None:
    readme = args.readme.read_text(encoding="utf-8")
    async with _api_client(args.server) as api:
        result = await api.score(readme, args.repo_name)

    print(f"Score: {result.score:g}/100")
    for category in result.breakdown:
        print(f"  {category.category}: {category.score:g}/{category.max:g} {category.notes}".rstrip())
    if result.suggestions:
        print("Suggestions:")
        for suggestion in result.suggestions:
            print(f"  - {suggestion}")


async def _improve(args: argparse.Namespace) -> None:
    readme = args.readme.read_text(encoding="utf-8")
    async with _api_client(args.server) as api:
        improved = await api.improve(readme)

    if args.output is not None:
        args.output.write_text(improved, encoding="utf-8")
        print(f"Improved README written to {args.output}")
    else:
        print(improved)


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level.upper())

    if args.command == "serve":
        from readme_generator.server import run_server

        run_server(args.host, args.port, Settings.from_env())
        return

    try:
        if args.command == "generate":
            asyncio.run(_generate(args, build_options(args.preset, args.style, args.sections, args.exclude)))
        elif args.command == "bulk":
            code = asyncio.run(_bulk(args, build_options(args.preset, args.style, args.sections, args.exclude)))
            if code:
                parser.exit(code)
        elif args.command == "score":
            asyncio.run(_score(args))
        elif args.command == "improve":
            asyncio.run(_improve(args))
    except ReadmeGeneratorError as exc:
        parser.exit(1, f"Error: {exc.message}\n")
    except (ValueError, OSError, httpx.HTTPError) as exc:
        parser.exit(1, f"{args.command} failed: {exc}\n")


if __name__ == "__main__":
    main(sys.argv[1:])
