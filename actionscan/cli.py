"""CLI entry point: actionscan.

Subcommands:
    actionscan scan-action -a actions/checkout@v4       # scan references directly
    actionscan scan-pr -u https://github.com/org/repo -p 12
    actionscan scan-commit -u https://github.com/org/repo -s <sha>
    actionscan scan-repo -u https://github.com/org/repo  # scan workflow usages
"""

from __future__ import annotations

import asyncio
import os
import sys
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path

import click
import structlog
from dotenv import load_dotenv

from actionscan import __version__
from actionscan.core.github import parse_repo_url
from actionscan.core.logging import setup_logging
from actionscan.engines.action_resolver.models import ScanReport
from actionscan.engines.action_resolver.resolver import DEFAULT_FETCH_TIMEOUT, DEFAULT_MAX_DEPTH
from actionscan.engines.action_resolver.runner import ActionScanRunner
from actionscan.engines.github.client import GitHubClient
from actionscan.report import render

log = structlog.get_logger("actionscan.cli")

_URL_HELP = "GitHub repository URL or owner/repo slug"


@dataclass
class _Settings:
    max_depth: int
    fetch_timeout: float | None
    output_format: str
    output: str | None


def _env_int(key: str, default: int) -> int:
    value = os.environ.get(key)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise click.BadParameter(f"{key} must be an integer, got {value!r}") from None


def _env_timeout(key: str, default: float) -> float | None:
    """Read a timeout in seconds; ``0`` or ``none`` disables it."""
    value = os.environ.get(key)
    if value is None or value == "":
        return default
    if value.lower() == "none":
        return None
    try:
        seconds = float(value)
    except ValueError:
        raise click.BadParameter(f"{key} must be a number, got {value!r}") from None
    return seconds if seconds > 0 else None


def _validate_url(ctx: click.Context, param: click.Parameter, value: str) -> str:
    try:
        parse_repo_url(value)
    except ValueError:
        raise click.BadParameter(
            "Invalid GitHub repository (expected https://github.com/<owner>/<repo>, "
            "git@github.com:<owner>/<repo>.git or <owner>/<repo>)"
        ) from None
    return value


def _write_output(text: str, output: str | None) -> None:
    if output:
        Path(output).write_text(text, encoding="utf-8")
        log.info("cli.output_written", path=output)
    else:
        click.echo(text, nl=False)


def _execute(settings: _Settings, scan: Callable[[ActionScanRunner], Awaitable[ScanReport]]) -> None:
    """Run *scan* with a fresh client and runner, then emit the report."""

    async def _run() -> ScanReport:
        async with GitHubClient() as client:
            runner = ActionScanRunner(
                client,
                max_depth=settings.max_depth,
                fetch_timeout=settings.fetch_timeout,
            )
            return await scan(runner)

    try:
        report = asyncio.run(_run())
    except Exception as exc:
        log.error("cli.scan_failed", error=f"{type(exc).__name__}: {exc}")
        sys.exit(1)

    _write_output(render(report, settings.output_format), settings.output)


@click.group()
@click.version_option(__version__, prog_name="actionscan")
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
@click.option(
    "-e",
    "--env",
    "env_file",
    default=".env",
    show_default=True,
    help=".env file to load before reading configuration",
)
@click.option(
    "-m",
    "--max-depth",
    type=click.IntRange(min=0),
    default=None,
    help=f"Max recursion depth (default: $ACTIONSCAN_MAX_DEPTH or {DEFAULT_MAX_DEPTH})",
)
@click.option(
    "-f",
    "--format",
    "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    show_default=True,
    help="Output format",
)
@click.option("-o", "--output", default=None, help="Write the report to this file")
@click.pass_context
def main(
    ctx: click.Context,
    verbose: bool,
    env_file: str,
    max_depth: int | None,
    output_format: str,
    output: str | None,
) -> None:
    """Recursively scan GitHub Actions and their transitive dependencies."""
    if env_file and Path(env_file).is_file():
        load_dotenv(env_file)
    setup_logging(verbose)

    if max_depth is None:
        max_depth = _env_int("ACTIONSCAN_MAX_DEPTH", DEFAULT_MAX_DEPTH)
        if max_depth < 0:
            raise click.BadParameter("ACTIONSCAN_MAX_DEPTH must be >= 0")

    ctx.obj = _Settings(
        max_depth=max_depth,
        fetch_timeout=_env_timeout("ACTIONSCAN_FETCH_TIMEOUT", DEFAULT_FETCH_TIMEOUT),
        output_format=output_format,
        output=output,
    )
    log.debug("cli.settings", max_depth=max_depth, output_format=output_format)


@main.command("scan-action")
@click.option(
    "-a",
    "--action",
    "actions",
    multiple=True,
    required=True,
    help="Action reference (owner/repo[/path]@ref); may be repeated",
)
@click.pass_obj
def scan_action(settings: _Settings, actions: tuple[str, ...]) -> None:
    """Scan specific action references directly."""
    _execute(settings, lambda runner: runner.scan_references(list(actions)))


@main.command("scan-pr")
@click.option("-u", "--url", required=True, callback=_validate_url, help=_URL_HELP)
@click.option("-p", "--pr", "number", type=int, required=True, help="Pull request number")
@click.pass_obj
def scan_pr(settings: _Settings, url: str, number: int) -> None:
    """Scan actions referenced by markdown changed in a pull request."""
    owner, repo = parse_repo_url(url)
    _execute(settings, lambda runner: runner.scan_pull_request(owner, repo, number))


@main.command("scan-commit")
@click.option("-u", "--url", required=True, callback=_validate_url, help=_URL_HELP)
@click.option("-s", "--sha", required=True, help="Commit SHA")
@click.pass_obj
def scan_commit(settings: _Settings, url: str, sha: str) -> None:
    """Scan actions referenced by markdown changed in a commit."""
    owner, repo = parse_repo_url(url)
    _execute(settings, lambda runner: runner.scan_commit(owner, repo, sha))


@main.command("scan-repo")
@click.option("-u", "--url", required=True, callback=_validate_url, help=_URL_HELP)
@click.option("--ref", default=None, help="Branch, tag, or SHA (default: default branch)")
@click.pass_obj
def scan_repo(settings: _Settings, url: str, ref: str | None) -> None:
    """Scan every action used by a repository's workflows."""
    owner, repo = parse_repo_url(url)
    _execute(settings, lambda runner: runner.scan_repository(owner, repo, ref=ref))


if __name__ == "__main__":
    main()
