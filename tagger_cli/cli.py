"""
TabTagger v1 - Command Line Interface

Command-line interface for suggesting tags for a list of tabs.

Usage:
    python -m tagger_cli.cli analyze --file tabs.json --provider ollama
    python -m tagger_cli.cli models --provider openai --api-key sk-...
    python -m tagger_cli.cli test-connection --provider claude
"""

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from config import get_config, load_env
from tagging_service import __version__
from tagging_service.content import HttpContentSource, extract_tabs_content
from tagging_service.errors import ProviderError
from tagging_service.models import (
    AnalysisRequest,
    AnalysisResult,
    ProviderConfig,
    RawTab,
    TabDescriptor,
)
from tagging_service.orchestrator import analyze as run_analysis
from tagging_service.orchestrator import check_connection, fetch_models

console = Console()


def provider_options(func):
    """Shared provider selection options; unset ones fall back to the environment."""
    func = click.option("--model", "-m", default=None, help="Model identifier")(func)
    func = click.option("--endpoint", "-e", default=None, help="Endpoint URL (ollama, custom)")(func)
    func = click.option("--api-key", "-k", default=None, help="Provider API key")(func)
    func = click.option(
        "--provider", "-p",
        default=None,
        help="openai, gemini, claude, ollama or custom (default: LLM_PROVIDER)",
    )(func)
    return func


def build_provider_config(
    provider: Optional[str],
    api_key: Optional[str],
    endpoint: Optional[str],
    model: Optional[str],
) -> ProviderConfig:
    """Merge command-line options over the environment settings."""
    defaults = get_config().llm.to_provider_config()
    return ProviderConfig(
        kind=provider or defaults.kind,
        api_key=api_key or defaults.api_key,
        endpoint=endpoint or defaults.endpoint,
        model=model or defaults.model,
    )


def load_tabs(file: Path) -> list[dict]:
    """Read a JSON list of tab objects (id, title, url, optional content/description)."""
    data = json.loads(file.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("tabs", [])
    if not isinstance(data, list):
        raise ValueError("expected a JSON list of tabs or an object with a 'tabs' list")
    return data


def print_result(result: AnalysisResult, tabs: list[TabDescriptor]) -> None:
    if not result.ok:
        console.print(f"[red]Analysis failed ({result.error_kind.value}):[/red] {result.message}")
        return

    titles = {tab.id: tab.title for tab in tabs}
    table = Table(title="Tag Suggestions")
    table.add_column("Tab", style="cyan")
    table.add_column("Title")
    table.add_column("Tags", style="green")

    for suggestion in result.suggestions:
        table.add_row(
            str(suggestion.tab_id),
            titles.get(suggestion.tab_id, ""),
            ", ".join(suggestion.tags),
        )

    console.print(table)
    untagged = len(tabs) - len({s.tab_id for s in result.suggestions})
    if untagged > 0:
        console.print(f"[yellow]{untagged} tab(s) received no suggestions[/yellow]")


@click.group()
@click.version_option(version=__version__)
@click.option("--env-file", default=".env", help="Environment file to load")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(env_file: str, verbose: bool):
    """TabTagger - LLM tag suggestions for browser tabs"""
    load_env(env_file)
    app_settings = get_config().app
    logging.basicConfig(
        level="DEBUG" if verbose else app_settings.log_level.upper(),
        format=app_settings.log_format,
    )


@cli.command()
@click.option(
    "--file", "-f",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="JSON file with the tabs to analyze",
)
@provider_options
@click.option(
    "--fetch-content",
    is_flag=True,
    help="Fetch each page and include its text in the prompt",
)
@click.option("--json", "as_json", is_flag=True, help="Print the raw result as JSON")
def analyze(
    file: Path,
    provider: Optional[str],
    api_key: Optional[str],
    endpoint: Optional[str],
    model: Optional[str],
    fetch_content: bool,
    as_json: bool,
):
    """
    Suggest tags for the tabs listed in a JSON file.

    Tabs are numbered in file order when sent to the provider.
    """
    settings = get_config()
    config = build_provider_config(provider, api_key, endpoint, model)

    try:
        entries = load_tabs(file)
        if fetch_content:
            raw_tabs = [RawTab.model_validate(entry) for entry in entries]
        else:
            tabs = [TabDescriptor.model_validate(entry) for entry in entries]
    except (ValueError, ValidationError) as e:
        console.print(f"[red]Error reading tabs file:[/red] {e}")
        sys.exit(1)

    if not as_json:
        console.print("\n[bold blue]TabTagger Analysis[/bold blue]")
        console.print(f"File: {file}")
        console.print(f"Provider: {config.kind}")
        console.print()

    async def run() -> tuple[list[TabDescriptor], AnalysisResult]:
        if fetch_content:
            source = HttpContentSource(
                timeout=settings.processing.fetch_timeout,
                max_chars=settings.processing.content_max_chars,
            )
            extracted = await extract_tabs_content(
                raw_tabs, source, max_concurrent=settings.processing.max_concurrent
            )
        else:
            extracted = tabs
        result = await run_analysis(
            AnalysisRequest(tabs=extracted, config=config),
            timeout=settings.llm.timeout,
            max_attempts=settings.llm.max_retries,
        )
        return extracted, result

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
        disable=as_json,
    ) as progress:
        progress.add_task(f"Analyzing {len(entries)} tabs...", total=None)
        analyzed_tabs, result = asyncio.run(run())

    if as_json:
        click.echo(result.model_dump_json(by_alias=True, indent=2))
    else:
        print_result(result, analyzed_tabs)

    if not result.ok:
        sys.exit(1)


@cli.command()
@provider_options
def models(
    provider: Optional[str],
    api_key: Optional[str],
    endpoint: Optional[str],
    model: Optional[str],
):
    """
    List the models a provider offers.
    """
    config = build_provider_config(provider, api_key, endpoint, model)

    try:
        available = asyncio.run(fetch_models(config, timeout=get_config().llm.timeout))
    except ProviderError as e:
        console.print(f"[red]Error fetching {config.kind} models:[/red] {e.message}")
        sys.exit(1)

    if not available:
        console.print(f"[yellow]No models listed for {config.kind}.[/yellow]")
        return

    table = Table(title=f"{config.kind} models")
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="green")
    for info in available:
        table.add_row(info.id, info.name)

    console.print(table)
    console.print(f"Found {len(available)} model(s)")


@cli.command("test-connection")
@provider_options
def test_connection(
    provider: Optional[str],
    api_key: Optional[str],
    endpoint: Optional[str],
    model: Optional[str],
):
    """
    Send two sample tabs to the provider and report whether it answered.
    """
    settings = get_config()
    config = build_provider_config(provider, api_key, endpoint, model)
    console.print(f"Testing connection to {config.kind}...")

    result = asyncio.run(
        check_connection(config, timeout=settings.llm.timeout, max_attempts=settings.llm.max_retries)
    )

    if result.ok:
        console.print("[bold green]Connection test successful![/bold green]")
        console.print(f"  Suggestions returned: {len(result.suggestions)}")
    else:
        console.print(f"[red]Connection test failed:[/red] {result.message}")
        sys.exit(1)


def main():
    """Entry point for the CLI"""
    cli()


if __name__ == "__main__":
    main()
