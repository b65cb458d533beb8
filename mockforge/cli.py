"""
Mockforge CLI.

Command-line interface for screen detection, reply extraction, code repair
and full project generation.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from .core.config import get_config
from .core.exceptions import GenerationError
from .core.logging import setup_logging

app = typer.Typer(
    name="mockforge",
    help="Turn mockups and app descriptions into repaired Flutter projects",
    add_completion=False,
)

console = Console()


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        from . import __version__
        console.print(f"mockforge v{__version__}")
        raise typer.Exit()


@app.callback()
def root(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging"),
) -> None:
    """Mockforge: mockup and prompt driven Flutter generation."""
    config = get_config()
    if verbose:
        config.log_level = "DEBUG"
    setup_logging(config)


async def _write_files(files: dict[str, str], output: Path) -> list[str]:
    from .storage import LocalStorageBackend

    return await LocalStorageBackend(output).store_files(files)


def _files_table(title: str, files: dict[str, str]) -> Table:
    table = Table(title=title)
    table.add_column("Path", style="cyan")
    table.add_column("Lines", justify="right")
    for path, content in files.items():
        table.add_row(path, str(content.count("\n") + 1))
    return table


@app.command()
def detect(
    markup_file: Path = typer.Argument(
        ...,
        help="Diagram markup file (e.g. a draw.io export)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the raw detection result as JSON"),
) -> None:
    """Detect screens, fields, buttons and option groups in a mockup."""
    from .services.detection import ScreenDetector

    result = ScreenDetector().detect_screens(markup_file.read_text(encoding="utf-8", errors="replace"))

    if as_json:
        console.print_json(result.model_dump_json(by_alias=True))
        return

    table = Table(title=f"Screens in {markup_file.name}")
    table.add_column("Screen", style="cyan")
    table.add_column("Fields")
    table.add_column("Buttons")
    table.add_column("Option groups")
    for section in result.screen_sections:
        table.add_row(
            section.title,
            ", ".join(section.fields) or "-",
            ", ".join(section.buttons) or "-",
            ", ".join(g.title for g in section.radio_groups) or "-",
        )
    console.print(table)
    console.print(
        f"Device frames: {result.phone_count} | "
        f"Drawer: {'yes' if result.should_create_drawer else 'no'} | "
        f"Texts: {len(result.all_texts)}"
    )


@app.command()
def extract(
    reply_file: Path = typer.Argument(
        ...,
        help="File holding a raw generative reply",
        exists=True,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the recovered files below this directory",
    ),
) -> None:
    """Recover and repair the files contained in a generative reply."""
    from .services.extraction import CodeExtractor

    report = CodeExtractor().extract_with_report(reply_file.read_text(encoding="utf-8", errors="replace"))
    if report.empty:
        console.print("[yellow]No files could be recovered from the reply[/yellow]")
        raise typer.Exit(1)

    console.print(_files_table(f"Recovered with '{report.strategy}' strategy", report.files))
    for path in report.duplicates:
        console.print(f"[yellow]Duplicate path, last occurrence kept:[/yellow] {path}")

    if output is not None:
        keys = asyncio.run(_write_files(report.files, output))
        console.print(f"\n[bold green]✓ Wrote {len(keys)} files to {output}[/bold green]")


@app.command()
def repair(
    file: Path = typer.Argument(
        ...,
        help="Dart file to repair",
        exists=True,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
    ),
    logical_path: Optional[str] = typer.Option(
        None,
        "--path",
        help="Project-relative path of the file (e.g. lib/app.dart); selects file-specific rules",
    ),
    in_place: bool = typer.Option(False, "--in-place", help="Overwrite the file instead of printing"),
) -> None:
    """Apply the repair rules to one file."""
    from .services.repair import CodeRepairEngine

    engine = CodeRepairEngine(project_packages=get_config().generation.project_packages)
    original = file.read_text(encoding="utf-8")
    repaired = engine.repair(original, logical_path or file.name)

    if in_place:
        if repaired != original:
            file.write_text(repaired, encoding="utf-8")
            console.print(f"[bold green]✓ Repaired {file}[/bold green]")
        else:
            console.print("[dim]Nothing to repair[/dim]")
        return
    console.print(repaired, markup=False, highlight=False, end="")


@app.command()
def generate(
    markup_file: Optional[Path] = typer.Option(
        None,
        "--markup",
        "-m",
        help="Diagram markup file of the mockup",
        exists=True,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
    ),
    prompt: Optional[str] = typer.Option(None, "--prompt", "-p", help="Natural-language app description"),
    app_name: str = typer.Option("flutter_app", "--name", "-n", help="Name of the generated app"),
    instructions: str = typer.Option("", "--instructions", "-i", help="Extra generation instructions"),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output directory (defaults to <storage path>/<app name>)",
    ),
    offline: bool = typer.Option(False, "--offline", help="Skip the generative service, use local templates"),
    no_fallback: bool = typer.Option(False, "--no-fallback", help="Fail instead of using local templates"),
) -> None:
    """Generate a Flutter project from a mockup and/or a description."""
    from pydantic import ValidationError

    from .models.generation import GenerationCapabilities, GenerationRequest
    from .orchestration import GenerationPipeline

    config = get_config()
    try:
        request = GenerationRequest(
            markup=markup_file.read_text(encoding="utf-8", errors="replace") if markup_file else None,
            prompt=prompt,
            app_name=app_name,
            instructions=instructions,
        )
    except ValidationError:
        console.print("[red]Provide --markup and/or --prompt[/red]")
        raise typer.Exit(2)

    defaults = config.capabilities()
    capabilities = GenerationCapabilities(
        remote_generation=defaults.remote_generation and not offline,
        fallback_enabled=defaults.fallback_enabled and not no_fallback,
    )
    destination = output or config.storage.base_path / request.app_name

    console.print(Panel.fit(
        "[bold blue]Mockforge[/bold blue]\n"
        "Mockup / Prompt → Flutter Project",
        border_style="blue",
    ))
    console.print(f"\n[bold]App:[/bold] {request.app_name}")
    console.print(f"[bold]Remote generation:[/bold] {'on' if capabilities.remote_generation else 'off'}")
    console.print(f"[bold]Output:[/bold] {destination}\n")

    async def run_async() -> None:
        pipeline = GenerationPipeline(config=config)
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            task = progress.add_task("Generating project...", total=None)
            result = await pipeline.run(request, capabilities)
            progress.update(task, completed=True)

        await _write_files(result.files, destination)

        console.print(f"\n[bold green]✓ Generated {result.file_count} files ({result.source.value})[/bold green]\n")
        console.print(_files_table("Project files", result.files))
        for warning in result.warnings:
            console.print(f"[yellow]•[/yellow] {warning}")
        console.print("\nNext steps:")
        console.print(f"  1. cd {destination}")
        console.print("  2. flutter create . --platforms=android,ios")
        console.print("  3. flutter run")

    try:
        asyncio.run(run_async())
    except GenerationError as e:
        console.print(f"\n[bold red]✗ Generation failed![/bold red]\n{e}")
        raise typer.Exit(1)


@app.command()
def config() -> None:
    """Show the current configuration."""
    cfg = get_config()

    table = Table(title="Current Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    table.add_row("Log Level", cfg.log_level)
    table.add_row("Storage Path", str(cfg.storage.base_path))
    table.add_row("Agent Provider", cfg.agent.provider)
    table.add_row("Agent Model", cfg.agent.model)
    table.add_row("Timeout", f"{cfg.agent.timeout_seconds:.0f}s")
    table.add_row("API Key", "[green]set[/green]" if cfg.api_key_for() else "[yellow]missing[/yellow]")
    table.add_row("Template Fallback", str(cfg.generation.fallback_enabled))
    table.add_row("Project Packages", ", ".join(cfg.generation.project_packages))

    console.print(table)

    console.print("\n[dim]Configure via environment variables:[/dim]")
    console.print("  MOCKFORGE_LOG_LEVEL, MOCKFORGE_AGENT_PROVIDER, MOCKFORGE_AGENT_MODEL, MOCKFORGE_FALLBACK")
    console.print("  OPENAI_API_KEY, ANTHROPIC_API_KEY, AZURE_OPENAI_API_KEY")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
