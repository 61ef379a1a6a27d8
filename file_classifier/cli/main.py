"""Main CLI interface for the File Classifier."""

import click
import dataclasses
import json
import logging
from pathlib import Path
from typing import Dict
from rich.console import Console
from rich.table import Table
from rich.progress import Progress, SpinnerColumn, TextColumn
from ..core.scanner import TreeScanner
from ..core.orchestrator import ClassificationRunner
from ..core.models import CollisionPolicy, RunSummary, ScanOptions, RelocationOutcome
from ..core.exceptions import (
    FileClassifierError, FileSystemError, ScanError, AccessDeniedError,
    PathNotFoundError, InvalidRootError, ConfigurationError, RelocationTimeoutError
)

# Initialize Rich console
console = Console()

BAR_WIDTH = 30
MAX_LISTED_FAILURES = 20


@click.group()
@click.version_option(version="0.1.0")
@click.option('--config', '-c', type=click.Path(path_type=Path),
              help='Configuration file path')
@click.option('--log-level', type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR']),
              help='Set logging level (overrides config)')
@click.option('--log-file', type=click.Path(path_type=Path),
              help='Log file path (overrides config)')
@click.pass_context
def cli(ctx, config, log_level, log_file):
    """File Classifier - Sort a directory tree into per-extension folders."""
    from ..core.config import setup_config
    from ..core.logging_config import setup_logging

    try:
        config_manager = setup_config(config)
    except ConfigurationError as e:
        handle_cli_error(e, "configuration loading")
        raise click.Abort()
    app_config = config_manager.get_config()

    # Override logging config if command line options provided
    logging_config = app_config.logging
    if log_level or log_file:
        logging_config = dataclasses.replace(
            app_config.logging,
            level=log_level or app_config.logging.level,
            file_path=log_file or app_config.logging.file_path,
            file_enabled=app_config.logging.file_enabled or bool(log_file),
        )

    logging_manager = setup_logging(logging_config)
    logging_manager.log_system_info()

    # Store config in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj['config'] = app_config
    ctx.obj['config_manager'] = config_manager
    ctx.obj['logging_manager'] = logging_manager


@cli.command()
@click.argument("directory", type=click.Path(path_type=Path))
@click.option("--exclude", "-e", type=click.Path(path_type=Path), help="File to leave where it is")
@click.option("--workers", type=click.IntRange(min=0), help="Worker threads, 0 = CPU count (default from config)")
@click.option("--timeout", type=click.FloatRange(min=0, min_open=True),
              help="Seconds to wait for all moves (default from config)")
@click.option("--on-collision", type=click.Choice([p.value for p in CollisionPolicy]),
              help="Overwrite or rename when a destination file exists (default from config)")
@click.option("--prune/--no-prune", default=None, help="Remove directories left empty (default from config)")
@click.option("--dry-run", is_flag=True, help="Show what would be moved without changing anything")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.pass_context
def classify(ctx, directory: Path, exclude: Path, workers: int, timeout: float, on_collision: str,
             prune: bool, dry_run: bool, verbose: bool):
    """Move every file under DIRECTORY into a folder named after its extension."""
    app_config = ctx.obj['config']

    # Command line options override config for this run only
    relocation = dataclasses.replace(
        app_config.relocation,
        max_workers=app_config.relocation.max_workers if workers is None else workers,
        timeout_seconds=timeout or app_config.relocation.timeout_seconds,
        collision_policy=on_collision or app_config.relocation.collision_policy,
    )
    prune_config = dataclasses.replace(
        app_config.prune,
        enabled=app_config.prune.enabled if prune is None else prune,
    )
    run_config = dataclasses.replace(app_config, relocation=relocation, prune=prune_config)

    if verbose:
        ctx.obj['logging_manager'].enable_debug_logging()
        console.print(f"[bold blue]Classifying {directory}[/bold blue]")
        if dry_run:
            console.print("[bold yellow]DRY RUN MODE: No files will be moved[/bold yellow]")

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True
        ) as progress:
            task = progress.add_task("Scanning files...", total=None)
            relocated = 0

            def on_scan(files_found: int, directories: int):
                progress.update(task, description=f"Scanning... {files_found} file(s) in {directories} folder(s)")

            def on_outcome(outcome: RelocationOutcome):
                nonlocal relocated
                relocated += 1
                progress.update(task, description=f"Relocating... {relocated} file(s) processed")
                if verbose:
                    _print_outcome(outcome)

            runner = ClassificationRunner(
                run_config,
                dry_run=dry_run,
                scan_progress=on_scan,
                outcome_callback=on_outcome,
            )
            summary = runner.run(directory, exclude)

    except RelocationTimeoutError as e:
        if e.summary is not None:
            _display_summary(e.summary, verbose)
        handle_cli_error(e, "classify")
        raise click.Abort()
    except (FileClassifierError, OSError) as e:
        handle_cli_error(e, "classify")
        raise click.Abort()

    _display_summary(summary, verbose)


@cli.command()
@click.argument("directory", type=click.Path(path_type=Path))
@click.option("--exclude", "-e", type=click.Path(path_type=Path), help="File to leave out of the counts")
@click.option("--format", "-f", "output_format", type=click.Choice(["table", "json"]), default="table",
              help="Output format")
@click.pass_context
def stats(ctx, directory: Path, exclude: Path, output_format: str):
    """Count files per category under DIRECTORY without moving anything."""
    app_config = ctx.obj['config']
    scanner = TreeScanner(ScanOptions(include_hidden=app_config.scan.include_hidden))

    try:
        result = scanner.scan(directory, exclude)
    except (FileClassifierError, OSError) as e:
        handle_cli_error(e, "stats")
        raise click.Abort()

    if output_format == "json":
        click.echo(json.dumps({
            "root": str(result.root),
            "total_files": result.total_files,
            "category_counts": dict(sorted(result.category_counts.items())),
            "errors": result.errors,
            "duration_ms": int(result.duration * 1000),
        }, indent=2))
        return

    _display_category_table(result.category_counts)
    console.print(f"Total files: [bold]{result.total_files}[/bold] "
                  f"in [bold]{len(result.category_counts)}[/bold] categories")
    if result.errors:
        console.print(f"[bold yellow]Warnings: {len(result.errors)}[/bold yellow]")
        for error in result.errors[:10]:
            console.print(f"  [yellow]- {error}[/yellow]")


@cli.group()
def config():
    """Configuration management commands."""
    pass


@config.command('show')
@click.pass_context
def show_config(ctx):
    """Show current configuration."""
    app_config = ctx.obj['config']

    console.print("[bold blue]Current Configuration:[/bold blue]\n")

    console.print("[bold]Scan:[/bold]")
    console.print(f"  Include hidden: {app_config.scan.include_hidden}")

    console.print("\n[bold]Relocation:[/bold]")
    workers = app_config.relocation.max_workers
    console.print(f"  Max workers: {workers if workers else 'auto'}")
    console.print(f"  Timeout: {app_config.relocation.timeout_seconds}s")
    console.print(f"  Collision policy: {app_config.relocation.collision_policy}")

    console.print("\n[bold]Prune:[/bold]")
    console.print(f"  Enabled: {app_config.prune.enabled}")

    console.print("\n[bold]Logging:[/bold]")
    console.print(f"  Level: {app_config.logging.level}")
    console.print(f"  File enabled: {app_config.logging.file_enabled}")
    console.print(f"  File path: {app_config.logging.file_path}")
    console.print(f"  File max size: {app_config.logging.file_max_size_mb}MB")
    console.print(f"  File backup count: {app_config.logging.file_backup_count}")
    console.print(f"  Console enabled: {app_config.logging.console_enabled}")


@config.command('set')
@click.argument('key')
@click.argument('value')
@click.pass_context
def set_config(ctx, key, value):
    """Set a configuration value. Use dot notation for nested keys (e.g., relocation.timeout_seconds)."""
    config_manager = ctx.obj['config_manager']
    app_config = ctx.obj['config']

    try:
        keys = key.split('.')
        if len(keys) != 2:
            raise ValueError("Key must be in format 'section.key' (e.g., 'relocation.max_workers')")

        section, setting = keys

        if section not in app_config.to_dict():
            raise ValueError(f"Unknown configuration section: {section}")

        section_obj = getattr(app_config, section)

        if not hasattr(section_obj, setting):
            raise ValueError(f"Unknown setting '{setting}' in section '{section}'")

        # Get current value to determine type
        current_value = getattr(section_obj, setting)

        if isinstance(current_value, bool):
            converted_value = value.lower() in ('true', '1', 'yes', 'on')
        elif isinstance(current_value, int):
            converted_value = int(value)
        elif isinstance(current_value, float):
            converted_value = float(value)
        elif isinstance(current_value, Path):
            converted_value = Path(value)
        else:
            converted_value = value

        setattr(section_obj, setting, converted_value)
        try:
            app_config.validate()
        except ConfigurationError:
            setattr(section_obj, setting, current_value)
            raise

        config_manager.save_to_file()

        console.print(f"[green]✓[/green] Set {key} = {converted_value}")

    except (ValueError, ConfigurationError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise click.Abort()


@config.command('reset')
@click.confirmation_option(prompt='Are you sure you want to reset all configuration to defaults?')
@click.pass_context
def reset_config(ctx):
    """Reset configuration to default values."""
    config_manager = ctx.obj['config_manager']
    config_manager.reset_to_defaults()
    console.print("[green]✓ Configuration reset to defaults[/green]")


@config.command('export')
@click.argument('file_path', type=click.Path(path_type=Path))
@click.pass_context
def export_config(ctx, file_path):
    """Export configuration to JSON file."""
    config_manager = ctx.obj['config_manager']

    try:
        config_manager.export_to_json(file_path)
        console.print(f"[green]✓ Configuration exported to {file_path}[/green]")
    except FileClassifierError as e:
        handle_cli_error(e, "config export")
        raise click.Abort()


def _print_outcome(outcome: RelocationOutcome):
    """Print one relocation outcome in verbose mode."""
    if outcome.succeeded:
        note = f" [dim]({outcome.note})[/dim]" if outcome.note else ""
        console.print(f"  Moved {outcome.source.name} to {outcome.category}{note}")
    else:
        console.print(f"  [red]Error moving file {outcome.source.name}: {outcome.error}[/red]")


def _display_category_table(category_counts: Dict[str, int]):
    """Render per-category counts with a proportional bar."""
    if not category_counts:
        console.print("[yellow]No files found.[/yellow]")
        return

    max_count = max(category_counts.values())
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Category", style="cyan")
    table.add_column("Files", justify="right")
    table.add_column("Distribution", style="blue")

    for category, count in sorted(category_counts.items(), key=lambda item: (-item[1], item[0])):
        bar_length = max(1, round(count / max_count * BAR_WIDTH))
        table.add_row(category, str(count), "█" * bar_length)

    console.print(table)


def _display_summary(summary: RunSummary, verbose: bool = False):
    """Display counts and time for a run, plus every failed move."""
    if not summary.completed:
        console.print("\n[bold red]⚠ Classification incomplete[/bold red] (timed out)")
    elif summary.dry_run:
        console.print("\n[bold yellow]✓ Dry run complete[/bold yellow]")
    else:
        console.print("\n[bold green]✓ Classification complete![/bold green]")

    _display_category_table(summary.category_counts)

    moved_text = "Files that would be moved" if summary.dry_run else "Files moved"
    console.print(f"Total files classified: [bold]{summary.total_files}[/bold]")
    console.print(f"{moved_text}: [bold green]{summary.moved_files}[/bold green]")
    console.print(f"Time taken: [bold]{summary.elapsed_ms} ms[/bold]")
    if summary.removed_directories:
        console.print(f"Empty directories removed: [bold]{summary.removed_directories}[/bold]")
    if summary.incomplete_categories:
        console.print(f"[bold red]Unfinished categories: {', '.join(summary.incomplete_categories)}[/bold red]")

    if summary.failures:
        console.print(f"\n[bold red]Failed moves: {summary.failed_files}[/bold red]")
        limit = None if verbose else MAX_LISTED_FAILURES
        for failure in summary.failures[:limit]:
            console.print(f"  [red]- {failure.path} -> {failure.destination}: {failure.cause}[/red]")
        if limit is not None and summary.failed_files > limit:
            console.print(f"  [dim]... and {summary.failed_files - limit} more failures[/dim]")

    if summary.prune_failures:
        console.print(f"[bold yellow]Directories that could not be removed: {len(summary.prune_failures)}[/bold yellow]")
        if verbose:
            for error in summary.prune_failures:
                console.print(f"  [yellow]- {error}[/yellow]")


def handle_cli_error(error: Exception, operation: str = "operation") -> None:
    """
    Handle CLI errors with appropriate user feedback.

    Args:
        error: The exception that occurred
        operation: Description of the operation that failed
    """
    if isinstance(error, InvalidRootError):
        console.print(f"[bold red]Error:[/bold red] {error}")
        console.print("[yellow]Please choose an existing directory. Nothing was moved.[/yellow]")
    elif isinstance(error, PathNotFoundError):
        console.print(f"[bold red]Error:[/bold red] {error}")
        console.print("[yellow]Please check that the path exists and is accessible.[/yellow]")
    elif isinstance(error, (AccessDeniedError, PermissionError)):
        console.print(f"[bold red]Permission Error:[/bold red] {error}")
        console.print("[yellow]Please check file/directory permissions or run with appropriate privileges.[/yellow]")
    elif isinstance(error, RelocationTimeoutError):
        console.print(f"[bold red]Timeout:[/bold red] {error}")
        console.print("[yellow]Files moved before the timeout stay in their category folders.[/yellow]")
    elif isinstance(error, ScanError):
        console.print(f"[bold red]Scan Error:[/bold red] {error}")
        console.print("[yellow]The directory could not be read. Nothing was moved.[/yellow]")
    elif isinstance(error, ConfigurationError):
        console.print(f"[bold red]Configuration Error:[/bold red] {error}")
    elif isinstance(error, FileSystemError):
        console.print(f"[bold red]File System Error:[/bold red] {error}")
        console.print("[yellow]Please check file system permissions and available space.[/yellow]")
    elif isinstance(error, FileClassifierError):
        console.print(f"[bold red]Error:[/bold red] {error}")
    else:
        console.print(f"[bold red]Unexpected Error:[/bold red] {error}")
        console.print("[yellow]An unexpected error occurred. Please check the logs for more details.[/yellow]")

    # Log the full error for debugging
    logging.getLogger(__name__).error(f"CLI error in {operation}: {error}", exc_info=True)


if __name__ == "__main__":
    cli()
