"""Command-line interface for locale lookup and unused-key analysis."""

import asyncio
import logging
import signal
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TaskProgressColumn
from rich.table import Table

from .analysis.report_builder import ReportBuilder, save_report, usage_rate
from .analysis.usage_analyzer import CancellationToken, UsageAnalyzer
from .config import Config, add_i18n_folder, remove_i18n_folder, save_folders
from .editing.locale_editor import LocaleEditor, locate_key
from .extraction.locale_loader import LocaleLoader, LocaleStore
from .models.analysis_result import AnalysisOutcome, AnalysisResult
from .models.key_path import iter_keys
from .resolution.lens_provider import LensProvider
from .resolution.resolver import classify_locales, select_primary

console = Console()


def _split(value: Optional[str]):
    return [item.strip() for item in value.split(",") if item.strip()] if value else None


@click.group()
@click.version_option(version="0.1.0")
@click.option(
    "--root", "-r",
    "project_root",
    type=click.Path(file_okay=False),
    default=None,
    help="Project root (defaults to CODELENS_I18N_PROJECT_ROOT or the current directory)"
)
@click.option(
    "--folders", "-f",
    default=None,
    help="Comma-separated i18n folders relative to the project root"
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Show debug logging"
)
@click.pass_context
def cli(ctx, project_root: Optional[str], folders: Optional[str], verbose: bool):
    """Resolve i18n keys and find unused locale resources."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )

    settings = Config()
    if project_root:
        settings.project_root = Path(project_root)
    if folders:
        settings.i18n_folders = _split(folders)
    ctx.obj = settings


def _require_config(settings: Config) -> Config:
    errors = settings.validate()
    if errors:
        console.print("[red]Configuration errors:[/red]")
        for error in errors:
            console.print(f"  - {error}")
        raise click.Abort()
    return settings


def _display_path(path: Path, root: Path) -> str:
    """Path relative to the project root, or absolute when it lies outside."""
    path, root = Path(path), Path(root)
    if path.is_relative_to(root):
        return str(path.relative_to(root))
    return str(path)


def _load_snapshot(settings: Config):
    loader = LocaleLoader(settings.project_root)
    return asyncio.run(loader.reload(settings.i18n_folders))


@cli.command()
@click.pass_obj
def locales(settings: Config):
    """List loaded locales and their key counts."""
    _require_config(settings)
    snapshot = _load_snapshot(settings)

    if snapshot.is_empty():
        console.print(
            f"[yellow]No i18n files found in folders:[/yellow] {', '.join(settings.i18n_folders)}"
        )
        return

    table = Table(title="Loaded locales")
    table.add_column("Locale", style="cyan")
    table.add_column("File")
    table.add_column("Keys", justify="right")

    for locale in snapshot.locales:
        tree = snapshot.get_tree(locale)
        origin = snapshot.get_origin(locale)
        key_count = sum(1 for _ in iter_keys(tree))
        table.add_row(locale, _display_path(origin, settings.project_root), str(key_count))

    console.print(table)
    console.print(f"[green]Total keys:[/green] {len(snapshot.all_keys())}")


@cli.command()
@click.argument("key")
@click.option(
    "--language", "-l",
    default=None,
    help="Comma-separated display locales in priority order"
)
@click.pass_obj
def resolve(settings: Config, key: str, language: Optional[str]):
    """Show the display translation of a key and its value in every locale."""
    _require_config(settings)
    snapshot = _load_snapshot(settings)
    priority = _split(language) or settings.display_languages

    primary = select_primary(key, snapshot, priority)
    if primary:
        console.print(f'[green]{primary.locale}:[/green] "{primary.value}"')
    else:
        console.print(f"[yellow]{key} (Not found)[/yellow]")

    classification = classify_locales(key, snapshot)
    table = Table(title=f"Translations for {key}")
    table.add_column("Locale", style="cyan")
    table.add_column("Value")

    for locale, value in classification.with_value.items():
        table.add_row(locale, value)
    for locale in classification.without_value:
        table.add_row(locale, "[dim](no value)[/dim]")

    console.print(table)


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--language", "-l",
    default=None,
    help="Comma-separated display locales in priority order"
)
@click.pass_obj
def lens(settings: Config, file: str, language: Optional[str]):
    """Show the translation of every t('key') call in a source file."""
    _require_config(settings)
    priority = _split(language) or settings.display_languages

    text = Path(file).read_text(encoding="utf-8")
    store = LocaleStore(settings.project_root, settings.i18n_folders)
    provider = LensProvider(store, priority, enabled=settings.enable_codelens)
    lenses = asyncio.run(provider.provide(text))

    if not lenses:
        console.print("[dim]No translation calls found[/dim]")
        return

    table = Table(title=f"i18n keys in {Path(file).name}")
    table.add_column("Line", justify="right", style="dim")
    table.add_column("Key", style="cyan")
    table.add_column("Translation")

    for item in lenses:
        title = item.title if item.found else f"[yellow]{item.title}[/yellow]"
        table.add_row(str(item.line + 1), item.key, title)

    console.print(table)


@cli.command(name="set")
@click.argument("key")
@click.argument("locale")
@click.argument("value")
@click.pass_obj
def set_command(settings: Config, key: str, locale: str, value: str):
    """Set the VALUE of KEY in LOCALE and write the locale file."""
    _require_config(settings)
    snapshot = _load_snapshot(settings)
    editor = LocaleEditor(settings.project_root, settings.i18n_folders)

    try:
        path = editor.save_value(locale, key, value, snapshot.get_origin(locale))
    except OSError as e:
        console.print(f"[red]Error saving i18n file:[/red] {e}")
        sys.exit(1)

    location = locate_key(path.read_text(encoding="utf-8"), key)
    where = f"{path}:{location[0] + 1}" if location else str(path)
    console.print(f'[green]Saved[/green] {locale}: "{value}" -> {where}')


@cli.command()
@click.argument("key")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_obj
def delete(settings: Config, key: str, yes: bool):
    """Delete KEY from every locale file."""
    _require_config(settings)
    snapshot = _load_snapshot(settings)

    if not yes and not click.confirm(
        f'Delete "{key}" from all locale files? This cannot be undone.'
    ):
        console.print("[yellow]Nothing deleted[/yellow]")
        return

    editor = LocaleEditor(settings.project_root, settings.i18n_folders)
    try:
        deleted_from = editor.delete_key(snapshot, key)
    except OSError as e:
        console.print(f"[red]Error deleting resource:[/red] {e}")
        sys.exit(1)

    if deleted_from:
        console.print(
            f'[green]Deleted "{key}" from {len(deleted_from)} locale(s):[/green] {", ".join(deleted_from)}'
        )
    else:
        console.print(f'[yellow]Resource "{key}" does not exist in any locale file[/yellow]')


@cli.command()
@click.option(
    "--extensions", "-e",
    default=None,
    help="Comma-separated source file extensions to scan"
)
@click.option("--no-report", is_flag=True, help="Do not write a report file")
@click.option("--delete", "delete_unused", is_flag=True, help="Delete unused keys after the scan")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation before deleting")
@click.pass_obj
def unused(
    settings: Config,
    extensions: Optional[str],
    no_report: bool,
    delete_unused: bool,
    yes: bool,
):
    """Find i18n keys that are not referenced in any source file."""
    _require_config(settings)

    analyzer = UsageAnalyzer(
        project_root=settings.project_root,
        i18n_folders=settings.i18n_folders,
        include_extensions=_split(extensions) or settings.include_extensions,
        exclude_patterns=settings.exclude_patterns,
    )

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Searching for unused i18n resources", total=100)

        async def update_progress(percentage, message, **extra):
            progress.update(task, completed=percentage, description=message)

        result = asyncio.run(_run_analysis(analyzer, update_progress))

    if result.outcome == AnalysisOutcome.CANCELLED:
        console.print("[yellow]Search cancelled[/yellow]")
        return
    if result.outcome == AnalysisOutcome.NO_LOCALE_FILES:
        console.print(
            f"[yellow]No i18n files found in folders:[/yellow] {', '.join(settings.i18n_folders)}. "
            "Check the i18n folder configuration."
        )
        return
    if result.outcome == AnalysisOutcome.NO_KEYS:
        console.print("[yellow]No i18n resources found[/yellow]")
        return

    _print_summary(result)

    report = ReportBuilder().build(
        total_keys=result.total_keys,
        scanned_files=result.scanned_file_count,
        unused_keys=result.unused_keys,
        values_by_locale=result.snapshot.values_by_locale(result.unused_keys),
    )

    if not no_report:
        path = save_report(report, settings.project_root)
        if path:
            console.print(f"[green]Report saved:[/green] {path.name}")
        else:
            console.print("[yellow]Could not save the report file, showing it instead[/yellow]\n")
            console.print(report, markup=False, highlight=False)

    if result.unused_keys and delete_unused:
        _delete_unused(settings, result, yes)


async def _run_analysis(analyzer: UsageAnalyzer, progress_callback) -> AnalysisResult:
    """Run the analyzer, cancelling cooperatively on Ctrl-C."""
    token = CancellationToken()
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, token.cancel)
    except (NotImplementedError, RuntimeError):
        pass

    try:
        return await analyzer.analyze(token, progress_callback)
    finally:
        try:
            loop.remove_signal_handler(signal.SIGINT)
        except (NotImplementedError, RuntimeError):
            pass


def _print_summary(result: AnalysisResult):
    """Print analysis summary."""
    unused_count = len(result.unused_keys)
    panel_content = (
        f"[bold]Total i18n keys:[/bold] {result.total_keys}\n"
        f"[bold]Files scanned:[/bold] {result.scanned_file_count}\n"
        f"[yellow]Unused keys:[/yellow] {unused_count}\n"
        f"[green]Usage rate:[/green] {usage_rate(result.total_keys, unused_count)}%"
    )
    console.print(Panel(panel_content, title="Unused Resources"))

    if unused_count == 0:
        console.print(f"[green]All {result.total_keys} i18n keys are used.[/green]")
        return

    for key in result.unused_keys[:20]:
        console.print(f"  [dim]-[/dim] {key}")
    if unused_count > 20:
        console.print(f"\n[dim]... and {unused_count - 20} more[/dim]")


def _delete_unused(settings: Config, result: AnalysisResult, yes: bool):
    """Delete unused keys with confirmation."""
    count = len(result.unused_keys)
    if not yes and not click.confirm(
        f"\nDelete {count} unused resources? This cannot be undone."
    ):
        console.print("[yellow]Nothing deleted[/yellow]")
        return

    editor = LocaleEditor(settings.project_root, settings.i18n_folders)
    try:
        removed_by_locale = editor.delete_keys(result.snapshot, result.unused_keys)
    except OSError as e:
        console.print(f"[red]Error deleting resources:[/red] {e}")
        sys.exit(1)

    console.print(
        f"[green]Deleted {sum(removed_by_locale.values())} unused resources "
        f"from {len(removed_by_locale)} locale files[/green]"
    )


@cli.group()
def folders():
    """Manage the list of i18n folders."""
    pass


@folders.command(name="list")
@click.pass_obj
def list_folders(settings: Config):
    """Show the configured i18n folders."""
    for folder in settings.i18n_folders:
        exists = (Path(settings.project_root) / folder).is_dir()
        marker = "[green]✓[/green]" if exists else "[red]✗[/red]"
        console.print(f"{marker} {folder}")


@folders.command(name="add")
@click.argument("folder")
@click.pass_obj
def add_folder(settings: Config, folder: str):
    """Add FOLDER to the i18n folders and save it to .env."""
    update = add_i18n_folder(settings.i18n_folders, folder)

    if update.status == "already_present":
        console.print(f"[yellow]'{folder}' is already an i18n folder[/yellow]")
        return
    if update.status == "is_subfolder":
        console.print(f"[yellow]'{folder}' is inside '{update.parent}', which is already an i18n folder[/yellow]")
        return
    if update.status == "replaced_children" and not click.confirm(
        f"'{folder}' contains {len(update.removed)} configured folder(s). Replace them?"
    ):
        return

    save_folders(update.folders, Path(settings.project_root) / ".env")
    settings.i18n_folders = update.folders

    if update.removed:
        console.print(
            f"[green]Added '{folder}' and removed {len(update.removed)} subfolder(s) from the i18n folders[/green]"
        )
    else:
        console.print(f"[green]Added '{folder}' to the i18n folders[/green]")


@folders.command(name="remove")
@click.argument("folder")
@click.pass_obj
def remove_folder(settings: Config, folder: str):
    """Remove FOLDER from the i18n folders and save it to .env."""
    remaining = remove_i18n_folder(settings.i18n_folders, folder)
    if remaining == settings.i18n_folders:
        console.print(f"[yellow]'{folder}' is not an i18n folder[/yellow]")
        return

    save_folders(remaining, Path(settings.project_root) / ".env")
    settings.i18n_folders = remaining
    console.print(f"[green]Removed '{folder}' from the i18n folders[/green]")


if __name__ == "__main__":
    cli()
