"""
Command-line interface for the AGG archive toolkit.
Provides commands to list, extract, resolve and inspect archive assets.
"""

import os
import sys
from pathlib import Path
from typing import Optional
import typer
from rich.console import Console
from rich.table import Table

from .config import ArchiveConfig
from .errors import ArchiveError
from .log import setup_logging, log_override_used
from .archive.agg_file import AggFile
from .archive.chain import ArchiveChain
from .archive.sprite_sheet import SpriteSheetSynthesizer, parse_sprite_sheet

# Initialize typer app and rich console
app = typer.Typer(
    name="agg-archive",
    help="AGG archive toolkit - Read archive assets, apply override directories, and build ICN sprite sheets",
    add_completion=False,
    rich_markup_mode="rich",
    epilog="""
[bold]Examples:[/bold]
  [cyan]agg-archive list data/HEROES2.AGG[/cyan]                    List archive contents
  [cyan]agg-archive extract data/HEROES2.AGG KNIGHT.ICN[/cyan]       Extract one asset
  [cyan]agg-archive resolve KNIGHT.ICN[/cyan]                        Resolve through the archive chain
  [cyan]agg-archive synthesize data/HEROES2/KNIGHT.ICN -o out.icn[/cyan]  Build an ICN from images

[bold]Environment Variables:[/bold]
  Use [cyan]agg-archive config --env-vars[/cyan] to see all available variables.
    """
)
console = Console()


@app.command("list")
def list_files(
    archive_path: Path = typer.Argument(..., help="Path to the AGG archive"),
    overrides_only: bool = typer.Option(False, "--overrides", help="Only show names that resolve to overrides"),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration file path")
):
    """List files stored in an archive."""
    config = _load_config(config_file)

    with _open_archive(archive_path, config) as archive:
        table = Table(title=f"{archive_path.name} ({len(archive)} files)")
        table.add_column("Name", style="cyan")
        table.add_column("Size", justify="right", style="green")
        table.add_column("Offset", justify="right")
        table.add_column("Override", justify="center")

        for name in archive.names():
            entry = archive.entry(name)
            has_override = archive.has_override(name)
            if overrides_only and not has_override:
                continue
            table.add_row(
                name, str(entry.size), str(entry.offset),
                "[yellow]✓[/yellow]" if has_override else ""
            )

        console.print(table)


@app.command()
def extract(
    archive_path: Path = typer.Argument(..., help="Path to the AGG archive"),
    name: str = typer.Argument(..., help="Asset name, e.g. KNIGHT.ICN"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output file (defaults to the asset name)"),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration file path")
):
    """Extract one asset, applying overrides."""
    config = _load_config(config_file)

    with _open_archive(archive_path, config) as archive:
        archive.add_listener(log_override_used)
        data = _read_or_exit(archive, name)

    _write_output(output or Path(name.upper()), data)


@app.command()
def resolve(
    name: str = typer.Argument(..., help="Asset name, e.g. KNIGHT.ICN"),
    data_dir: Optional[Path] = typer.Option(None, "--data-dir", "-d", help="Directory holding the archives"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output file"),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration file path")
):
    """Resolve an asset through the configured archive chain."""
    config = _load_config(config_file)
    if data_dir is not None:
        config.data_dir = str(data_dir)

    try:
        chain = ArchiveChain.from_config(config)
    except ArchiveError as e:
        console.print(f"[red]Cannot open archives:[/red] {e}")
        raise typer.Exit(1)

    with chain:
        if not len(chain):
            console.print(f"[red]No archives found in {config.data_dir}[/red]")
            raise typer.Exit(1)

        chain.add_listener(log_override_used)
        data = _read_or_exit(chain, name)
        source = chain.locate(name)

    console.print(f"[green]✓[/green] {name.upper()}: {len(data)} bytes from {source.path if source else '?'}")
    if output is not None:
        _write_output(output, data)


@app.command()
def inspect(
    archive_path: Path = typer.Argument(..., help="Path to the AGG archive"),
    name: str = typer.Argument(..., help="ICN asset name"),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration file path")
):
    """Show the slots of an ICN sprite sheet."""
    config = _load_config(config_file)

    with _open_archive(archive_path, config) as archive:
        data = _read_or_exit(archive, name)
        is_override = archive.has_override(name)

    try:
        sheet = parse_sprite_sheet(data)
    except ArchiveError as e:
        console.print(f"[red]Invalid sprite sheet:[/red] {e}")
        raise typer.Exit(1)

    source = "override" if is_override else "archive"
    table = Table(title=f"{name.upper()} ({sheet.slot_count} slots, {sheet.total_size} bytes, {source})")
    table.add_column("#", justify="right")
    table.add_column("Offset X", justify="right")
    table.add_column("Offset Y", justify="right")
    table.add_column("Width", justify="right", style="cyan")
    table.add_column("Height", justify="right", style="cyan")
    table.add_column("Frames", justify="right")
    table.add_column("Data offset", justify="right", style="green")

    for index, slot in enumerate(sheet.slots):
        table.add_row(
            str(index), str(slot.offset_x), str(slot.offset_y), str(slot.width),
            str(slot.height), str(slot.animation_frames), str(slot.data_offset)
        )

    console.print(table)


@app.command("export-slot")
def export_slot(
    archive_path: Path = typer.Argument(..., help="Path to the AGG archive"),
    name: str = typer.Argument(..., help="ICN asset name"),
    index: int = typer.Argument(..., help="Slot index"),
    output: Path = typer.Option(..., "--output", "-o", help="Output PNG file"),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration file path")
):
    """Write one sprite-sheet slot as a PNG image."""
    config = _load_config(config_file)

    with _open_archive(archive_path, config) as archive:
        data = _read_or_exit(archive, name)

    try:
        sheet = parse_sprite_sheet(data)
    except ArchiveError as e:
        console.print(f"[red]Invalid sprite sheet:[/red] {e}")
        raise typer.Exit(1)

    if not 0 <= index < sheet.slot_count:
        console.print(f"[red]Slot {index} out of range (0..{sheet.slot_count - 1})[/red]")
        raise typer.Exit(1)

    output.parent.mkdir(parents=True, exist_ok=True)
    sheet.slot_image(index).save(output, format="PNG")
    console.print(f"[green]✓[/green] Wrote slot {index} of {name.upper()} to {output}")


@app.command()
def synthesize(
    directory: Path = typer.Argument(..., help="Directory of images"),
    output: Path = typer.Option(..., "--output", "-o", help="Output ICN file"),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration file path")
):
    """Build an ICN sprite sheet from a directory of images."""
    config = _load_config(config_file)

    if not directory.is_dir():
        console.print(f"[red]Directory not found:[/red] {directory}")
        raise typer.Exit(1)

    synthesizer = SpriteSheetSynthesizer(config.image_extensions)
    images = synthesizer.find_images(directory)
    data = synthesizer.synthesize(directory)
    if not data:
        console.print(f"[red]Could not build a sprite sheet from {directory}[/red] ({len(images)} images found)")
        raise typer.Exit(1)

    _write_output(output, data)
    console.print(f"[green]✓[/green] {len(images)} slots")


@app.command()
def config(
    show: bool = typer.Option(False, "--show", help="Show current configuration"),
    validate_config: bool = typer.Option(False, "--validate", help="Validate configuration file"),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration file path"),
    env_vars: bool = typer.Option(False, "--env-vars", help="Show available environment variables")
):
    """Manage toolkit configuration."""
    if env_vars:
        _display_env_vars()
        return

    if not (show or validate_config):
        console.print("Use --show to display configuration, --validate to check it, or --env-vars to see environment variables.")
        return

    config = _load_config(config_file)

    if show:
        console.print(config.to_toml(), markup=False, highlight=False)

    if validate_config:
        errors = config.validate()
        if errors:
            console.print("[red]Configuration validation errors:[/red]")
            for error in errors:
                console.print(f"  • {error}")
            raise typer.Exit(1)
        console.print("[green]✓ Configuration is valid[/green]")


@app.command()
def version():
    """Show version information."""
    from . import __version__
    import PIL
    import numpy

    console.print("[bold]AGG Archive Toolkit[/bold]")
    console.print(f"Version: {__version__}")
    console.print("Python: " + sys.version.split()[0])

    table = Table(show_header=False)
    table.add_column("Package", style="cyan")
    table.add_column("Version", style="green")
    table.add_row("Pillow", PIL.__version__)
    table.add_row("NumPy", numpy.__version__)
    table.add_row("Typer", getattr(typer, "__version__", "Unknown"))
    console.print("\n[bold]Dependencies:[/bold]")
    console.print(table)


def _open_archive(archive_path: Path, config: ArchiveConfig) -> AggFile:
    """Open an archive or exit with an error message."""
    archive = AggFile(config)
    try:
        opened = archive.open(archive_path)
    except ArchiveError as e:
        console.print(f"[red]Cannot open archive:[/red] {e}")
        raise typer.Exit(1)

    if not opened:
        console.print(f"[red]Invalid archive:[/red] {archive_path}")
        raise typer.Exit(1)
    return archive


def _read_or_exit(source, name: str) -> bytes:
    try:
        data = source.read(name)
    except ArchiveError as e:
        console.print(f"[red]Cannot read {name.upper()}:[/red] {e}")
        raise typer.Exit(1)

    if not data:
        console.print(f"[red]Not found:[/red] {name.upper()}")
        raise typer.Exit(1)
    return data


def _write_output(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    console.print(f"[green]✓[/green] Wrote {len(data)} bytes to {path}")


def _load_config(config_file: Optional[Path]) -> ArchiveConfig:
    """Load configuration from file or use defaults with environment variable support."""
    if config_file and not config_file.exists():
        console.print(f"[red]Configuration file not found:[/red] {config_file}")
        raise typer.Exit(1)

    try:
        if config_file:
            config = ArchiveConfig._apply_env_overrides(ArchiveConfig.from_file(config_file))
        else:
            config = None
            for config_path in (Path("agg_archive.toml"), Path("agg_archive.json")):
                if config_path.exists():
                    config = ArchiveConfig._apply_env_overrides(ArchiveConfig.from_file(config_path))
                    break

            if config is None:
                config = ArchiveConfig.default()
    except ValueError as e:
        console.print(f"[red]Cannot load configuration:[/red] {e}")
        raise typer.Exit(1)

    setup_logging(config.log_level)
    return config


def _display_env_vars():
    """Display available environment variables."""
    table = Table(title="Environment Variables")
    table.add_column("Variable", style="cyan")
    table.add_column("Description")
    table.add_column("Example", style="green")

    env_vars = [
        ("AGG_ARCHIVE_MAX_FILENAME_SIZE", "Fixed width of archive file names", "15"),
        ("AGG_ARCHIVE_EXTENSION", "Archive extension stripped to find the override directory", ".AGG"),
        ("AGG_ARCHIVE_SPRITE_SHEET_TYPE", "Override directory type built as a sprite sheet", "ICN"),
        ("AGG_ARCHIVE_IMAGE_EXTENSIONS", "Comma-separated image extensions for sprite sheets", ".png,.bmp"),
        ("AGG_ARCHIVE_DATA_DIR", "Directory holding the archives", "data"),
        ("AGG_ARCHIVE_ARCHIVES", "Comma-separated archives in lookup order", "HEROES2X.AGG,HEROES2.AGG"),
        ("AGG_ARCHIVE_LOG_LEVEL", "Log level", "DEBUG"),
    ]

    for var_name, description, example in env_vars:
        active = " [yellow](set)[/yellow]" if os.getenv(var_name) else ""
        table.add_row(var_name + active, description, example)

    console.print(table)


if __name__ == "__main__":
    app()
