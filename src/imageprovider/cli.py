"""Click CLI for imageprovider — manage images in the tiered store."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from imageprovider.config.hierarchy import load_config_hierarchy
from imageprovider.core import load_service
from imageprovider.errors.exceptions import ImageProviderError
from imageprovider.types import TierName

console = Console()
error_console = Console(stderr=True)

_SECRET_KEYS = {"s3_access_key", "s3_secret_key"}

verbose_option = click.option(
    "-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug)."
)
storage_option = click.option(
    "--storage-path", type=click.Path(file_okay=False), default=None, help="Primary storage directory."
)


def _setup_logging(verbosity: int) -> None:
    """Configure logging based on verbosity level."""
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=error_console, show_time=False, show_path=False)],
        force=True,
    )


def _fail(error: Exception) -> None:
    error_console.print(f"[red]Error:[/red] {error}")
    sys.exit(1)


@click.group()
@click.version_option(package_name="imageprovider")
def cli() -> None:
    """imageprovider — tiered image store with canonical WebP normalization."""


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--no-persist", is_flag=True, default=False, help="Only normalize, do not save to primary storage."
)
@storage_option
@verbose_option
def put(file: str, no_persist: bool, storage_path: str | None, verbose: int) -> None:
    """Normalize an image file and store it in primary storage."""
    _setup_logging(verbose)
    from imageprovider.utils.image import load_image

    try:
        service = load_service(storage_path=storage_path)
        data = load_image(file)
        record = service.ingest(Path(file).name, data)
        if not no_persist:
            service.save(record)
    except (ImageProviderError, OSError, ValueError) as e:
        _fail(e)
        return

    console.print(
        f"[green]Stored[/green] {record.id} "
        f"(source format: {record.source_format}, {record.size_bytes:,} bytes)"
    )


@cli.command()
@click.argument("image_id")
@click.option("-o", "--output", type=click.Path(dir_okay=False), help="Output file path.")
@storage_option
@verbose_option
def get(image_id: str, output: str | None, storage_path: str | None, verbose: int) -> None:
    """Fetch an image (reading through primary and secondary storage)."""
    _setup_logging(verbose)

    try:
        service = load_service(storage_path=storage_path)
        record = service.get(image_id)
    except ImageProviderError as e:
        _fail(e)
        return

    if output:
        out_path = Path(output)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_bytes(record.data)
        console.print(f"[green]Written to {out_path}[/green] ({record.format})")
    else:
        stdout = click.get_binary_stream("stdout")
        stdout.write(record.data)
        stdout.flush()


@cli.command()
@click.argument("image_id")
@storage_option
@verbose_option
def delete(image_id: str, storage_path: str | None, verbose: int) -> None:
    """Delete an image from the cache and every storage tier."""
    _setup_logging(verbose)

    try:
        service = load_service(storage_path=storage_path)
        service.delete(image_id)
    except ImageProviderError as e:
        _fail(e)
        return

    console.print(f"[green]Deleted[/green] {image_id}")


@cli.command("list")
@click.option(
    "--tier",
    type=click.Choice([t.value for t in TierName]),
    default=TierName.PRIMARY.value,
    show_default=True,
    help="Storage tier to list.",
)
@storage_option
@verbose_option
def list_images(tier: str, storage_path: str | None, verbose: int) -> None:
    """List image ids held by a storage tier."""
    _setup_logging(verbose)

    try:
        service = load_service(storage_path=storage_path)
        ids = service.list_tier(tier)
    except ImageProviderError as e:
        _fail(e)
        return

    table = Table(title=f"Images ({tier})", show_header=True)
    table.add_column("ID", style="cyan")
    for image_id in ids:
        table.add_row(image_id)
    console.print(table)
    console.print(f"{len(ids)} image(s)")


@cli.command("config")
@storage_option
def show_config(storage_path: str | None) -> None:
    """Show the resolved configuration."""
    config = load_config_hierarchy(storage_path=storage_path)

    table = Table(title="Configuration", show_header=True)
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    for key in sorted(config):
        value = config[key]
        if key in _SECRET_KEYS and value:
            value = "********"
        table.add_row(key, "-" if value is None else str(value))

    console.print(table)


def main() -> None:
    """Entry point for the CLI."""
    cli()
