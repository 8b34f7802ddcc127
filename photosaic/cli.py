"""Rich command-line interface powered by Typer."""

from __future__ import annotations

import logging
import time
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn, TimeElapsedColumn

from photosaic.config import ALGORITHMS, PhotosaicConfig
from photosaic.errors import PhotosaicError
from photosaic.image_io import FileSource
from photosaic.progress import CallbackObserver
from photosaic.session import Photosaic

app = typer.Typer(
    name="photosaic",
    help="Build photomosaics out of a folder of tile images.",
    add_completion=False,
    rich_markup_mode="rich",
)
console = Console()


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, markup=True)],
    )


def _collect_images(folder: Path, extensions: frozenset[str]) -> list[Path]:
    if not folder.exists():
        return []
    return sorted(
        f for f in folder.iterdir()
        if f.is_file() and f.suffix.lower() in extensions
    )


def _make_config(
    algorithm: str,
    grid_num: int,
    intensity: float,
    output_width: int,
    output_format: str,
    alpha_skip: int,
    flush_threshold: int,
    seed: int | None,
) -> PhotosaicConfig:
    try:
        return PhotosaicConfig(
            algorithm=algorithm,
            grid_num=grid_num,
            intensity=intensity,
            output_width=output_width,
            output_format=output_format,
            alpha_skip=alpha_skip,
            flush_threshold=flush_threshold,
            seed=seed,
        )
    except ValueError as exc:
        console.print(f"[red]Invalid options:[/red] {exc}")
        raise typer.Exit(2) from exc


def _render(
    mosaic: Photosaic,
    source: Path,
    tiles: list[Path],
    output: Path,
) -> None:
    """Build one mosaic with a live progress bar and write it to *output*."""
    cfg = mosaic.config
    # Sampling and placement each report once per cell.
    expected = 2 * cfg.grid_num * cfg.grid_num
    with Progress(
        TextColumn("[cyan]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task(source.name, total=expected)
        observer = CallbackObserver(
            on_processing=lambda i: progress.update(task, completed=min(i, expected)),
        )
        buffer = mosaic.build_sync(
            FileSource(source), [FileSource(t) for t in tiles], observers=[observer],
        )
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(buffer)


# Defaults come from PhotosaicConfig - single source of truth
_DEFAULTS = PhotosaicConfig(algorithm="closest_color")


# -- single-image command ----------------------------------------------

@app.command()
def build(
    source: Path = typer.Argument(..., help="Path to the source image"),
    tiles_dir: Path = typer.Option(..., "--tiles", "-t", help="Folder with tile images"),
    output: Path = typer.Option(Path("output/mosaic.png"), "--output", "-o"),
    algorithm: str = typer.Option(
        ..., "--algorithm", "-a", help=f"One of: {', '.join(ALGORITHMS)}",
    ),
    grid_num: int = typer.Option(_DEFAULTS.grid_num, "--grid", "-g", help="Tiles per side"),
    intensity: float = typer.Option(
        _DEFAULTS.intensity, "--intensity", "-i", help="Tint alpha between 0 and 1",
    ),
    output_width: int = typer.Option(_DEFAULTS.output_width, "--width", "-w"),
    output_format: str = typer.Option(_DEFAULTS.output_format, "--format", "-f"),
    alpha_skip: int = typer.Option(
        _DEFAULTS.alpha_skip, "--alpha-skip", help="Leave cells below this alpha empty",
    ),
    flush_threshold: int = typer.Option(
        _DEFAULTS.flush_threshold, "--flush-every", help="Tiles merged per flush",
    ),
    seed: int | None = typer.Option(_DEFAULTS.seed, "--seed", "-s"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Build a mosaic of SOURCE from the images in --tiles."""
    _setup_logging(verbose)
    cfg = _make_config(
        algorithm, grid_num, intensity, output_width, output_format,
        alpha_skip, flush_threshold, seed,
    )

    tiles = _collect_images(tiles_dir, cfg.SUPPORTED_EXTENSIONS)
    if not tiles:
        console.print(f"[red]No tile images found in {tiles_dir}/[/red]")
        raise typer.Exit(1)

    t0 = time.perf_counter()
    try:
        _render(Photosaic(cfg), source, tiles, output)
    except PhotosaicError as exc:
        console.print(f"[red]Build failed:[/red] {exc}")
        raise typer.Exit(1) from exc

    console.print(
        f"[green]✓[/green] Saved to {output}  "
        f"[dim]{cfg.grid_num}x{cfg.grid_num} grid  {len(tiles)} tiles  "
        f"time={time.perf_counter() - t0:.1f}s[/dim]"
    )


# -- batch command -----------------------------------------------------

@app.command()
def batch(
    input_dir: Path = typer.Option(
        Path("images"), "--input", "-I", help="Folder with source images",
    ),
    tiles_dir: Path = typer.Option(..., "--tiles", "-t", help="Folder with tile images"),
    output_dir: Path = typer.Option(Path("output"), "--output", "-o", help="Results folder"),
    algorithm: str = typer.Option(..., "--algorithm", "-a"),
    grid_num: int = typer.Option(_DEFAULTS.grid_num, "--grid", "-g"),
    intensity: float = typer.Option(_DEFAULTS.intensity, "--intensity", "-i"),
    output_width: int = typer.Option(_DEFAULTS.output_width, "--width", "-w"),
    output_format: str = typer.Option(_DEFAULTS.output_format, "--format", "-f"),
    seed: int | None = typer.Option(_DEFAULTS.seed, "--seed", "-s"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Build a mosaic for every image in INPUT_DIR."""
    _setup_logging(verbose)
    logger = logging.getLogger("photosaic")
    cfg = _make_config(
        algorithm, grid_num, intensity, output_width, output_format,
        _DEFAULTS.alpha_skip, _DEFAULTS.flush_threshold, seed,
    )

    sources = _collect_images(input_dir, cfg.SUPPORTED_EXTENSIONS)
    tiles = _collect_images(tiles_dir, cfg.SUPPORTED_EXTENSIONS)
    if not sources or not tiles:
        console.print(
            f"\n[yellow]Need images in both {input_dir}/ and {tiles_dir}/[/yellow]\n"
        )
        raise typer.Exit(0)

    console.print(Panel.fit(
        f"[bold]PHOTOSAIC[/bold]\n"
        f"Grid: {cfg.grid_num}x{cfg.grid_num}  |  Algorithm: {cfg.algorithm}\n"
        f"Width: {cfg.output_width}  |  Intensity: {cfg.intensity}\n"
        f"Sources: {len(sources)}  |  Tiles: {len(tiles)}",
        border_style="cyan",
    ))

    mosaic = Photosaic(cfg)
    failures = 0
    for idx, src in enumerate(sources, 1):
        console.rule(f"[bold cyan][{idx}/{len(sources)}] {src.name}[/bold cyan]")
        out = output_dir / f"{src.stem}_mosaic.{cfg.output_format}"
        try:
            _render(mosaic, src, tiles, out)
        except PhotosaicError as exc:
            failures += 1
            logger.error("Skipping %s: %s", src.name, exc)
            continue
        console.print(f"  [green]✓[/green] {out.name}")

    console.print(Panel.fit(
        f"[bold green]ALL DONE[/bold green] - results in [bold]{output_dir}/[/bold]"
        + (f"  [red]({failures} failed)[/red]" if failures else ""),
        border_style="green",
    ))


if __name__ == "__main__":
    app()
