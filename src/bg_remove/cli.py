"""
CLI for bg-remove
=================

Command-line interface: remove a video's background and write transparent
emote GIFs (28, 56, 112, 512 + raw).
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TimeElapsedColumn
from rich.table import Table
from rich.panel import Panel

from bg_remove import __version__
from bg_remove.constants import DEFAULT_ALPHA_THRESHOLD, DEFAULT_QUALITY, QUALITY_PRESETS
from bg_remove.core.errors import PipelineError
from bg_remove.core.events import ProgressEvent

console = Console()
err_console = Console(stderr=True)


def setup_logging(verbose: bool) -> None:
    """Route the package logger through rich."""
    logger = logging.getLogger("bg_remove")
    logger.handlers.clear()
    handler = RichHandler(console=console, show_path=False, rich_tracebacks=verbose)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False


def format_size(size_bytes: int) -> str:
    """1.3MB / 512.0KB style sizes."""
    size_mb = size_bytes / (1024 * 1024)
    if size_mb >= 1:
        return f"{size_mb:.1f}MB"
    return f"{size_bytes / 1024:.1f}KB"


class ProgressReporter:
    """Observer driving a rich progress bar from pipeline events."""

    def __init__(self, progress: Progress):
        self.progress = progress
        self.task = progress.add_task("Starting pipeline...", total=1.0)
        self._stage = None

    def __call__(self, event: ProgressEvent) -> None:
        if event.stage != self._stage:
            self._stage = event.stage
            self.progress.reset(self.task, total=1.0)
        self.progress.update(
            self.task,
            description=event.describe(),
            completed=event.progress if event.progress is not None else 0.0,
        )


@click.command()
@click.version_option(version=__version__, prog_name="bg-remove")
@click.argument("video", type=click.Path(dir_okay=False, path_type=Path))
@click.option("-o", "--output", type=click.Path(file_okay=False, path_type=Path),
              help="Output directory (default: ./emotes/ next to input)")
@click.option("--fps", type=click.IntRange(1, 30), default=None,
              help="Frames per second (overrides quality preset)")
@click.option("--start", type=click.FloatRange(min=0), default=None, help="Start time in seconds")
@click.option("--end", type=click.FloatRange(min=0), default=None, help="End time in seconds")
@click.option("-q", "--quality", type=click.Choice(list(QUALITY_PRESETS)), default=DEFAULT_QUALITY,
              show_default=True, help="Quality preset")
@click.option("--alpha-threshold", type=click.IntRange(0, 255), default=DEFAULT_ALPHA_THRESHOLD,
              show_default=True, help="Alpha threshold for GIF transparency (0-255)")
@click.option("--model-path", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="Path to RVM ONNX model file")
@click.option("--device", type=click.Choice(["cpu", "cuda"]), default="cpu", show_default=True,
              help="Device for segmentation inference")
@click.option("--keep-temp", is_flag=True, help="Keep temporary files for debugging")
@click.option("--workers", type=click.IntRange(min=1), default=1, show_default=True,
              help="Threads used for mask refinement")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging")
def main(
    video: Path,
    output: Optional[Path],
    fps: Optional[int],
    start: Optional[float],
    end: Optional[float],
    quality: str,
    alpha_threshold: int,
    model_path: Optional[Path],
    device: str,
    keep_temp: bool,
    workers: int,
    verbose: bool,
):
    """
    Remove video backgrounds and create transparent GIFs.

    Examples:

        # Default balanced preset
        bg-remove clip.mp4

        # Trim to 2 seconds, smaller output
        bg-remove clip.mp4 --start 1 --end 3 -q small

        # Custom model location
        bg-remove clip.mp4 --model-path ~/models/rvm_mobilenetv3_fp32.onnx

        # Segment on the GPU
        bg-remove clip.mp4 --device cuda
    """
    from bg_remove.pipeline.runner import PipelineConfig, run_pipeline

    setup_logging(verbose)

    config = PipelineConfig(
        input_path=video.resolve(),
        output_dir=output.resolve() if output else None,
        fps=fps,
        start=start,
        end=end,
        quality=quality,
        alpha_threshold=alpha_threshold,
        model_path=model_path.resolve() if model_path else None,
        device=device,
        keep_temp=keep_temp,
        refine_workers=workers,
    )

    console.print(Panel.fit(
        f"[bold blue]bg-remove[/bold blue]\n"
        f"Input: {video.name}\n"
        f"Quality: {quality}",
        title="Configuration"
    ))

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TimeElapsedColumn(),
            console=console,
            transient=True,
        ) as progress:
            result = run_pipeline(config, observer=ProgressReporter(progress))
    except PipelineError as e:
        err_console.print(f"\n[bold red]Error:[/bold red] {e}\n", highlight=False)
        sys.exit(1)
    except Exception as e:
        if verbose:
            err_console.print_exception()
        err_console.print(f"\n[bold red]Error:[/bold red] {e}\n", highlight=False)
        sys.exit(1)

    console.print("[bold green]Pipeline complete![/bold green]")
    console.print(f"\nProcessed {result.frame_count} frames\n")

    table = Table(title="Output files")
    table.add_column("Variant", style="cyan")
    table.add_column("Path")
    table.add_column("Size", justify="right")
    table.add_column("Degradation", style="yellow")

    for item in result.outputs:
        table.add_row(
            item.label,
            str(item.path),
            format_size(item.size_bytes),
            ", ".join(item.degradation_steps) if item.degraded else "",
        )

    console.print(table)

    for warning in result.warnings:
        err_console.print(f"[bold yellow]Warning:[/bold yellow] {warning.message}", highlight=False)

    if result.session_root is not None:
        console.print(f"Temp files kept at: {result.session_root}")


if __name__ == "__main__":
    main()
