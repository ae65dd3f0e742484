#!/usr/bin/env python3
"""
Main CLI entry point for bird-tagger.
"""
import sys
import argparse
import logging
from pathlib import Path

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TimeElapsedColumn
from rich.table import Table

from .api import ClassificationServiceError, get_client
from .config import RunConfig, load_config
from .core.file_operations import OutputApplier
from .core.life_list import LifeListStore
from .core.preview import PreviewExtractor
from .core.report import write_report
from .core.routing import RoutingPolicy
from .core.scan_engine import BirdTaggerEngine, ImageOutcome
from .core.stats import RunStats
from .utils.log_utils import get_logger, configure_logging

logger = get_logger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description='Identify birds in photos, keep a life list, and organize or tag the photos.'
    )
    parser.add_argument('target',
                        nargs='?',
                        metavar='target_directory',
                        help='Directory of photos to process (default: $TARGET_DIRECTORY)')
    parser.add_argument('--target-directory', '--target_directory',
                        dest='target_directory',
                        help='Same as the positional target_directory')
    parser.add_argument('--mode', '--execution-mode', '--execution_mode',
                        dest='mode',
                        choices=['organize', 'tag', 'xmp'],
                        help="'organize' moves photos into family/genus/species folders, "
                             "'tag' (or 'xmp') writes XMP sidecars (default: $EXECUTION_MODE)")
    parser.add_argument('--api',
                        choices=['openai', 'claude', 'gemini'],
                        help='Vision API provider (default: openai)')
    parser.add_argument('--tier1-model',
                        help="Cheap first-pass model (default: the provider's small model)")
    parser.add_argument('--tier2-model',
                        help="Stronger fallback model (default: the provider's large model)")
    parser.add_argument('--threshold',
                        type=float,
                        help='Confidence below which a result is escalated (default: 0.60)')
    parser.add_argument('--life-list',
                        type=Path,
                        help='Path to the life list JSON (default: ~/.bird_tagger/life_list.json, or $LIFE_LIST_PATH)')
    parser.add_argument('--persist-every',
                        type=int,
                        help='Also save the life list after every N photos with birds (default: only at the end)')
    parser.add_argument('--preview-size',
                        type=int,
                        help='Longest side of the preview sent to the API, 0 for original size (default: 1024)')
    parser.add_argument('--retries',
                        type=int,
                        help='Retry failed API calls this many times (default: 0, fail fast)')
    parser.add_argument('--no-report',
                        action='store_true',
                        help='Do not write the HTML report')
    parser.add_argument('--debug',
                        action='store_true',
                        help='Enable debug mode')
    args = parser.parse_args(argv)
    if args.target_directory is None:
        args.target_directory = args.target
    return args


def build_engine(config: RunConfig) -> BirdTaggerEngine:
    client = get_client(config.api, max_retries=config.retries)
    routing = RoutingPolicy(
        client,
        tier1_model=config.tier1_model,
        tier2_model=config.tier2_model,
        threshold=config.threshold,
    )
    return BirdTaggerEngine(
        target_dir=config.target_dir,
        routing=routing,
        applier=OutputApplier(config.mode, config.target_dir),
        life_list=LifeListStore(config.life_list_path),
        preview=PreviewExtractor(max_size=config.preview_size),
        persist_every=config.persist_every,
    )


def print_summary(console: Console, stats: RunStats) -> None:
    table = Table(title="Run summary", show_header=False)
    table.add_column("Metric", style="bold")
    table.add_column("Value")
    table.add_row("Mode", stats.mode)
    table.add_row("Photos with birds", str(stats.total_processed))
    table.add_row("Species seen", ", ".join(stats.species_seen) or "-")
    table.add_row("New lifers", ", ".join(stats.lifers) or "-")
    table.add_row("Needs manual review", str(stats.manual_review_count))
    table.add_row("No birds found", str(stats.no_detection_count))
    table.add_row("Preview failures", str(stats.extraction_failures))
    table.add_row("Output failures", str(stats.output_failures))
    console.print(table)


def cli_run(engine: BirdTaggerEngine, config: RunConfig, console: Console) -> RunStats:
    logger.info(f"Execution mode: {config.mode.value}, API: {config.api} "
                f"({engine.routing.tier1_model} -> {engine.routing.tier2_model})")

    with Progress(
        SpinnerColumn(),
        TextColumn("[bold blue]{task.description}"),
        BarColumn(bar_width=None),
        TextColumn("({task.completed}/{task.total})"),
        TimeElapsedColumn(),
        console=console,
    ) as progress:
        task = progress.add_task("Scanning...", total=None)

        def on_scan_complete(count: int) -> None:
            progress.update(task, total=count)

        def on_image_start(path: Path, index: int, total: int) -> None:
            progress.update(task, description=path.name)

        def on_image_complete(outcome: ImageOutcome, index: int, total: int) -> None:
            progress.update(task, completed=index)

        engine.on_scan_complete = on_scan_complete
        engine.on_image_start = on_image_start
        engine.on_image_complete = on_image_complete
        stats = engine.run()

    if config.report:
        report_path = write_report(stats, config.target_dir)
        console.print(f"Report: {report_path}")
    print_summary(console, stats)
    return stats


def main(argv=None):
    args = parse_args(argv)
    console = Console()
    configure_logging(logging.DEBUG if args.debug else logging.INFO, console=console)

    try:
        config = load_config(args)
    except ValueError as err:
        logger.error(f"Error: {err}")
        sys.exit(1)

    try:
        engine = build_engine(config)
    except ValueError as err:
        # Missing API key or unsupported provider
        logger.error(f"Error: {err}")
        sys.exit(1)

    try:
        cli_run(engine, config, console)
    except ClassificationServiceError as err:
        logger.error(f"Classification failed, aborting the batch: {err}")
        sys.exit(3)


if __name__ == "__main__":
    main()
