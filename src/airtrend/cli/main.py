"""
Command-line interface for the airtrend application.

Two subcommands are provided:

- ``transform`` loads a sample file, downsamples one or more metrics for a
  range selector and surface width, and writes the chart series as JSON.
- ``watch`` runs the memory budget monitor and cleanup sweep on an asyncio
  event loop against a process's resident memory.
"""

import argparse
import asyncio
import json
import logging
import signal
import sys
from pathlib import Path
from typing import List, Optional

import polars as pl

from ..config import get_config, set_config_path
from ..config.validators import LOG_LEVELS
from ..memory import (
    AsyncioScheduler,
    CacheRegistry,
    CleanupCoordinator,
    LoggingDiagnostics,
    MemoryBudgetMonitor,
    PsutilMemoryProbe,
    SessionStore,
)
from ..models.series import RangeKind, RangeSelector, ensure_utc
from ..series import SeriesTransformer
from ..storage import load_samples, save_transform_results
from ..validation import (
    ValidationError,
    handle_cli_error,
    validate_enum_choice,
    validate_iso_datetime,
    validate_positive_float,
    validate_positive_integer,
)

LOG_FORMAT = "%(asctime)s [%(levelname)-5.5s] %(name)s:%(filename)s:%(lineno)d\t %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

logger = logging.getLogger(__name__)


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level),
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        stream=sys.stdout,
        force=True,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="airtrend",
        description="Downsample air quality history for charts and enforce a memory budget.",
    )
    parser.add_argument("--config", type=Path, help="Path to config.toml (defaults to conf/config.toml).")
    parser.add_argument(
        "--log-level",
        type=str,
        help=f"Logging level, one of {LOG_LEVELS}. Defaults to [general].log_level.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    transform = subparsers.add_parser("transform", help="Downsample a sample file into chart series.")
    transform.add_argument("input", type=str, help="Sample file (.parquet or .json).")
    transform.add_argument(
        "-m",
        "--metrics",
        type=str,
        default="aqi",
        help="Comma-separated metric keys to transform (e.g. 'aqi,pm25'). Default: aqi.",
    )
    transform.add_argument(
        "-r",
        "--range",
        dest="range_kind",
        type=str,
        default=RangeKind.LAST_7D.value,
        help=f"Range selector, one of {[kind.value for kind in RangeKind]}. Default: 7d.",
    )
    transform.add_argument("--start", type=str, help="Custom range start (ISO 8601).")
    transform.add_argument("--end", type=str, help="Custom range end (ISO 8601).")
    transform.add_argument("--width", type=str, help="Chart surface width in pixels.")
    transform.add_argument("--budget", type=str, help="Explicit point budget, overriding --width.")
    transform.add_argument("--now", type=str, help="Reference instant (ISO 8601). Defaults to the current time.")
    transform.add_argument("-o", "--output", type=str, help="Output JSON file. Prints to stdout if omitted.")

    watch = subparsers.add_parser("watch", help="Run the memory budget monitor.")
    watch.add_argument("--pid", type=str, help="Process to monitor. Defaults to this process.")
    watch.add_argument("--duration", type=str, help="Stop after this many seconds. Runs until interrupted if omitted.")
    watch.add_argument("--interval", type=str, help="Override [memory].monitor_interval_seconds.")

    return parser


def _parse_selector(args: argparse.Namespace) -> RangeSelector:
    kind_value = validate_enum_choice(
        args.range_kind, [kind.value for kind in RangeKind], field_name="--range argument"
    )
    kind = RangeKind(kind_value)
    if kind is not RangeKind.CUSTOM:
        if args.start or args.end:
            logger.warning("--start/--end are only used with --range custom, ignoring them")
        return RangeSelector(kind)

    start = ensure_utc(validate_iso_datetime(args.start, "--start argument")) if args.start else None
    end = ensure_utc(validate_iso_datetime(args.end, "--end argument")) if args.end else None
    if start is None or end is None:
        logger.warning("Custom range is missing a bound, falling back to the last 30 days")
    elif start > end:
        raise ValidationError(
            f"--start ({args.start}) must not be after --end ({args.end})",
            field_name="--start argument",
            value=args.start,
        )
    return RangeSelector(kind, start=start, end=end)


def run_transform(args: argparse.Namespace) -> int:
    try:
        selector = _parse_selector(args)
        metric_keys = [key.strip() for key in args.metrics.split(",") if key.strip()]
        if not metric_keys:
            raise ValidationError("--metrics must name at least one metric", field_name="--metrics argument")
        width = (
            validate_positive_float(args.width, min_value=0.0, field_name="--width argument")
            if args.width is not None
            else None
        )
        budget = (
            validate_positive_integer(args.budget, field_name="--budget argument")
            if args.budget is not None
            else None
        )
        now = ensure_utc(validate_iso_datetime(args.now, "--now argument")) if args.now else None
    except ValidationError as e:
        handle_cli_error(e, "transform argument validation", exit_code=2, logger=logger)

    try:
        samples = load_samples(args.input)
    except (OSError, ValueError, pl.exceptions.PolarsError) as e:
        handle_cli_error(e, "loading samples", exit_code=1, logger=logger)

    transformer = SeriesTransformer.from_config()
    results = transformer.transform_many(
        samples, selector, metric_keys, surface_width_px=width, point_budget=budget, now=now
    )

    for key, result in results.items():
        meta = result.meta
        logger.info(
            f"{key}: {meta.original_count} samples -> {meta.rendered_count} points"
            + (f" ({meta.bin_width_hours}h bins)" if meta.is_binned else "")
        )

    extra = {"range": selector.kind.value, "source": args.input}
    if args.output:
        save_transform_results(results, args.output, extra=extra)
    else:
        document = dict(extra)
        document["metrics"] = {key: result.to_dict() for key, result in results.items()}
        json.dump(document, sys.stdout, indent=2, ensure_ascii=False, default=str)
        sys.stdout.write("\n")
    return 0


async def _watch(pid: Optional[int], duration: Optional[float], interval: Optional[float]) -> None:
    memory_config = get_config().memory
    scheduler = AsyncioScheduler()
    probe = PsutilMemoryProbe(pid)
    diagnostics = LoggingDiagnostics()

    registry = CacheRegistry.from_budgets(memory_config.subsystems, clock=scheduler.now)
    coordinator = CleanupCoordinator(
        registry,
        memory_config.budget,
        scheduler,
        probe=probe,
        session_stores=[SessionStore()],
        throttle_seconds=memory_config.cleanup_throttle_seconds,
        recheck_seconds=memory_config.emergency_recheck_seconds,
        diagnostics=diagnostics,
    )
    monitor = MemoryBudgetMonitor(
        memory_config.budget,
        coordinator,
        scheduler,
        probe=probe,
        interval_seconds=interval or memory_config.monitor_interval_seconds,
        sweep_interval_seconds=memory_config.sweep_interval_seconds,
        history_limit=memory_config.history_limit,
        diagnostics=diagnostics,
    )

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for signum in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(signum, stop_event.set)
        except (NotImplementedError, RuntimeError):
            logger.debug(f"Signal handlers unavailable for {signum}")

    logger.info(f"Watching memory of PID {probe.pid}")
    monitor.tick()
    monitor.start()
    try:
        if duration is None:
            await stop_event.wait()
        else:
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=duration)
            except asyncio.TimeoutError:
                pass
    finally:
        monitor.stop()

    stats = monitor.get_stats()
    logger.info(
        f"Finished watching: state {stats['state']}, high water mark "
        f"{stats['high_water_mb'] or 0.0:.1f}MB, {stats['cleanup_passes']} cleanup passes"
    )


def run_watch(args: argparse.Namespace) -> int:
    try:
        pid = validate_positive_integer(args.pid, field_name="--pid argument") if args.pid else None
        duration = (
            validate_positive_float(args.duration, min_value=0.0, field_name="--duration argument")
            if args.duration
            else None
        )
        interval = (
            validate_positive_float(args.interval, min_value=0.0, field_name="--interval argument")
            if args.interval
            else None
        )
    except ValidationError as e:
        handle_cli_error(e, "watch argument validation", exit_code=2, logger=logger)

    asyncio.run(_watch(pid, duration, interval))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Parse arguments, load configuration and run the selected subcommand.

    Returns:
        Process exit status

    Raises:
        SystemExit: On configuration errors, validation failures or a
            memory-pressure restart request.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.config:
        set_config_path(args.config)

    try:
        app_config = get_config()
    except (FileNotFoundError, ValidationError) as e:
        setup_logging("INFO")
        handle_cli_error(e, "configuration loading", exit_code=1, include_traceback=True, logger=logger)

    try:
        level = validate_enum_choice(
            args.log_level or app_config.general.log_level, LOG_LEVELS, field_name="--log-level argument"
        )
    except ValidationError as e:
        setup_logging("INFO")
        handle_cli_error(e, "log level validation", exit_code=2, logger=logger)
    setup_logging(level)

    if args.command == "transform":
        return run_transform(args)
    return run_watch(args)


def main_cli() -> None:
    """Console entry point."""
    sys.exit(main())


if __name__ == "__main__":
    main_cli()
