"""Arguments and run/report plumbing shared by the CLI commands."""

import argparse
import asyncio
import json
import logging
from typing import Any, AsyncContextManager, Callable, Dict, List, Optional

from ..core.errors import ConfigurationError
from ..core.models import BenchmarkConfig, BenchmarkResult
from ..core.runner import BenchmarkRunner
from ..results.aggregator import ReportAggregator, samples_to_tsv
from ..results.report import LatencyReport, build_report, print_report

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def add_benchmark_arguments(parser: argparse.ArgumentParser, parallelism: bool = True) -> None:
    """Rate, concurrency and phase size options."""
    parser.add_argument(
        "--qps",
        type=float,
        default=10.0,
        help="Target queries per second; 'inf' for no rate limit (default: 10)"
    )
    if parallelism:
        parser.add_argument(
            "-k", "--parallelism",
            type=int,
            default=1,
            help="Maximum number of concurrent queries (default: 1)"
        )
    parser.add_argument(
        "-n", "--num-queries",
        type=int,
        default=100,
        help="Number of measured queries (default: 100)"
    )
    parser.add_argument(
        "-w", "--warmup-queries",
        type=int,
        default=10,
        help="Number of warmup queries run before measuring (default: 10)"
    )


def add_output_arguments(parser: argparse.ArgumentParser, samples: bool = True) -> None:
    """Export, chart and verbosity options."""
    parser.add_argument(
        "--output",
        type=str,
        help="Output file path for the summary (TSV, or CSV with a .csv suffix)"
    )
    parser.add_argument(
        "--json",
        type=str,
        help="Output JSON file path for the full results"
    )
    if samples:
        parser.add_argument(
            "--samples-output",
            type=str,
            help="Output TSV file path for per-query timings"
        )
    parser.add_argument(
        "--chart",
        type=str,
        help="Output chart PNG path"
    )
    parser.add_argument(
        "--fail-on-errors",
        action="store_true",
        help="Exit with status 1 if any measured query failed"
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output (only show final results)"
    )
    verbosity.add_argument(
        "--verbose",
        action="store_true",
        help="Log every query"
    )


def configure_logging(args: argparse.Namespace) -> None:
    if getattr(args, "quiet", False):
        level = logging.WARNING
    elif getattr(args, "verbose", False):
        level = logging.DEBUG
    else:
        level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)


def config_from_args(args: argparse.Namespace, concurrency: Optional[int] = None) -> BenchmarkConfig:
    """Build the validated run configuration; raises ConfigurationError."""
    return BenchmarkConfig(
        rate=args.qps,
        concurrency=args.parallelism if concurrency is None else concurrency,
        warmup_count=args.warmup_queries,
        measured_count=args.num_queries,
    )


def parse_concurrency_levels(value: str) -> List[int]:
    """Parse a comma-separated list of concurrency levels."""
    try:
        levels = [int(part) for part in value.split(",") if part.strip()]
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid concurrency levels: {value!r}")
    if not levels:
        raise argparse.ArgumentTypeError("at least one concurrency level is required")
    return levels


def save_summary(aggregator: ReportAggregator, path: str) -> None:
    """Write the summary table, as CSV when the path ends in .csv and TSV otherwise."""
    if path.lower().endswith(".csv"):
        aggregator.to_csv(path)
    else:
        aggregator.to_tsv(path)
    print(f"\nResults saved to: {path}")


def save_json(data: Dict[str, Any], path: str) -> None:
    with open(path, "w") as f:
        json.dump(data, f, indent=2)
    print(f"Results JSON saved to: {path}")


async def run_benchmark(
    config: BenchmarkConfig,
    operation: AsyncContextManager[Any],
) -> BenchmarkResult:
    """Enter the operation and run warmup plus measurement with it."""
    async with operation as call:
        runner = BenchmarkRunner(config, call)
        return await runner.run()


def report_results(args: argparse.Namespace, result: BenchmarkResult) -> LatencyReport:
    """Print the report and write any requested files."""
    report = build_report(result)
    print()
    print_report(report)

    if args.output:
        aggregator = ReportAggregator()
        aggregator.add_report(report)
        save_summary(aggregator, args.output)

    if args.samples_output:
        samples_to_tsv(result.samples, args.samples_output)
        print(f"Samples saved to: {args.samples_output}")

    if args.json:
        save_json({"run": result.to_dict(), "report": report.to_dict()}, args.json)

    if args.chart:
        # matplotlib is only loaded when a chart was asked for
        from ..results.charts import generate_latency_chart

        generate_latency_chart(report, result.samples, output_path=args.chart)

    return report


def execute(
    args: argparse.Namespace,
    operation_factory: Callable[[int], AsyncContextManager[Any]],
) -> int:
    """
    Run one benchmark from parsed arguments.

    Args:
        args: Parsed command-line arguments
        operation_factory: Builds the operation for a given concurrency

    Returns:
        Process exit code
    """
    configure_logging(args)

    try:
        config = config_from_args(args)
        result = asyncio.run(run_benchmark(config, operation_factory(config.concurrency)))
        report = report_results(args, result)
    except ConfigurationError as e:
        print(f"Error: {e}")
        return 2
    except KeyboardInterrupt:
        print("\nBenchmark interrupted by user")
        return 130
    except Exception as e:
        logger.debug("Benchmark failed", exc_info=True)
        print(f"\nError: {e}")
        return 1

    if args.fail_on_errors and report.error_count > 0:
        return 1
    return 0
