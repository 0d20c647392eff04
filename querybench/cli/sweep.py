"""Concurrency sweep CLI command."""

import argparse
import asyncio
import dataclasses
import logging
import sys

from ..core.errors import ConfigurationError
from ..sweeps.concurrency_sweep import ConcurrencySweep
from . import dynamodb, http
from .common import (
    add_benchmark_arguments,
    add_output_arguments,
    config_from_args,
    configure_logging,
    parse_concurrency_levels,
    save_json,
    save_summary,
)

logger = logging.getLogger(__name__)

EPILOG = """
Examples:
  # DynamoDB throughput at 1, 2, 4 and 8 concurrent queries, no rate limit
  python -m querybench sweep dynamodb \\
      --table events -p pk -s sk \\
      -P customer#42 -S 2024-01-01 -E 2024-01-31 \\
      --qps inf --concurrency-levels 1,2,4,8 \\
      --output sweep.tsv --chart sweep.png

  # HTTP endpoint sweep
  python -m querybench sweep http --url http://localhost:8080/search \\
      --concurrency-levels 1,4,16,64 -n 1000
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Run the same benchmark across several concurrency levels",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=EPILOG,
    )
    backends = parser.add_subparsers(dest="backend", required=True, metavar="{dynamodb,http}")

    dynamodb_parser = backends.add_parser("dynamodb", help="Sweep a DynamoDB range query")
    dynamodb.add_dynamodb_arguments(dynamodb_parser)

    http_parser = backends.add_parser("http", help="Sweep an HTTP endpoint")
    http.add_http_arguments(http_parser)

    for sub in (dynamodb_parser, http_parser):
        add_benchmark_arguments(sub, parallelism=False)
        sub.add_argument(
            "--concurrency-levels",
            type=parse_concurrency_levels,
            default=[1, 2, 4, 8],
            help="Comma-separated concurrency levels to test in order (default: 1,2,4,8)"
        )
        add_output_arguments(sub, samples=False)
    return parser


def main(argv=None):
    """Main entry point for the concurrency sweep."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args)

    try:
        if args.backend == "dynamodb":
            factory = dynamodb.operation_factory(args)
        else:
            factory = http.operation_factory(args)
    except argparse.ArgumentTypeError as e:
        parser.error(str(e))

    try:
        base_config = config_from_args(args, concurrency=args.concurrency_levels[0])
        # Reject bad levels before anything is dispatched
        for level in args.concurrency_levels:
            dataclasses.replace(base_config, concurrency=level)
    except ConfigurationError as e:
        print(f"Error: {e}")
        sys.exit(2)

    sweep = ConcurrencySweep(base_config, factory, verbose=True)

    try:
        result = asyncio.run(sweep.run(args.concurrency_levels))

        if args.output:
            save_summary(sweep.get_aggregator(), args.output)

        if args.json:
            save_json(result.to_dict(), args.json)

        if args.chart and result.reports:
            from ..results.charts import generate_sweep_charts

            generate_sweep_charts(result.completed_levels, result.reports, output_path=args.chart)

        print(f"\nSweep completed in {result.total_duration_seconds:.1f}s")
        print(f"Levels completed: {len(result.reports)}/{len(result.levels)}")
        print(f"Overall error rate: {result.overall_error_rate:.2f}%")

        if result.failed_levels:
            sys.exit(1)
        if args.fail_on_errors and result.overall_error_rate > 0:
            sys.exit(1)

    except KeyboardInterrupt:
        print("\n\nSweep interrupted by user")
        sweep.get_aggregator().print_summary_table(title="PARTIAL RESULTS (interrupted)")
        sys.exit(130)
    except ConfigurationError as e:
        print(f"Error: {e}")
        sys.exit(2)
    except Exception as e:
        logger.debug("Sweep failed", exc_info=True)
        print(f"\nError: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
