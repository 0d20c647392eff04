"""DynamoDB range query benchmark CLI command."""

import argparse
import sys
from typing import Callable

from ..operations.dynamodb import DynamoDBRangeQuery
from .common import add_benchmark_arguments, add_output_arguments, execute

EPILOG = """
Examples:
  # 100 queries at 10 QPS, one at a time
  python -m querybench dynamodb \\
      --table events -p pk -s sk \\
      -P customer#42 -S 2024-01-01 -E 2024-01-31

  # 1000 queries at 200 QPS with up to 16 in flight
  python -m querybench dynamodb \\
      --table events -p pk -s sk \\
      -P customer#42 -S 2024-01-01 -E 2024-01-31 \\
      -n 1000 --qps 200 -k 16
"""


def add_dynamodb_arguments(parser: argparse.ArgumentParser) -> None:
    """Table and key range options."""
    parser.add_argument(
        "-t", "--table",
        required=True,
        help="DynamoDB table name"
    )
    parser.add_argument(
        "-p", "--partition-key",
        required=True,
        help="Partition key name"
    )
    parser.add_argument(
        "-s", "--sort-key",
        required=True,
        help="Sort key name"
    )
    parser.add_argument(
        "-P", "--partition-value",
        required=True,
        help="Partition key value"
    )
    parser.add_argument(
        "-S", "--sort-start",
        required=True,
        help="Sort key start value (for range query)"
    )
    parser.add_argument(
        "-E", "--sort-end",
        required=True,
        help="Sort key end value (for range query)"
    )
    parser.add_argument(
        "-r", "--region",
        default="us-west-2",
        help="AWS region (default: us-west-2)"
    )


def operation_factory(args: argparse.Namespace) -> Callable[[int], DynamoDBRangeQuery]:
    """Build a query per concurrency level from parsed arguments."""
    def build(concurrency: int) -> DynamoDBRangeQuery:
        return DynamoDBRangeQuery(
            table=args.table,
            partition_key=args.partition_key,
            sort_key=args.sort_key,
            partition_value=args.partition_value,
            sort_start=args.sort_start,
            sort_end=args.sort_end,
            region=args.region,
            max_workers=concurrency,
        )

    return build


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="DynamoDB range query latency benchmark",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=EPILOG,
    )
    add_dynamodb_arguments(parser)
    add_benchmark_arguments(parser)
    add_output_arguments(parser)
    return parser


def main(argv=None):
    """Main entry point for the DynamoDB benchmark."""
    args = build_parser().parse_args(argv)

    print(
        f"Starting benchmark with {args.num_queries} queries at {args.qps} QPS "
        f"with parallelism of {args.parallelism}"
    )
    print(f"Table: {args.table}, Partition Key: {args.partition_key} = {args.partition_value}")
    print(f"Sort Key: {args.sort_key}, Range: {args.sort_start} to {args.sort_end}")

    sys.exit(execute(args, operation_factory(args)))


if __name__ == "__main__":
    main()
