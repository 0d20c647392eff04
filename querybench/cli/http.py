"""HTTP endpoint benchmark CLI command."""

import argparse
import sys
from typing import Callable, Dict, List

from ..operations.http import HttpOperation
from .common import add_benchmark_arguments, add_output_arguments, execute

EPILOG = """
Examples:
  # 100 GETs at 10 QPS
  python -m querybench http --url http://localhost:8080/health

  # Authenticated POSTs, unrestricted rate, 8 in flight
  python -m querybench http \\
      --url https://api.example.com/search --method POST \\
      --header "Authorization: Bearer $API_TOKEN" \\
      --qps inf -k 8 -n 500
"""


def parse_headers(values: List[str]) -> Dict[str, str]:
    """Parse repeated 'Name: value' header options."""
    headers = {}
    for value in values or []:
        name, sep, content = value.partition(":")
        if not sep or not name.strip():
            raise argparse.ArgumentTypeError(f"invalid header {value!r}, expected 'Name: value'")
        headers[name.strip()] = content.strip()
    return headers


def add_http_arguments(parser: argparse.ArgumentParser) -> None:
    """Request options."""
    parser.add_argument(
        "--url",
        required=True,
        help="URL to request"
    )
    parser.add_argument(
        "--method",
        default="GET",
        help="HTTP method (default: GET)"
    )
    parser.add_argument(
        "--header",
        action="append",
        default=[],
        help="Extra request header as 'Name: value' (repeatable)"
    )
    parser.add_argument(
        "--insecure-ssl",
        action="store_true",
        help="Disable TLS certificate verification (for self-signed certs)"
    )
    parser.add_argument(
        "--accept-errors",
        action="store_true",
        help="Count 4xx/5xx responses by status code instead of as failures"
    )


def operation_factory(args: argparse.Namespace) -> Callable[[int], HttpOperation]:
    """Build a request per concurrency level from parsed arguments."""
    headers = parse_headers(args.header)

    def build(concurrency: int) -> HttpOperation:
        return HttpOperation(
            url=args.url,
            method=args.method,
            headers=headers,
            insecure_ssl=args.insecure_ssl,
            fail_on_status=not args.accept_errors,
            connection_limit=concurrency,
        )

    return build


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="HTTP endpoint latency benchmark",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=EPILOG,
    )
    add_http_arguments(parser)
    add_benchmark_arguments(parser)
    add_output_arguments(parser)
    return parser


def main(argv=None):
    """Main entry point for the HTTP benchmark."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        factory = operation_factory(args)
    except argparse.ArgumentTypeError as e:
        parser.error(str(e))

    print(
        f"Starting benchmark with {args.num_queries} {args.method.upper()} {args.url} "
        f"at {args.qps} QPS with parallelism of {args.parallelism}"
    )

    sys.exit(execute(args, factory))


if __name__ == "__main__":
    main()
