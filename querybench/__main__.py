"""Main entry point for the querybench package.

Usage:
    python -m querybench dynamodb --table TABLE -p PK -s SK -P VALUE -S START -E END
    python -m querybench http --url URL
    python -m querybench sweep {dynamodb,http} ... --concurrency-levels 1,2,4,8
"""

import sys


def print_help():
    """Print usage help."""
    print("""
Latency/throughput benchmark for remote queries

Usage:
    python -m querybench <command> [options]

Commands:
    dynamodb  Benchmark a DynamoDB range query
    http      Benchmark an HTTP endpoint
    sweep     Repeat a benchmark across several concurrency levels

Examples:
    # 100 range queries at 10 QPS, 4 in flight, after 10 warmup queries
    python -m querybench dynamodb \\
        --table events -p pk -s sk \\
        -P customer#42 -S 2024-01-01 -E 2024-01-31 \\
        -n 100 --qps 10 -k 4 -w 10

    # HTTP endpoint with no rate limit
    python -m querybench http --url http://localhost:8080/health --qps inf -k 8

    # Concurrency sweep
    python -m querybench sweep http --url http://localhost:8080/health \\
        --concurrency-levels 1,2,4,8

Use '<command> --help' for more information on a specific command.
""")


def main():
    """Main entry point."""
    if len(sys.argv) < 2:
        print_help()
        sys.exit(1)

    command = sys.argv[1]

    if command in ("-h", "--help", "help"):
        print_help()
        sys.exit(0)

    argv = sys.argv[2:]

    if command == "dynamodb":
        from .cli.dynamodb import main as dynamodb_main
        dynamodb_main(argv)
    elif command == "http":
        from .cli.http import main as http_main
        http_main(argv)
    elif command == "sweep":
        from .cli.sweep import main as sweep_main
        sweep_main(argv)
    else:
        print(f"Unknown command: {command}")
        print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
