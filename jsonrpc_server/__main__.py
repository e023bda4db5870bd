"""Command-line entry point: ``python -m jsonrpc_server``."""

import argparse
import os

from .server import run_server


def main() -> None:
    parser = argparse.ArgumentParser(description="JSON-RPC Server")
    parser.add_argument(
        "--host",
        default=os.getenv("RPC_HOST", "0.0.0.0"),
        help="Bind address (default: $RPC_HOST or 0.0.0.0)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=int(os.getenv("RPC_PORT", "8080")),
        help="Bind port (default: $RPC_PORT or 8080)",
    )
    parser.add_argument(
        "--config",
        help="Path to YAML config file (overrides env vars)",
    )
    parser.add_argument(
        "--no-demo",
        action="store_true",
        help="Do not register the example books.* methods",
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("RPC_LOG_LEVEL", "info"),
        choices=["debug", "info", "warning", "error"],
        help="Logging level (default: $RPC_LOG_LEVEL or info)",
    )

    args = parser.parse_args()
    run_server(
        host=args.host,
        port=args.port,
        config_path=args.config,
        demo=not args.no_demo,
        log_level=args.log_level,
    )


if __name__ == "__main__":
    main()
