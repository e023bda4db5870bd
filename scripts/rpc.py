#!/usr/bin/env python3
"""JSON-RPC command-line client.

Usage:
    rpc.py call books.list '{"page": 1, "per_page": 5}'
    rpc.py call books.add '{"title": "Dune", "author": "Herbert", "topic_id": 3}'
    rpc.py notify books.list '{"page": 1}'
    rpc.py health

Configuration:
    Set RPC_URL and RPC_TOKEN environment variables, or create
    .secrets/rpc.env in the project root with:
        RPC_URL=http://localhost:8080
        RPC_TOKEN=your-token
"""

import argparse
import json
import os
import sys
from pathlib import Path

import httpx

from jsonrpc_server.client import RpcCallError, RpcClient


def load_config() -> tuple[str, str]:
    """Load client config from .secrets/rpc.env and the environment."""
    env_path = Path(__file__).parent.parent / ".secrets" / "rpc.env"
    if env_path.exists():
        for line in env_path.read_text().splitlines():
            if "=" in line and not line.startswith("#"):
                key, value = line.split("=", 1)
                os.environ.setdefault(key.strip(), value.strip())

    url = os.environ.get("RPC_URL", "http://localhost:8080")
    token = os.environ.get("RPC_TOKEN", "")
    return url, token


def parse_params(raw: str | None) -> object:
    """Parse params given on the command line as JSON."""
    if not raw:
        return {}
    try:
        return json.loads(raw)
    except ValueError as e:
        print(f"Error: params must be JSON: {e}", file=sys.stderr)
        sys.exit(2)


def cmd_call(args, client: RpcClient) -> None:
    """Call a method and print its result."""
    result = client.call(args.method, parse_params(args.params), extended=not args.plain)
    print(json.dumps(result, indent=2))


def cmd_notify(args, client: RpcClient) -> None:
    """Send a notification."""
    client.notify(args.method, parse_params(args.params), extended=not args.plain)
    print("Sent.")


def cmd_health(args, client: RpcClient) -> None:
    """Print server health."""
    data = client.health()
    print(f"Status: {data['status']} (v{data['version']}, up {data['uptime_seconds']:.0f}s)")
    print(f"Methods: {', '.join(data['methods']) or '-'}")


def main() -> None:
    parser = argparse.ArgumentParser(description="JSON-RPC client")
    parser.add_argument("--prefix", default="rpc", help="RPC route prefix (default: rpc)")
    sub = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (("call", "Call a method"), ("notify", "Send a notification")):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("method", help="Method name")
        p.add_argument("params", nargs="?", help="Params as JSON")
        p.add_argument(
            "--plain",
            action="store_true",
            help="Send the method in the body instead of the URL path",
        )

    sub.add_parser("health", help="Show server health")

    args = parser.parse_args()
    url, token = load_config()
    commands = {"call": cmd_call, "notify": cmd_notify, "health": cmd_health}

    with RpcClient(url, prefix=args.prefix, token=token or None) as client:
        try:
            commands[args.command](args, client)
        except RpcCallError as e:
            print(f"Error [{e.code}]: {e.message}", file=sys.stderr)
            for field, reasons in (e.validations or {}).items():
                print(f"  {field}: {'; '.join(reasons)}", file=sys.stderr)
            sys.exit(1)
        except httpx.HTTPError as e:
            print(f"Error connecting to server: {e}", file=sys.stderr)
            sys.exit(1)


if __name__ == "__main__":
    main()
