"""gopp Language Server Main Entry Point

Runs the directive-checking language server on stdio (the default, what
editors spawn), TCP or WebSocket.
"""

import sys
import os
import argparse
import logging
from typing import List, Optional

# Add parent directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

try:
    from src.language_server.server import gopp_server
except ImportError:
    from server import gopp_server


TRANSPORTS = ("stdio", "tcp", "ws")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gopp-server",
        description="Language server for gopp directive comments",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  gopp-server                                # stdio, for editors
  gopp-server --transport tcp --port 2087    # attach a debugging client
  gopp-server --prefix '// +pp:'             # non-default directive prefix
"""
    )
    parser.add_argument(
        "--transport",
        choices=TRANSPORTS,
        default="stdio",
        help="How clients connect (default: stdio)"
    )
    parser.add_argument("--host", default="127.0.0.1",
                        help="Bind address for tcp/ws")
    parser.add_argument("--port", type=int, default=2087,
                        help="Port for tcp/ws")
    parser.add_argument(
        "--prefix",
        default=gopp_server.prefix,
        help=f"Directive comment prefix (default: {gopp_server.prefix})"
    )
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Log LSP traffic at DEBUG level")
    parser.add_argument("--version", action="version",
                        version=f"gopp-server {gopp_server.version}")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for gopp-server."""
    args = build_parser().parse_args(argv)

    # stdout carries the protocol on stdio, so logging stays on stderr.
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s: %(message)s")
    gopp_server.prefix = args.prefix

    try:
        if args.transport == "tcp":
            gopp_server.start_tcp(args.host, args.port)
        elif args.transport == "ws":
            gopp_server.start_ws(args.host, args.port)
        else:
            gopp_server.start_io()
    except KeyboardInterrupt:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
