"""
raml-mock CLI

Command-line interface for serving a RAML document as a mock HTTP service.

Examples:
    # Serve api.raml on port 8080
    raml-mock -f api.raml -p 8080

    # With CORS and compression
    raml-mock -f api.raml -p 8080 --cors --compression

    # Always answer with the first of several named examples
    raml-mock -f api.raml -p 8080 --examples first
"""

import argparse
import logging
import sys
from typing import List, Optional

from .errors import DocumentLoadError
from .mock import EXAMPLE_POLICIES, MockConfig, MockServer


logger = logging.getLogger("ramlmock")


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog='raml-mock',
        description="Generate an API mock server from a RAML definition.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Serve a document on port 8080
  %(prog)s -f api.raml -p 8080

  # Enable CORS for browser clients
  %(prog)s -f api.raml -p 8080 --cors
        """
    )

    parser.add_argument('-f', '--file', required=True, help='Path to the RAML definition')
    parser.add_argument('-p', '--port', type=int, required=True, help='Port number to bind the mock service')
    parser.add_argument('--host', default='127.0.0.1', help='Host to bind (default: 127.0.0.1)')
    parser.add_argument('--cors', action='store_true', help='Enable CORS with the API')
    parser.add_argument('--compression', action='store_true', help='Enable gzip response compression')
    parser.add_argument('--examples', choices=sorted(EXAMPLE_POLICIES), default='random',
                        help='How to pick among multiple named examples (default: random)')
    parser.add_argument('--log-level', default='info', choices=['debug', 'info', 'warning', 'error'],
                        help='Log level (default: info)')
    parser.add_argument('--no-access-log', action='store_true', help='Disable request logging')

    return parser


def cmd_mock(args: argparse.Namespace) -> MockServer:
    """
    Load the document and build the mock server.

    Exits with status 1 when the document cannot be loaded.

    Args:
        args: Parsed command-line arguments

    Returns:
        Ready-to-start MockServer
    """
    config = MockConfig(
        host=args.host,
        port=args.port,
        cors=args.cors,
        compression=args.compression,
        examples_policy=args.examples,
        log_level=args.log_level,
        access_log=not args.no_access_log
    )

    try:
        return MockServer(args.file, config=config)
    except DocumentLoadError as e:
        print(f"❌ Failed to load RAML document: {e}")
        logger.debug("Document load failure", exc_info=True)
        sys.exit(1)


def main(argv: Optional[List[str]] = None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    server = cmd_mock(args)

    # Start server (blocking)
    try:
        server.start()
    except KeyboardInterrupt:
        print("\n\n👋 Mock service stopped")


if __name__ == '__main__':
    main()
