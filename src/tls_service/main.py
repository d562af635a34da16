"""Command-line entry point for the development TLS service."""

import argparse
import json
import logging
import sys
from typing import Optional

from selfsigned import CertificateVerifier, CredentialError

from .server import ServerSettings, build_config_for, serve

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tls_service",
        description="Generate an in-memory self-signed certificate and serve or inspect it.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_identity_args(sub: argparse.ArgumentParser) -> None:
        sub.add_argument("--common-name", default="localhost", help="Certificate common name")
        sub.add_argument("--organization", default="self-signed", help="Certificate organization")
        sub.add_argument("--no-organization", action="store_true", help="Omit the organization attribute")
        sub.add_argument("--validity-days", type=int, default=None, help="Validity in days (default: ten years)")

    serve_parser = subparsers.add_parser("serve", help="Run the development HTTPS server")
    add_identity_args(serve_parser)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind")
    serve_parser.add_argument("--port", type=int, default=8443, help="TCP port")
    serve_parser.add_argument("--log-level", default="info", help="Log level")

    show_parser = subparsers.add_parser("show", help="Generate a certificate and print its details")
    add_identity_args(show_parser)
    show_parser.add_argument("--pem", action="store_true", help="Print the certificate PEM instead of JSON")

    return parser


def settings_from_args(args: argparse.Namespace) -> ServerSettings:
    values = {
        "common_name": args.common_name,
        "organization": None if args.no_organization else args.organization,
        "validity_days": args.validity_days,
    }
    if args.command == "serve":
        values.update(host=args.host, port=args.port, log_level=args.log_level)
    return ServerSettings(**values)


def main(argv: Optional[list] = None) -> int:
    args = build_parser().parse_args(argv)

    level = getattr(args, "log_level", "info").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    settings = settings_from_args(args)

    try:
        if args.command == "serve":
            serve(settings)
            return 0

        tls_config = build_config_for(settings)
    except CredentialError as e:
        logger.error(f"Failed to build credential: {e}")
        return 1

    credential = tls_config.certificate
    if args.pem:
        sys.stdout.write(credential.certificate_pem.decode())
    else:
        info = CertificateVerifier.describe_certificate(credential.leaf)
        info["serial_number"] = str(info["serial_number"])
        sys.stdout.write(json.dumps(info, indent=2) + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
