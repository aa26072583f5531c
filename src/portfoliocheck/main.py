from __future__ import annotations

import argparse
import logging
import sys
from typing import Any, Dict, List, Optional

from .checker.lookup import Checker
from .config.config_parser import load_config, parse_config_file, resolver_config_from
from .config.logging_config import init_logging
from .ingest import DomainLimitExceeded, UploadTooLarge, decode_upload, split_domain_list
from .resolver.base import ResolverError
from .resolver.dnspython_client import DnsPythonResolver


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="portfoliocheck",
        description="Report DNSSEC validation status for domain names",
    )
    parser.add_argument("--config", default=None, help="Path to YAML config")
    parser.add_argument(
        "-v",
        "--var",
        action="append",
        default=[],
        metavar="KEY=YAML",
        help="Set a config variable (overrides config file and environment)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("serve", help="Run the HTTP front end")

    check = sub.add_parser("check", help="Check a single name")
    check.add_argument("name")
    check.add_argument("type", nargs="?", default=None, help="Record type (default NS)")

    batch = sub.add_parser("batch", help="Check a domain list file, bogus names first")
    batch.add_argument("file", help="File with names separated by newlines/commas")
    return parser


def _load(args: argparse.Namespace) -> Dict[str, Any]:
    if args.config:
        return parse_config_file(args.config, cli_vars=args.var)
    return load_config(cli_vars=args.var)


def main(argv: List[str] | None = None) -> int:
    """
    Main entry point for the portfoliocheck command.
    Parses arguments, loads configuration, initializes logging and runs the
    selected command.

    Args:
        argv: Command-line arguments.

    Returns:
        An exit code: 0 on success, 1 on configuration or input errors, 2 when
        the resolver fails.

    Example use:
        portfoliocheck --config config.yaml serve
        portfoliocheck check example.nl DS
        portfoliocheck batch domains.csv
    """
    args = _build_parser().parse_args(argv)

    try:
        cfg = _load(args)
    except (OSError, ValueError) as exc:
        print(str(exc), file=sys.stderr)
        return 1

    init_logging(cfg.get("logging"))
    logger = logging.getLogger("portfoliocheck.main")
    if args.config:
        logger.info("Loaded config from %s", args.config)

    if args.command == "serve":
        from .servers.webserver import run_webserver

        run_webserver(cfg)
        return 0

    resolver_cfg = resolver_config_from(cfg)
    checker = Checker(lambda: DnsPythonResolver(resolver_cfg))

    if args.command == "check":
        try:
            print(checker.check_one(args.name, args.type))
        except ResolverError as exc:
            logger.error("Lookup of %s failed: %s", args.name, exc)
            return 2
        return 0

    upload_cfg = cfg["upload"]
    try:
        with open(args.file, "rb") as f:
            data = f.read()
        names = split_domain_list(
            decode_upload(data, int(upload_cfg["max_bytes"])),
            int(upload_cfg["max_domains"]),
        )
    except (OSError, UploadTooLarge) as exc:
        print(str(exc), file=sys.stderr)
        return 1
    except DomainLimitExceeded as exc:
        print(str(exc))
        return 1

    for line in checker.check_many(names):
        print(line)
    return 0


def console_main(argv: Optional[List[str]] = None) -> None:
    """Console-script wrapper that exits with main()'s status."""

    sys.exit(main(argv))


if __name__ == "__main__":
    console_main()
