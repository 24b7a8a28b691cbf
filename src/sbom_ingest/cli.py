# sbom_ingest/cli.py

import argparse
import os
import logging
from argparse import RawTextHelpFormatter

from .config import CANONICAL_SEVERITIES, env_flag
from .exceptions import ConfigurationError

logger = logging.getLogger("sbom-ingest")


# --- Helper functions for common arguments ---
def add_common_input_options(subparser):
    input_args = subparser.add_argument_group("Input")
    input_args.add_argument("--path", help="Path to the SBOM file (CycloneDX or SPDX JSON).", metavar="PATH", required=True)


def add_common_output_options(subparser):
    output_args = subparser.add_argument_group("Output Options")
    output_args.add_argument("--output", help="Saves the result to this file (JSON format).", metavar="PATH")
    output_args.add_argument("--include-warnings", help="Include recorded warnings in the saved JSON.", action="store_true", default=False)


def add_common_parser_options(subparser):
    parser_args = subparser.add_argument_group("Parser Options")
    parser_args.add_argument(
        "--unknown-severity",
        help="Severity assigned when a rating carries an unrecognized severity (Default: none).",
        choices=list(CANONICAL_SEVERITIES),
        default=os.getenv("SBOM_INGEST_UNKNOWN_SEVERITY", "none"),
    )
    parser_args.add_argument(
        "--derive-severity",
        help="Derive severity from the CVSS score when a rating has a score but no severity.",
        action="store_true",
        default=env_flag("SBOM_INGEST_DERIVE_SEVERITY"),
    )


# --- Main Parsing Function ---
def parse_cmdline_args(argv=None):
    """
    Parse command line arguments.

    Args:
        argv: Argument list (defaults to sys.argv[1:])

    Returns:
        argparse.Namespace: Parsed command line arguments

    Raises:
        ConfigurationError: If arguments are missing or invalid
    """
    parser = argparse.ArgumentParser(
        description="SBOM Ingest - Normalize CycloneDX and SPDX documents into one component and vulnerability model.",
        formatter_class=RawTextHelpFormatter,
        epilog="""
Environment Variables:
  SBOM_INGEST_LOG               : Default log level (DEBUG, INFO, WARNING, ERROR)
  SBOM_INGEST_STRICT            : Run schema validators in 'validate' (true/false)
  SBOM_INGEST_UNKNOWN_SEVERITY  : Severity for unrecognized rating tokens
  SBOM_INGEST_DERIVE_SEVERITY   : Derive severity from CVSS score (true/false)

Example Usage:
  # Detect the format and version of a document
  sbom-ingest detect --path ./sbom/bom.json

  # Parse a document and save the normalized result
  sbom-ingest parse --path ./sbom/app.spdx.json --output normalized.json

  # Validate a document, including the official schema checks
  sbom-ingest validate --path ./sbom/bom.json --strict
"""
    )

    # --- Global Arguments (apply to all subcommands) ---
    global_args = parser.add_argument_group("Global Arguments")
    global_args.add_argument(
        "--log",
        help="Logging level (Default: INFO). Overrides SBOM_INGEST_LOG env var.",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=os.getenv("SBOM_INGEST_LOG", "INFO").upper(),
    )
    global_args.add_argument(
        "--log-file",
        help="Also write the log to this file (overwritten on each run).",
        metavar="PATH",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands", required=True)

    # --- 'detect' Subcommand ---
    detect_parser = subparsers.add_parser(
        "detect",
        help="Report the SBOM format and version of a file.",
        formatter_class=RawTextHelpFormatter,
    )
    add_common_input_options(detect_parser)

    # --- 'parse' Subcommand ---
    parse_parser = subparsers.add_parser(
        "parse",
        help="Parse an SBOM into the normalized component and vulnerability model.",
        formatter_class=RawTextHelpFormatter,
    )
    add_common_input_options(parse_parser)
    add_common_parser_options(parse_parser)
    add_common_output_options(parse_parser)
    parse_parser.add_argument("--show-components", help="Print every component after parsing.", action="store_true", default=False)

    # --- 'validate' Subcommand ---
    validate_parser = subparsers.add_parser(
        "validate",
        help="Check an SBOM for conformance problems. Exits non-zero when invalid.",
        formatter_class=RawTextHelpFormatter,
    )
    add_common_input_options(validate_parser)
    add_common_parser_options(validate_parser)
    validate_parser.add_argument(
        "--strict",
        help="Also run the official CycloneDX / SPDX schema validators.",
        action="store_true",
        default=env_flag("SBOM_INGEST_STRICT"),
    )
    validate_parser.add_argument("--output", help="Saves the validation report to this file (JSON format).", metavar="PATH")

    # --- Validate args after parsing ---
    args = parser.parse_args(argv)

    if not args.path or not args.path.strip():
        raise ConfigurationError(f"Path is required for {args.command} command")
    if not os.path.exists(args.path):
        raise ConfigurationError(f"Path does not exist: {args.path}")
    if os.path.isdir(args.path):
        raise ConfigurationError(f"Path must be a file, not a directory: {args.path}")

    output = getattr(args, "output", None)
    if output and os.path.isdir(output):
        raise ConfigurationError(f"Output path is a directory: {output}")

    return args
