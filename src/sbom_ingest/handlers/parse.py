# sbom_ingest/handlers/parse.py

import logging
import argparse

from ..config import ParserConfig
from ..pipeline import parse_sbom
from ..utilities.error_handling import handler_error_wrapper
from ..utilities.output import print_parse_summary, read_sbom_file, save_results_to_file

logger = logging.getLogger("sbom-ingest")


def build_parser_config(params: argparse.Namespace) -> ParserConfig:
    """Map command-line options onto a ParserConfig."""
    return ParserConfig(
        unknown_severity=getattr(params, 'unknown_severity', 'none'),
        derive_severity_from_score=getattr(params, 'derive_severity', False),
        strict_schema=getattr(params, 'strict', False),
    )


@handler_error_wrapper
def handle_parse(params: argparse.Namespace) -> bool:
    """
    Handler for the 'parse' command. Normalizes an SBOM file.

    Args:
        params: Command line parameters

    Returns:
        bool: True on success

    Raises:
        FileSystemError: If the file cannot be read or the output cannot be written
        ParseError: If the document cannot be parsed
    """
    print(f"\n--- Parsing SBOM: {params.path} ---")
    config = build_parser_config(params)
    result = parse_sbom(read_sbom_file(params.path), params.path, config)

    print_parse_summary(result, show_components=getattr(params, 'show_components', False))
    if result.warnings:
        logger.info(f"{len(result.warnings)} warnings recorded while parsing {params.path}")

    if params.output:
        save_results_to_file(params.output, result.to_dict(include_warnings=params.include_warnings))
    return True
