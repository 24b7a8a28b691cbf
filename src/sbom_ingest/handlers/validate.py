# sbom_ingest/handlers/validate.py

import logging
import argparse

from ..utilities.error_handling import handler_error_wrapper
from ..utilities.output import print_validation_report, read_sbom_file, save_results_to_file
from ..validator import validate_document
from .parse import build_parser_config

logger = logging.getLogger("sbom-ingest")


@handler_error_wrapper
def handle_validate(params: argparse.Namespace) -> bool:
    """
    Handler for the 'validate' command.

    Args:
        params: Command line parameters

    Returns:
        bool: True when the document is valid, False otherwise
    """
    print(f"\n--- Validating SBOM: {params.path} ---")
    config = build_parser_config(params)
    report = validate_document(read_sbom_file(params.path), params.path, strict=config.strict_schema, config=config)

    print_validation_report(report)
    if params.output:
        save_results_to_file(params.output, report.to_dict())
    return report.valid
