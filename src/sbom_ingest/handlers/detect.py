# sbom_ingest/handlers/detect.py

import logging
import argparse

from ..parsers.detector import detect_format
from ..utilities.error_handling import handler_error_wrapper
from ..utilities.output import read_sbom_file

logger = logging.getLogger("sbom-ingest")


@handler_error_wrapper
def handle_detect(params: argparse.Namespace) -> bool:
    """
    Handler for the 'detect' command. Reports the format and version of a file.

    Args:
        params: Command line parameters

    Returns:
        bool: True when the format was recognized
    """
    print(f"\n--- Detecting SBOM format: {params.path} ---")
    detection = detect_format(read_sbom_file(params.path), params.path)

    if not detection.is_known:
        print("Format: UNKNOWN (not a CycloneDX or SPDX JSON document)")
        logger.info(f"No SBOM format detected for {params.path}")
        return False

    print(f"Format: {detection.format.value.upper()}")
    print(f"Version: {detection.version}")
    return True
