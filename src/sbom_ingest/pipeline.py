# sbom_ingest/pipeline.py
"""
Public parse entry points.

Every call runs the same forward-only pipeline:

    Parse -> Normalize -> Resolve

A ParseError raised while parsing aborts the call; no partial result is
returned. parse_sbom() adds a Detect step in front.
"""

import logging
from typing import Any, Optional

from .config import ParserConfig
from .exceptions import UnsupportedFormatError
from .models import ParseResult, SbomFormat
from .normalizer import normalize
from .parsers.base import BaseParser
from .parsers.cyclonedx import CycloneDXParser
from .parsers.detector import detect_format
from .parsers.spdx import SpdxParser
from .resolver import resolve_references

logger = logging.getLogger("sbom-ingest")

PARSERS = {
    SbomFormat.CYCLONEDX: CycloneDXParser,
    SbomFormat.SPDX: SpdxParser,
}


def _run(parser: BaseParser, text: Any, filename: Optional[str]) -> ParseResult:
    raw = parser.parse_raw(text, filename)
    parser.checkpoint()
    result = normalize(raw)
    parser.checkpoint()
    result = resolve_references(result, raw.id_map)
    logger.info(
        f"Parsed {result.metadata.format.value} {result.metadata.format_version} document "
        f"{filename or '<input>'}: {result.metadata.component_count} components, "
        f"{len(result.vulnerabilities)} vulnerabilities, {len(result.warnings)} warnings"
    )
    return result


def parse_cyclonedx(text: Any, filename: Optional[str] = None, config: Optional[ParserConfig] = None) -> ParseResult:
    """
    Parse a CycloneDX JSON document.

    Raises:
        ParseError: invalid-json, unsupported-format, missing-required-field or
            version-unsupported
    """
    return _run(CycloneDXParser(config), text, filename)


def parse_spdx(text: Any, filename: Optional[str] = None, config: Optional[ParserConfig] = None) -> ParseResult:
    """
    Parse an SPDX 2.x JSON document. The result never contains vulnerabilities.

    Raises:
        ParseError: invalid-json, unsupported-format, missing-required-field or
            version-unsupported
    """
    return _run(SpdxParser(config), text, filename)


def parse_as(sbom_format: SbomFormat, text: Any, filename: Optional[str] = None, config: Optional[ParserConfig] = None) -> ParseResult:
    """Parse with the parser for an already-detected format."""
    return _run(PARSERS[SbomFormat(sbom_format)](config), text, filename)


def parse_sbom(text: Any, filename: Optional[str] = None, config: Optional[ParserConfig] = None) -> ParseResult:
    """
    Detect the document format and parse it.

    Args:
        text: Document text (str or UTF-8 bytes)
        filename: Optional filename hint, used in messages
        config: Optional ParserConfig

    Returns:
        ParseResult: The normalized, reference-resolved result

    Raises:
        UnsupportedFormatError: If the format cannot be detected
        ParseError: If the detected format's parser rejects the document
    """
    detection = detect_format(text, filename)
    if detection.format not in PARSERS:
        raise UnsupportedFormatError(
            f"Unable to detect SBOM format of {filename or '<input>'}. "
            f"The document does not appear to be CycloneDX or SPDX JSON."
        )
    return parse_as(detection.format, text, filename, config)
