# sbom_ingest/parsers/detector.py

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..exceptions import InvalidJsonError
from ..models import SbomFormat
from .base import load_json_document

logger = logging.getLogger("sbom-ingest")

SPDX_VERSION_PREFIX = "SPDX-"

# Filename suffixes used only as a tie-breaker when content is inconclusive.
SPDX_FILENAME_SUFFIXES = (".spdx", ".spdx.json")
CYCLONEDX_FILENAME_SUFFIXES = (".cdx.json", ".bom.json", "bom.json", ".cdx")


@dataclass(frozen=True)
class FormatDetection:
    format: SbomFormat
    version: Optional[str] = None

    @property
    def is_known(self) -> bool:
        return self.format != SbomFormat.UNKNOWN


UNKNOWN = FormatDetection(SbomFormat.UNKNOWN, None)


def detect_document_format(document: Dict[str, Any]) -> FormatDetection:
    """Classify an already-parsed JSON object. Never raises."""
    spec_version = document.get("specVersion")
    if document.get("bomFormat") == "CycloneDX" and spec_version not in (None, ""):
        return FormatDetection(SbomFormat.CYCLONEDX, str(spec_version))

    spdx_version = document.get("spdxVersion")
    if isinstance(spdx_version, str) and spdx_version.startswith(SPDX_VERSION_PREFIX):
        return FormatDetection(SbomFormat.SPDX, spdx_version[len(SPDX_VERSION_PREFIX):])

    return UNKNOWN


def detect_format(text: Any, filename: Optional[str] = None) -> FormatDetection:
    """
    Classify raw document text as CycloneDX, SPDX or unknown.

    Detection is purely informative and never raises: text that does not
    parse as a JSON object is reported as unknown.

    Args:
        text: Raw document text
        filename: Optional filename, used only in log messages

    Returns:
        FormatDetection: Detected format and version (version is None when unknown).
            SPDX versions are reported without the "SPDX-" prefix, e.g. "2.3".
    """
    try:
        document = load_json_document(text, filename)
    except InvalidJsonError as e:
        logger.debug(f"Format detection: {e.message}")
        return UNKNOWN

    detection = detect_document_format(document)
    logger.debug(f"Detected format for {filename or '<input>'}: {detection.format.value} {detection.version or ''}".rstrip())
    return detection


def get_cyclonedx_version(text: Any, filename: Optional[str] = None) -> Optional[str]:
    """Return the CycloneDX specVersion, or None if the text is not CycloneDX."""
    detection = detect_format(text, filename)
    return detection.version if detection.format == SbomFormat.CYCLONEDX else None


def get_spdx_version(text: Any, filename: Optional[str] = None) -> Optional[str]:
    """Return the SPDX version (e.g. "2.3"), or None if the text is not SPDX."""
    detection = detect_format(text, filename)
    return detection.version if detection.format == SbomFormat.SPDX else None


def _has_suffix(filename: Optional[str], suffixes) -> bool:
    return bool(filename) and filename.lower().endswith(suffixes)


def is_spdx_file(text: Any, filename: Optional[str] = None) -> bool:
    """
    True when the document is SPDX.

    Content wins whenever it is conclusive; only when detection returns
    unknown does an ``.spdx`` / ``.spdx.json`` filename tip the balance.
    """
    detection = detect_format(text, filename)
    if detection.is_known:
        return detection.format == SbomFormat.SPDX
    return _has_suffix(filename, SPDX_FILENAME_SUFFIXES)


def is_cyclonedx_file(text: Any, filename: Optional[str] = None) -> bool:
    """True when the document is CycloneDX (filename suffix as tie-breaker)."""
    detection = detect_format(text, filename)
    if detection.is_known:
        return detection.format == SbomFormat.CYCLONEDX
    return _has_suffix(filename, CYCLONEDX_FILENAME_SUFFIXES)
