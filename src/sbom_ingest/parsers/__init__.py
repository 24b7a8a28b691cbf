# sbom_ingest/parsers/__init__.py

from .base import BaseParser, ComponentDraft, RawParseOutput
from .cyclonedx import CycloneDXParser
from .detector import (
    FormatDetection,
    detect_format,
    get_cyclonedx_version,
    get_spdx_version,
    is_cyclonedx_file,
    is_spdx_file,
)
from .identifiers import component_id
from .spdx import SpdxParser

__all__ = [
    "BaseParser",
    "ComponentDraft",
    "RawParseOutput",
    "CycloneDXParser",
    "SpdxParser",
    "FormatDetection",
    "detect_format",
    "get_cyclonedx_version",
    "get_spdx_version",
    "is_cyclonedx_file",
    "is_spdx_file",
    "component_id",
]
