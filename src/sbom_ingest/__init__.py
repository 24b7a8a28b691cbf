# sbom_ingest/__init__.py
"""
SBOM ingest: CycloneDX and SPDX normalization engine
"""

from .config import ParserConfig
from .exceptions import (
    SbomIngestError,
    ParseError,
    InvalidJsonError,
    UnsupportedFormatError,
    MissingRequiredFieldError,
    VersionUnsupportedError,
)
from .models import (
    SbomFormat,
    ComponentType,
    Severity,
    Hash,
    Reference,
    Component,
    Vulnerability,
    ParseMetadata,
    ParseResult,
    compute_dependents,
)
from .normalizer import normalize
from .parsers import (
    FormatDetection,
    component_id,
    detect_format,
    get_cyclonedx_version,
    get_spdx_version,
    is_cyclonedx_file,
    is_spdx_file,
)
from .pipeline import parse_cyclonedx, parse_sbom, parse_spdx
from .resolver import resolve_references
from .validator import ValidationReport, Violation, validate, validate_cyclonedx, validate_document, validate_spdx

__version__ = "0.1.0"

__all__ = [
    'ParserConfig',
    'SbomIngestError',
    'ParseError',
    'InvalidJsonError',
    'UnsupportedFormatError',
    'MissingRequiredFieldError',
    'VersionUnsupportedError',
    'SbomFormat',
    'ComponentType',
    'Severity',
    'Hash',
    'Reference',
    'Component',
    'Vulnerability',
    'ParseMetadata',
    'ParseResult',
    'compute_dependents',
    'normalize',
    'FormatDetection',
    'component_id',
    'detect_format',
    'get_cyclonedx_version',
    'get_spdx_version',
    'is_cyclonedx_file',
    'is_spdx_file',
    'parse_cyclonedx',
    'parse_sbom',
    'parse_spdx',
    'resolve_references',
    'ValidationReport',
    'Violation',
    'validate',
    'validate_cyclonedx',
    'validate_document',
    'validate_spdx',
]
