# sbom_ingest/exceptions.py

from typing import Any, Dict, Optional


class SbomIngestError(Exception):
    """
    Base class for all errors raised by the SBOM ingest package.

    Attributes:
        message: Human readable description of the problem
        code: Short machine readable classification (e.g. "invalid-json")
        details: Extra context useful in verbose output and logs
    """

    def __init__(self, message: str, code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


# --- Fatal parse errors ---

class ParseError(SbomIngestError):
    """
    Raised when a document cannot be turned into a ParseResult.

    A ParseError always aborts the pipeline; no partial result is returned.
    The ``kind`` attribute is one of the error classifications surfaced to
    callers: invalid-json, unsupported-format, missing-required-field or
    version-unsupported.
    """

    kind = "parse-error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=self.kind, details=details)


class InvalidJsonError(ParseError):
    """The text is not a structurally valid JSON object."""
    kind = "invalid-json"


class UnsupportedFormatError(ParseError):
    """The document is not a format this parser handles."""
    kind = "unsupported-format"


class MissingRequiredFieldError(ParseError):
    """A required top-level field is absent."""
    kind = "missing-required-field"

    def __init__(self, field: str, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.field = field
        merged = {"field": field}
        merged.update(details or {})
        super().__init__(message or f"Required field '{field}' is missing", details=merged)


class VersionUnsupportedError(ParseError):
    """The document declares a schema version that is not supported."""
    kind = "version-unsupported"


# --- CLI / environment errors ---

class FileSystemError(SbomIngestError):
    """Raised when an input file cannot be found or read."""
    pass


class ConfigurationError(SbomIngestError):
    """Raised for invalid command-line arguments or configuration values."""
    pass
