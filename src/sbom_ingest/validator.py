# sbom_ingest/validator.py
"""
Document validator.

Validation is advisory: it reports what is wrong with a document and never
raises. Violations make a document invalid; warnings do not.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from cyclonedx.exception import MissingOptionalDependencyException
from cyclonedx.schema import SchemaVersion
from cyclonedx.validation.json import JsonStrictValidator
from spdx_tools.spdx.parser.error import SPDXParsingError
from spdx_tools.spdx.parser.jsonlikedict.json_like_dict_parser import JsonLikeDictParser
from spdx_tools.spdx.validation.document_validator import validate_full_spdx_document

from .config import ParserConfig
from .exceptions import InvalidJsonError, ParseError
from .models import ParseResult, SbomFormat
from .parsers.base import load_json_document
from .parsers.detector import detect_format
from .parsers.identifiers import purl_problem
from .pipeline import parse_as

logger = logging.getLogger("sbom-ingest")

REQUIRED_FIELDS = {
    SbomFormat.CYCLONEDX: ("bomFormat", "specVersion"),
    SbomFormat.SPDX: ("spdxVersion", "dataLicense"),
}

SPDX_DATA_LICENSE = "CC0-1.0"

# Cap on schema findings copied into a report.
MAX_SCHEMA_FINDINGS = 20


@dataclass(frozen=True)
class Violation:
    """A reason the document is not valid."""
    message: str
    kind: str
    field: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {"kind": self.kind, "message": self.message}
        if self.field:
            data["field"] = self.field
        return data


@dataclass
class ValidationReport:
    format: SbomFormat = SbomFormat.UNKNOWN
    format_version: Optional[str] = None
    violations: List[Violation] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    unresolved_references: int = 0
    result: Optional[ParseResult] = field(default=None, repr=False)

    @property
    def valid(self) -> bool:
        return not self.violations

    def add_violation(self, message: str, kind: str, field_name: Optional[str] = None) -> None:
        logger.debug(f"Validation violation ({kind}): {message}")
        self.violations.append(Violation(message=message, kind=kind, field=field_name))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.valid,
            "format": self.format.value,
            "formatVersion": self.format_version,
            "violations": [v.to_dict() for v in self.violations],
            "warnings": list(self.warnings),
            "unresolvedReferences": self.unresolved_references,
        }


def _check_required_fields(document: Dict[str, Any], report: ValidationReport) -> None:
    for name in REQUIRED_FIELDS.get(report.format, ()):
        if document.get(name) in (None, ""):
            report.add_violation(f"Required field '{name}' is missing", "missing-required-field", name)

    if report.format == SbomFormat.SPDX and document.get("dataLicense") not in (None, ""):
        data_license = document.get("dataLicense")
        if data_license != SPDX_DATA_LICENSE:
            report.add_violation(
                f"dataLicense must be '{SPDX_DATA_LICENSE}', found {data_license!r}",
                "invalid-field",
                "dataLicense",
            )


def _claimed_format(text: Any, filename: Optional[str]) -> SbomFormat:
    """Format a document declares for itself when detection cannot confirm it."""
    try:
        document = load_json_document(text, filename)
    except InvalidJsonError:
        return SbomFormat.UNKNOWN
    if document.get("bomFormat") == "CycloneDX":
        return SbomFormat.CYCLONEDX
    if "spdxVersion" in document:
        return SbomFormat.SPDX
    return SbomFormat.UNKNOWN


def _check_result(result: ParseResult, report: ValidationReport) -> None:
    if result.metadata.component_count != len(result.components):
        report.add_violation(
            f"componentCount is {result.metadata.component_count} but the result holds {len(result.components)} components",
            "inconsistent-result",
            "componentCount",
        )

    report.unresolved_references = result.metadata.unresolved_references
    report.warnings.extend(result.warnings)
    for component in result.components:
        if component.purl is None:
            continue
        problem = purl_problem(component.purl)
        if problem:
            report.warnings.append(f"Component {component.name} has a malformed purl '{component.purl}': {problem}")


def _strict_cyclonedx(text: str, report: ValidationReport) -> None:
    try:
        schema_version = SchemaVersion.from_version(report.format_version)
    except (ValueError, TypeError):
        # Already reported by the parser as version-unsupported.
        return
    try:
        errors = JsonStrictValidator(schema_version).validate_str(text, all_errors=True)
    except MissingOptionalDependencyException as e:
        report.add_violation(
            f"CycloneDX schema validation is unavailable: {e}. Install cyclonedx-python-lib[json-validation].",
            "schema",
        )
        return
    for error in list(errors or [])[:MAX_SCHEMA_FINDINGS]:
        message = getattr(error.data, "message", str(error))
        report.add_violation(f"CycloneDX schema: {message}", "schema")


def _strict_spdx(document: Dict[str, Any], report: ValidationReport) -> None:
    try:
        spdx_document = JsonLikeDictParser().parse(document)
    except SPDXParsingError as e:
        for message in e.get_messages()[:MAX_SCHEMA_FINDINGS]:
            report.add_violation(f"SPDX: {message}", "schema")
        return
    for message in validate_full_spdx_document(spdx_document)[:MAX_SCHEMA_FINDINGS]:
        report.add_violation(f"SPDX: {message.validation_message}", "schema")


def validate_document(
    text: Any,
    filename: Optional[str] = None,
    strict: Optional[bool] = None,
    config: Optional[ParserConfig] = None,
) -> ValidationReport:
    """
    Validate a CycloneDX or SPDX document.

    Args:
        text: Document text
        filename: Optional filename hint
        strict: Also run the official schema validators (defaults to
            config.strict_schema)
        config: Optional ParserConfig passed through to the parser

    Returns:
        ValidationReport: Never raises; every problem becomes a violation
    """
    config = config or ParserConfig()
    strict = config.strict_schema if strict is None else strict
    report = ValidationReport()

    detection = detect_format(text, filename)
    report.format, report.format_version = detection.format, detection.version
    if not detection.is_known:
        # A header that names its format but is incomplete is checked field by field.
        report.format = _claimed_format(text, filename)
    if report.format == SbomFormat.UNKNOWN:
        report.add_violation(
            f"Unable to detect SBOM format of {filename or '<input>'}: not CycloneDX or SPDX JSON",
            "unsupported-format",
        )
        return report

    try:
        document = load_json_document(text, filename)
        _check_required_fields(document, report)

        try:
            report.result = parse_as(report.format, text, filename, config)
        except ParseError as e:
            if not any(v.field and v.field == getattr(e, "field", None) for v in report.violations):
                report.add_violation(e.message, e.kind, getattr(e, "field", None))
        else:
            _check_result(report.result, report)

        if strict and report.format_version is not None:
            if report.format == SbomFormat.CYCLONEDX:
                _strict_cyclonedx(text if isinstance(text, str) else json.dumps(document), report)
            else:
                _strict_spdx(document, report)
    except Exception as e:
        logger.error(f"Unexpected error while validating {filename or '<input>'}: {e}", exc_info=True)
        report.add_violation(f"Validation could not complete: {e}", "internal-error")

    logger.info(
        f"Validated {report.format.value} {report.format_version} document {filename or '<input>'}: "
        f"{'valid' if report.valid else 'invalid'} ({len(report.violations)} violations, {len(report.warnings)} warnings)"
    )
    return report


def validate(text: Any, filename: Optional[str] = None) -> bool:
    """True when the document has no violations."""
    return validate_document(text, filename).valid


def _validate_expecting(expected: SbomFormat, text: Any, filename: Optional[str], strict: Optional[bool]) -> ValidationReport:
    report = validate_document(text, filename, strict=strict)
    if report.format != expected and report.format != SbomFormat.UNKNOWN:
        report.add_violation(
            f"Expected a {expected.value} document, found {report.format.value}",
            "unsupported-format",
        )
    return report


def validate_cyclonedx(text: Any, filename: Optional[str] = None, strict: Optional[bool] = None) -> ValidationReport:
    """Validate a document that must be CycloneDX."""
    return _validate_expecting(SbomFormat.CYCLONEDX, text, filename, strict)


def validate_spdx(text: Any, filename: Optional[str] = None, strict: Optional[bool] = None) -> ValidationReport:
    """Validate a document that must be SPDX."""
    return _validate_expecting(SbomFormat.SPDX, text, filename, strict)
