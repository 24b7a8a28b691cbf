# sbom_ingest/utilities/output.py

import os
import json
import logging
from typing import Any, Dict, Optional, Union

from ..exceptions import FileSystemError
from ..models import ParseResult, compute_dependents
from ..validator import ValidationReport

logger = logging.getLogger("sbom-ingest")


def read_sbom_file(file_path: str) -> str:
    """
    Read an SBOM file as UTF-8 text.

    Raises:
        FileSystemError: If the file doesn't exist or can't be read
    """
    if not os.path.isfile(file_path):
        raise FileSystemError(f"SBOM file does not exist: {file_path}", details={"path": file_path})
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            content = f.read()
    except UnicodeDecodeError as e:
        raise FileSystemError(f"SBOM file is not UTF-8 text: {file_path}", details={"path": file_path, "error": str(e)}) from e
    except (IOError, OSError) as e:
        raise FileSystemError(f"Unable to read SBOM file {file_path}: {e}", details={"path": file_path}) from e
    logger.debug(f"Read {len(content)} characters from {file_path}")
    return content


def save_results_to_file(filepath: str, results: Dict[str, Any]):
    """Save a JSON-serializable dictionary to a file, creating parent directories."""
    output_dir = os.path.dirname(filepath) or "."
    try:
        os.makedirs(output_dir, exist_ok=True)
        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(results, f, indent=2, ensure_ascii=False)
        print(f"Saved results to: {filepath}")
        logger.info(f"Saved results to {filepath}")
    except (IOError, OSError) as e:
        raise FileSystemError(f"Failed to save results to {filepath}: {e}", details={"path": filepath}) from e


def format_duration(duration_seconds: Optional[Union[int, float]]) -> str:
    """Formats a duration in seconds into a 'X minutes, Y seconds' string."""
    if duration_seconds is None:
        return "N/A"
    try:
        duration_seconds = round(float(duration_seconds))
    except (ValueError, TypeError):
        return "Invalid Duration"

    minutes = int(duration_seconds // 60)
    seconds = int(duration_seconds % 60)

    if minutes > 0 and seconds > 0:
        return f"{minutes} minutes, {seconds} seconds"
    elif minutes > 0:
        return f"{minutes} minutes"
    elif seconds == 1:
        return f"{seconds} second"
    else:
        return f"{seconds} seconds"


def print_parse_summary(result: ParseResult, show_components: bool = False):
    """Prints the counts-only summary of a ParseResult."""
    summary = result.summary()
    print("\n--- SBOM Summary ---")
    print(f"  Format: {summary['format'].upper()}")
    print(f"  Version: {summary['formatVersion']}")
    if result.metadata.document_name:
        print(f"  Document Name: {result.metadata.document_name}")
    if result.metadata.serial_number:
        print(f"  Serial Number: {result.metadata.serial_number}")
    print(f"  Components: {summary['componentCount']}")
    print(f"  Vulnerabilities: {summary['vulnerabilityCount']}")
    if summary['vulnerabilityCount']:
        for severity, count in summary['severityCounts'].items():
            print(f"    {severity.capitalize():<10} {count}")
    if result.metadata.unresolved_references:
        print(f"  Unresolved References: {result.metadata.unresolved_references}")
    if result.warnings:
        print(f"  Warnings: {len(result.warnings)}")

    if show_components:
        dependents = compute_dependents(result.components)
        print("\n--- Components ---")
        for component in result.components:
            label = f"{component.name}@{component.version}" if component.version else component.name
            licenses = ", ".join(component.licenses) or "-"
            print(f"  {label} [{component.type.value}] licenses: {licenses}")
            print(f"    depends on {len(component.dependencies)}, used by {len(dependents[component.id])}")
    print("--------------------")


def print_validation_report(report: ValidationReport):
    """Prints a validation report in the CLI's standard layout."""
    status = "✅ VALID" if report.valid else "❌ INVALID"
    print(f"\nValidation result: {status}")
    print(f"  Format: {report.format.value.upper()}")
    print(f"  Version: {report.format_version or 'Unknown'}")
    if report.violations:
        print(f"\n  Violations ({len(report.violations)}):")
        for violation in report.violations:
            field_hint = f" [{violation.field}]" if violation.field else ""
            print(f"    • {violation.kind}{field_hint}: {violation.message}")
    if report.warnings:
        print(f"\n  Warnings ({len(report.warnings)}):")
        for warning in report.warnings:
            print(f"    • {warning}")
    if report.unresolved_references:
        print(f"\n  Unresolved vulnerability references: {report.unresolved_references}")
