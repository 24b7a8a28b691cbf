# sbom_ingest/models.py
"""
Canonical data model produced by the ingest pipeline.

Every type here is immutable once built. Downstream consumers (metrics,
audit, export) derive new views instead of mutating a ParseResult.
"""

import json
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple


class SbomFormat(str, Enum):
    """Document formats recognised by the detector."""
    CYCLONEDX = "cyclonedx"
    SPDX = "spdx"
    UNKNOWN = "unknown"


class ComponentType(str, Enum):
    """Canonical component taxonomy shared by both formats."""
    LIBRARY = "library"
    FRAMEWORK = "framework"
    APPLICATION = "application"
    CONTAINER = "container"
    OTHER = "other"


class Severity(str, Enum):
    """Canonical vulnerability severity, most severe first."""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    NONE = "none"


SEVERITY_ORDER = [s.value for s in Severity]


@dataclass(frozen=True)
class Hash:
    algorithm: str
    digest: str

    def to_dict(self) -> Dict[str, str]:
        return {"algorithm": self.algorithm, "digest": self.digest}


@dataclass(frozen=True)
class Reference:
    """An external link attached to a vulnerability (advisory, patch, ...)."""
    url: str
    source: Optional[str] = None
    tags: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"url": self.url, "tags": list(self.tags)}
        if self.source:
            data["source"] = self.source
        return data


@dataclass(frozen=True)
class Component:
    """
    A software unit discovered in a document.

    ``dependencies`` holds canonical ids of other components in the same
    ParseResult. ``dependents`` is intentionally not stored; use
    compute_dependents() to invert the edges.
    """
    id: str
    name: str
    type: ComponentType = ComponentType.LIBRARY
    version: Optional[str] = None
    licenses: Tuple[str, ...] = ()
    purl: Optional[str] = None
    cpe: Optional[str] = None
    hashes: Tuple[Hash, ...] = ()
    dependencies: Tuple[str, ...] = ()
    description: Optional[str] = None
    supplier: Optional[str] = None
    download_location: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with camelCase keys; absent optional fields are omitted."""
        data: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "type": self.type.value,
            "licenses": list(self.licenses),
            "dependencies": list(self.dependencies),
        }
        optional = {
            "version": self.version,
            "purl": self.purl,
            "cpe": self.cpe,
            "description": self.description,
            "supplier": self.supplier,
            "downloadLocation": self.download_location,
        }
        data.update({key: value for key, value in optional.items() if value is not None})
        if self.hashes:
            data["hash"] = [h.to_dict() for h in self.hashes]
        return data


@dataclass(frozen=True)
class Vulnerability:
    """
    A known security issue.

    ``affected_components`` holds canonical component ids once the reference
    resolver has run. Refs that could not be resolved are kept verbatim.
    """
    id: str
    severity: Severity = Severity.NONE
    source: Optional[str] = None
    cvss_score: Optional[float] = None
    cvss_vector: Optional[str] = None
    description: str = ""
    references: Tuple[Reference, ...] = ()
    affected_components: Tuple[str, ...] = ()
    published_at: Optional[datetime] = None
    modified_at: Optional[datetime] = None
    recommendation: Optional[str] = None
    cwes: Tuple[int, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "severity": self.severity.value,
            "description": self.description,
            "references": [ref.to_dict() for ref in self.references],
            "affectedComponents": list(self.affected_components),
        }
        optional = {
            "source": self.source,
            "cvssScore": self.cvss_score,
            "cvssVector": self.cvss_vector,
            "publishedAt": self.published_at.isoformat() if self.published_at else None,
            "modifiedAt": self.modified_at.isoformat() if self.modified_at else None,
            "recommendation": self.recommendation,
        }
        data.update({key: value for key, value in optional.items() if value is not None})
        if self.cwes:
            data["cwes"] = list(self.cwes)
        return data


@dataclass(frozen=True)
class ParseMetadata:
    format: SbomFormat
    format_version: str
    component_count: int = 0
    vulnerability_count: int = 0
    data_license: Optional[str] = None
    document_name: Optional[str] = None
    serial_number: Optional[str] = None
    unresolved_references: int = 0

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "format": self.format.value,
            "formatVersion": self.format_version,
            "componentCount": self.component_count,
            "vulnerabilityCount": self.vulnerability_count,
            "unresolvedReferences": self.unresolved_references,
        }
        optional = {
            "dataLicense": self.data_license,
            "documentName": self.document_name,
            "serialNumber": self.serial_number,
        }
        data.update({key: value for key, value in optional.items() if value is not None})
        return data


@dataclass(frozen=True)
class ParseResult:
    """The pipeline's terminal artifact, created fresh per parse call."""
    components: Tuple[Component, ...]
    vulnerabilities: Tuple[Vulnerability, ...]
    metadata: ParseMetadata
    warnings: Tuple[str, ...] = field(default=(), compare=False)

    def component_ids(self) -> List[str]:
        return [c.id for c in self.components]

    def get_component(self, component_id: str) -> Optional[Component]:
        return next((c for c in self.components if c.id == component_id), None)

    def severity_counts(self) -> Dict[str, int]:
        """Vulnerability counts per canonical severity, zero-filled."""
        counts = Counter(v.severity.value for v in self.vulnerabilities)
        return {severity: counts.get(severity, 0) for severity in SEVERITY_ORDER}

    def summary(self) -> Dict[str, Any]:
        """
        Counts-only view for audit and metrics consumers.

        Never includes the component or vulnerability arrays.
        """
        return {
            "format": self.metadata.format.value,
            "formatVersion": self.metadata.format_version,
            "componentCount": self.metadata.component_count,
            "vulnerabilityCount": len(self.vulnerabilities),
            "severityCounts": self.severity_counts(),
        }

    def to_dict(self, include_warnings: bool = False) -> Dict[str, Any]:
        data = {
            "components": [c.to_dict() for c in self.components],
            "vulnerabilities": [v.to_dict() for v in self.vulnerabilities],
            "metadata": self.metadata.to_dict(),
        }
        if include_warnings:
            data["warnings"] = list(self.warnings)
        return data

    def to_json(self, indent: Optional[int] = None, include_warnings: bool = False) -> str:
        return json.dumps(self.to_dict(include_warnings=include_warnings), indent=indent, ensure_ascii=False)


def compute_dependents(components: Iterable[Component]) -> Dict[str, List[str]]:
    """
    Invert ``dependencies`` edges into a dependents map.

    Every component id appears as a key, even when nothing depends on it.
    Dependents are listed in component order.
    """
    components = list(components)
    dependents: Dict[str, List[str]] = {c.id: [] for c in components}
    for component in components:
        for dependency in component.dependencies:
            if dependency in dependents and component.id not in dependents[dependency]:
                dependents[dependency].append(component.id)
    return dependents
