# sbom_ingest/parsers/cyclonedx.py
"""
CycloneDX JSON parser.

Produces a RawParseOutput from a CycloneDX document:

- The recursive ``components`` tree is flattened with an explicit stack, so
  arbitrarily deep documents never hit the interpreter's recursion limit.
  Each parent -> child edge lands in the parent's ``dependencies``.
- The top-level ``dependencies`` section is merged into the same edges.
- Vulnerability severity comes from the highest-priority rating
  (CVSSv31 > CVSSv3 > CVSSv2 > anything else carrying a severity).
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from cyclonedx.model.component import ComponentType as CdxComponentType
from cyclonedx.model.vulnerability import VulnerabilityScoreSource, VulnerabilitySeverity
from cyclonedx.schema import SchemaVersion

from ..exceptions import MissingRequiredFieldError, UnsupportedFormatError, VersionUnsupportedError
from ..models import ComponentType, Hash, ParseMetadata, Reference, SbomFormat, Severity, Vulnerability
from .base import (
    BaseParser,
    ComponentDraft,
    RawParseOutput,
    list_field,
    load_json_document,
    parse_timestamp,
    text_or_none,
)
from .identifiers import component_id
from .licenses import license_choices_from_cyclonedx

logger = logging.getLogger("sbom-ingest")

# Lower rank wins. Methods not listed rank after these.
RATING_METHOD_PRIORITY = {
    VulnerabilityScoreSource.CVSS_V3_1: 0,
    VulnerabilityScoreSource.CVSS_V3: 1,
    VulnerabilityScoreSource.CVSS_V2: 2,
}
_FALLBACK_RANK = len(RATING_METHOD_PRIORITY)

_METHODS_BY_NAME = {source.value.lower(): source for source in VulnerabilityScoreSource}

_CANONICAL_TYPES = {
    CdxComponentType.LIBRARY: ComponentType.LIBRARY,
    CdxComponentType.FRAMEWORK: ComponentType.FRAMEWORK,
    CdxComponentType.APPLICATION: ComponentType.APPLICATION,
    CdxComponentType.CONTAINER: ComponentType.CONTAINER,
}

_CANONICAL_SEVERITIES = {
    VulnerabilitySeverity.CRITICAL: Severity.CRITICAL,
    VulnerabilitySeverity.HIGH: Severity.HIGH,
    VulnerabilitySeverity.MEDIUM: Severity.MEDIUM,
    VulnerabilitySeverity.LOW: Severity.LOW,
}


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def map_component_type(value: Any) -> ComponentType:
    """Map a CycloneDX component type onto the canonical taxonomy."""
    if not isinstance(value, str):
        return ComponentType.LIBRARY if value is None else ComponentType.OTHER
    try:
        return _CANONICAL_TYPES.get(CdxComponentType(value.lower()), ComponentType.OTHER)
    except ValueError:
        return ComponentType.OTHER


def severity_from_score(score: Optional[float]) -> Optional[Severity]:
    """CVSS v3 qualitative rating bands."""
    if score is None:
        return None
    if score >= 9.0:
        return Severity.CRITICAL
    if score >= 7.0:
        return Severity.HIGH
    if score >= 4.0:
        return Severity.MEDIUM
    if score > 0.0:
        return Severity.LOW
    return Severity.NONE


def _rating_method(rating: Dict[str, Any]) -> Optional[VulnerabilityScoreSource]:
    method = rating.get("method")
    if isinstance(method, str) and method.lower() in _METHODS_BY_NAME:
        return _METHODS_BY_NAME[method.lower()]
    vector = rating.get("vector")
    if method is None and isinstance(vector, str):
        return VulnerabilityScoreSource.get_from_vector(vector)
    return None


def select_rating(ratings: Any) -> Optional[Dict[str, Any]]:
    """
    Pick the rating that determines a vulnerability's severity.

    CVSSv31 beats CVSSv3 beats CVSSv2. When no CVSS rating is present, the
    first rating carrying a source-provided severity string is used. Ties go
    to document order.
    """
    if not isinstance(ratings, list):
        return None

    best: Optional[Tuple[int, int, Dict[str, Any]]] = None
    for index, rating in enumerate(ratings):
        if not isinstance(rating, dict):
            continue
        method = _rating_method(rating)
        rank = RATING_METHOD_PRIORITY.get(method, _FALLBACK_RANK)
        if rank == _FALLBACK_RANK and not text_or_none(rating.get("severity")):
            continue
        if best is None or (rank, index) < best[:2]:
            best = (rank, index, rating)
    return best[2] if best else None


class CycloneDXParser(BaseParser):
    """Parser for CycloneDX JSON documents (spec versions known to cyclonedx-python-lib)."""

    FORMAT = SbomFormat.CYCLONEDX

    def parse_raw(self, text: str, filename: Optional[str] = None) -> RawParseOutput:
        """
        Parse CycloneDX text into raw components and vulnerabilities.

        Raises:
            InvalidJsonError: If the text is not a JSON object
            MissingRequiredFieldError: If bomFormat or specVersion is missing
            UnsupportedFormatError: If bomFormat is not "CycloneDX"
            VersionUnsupportedError: If specVersion is not a known CycloneDX version
        """
        document = load_json_document(text, filename)
        spec_version = self._check_header(document)

        doc_metadata = document.get("metadata") if isinstance(document.get("metadata"), dict) else {}
        subject = doc_metadata.get("component") if isinstance(doc_metadata.get("component"), dict) else {}
        output = RawParseOutput(
            metadata=ParseMetadata(
                format=self.FORMAT,
                format_version=spec_version,
                document_name=text_or_none(subject.get("name")),
                serial_number=text_or_none(document.get("serialNumber")),
            )
        )
        subject_ref = text_or_none(subject.get("bom-ref"))

        self.checkpoint()
        self._flatten_components(list_field(document, "components", output), output)

        self.checkpoint()
        self._merge_dependency_section(list_field(document, "dependencies", output), subject_ref, output)

        self.checkpoint()
        for index, entry in enumerate(list_field(document, "vulnerabilities", output)):
            vulnerability = self._build_vulnerability(entry, f"vulnerabilities[{index}]", output)
            if vulnerability is not None:
                output.vulnerabilities.append(vulnerability)

        logger.debug(
            f"Parsed CycloneDX {spec_version} document {filename or '<input>'}: "
            f"{len(output.components)} components, {len(output.vulnerabilities)} vulnerabilities"
        )
        return output

    # --- Header ---

    @staticmethod
    def _check_header(document: Dict[str, Any]) -> str:
        bom_format = document.get("bomFormat")
        if bom_format in (None, ""):
            raise MissingRequiredFieldError("bomFormat", "CycloneDX BOM is missing bomFormat field")
        if bom_format != "CycloneDX":
            raise UnsupportedFormatError(
                f"Document does not appear to be a CycloneDX BOM (bomFormat is {bom_format!r})",
                details={"bomFormat": bom_format},
            )

        spec_version = text_or_none(document.get("specVersion"))
        if spec_version is None:
            raise MissingRequiredFieldError("specVersion", "CycloneDX BOM is missing specVersion field")
        try:
            SchemaVersion.from_version(spec_version)
        except (ValueError, TypeError) as e:
            supported = ", ".join(sorted(sv.to_version() for sv in SchemaVersion))
            raise VersionUnsupportedError(
                f"Unknown CycloneDX version {spec_version}. Supported versions: {supported}",
                details={"specVersion": spec_version},
            ) from e
        return spec_version

    # --- Components ---

    def _flatten_components(self, entries: List[Any], output: RawParseOutput) -> None:
        """Walk the nested component tree depth-first, in document order, without recursion."""
        stack: List[Tuple[Any, Optional[ComponentDraft], str]] = [
            (entries[index], None, f"components[{index}]") for index in reversed(range(len(entries)))
        ]
        while stack:
            entry, parent, location = stack.pop()
            draft = self._build_component(entry, location, output)
            if draft is not None:
                output.components.append(draft)
                if parent is not None and draft.id == parent.id:
                    output.warn(f"Not linking {location} to its parent {parent.name}: both resolve to id {draft.id}")
                elif parent is not None:
                    parent.add_dependency(draft.id)

            children = entry.get("components") if isinstance(entry, dict) else None
            if children is None:
                continue
            if not isinstance(children, list):
                output.warn(f"Ignoring nested components of {location}: expected an array")
                continue
            # A skipped parent does not orphan its children; they are kept without an edge.
            for index in reversed(range(len(children))):
                stack.append((children[index], draft, f"{location}.components[{index}]"))

    def _build_component(self, entry: Any, location: str, output: RawParseOutput) -> Optional[ComponentDraft]:
        if not isinstance(entry, dict):
            output.warn(f"Skipping {location}: component entry is not an object")
            return None

        name = text_or_none(entry.get("name"))
        if name is None:
            output.warn(f"Skipping {location}: component has no name")
            return None

        version = text_or_none(entry.get("version"))
        bom_ref = text_or_none(entry.get("bom-ref"))
        purl = text_or_none(entry.get("purl"))

        native_key = bom_ref or purl
        if native_key is None:
            native_key = f"{name}@{version}" if version else name
            output.warn(f"Component {location} ({name}) has no bom-ref or purl; deriving its id from name and version")

        draft = ComponentDraft(
            id=component_id(self.FORMAT, native_key),
            name=name,
            version=version,
            type=map_component_type(entry.get("type")),
            license_choices=license_choices_from_cyclonedx(entry.get("licenses")),
            purl=purl,
            cpe=text_or_none(entry.get("cpe")),
            hashes=self._extract_hashes(entry, location, output),
            description=text_or_none(entry.get("description")),
            supplier=self._extract_supplier(entry),
            native_ref=native_key,
        )
        output.register_ref(bom_ref, draft.id)
        output.register_ref(purl, draft.id)
        output.register_ref(draft.id, draft.id)
        return draft

    @staticmethod
    def _extract_hashes(entry: Dict[str, Any], location: str, output: RawParseOutput) -> List[Hash]:
        raw_hashes = entry.get("hashes")
        if raw_hashes is None:
            raw_hashes = entry.get("hash")
        if raw_hashes is None:
            return []
        if not isinstance(raw_hashes, list):
            output.warn(f"Ignoring hashes of {location}: expected an array")
            return []

        hashes = []
        for item in raw_hashes:
            algorithm = text_or_none(item.get("alg")) if isinstance(item, dict) else None
            digest = text_or_none(item.get("content")) if isinstance(item, dict) else None
            if algorithm and digest:
                hashes.append(Hash(algorithm=algorithm, digest=digest))
            else:
                output.warn(f"Ignoring malformed hash entry in {location}: {item!r}")
        return hashes

    @staticmethod
    def _extract_supplier(entry: Dict[str, Any]) -> Optional[str]:
        supplier = entry.get("supplier")
        if isinstance(supplier, dict) and text_or_none(supplier.get("name")):
            return text_or_none(supplier.get("name"))
        return text_or_none(entry.get("publisher")) or text_or_none(entry.get("author"))

    # --- Dependency graph section ---

    def _merge_dependency_section(self, entries: List[Any], subject_ref: Optional[str], output: RawParseOutput) -> None:
        drafts_by_id: Dict[str, ComponentDraft] = {}
        for draft in output.components:
            drafts_by_id.setdefault(draft.id, draft)

        for index, entry in enumerate(entries):
            if not isinstance(entry, dict):
                output.warn(f"Skipping dependencies[{index}]: entry is not an object")
                continue
            ref = text_or_none(entry.get("ref"))
            if ref is None:
                output.warn(f"Skipping dependencies[{index}]: entry has no ref")
                continue
            if subject_ref is not None and ref == subject_ref:
                logger.debug(f"Skipping dependency edges of the document subject '{ref}'")
                continue

            source_id = output.id_map.get(ref)
            if source_id is None or source_id not in drafts_by_id:
                output.warn(f"Dropping dependency edges from unknown ref '{ref}'")
                continue

            depends_on = entry.get("dependsOn") or []
            if not isinstance(depends_on, list):
                output.warn(f"Ignoring dependsOn of '{ref}': expected an array")
                continue
            for target_ref in depends_on:
                target_id = output.id_map.get(target_ref) if isinstance(target_ref, str) else None
                if target_id is None:
                    output.warn(f"Dropping dependency edge '{ref}' -> '{target_ref}': target is not a component in this document")
                    continue
                drafts_by_id[source_id].add_dependency(target_id)

    # --- Vulnerabilities ---

    def _build_vulnerability(self, entry: Any, location: str, output: RawParseOutput) -> Optional[Vulnerability]:
        if not isinstance(entry, dict):
            output.warn(f"Skipping {location}: vulnerability entry is not an object")
            return None
        vuln_id = text_or_none(entry.get("id"))
        if vuln_id is None:
            output.warn(f"Skipping {location}: vulnerability has no id")
            return None

        rating = select_rating(entry.get("ratings")) or {}
        score = self._as_score(rating.get("score"))
        source = entry.get("source")

        return Vulnerability(
            id=vuln_id,
            source=text_or_none(source.get("name")) if isinstance(source, dict) else text_or_none(source),
            severity=self._map_severity(rating, score),
            cvss_score=score,
            cvss_vector=text_or_none(rating.get("vector")),
            description=text_or_none(entry.get("description")) or text_or_none(entry.get("detail")) or "",
            references=tuple(self._extract_references(entry)),
            affected_components=tuple(self._extract_affects(entry, location, output)),
            published_at=parse_timestamp(entry.get("published"), f"{vuln_id} published", output),
            modified_at=parse_timestamp(entry.get("updated") or entry.get("modified"), f"{vuln_id} updated", output),
            recommendation=text_or_none(entry.get("recommendation")),
            cwes=tuple(cwe for cwe in _as_list(entry.get("cwes")) if isinstance(cwe, int) and not isinstance(cwe, bool)),
        )

    def _map_severity(self, rating: Dict[str, Any], score: Optional[float]) -> Severity:
        token = text_or_none(rating.get("severity"))
        if token is None:
            if self.config.derive_severity_from_score:
                derived = severity_from_score(score)
                if derived is not None:
                    return derived
            return Severity(self.config.unknown_severity)

        try:
            cdx_severity = VulnerabilitySeverity(token.lower())
        except ValueError:
            logger.debug(f"Unrecognized severity token {token!r}; using '{self.config.unknown_severity}'")
            return Severity(self.config.unknown_severity)
        return _CANONICAL_SEVERITIES.get(cdx_severity, Severity.NONE)

    @staticmethod
    def _as_score(value: Any) -> Optional[float]:
        if value is None or isinstance(value, bool):
            return None
        try:
            return float(value)
        except (TypeError, ValueError):
            return None

    @staticmethod
    def _extract_references(entry: Dict[str, Any]) -> List[Reference]:
        references: List[Reference] = []
        source = entry.get("source")
        if isinstance(source, dict) and text_or_none(source.get("url")):
            references.append(Reference(url=text_or_none(source["url"]), source=text_or_none(source.get("name")), tags=("source",)))

        for item in _as_list(entry.get("references")):
            if not isinstance(item, dict):
                continue
            ref_source = item.get("source") if isinstance(item.get("source"), dict) else {}
            url = text_or_none(ref_source.get("url"))
            if url:
                tags = (item["id"],) if text_or_none(item.get("id")) else ()
                references.append(Reference(url=url, source=text_or_none(ref_source.get("name")), tags=tags))

        for advisory in _as_list(entry.get("advisories")):
            if isinstance(advisory, dict) and text_or_none(advisory.get("url")):
                references.append(Reference(url=text_or_none(advisory["url"]), source=text_or_none(advisory.get("title")), tags=("advisory",)))
        return references

    @staticmethod
    def _extract_affects(entry: Dict[str, Any], location: str, output: RawParseOutput) -> List[str]:
        affects = entry.get("affects") or []
        if not isinstance(affects, list):
            output.warn(f"Ignoring affects of {location}: expected an array")
            return []
        refs: List[str] = []
        for item in affects:
            ref = text_or_none(item.get("ref")) if isinstance(item, dict) else None
            if ref is None:
                output.warn(f"Ignoring affects entry without ref in {location}")
            elif ref not in refs:
                refs.append(ref)
        return refs
