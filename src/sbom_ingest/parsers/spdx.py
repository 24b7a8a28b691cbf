# sbom_ingest/parsers/spdx.py
"""
SPDX JSON parser (SPDX 2.0 - 2.3).

SPDX has no native vulnerability section, so the raw output always carries an
empty vulnerability list. Dependency edges come from ``relationships``.
"""

import logging
from typing import Any, Dict, List, Optional

from ..exceptions import MissingRequiredFieldError, UnsupportedFormatError, VersionUnsupportedError
from ..models import ComponentType, Hash, ParseMetadata, SbomFormat
from .base import BaseParser, ComponentDraft, RawParseOutput, list_field, load_json_document, text_or_none
from .detector import SPDX_VERSION_PREFIX
from .identifiers import component_id
from .licenses import NON_LICENSE_VALUES, license_choices_from_spdx

logger = logging.getLogger("sbom-ingest")

SUPPORTED_SPDX_VERSIONS = ("2.0", "2.1", "2.2", "2.3")

PURPOSE_TYPES = {
    "APPLICATION": ComponentType.APPLICATION,
    "FRAMEWORK": ComponentType.FRAMEWORK,
    "LIBRARY": ComponentType.LIBRARY,
    "CONTAINER": ComponentType.CONTAINER,
}

# relationshipType -> True when the edge points from spdxElementId to relatedSpdxElement
EDGE_RELATIONSHIPS = {
    "DEPENDS_ON": True,
    "CONTAINS": True,
    "DYNAMIC_LINK": True,
    "STATIC_LINK": True,
    "DEPENDENCY_OF": False,
}

CPE_REFERENCE_TYPES = ("cpe23Type", "cpe22Type")
SUPPLIER_PREFIXES = ("Organization:", "Person:", "Tool:")


def strip_supplier_prefix(value: Any) -> Optional[str]:
    """``Organization: Acme`` -> ``Acme``; NOASSERTION and empty values -> None."""
    text = text_or_none(value)
    if text is None or text.upper() in NON_LICENSE_VALUES:
        return None
    for prefix in SUPPLIER_PREFIXES:
        if text.startswith(prefix):
            return text[len(prefix):].strip() or None
    return text


class SpdxParser(BaseParser):
    """Parser for SPDX 2.x JSON documents."""

    FORMAT = SbomFormat.SPDX

    def parse_raw(self, text: str, filename: Optional[str] = None) -> RawParseOutput:
        """
        Parse SPDX text into raw components.

        Raises:
            InvalidJsonError: If the text is not a JSON object
            MissingRequiredFieldError: If spdxVersion or dataLicense is missing
            UnsupportedFormatError: If spdxVersion does not start with "SPDX-"
            VersionUnsupportedError: If the SPDX version is outside 2.0 - 2.3
        """
        document = load_json_document(text, filename)
        version = self._check_header(document)

        output = RawParseOutput(
            metadata=ParseMetadata(
                format=self.FORMAT,
                format_version=version,
                data_license=text_or_none(document.get("dataLicense")),
                document_name=text_or_none(document.get("name")),
            )
        )

        self.checkpoint()
        for index, entry in enumerate(list_field(document, "packages", output)):
            draft = self._build_component(entry, f"packages[{index}]", output)
            if draft is not None:
                output.components.append(draft)

        self.checkpoint()
        self._apply_relationships(list_field(document, "relationships", output), output)

        logger.debug(f"Parsed SPDX {version} document {filename or '<input>'}: {len(output.components)} packages")
        return output

    @staticmethod
    def _check_header(document: Dict[str, Any]) -> str:
        spdx_version = text_or_none(document.get("spdxVersion"))
        if spdx_version is None:
            raise MissingRequiredFieldError("spdxVersion", "SPDX document is missing spdxVersion field")
        if not spdx_version.startswith(SPDX_VERSION_PREFIX):
            raise UnsupportedFormatError(
                f"Invalid spdxVersion '{spdx_version}': expected a value such as 'SPDX-2.3'",
                details={"spdxVersion": spdx_version},
            )
        version = spdx_version[len(SPDX_VERSION_PREFIX):]
        if version not in SUPPORTED_SPDX_VERSIONS:
            raise VersionUnsupportedError(
                f"Unsupported SPDX version {version}. Supported versions: {', '.join(SUPPORTED_SPDX_VERSIONS)}",
                details={"spdxVersion": spdx_version},
            )
        if text_or_none(document.get("dataLicense")) is None:
            raise MissingRequiredFieldError("dataLicense", "SPDX document is missing dataLicense field")
        return version

    def _build_component(self, entry: Any, location: str, output: RawParseOutput) -> Optional[ComponentDraft]:
        if not isinstance(entry, dict):
            output.warn(f"Skipping {location}: package entry is not an object")
            return None
        name = text_or_none(entry.get("name"))
        if name is None:
            output.warn(f"Skipping {location}: package has no name")
            return None

        version = text_or_none(entry.get("versionInfo"))
        spdx_id = text_or_none(entry.get("SPDXID"))
        native_key = spdx_id
        if native_key is None:
            native_key = f"{name}@{version}" if version else name
            output.warn(f"Package {location} ({name}) has no SPDXID; deriving its id from name and version")

        purl, cpe = self._external_identifiers(entry.get("externalRefs"))
        draft = ComponentDraft(
            id=component_id(self.FORMAT, native_key),
            name=name,
            version=version,
            type=self._component_type(entry.get("primaryPackagePurpose")),
            license_choices=license_choices_from_spdx(entry.get("licenseConcluded"), entry.get("licenseDeclared")),
            purl=purl,
            cpe=cpe,
            hashes=self._checksums(entry.get("checksums"), location, output),
            description=text_or_none(entry.get("description")),
            supplier=strip_supplier_prefix(entry.get("supplier")),
            download_location=self._download_location(entry.get("downloadLocation")),
            native_ref=native_key,
        )
        output.register_ref(spdx_id, draft.id)
        output.register_ref(purl, draft.id)
        output.register_ref(draft.id, draft.id)
        return draft

    @staticmethod
    def _component_type(purpose: Any) -> ComponentType:
        if not isinstance(purpose, str) or not purpose.strip():
            return ComponentType.LIBRARY
        return PURPOSE_TYPES.get(purpose.strip().upper(), ComponentType.OTHER)

    @staticmethod
    def _external_identifiers(refs: Any):
        """Return the first purl and the first CPE found in ``externalRefs``."""
        purl = cpe = None
        if not isinstance(refs, list):
            return purl, cpe
        for ref in refs:
            if not isinstance(ref, dict):
                continue
            ref_type = ref.get("referenceType")
            locator = text_or_none(ref.get("referenceLocator"))
            if locator is None:
                continue
            if ref_type == "purl" and purl is None:
                purl = locator
            elif ref_type in CPE_REFERENCE_TYPES and cpe is None:
                cpe = locator
        return purl, cpe

    @staticmethod
    def _checksums(entries: Any, location: str, output: RawParseOutput) -> List[Hash]:
        if entries is None:
            return []
        if not isinstance(entries, list):
            output.warn(f"Ignoring checksums of {location}: expected an array")
            return []
        hashes = []
        for item in entries:
            algorithm = text_or_none(item.get("algorithm")) if isinstance(item, dict) else None
            digest = text_or_none(item.get("checksumValue")) if isinstance(item, dict) else None
            if algorithm and digest:
                hashes.append(Hash(algorithm=algorithm, digest=digest))
            else:
                output.warn(f"Ignoring malformed checksum in {location}: {item!r}")
        return hashes

    @staticmethod
    def _download_location(value: Any) -> Optional[str]:
        text = text_or_none(value)
        if text is None or text.upper() in NON_LICENSE_VALUES:
            return None
        return text

    def _apply_relationships(self, relationships: List[Any], output: RawParseOutput) -> None:
        drafts_by_id: Dict[str, ComponentDraft] = {}
        for draft in output.components:
            drafts_by_id.setdefault(draft.id, draft)

        dropped: List[str] = []
        for index, rel in enumerate(relationships):
            if not isinstance(rel, dict):
                output.warn(f"Skipping relationships[{index}]: entry is not an object")
                continue
            rel_type = text_or_none(rel.get("relationshipType"))
            if rel_type not in EDGE_RELATIONSHIPS:
                continue

            element = text_or_none(rel.get("spdxElementId"))
            related = text_or_none(rel.get("relatedSpdxElement"))
            source, target = (element, related) if EDGE_RELATIONSHIPS[rel_type] else (related, element)
            source_id = output.id_map.get(source) if source else None
            target_id = output.id_map.get(target) if target else None
            if source_id not in drafts_by_id or target_id is None:
                dropped.append(f"{element} {rel_type} {related}")
                continue
            drafts_by_id[source_id].add_dependency(target_id)

        if dropped:
            # One warning for the whole batch of dropped edges.
            preview = "; ".join(dropped[:5])
            more = f" (and {len(dropped) - 5} more)" if len(dropped) > 5 else ""
            output.warn(f"Dropped {len(dropped)} relationship(s) that do not connect two packages: {preview}{more}")
