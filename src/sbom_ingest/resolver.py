# sbom_ingest/resolver.py
"""
Reference resolver.

Links each vulnerability's raw ``affects`` refs to canonical component ids.
Linkage is best-effort and never lossy: a ref that cannot be resolved is kept
verbatim in ``affected_components`` and counted in
``metadata.unresolved_references``.
"""

import logging
from dataclasses import replace
from typing import Dict, List, Mapping, Optional

from .models import ParseResult
from .parsers.identifiers import normalize_purl

logger = logging.getLogger("sbom-ingest")

# CycloneDX BOM-Link: urn:cdx:<serial>/<version>#<bom-ref>
BOM_LINK_PREFIX = "urn:cdx:"


class ReferenceIndex:
    """Lookup table from any known spelling of a component reference to its canonical id."""

    def __init__(self, result: ParseResult, id_map: Optional[Mapping[str, str]] = None):
        component_ids = set(result.component_ids())
        self._ids: Dict[str, str] = {cid: cid for cid in component_ids}
        self._native: Dict[str, str] = {
            ref: cid for ref, cid in (id_map or {}).items() if cid in component_ids
        }
        self._purls: Dict[str, str] = {}
        for component in result.components:
            canonical_purl = normalize_purl(component.purl) if component.purl else None
            if canonical_purl:
                self._purls.setdefault(canonical_purl, component.id)

    def lookup(self, ref: str) -> Optional[str]:
        """Return the canonical id for ``ref``, or None when nothing matches."""
        if ref in self._native:
            return self._native[ref]
        if ref in self._ids:
            return ref
        canonical_purl = normalize_purl(ref)
        if canonical_purl and canonical_purl in self._purls:
            return self._purls[canonical_purl]
        if ref.startswith(BOM_LINK_PREFIX) and "#" in ref:
            fragment = ref.split("#", 1)[1]
            if fragment:
                return self.lookup(fragment)
        return None


def resolve_references(result: ParseResult, id_map: Optional[Mapping[str, str]] = None) -> ParseResult:
    """
    Translate vulnerability ``affects`` refs into canonical component ids.

    Args:
        result: Normalized ParseResult
        id_map: Native ref -> canonical id table built by the parser. Entries
            pointing at components that were dropped are ignored.

    Returns:
        ParseResult: A new result whose vulnerabilities reference canonical ids
            where possible, with metadata.unresolved_references set.
    """
    index = ReferenceIndex(result, id_map)
    warnings: List[str] = list(result.warnings)
    unresolved = 0

    vulnerabilities = []
    for vulnerability in result.vulnerabilities:
        affected: List[str] = []
        for ref in vulnerability.affected_components:
            resolved = index.lookup(ref)
            if resolved is None:
                unresolved += 1
                resolved = ref
                message = f"Vulnerability {vulnerability.id} references unknown component '{ref}'; keeping the raw reference"
                logger.warning(message)
                warnings.append(message)
            if resolved not in affected:
                affected.append(resolved)
        vulnerabilities.append(replace(vulnerability, affected_components=tuple(affected)))

    logger.debug(f"Resolved references for {len(vulnerabilities)} vulnerabilities ({unresolved} unresolved)")
    return replace(
        result,
        vulnerabilities=tuple(vulnerabilities),
        metadata=replace(result.metadata, unresolved_references=unresolved),
        warnings=tuple(warnings),
    )
