# sbom_ingest/normalizer.py
"""
Component normalizer.

Turns a parser's RawParseOutput into an immutable ParseResult:

- components are de-duplicated by id (first occurrence wins);
- license variants are flattened into alphabetically ordered tokens;
- dependency lists are de-duplicated; self-edges and edges to ids absent
  from the result are dropped with a warning;
- metadata.component_count is recomputed from the final component list.

normalize() also accepts a ParseResult, so running it twice is a no-op.
"""

import logging
from dataclasses import replace
from typing import List, Set, Union

from sortedcontainers import SortedSet

from .models import Component, ParseResult
from .parsers.base import ComponentDraft, RawParseOutput
from .parsers.licenses import NamedLicense, license_tokens

logger = logging.getLogger("sbom-ingest")


def _draft_from_component(component: Component) -> ComponentDraft:
    return ComponentDraft(
        id=component.id,
        name=component.name,
        type=component.type,
        version=component.version,
        license_choices=[NamedLicense(token) for token in component.licenses],
        purl=component.purl,
        cpe=component.cpe,
        hashes=list(component.hashes),
        dependencies=list(component.dependencies),
        description=component.description,
        supplier=component.supplier,
        download_location=component.download_location,
    )


def _as_raw(result: ParseResult) -> RawParseOutput:
    return RawParseOutput(
        metadata=result.metadata,
        components=[_draft_from_component(c) for c in result.components],
        vulnerabilities=list(result.vulnerabilities),
        warnings=list(result.warnings),
    )


def normalize(raw: Union[RawParseOutput, ParseResult]) -> ParseResult:
    """
    Build the canonical ParseResult from raw parser output.

    Args:
        raw: Output of a parser's parse_raw(), or an existing ParseResult

    Returns:
        ParseResult: De-duplicated, license-sorted, edge-checked result.
            Vulnerabilities pass through untouched; linking them to
            components is the reference resolver's job.
    """
    if isinstance(raw, ParseResult):
        raw = _as_raw(raw)
    warnings: List[str] = list(raw.warnings)

    def _warn(message: str) -> None:
        logger.warning(message)
        warnings.append(message)

    unique: List[ComponentDraft] = []
    seen: Set[str] = set()
    for draft in raw.components:
        if draft.id in seen:
            _warn(f"Dropping duplicate component '{draft.name}' with id {draft.id}; keeping the first occurrence")
            continue
        seen.add(draft.id)
        unique.append(draft)

    components = []
    for draft in unique:
        dependencies: List[str] = []
        for dependency in draft.dependencies:
            if dependency == draft.id:
                _warn(f"Dropping self-dependency of component {draft.id}")
            elif dependency not in seen:
                _warn(f"Dropping dependency {dependency} of component {draft.id}: not present in this document")
            elif dependency not in dependencies:
                dependencies.append(dependency)

        components.append(Component(
            id=draft.id,
            name=draft.name,
            type=draft.type,
            version=draft.version,
            licenses=tuple(SortedSet(license_tokens(draft.license_choices))),
            purl=draft.purl,
            cpe=draft.cpe,
            hashes=tuple(draft.hashes),
            dependencies=tuple(dependencies),
            description=draft.description,
            supplier=draft.supplier,
            download_location=draft.download_location,
        ))

    metadata = replace(
        raw.metadata,
        component_count=len(components),
        vulnerability_count=len(raw.vulnerabilities),
    )
    logger.debug(f"Normalized {len(raw.components)} raw components into {len(components)} components")
    return ParseResult(
        components=tuple(components),
        vulnerabilities=tuple(raw.vulnerabilities),
        metadata=metadata,
        warnings=tuple(warnings),
    )
