# sbom_ingest/parsers/identifiers.py
"""
Canonical identifier mapping.

component_id() is the single place where a document-native key (a
CycloneDX ``bom-ref``, a purl, or an SPDX ``SPDXID``) becomes a canonical
component id. The mapping is:

    "<prefix>-" + sha256("<format>:<native_key>" as UTF-8).hexdigest()[:16]

with prefix ``cdx`` for CycloneDX and ``spdx`` for SPDX. It depends only on
its inputs, so the same document always yields the same ids, across runs and
across processes.
"""

import hashlib
from typing import Optional

from packageurl import PackageURL

from ..models import SbomFormat

ID_PREFIXES = {
    SbomFormat.CYCLONEDX: "cdx",
    SbomFormat.SPDX: "spdx",
}

ID_DIGEST_LENGTH = 16


def component_id(sbom_format: SbomFormat, native_key: str) -> str:
    """
    Map a document-native key to its canonical component id.

    Args:
        sbom_format: Format the key comes from
        native_key: bom-ref, purl or SPDXID, used verbatim (no trimming)

    Returns:
        str: e.g. ``cdx-1f0c5e...`` (prefix + 16 hex chars)
    """
    sbom_format = SbomFormat(sbom_format)
    if sbom_format not in ID_PREFIXES:
        raise ValueError(f"No id prefix for format '{sbom_format.value}'")
    digest = hashlib.sha256(f"{sbom_format.value}:{native_key}".encode("utf-8")).hexdigest()
    return f"{ID_PREFIXES[sbom_format]}-{digest[:ID_DIGEST_LENGTH]}"


def normalize_purl(purl: str) -> Optional[str]:
    """
    Return the canonical string form of a package URL, or None if invalid.

    Used to match references that spell the same purl differently (for
    example qualifiers in another order).
    """
    if not isinstance(purl, str) or not purl.startswith("pkg:"):
        return None
    try:
        return PackageURL.from_string(purl).to_string()
    except ValueError:
        return None


def purl_problem(purl: str) -> Optional[str]:
    """Describe why a purl does not parse, or return None when it is valid."""
    try:
        PackageURL.from_string(purl)
    except ValueError as e:
        return str(e)
    return None
