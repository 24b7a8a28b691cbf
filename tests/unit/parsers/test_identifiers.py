# tests/unit/parsers/test_identifiers.py

import hashlib
import re

import pytest

from sbom_ingest.models import SbomFormat
from sbom_ingest.parsers.identifiers import component_id, normalize_purl, purl_problem


class TestComponentId:

    def test_matches_documented_scheme(self):
        digest = hashlib.sha256(b"cyclonedx:pkg:npm/express@4.18.0").hexdigest()[:16]
        assert component_id(SbomFormat.CYCLONEDX, "pkg:npm/express@4.18.0") == f"cdx-{digest}"

    def test_spdx_prefix(self):
        assert re.fullmatch(r"spdx-[0-9a-f]{16}", component_id(SbomFormat.SPDX, "SPDXRef-Package-1"))

    def test_deterministic(self):
        assert component_id("spdx", "SPDXRef-A") == component_id(SbomFormat.SPDX, "SPDXRef-A")

    def test_format_is_part_of_the_key(self):
        cdx = component_id(SbomFormat.CYCLONEDX, "shared-ref")
        spdx = component_id(SbomFormat.SPDX, "shared-ref")
        assert cdx[4:] != spdx[5:]

    def test_key_is_not_trimmed(self):
        assert component_id(SbomFormat.SPDX, "a") != component_id(SbomFormat.SPDX, " a")

    def test_unknown_format_rejected(self):
        with pytest.raises(ValueError):
            component_id(SbomFormat.UNKNOWN, "x")


class TestPurlHelpers:

    def test_normalize_reorders_qualifiers(self):
        first = normalize_purl("pkg:maven/org.example/lib@1.0?type=jar&classifier=sources")
        second = normalize_purl("pkg:maven/org.example/lib@1.0?classifier=sources&type=jar")
        assert first is not None
        assert first == second

    @pytest.mark.parametrize("value", ["not-a-purl", "", None, 42, "pkg:"])
    def test_normalize_invalid(self, value):
        assert normalize_purl(value) is None

    def test_purl_problem(self):
        assert purl_problem("pkg:npm/express@4.18.0") is None
        assert purl_problem("express@4.18.0")
