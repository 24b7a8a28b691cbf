# tests/unit/parsers/test_detector.py

import pytest

from sbom_ingest.models import SbomFormat
from sbom_ingest.parsers.detector import (
    FormatDetection,
    detect_format,
    get_cyclonedx_version,
    get_spdx_version,
    is_cyclonedx_file,
    is_spdx_file,
)


class TestDetectFormat:
    """Content-based classification."""

    def test_detects_cyclonedx_with_version(self, cyclonedx_doc, to_text):
        detection = detect_format(to_text(cyclonedx_doc), "bom.json")
        assert detection == FormatDetection(SbomFormat.CYCLONEDX, "1.5")
        assert detection.is_known

    def test_detects_spdx_without_prefix(self, spdx_doc, to_text):
        detection = detect_format(to_text(spdx_doc()))
        assert detection.format == SbomFormat.SPDX
        assert detection.version == "2.3"

    def test_bom_format_without_spec_version_is_unknown(self, to_text):
        detection = detect_format(to_text({"bomFormat": "CycloneDX"}))
        assert detection.format == SbomFormat.UNKNOWN
        assert detection.version is None

    def test_spdx_version_without_prefix_is_unknown(self, to_text):
        assert detect_format(to_text({"spdxVersion": "2.3"})).format == SbomFormat.UNKNOWN

    def test_accepts_bytes_and_bom(self, cyclonedx_doc, to_text):
        text = "\ufeff" + to_text(cyclonedx_doc)
        assert detect_format(text.encode("utf-8")).format == SbomFormat.CYCLONEDX

    @pytest.mark.parametrize("text", [
        "",
        "{ this is not valid json }",
        "[1, 2, 3]",
        "null",
        "42",
        "\"CycloneDX\"",
        "{\"bomFormat\": ",
        "[" * 100000,
        b"\xff\xfe\x00",
        None,
    ])
    def test_never_raises_on_arbitrary_input(self, text):
        detection = detect_format(text, "whatever.json")
        assert detection.format == SbomFormat.UNKNOWN
        assert detection.version is None


class TestVersionQueries:

    def test_cyclonedx_version(self, cyclonedx_doc, to_text):
        assert get_cyclonedx_version(to_text(cyclonedx_doc)) == "1.5"

    def test_cyclonedx_version_of_spdx_is_none(self, spdx_doc, to_text):
        assert get_cyclonedx_version(to_text(spdx_doc())) is None

    def test_spdx_version(self, spdx_doc, to_text):
        assert get_spdx_version(to_text(spdx_doc(spdxVersion="SPDX-2.2"))) == "2.2"

    def test_spdx_version_of_garbage_is_none(self):
        assert get_spdx_version("not json") is None


class TestFileTypeQueries:
    """Content decides; the filename suffix only breaks ties."""

    def test_is_spdx_by_content(self, spdx_doc, to_text):
        assert is_spdx_file(to_text(spdx_doc()), "document.json") is True

    def test_content_beats_misleading_suffix(self, cyclonedx_doc, to_text):
        assert is_spdx_file(to_text(cyclonedx_doc), "bom.spdx.json") is False
        assert is_cyclonedx_file(to_text(cyclonedx_doc), "bom.spdx.json") is True

    def test_suffix_breaks_tie_for_unknown_content(self):
        assert is_spdx_file("{}", "empty.spdx.json") is True
        assert is_spdx_file("{}", "empty.json") is False
        assert is_cyclonedx_file("{}", "app.cdx.json") is True

    def test_no_filename_and_unknown_content(self):
        assert is_spdx_file("{}") is False
        assert is_cyclonedx_file("{}") is False
